"""
Abstract base classes for speech providers.

Every speech-to-text and text-to-speech implementation (ElevenLabs HTTP
API, local faster-whisper, ...) implements one of these interfaces so the
speech service stays provider-agnostic.
"""

from abc import ABC, abstractmethod


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(self, audio: bytes, **kwargs) -> str:
        """Transcribe encoded audio to text.

        Args:
            audio: Encoded audio bytes (WAV for recorded rants).
            **kwargs: Provider-specific options (filename, language, ...).

        Returns:
            The transcript text.

        Raises:
            VoiceProviderError: If the provider fails.
        """

    async def aclose(self) -> None:
        """Release provider resources (HTTP connections, models)."""


class BaseTTS(ABC):
    """Interface that every TTS provider must implement."""

    @abstractmethod
    async def get_remaining_characters(self) -> int:
        """Return how many characters the account may still synthesize."""

    @abstractmethod
    async def synthesize(self, text: str, **kwargs) -> bytes:
        """Synthesize *text* and return encoded audio (MPEG).

        Raises:
            VoiceProviderError: If the provider fails.
        """

    async def aclose(self) -> None:
        """Release provider resources."""
