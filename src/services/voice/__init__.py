"""
Voice module - Speech-to-text / text-to-speech abstraction layer.

Factory functions for creating provider instances based on configuration.
"""

from .base import BaseSTT, BaseTTS

__all__ = ["BaseSTT", "BaseTTS", "create_stt", "create_tts"]


def create_stt(provider: str, **kwargs) -> BaseSTT:
    """
    Factory function to create STT instance based on provider.

    Args:
        provider: STT provider name ("elevenlabs", "whisper" / "local")
        **kwargs: Provider-specific configuration

    Returns:
        BaseSTT implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "elevenlabs":
        from .elevenlabs import ElevenLabsClient

        return ElevenLabsClient(**kwargs)
    elif provider == "whisper" or provider == "local":
        from .whisper import WhisperSTT

        return WhisperSTT(**kwargs)
    else:
        raise ValueError(f"Unknown STT provider: {provider}")


def create_tts(provider: str = "elevenlabs", **kwargs) -> BaseTTS:
    """Factory function to create a TTS instance (only ElevenLabs today)."""
    if provider == "elevenlabs":
        from .elevenlabs import ElevenLabsClient

        return ElevenLabsClient(**kwargs)
    raise ValueError(f"Unknown TTS provider: {provider}")
