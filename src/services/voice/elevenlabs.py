"""
ElevenLabs voice provider implementation.

Talks to the ElevenLabs-compatible HTTP API with ``httpx.AsyncClient``:

* ``GET  /v1/user``: remaining character quota
* ``POST /v1/text-to-speech/{voice_id}``: speech synthesis (MPEG audio)
* ``POST /v1/speech-to-text``: transcription (multipart upload)

Requests are made once; there is no retry.  Any transport error or non-2xx
response is surfaced as :class:`VoiceProviderError`.
"""

import logging

import httpx

from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError, VoiceProviderError
from src.services.voice.base import BaseSTT, BaseTTS

logger = logging.getLogger(__name__)


class ElevenLabsClient(BaseSTT, BaseTTS):
    """ElevenLabs STT + TTS over HTTP.

    Args:
        api_key: Provider key (falls back to settings if not provided).
        settings: Optional Settings instance (defaults to get_settings()).
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key if api_key is not None else self._settings.elevenlabs_api_key
        if not self._api_key:
            raise ConfigurationError("Voice provider API key is not configured")
        self._client = httpx.AsyncClient(
            base_url=self._settings.elevenlabs_base_url,
            headers={"xi-api-key": self._api_key},
            timeout=self._settings.elevenlabs_timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send one request and translate failures to ``VoiceProviderError``."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Voice provider request %s %s failed: %s", method, path, exc)
            raise VoiceProviderError(f"Voice provider unreachable: {exc}") from exc

        if response.is_error:
            logger.error(
                "Voice provider %s %s returned %d: %s",
                method,
                path,
                response.status_code,
                response.text[:200],
            )
            raise VoiceProviderError(
                f"Voice provider returned HTTP {response.status_code}"
            )
        return response

    async def get_remaining_characters(self) -> int:
        """Character limit minus characters used, from ``/v1/user``."""
        response = await self._request("GET", "/v1/user")
        try:
            data = response.json()
            usage = data.get("subscription") or data
            limit = int(usage.get("character_limit", 0))
            used = int(usage.get("character_count", 0))
        except (ValueError, TypeError, AttributeError) as exc:
            raise VoiceProviderError("Voice provider returned invalid quota data") from exc
        return max(limit - used, 0)

    async def synthesize(self, text: str, **kwargs) -> bytes:
        """Synthesize *text* with the configured voice and voice settings."""
        voice_id = kwargs.get("voice_id", self._settings.tts_voice_id)
        payload = {
            "text": text,
            "model_id": kwargs.get("model_id", self._settings.tts_model_id),
            "voice_settings": {
                "stability": self._settings.tts_stability,
                "similarity_boost": self._settings.tts_similarity_boost,
            },
        }
        response = await self._request("POST", f"/v1/text-to-speech/{voice_id}", json=payload)
        return response.content

    async def transcribe(self, audio: bytes, **kwargs) -> str:
        """Upload audio to ``/v1/speech-to-text`` and return the text."""
        filename = kwargs.get("filename", "rant.wav")
        content_type = kwargs.get("content_type", "audio/wav")
        response = await self._request(
            "POST",
            "/v1/speech-to-text",
            data={"model_id": self._settings.stt_model_id},
            files={"file": (filename, audio, content_type)},
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise VoiceProviderError("Voice provider returned invalid JSON") from exc
        return (data or {}).get("text") or ""

    async def aclose(self) -> None:
        await self._client.aclose()
