"""
Speech round-trip: rant audio -> transcript, transcript -> synthesized audio.

Both operations are stateless per invocation and call the voice provider
exactly once; there is no retry.  They work on a caller-owned
:class:`RantRepository`, so the caller decides when the session commits.
"""

import logging
from dataclasses import dataclass

from src.core.config import get_settings
from src.core.exceptions import (
    AudioNotFoundError,
    ConfigurationError,
    InvalidRequestError,
    QuotaExceededError,
    RantError,
    TranscriptNotReadyError,
    VoiceProviderError,
)
from src.core.models import TranscribeResponse, TranscriptStatus
from src.services.storage.blob import BlobStore
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository
from src.services.voice import BaseSTT, BaseTTS, create_stt, create_tts

logger = logging.getLogger(__name__)


@dataclass
class SynthesizedSpeech:
    """Audio returned by the TTS proxy plus its HTTP caching hints."""

    audio: bytes
    media_type: str = "audio/mpeg"
    max_age: int = 3600

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.max_age}"


async def transcribe_rant(
    rant_id: str | None,
    repository: RantRepository,
    blob_store: BlobStore,
    stt: BaseSTT | None = None,
    viewer_id: str | None = None,
) -> TranscribeResponse:
    """Transcribe a rant's stored audio and persist the result.

    The provider is built from settings when *stt* is omitted, after the
    request has been validated.
    Private rants are only visible to their owner (*viewer_id*).

    A provider failure does not raise: the rant is marked ``error`` and the
    returned response carries ``transcript_status=error`` so the caller can
    commit that state before reporting the failure.

    Raises:
        InvalidRequestError: ``rant_id`` missing, or the rant has no audio.
        RantNotFoundError: No rant with that ID visible to *viewer_id*.
        RantError: Stored audio could not be read (500).
    """
    if not rant_id:
        raise InvalidRequestError("Missing rant_id")

    rant = await repository.get_visible_rant(rant_id, viewer_id)

    if rant.transcript_status == TranscriptStatus.complete:
        return TranscribeResponse(
            message="Transcript already complete",
            transcript=rant.transcript,
            transcript_status=TranscriptStatus.complete,
        )

    if not rant.audio_url:
        raise InvalidRequestError("No audio_url on rant")

    try:
        audio = blob_store.read(rant.audio_url)
    except AudioNotFoundError as exc:
        logger.error("Audio for rant %s unreadable: %s", rant_id, exc.detail)
        raise RantError(
            detail="Failed to download audio", code="AUDIO_DOWNLOAD_FAILED", status_code=500
        ) from exc

    owns_client = stt is None
    if owns_client:
        stt = build_stt()
    try:
        transcript = await stt.transcribe(audio, filename="rant.wav", content_type="audio/wav")
    except VoiceProviderError as exc:
        logger.error("Transcription of rant %s failed: %s", rant_id, exc.detail)
        await repository.set_transcript_status(rant_id, TranscriptStatus.error)
        return TranscribeResponse(
            message="Transcription failed",
            transcript=None,
            transcript_status=TranscriptStatus.error,
        )
    finally:
        if owns_client:
            await stt.aclose()

    await repository.update_transcript(rant_id, transcript, TranscriptStatus.complete)
    logger.info("Rant %s transcribed (%d chars)", rant_id, len(transcript))
    return TranscribeResponse(
        message="Transcription complete",
        transcript=transcript,
        transcript_status=TranscriptStatus.complete,
    )


async def synthesize_rant(
    rant_id: str | None,
    repository: RantRepository,
    tts: BaseTTS | None = None,
    settings=None,
    viewer_id: str | None = None,
) -> SynthesizedSpeech:
    """Synthesize speech for a rant's completed transcript.

    Args:
        rant_id: Target rant.
        repository: Data access for the current session.
        tts: Provider override; built from settings when omitted.
        settings: Optional Settings instance (defaults to get_settings()).
        viewer_id: Requesting user; private rants are owner-only.

    Raises:
        InvalidRequestError: ``rant_id`` missing.
        RantNotFoundError: No rant with that ID visible to *viewer_id*.
        TranscriptNotReadyError: Transcript is not ``complete`` or is empty.
        ConfigurationError: No provider API key configured.
        QuotaExceededError: Remaining provider characters < transcript length.
        VoiceProviderError: Provider call failed.
    """
    settings = settings or get_settings()
    if not rant_id:
        raise InvalidRequestError("Rant ID is required")

    rant = await repository.get_visible_rant(rant_id, viewer_id)

    transcript = rant.transcript or ""
    if rant.transcript_status != TranscriptStatus.complete or not transcript.strip():
        raise TranscriptNotReadyError(rant_id)

    owns_client = tts is None
    if owns_client:
        if not settings.elevenlabs_api_key:
            raise ConfigurationError("TTS service configuration error")
        tts = create_tts(settings=settings)

    try:
        remaining = await tts.get_remaining_characters()
        if remaining < len(transcript):
            logger.warning(
                "TTS quota too low for rant %s (%d < %d)", rant_id, remaining, len(transcript)
            )
            raise QuotaExceededError()
        try:
            audio = await tts.synthesize(transcript)
        except VoiceProviderError as exc:
            raise VoiceProviderError("Failed to generate speech") from exc
    finally:
        if owns_client:
            await tts.aclose()

    return SynthesizedSpeech(audio=audio, max_age=settings.tts_cache_max_age)


def build_stt(settings=None) -> BaseSTT:
    """Create the configured STT provider."""
    settings = settings or get_settings()
    if settings.stt_provider == "elevenlabs":
        if not settings.elevenlabs_api_key:
            raise ConfigurationError("Transcription service configuration error")
        return create_stt("elevenlabs", settings=settings)
    return create_stt(settings.stt_provider, settings=settings)


async def transcribe_in_background(rant_id: str, owner_id: str) -> None:
    """Fire-and-forget transcription run after the creating request returns.

    Uses its own DB session; every failure is logged and swallowed so the
    originating request is never affected.
    """
    try:
        async with get_session() as session:
            result = await transcribe_rant(
                rant_id, RantRepository(session), BlobStore(), viewer_id=owner_id
            )
        logger.info("Background transcription of %s: %s", rant_id, result.message)
    except RantError as exc:
        logger.error("Background transcription of %s failed: %s", rant_id, exc.detail)
    except Exception:
        logger.exception("Unexpected error transcribing rant %s", rant_id)
