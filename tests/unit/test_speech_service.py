"""Tests for the speech round-trip service (transcribe + synthesize).

Providers are ``AsyncMock`` instances; storage is the in-memory repository
and a tmp_path blob store.
"""

from unittest.mock import AsyncMock, patch

import pytest

from src.core.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    QuotaExceededError,
    RantError,
    RantNotFoundError,
    TranscriptNotReadyError,
    VoiceProviderError,
)
from src.core.models import TranscriptStatus
from src.services import speech


@pytest.fixture
async def rant_with_audio(repository, blob_store, user, sample_wav_bytes):
    rant = await repository.create_rant(user.id, "Loud neighbours")
    key = blob_store.save(f"{rant.id}.wav", sample_wav_bytes)
    return await repository.update_audio_url(rant.id, key)


@pytest.fixture
async def transcribed_rant(repository, rant_with_audio):
    return await repository.update_transcript(rant_with_audio.id, "They never stop.")


# ---------------------------------------------------------------------------
# Speech-to-text
# ---------------------------------------------------------------------------


class TestTranscribeRant:
    async def test_missing_id(self, repository, blob_store, mock_stt):
        with pytest.raises(InvalidRequestError, match="Missing rant_id"):
            await speech.transcribe_rant(None, repository, blob_store, mock_stt)

    async def test_unknown_rant(self, repository, blob_store, mock_stt):
        with pytest.raises(RantNotFoundError):
            await speech.transcribe_rant("nope", repository, blob_store, mock_stt)

    async def test_rant_without_audio(self, repository, blob_store, user, mock_stt):
        rant = await repository.create_rant(user.id, "Text only")
        with pytest.raises(InvalidRequestError, match="No audio_url on rant"):
            await speech.transcribe_rant(rant.id, repository, blob_store, mock_stt)
        mock_stt.transcribe.assert_not_called()

    async def test_missing_blob(self, repository, blob_store, user, mock_stt):
        rant = await repository.create_rant(user.id, "Lost", audio_url="lost.wav")
        with pytest.raises(RantError) as exc_info:
            await speech.transcribe_rant(rant.id, repository, blob_store, mock_stt)
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to download audio"

    async def test_success(self, repository, blob_store, rant_with_audio, mock_stt, sample_wav_bytes):
        result = await speech.transcribe_rant(rant_with_audio.id, repository, blob_store, mock_stt)

        assert result.message == "Transcription complete"
        assert result.transcript == mock_stt.transcribe.return_value
        mock_stt.transcribe.assert_awaited_once()
        assert mock_stt.transcribe.call_args.args[0] == sample_wav_bytes

        rant = await repository.get_rant(rant_with_audio.id)
        assert rant.transcript_status == TranscriptStatus.complete
        assert rant.transcript == mock_stt.transcribe.return_value

    async def test_already_complete_is_noop(self, repository, blob_store, transcribed_rant, mock_stt):
        result = await speech.transcribe_rant(transcribed_rant.id, repository, blob_store, mock_stt)
        assert result.message == "Transcript already complete"
        mock_stt.transcribe.assert_not_called()

    async def test_provider_failure_marks_error(
        self, repository, blob_store, rant_with_audio, mock_stt
    ):
        mock_stt.transcribe.side_effect = VoiceProviderError("HTTP 500")
        result = await speech.transcribe_rant(rant_with_audio.id, repository, blob_store, mock_stt)

        assert result.transcript_status == TranscriptStatus.error
        assert result.message == "Transcription failed"
        rant = await repository.get_rant(rant_with_audio.id)
        assert rant.transcript_status == TranscriptStatus.error
        assert rant.transcript is None

    async def test_private_rant_hidden_from_other_users(
        self, repository, blob_store, user, other_user, mock_stt, sample_wav_bytes
    ):
        rant = await repository.create_rant(user.id, "Diary", is_private=True)
        key = blob_store.save(f"{rant.id}.wav", sample_wav_bytes)
        await repository.update_audio_url(rant.id, key)
        await repository.update_transcript(rant.id, "secret words")

        with pytest.raises(RantNotFoundError):
            await speech.transcribe_rant(
                rant.id, repository, blob_store, mock_stt, viewer_id=other_user.id
            )
        with pytest.raises(RantNotFoundError):
            await speech.transcribe_rant(rant.id, repository, blob_store, mock_stt)

        result = await speech.transcribe_rant(
            rant.id, repository, blob_store, mock_stt, viewer_id=user.id
        )
        assert result.transcript == "secret words"
        mock_stt.transcribe.assert_not_called()

    async def test_builds_provider_after_validation(self, repository, blob_store, rant_with_audio):
        stt = AsyncMock()
        stt.transcribe.return_value = "built"
        with patch.object(speech, "build_stt", return_value=stt) as build:
            result = await speech.transcribe_rant(rant_with_audio.id, repository, blob_store)
        build.assert_called_once()
        stt.aclose.assert_awaited_once()
        assert result.transcript == "built"


# ---------------------------------------------------------------------------
# Text-to-speech
# ---------------------------------------------------------------------------


class TestSynthesizeRant:
    async def test_missing_id(self, repository, mock_tts):
        with pytest.raises(InvalidRequestError, match="Rant ID is required"):
            await speech.synthesize_rant("", repository, mock_tts)

    async def test_nonexistent_rant_is_404(self, repository, mock_tts):
        with pytest.raises(RantNotFoundError) as exc_info:
            await speech.synthesize_rant("missing-id", repository, mock_tts)
        assert exc_info.value.status_code == 404
        mock_tts.synthesize.assert_not_called()

    async def test_private_rant_hidden_from_other_users(
        self, repository, user, other_user, mock_tts
    ):
        rant = await repository.create_rant(user.id, "Diary", is_private=True, audio_url="d.wav")
        await repository.update_transcript(rant.id, "secret words")

        with pytest.raises(RantNotFoundError):
            await speech.synthesize_rant(rant.id, repository, mock_tts, viewer_id=other_user.id)
        mock_tts.synthesize.assert_not_called()

        result = await speech.synthesize_rant(rant.id, repository, mock_tts, viewer_id=user.id)
        assert result.audio == b"ID3fake-mpeg-bytes"
        mock_tts.synthesize.assert_awaited_once_with("secret words")

    async def test_rant_without_audio_never_eligible(self, repository, user, mock_tts):
        rant = await repository.create_rant(user.id, "Silent")
        assert rant.transcript is None
        with pytest.raises(TranscriptNotReadyError):
            await speech.synthesize_rant(rant.id, repository, mock_tts)
        mock_tts.synthesize.assert_not_called()

    async def test_pending_transcript_not_eligible(self, repository, rant_with_audio, mock_tts):
        with pytest.raises(TranscriptNotReadyError):
            await speech.synthesize_rant(rant_with_audio.id, repository, mock_tts)

    async def test_missing_api_key(self, repository, transcribed_rant, isolated_settings):
        with pytest.raises(ConfigurationError, match="TTS service configuration error"):
            await speech.synthesize_rant(transcribed_rant.id, repository)

    async def test_quota_exhausted(self, repository, transcribed_rant, mock_tts):
        mock_tts.get_remaining_characters.return_value = 3
        with pytest.raises(QuotaExceededError) as exc_info:
            await speech.synthesize_rant(transcribed_rant.id, repository, mock_tts)
        assert exc_info.value.status_code == 503
        mock_tts.synthesize.assert_not_called()

    async def test_success(self, repository, transcribed_rant, mock_tts):
        result = await speech.synthesize_rant(transcribed_rant.id, repository, mock_tts)

        mock_tts.synthesize.assert_awaited_once_with("They never stop.")
        assert result.audio == b"ID3fake-mpeg-bytes"
        assert result.media_type == "audio/mpeg"
        assert result.cache_control == "public, max-age=3600"

    async def test_provider_failure(self, repository, transcribed_rant, mock_tts):
        mock_tts.synthesize.side_effect = VoiceProviderError("HTTP 500")
        with pytest.raises(VoiceProviderError, match="Failed to generate speech"):
            await speech.synthesize_rant(transcribed_rant.id, repository, mock_tts)


class TestBackgroundTranscription:
    async def test_failures_are_logged_not_raised(self, caplog):
        with patch.object(speech, "get_session", side_effect=RuntimeError("db down")):
            await speech.transcribe_in_background("r1", "u1")
        assert "Unexpected error transcribing rant r1" in caplog.text

    async def test_domain_errors_are_logged(self, caplog, db_engine):
        from src.services.storage import database

        database._engine = db_engine
        database._session_factory = None
        try:
            await speech.transcribe_in_background("missing", "u1")
        finally:
            database.reset_engine()
        assert "Background transcription of missing failed" in caplog.text
