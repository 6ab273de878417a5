"""Tests for the local WhisperSTT provider (mocked WhisperModel, no GPU needed).

Validates decoding of stored rant audio, resampling to 16 kHz, segment
joining, error mapping and lazy model loading with caching.
"""

import io
import wave
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

import src.services.voice.whisper as whisper_module
from src.core.exceptions import VoiceProviderError
from src.services.voice.whisper import WhisperSTT


def _make_segment(text="Hello world"):
    """Create a mock faster-whisper segment object."""
    return SimpleNamespace(text=text, start=0.0, end=1.0)


@pytest.fixture(autouse=True)
def _clear_model_cache():
    """Ensure module-level model cache is cleared before each test."""
    original = whisper_module._model_cache
    whisper_module._model_cache = None
    yield
    whisper_module._model_cache = original


@pytest.fixture
def mock_whisper_model():
    """Create a mock WhisperModel returning two segments."""
    model = MagicMock()
    segments = [_make_segment(" Hello world "), _make_segment(" "), _make_segment("again")]
    model.transcribe.return_value = (iter(segments), SimpleNamespace(language="en"))
    return model


@pytest.fixture
def stt(mock_whisper_model):
    """Create a WhisperSTT instance with a mocked model (no real loading)."""
    instance = WhisperSTT(model_size="base", device="cpu")
    instance._get_model = MagicMock(return_value=mock_whisper_model)
    return instance


def _wav(rate: int, seconds: float = 0.5) -> bytes:
    frames = np.zeros(int(rate * seconds), dtype=np.int16).tobytes()
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(rate)
        wf.writeframes(frames)
    return buf.getvalue()


class TestTranscribe:
    async def test_joins_non_empty_segments(self, stt, sample_wav_bytes):
        assert await stt.transcribe(sample_wav_bytes) == "Hello world again"

    async def test_passes_16k_mono_audio(self, stt, mock_whisper_model):
        await stt.transcribe(_wav(8000, seconds=1.0))
        audio = mock_whisper_model.transcribe.call_args.args[0]
        assert audio.dtype == np.float32
        assert len(audio) == 16000

    async def test_language_forwarded(self, stt, mock_whisper_model, sample_wav_bytes):
        await stt.transcribe(sample_wav_bytes, language="de")
        assert mock_whisper_model.transcribe.call_args.kwargs["language"] == "de"

    async def test_undecodable_audio(self, stt):
        with pytest.raises(VoiceProviderError, match="could not decode"):
            await stt.transcribe(b"garbage")

    async def test_model_failure(self, stt, mock_whisper_model, sample_wav_bytes):
        mock_whisper_model.transcribe.side_effect = RuntimeError("CUDA exploded")
        with pytest.raises(VoiceProviderError, match="CUDA exploded"):
            await stt.transcribe(sample_wav_bytes)


class TestGetModel:
    """Verify lazy model loading and module-level caching."""

    def test_lazy_loading(self):
        with patch("src.services.voice.whisper.WhisperModel") as MockModel:
            mock_instance = MagicMock()
            MockModel.return_value = mock_instance

            stt = WhisperSTT(model_size="tiny", device="cpu")
            MockModel.assert_not_called()
            assert stt._get_model() is mock_instance
            assert stt._get_model() is mock_instance
            MockModel.assert_called_once()
