"""Local Whisper STT implementation using faster-whisper.

Alternative to the hosted provider when ``stt_provider="local"``.  The
WhisperModel is loaded lazily and cached at module level to avoid repeated
initialization overhead.
"""

import asyncio
import logging

import numpy as np
from faster_whisper import WhisperModel

from src.core.config import get_settings
from src.core.exceptions import VoiceProviderError
from src.services.audio.processor import AudioProcessor
from src.services.voice.base import BaseSTT

logger = logging.getLogger(__name__)

_model_cache: WhisperModel | None = None
_TARGET_RATE = 16000


class WhisperSTT(BaseSTT):
    """Speech-to-text provider using faster-whisper (CTranslate2).

    Args:
        model_size: Whisper model size (tiny, base, small, medium, large-v3).
        device: Computation device ("cpu" or "cuda").
        compute_type: CTranslate2 compute type ("int8", "float16", etc.).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        model_size: str | None = None,
        device: str = "cpu",
        compute_type: str = "int8",
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model_size = model_size or self._settings.whisper_model
        self._device = device
        self._compute_type = compute_type
        self._processor = AudioProcessor()

    def _get_model(self) -> WhisperModel:
        """Return the cached WhisperModel, loading it on first use."""
        global _model_cache  # noqa: PLW0603
        if _model_cache is None:
            logger.info(
                "Loading Whisper model: %s (device=%s, compute=%s)",
                self._model_size,
                self._device,
                self._compute_type,
            )
            _model_cache = WhisperModel(
                self._model_size,
                device=self._device,
                compute_type=self._compute_type,
            )
        return _model_cache

    @staticmethod
    def _resample(samples: np.ndarray, rate: int) -> np.ndarray:
        # Whisper expects 16 kHz; linear interpolation is enough for speech
        if rate == _TARGET_RATE or len(samples) == 0:
            return samples
        target_len = int(len(samples) * _TARGET_RATE / rate)
        positions = np.linspace(0, len(samples) - 1, target_len)
        return np.interp(positions, np.arange(len(samples)), samples).astype(np.float32)

    def _run_transcription(self, audio: np.ndarray, language: str | None = None) -> str:
        """Run synchronous transcription (CPU-bound).

        Must be called via asyncio.to_thread(). The segment iterator is
        materialized inside this function to avoid CTranslate2 thread-safety
        issues.
        """
        model = self._get_model()
        segments, _info = model.transcribe(audio, language=language, vad_filter=True)
        return " ".join(seg.text.strip() for seg in segments if seg.text.strip())

    async def transcribe(self, audio: bytes, **kwargs) -> str:
        """Decode *audio* and transcribe it locally."""
        try:
            samples, rate = self._processor.decode_audio(audio)
        except ValueError as exc:
            raise VoiceProviderError(f"Whisper could not decode audio: {exc}") from exc

        try:
            return await asyncio.to_thread(
                self._run_transcription,
                self._resample(samples, rate),
                kwargs.get("language"),
            )
        except Exception as exc:
            raise VoiceProviderError(f"Whisper transcription failed: {exc}") from exc
