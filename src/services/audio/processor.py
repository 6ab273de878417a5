"""Audio processing utilities for rant recordings.

Wraps recorded PCM as WAV and reduces decoded audio to an amplitude
envelope for waveform rendering.
"""

import io
import wave

import numpy as np
import soundfile as sf


class AudioProcessor:
    """Handles PCM audio data conversion and analysis.

    Writes WAV containers, decodes arbitrary audio files and computes
    normalized peak envelopes.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        """Initialize the audio processor.

        Args:
            sample_rate: Audio sample rate in Hz (default: 16 kHz).
            sample_width: Bytes per sample (2 = 16-bit signed PCM).
            channels: Number of audio channels (1 = mono).
        """
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.sample_width * self.channels

    def pcm_duration(self, pcm_data: bytes) -> float:
        """Duration in seconds of a raw PCM byte string."""
        return len(pcm_data) / self.bytes_per_second

    def to_wav_bytes(self, pcm_data: bytes) -> bytes:
        """Wrap raw PCM bytes in an in-memory WAV container.

        Raises:
            ValueError: If pcm_data is empty.
        """
        if not pcm_data:
            raise ValueError("Cannot encode empty PCM data to WAV")
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm_data)
        return buf.getvalue()

    def decode_audio(self, data: bytes) -> tuple[np.ndarray, int]:
        """Decode any soundfile-readable container to mono float32.

        Args:
            data: Encoded audio bytes (WAV, FLAC, OGG, ...).

        Returns:
            Tuple of (samples, sample_rate).

        Raises:
            ValueError: If the bytes cannot be decoded.
        """
        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, TypeError) as exc:
            raise ValueError(f"Unreadable audio: {exc}") from exc
        # Downmix to mono
        return samples.mean(axis=1), sample_rate

    @staticmethod
    def amplitude_envelope(samples: np.ndarray, bars: int = 60) -> list[float]:
        """Reduce audio to *bars* peak values normalized to [0, 1].

        Silence (or empty input) yields all zeros.
        """
        if bars <= 0:
            return []
        if len(samples) == 0:
            return [0.0] * bars
        peaks = np.array(
            [np.abs(chunk).max() if len(chunk) else 0.0 for chunk in np.array_split(samples, bars)],
            dtype=np.float32,
        )
        top = float(peaks.max())
        if top <= 0.0:
            return [0.0] * bars
        return [float(p) for p in peaks / top]
