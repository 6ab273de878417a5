"""Recording state machine with a hard maximum duration.

``VoiceRecorder`` accumulates PCM bytes between ``start()`` and one of
its exit paths (manual ``stop()``, countdown expiry, ``cancel()`` or
context-manager exit).  Whatever the exit path, the capture handle obtained
from the injected ``acquire`` callable is released exactly once.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from src.core.exceptions import RecorderStateError
from src.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)


class CaptureHandle(Protocol):
    """Anything that holds an input device and can give it back."""

    def release(self) -> None: ...


class _StreamCapture:
    """Handle for audio pushed by a remote client (nothing to free locally)."""

    def release(self) -> None:
        pass


class RecorderState(StrEnum):
    idle = "idle"
    recording = "recording"


class StopReason(StrEnum):
    manual = "manual"
    timeout = "timeout"


@dataclass
class RecordingResult:
    """Audio captured by one recording session."""

    pcm: bytes
    duration: float
    reason: StopReason


class VoiceRecorder:
    """Single-session recorder: ``idle -> recording -> idle``.

    Args:
        max_seconds: Countdown budget; recording auto-stops at zero.
        acquire: Returns a :class:`CaptureHandle` when recording starts.
        clock: Monotonic time source (seconds).
        processor: Used to compute durations of the captured PCM.
    """

    def __init__(
        self,
        max_seconds: int = 180,
        acquire: Callable[[], CaptureHandle] | None = None,
        clock: Callable[[], float] = time.monotonic,
        processor: AudioProcessor | None = None,
    ) -> None:
        self._max_seconds = max_seconds
        self._acquire = acquire or _StreamCapture
        self._clock = clock
        self._processor = processor or AudioProcessor()
        self._state = RecorderState.idle
        self._handle: CaptureHandle | None = None
        self._started_at = 0.0
        self._buffer = bytearray()

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecorderState.recording

    @property
    def max_seconds(self) -> int:
        return self._max_seconds

    def start(self) -> None:
        """Acquire the capture device and begin recording."""
        if self.is_recording:
            raise RecorderStateError()
        self._handle = self._acquire()
        self._buffer.clear()
        self._started_at = self._clock()
        self._state = RecorderState.recording
        logger.debug("Recording started (max %ds)", self._max_seconds)

    def elapsed_seconds(self) -> float:
        if not self.is_recording:
            return 0.0
        return self._clock() - self._started_at

    def remaining_seconds(self) -> int:
        """Whole seconds left on the countdown (rounded up), never below zero."""
        if not self.is_recording:
            return self._max_seconds
        return max(math.ceil(self._max_seconds - self.elapsed_seconds()), 0)

    @property
    def max_bytes(self) -> int:
        """PCM byte budget equivalent to ``max_seconds`` of audio."""
        return self._max_seconds * self._processor.bytes_per_second

    def feed(self, data: bytes) -> RecordingResult | None:
        """Append PCM bytes; returns the result once the time or byte budget is spent.

        Audio past ``max_bytes`` is dropped, so a recording never holds more
        than ``max_seconds`` of sound however fast the client sends it.
        """
        if not self.is_recording:
            raise RecorderStateError("Recorder is not recording")
        expired = self.poll()
        if expired is not None:
            return expired
        room = self.max_bytes - len(self._buffer)
        self._buffer.extend(data[:room])
        if len(data) >= room:
            logger.info("Recording reached %ds of audio, stopping", self._max_seconds)
            return self._finish(StopReason.timeout)
        return None

    def poll(self) -> RecordingResult | None:
        """Auto-stop when the countdown reaches zero."""
        if self.is_recording and self.elapsed_seconds() >= self._max_seconds:
            logger.info("Recording hit %ds limit, stopping", self._max_seconds)
            return self._finish(StopReason.timeout)
        return None

    def stop(self) -> RecordingResult | None:
        """Manual stop. Returns ``None`` when nothing is being recorded."""
        if not self.is_recording:
            return None
        return self._finish(StopReason.manual)

    def cancel(self) -> None:
        """Abandon the recording and discard any captured audio."""
        if self.is_recording:
            self._release()
            self._buffer.clear()
            self._state = RecorderState.idle
            logger.debug("Recording cancelled")

    def _finish(self, reason: StopReason) -> RecordingResult:
        self._release()
        pcm = bytes(self._buffer)
        self._buffer.clear()
        self._state = RecorderState.idle
        return RecordingResult(
            pcm=pcm,
            duration=self._processor.pcm_duration(pcm),
            reason=reason,
        )

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.release()

    def __enter__(self) -> "VoiceRecorder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()
