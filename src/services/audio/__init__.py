"""
Audio module - Audio processing and recording utilities.
"""

from .processor import AudioProcessor
from .recorder import RecordingResult, StopReason, VoiceRecorder

__all__ = ["AudioProcessor", "RecordingResult", "StopReason", "VoiceRecorder"]
