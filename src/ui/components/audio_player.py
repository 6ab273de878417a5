"""
Audio player component: waveform bars above a native player.
"""

import streamlit as st

from src.core.utils import format_duration
from src.services.audio.processor import AudioProcessor


def render_audio_player(audio_bytes: bytes, bars: int = 60) -> None:
    """Render the normalized waveform, duration label and ``st.audio``."""
    processor = AudioProcessor()
    try:
        samples, sample_rate = processor.decode_audio(audio_bytes)
    except ValueError:
        st.audio(audio_bytes)
        return

    envelope = processor.amplitude_envelope(samples, bars)
    duration = len(samples) / sample_rate if sample_rate else 0.0

    st.bar_chart({"amplitude": envelope}, height=80)
    st.caption(f"{format_duration(0)} / {format_duration(duration)}")
    st.audio(audio_bytes, format="audio/wav")
