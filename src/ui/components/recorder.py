"""
Recorder component: capture a rant in the browser and upload it.

States: idle -> processing -> idle
Audio from ``st.audio_input()`` is converted to 16 kHz mono PCM and streamed
to the backend's ``/ws/record`` endpoint, which enforces the countdown and
creates the rant.
"""

import asyncio
import io
import json
import logging

import numpy as np
import soundfile as sf
import streamlit as st

from src.core.config import get_settings
from src.core.utils import format_countdown
from src.ui.utils import client

logger = logging.getLogger(__name__)


def _convert_to_pcm_16k_mono(audio_bytes: bytes) -> bytes:
    """Read uploaded WAV/audio bytes, resample to 16 kHz mono PCM int16."""
    data, sample_rate = sf.read(io.BytesIO(audio_bytes), dtype="float32")

    # Convert to mono if stereo
    if data.ndim > 1:
        data = data.mean(axis=1)

    # Resample to 16 kHz if needed
    if sample_rate != 16000:
        duration = len(data) / sample_rate
        num_samples = int(duration * 16000)
        indices = np.linspace(0, len(data) - 1, num_samples)
        data = np.interp(indices, np.arange(len(data)), data)

    pcm = (data * 32767).clip(-32768, 32767).astype(np.int16)
    return pcm.tobytes()


def pcm_seconds(pcm: bytes) -> float:
    # 16-bit mono at 16 kHz
    return len(pcm) / 32000


async def _stream_recording(
    ws_url: str,
    pcm_bytes: bytes,
    chunk_size: int = 32000,  # 1 second of 16kHz 16-bit mono
) -> dict:
    """Send PCM over the recording WebSocket and return the final message."""
    import websockets

    async with websockets.connect(ws_url) as ws:
        first = json.loads(await ws.recv())
        if first.get("type") == "error":
            return first

        for offset in range(0, len(pcm_bytes), chunk_size):
            await ws.send(pcm_bytes[offset : offset + chunk_size])
        await ws.send("stop")

        # Skip countdown ticks until the rant is saved (or rejected)
        async for raw in ws:
            msg = json.loads(raw)
            if msg.get("type") in ("saved", "error"):
                return msg
    return {"type": "error", "data": {"detail": "Connection closed before the rant was saved"}}


def _process_audio(audio_bytes: bytes, title: str, is_private: bool, anonymous: bool) -> None:
    """Convert captured audio and upload it as a new rant."""
    max_seconds = get_settings().max_recording_seconds
    try:
        pcm = _convert_to_pcm_16k_mono(audio_bytes)
    except (sf.LibsndfileError, RuntimeError) as exc:
        st.error(f"Could not read the recording: {exc}")
        return

    if pcm_seconds(pcm) > max_seconds:
        st.error(f"Rants are limited to {format_countdown(max_seconds)}. Please record a shorter one.")
        return

    ws_url = client().record_ws_url(title or "Untitled rant", is_private, anonymous)
    try:
        msg = asyncio.run(_stream_recording(ws_url, pcm))
    except OSError as exc:
        logger.warning("Recording upload failed: %s", exc)
        st.error(f"Upload failed: {exc}")
        return

    if msg.get("type") == "saved":
        st.toast("Rant saved! Transcription is on its way.")
        st.session_state.recorder_nonce = st.session_state.get("recorder_nonce", 0) + 1
    else:
        st.error(msg.get("data", {}).get("detail", "Recording failed"))


def render_recorder() -> None:
    """Render the recording widget with its countdown budget."""
    max_seconds = get_settings().max_recording_seconds
    nonce = st.session_state.get("recorder_nonce", 0)

    with st.container(border=True):
        st.subheader("New rant")
        title = st.text_input("Title", placeholder="What's on your mind?", key=f"title_{nonce}")
        col1, col2 = st.columns(2)
        with col1:
            is_private = st.toggle("Private", key=f"private_{nonce}")
        with col2:
            anonymous = st.toggle("Post anonymously", key=f"anon_{nonce}")
        st.caption(f"You have {format_countdown(max_seconds)} to get it off your chest.")

        audio = st.audio_input("Record", key=f"audio_{nonce}")
        if audio is not None and st.button("Save rant", type="primary"):
            with st.spinner("Uploading..."):
                _process_audio(audio.getvalue(), title, is_private, anonymous)
            st.rerun()
