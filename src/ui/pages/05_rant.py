"""
Rant detail: audio, transcript, read-aloud, and threaded comments.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.audio_player import render_audio_player  # noqa: E402
from src.ui.components.comment_thread import render_comment_thread  # noqa: E402
from src.ui.utils import client, format_date  # noqa: E402

rant_id = st.query_params.get("id") or st.session_state.get("selected_rant_id")
if not rant_id:
    st.info("Pick a rant from the listing first.")
    st.stop()

api = client()
user_id = (st.session_state.user or {}).get("id")

# Count the view once per visit, not on every rerun
if st.session_state.get("_viewed_rant") != rant_id:
    try:
        st.session_state._rant = api.get_rant(rant_id)
    except APIError as exc:
        st.error(exc.message)
        st.stop()
    st.session_state._viewed_rant = rant_id
rant = st.session_state._rant

lock = "\U0001f512 " if rant["is_private"] else ""
st.header(f"{lock}{rant['title']}")
st.caption(f"{rant['owner_name']} · {format_date(rant['created_at'])} · {rant['views']} views")

if rant.get("audio_url"):
    audio = api.download_audio(rant_id)
    if audio:
        render_audio_player(audio)

st.subheader("Transcript")
status = rant["transcript_status"]
if status == "complete" and rant.get("transcript"):
    st.write(rant["transcript"])
    if st.button("\U0001f50a Listen"):
        with st.spinner("Generating speech..."):
            try:
                st.audio(api.text_to_speech(rant_id), format="audio/mpeg", autoplay=True)
            except APIError as exc:
                st.error(exc.message)
elif status == "error":
    st.warning("Transcription failed.")
    if user_id and rant.get("owner_id") == user_id and rant.get("audio_url"):
        if st.button("Retry transcription"):
            try:
                api.transcribe(rant_id)
                st.session_state._viewed_rant = None
            except APIError as exc:
                st.error(exc.message)
            st.rerun()
elif rant.get("audio_url"):
    st.caption("Transcribing...")
    if st.button("Refresh"):
        st.session_state._viewed_rant = None
        st.rerun()
else:
    st.caption("No audio, so no transcript.")

if user_id and rant.get("owner_id") == user_id:
    if st.button("Delete rant", type="secondary"):
        try:
            api.delete_rant(rant_id)
        except APIError as exc:
            st.error(exc.message)
        else:
            st.session_state._viewed_rant = None
            st.switch_page(st.session_state.pages["home"])

st.divider()
try:
    comments = api.list_comments(rant_id)
except APIError as exc:
    st.error(exc.message)
    comments = []
render_comment_thread(comments, rant_id, user_id)
