"""
Rant card display components.
"""

import streamlit as st

from src.ui.utils import format_date, open_rant

_STATUS_LABELS = {
    "pending": "Transcribing...",
    "complete": "",
    "error": "Transcription failed",
}


def render_rant_card(rant: dict) -> None:
    """Render a single rant as a clickable card."""
    with st.container(border=True):
        col1, col2 = st.columns([5, 1])
        with col1:
            lock = "\U0001f512 " if rant.get("is_private") else ""
            st.markdown(f"**{lock}{rant['title']}**")
            st.caption(
                f"{rant['owner_name']} · {format_date(rant['created_at'])} · "
                f"{rant.get('views', 0)} views"
            )
        with col2:
            if st.button("Open", key=f"open_{rant['id']}", use_container_width=True):
                open_rant(rant["id"])

        transcript = rant.get("transcript")
        if rant.get("transcript_status") == "complete" and transcript:
            st.write(transcript[:200] + ("..." if len(transcript) > 200 else ""))
        elif label := _STATUS_LABELS.get(rant.get("transcript_status", "")):
            st.caption(label)


def render_rant_list(rants: list[dict], empty_message: str = "No rants yet.") -> None:
    if not rants:
        st.info(empty_message)
        return
    for rant in rants:
        render_rant_card(rant)
