"""
Threaded comment display components.
"""

import streamlit as st

from src.ui.api_client import APIError
from src.ui.utils import client, format_date


def _render_comment(comment: dict, rant_id: str, user_id: str | None, is_reply: bool) -> None:
    with st.container(border=True):
        st.markdown(f"**{comment['author_name']}** · {format_date(comment['created_at'])}")
        st.write(comment["text"])

        cols = st.columns([1, 1, 1, 3])
        heart = "\u2764\ufe0f" if comment.get("liked_by_me") else "\U0001f90d"
        with cols[0]:
            if st.button(
                f"{heart} {comment['likes']}",
                key=f"like_{comment['id']}",
                disabled=not user_id,
            ):
                try:
                    client().toggle_like(comment["id"])
                except APIError as exc:
                    st.toast(exc.message)
                st.rerun()
        with cols[1]:
            if user_id and not is_reply and st.button("Reply", key=f"reply_{comment['id']}"):
                st.session_state.reply_to = comment["id"]
        with cols[2]:
            if user_id and comment.get("author_id") == user_id:
                if st.button("Delete", key=f"del_{comment['id']}"):
                    try:
                        client().delete_comment(comment["id"])
                    except APIError as exc:
                        st.toast(exc.message)
                    st.rerun()

        if st.session_state.get("reply_to") == comment["id"]:
            render_comment_form(rant_id, parent_id=comment["id"])

        for reply in comment.get("replies", []):
            _render_comment(reply, rant_id, user_id, is_reply=True)


def render_comment_form(rant_id: str, parent_id: str | None = None) -> None:
    """Form for a new comment, or a reply when *parent_id* is given."""
    with st.form(key=f"comment_form_{parent_id or rant_id}", clear_on_submit=True):
        text = st.text_area("Reply" if parent_id else "Add a comment", max_chars=2000)
        anonymous = st.checkbox("Comment anonymously")
        if st.form_submit_button("Post"):
            if not text.strip():
                st.warning("Comment cannot be empty.")
                return
            try:
                client().create_comment(rant_id, text, parent_id=parent_id, anonymous=anonymous)
            except APIError as exc:
                st.error(exc.message)
                return
            st.session_state.reply_to = None
            st.rerun()


def render_comment_thread(comments: list[dict], rant_id: str, user_id: str | None) -> None:
    """Render top-level comments with their replies."""
    st.subheader(f"Comments ({sum(1 + len(c.get('replies', [])) for c in comments)})")
    if user_id:
        render_comment_form(rant_id)
    else:
        st.caption("Log in to join the conversation.")
    if not comments:
        st.info("No comments yet.")
    for comment in comments:
        _render_comment(comment, rant_id, user_id, is_reply=False)
