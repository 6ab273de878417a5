"""
Dashboard: greeting, recorder, and the user's own rants.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

from datetime import datetime  # noqa: E402

import streamlit as st  # noqa: E402

from src.core.utils import greeting_for  # noqa: E402
from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.rant_card import render_rant_list  # noqa: E402
from src.ui.components.recorder import render_recorder  # noqa: E402
from src.ui.utils import client  # noqa: E402

user = st.session_state.user or {}
st.header(f"{greeting_for(datetime.now())}, {user.get('username', 'friend')}")

render_recorder()

st.subheader("Your rants")
try:
    rants = client().list_my_rants()
except APIError as exc:
    st.error(exc.message)
    rants = []

if any(r["transcript_status"] == "pending" and r.get("audio_url") for r in rants):
    if st.button("Refresh"):
        st.rerun()

render_rant_list(rants, empty_message="You haven't ranted yet. Hit record above.")
