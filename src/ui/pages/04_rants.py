"""
Public rants listing with latest / top sorting.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.rant_card import render_rant_list  # noqa: E402
from src.ui.utils import client  # noqa: E402

_TIME_RANGES = {
    "Today": "day",
    "This week": "week",
    "This month": "month",
    "This year": "year",
    "All time": "all",
}

st.header("Rants")

col1, col2 = st.columns(2)
with col1:
    sort = st.segmented_control("Sort", ["latest", "top"], default="latest") or "latest"
with col2:
    label = st.selectbox("Time range", list(_TIME_RANGES), index=4, disabled=sort != "top")

try:
    rants = client().list_rants(sort=sort, time_range=_TIME_RANGES[label])
except APIError as exc:
    st.error(exc.message)
    rants = []

render_rant_list(rants, empty_message="Nobody has ranted publicly yet.")
