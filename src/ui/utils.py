"""UI utility functions: session handling and display helpers."""

from datetime import datetime

import streamlit as st

from src.ui.api_client import APIClient, get_api_client

DEFAULT_API_URL = "http://localhost:8000"


def client() -> APIClient:
    """API client for the current browser session (authenticated if signed in)."""
    return get_api_client(
        st.session_state.get("api_base_url", DEFAULT_API_URL),
        st.session_state.get("auth_token"),
    )


def is_authenticated() -> bool:
    return bool(st.session_state.get("auth_token"))


def sign_in(session: dict) -> None:
    """Store a ``SessionResponse`` from the backend in session state."""
    st.session_state.auth_token = session["token"]
    st.session_state.user = session["user"]


def sign_out() -> None:
    st.session_state.auth_token = None
    st.session_state.user = None


def open_rant(rant_id: str) -> None:
    """Navigate to the detail page of *rant_id*."""
    st.session_state.selected_rant_id = rant_id
    st.switch_page(st.session_state.pages["rant"])


def format_date(value: str) -> str:
    """Render an ISO timestamp from the API as ``Mar 5, 2025``."""
    try:
        dt = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{dt:%b} {dt.day}, {dt.year}"
