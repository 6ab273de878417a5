"""
Rant to Reflection Streamlit UI: main entry point.

Run with: ``streamlit run src/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/),
# which removes the project root needed for absolute ``src.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError  # noqa: E402
from src.ui.guard import resolve_redirect  # noqa: E402
from src.ui.utils import DEFAULT_API_URL, client, is_authenticated, sign_out  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Rant to Reflection",
    page_icon="\U0001f5e3\ufe0f",
    layout="centered",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": DEFAULT_API_URL,
    "auth_token": None,
    "user": None,
    "selected_rant_id": None,
    "reply_to": None,
    "recorder_nonce": 0,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Navigation (multipage)
# ---------------------------------------------------------------------------
pages = {
    "landing": st.Page("pages/00_landing.py", title="Welcome", icon="\U0001f44b", default=True),
    "login": st.Page("pages/01_login.py", title="Log in", icon="\U0001f511", url_path="login"),
    "signup": st.Page("pages/02_signup.py", title="Sign up", icon="\u270d\ufe0f", url_path="signup"),
    "home": st.Page("pages/03_home.py", title="Home", icon="\U0001f3e0", url_path="home"),
    "rants": st.Page("pages/04_rants.py", title="Rants", icon="\U0001f4e2", url_path="rants"),
    "rant": st.Page("pages/05_rant.py", title="Rant", icon="\U0001f4dd", url_path="rant"),
}
st.session_state.pages = pages

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f5e3\ufe0f Rant to Reflection")
    if is_authenticated():
        st.caption(f"Signed in as **{st.session_state.user['username']}**")
        if st.button("Log out", use_container_width=True):
            try:
                client().logout()
            except APIError as exc:
                st.toast(exc.message)
            sign_out()
            st.switch_page(pages["landing"])
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help="URL of the FastAPI backend server (default: http://localhost:8000)",
    )
    _conn_ok, _conn_msg = client().check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")

nav = st.navigation(list(pages.values()))

# ---------------------------------------------------------------------------
# Route protection
# ---------------------------------------------------------------------------
current = next((name for name, page in pages.items() if page == nav), "landing")
target = resolve_redirect(current, is_authenticated())
if target is not None:
    st.switch_page(pages[target])

nav.run()
