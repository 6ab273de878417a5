"""
Landing page: what Rant to Reflection is, and where to go next.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.utils import is_authenticated  # noqa: E402

st.title("Rant to Reflection")
st.subheader("Say it out loud. Read it back. Let others weigh in.")
st.write(
    "Record a short voice rant, get an automatic transcript, listen to it "
    "read back, and share it publicly, privately, or anonymously."
)

pages = st.session_state.pages
col1, col2, col3 = st.columns(3)
with col1:
    if is_authenticated():
        if st.button("Go to dashboard", type="primary", use_container_width=True):
            st.switch_page(pages["home"])
    elif st.button("Sign up", type="primary", use_container_width=True):
        st.switch_page(pages["signup"])
with col2:
    if not is_authenticated() and st.button("Log in", use_container_width=True):
        st.switch_page(pages["login"])
with col3:
    if st.button("Browse rants", use_container_width=True):
        st.switch_page(pages["rants"])
