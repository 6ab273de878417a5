"""
Login page: exchange email + password for a session.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError  # noqa: E402
from src.ui.utils import client, sign_in  # noqa: E402

st.header("Log in")

with st.form("login_form"):
    email = st.text_input("Email")
    password = st.text_input("Password", type="password")
    submitted = st.form_submit_button("Log in", type="primary")

if submitted:
    try:
        sign_in(client().login(email, password))
    except APIError as exc:
        st.error(exc.message)
    else:
        st.switch_page(st.session_state.pages["home"])

if st.button("No account yet? Sign up"):
    st.switch_page(st.session_state.pages["signup"])
