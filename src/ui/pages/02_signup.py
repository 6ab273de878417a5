"""
Signup page: create an account; a random username is assigned.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.ui.api_client import APIError  # noqa: E402
from src.ui.utils import client, sign_in  # noqa: E402

st.header("Sign up")
st.caption("You'll get a random display name, so nobody needs to know it's you.")

with st.form("signup_form"):
    email = st.text_input("Email")
    password = st.text_input("Password", type="password", help="At least 6 characters")
    confirm = st.text_input("Confirm password", type="password")
    submitted = st.form_submit_button("Create account", type="primary")

if submitted:
    if password != confirm:
        st.error("Passwords do not match.")
    else:
        try:
            session = client().signup(email, password)
        except APIError as exc:
            st.error(exc.message)
        else:
            sign_in(session)
            st.toast(f"Welcome, {session['user']['username']}!")
            st.switch_page(st.session_state.pages["home"])

if st.button("Already registered? Log in"):
    st.switch_page(st.session_state.pages["login"])
