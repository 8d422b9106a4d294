from __future__ import annotations

import streamlit as st

from components.narrative import render_section_intro
from components.notifications import notify, toast
from config import AppConfig
from data.connection import Backend
from data.service import sign_in


def render(cfg: AppConfig, backend: Backend) -> None:
    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        render_section_intro(
            "Sign in",
            "Admin access only. Use your Zooj admin account"
            + (" (mock mode accepts any e-mail and password)." if backend.source == "mock" else "."),
        )
        email = st.text_input("Email", key="login_email", placeholder="admin@zooj.app")
        password = st.text_input("Password", key="login_password", type="password")
        if st.button("Sign in", type="primary", use_container_width=True, key="login_submit"):
            if not cfg.is_live_configured and backend.source != "mock":
                st.error("Supabase is not configured. Set SUPABASE_URL / SUPABASE_ANON_KEY or use mock data.")
                return
            session, result = sign_in(backend, email, password)
            if session is None:
                toast(result)
                st.error(result.message)
                return
            st.session_state["auth_session"] = session
            notify(result)
            st.rerun()
