from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from config import AppConfig
from data.connection import AuthSession


@dataclass(frozen=True)
class SidebarState:
    view: str
    use_mock: bool
    logout: bool = False


NAV_ITEMS = [
    ("📊 Dashboard", "dashboard"),
    ("👤 Users", "users"),
    ("💞 Couples", "couples"),
    ("🎨 Quiz Themes", "quiz_themes"),
    ("📝 Quizzes", "quizzes"),
    ("❓ Quiz Questions", "quiz_questions"),
    ("💬 Questions", "questions"),
    ("📅 Daily Questions", "daily_questions"),
    ("🗂️ Service Categories", "service_categories"),
    ("🏷️ Service Subcategories", "service_subcategories"),
    ("🏪 Service Providers", "service_providers"),
    ("📈 Service Stats", "service_stats"),
]
DEFAULT_VIEW = "dashboard"


def render_sidebar(cfg: AppConfig, session: Optional[AuthSession]) -> SidebarState:
    view = DEFAULT_VIEW
    logout = False
    with st.sidebar:
        st.markdown("### 💜 Zooj Admin")
        st.caption("Content + community management")

        if session is not None:
            labels = [l for l, _ in NAV_ITEMS]
            if st.session_state.get("nav_label") not in labels:
                st.session_state["nav_label"] = labels[0]

            label = st.radio("Nav", labels, key="nav_label", label_visibility="collapsed")
            view = dict(NAV_ITEMS).get(label, DEFAULT_VIEW)

            st.caption(f"Signed in as **{session.email}**")
            logout = st.button("🚪 Logout", use_container_width=True)

        st.session_state.setdefault("use_mock", cfg.default_use_mock)
        with st.expander("⚙️ Settings", expanded=False):
            st.toggle(
                "Use mock data",
                key="use_mock",
                help="When off, the app talks to the hosted Supabase project. Read failures show a warning.",
                disabled=session is not None,
            )

            st.markdown("**Project**")
            st.code(cfg.supabase_url or "(not configured)", language="text")
            if session is not None:
                st.caption("Log out to switch data mode.")
    use_mock = st.session_state["use_mock"]

    return SidebarState(view=view, use_mock=use_mock, logout=logout)
