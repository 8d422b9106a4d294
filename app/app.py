"""
Routing only.

All view logic lives in app/views/.
All env reads happen ONLY in config.py.
"""

from __future__ import annotations

import logging
import os
import sys

# Make `app/` importable as a flat module path when running:
#   streamlit run app/app.py
APP_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(APP_DIR, ".."))
for p in [APP_DIR, REPO_ROOT]:
    if p not in sys.path:
        sys.path.insert(0, p)

import streamlit as st  # noqa: E402

from components.header import render_header  # noqa: E402
from components.notifications import flush_toasts, notify  # noqa: E402
from components.sidebar import DEFAULT_VIEW, render_sidebar  # noqa: E402
from components.styles import apply_theme  # noqa: E402
from config import get_config  # noqa: E402
from data.service import get_backend, sign_out  # noqa: E402

from views import (  # noqa: E402
    couples,
    daily_questions,
    dashboard,
    login,
    questions,
    quiz_questions,
    quiz_themes,
    quizzes,
    service_categories,
    service_providers,
    service_stats,
    service_subcategories,
    users,
)


VIEWS = {
    "dashboard": dashboard,
    "users": users,
    "couples": couples,
    "quiz_themes": quiz_themes,
    "quizzes": quizzes,
    "quiz_questions": quiz_questions,
    "questions": questions,
    "daily_questions": daily_questions,
    "service_categories": service_categories,
    "service_subcategories": service_subcategories,
    "service_providers": service_providers,
    "service_stats": service_stats,
}


def main() -> None:
    apply_theme()
    cfg = get_config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = st.session_state.get("auth_session")
    state = render_sidebar(cfg, session)
    backend = get_backend(cfg, state.use_mock, session)

    if session is not None and state.logout:
        notify(sign_out(backend, session))
        st.session_state.pop("auth_session", None)
        st.rerun()

    flush_toasts()

    render_header(
        app_name="Zooj Admin",
        subtitle="Couples, quizzes, daily questions and the service directory",
        right_pill=f"Data: {'Mock' if state.use_mock else 'Supabase'}",
    )

    if session is None:
        login.render(cfg, backend)
        return

    # Routing only
    view = VIEWS.get(state.view, VIEWS[DEFAULT_VIEW])
    view.render(cfg, backend, state.use_mock)


if __name__ == "__main__":
    main()
