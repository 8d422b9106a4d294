from __future__ import annotations

import streamlit as st

from components.metrics import Kpi, bar_chart, pie_chart, render_kpi_row
from components.narrative import render_section_intro
from config import AppConfig
from data.connection import Backend
from data.stats import fetch_dashboard_stats


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Dashboard")

    render_section_intro(
        "How big is the community, and is it engaging?",
        "Live counts from the database. Every number is re-counted on each visit.",
    )

    stats = fetch_dashboard_stats(backend)
    if stats.warning:
        st.warning(stats.warning)
        st.toast(stats.warning, icon="⚠️")

    st.caption(f"Data source: **{backend.source}**")

    render_kpi_row(
        [
            Kpi("Total Users", f"{stats.total_users:,}", help="Registered profiles"),
            Kpi("Couples", f"{stats.total_couples:,}", help="Active relationships"),
            Kpi("Quizzes", f"{stats.total_quizzes:,}", help="Available quizzes"),
            Kpi("Questions", f"{stats.total_questions:,}", help="Daily question pool"),
        ]
    )
    st.write("")
    render_kpi_row(
        [
            Kpi("Daily Questions", f"{stats.total_daily_questions:,}", help="Scheduled"),
            Kpi("Quiz Answers", f"{stats.total_answers:,}", help="Total responses"),
        ]
    )

    st.divider()

    overview = stats.overview()
    c1, c2 = st.columns(2)
    with c1:
        pie_chart(overview, names="name", values="value", title="Overview distribution")
    with c2:
        bar_chart(overview, x="name", y="value", title="Overview counts")

    st.subheader("Engagement")
    render_kpi_row(
        [
            Kpi("Avg. answers per user", f"{stats.avg_answers_per_user:.1f}"),
            Kpi("Quiz completion rate", f"{stats.quiz_completion_rate * 100:.1f}%"),
        ]
    )
