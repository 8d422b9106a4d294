from __future__ import annotations

from datetime import date
from typing import Optional

import pandas as pd
import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [
    ("scheduled_for", "Date"),
    ("questions.content", "Question"),
    ("couple_label", "Couple"),
]
EVERY_COUPLE = "All couples"


def _couple_label(couple: Optional[dict]) -> str:
    if not couple:
        return EVERY_COUPLE
    u1 = (couple.get("user1") or {}).get("name") or "Unknown"
    u2 = (couple.get("user2") or {}).get("name") or "Pending"
    return f"{u1} & {u2}"


@st.dialog("Daily question")
def _form(backend: Backend, daily: Optional[dict], questions: list[dict], couples: list[dict]) -> None:
    daily = daily or {}

    q_ids = [q["id"] for q in questions]
    q_text = {q["id"]: q["content"] for q in questions}
    question_id = st.selectbox(
        "Question *",
        q_ids,
        index=q_ids.index(daily["question_id"]) if daily.get("question_id") in q_ids else None,
        format_func=lambda i: q_text.get(i, i),
        placeholder="Select a question",
    )

    c_ids = [None] + [c["id"] for c in couples]
    c_text = {c["id"]: _couple_label(c) for c in couples}
    couple_id = st.selectbox(
        "Couple",
        c_ids,
        index=c_ids.index(daily.get("couple_id")) if daily.get("couple_id") in c_ids else 0,
        format_func=lambda i: c_text.get(i, EVERY_COUPLE),
    )

    current = daily.get("scheduled_for")
    scheduled_for = st.date_input("Scheduled for *", value=date.fromisoformat(current[:10]) if current else date.today())

    if st.button("Update" if daily else "Schedule", type="primary", use_container_width=True):
        draft = {"question_id": question_id, "couple_id": couple_id, "scheduled_for": scheduled_for}
        crud.finish(service.save_daily_question(backend, draft, daily.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Daily Questions")
    render_section_intro(
        "What each couple is asked, and when",
        "A daily question without a couple is sent to every couple on that day.",
    )

    result = service.fetch_daily_questions(backend)
    questions = service.fetch_question_options(backend)
    couples = service.fetch_couple_options(backend)
    crud.show_warnings(result, questions, couples)

    df = result.df
    if not df.empty:
        df = df.assign(couple_label=pd.Series([_couple_label(r.get("couples")) for r in result.rows], index=df.index))
    df = crud.searched_frame(
        df,
        "daily_questions",
        "Search by question or partner name...",
        ["questions.content", "couples.user1.name", "couples.user2.name"],
    )
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "daily_questions"))

    action = crud.action_bar("daily_questions", "➕ Schedule question", selected)
    if action == "new":
        _form(backend, None, questions.rows, couples.rows)
    elif action == "edit":
        _form(backend, selected, questions.rows, couples.rows)
    elif action == "delete":
        crud.confirm_delete(
            f"the daily question of {selected.get('scheduled_for')}",
            lambda: service.delete_daily_question(backend, selected["id"]),
        )
