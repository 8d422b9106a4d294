from __future__ import annotations

from datetime import time
from typing import Optional

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [("content", "Question"), ("scheduled_time", "Time"), ("created_at", "Created")]


def _as_time(value: Optional[str]) -> time:
    hours, minutes, *_ = (int(p) for p in service.normalize_time(value).split(":"))
    return time(hours, minutes)


@st.dialog("Daily question pool")
def _form(backend: Backend, question: Optional[dict]) -> None:
    question = question or {}
    content = st.text_area("Question *", value=question.get("content") or "")
    scheduled_time = st.time_input("Scheduled time", value=_as_time(question.get("scheduled_time")))
    if st.button("Update" if question else "Create", type="primary", use_container_width=True):
        draft = {"content": content, "scheduled_time": scheduled_time}
        crud.finish(service.save_question(backend, draft, question.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Questions")
    render_section_intro(
        "The daily question pool",
        "Questions scheduled as daily questions cannot be deleted until those schedules are removed.",
    )

    result = service.fetch_questions(backend)
    crud.show_warnings(result)

    df = crud.searched(result, "questions", "Search questions...", ["content"])
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "questions"))

    action = crud.action_bar("questions", "➕ New question", selected)
    if action == "new":
        _form(backend, None)
    elif action == "edit":
        _form(backend, selected)
    elif action == "delete":
        crud.confirm_delete((selected.get("content") or "")[:60], lambda: service.delete_question(backend, selected["id"]))
