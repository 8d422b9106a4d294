from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from components.notifications import notify
from config import AppConfig
from data import service
from data.connection import Backend
from data.filters import ALL, filter_by_parent, search_frame


COLUMNS = [
    ("ord", "#"),
    ("content", "Question"),
    ("quizzes.title", "Quiz"),
    ("quizzes.quiz_themes.name", "Theme"),
]


def _quiz_label(quiz: dict) -> str:
    theme = (quiz.get("quiz_themes") or {}).get("name")
    return f"{quiz['title']} ({theme})" if theme else quiz["title"]


@st.dialog("Quiz question")
def _form(backend: Backend, question: Optional[dict], quizzes: list[dict], rows: list[dict], default_quiz: Optional[str]) -> None:
    question = question or {}
    ids = [q["id"] for q in quizzes]
    labels = {q["id"]: _quiz_label(q) for q in quizzes}
    current = question.get("quiz_id") or default_quiz
    quiz_id = st.selectbox(
        "Quiz *",
        ids,
        index=ids.index(current) if current in ids else None,
        format_func=lambda i: labels.get(i, i),
        placeholder="Select a quiz",
    )
    content = st.text_area("Question *", value=question.get("content") or "")
    ord_value = st.number_input(
        "Order",
        min_value=0,
        step=1,
        value=service.form_ord(question, rows, quiz_id),
    )
    if st.button("Update" if question else "Create", type="primary", use_container_width=True):
        draft = {"quiz_id": quiz_id, "content": content, "ord": ord_value}
        crud.finish(service.save_quiz_question(backend, draft, question.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Quiz Questions")
    render_section_intro(
        "Questions inside each quiz",
        "Questions are listed in quiz order. Move a question up or down to change its position.",
    )

    result = service.fetch_quiz_questions(backend)
    quizzes = service.fetch_quiz_options(backend)
    crud.show_warnings(result, quizzes)

    c1, c2 = st.columns([2, 3])
    quiz_ids = [ALL] + [q["id"] for q in quizzes.rows]
    labels = {ALL: "All quizzes", **{q["id"]: _quiz_label(q) for q in quizzes.rows}}
    with c1:
        quiz_filter = st.selectbox("Quiz", quiz_ids, format_func=lambda i: labels.get(i, i), key="quiz_questions_quiz")
    with c2:
        term = crud.search_box("quiz_questions", "Search questions, quizzes or themes...")

    df = filter_by_parent(result.df, "quiz_id", quiz_filter)
    df = search_frame(df, term, ["content", "quizzes.title", "quizzes.quiz_themes.name"])
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "quiz_questions"))

    action = crud.action_bar("quiz_questions", "➕ New question", selected)
    if action == "new":
        _form(backend, None, quizzes.rows, result.rows, None if quiz_filter == ALL else quiz_filter)
    elif action == "edit":
        _form(backend, selected, quizzes.rows, result.rows, None)
    elif action == "delete":
        crud.confirm_delete(
            (selected.get("content") or "")[:60], lambda: service.delete_quiz_question(backend, selected["id"])
        )

    if selected is not None:
        position = int(selected.get("ord") or 0)
        up, down, _ = st.columns([1, 1, 5])
        if up.button("⬆️ Move up", disabled=position <= 0, use_container_width=True):
            notify(service.reorder_quiz_question(backend, selected["id"], position - 1))
            st.rerun()
        if down.button("⬇️ Move down", use_container_width=True):
            notify(service.reorder_quiz_question(backend, selected["id"], position + 1))
            st.rerun()
