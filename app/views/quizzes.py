from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.image_uploader import clear_image_state, image_uploader
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [
    ("title", "Title"),
    ("quiz_themes.name", "Theme"),
    ("description", "Description"),
    ("created_at", "Created"),
]


@st.dialog("Quiz", width="large")
def _form(cfg: AppConfig, backend: Backend, use_mock: bool, quiz: Optional[dict], themes: list[dict]) -> None:
    quiz = quiz or {}
    key = f"quiz_{quiz.get('id', 'new')}"

    title = st.text_input("Title *", value=quiz.get("title") or "")
    description = st.text_area("Description", value=quiz.get("description") or "")

    ids = [t["id"] for t in themes]
    names = {t["id"]: t["name"] for t in themes}
    current = quiz.get("theme_id")
    theme_id = st.selectbox(
        "Theme *",
        ids,
        index=ids.index(current) if current in ids else None,
        format_func=lambda i: names.get(i, i),
        placeholder="Select a theme",
    )
    image = image_uploader(cfg, use_mock, key, quiz.get("image"))

    if st.button("Update" if quiz else "Create", type="primary", use_container_width=True):
        draft = {"title": title, "description": description, "theme_id": theme_id, "image": image}
        result = service.save_quiz(backend, draft, quiz.get("id"))
        if result.ok:
            clear_image_state(key)
        crud.finish(result)


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Quizzes")
    render_section_intro(
        "Manage quizzes",
        "A quiz cannot be deleted while it still has questions or couples have answered it.",
    )

    result = service.fetch_quizzes(backend)
    themes = service.fetch_theme_options(backend)
    crud.show_warnings(result, themes)

    df = crud.searched(result, "quizzes", "Search quizzes...", ["title", "description", "quiz_themes.name"])
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "quizzes"))

    action = crud.action_bar("quizzes", "➕ New quiz", selected)
    if action in ("new", "edit"):
        quiz = selected if action == "edit" else None
        clear_image_state(f"quiz_{(quiz or {}).get('id', 'new')}")
        _form(cfg, backend, use_mock, quiz, themes.rows)
    elif action == "delete":
        crud.confirm_delete(selected["title"], lambda: service.delete_quiz(backend, selected["id"]))
