from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [("name", "Name"), ("description", "Description"), ("created_at", "Created")]


@st.dialog("Quiz theme")
def _form(backend: Backend, theme: Optional[dict]) -> None:
    theme = theme or {}
    name = st.text_input("Name *", value=theme.get("name") or "")
    description = st.text_area("Description", value=theme.get("description") or "")
    if st.button("Update" if theme else "Create", type="primary", use_container_width=True):
        crud.finish(service.save_quiz_theme(backend, {"name": name, "description": description}, theme.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Quiz Themes")
    render_section_intro("Group quizzes by theme", "A theme can only be deleted once no quiz uses it.")

    result = service.fetch_quiz_themes(backend)
    crud.show_warnings(result)

    df = crud.searched(result, "quiz_themes", "Search themes...", ["name", "description"])
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "quiz_themes"))

    action = crud.action_bar("quiz_themes", "➕ New theme", selected)
    if action == "new":
        _form(backend, None)
    elif action == "edit":
        _form(backend, selected)
    elif action == "delete":
        crud.confirm_delete(selected["name"], lambda: service.delete_quiz_theme(backend, selected["id"]))
