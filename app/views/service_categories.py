from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [("icon", "Icon"), ("name", "Name"), ("description", "Description"), ("created_at", "Created")]


@st.dialog("Service category")
def _form(backend: Backend, category: Optional[dict]) -> None:
    category = category or {}
    name = st.text_input("Name *", value=category.get("name") or "")
    icon = st.text_input("Icon", value=category.get("icon") or "", help="An emoji, e.g. 🧘")
    description = st.text_area("Description", value=category.get("description") or "")
    if st.button("Update" if category else "Create", type="primary", use_container_width=True):
        draft = {"name": name, "icon": icon, "description": description}
        crud.finish(service.save_service_category(backend, draft, category.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Service Categories")
    render_section_intro(
        "Top level of the service directory",
        "A category can only be deleted once all of its subcategories are gone.",
    )

    result = service.fetch_service_categories(backend)
    crud.show_warnings(result)

    df = crud.searched(result, "service_categories", "Search categories...", ["name", "description"])
    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "service_categories"))

    action = crud.action_bar("service_categories", "➕ New category", selected)
    if action == "new":
        _form(backend, None)
    elif action == "edit":
        _form(backend, selected)
    elif action == "delete":
        crud.confirm_delete(selected["name"], lambda: service.delete_service_category(backend, selected["id"]))
