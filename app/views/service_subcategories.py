from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend
from data.filters import ALL, filter_by_parent


COLUMNS = [
    ("icon", "Icon"),
    ("name", "Name"),
    ("service_categories.name", "Category"),
    ("description", "Description"),
    ("created_at", "Created"),
]


def _category_label(category: dict) -> str:
    return f"{category.get('icon') or ''} {category['name']}".strip()


@st.dialog("Service subcategory")
def _form(backend: Backend, sub: Optional[dict], categories: list[dict], default_category: Optional[str]) -> None:
    sub = sub or {}
    name = st.text_input("Name *", value=sub.get("name") or "")
    ids = [c["id"] for c in categories]
    labels = {c["id"]: _category_label(c) for c in categories}
    current = sub.get("category_id") or default_category
    category_id = st.selectbox(
        "Category *",
        ids,
        index=ids.index(current) if current in ids else None,
        format_func=lambda i: labels.get(i, i),
        placeholder="Select a category",
    )
    icon = st.text_input("Icon", value=sub.get("icon") or "")
    description = st.text_area("Description", value=sub.get("description") or "")
    if st.button("Update" if sub else "Create", type="primary", use_container_width=True):
        draft = {"name": name, "category_id": category_id, "icon": icon, "description": description}
        crud.finish(service.save_service_subcategory(backend, draft, sub.get("id")))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Service Subcategories")
    render_section_intro(
        "Second level of the service directory",
        "A subcategory can only be deleted once no provider is listed under it.",
    )

    result = service.fetch_service_subcategories(backend)
    categories = service.fetch_category_options(backend)
    crud.show_warnings(result, categories)

    c1, c2 = st.columns([2, 3])
    ids = [ALL] + [c["id"] for c in categories.rows]
    labels = {ALL: "All categories", **{c["id"]: _category_label(c) for c in categories.rows}}
    with c1:
        category_filter = st.selectbox(
            "Category", ids, format_func=lambda i: labels.get(i, i), key="service_subcategories_category"
        )
    with c2:
        df = crud.searched_frame(
            filter_by_parent(result.df, "category_id", category_filter),
            "service_subcategories",
            "Search subcategories...",
            ["name", "service_categories.name"],
        )

    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "service_subcategories"))

    action = crud.action_bar("service_subcategories", "➕ New subcategory", selected)
    if action == "new":
        _form(backend, None, categories.rows, None if category_filter == ALL else category_filter)
    elif action == "edit":
        _form(backend, selected, categories.rows, None)
    elif action == "delete":
        crud.confirm_delete(selected["name"], lambda: service.delete_service_subcategory(backend, selected["id"]))
