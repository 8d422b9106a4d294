from __future__ import annotations

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


GENDERS = ["", "male", "female", "other"]

COLUMNS = [
    ("name", "Name"),
    ("email", "Email"),
    ("gender", "Gender"),
    ("country", "Country"),
    ("couple_status", "Couple"),
    ("created_at", "Joined"),
]


@st.dialog("Edit user")
def _edit_form(backend: Backend, user: dict) -> None:
    st.caption(f"Email: {user.get('email') or 'N/A'}")
    name = st.text_input("Name *", value=user.get("name") or "")
    gender = user.get("gender") or ""
    gender = st.selectbox("Gender", GENDERS, index=GENDERS.index(gender) if gender in GENDERS else 0)
    country = st.text_input("Country", value=user.get("country") or "")
    if st.button("Save", type="primary", use_container_width=True):
        crud.finish(service.update_user(backend, user["id"], {"name": name, "gender": gender, "country": country}))


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Users")
    render_section_intro(
        "Who is using Zooj?",
        "Profiles are created at sign-up, so this screen only edits and deletes them. "
        "Users who are still part of a couple cannot be deleted.",
    )

    result = service.fetch_users(backend)
    crud.show_warnings(result)

    df = crud.searched(result, "users", "Search by name, country or email...", ["name", "country", "email"])
    st.caption(f"{len(df)} of {len(result.rows)} users")

    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "users"))
    action = crud.action_bar("users", None, selected)
    if action == "edit":
        _edit_form(backend, selected)
    elif action == "delete":
        crud.confirm_delete(
            selected.get("name") or selected["id"],
            lambda: service.delete_user(backend, selected["id"]),
            warning="All of this user's answers, messages, pulses and notifications will be removed.",
        )
