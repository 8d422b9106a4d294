from __future__ import annotations

import streamlit as st

from components import crud
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend


COLUMNS = [
    ("user1_profile.name", "Partner 1"),
    ("user2_profile.name", "Partner 2"),
    ("status", "Status"),
    ("created_at", "Created"),
]


def _label(couple: dict) -> str:
    def name(key: str) -> str:
        return (couple.get(key) or {}).get("name") or "Unknown"

    return f"{name('user1_profile')} & {name('user2_profile')}"


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Couples")
    render_section_intro(
        "Which couples are on the platform?",
        "Deleting a couple also removes its daily questions, answers, chat threads, calendar and quiz results.",
    )

    result = service.fetch_couples(backend)
    crud.show_warnings(result)

    df = crud.searched(result, "couples", "Search by partner name...", ["user1_profile.name", "user2_profile.name"])
    st.caption(f"{len(df)} of {len(result.rows)} couples")

    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "couples"))
    if crud.action_bar("couples", None, selected, editable=False) == "delete":
        crud.confirm_delete(
            _label(selected),
            lambda: service.delete_couple(backend, selected["id"]),
            warning="This will permanently delete the couple and all related data.",
        )
