"""
Building blocks shared by the entity screens: search box, selectable table,
action bar and the delete confirmation dialog.
"""

from __future__ import annotations

from typing import Callable, Optional

import pandas as pd
import streamlit as st

from components.notifications import notify, toast
from data.filters import search_frame
from data.service import ActionResult, DataResult


def show_warnings(*results: DataResult) -> None:
    for r in results:
        if r.warning:
            st.warning(r.warning)
            st.toast(r.warning, icon="⚠️")


def search_box(key: str, placeholder: str) -> str:
    return st.text_input("Search", key=f"{key}_search", placeholder=placeholder, label_visibility="collapsed")


def searched_frame(df: pd.DataFrame, key: str, placeholder: str, fields: list[str]) -> pd.DataFrame:
    return search_frame(df, search_box(key, placeholder), fields)


def searched(result: DataResult, key: str, placeholder: str, fields: list[str]) -> pd.DataFrame:
    return searched_frame(result.df, key, placeholder, fields)


def entity_table(df: pd.DataFrame, columns: list[tuple[str, str]], key: str) -> Optional[str]:
    """
    Renders `columns` ((source column, label) pairs) of `df` with single-row
    selection. Returns the `id` of the selected row, if any.
    """
    if df.empty:
        st.info("No records found.")
        return None

    view = df.reindex(columns=[c for c, _ in columns]).rename(columns=dict(columns))
    event = st.dataframe(
        view,
        hide_index=True,
        use_container_width=True,
        on_select="rerun",
        selection_mode="single-row",
        key=f"{key}_table",
    )
    rows = event.selection.rows if event is not None else []
    if not rows or rows[0] >= len(df):
        return None
    return str(df.iloc[rows[0]]["id"])


def find_row(rows: list[dict], row_id: Optional[str]) -> Optional[dict]:
    if row_id is None:
        return None
    return next((r for r in rows if str(r.get("id")) == row_id), None)


def action_bar(key: str, new_label: Optional[str], selected: Optional[dict], editable: bool = True) -> Optional[str]:
    """"new" | "edit" | "delete" | None."""
    cols = st.columns([1, 1, 1, 4])
    action = None
    if new_label and cols[0].button(new_label, key=f"{key}_new", type="primary", use_container_width=True):
        action = "new"
    if editable and cols[1].button("✏️ Edit", key=f"{key}_edit", disabled=selected is None, use_container_width=True):
        action = "edit"
    if cols[2].button("🗑️ Delete", key=f"{key}_delete", disabled=selected is None, use_container_width=True):
        action = "delete"
    if selected is None:
        cols[3].caption("Select a row to edit or delete it.")
    return action


def finish(result: ActionResult) -> None:
    """On success close the dialog and re-fetch; on failure keep the draft open."""
    if result.ok:
        notify(result)
        st.rerun()
    toast(result)
    st.error(result.message)


@st.dialog("Confirm delete")
def confirm_delete(label: str, on_confirm: Callable[[], ActionResult], warning: Optional[str] = None) -> None:
    st.markdown(f"Are you sure you want to delete **{label}**? This action cannot be undone.")
    if warning:
        st.warning(warning)
    c1, c2 = st.columns(2)
    if c1.button("Delete", type="primary", use_container_width=True):
        notify(on_confirm())
        st.rerun()
    if c2.button("Cancel", use_container_width=True):
        st.rerun()
