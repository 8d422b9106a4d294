"""
Toasts that survive a rerun.

Mutations call `notify()` then `st.rerun()`; the queued toasts are shown by
`flush_toasts()` at the top of the next run. `toast()` shows one immediately.
"""

from __future__ import annotations

import streamlit as st

from data.service import ActionResult


_QUEUE_KEY = "_pending_toasts"


def toast(result: ActionResult) -> None:
    st.toast(f"**{result.title}**: {result.message}", icon="✅" if result.ok else "⚠️")


def notify(result: ActionResult) -> None:
    st.session_state.setdefault(_QUEUE_KEY, []).append(result)


def flush_toasts() -> None:
    for result in st.session_state.pop(_QUEUE_KEY, []):
        toast(result)
