from __future__ import annotations

import streamlit as st


def render_section_intro(title: str, body: str | None = None) -> None:
    """Short framing card at the top of every section."""
    st.markdown(
        f"""
<div class="section-intro">
  <div class="section-intro-title">{title}</div>
  {f'<div class="section-intro-body">{body}</div>' if body else ''}
</div>
        """,
        unsafe_allow_html=True,
    )
