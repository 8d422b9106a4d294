from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from config import CHART_COLORS, THEME


@dataclass(frozen=True)
class Kpi:
    label: str
    value: str
    help: Optional[str] = None


def render_kpi_row(kpis: list[Kpi]) -> None:
    cols = st.columns(len(kpis))
    for c, k in zip(cols, kpis):
        with c:
            help_html = f'<div class="metric-help">{k.help}</div>' if k.help else ""
            st.markdown(
                f"""
<div class="metric-card">
  <div class="metric-label">{k.label}</div>
  <div class="metric-value">{k.value}</div>
  {help_html}
</div>
                """,
                unsafe_allow_html=True,
            )


def create_plotly_theme() -> dict:
    """
    Shared Plotly styling:
    - white card surface
    - DM Sans
    - violet/teal colorway
    """
    return {
        "font_family": "DM Sans, system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif",
        "font_color": THEME["text_primary"],
        "paper_bgcolor": THEME["bg_card"],
        "plot_bgcolor": THEME["bg_card"],
        "colorway": CHART_COLORS,
        "gridcolor": THEME["grid"],
        "axis_linecolor": THEME["border_color"],
        "legend": {
            "orientation": "h",
            "yanchor": "bottom",
            "y": 1.02,
            "xanchor": "left",
            "x": 0,
            "font": {"color": THEME["text_secondary"]},
        },
        "title_font": {"color": THEME["ink_900"], "size": 16},
    }


def apply_plotly_theme(fig: go.Figure, x_title: Optional[str] = None, y_title: Optional[str] = None) -> go.Figure:
    theme = create_plotly_theme()
    fig.update_layout(
        margin=dict(l=10, r=10, t=44, b=10),
        font=dict(family=theme["font_family"], color=theme["font_color"]),
        paper_bgcolor=theme["paper_bgcolor"],
        plot_bgcolor=theme["plot_bgcolor"],
        colorway=theme["colorway"],
        legend=theme["legend"],
        title_font=theme["title_font"],
    )
    if x_title is not None:
        fig.update_xaxes(
            title_text=x_title,
            gridcolor=theme["gridcolor"],
            zeroline=False,
            linecolor=theme["axis_linecolor"],
            tickfont=dict(color=THEME["text_secondary"]),
        )
    if y_title is not None:
        fig.update_yaxes(
            title_text=y_title,
            gridcolor=theme["gridcolor"],
            zeroline=False,
            linecolor=theme["axis_linecolor"],
            tickfont=dict(color=THEME["text_secondary"]),
        )
    return fig


def bar_chart(df: pd.DataFrame, x: str, y: str, title: str = "", horizontal: bool = False) -> None:
    if horizontal:
        fig = px.bar(df, x=y, y=x, title=title, orientation="h")
        fig.update_yaxes(autorange="reversed")
        fig = apply_plotly_theme(fig, x_title=y, y_title="")
    else:
        fig = px.bar(df, x=x, y=y, title=title)
        fig = apply_plotly_theme(fig, x_title="", y_title=y)
    fig.update_traces(marker_color=THEME["accent_primary"])
    st.plotly_chart(fig, use_container_width=True)


def pie_chart(df: pd.DataFrame, names: str, values: str, title: str = "") -> None:
    fig = px.pie(df, names=names, values=values, title=title, color_discrete_sequence=CHART_COLORS)
    fig.update_traces(textinfo="label+percent")
    fig = apply_plotly_theme(fig)
    st.plotly_chart(fig, use_container_width=True)
