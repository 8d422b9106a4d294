from __future__ import annotations

import streamlit as st

from config import THEME


APP_TITLE = "Zooj Admin"


def apply_theme() -> None:
    st.set_page_config(
        page_title=APP_TITLE,
        page_icon="💜",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    # Centralized theme tokens (config.py) -> CSS variables
    radius = int(THEME["radius_px"])
    css = """
<style>
@import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;500;600;700&display=swap');

:root{
  --violet-500: __VIOLET_500__;
  --violet-600: __VIOLET_600__;
  --teal: __TEAL__;
  --ink-900: __INK_900__;
  --ink-800: __INK_800__;

  --bg-primary: __BG_PRIMARY__;
  --bg-secondary: __BG_SECONDARY__;
  --card-bg: __CARD_BG__;
  --card-border: __CARD_BORDER__;

  --text-primary: __TEXT_PRIMARY__;
  --text-secondary: __TEXT_SECONDARY__;
  --grid: __GRID__;
  --shadow: __SHADOW__;
  --radius: __RADIUS_PX__px;
}

#MainMenu { visibility: hidden; }
footer { visibility: hidden; }

html, body, [data-testid="stAppViewContainer"]{
  background: var(--bg-primary) !important;
  font-family: "DM Sans", system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif !important;
  color: var(--text-primary) !important;
}

[data-testid="stSidebar"]{
  background: var(--bg-secondary) !important;
  border-right: 1px solid var(--card-border) !important;
}

/* Sidebar nav */
[data-testid="stSidebar"] div[role="radiogroup"] > label{
  background: var(--card-bg) !important;
  border: 1px solid var(--card-border) !important;
  border-radius: 10px !important;
  padding: 8px 12px !important;
  margin: 0 0 6px 0 !important;
}
[data-testid="stSidebar"] div[role="radiogroup"] > label:hover{
  border-color: rgba(139, 92, 246, 0.40) !important;
}
[data-testid="stSidebar"] div[role="radiogroup"] > label:has(input:checked){
  border-color: var(--violet-500) !important;
  box-shadow: 0 1px 3px rgba(139,92,246,0.20) !important;
}

.block-container{
  padding-top: 1rem !important;
  padding-bottom: 2rem !important;
}

/* Header */
.zj-header{
  display:flex;
  align-items:center;
  justify-content:space-between;
  gap: 12px;
  background: var(--bg-secondary);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 10px 14px;
  margin: 0 0 14px 0;
}
.zj-title{
  font-size: 20px;
  font-weight: 700;
  color: var(--ink-900);
  line-height: 1.1;
}
.zj-subtitle{
  font-size: 14px;
  font-weight: 500;
  color: var(--text-secondary);
}
.pill{
  display:inline-flex;
  align-items:center;
  gap:6px;
  background: white;
  border: 1px solid var(--card-border);
  border-radius: 999px;
  padding: 6px 10px;
  font-size: 13px;
  font-weight: 600;
  color: var(--ink-800);
}
.pill .dot{
  width:8px;
  height:8px;
  border-radius:999px;
  background: var(--teal);
  display:inline-block;
}

/* Metric cards */
.metric-card{
  background: var(--card-bg);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 12px 14px;
}
.metric-label{
  font-size: 14px;
  font-weight: 500;
  color: var(--text-secondary);
  margin-bottom: 6px;
}
.metric-value{
  font-size: 24px;
  font-weight: 700;
  color: var(--text-primary);
  line-height: 1.2;
}
.metric-help{
  margin-top: 6px;
  font-size: 12px;
  color: var(--text-secondary);
}

/* Buttons */
div.stButton > button[kind="primary"], div.stFormSubmitButton > button{
  border-radius: 10px !important;
  font-weight: 600 !important;
  border: 1px solid transparent !important;
  background: var(--violet-500) !important;
  color: white !important;
}
div.stButton > button[kind="primary"]:hover, div.stFormSubmitButton > button:hover{
  background: var(--violet-600) !important;
}
div.stButton > button{
  border-radius: 10px !important;
}

div[data-baseweb="input"] input, textarea{
  border-radius: 10px !important;
}

/* Charts on card surface */
div[data-testid="stPlotlyChart"]{
  background: var(--card-bg);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 8px 10px;
}

/* Section intro */
.section-intro{
  background: var(--bg-secondary);
  border: 1px solid var(--card-border);
  border-left: 4px solid var(--violet-500);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 12px 14px;
  margin: 0 0 14px 0;
}
.section-intro-title{
  font-size: 18px;
  font-weight: 700;
  color: var(--ink-900);
  margin-bottom: 4px;
}
.section-intro-body{
  font-size: 14px;
  color: var(--text-secondary);
  line-height: 1.5;
}

.subtle{ color: var(--text-secondary); font-size: 14px; }
</style>
"""

    tokens = {
        "__VIOLET_500__": str(THEME["accent_primary"]),
        "__VIOLET_600__": str(THEME["accent_secondary"]),
        "__TEAL__": str(THEME["teal"]),
        "__INK_900__": str(THEME["ink_900"]),
        "__INK_800__": str(THEME["ink_800"]),
        "__BG_PRIMARY__": str(THEME["bg_primary"]),
        "__BG_SECONDARY__": str(THEME["bg_secondary"]),
        "__CARD_BG__": str(THEME["bg_card"]),
        "__CARD_BORDER__": str(THEME["border_color"]),
        "__TEXT_PRIMARY__": str(THEME["text_primary"]),
        "__TEXT_SECONDARY__": str(THEME["text_secondary"]),
        "__GRID__": str(THEME["grid"]),
        "__SHADOW__": str(THEME["shadow"]),
        "__RADIUS_PX__": str(radius),
    }
    for k, v in tokens.items():
        css = css.replace(k, v)

    st.markdown(css, unsafe_allow_html=True)
