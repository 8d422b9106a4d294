from __future__ import annotations

import pandas as pd
import streamlit as st

from components.metrics import Kpi, bar_chart, pie_chart, render_kpi_row
from components.narrative import render_section_intro
from config import AppConfig
from data.connection import Backend
from data.stats import fetch_service_usage


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Service Stats")
    render_section_intro(
        "Which providers do couples actually look at?",
        "Every provider page view is logged. Totals are recomputed from the full log on each visit.",
    )

    usage = fetch_service_usage(backend)
    if usage.warning:
        st.warning(usage.warning)
        st.toast(usage.warning, icon="⚠️")

    providers = usage.providers
    categories = usage.categories

    top = providers.iloc[0]["provider_name"] if len(providers) else "—"
    render_kpi_row(
        [
            Kpi("Total views", f"{usage.total_views:,}"),
            Kpi("Providers viewed", f"{usage.total_providers:,}", help="At least one view"),
            Kpi("Categories", f"{len(categories):,}"),
            Kpi("Most viewed", str(top)),
        ]
    )

    if providers.empty:
        st.info("No service views recorded yet.")
        return

    st.divider()
    c1, c2 = st.columns(2)
    with c1:
        bar_chart(providers.head(10), x="provider_name", y="total_views", title="Top 10 providers", horizontal=True)
    with c2:
        pie_chart(categories, names="category", values="views", title="Views by category")

    st.subheader("Providers")
    table = providers.assign(latest_access=pd.to_datetime(providers["latest_access"], utc=True, errors="coerce"))
    st.dataframe(
        table.drop(columns=["provider_id"]).rename(
            columns={
                "provider_name": "Provider",
                "category_name": "Category",
                "subcategory_name": "Subcategory",
                "total_views": "Views",
                "unique_users": "Unique users",
                "latest_access": "Last viewed",
            }
        ),
        hide_index=True,
        use_container_width=True,
    )

    st.subheader("Categories")
    st.dataframe(
        categories.rename(columns={"category": "Category", "views": "Views", "providers": "Providers"}),
        hide_index=True,
        use_container_width=True,
    )
