from __future__ import annotations

from typing import Optional

import streamlit as st

from components import crud
from components.image_uploader import clear_image_state, image_uploader
from components.narrative import render_section_intro
from config import AppConfig
from data import service
from data.connection import Backend
from data.filters import ALL, filter_by_parent


COLUMNS = [
    ("name", "Name"),
    ("service_subcategories.name", "Subcategory"),
    ("service_subcategories.service_categories.name", "Category"),
    ("city", "City"),
    ("price_range", "Price"),
    ("phone", "Phone"),
    ("created_at", "Created"),
]

PRICE_RANGES = ["", "€", "€€", "€€€", "€€€€"]


def _subcategory_label(sub: dict) -> str:
    category = (sub.get("service_categories") or {}).get("name")
    return f"{sub['name']} ({category})" if category else sub["name"]


def _coordinate_text(value) -> str:
    return "" if value is None else str(value)


@st.dialog("Service provider", width="large")
def _form(
    cfg: AppConfig,
    backend: Backend,
    use_mock: bool,
    provider: Optional[dict],
    subcategories: list[dict],
    default_subcategory: Optional[str],
) -> None:
    provider = provider or {}
    key = f"provider_{provider.get('id', 'new')}"

    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Name *", value=provider.get("name") or "")
        ids = [s["id"] for s in subcategories]
        labels = {s["id"]: _subcategory_label(s) for s in subcategories}
        current = provider.get("subcategory_id") or default_subcategory
        subcategory_id = st.selectbox(
            "Subcategory *",
            ids,
            index=ids.index(current) if current in ids else None,
            format_func=lambda i: labels.get(i, i),
            placeholder="Select a subcategory",
        )
        address = st.text_input("Address", value=provider.get("address") or "")
        city = st.text_input("City", value=provider.get("city") or "")
        phone = st.text_input("Phone", value=provider.get("phone") or "")
        website = st.text_input("Website", value=provider.get("website") or "")
    with c2:
        price = provider.get("price_range") or ""
        price_range = st.selectbox(
            "Price range", PRICE_RANGES, index=PRICE_RANGES.index(price) if price in PRICE_RANGES else 0
        )
        lat_col, lon_col = st.columns(2)
        latitude = lat_col.text_input("Latitude", value=_coordinate_text(provider.get("latitude")))
        longitude = lon_col.text_input("Longitude", value=_coordinate_text(provider.get("longitude")))
        opening_hours = st.text_area(
            "Opening hours",
            value=service.format_opening_hours(provider.get("opening_hours")),
            help='JSON such as {"mon-fri": "10:00-22:00"}; plain text is stored as-is.',
        )
        image_url = image_uploader(cfg, use_mock, key, provider.get("image_url"))

    description = st.text_area("Description", value=provider.get("description") or "")

    if st.button("Update" if provider else "Create", type="primary", use_container_width=True):
        draft = {
            "name": name,
            "subcategory_id": subcategory_id,
            "description": description,
            "address": address,
            "city": city,
            "phone": phone,
            "website": website,
            "price_range": price_range,
            "latitude": latitude,
            "longitude": longitude,
            "opening_hours": opening_hours,
            "image_url": image_url,
        }
        result = service.save_service_provider(backend, draft, provider.get("id"))
        if result.ok:
            clear_image_state(key)
        crud.finish(result)


def render(cfg: AppConfig, backend: Backend, use_mock: bool) -> None:
    st.title("Service Providers")
    render_section_intro(
        "Places couples can discover",
        "Providers with recorded views cannot be deleted, so usage history stays intact.",
    )

    result = service.fetch_service_providers(backend)
    subcategories = service.fetch_subcategory_options(backend)
    crud.show_warnings(result, subcategories)

    c1, c2 = st.columns([2, 3])
    ids = [ALL] + [s["id"] for s in subcategories.rows]
    labels = {ALL: "All subcategories", **{s["id"]: _subcategory_label(s) for s in subcategories.rows}}
    with c1:
        sub_filter = st.selectbox(
            "Subcategory", ids, format_func=lambda i: labels.get(i, i), key="service_providers_subcategory"
        )
    with c2:
        df = crud.searched_frame(
            filter_by_parent(result.df, "subcategory_id", sub_filter),
            "service_providers",
            "Search providers, subcategories or categories...",
            ["name", "service_subcategories.name", "service_subcategories.service_categories.name"],
        )

    selected = crud.find_row(result.rows, crud.entity_table(df, COLUMNS, "service_providers"))

    action = crud.action_bar("service_providers", "➕ New provider", selected)
    if action in ("new", "edit"):
        provider = selected if action == "edit" else None
        clear_image_state(f"provider_{(provider or {}).get('id', 'new')}")
        _form(cfg, backend, use_mock, provider, subcategories.rows, None if sub_filter == ALL else sub_filter)
    elif action == "delete":
        crud.confirm_delete(selected["name"], lambda: service.delete_service_provider(backend, selected["id"]))
