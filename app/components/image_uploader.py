from __future__ import annotations

import logging
from typing import Optional

import streamlit as st

from components.notifications import toast
from config import AppConfig
from data.service import ActionResult
from data.uploads import ImageFile, UploadError, UploadValidationError, inline_image, upload_image


logger = logging.getLogger(__name__)


def _keys(key: str) -> tuple[str, str]:
    return f"{key}_image_url", f"{key}_image_seen"


def clear_image_state(key: str) -> None:
    for k in _keys(key):
        st.session_state.pop(k, None)


def image_uploader(cfg: AppConfig, use_mock: bool, key: str, current: Optional[str] = None) -> Optional[str]:
    """
    Image field for a form draft. Returns the URL to save (None once removed).

    Each picked file is uploaded once; later reruns of the dialog reuse the result.
    In mock mode the image is kept inline as a data URI.
    """
    url_key, seen_key = _keys(key)
    if url_key not in st.session_state:
        st.session_state[url_key] = current

    url = st.session_state[url_key]
    if url:
        st.image(url, width=160)
        if st.button("Remove image", key=f"{key}_image_remove"):
            st.session_state[url_key] = None
            st.rerun(scope="fragment")

    picked = st.file_uploader("Upload image", key=f"{key}_image_file", help="Images only, up to 5MB")
    if picked is not None and st.session_state.get(seen_key) != (picked.name, picked.size):
        st.session_state[seen_key] = (picked.name, picked.size)
        image = ImageFile(name=picked.name, content_type=picked.type or "", data=picked.getvalue())
        try:
            st.session_state[url_key] = inline_image(image) if use_mock else upload_image(cfg, image)
        except UploadValidationError as e:
            toast(ActionResult(False, e.title, e.message))
        except UploadError as e:
            logger.error("Image upload failed: %s", e)
            toast(ActionResult(False, "Upload failed", "Failed to upload image"))
        else:
            toast(ActionResult(True, "Success", "Image uploaded successfully"))

    return st.session_state[url_key]
