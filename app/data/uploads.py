"""
Image uploads to the hosted image service (Cloudinary, unsigned preset).

Validation always runs before any network call.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

import requests

from config import AppConfig


logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024


class UploadValidationError(ValueError):
    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title
        self.message = message


class UploadError(RuntimeError):
    pass


@dataclass(frozen=True)
class ImageFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_image(image: ImageFile) -> None:
    if not (image.content_type or "").startswith("image/"):
        raise UploadValidationError("Invalid file type", "Please select an image file")
    if image.size > MAX_IMAGE_BYTES:
        raise UploadValidationError("File too large", "Please select an image under 5MB")


def upload_image(cfg: AppConfig, image: ImageFile) -> str:
    """Returns the hosted `secure_url`."""
    validate_image(image)
    try:
        resp = requests.post(
            cfg.cloudinary_upload_url,
            files={"file": (image.name, image.data, image.content_type)},
            data={"upload_preset": cfg.cloudinary_upload_preset, "cloud_name": cfg.cloudinary_cloud_name},
            timeout=cfg.request_timeout,
        )
    except requests.RequestException as e:
        logger.error("Error uploading %s: %s", image.name, e)
        raise UploadError("Upload failed") from e

    if resp.status_code >= 300:
        logger.error("Image upload for %s returned %s: %s", image.name, resp.status_code, resp.text[:200])
        raise UploadError("Upload failed")
    url = (resp.json() or {}).get("secure_url")
    if not url:
        raise UploadError("Upload response did not include a secure_url")
    logger.info("Uploaded %s (%d bytes)", image.name, image.size)
    return url


def inline_image(image: ImageFile) -> str:
    """Mock mode: keep the image inside the row as a data URI instead of hosting it."""
    validate_image(image)
    return f"data:{image.content_type};base64,{base64.b64encode(image.data).decode('utf-8')}"
