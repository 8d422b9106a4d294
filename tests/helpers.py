from __future__ import annotations

from dataclasses import replace
from unittest import mock

from config import AppConfig


BASE_CONFIG = AppConfig(
    supabase_url="https://project.supabase.co",
    supabase_anon_key="anon-key",
    supabase_service_role_key="service-role-key",
    cloudinary_cloud_name="dtivjmfgj",
    cloudinary_upload_preset="ZOOJAPP",
    request_timeout=5.0,
    default_use_mock=True,
    log_level="INFO",
)


def make_config(**overrides) -> AppConfig:
    return replace(BASE_CONFIG, **overrides)


def fake_response(status: int = 200, body=None, headers: dict | None = None) -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.json.return_value = body
    resp.headers = headers or {}
    resp.content = b"" if body is None else b"{}"
    resp.text = "" if body is None else str(body)
    return resp
