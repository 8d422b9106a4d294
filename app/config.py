from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


#
# Shared theme tokens (Zooj brand styling)
# - Centralized here so components/styles.py and chart helpers stay in sync.
#
THEME = {
    # Backgrounds
    "bg_primary": "#F7F5FB",     # page background
    "bg_secondary": "#FFFFFF",   # sidebar / top surfaces
    "bg_card": "#FFFFFF",       # card surface
    # Accents (Violet + Teal)
    "accent_primary": "#8B5CF6",    # violet 500
    "accent_secondary": "#7C3AED",  # violet 600 (hover)
    "teal": "#06B6D4",
    "ink_900": "#1E1B2E",
    "ink_800": "#2E2A45",
    # Text + borders
    "text_primary": "#1F2937",
    "text_secondary": "rgba(31, 41, 55, 0.70)",
    "border_color": "#E7E3F0",
    "grid": "rgba(31, 41, 55, 0.10)",
    "shadow": "0 1px 3px rgba(16,24,40,0.08)",
    "radius_px": 10,
    # Status colors
    "success": "#10B981",
    "warning": "#F59E0B",
    "danger": "#DC2626",
}

# Chart palette (Dashboard / Service Stats)
CHART_COLORS = ["#8B5CF6", "#06B6D4", "#10B981", "#F59E0B", "#0088FE", "#FF8042"]


@dataclass(frozen=True)
class AppConfig:
    # Hosted Supabase project (tables + auth + edge functions)
    supabase_url: str
    supabase_anon_key: str

    # Only the serverless join function uses the service role key (admin user listing).
    supabase_service_role_key: Optional[str]

    # Image hosting (unsigned upload preset)
    cloudinary_cloud_name: str
    cloudinary_upload_preset: str

    request_timeout: float

    # Defaults
    default_use_mock: bool
    log_level: str

    @property
    def cloudinary_upload_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloudinary_cloud_name}/image/upload"

    @property
    def is_live_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def get_config() -> AppConfig:
    """
    Centralized config: this is the ONLY place env vars are read.
    - Loads `.env` if present (local dev)
    - Works with env var injection on the hosting platform
    """
    load_dotenv(override=False)

    return AppConfig(
        supabase_url=_getenv("SUPABASE_URL") or "",
        supabase_anon_key=_getenv("SUPABASE_ANON_KEY") or "",
        supabase_service_role_key=_getenv("SUPABASE_SERVICE_ROLE_KEY"),
        cloudinary_cloud_name=_getenv("CLOUDINARY_CLOUD_NAME", "dtivjmfgj") or "",
        cloudinary_upload_preset=_getenv("CLOUDINARY_UPLOAD_PRESET", "ZOOJAPP") or "",
        request_timeout=float(_getenv("REQUEST_TIMEOUT_SECONDS", "30") or "30"),
        default_use_mock=(_getenv("USE_MOCK_DATA", "true") or "true").lower() == "true",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
