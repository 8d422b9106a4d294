"""
`get-users-with-emails` serverless function.

Joins profiles with the auth account e-mails (admin listing, service role key) and
each profile's couple, so the admin console can show e-mails without holding the
service role key itself.

Run locally:
    uvicorn get_users_with_emails:app --app-dir functions --port 54321
"""

from __future__ import annotations

import logging
import os
import sys

# Same flat import layout as the Streamlit app.
APP_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "app"))
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from fastapi import Depends, FastAPI, Request  # noqa: E402
from fastapi.responses import JSONResponse, PlainTextResponse  # noqa: E402

from config import get_config  # noqa: E402
from data import schema  # noqa: E402
from data.connection import Backend, DatabaseError, SupabaseClient  # noqa: E402
from data.users import GET_USERS_WITH_EMAILS, merge_users_with_emails  # noqa: E402


logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def get_admin_backend() -> Backend:
    cfg = get_config()
    if not cfg.supabase_service_role_key:
        raise DatabaseError("Missing SUPABASE_SERVICE_ROLE_KEY")
    return SupabaseClient(cfg, api_key=cfg.supabase_service_role_key)


def list_users_with_emails(backend: Backend) -> list[dict]:
    profiles = backend.table(schema.PROFILES).select("*").order("created_at", ascending=False).execute().data
    couples = backend.table(schema.COUPLES).select("*").execute().data
    return merge_users_with_emails(profiles, couples, backend.list_auth_users())


def _backend_or_error() -> Backend | DatabaseError:
    # Resolved inside the handler so a missing key is reported as `{"error": ...}`.
    try:
        return get_admin_backend()
    except DatabaseError as e:
        return e


def create_app() -> FastAPI:
    app = FastAPI(title=GET_USERS_WITH_EMAILS, version="0.1.0")

    @app.api_route("/", methods=["GET", "POST", "OPTIONS"])
    def get_users_with_emails(request: Request, backend=Depends(_backend_or_error)):
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=CORS_HEADERS)
        try:
            if isinstance(backend, DatabaseError):
                raise backend
            users = list_users_with_emails(backend)
        except DatabaseError as e:
            logger.error("%s failed: %s", GET_USERS_WITH_EMAILS, e.message)
            return JSONResponse({"error": e.message}, status_code=400, headers=CORS_HEADERS)
        except ValueError as e:
            logger.error("%s got an unreadable upstream response: %s", GET_USERS_WITH_EMAILS, e)
            return JSONResponse({"error": str(e)}, status_code=400, headers=CORS_HEADERS)
        logger.info("%s returned %d users", GET_USERS_WITH_EMAILS, len(users))
        return JSONResponse({"users": users}, headers=CORS_HEADERS)

    return app


app = create_app()
