"""
Supabase client over plain HTTP.

Design rules:
- PostgREST (`/rest/v1`) for tables, GoTrue (`/auth/v1`) for sessions and the admin
  user listing, Edge Functions (`/functions/v1`) for server-side joins.
- Every failure is raised as `DatabaseError` (or `AuthError`); callers in service.py
  turn them into toasts. No env var reads here (config-only).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import requests

from config import AppConfig


logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


class DatabaseError(RuntimeError):
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.status = status

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.code == FOREIGN_KEY_VIOLATION or "violates foreign key constraint" in self.message


class AuthError(DatabaseError):
    pass


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


@dataclass(frozen=True)
class Query:
    """
    One table request, backend-agnostic.

    `filters` is a tuple of groups; pairs inside a group are OR-ed, groups are AND-ed.
    """

    table: str
    action: str = "select"  # "select" | "insert" | "update" | "delete"
    columns: str = "*"
    filters: tuple[tuple[tuple[str, Any], ...], ...] = ()
    order: tuple[tuple[str, bool], ...] = ()
    limit: Optional[int] = None
    count_only: bool = False
    payload: Any = None


@dataclass
class QueryResult:
    data: list[dict] = field(default_factory=list)
    count: Optional[int] = None


class TableQuery:
    """Fluent builder bound to a backend: `backend.table("quizzes").select("*").eq("id", x).execute()`."""

    def __init__(self, backend: "Backend", table: str):
        self._backend = backend
        self._query = Query(table=table)

    def select(self, columns: str = "*", count_only: bool = False) -> "TableQuery":
        self._query = replace(self._query, action="select", columns=columns, count_only=count_only)
        return self

    def insert(self, rows: dict | list[dict]) -> "TableQuery":
        payload = rows if isinstance(rows, list) else [rows]
        self._query = replace(self._query, action="insert", payload=payload)
        return self

    def update(self, values: dict) -> "TableQuery":
        self._query = replace(self._query, action="update", payload=dict(values))
        return self

    def delete(self) -> "TableQuery":
        self._query = replace(self._query, action="delete")
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        self._query = replace(self._query, filters=self._query.filters + (((column, value),),))
        return self

    def or_eq(self, *pairs: tuple[str, Any]) -> "TableQuery":
        self._query = replace(self._query, filters=self._query.filters + (tuple(pairs),))
        return self

    def order(self, column: str, ascending: bool = True) -> "TableQuery":
        self._query = replace(self._query, order=self._query.order + ((column, ascending),))
        return self

    def limit(self, n: int) -> "TableQuery":
        self._query = replace(self._query, limit=n)
        return self

    @property
    def query(self) -> Query:
        return self._query

    def execute(self) -> QueryResult:
        q = self._query
        if q.action in ("update", "delete") and not q.filters:
            raise DatabaseError(f"Refusing to {q.action} every row of '{q.table}' without a filter")
        return self._backend.execute(q)


class Backend:
    """Interface shared by the hosted client and the in-memory backend."""

    source = "unknown"

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    def execute(self, query: Query) -> QueryResult:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    def sign_out(self, session: AuthSession) -> None:
        raise NotImplementedError

    def list_auth_users(self) -> list[dict]:
        raise NotImplementedError

    def invoke(self, function_name: str) -> dict:
        raise NotImplementedError


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filter_expr(column: str, value: Any) -> str:
    if value is None:
        return f"{column}.is.null"
    return f"{column}.eq.{_format_value(value)}"


def build_params(query: Query) -> list[tuple[str, str]]:
    """PostgREST query-string parameters for a `Query` (list: keys may repeat)."""
    params: list[tuple[str, str]] = []
    if query.action == "select":
        params.append(("select", "".join(query.columns.split())))
    for group in query.filters:
        if len(group) == 1:
            column, value = group[0]
            params.append((column, "is.null" if value is None else f"eq.{_format_value(value)}"))
        else:
            params.append(("or", "(" + ",".join(_filter_expr(c, v) for c, v in group) + ")"))
    if query.order:
        params.append(("order", ",".join(f"{c}.{'asc' if asc else 'desc'}" for c, asc in query.order)))
    if query.limit is not None:
        params.append(("limit", str(query.limit)))
    return params


def parse_content_range(header: Optional[str]) -> int:
    """`0-24/573` or `*/573` -> 573."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[-1]
    return int(total) if total.isdigit() else 0


def _error_from_response(resp: requests.Response) -> DatabaseError:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or resp.text
        )
        return DatabaseError(str(message), code=body.get("code"), details=body.get("details"), status=resp.status_code)
    return DatabaseError(resp.text or f"HTTP {resp.status_code}", status=resp.status_code)


class SupabaseClient(Backend):
    """
    Hosted Supabase project.

    Uses the anon key by default; pass `api_key` (service role) for admin calls and
    `access_token` to act as a signed-in admin (row-level security applies).
    """

    source = "supabase"

    def __init__(self, cfg: AppConfig, api_key: Optional[str] = None, access_token: Optional[str] = None):
        self.cfg = cfg
        self._base_url = cfg.supabase_url.rstrip("/")
        self._api_key = api_key or cfg.supabase_anon_key
        self.access_token = access_token

    def is_configured(self) -> bool:
        return bool(self._base_url and self._api_key)

    def _headers(self, extra: Optional[dict[str, str]] = None, bearer: Optional[str] = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {bearer or self.access_token or self._api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
        bearer: Optional[str] = None,
        error_cls: type[DatabaseError] = DatabaseError,
    ) -> requests.Response:
        if not self.is_configured():
            raise error_cls("Missing SUPABASE_URL / SUPABASE_ANON_KEY. Set them in .env or switch to mock data.")

        url = f"{self._base_url}{path}"
        try:
            resp = requests.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(headers, bearer=bearer),
                timeout=self.cfg.request_timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise error_cls(f"Request to {path} failed: {type(e).__name__}") from e

        if resp.status_code >= 300:
            err = _error_from_response(resp)
            logger.warning("%s %s -> %s (%s)", method, path, resp.status_code, err.message)
            if error_cls is DatabaseError:
                raise err
            raise error_cls(err.message, code=err.code, details=err.details, status=err.status)
        return resp

    # --- tables -------------------------------------------------------------------

    def execute(self, query: Query) -> QueryResult:
        path = f"/rest/v1/{query.table}"
        params = build_params(query)

        if query.action == "select":
            if query.count_only:
                resp = self._request("HEAD", path, params=params, headers={"Prefer": "count=exact"})
                return QueryResult(data=[], count=parse_content_range(resp.headers.get("Content-Range")))
            resp = self._request("GET", path, params=params)
            rows = resp.json() or []
            return QueryResult(data=rows, count=len(rows))

        prefer = {"Prefer": "return=representation"}
        if query.action == "insert":
            resp = self._request("POST", path, params=params, json=query.payload, headers=prefer)
        elif query.action == "update":
            resp = self._request("PATCH", path, params=params, json=query.payload, headers=prefer)
        elif query.action == "delete":
            resp = self._request("DELETE", path, params=params, headers=prefer)
        else:
            raise DatabaseError(f"Unknown action '{query.action}'")

        rows = resp.json() if resp.content else []
        return QueryResult(data=rows or [], count=len(rows or []))

    # --- auth ---------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> AuthSession:
        resp = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            error_cls=AuthError,
        )
        data = resp.json()
        user = data.get("user") or {}
        return AuthSession(
            access_token=data["access_token"],
            user_id=user.get("id", ""),
            email=user.get("email", email),
            refresh_token=data.get("refresh_token"),
            expires_at=data.get("expires_at"),
        )

    def sign_out(self, session: AuthSession) -> None:
        self._request("POST", "/auth/v1/logout", bearer=session.access_token, error_cls=AuthError)

    def list_auth_users(self, per_page: int = 1000) -> list[dict]:
        """Admin listing (service role key required); walks every page."""
        users: list[dict] = []
        page = 1
        while True:
            resp = self._request(
                "GET",
                "/auth/v1/admin/users",
                params={"page": page, "per_page": per_page},
                error_cls=AuthError,
            )
            batch = (resp.json() or {}).get("users", [])
            users.extend(batch)
            if len(batch) < per_page:
                return users
            page += 1

    # --- edge functions -----------------------------------------------------------

    def invoke(self, function_name: str) -> dict:
        resp = self._request("POST", f"/functions/v1/{function_name}")
        return resp.json() if resp.content else {}
