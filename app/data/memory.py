"""
In-memory backend for mock mode and tests.

Speaks the same `Query` contract as the hosted client, including relational
embedding (`alias:table!fkey(cols)`, `!inner`), and enforces the foreign keys in
schema.py the way Postgres does: restrict raises 23503, cascade deletes, set null
clears the column. A delete either applies completely or not at all.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional, Union

from data.connection import AuthError, AuthSession, Backend, DatabaseError, Query, QueryResult
from data.schema import (
    CASCADE,
    COUPLES,
    PROFILES,
    RESTRICT,
    SET_NULL,
    TABLES,
    ForeignKey,
    foreign_keys_from,
    foreign_keys_to,
)
from data.users import GET_USERS_WITH_EMAILS, merge_users_with_emails


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Embed:
    alias: str
    table: str
    fkey: Optional[str]
    inner: bool
    columns: tuple


SelectItem = Union[str, Embed]


def _split_top_level(s: str) -> list[str]:
    parts, depth, buf = [], 0, ""
    for ch in s:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(buf)
            buf = ""
        else:
            buf += ch
    if buf:
        parts.append(buf)
    return parts


def parse_select(columns: str) -> tuple[SelectItem, ...]:
    """`*, user1:profiles!couples_user1_id_fkey(name)` -> ("*", Embed(...))."""
    items: list[SelectItem] = []
    for raw in _split_top_level("".join(columns.split())):
        if "(" not in raw:
            items.append(raw)
            continue
        head, _, rest = raw.partition("(")
        if not rest.endswith(")"):
            raise DatabaseError(f"Malformed select near '{raw}'", code="PGRST100", status=400)
        alias = None
        if ":" in head:
            alias, head = head.split(":", 1)
        table, *hints = head.split("!")
        fkey = next((h for h in hints if h != "inner"), None)
        items.append(Embed(alias or table, table, fkey, "inner" in hints, parse_select(rest[:-1])))
    return tuple(items)


def _same(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return str(a).lower() == str(b).lower()
    return str(a) == str(b)


def _matches(row: dict, filters: tuple) -> bool:
    return all(any(_same(row.get(c), v) for c, v in group) for group in filters)


def _ordered(rows: list[dict], order: tuple) -> list[dict]:
    # PostgREST defaults: nulls last ascending, nulls first descending.
    for column, ascending in reversed(order):
        present = [r for r in rows if r.get(column) is not None]
        missing = [r for r in rows if r.get(column) is None]
        present.sort(key=lambda r: r[column], reverse=not ascending)
        rows = present + missing if ascending else missing + present
    return rows


class InMemoryBackend(Backend):
    source = "mock"

    def __init__(self):
        self._tables: dict[str, list[dict]] = {t: [] for t in TABLES}
        self.auth_users: list[dict] = []
        self._clock: Optional[datetime] = None

    @classmethod
    def seeded(cls, seed: int = 7) -> "InMemoryBackend":
        from data.mock_data import seed_backend

        backend = cls()
        seed_backend(backend, seed=seed)
        return backend

    def rows(self, table: str) -> list[dict]:
        """Raw storage (tests / seeding)."""
        return self._rows(table)

    def _rows(self, table: str) -> list[dict]:
        if table not in self._tables:
            raise DatabaseError(f'relation "public.{table}" does not exist', code="42P01", status=404)
        return self._tables[table]

    def _now(self) -> str:
        # Strictly increasing so created_at ordering is deterministic.
        now = datetime.now(timezone.utc)
        if self._clock is not None and now <= self._clock:
            now = self._clock + timedelta(microseconds=1)
        self._clock = now
        return now.isoformat()

    def _by_id(self, table: str, row_id: Any) -> Optional[dict]:
        for r in self._rows(table):
            if _same(r.get("id"), row_id):
                return r
        return None

    # --- select -------------------------------------------------------------------

    def _relation(self, table: str, embed: Embed) -> tuple[ForeignKey, bool]:
        candidates = [(fk, False) for fk in foreign_keys_from(table) if fk.ref_table == embed.table]
        candidates += [(fk, True) for fk in foreign_keys_to(table) if fk.table == embed.table]
        if embed.fkey:
            candidates = [c for c in candidates if c[0].name == embed.fkey]
        if not candidates:
            raise DatabaseError(
                f"Could not find a relationship between '{table}' and '{embed.table}' in the schema cache",
                code="PGRST200",
                status=400,
            )
        if len(candidates) > 1:
            raise DatabaseError(
                f"Could not embed because more than one relationship was found for '{table}' and '{embed.table}'",
                code="PGRST201",
                status=300,
            )
        return candidates[0]

    def _embed(self, table: str, row: dict, embed: Embed) -> Any:
        fk, to_many = self._relation(table, embed)
        if not to_many:
            ref_id = row.get(fk.column)
            target = self._by_id(embed.table, ref_id) if ref_id is not None else None
            return self._project(embed.table, target, embed.columns) if target else None
        children = [r for r in self._rows(embed.table) if _same(r.get(fk.column), row.get("id"))]
        projected = [self._project(embed.table, c, embed.columns) for c in children]
        return [p for p in projected if p is not None]

    def _project(self, table: str, row: dict, items: tuple) -> Optional[dict]:
        out: dict = {}
        for item in items:
            if isinstance(item, Embed):
                value = self._embed(table, row, item)
                if item.inner and not value:
                    return None
                out[item.alias] = value
            elif item == "*":
                out.update(row)
            else:
                out[item] = row.get(item)
        return out

    def _select(self, query: Query) -> QueryResult:
        rows = [r for r in self._rows(query.table) if _matches(r, query.filters)]
        rows = _ordered(rows, query.order)
        items = parse_select(query.columns)
        projected = [p for p in (self._project(query.table, r, items) for r in rows) if p is not None]
        if query.count_only:
            return QueryResult(data=[], count=len(projected))
        if query.limit is not None:
            projected = projected[: query.limit]
        return QueryResult(data=copy.deepcopy(projected), count=len(projected))

    # --- writes -------------------------------------------------------------------

    def _check_references(self, table: str, row: dict) -> None:
        for fk in foreign_keys_from(table):
            value = row.get(fk.column)
            if value is not None and self._by_id(fk.ref_table, value) is None:
                raise DatabaseError(
                    f'insert or update on table "{table}" violates foreign key constraint "{fk.name}"',
                    code="23503",
                    details=f'Key ({fk.column})=({value}) is not present in table "{fk.ref_table}".',
                    status=409,
                )

    def _insert(self, query: Query) -> QueryResult:
        storage = self._rows(query.table)
        new_rows = []
        for payload in query.payload or []:
            row = dict(payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self._now())
            if self._by_id(query.table, row["id"]) is not None:
                raise DatabaseError(
                    f'duplicate key value violates unique constraint "{query.table}_pkey"', code="23505", status=409
                )
            self._check_references(query.table, row)
            new_rows.append(row)
        storage.extend(new_rows)
        return QueryResult(data=copy.deepcopy(new_rows), count=len(new_rows))

    def _update(self, query: Query) -> QueryResult:
        matched = [r for r in self._rows(query.table) if _matches(r, query.filters)]
        for r in matched:
            self._check_references(query.table, {**r, **query.payload})
        for r in matched:
            r.update(query.payload)
        return QueryResult(data=copy.deepcopy(matched), count=len(matched))

    def _delete_closure(self, table: str, ids: set) -> dict[str, set]:
        plan: dict[str, set] = {}
        stack = [(table, set(ids))]
        while stack:
            t, batch = stack.pop()
            new = batch - plan.setdefault(t, set())
            if not new:
                continue
            plan[t] |= new
            for fk in foreign_keys_to(t):
                if fk.on_delete != CASCADE:
                    continue
                child_ids = {r["id"] for r in self._rows(fk.table) if r.get(fk.column) in new}
                if child_ids:
                    stack.append((fk.table, child_ids))
        return plan

    def _delete(self, query: Query) -> QueryResult:
        storage = self._rows(query.table)
        matched = [r for r in storage if _matches(r, query.filters)]
        if not matched:
            return QueryResult(data=[], count=0)

        plan = self._delete_closure(query.table, {r["id"] for r in matched})

        for t, ids in plan.items():
            for fk in foreign_keys_to(t):
                if fk.on_delete != RESTRICT:
                    continue
                doomed = plan.get(fk.table, set())
                for r in self._rows(fk.table):
                    if r.get(fk.column) in ids and r["id"] not in doomed:
                        raise DatabaseError(
                            f'update or delete on table "{t}" violates foreign key constraint '
                            f'"{fk.name}" on table "{fk.table}"',
                            code="23503",
                            details=f'Key (id)=({r[fk.column]}) is still referenced from table "{fk.table}".',
                            status=409,
                        )

        for t, ids in plan.items():
            for fk in foreign_keys_to(t):
                if fk.on_delete != SET_NULL:
                    continue
                for r in self._rows(fk.table):
                    if r.get(fk.column) in ids:
                        r[fk.column] = None

        for t, ids in plan.items():
            if t != query.table:
                logger.debug("delete on %s cascades to %s (%d rows)", query.table, t, len(ids))
            self._tables[t] = [r for r in self._rows(t) if r["id"] not in ids]

        return QueryResult(data=copy.deepcopy(matched), count=len(matched))

    def execute(self, query: Query) -> QueryResult:
        if query.action == "select":
            return self._select(query)
        if query.action == "insert":
            return self._insert(query)
        if query.action == "update":
            return self._update(query)
        if query.action == "delete":
            return self._delete(query)
        raise DatabaseError(f"Unknown action '{query.action}'")

    # --- auth + functions ---------------------------------------------------------

    def sign_in(self, email: str, password: str) -> AuthSession:
        # Mock mode accepts any non-empty credentials.
        if not email or not password:
            raise AuthError("Invalid login credentials", code="invalid_credentials", status=400)
        user = next((u for u in self.auth_users if u.get("email") == email), None)
        return AuthSession(
            access_token=f"mock-{uuid.uuid4().hex}",
            user_id=user["id"] if user else str(uuid.uuid4()),
            email=email,
        )

    def sign_out(self, session: AuthSession) -> None:
        logger.info("mock sign-out for %s", session.email)

    def list_auth_users(self) -> list[dict]:
        return copy.deepcopy(self.auth_users)

    def invoke(self, function_name: str) -> dict:
        if function_name != GET_USERS_WITH_EMAILS:
            raise DatabaseError(f"Function '{function_name}' not found", status=404)
        profiles = self.table(PROFILES).select("*").order("created_at", ascending=False).execute().data
        couples = self.table(COUPLES).select("*").execute().data
        return {"users": merge_users_with_emails(profiles, couples, self.list_auth_users())}


@lru_cache(maxsize=1)
def get_memory_backend() -> InMemoryBackend:
    """Process-wide mock backend so edits survive Streamlit reruns."""
    return InMemoryBackend.seeded()
