"""
Screen-facing operations.

Design rules:
- Views call ONLY functions in this package.
- Reads never raise: they return `DataResult` (empty rows + warning on failure).
- Mutations never raise: they return `ActionResult` (toast title + message).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import pandas as pd

from config import AppConfig
from data import queries, schema
from data.connection import AuthError, AuthSession, Backend, DatabaseError, SupabaseClient
from data.integrity import (
    QUIZ_PROBES,
    QUIZ_THEME_PROBES,
    SERVICE_CATEGORY_PROBES,
    SERVICE_PROVIDER_PROBES,
    SERVICE_SUBCATEGORY_PROBES,
    USER_PROBES,
    DependencyProbe,
    cleanup_user_rows,
    find_blocking_dependency,
)
from data.users import GET_USERS_WITH_EMAILS


logger = logging.getLogger(__name__)

DEFAULT_SCHEDULED_TIME = "08:00:00"


@dataclass(frozen=True)
class DataResult:
    rows: list[dict]
    source: str  # "mock" | "supabase"
    warning: str | None = None

    @property
    def df(self) -> pd.DataFrame:
        """Nested embeds flattened to dotted columns (`quiz_themes.name`)."""
        return pd.json_normalize(self.rows) if self.rows else pd.DataFrame()


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    title: str
    message: str


def get_backend(cfg: AppConfig, use_mock: bool, session: Optional[AuthSession] = None) -> Backend:
    if use_mock:
        from data.memory import get_memory_backend

        return get_memory_backend()
    return SupabaseClient(cfg, access_token=session.access_token if session else None)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _missing(draft: dict, required: tuple[str, ...]) -> Optional[ActionResult]:
    missing = [f for f in required if _blank_to_none(draft.get(f)) is None]
    if missing:
        return ActionResult(False, "Missing information", f"Please fill in: {', '.join(missing)}")
    return None


def _fetch(backend: Backend, what: str, fn: Callable[[], list[dict]]) -> DataResult:
    try:
        return DataResult(rows=fn(), source=backend.source)
    except DatabaseError as e:
        logger.error("Error fetching %s: %s", what, e.message)
        return DataResult(rows=[], source=backend.source, warning=f"Failed to fetch {what}")


def _select(backend: Backend, table: str, columns: str = "*", order: str = "created_at", ascending: bool = False) -> list[dict]:
    return backend.table(table).select(columns).order(order, ascending=ascending).execute().data


def _save(
    backend: Backend,
    table: str,
    values: dict,
    editing_id: Optional[str],
    noun: str,
    created_verb: str = "created",
) -> ActionResult:
    try:
        if editing_id:
            backend.table(table).update(values).eq("id", editing_id).execute()
            verb = "updated"
        else:
            backend.table(table).insert(values).execute()
            verb = created_verb
    except DatabaseError as e:
        logger.error("Error saving %s: %s", noun.lower(), e.message)
        return ActionResult(False, "Error", f"Failed to save {noun.lower()}")
    logger.info("%s %s (%s)", noun, verb, editing_id or "new")
    return ActionResult(True, "Success", f"{noun} {verb} successfully")


def _delete(
    backend: Backend,
    table: str,
    row_id: str,
    noun: str,
    probes: tuple[DependencyProbe, ...] = (),
    fk_message: Optional[str] = None,
    failure_message: Optional[str] = None,
    success_message: Optional[str] = None,
) -> ActionResult:
    try:
        blocking = find_blocking_dependency(backend, probes, row_id)
        if blocking:
            return ActionResult(False, blocking.title, blocking.message)
        backend.table(table).delete().eq("id", row_id).execute()
    except DatabaseError as e:
        if fk_message and e.is_foreign_key_violation:
            return ActionResult(False, f"Cannot Delete {noun}", fk_message)
        logger.error("Error deleting %s %s: %s", noun.lower(), row_id, e.message)
        return ActionResult(False, "Error", failure_message or f"Failed to delete {noun.lower()}")
    logger.info("%s %s deleted", noun, row_id)
    return ActionResult(True, "Success", success_message or f"{noun} deleted successfully")


# --- auth ------------------------------------------------------------------------------


def sign_in(backend: Backend, email: str, password: str) -> tuple[Optional[AuthSession], ActionResult]:
    try:
        session = backend.sign_in(email.strip(), password)
    except AuthError as e:
        logger.warning("Sign-in failed for %s: %s", email, e.message)
        return None, ActionResult(False, "Sign-in failed", e.message or "Invalid login credentials")
    return session, ActionResult(True, "Welcome", f"Signed in as {session.email}")


def sign_out(backend: Backend, session: AuthSession) -> ActionResult:
    try:
        backend.sign_out(session)
    except AuthError as e:
        logger.error("Error signing out: %s", e.message)
        return ActionResult(False, "Error", "Failed to logout")
    return ActionResult(True, "Logged out", "You have been successfully logged out")


# --- users -----------------------------------------------------------------------------


def fetch_users(backend: Backend) -> DataResult:
    """E-mail-joined listing from the edge function; plain profiles if it is unavailable."""
    try:
        payload = backend.invoke(GET_USERS_WITH_EMAILS)
        if payload.get("error"):
            raise DatabaseError(str(payload["error"]))
        return DataResult(rows=payload.get("users", []), source=backend.source)
    except DatabaseError as e:
        logger.warning("%s unavailable, falling back to profiles: %s", GET_USERS_WITH_EMAILS, e.message)

    result = _fetch(backend, "users", lambda: _select(backend, schema.PROFILES))
    if result.warning:
        return result
    rows = [{**p, "email": "N/A", "couple_id": None, "partner_id": None, "couple_status": None} for p in result.rows]
    return DataResult(rows=rows, source=result.source, warning="User e-mails unavailable; showing profiles only")


def update_user(backend: Backend, user_id: str, draft: dict) -> ActionResult:
    if invalid := _missing(draft, ("name",)):
        return invalid
    values = {
        "name": draft["name"].strip(),
        "gender": _blank_to_none(draft.get("gender")),
        "country": _blank_to_none(draft.get("country")),
    }
    return _save(backend, schema.PROFILES, values, user_id, "User")


def delete_user(backend: Backend, user_id: str) -> ActionResult:
    try:
        blocking = find_blocking_dependency(backend, USER_PROBES, user_id)
    except DatabaseError as e:
        logger.error("Error checking couples for %s: %s", user_id, e.message)
        return ActionResult(False, "Error", "Failed to check user relationships")
    if blocking:
        return ActionResult(False, blocking.title, blocking.message)

    report = cleanup_user_rows(backend, user_id)
    if not report.complete:
        logger.warning("Partial cleanup for user %s: %s", user_id, ", ".join(report.failed))

    return _delete(
        backend,
        schema.PROFILES,
        user_id,
        "User",
        fk_message="This user cannot be deleted because they have related data that couldn't be removed. "
        "Please contact support.",
        failure_message="Failed to delete user. Please try again.",
    )


# --- couples ---------------------------------------------------------------------------


def fetch_couples(backend: Backend) -> DataResult:
    return _fetch(backend, "couples", lambda: _select(backend, schema.COUPLES, queries.COUPLES_WITH_PROFILES))


def delete_couple(backend: Backend, couple_id: str) -> ActionResult:
    # ON DELETE CASCADE removes daily questions, answers, chat, calendar and results.
    return _delete(
        backend,
        schema.COUPLES,
        couple_id,
        "Couple",
        failure_message="Failed to delete couple. Please try again.",
        success_message="Couple and all related data deleted successfully",
    )


# --- quiz themes -----------------------------------------------------------------------


def fetch_quiz_themes(backend: Backend) -> DataResult:
    return _fetch(backend, "quiz themes", lambda: _select(backend, schema.QUIZ_THEMES))


def save_quiz_theme(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("name",)):
        return invalid
    values = {"name": draft["name"].strip(), "description": _blank_to_none(draft.get("description"))}
    return _save(backend, schema.QUIZ_THEMES, values, editing_id, "Quiz theme")


def delete_quiz_theme(backend: Backend, theme_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.QUIZ_THEMES,
        theme_id,
        "Quiz theme",
        probes=QUIZ_THEME_PROBES,
        fk_message="This theme is still referenced by quizzes.",
    )


# --- quizzes ---------------------------------------------------------------------------


def fetch_quizzes(backend: Backend) -> DataResult:
    return _fetch(backend, "quizzes", lambda: _select(backend, schema.QUIZZES, queries.QUIZZES_WITH_THEME))


def fetch_theme_options(backend: Backend) -> DataResult:
    return _fetch(backend, "quiz themes", lambda: _select(backend, schema.QUIZ_THEMES, order="name", ascending=True))


def save_quiz(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("title", "theme_id")):
        return invalid
    values = {
        "title": draft["title"].strip(),
        "description": _blank_to_none(draft.get("description")),
        "theme_id": draft["theme_id"],
        "image": _blank_to_none(draft.get("image")),
    }
    return _save(backend, schema.QUIZZES, values, editing_id, "Quiz")


def delete_quiz(backend: Backend, quiz_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.QUIZZES,
        quiz_id,
        "Quiz",
        probes=QUIZ_PROBES,
        failure_message="Failed to delete quiz. It might be referenced by other records.",
    )


# --- quiz questions --------------------------------------------------------------------


def fetch_quiz_questions(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "quiz questions",
        lambda: _select(backend, schema.QUIZ_QUESTIONS, queries.QUIZ_QUESTIONS_WITH_QUIZ, order="ord", ascending=True),
    )


def fetch_quiz_options(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "quizzes",
        lambda: _select(backend, schema.QUIZZES, queries.QUIZZES_WITH_THEME, order="title", ascending=True),
    )


def next_ord(rows: list[dict], quiz_id: Optional[str]) -> int:
    """Next free position inside one quiz (1-based)."""
    ords = [int(r.get("ord") or 0) for r in rows if quiz_id and r.get("quiz_id") == quiz_id]
    return max(ords, default=0) + 1


def form_ord(question: Optional[dict], rows: list[dict], quiz_id: Optional[str]) -> int:
    """Order shown in the edit form; an existing 0 is a real position."""
    if question and question.get("ord") is not None:
        return int(question["ord"])
    return next_ord(rows, quiz_id)


def save_quiz_question(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("content", "quiz_id")):
        return invalid
    try:
        ord_value = int(draft.get("ord") or 0)
    except (TypeError, ValueError):
        return ActionResult(False, "Invalid order", "Order must be a whole number")
    values = {"content": draft["content"].strip(), "quiz_id": draft["quiz_id"], "ord": ord_value}
    return _save(backend, schema.QUIZ_QUESTIONS, values, editing_id, "Quiz question")


def reorder_quiz_question(backend: Backend, question_id: str, new_ord: int) -> ActionResult:
    # One row at a time; siblings are not re-indexed.
    try:
        backend.table(schema.QUIZ_QUESTIONS).update({"ord": int(new_ord)}).eq("id", question_id).execute()
    except DatabaseError as e:
        logger.error("Error reordering question %s: %s", question_id, e.message)
        return ActionResult(False, "Error", "Failed to reorder question")
    return ActionResult(True, "Success", f"Question moved to position {int(new_ord)}")


def delete_quiz_question(backend: Backend, question_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.QUIZ_QUESTIONS,
        question_id,
        "Quiz question",
        fk_message="This question has user answers and cannot be deleted.",
    )


# --- questions -------------------------------------------------------------------------


def fetch_questions(backend: Backend) -> DataResult:
    return _fetch(backend, "questions", lambda: _select(backend, schema.QUESTIONS))


def normalize_time(value: Any) -> str:
    """`time(8, 30)`, `"8:30"` or `""` -> `"08:30:00"` (blank -> default slot)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_SCHEDULED_TIME
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M:%S")
    parts = [int(p) for p in str(value).strip().split(":")]
    while len(parts) < 3:
        parts.append(0)
    hours, minutes, seconds = parts[:3]
    if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        raise ValueError(f"Invalid time '{value}'")
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def save_question(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("content",)):
        return invalid
    try:
        scheduled_time = normalize_time(draft.get("scheduled_time"))
    except ValueError:
        return ActionResult(False, "Invalid time", "Scheduled time must look like HH:MM")
    values = {"content": draft["content"].strip(), "scheduled_time": scheduled_time}
    return _save(backend, schema.QUESTIONS, values, editing_id, "Question")


def delete_question(backend: Backend, question_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.QUESTIONS,
        question_id,
        "Question",
        fk_message="This question is scheduled as a daily question and cannot be deleted. "
        "Please remove its daily questions first.",
    )


# --- daily questions -------------------------------------------------------------------


def fetch_daily_questions(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "daily questions",
        lambda: _select(backend, schema.DAILY_QUESTIONS, queries.DAILY_QUESTIONS_WITH_DETAILS, order="scheduled_for"),
    )


def fetch_question_options(backend: Backend) -> DataResult:
    return _fetch(backend, "questions", lambda: _select(backend, schema.QUESTIONS, order="content", ascending=True))


def fetch_couple_options(backend: Backend) -> DataResult:
    return _fetch(backend, "couples", lambda: _select(backend, schema.COUPLES, queries.COUPLES_WITH_MEMBERS))


def save_daily_question(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("question_id", "scheduled_for")):
        return invalid
    scheduled_for = draft["scheduled_for"]
    values = {
        "question_id": draft["question_id"],
        # No couple -> the question goes to every couple.
        "couple_id": _blank_to_none(draft.get("couple_id")),
        "scheduled_for": scheduled_for.isoformat() if hasattr(scheduled_for, "isoformat") else str(scheduled_for),
    }
    return _save(backend, schema.DAILY_QUESTIONS, values, editing_id, "Daily question", created_verb="scheduled")


def delete_daily_question(backend: Backend, daily_question_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.DAILY_QUESTIONS,
        daily_question_id,
        "Daily question",
        fk_message="This daily question cannot be deleted because it has related answers or notifications. "
        "Please remove related data first.",
    )


# --- service directory -----------------------------------------------------------------


def fetch_service_categories(backend: Backend) -> DataResult:
    return _fetch(backend, "categories", lambda: _select(backend, schema.SERVICE_CATEGORIES))


def save_service_category(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("name",)):
        return invalid
    values = {
        "name": draft["name"].strip(),
        "description": _blank_to_none(draft.get("description")),
        "icon": _blank_to_none(draft.get("icon")),
    }
    return _save(backend, schema.SERVICE_CATEGORIES, values, editing_id, "Category")


def delete_service_category(backend: Backend, category_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.SERVICE_CATEGORIES,
        category_id,
        "Category",
        probes=SERVICE_CATEGORY_PROBES,
        failure_message="Failed to delete category. It might be referenced by other records.",
    )


def fetch_service_subcategories(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "subcategories",
        lambda: _select(backend, schema.SERVICE_SUBCATEGORIES, queries.SUBCATEGORIES_WITH_CATEGORY),
    )


def fetch_category_options(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "categories",
        lambda: _select(backend, schema.SERVICE_CATEGORIES, queries.CATEGORY_OPTIONS, order="name", ascending=True),
    )


def save_service_subcategory(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("name", "category_id")):
        return invalid
    values = {
        "name": draft["name"].strip(),
        "description": _blank_to_none(draft.get("description")),
        "icon": _blank_to_none(draft.get("icon")),
        "category_id": draft["category_id"],
    }
    return _save(backend, schema.SERVICE_SUBCATEGORIES, values, editing_id, "Subcategory")


def delete_service_subcategory(backend: Backend, subcategory_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.SERVICE_SUBCATEGORIES,
        subcategory_id,
        "Subcategory",
        probes=SERVICE_SUBCATEGORY_PROBES,
    )


def fetch_service_providers(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "service providers",
        lambda: _select(backend, schema.SERVICE_PROVIDERS, queries.PROVIDERS_WITH_DIRECTORY),
    )


def fetch_subcategory_options(backend: Backend) -> DataResult:
    return _fetch(
        backend,
        "subcategories",
        lambda: _select(backend, schema.SERVICE_SUBCATEGORIES, queries.SUBCATEGORY_OPTIONS, order="name", ascending=True),
    )


def parse_opening_hours(text: Optional[str]) -> Optional[dict | list]:
    """JSON when it parses, otherwise the raw text under `general`."""
    if not text or not text.strip():
        return None
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"general": text}
    return parsed if isinstance(parsed, (dict, list)) else {"general": text}


def format_opening_hours(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False) if value else ""


def parse_coordinate(value: Any, limit: float) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = float(value)
    if not -limit <= number <= limit:
        raise ValueError(f"{number} is outside [-{limit}, {limit}]")
    return number


def save_service_provider(backend: Backend, draft: dict, editing_id: Optional[str] = None) -> ActionResult:
    if invalid := _missing(draft, ("name", "subcategory_id")):
        return invalid
    try:
        latitude = parse_coordinate(draft.get("latitude"), 90)
        longitude = parse_coordinate(draft.get("longitude"), 180)
    except ValueError:
        return ActionResult(False, "Invalid coordinates", "Latitude must be within ±90 and longitude within ±180")
    values = {
        "name": draft["name"].strip(),
        "description": _blank_to_none(draft.get("description")),
        "subcategory_id": draft["subcategory_id"],
        "address": _blank_to_none(draft.get("address")),
        "city": _blank_to_none(draft.get("city")),
        "phone": _blank_to_none(draft.get("phone")),
        "website": _blank_to_none(draft.get("website")),
        "price_range": _blank_to_none(draft.get("price_range")),
        "image_url": _blank_to_none(draft.get("image_url")),
        "opening_hours": parse_opening_hours(draft.get("opening_hours")),
        "latitude": latitude,
        "longitude": longitude,
    }
    return _save(backend, schema.SERVICE_PROVIDERS, values, editing_id, "Service provider")


def delete_service_provider(backend: Backend, provider_id: str) -> ActionResult:
    return _delete(
        backend,
        schema.SERVICE_PROVIDERS,
        provider_id,
        "Service provider",
        probes=SERVICE_PROVIDER_PROBES,
        failure_message="Failed to delete service provider. It might be referenced by other records.",
    )
