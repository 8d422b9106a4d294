"""
Referential-integrity helpers for the delete flows.

Two mechanisms:
- `find_blocking_dependency`: existence probes run before a delete; the first probe
  that finds a child row blocks the delete with its own message.
- `cleanup_user_rows`: best-effort removal of user-owned rows before a profile is
  deleted. Each step is independent; failures are logged and reported, never rolled
  back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from data import schema
from data.connection import Backend, DatabaseError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyProbe:
    table: str
    columns: tuple[str, ...]
    title: str
    message: str


def find_blocking_dependency(backend: Backend, probes: tuple[DependencyProbe, ...], row_id: Any) -> Optional[DependencyProbe]:
    for probe in probes:
        q = backend.table(probe.table).select("id")
        if len(probe.columns) == 1:
            q = q.eq(probe.columns[0], row_id)
        else:
            q = q.or_eq(*[(c, row_id) for c in probe.columns])
        if q.limit(1).execute().data:
            return probe
    return None


QUIZ_THEME_PROBES = (
    DependencyProbe(
        schema.QUIZZES,
        ("theme_id",),
        "Cannot Delete Theme",
        "This theme has quizzes and cannot be deleted. Please remove all quizzes first.",
    ),
)

QUIZ_PROBES = (
    DependencyProbe(
        schema.QUIZ_QUESTIONS,
        ("quiz_id",),
        "Cannot Delete Quiz",
        "This quiz has questions and cannot be deleted. Please remove all questions first.",
    ),
    DependencyProbe(
        schema.QUIZ_ANSWERS,
        ("quiz_id",),
        "Cannot Delete Quiz",
        "This quiz has user responses and cannot be deleted to preserve data integrity.",
    ),
)

SERVICE_CATEGORY_PROBES = (
    DependencyProbe(
        schema.SERVICE_SUBCATEGORIES,
        ("category_id",),
        "Cannot Delete Category",
        "This category has subcategories and cannot be deleted. Please remove all subcategories first.",
    ),
)

SERVICE_SUBCATEGORY_PROBES = (
    DependencyProbe(
        schema.SERVICE_PROVIDERS,
        ("subcategory_id",),
        "Cannot Delete Subcategory",
        "This subcategory has service providers and cannot be deleted. Please remove all providers first.",
    ),
)

SERVICE_PROVIDER_PROBES = (
    DependencyProbe(
        schema.SERVICE_STATS,
        ("service_provider_id",),
        "Cannot Delete Service Provider",
        "This service provider has usage statistics and cannot be deleted. You can edit it instead.",
    ),
)

USER_PROBES = (
    DependencyProbe(
        schema.COUPLES,
        ("user1_id", "user2_id"),
        "Cannot Delete User",
        "This user has couple relationships. Please delete the couple relationship first "
        "in the Couples section, then delete the user.",
    ),
)

# Rows keyed by `user_id`, then rows referencing the user under another column.
USER_OWNED_TABLES = (
    schema.GAME_STATS,
    schema.QUIZ_ANSWERS,
    schema.PULSES,
    schema.ANSWERS,
    schema.CHAT_MESSAGES,
    schema.SERVICE_STATS,
    schema.NOTIFICATIONS,
)

USER_REFERENCES = (
    (schema.PULSES, ("sender_id", "receiver_id")),
    (schema.GAME_STATS, ("player1_id", "player2_id")),
    (schema.CHAT_MESSAGES, ("sender_id",)),
    (schema.CHAT_VIEWERS, ("user_id",)),
)


@dataclass
class CleanupReport:
    cleaned: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed


def cleanup_user_rows(backend: Backend, user_id: str) -> CleanupReport:
    report = CleanupReport()
    steps = [(t, ("user_id",)) for t in USER_OWNED_TABLES] + list(USER_REFERENCES)
    for table, columns in steps:
        label = f"{table}.{'/'.join(columns)}"
        q = backend.table(table).delete()
        if len(columns) == 1:
            q = q.eq(columns[0], user_id)
        else:
            q = q.or_eq(*[(c, user_id) for c in columns])
        try:
            q.execute()
        except DatabaseError as e:
            logger.warning("Error deleting from %s: %s", label, e.message)
            report.failed[label] = e.message
            continue
        report.cleaned.append(label)
    return report
