"""
Read-only aggregates: dashboard counters and service usage statistics.

Both are recomputed from scratch on every render.
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from data import queries, schema
from data.connection import Backend, DatabaseError


logger = logging.getLogger(__name__)


DASHBOARD_TABLES = {
    "total_users": schema.PROFILES,
    "total_couples": schema.COUPLES,
    "total_quizzes": schema.QUIZZES,
    "total_questions": schema.QUESTIONS,
    "total_daily_questions": schema.DAILY_QUESTIONS,
    "total_answers": schema.QUIZ_ANSWERS,
}


@dataclass(frozen=True)
class DashboardStats:
    total_users: int = 0
    total_couples: int = 0
    total_quizzes: int = 0
    total_questions: int = 0
    total_daily_questions: int = 0
    total_answers: int = 0
    warning: Optional[str] = None

    @property
    def avg_answers_per_user(self) -> float:
        return self.total_answers / self.total_users if self.total_users > 0 else 0.0

    @property
    def quiz_completion_rate(self) -> float:
        """Share of (quiz, user) pairs answered; 0 when there are no quizzes or users."""
        if self.total_quizzes <= 0 or self.total_users <= 0:
            return 0.0
        return self.total_answers / (self.total_quizzes * self.total_users)

    def overview(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {"name": "Users", "value": self.total_users},
                {"name": "Couples", "value": self.total_couples},
                {"name": "Quizzes", "value": self.total_quizzes},
                {"name": "Questions", "value": self.total_questions},
            ]
        )


def _count(backend: Backend, table: str) -> int:
    return backend.table(table).select("id", count_only=True).execute().count or 0


def fetch_dashboard_stats(backend: Backend) -> DashboardStats:
    """All counters are requested together and awaited together."""
    with ThreadPoolExecutor(max_workers=len(DASHBOARD_TABLES)) as pool:
        futures = {key: pool.submit(_count, backend, table) for key, table in DASHBOARD_TABLES.items()}

    counts: dict[str, int] = {}
    failed = []
    for key, fut in futures.items():
        try:
            counts[key] = fut.result()
        except DatabaseError as e:
            logger.error("Error counting %s: %s", DASHBOARD_TABLES[key], e.message)
            counts[key] = 0
            failed.append(DASHBOARD_TABLES[key])

    warning = f"Failed to fetch dashboard stats for: {', '.join(failed)}" if failed else None
    return DashboardStats(**counts, warning=warning)


PROVIDER_COLUMNS = [
    "provider_id",
    "provider_name",
    "category_name",
    "subcategory_name",
    "total_views",
    "unique_users",
    "latest_access",
]
CATEGORY_COLUMNS = ["category", "views", "providers"]


@dataclass(frozen=True)
class ServiceUsage:
    providers: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=PROVIDER_COLUMNS))
    categories: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=CATEGORY_COLUMNS))
    warning: Optional[str] = None

    @property
    def total_views(self) -> int:
        return int(self.providers["total_views"].sum()) if len(self.providers) else 0

    @property
    def total_providers(self) -> int:
        """Providers with at least one recorded view."""
        return len(self.providers)


def _category_name(provider: dict) -> str:
    sub = provider.get("service_subcategories") or {}
    return (sub.get("service_categories") or {}).get("name") or "Unknown"


def aggregate_service_usage(stat_rows: list[dict], provider_rows: list[dict]) -> ServiceUsage:
    """
    Access-log rows (joined to provider/subcategory/category) -> per-provider and
    per-category tables, both sorted by views descending (ties keep first-seen order).
    """
    records = []
    for stat in stat_rows:
        provider = stat.get("service_providers")
        if not provider:
            continue
        sub = provider.get("service_subcategories") or {}
        records.append(
            {
                "provider_id": stat.get("service_provider_id"),
                "provider_name": provider.get("name"),
                "category_name": _category_name(provider),
                "subcategory_name": sub.get("name") or "Unknown",
                "user_id": stat.get("user_id"),
                "accessed_at": stat.get("accessed_at"),
            }
        )
    if not records:
        return ServiceUsage()

    df = pd.DataFrame(records)

    providers = (
        df.groupby("provider_id", sort=False)
        .agg(
            provider_name=("provider_name", "first"),
            category_name=("category_name", "first"),
            subcategory_name=("subcategory_name", "first"),
            total_views=("accessed_at", "size"),
            unique_users=("user_id", "nunique"),
            latest_access=("accessed_at", "max"),
        )
        .reset_index()
        .sort_values("total_views", ascending=False, kind="stable")
        .reset_index(drop=True)
    )

    provider_counts = Counter(_category_name(p) for p in provider_rows)
    categories = (
        df.groupby("category_name", sort=False)
        .size()
        .rename("views")
        .reset_index()
        .rename(columns={"category_name": "category"})
    )
    categories["providers"] = categories["category"].map(lambda c: provider_counts.get(c, 0)).astype(int)
    categories = categories.sort_values("views", ascending=False, kind="stable").reset_index(drop=True)

    return ServiceUsage(providers=providers[PROVIDER_COLUMNS], categories=categories[CATEGORY_COLUMNS])


def fetch_service_usage(backend: Backend) -> ServiceUsage:
    try:
        stat_rows = backend.table(schema.SERVICE_STATS).select(queries.SERVICE_STATS_WITH_DIRECTORY).execute().data
    except DatabaseError as e:
        logger.error("Error fetching stats: %s", e.message)
        return ServiceUsage(warning="Failed to fetch service statistics")

    try:
        provider_rows = backend.table(schema.SERVICE_PROVIDERS).select(queries.PROVIDER_CATEGORIES).execute().data
    except DatabaseError as e:
        # Views still render; provider counts per category read 0.
        logger.warning("Error fetching provider counts: %s", e.message)
        provider_rows = []

    return aggregate_service_usage(stat_rows, provider_rows)
