"""
Table names and foreign keys of the hosted schema.

The in-memory backend enforces these exactly like Postgres does (restrict / cascade /
set null); the service layer uses the same names for its dependency probes.
"""

from __future__ import annotations

from dataclasses import dataclass


PROFILES = "profiles"
COUPLES = "couples"
QUESTIONS = "questions"
DAILY_QUESTIONS = "daily_questions"
ANSWERS = "answers"
QUIZ_THEMES = "quiz_themes"
QUIZZES = "quizzes"
QUIZ_QUESTIONS = "quiz_questions"
QUIZ_ANSWERS = "quiz_answers"
QUIZ_RESULTS = "quiz_results"
QUIZ_INVITES = "quiz_invites"
CHAT_THREADS = "chat_threads"
CHAT_MESSAGES = "chat_messages"
CHAT_VIEWERS = "chat_viewers"
CALENDAR_EVENTS = "calendar_events"
CALENDAR_SOUVENIRS = "calendar_souvenirs"
CALENDAR_TODOS = "calendar_todos"
NOTIFICATIONS = "notifications"
NOTIFICATION_SETTINGS = "notification_settings"
PULSES = "pulses"
GAME_STATS = "game_stats"
SERVICE_CATEGORIES = "service_categories"
SERVICE_SUBCATEGORIES = "service_subcategories"
SERVICE_PROVIDERS = "service_providers"
SERVICE_STATS = "service_stats"

TABLES = (
    PROFILES,
    COUPLES,
    QUESTIONS,
    DAILY_QUESTIONS,
    ANSWERS,
    QUIZ_THEMES,
    QUIZZES,
    QUIZ_QUESTIONS,
    QUIZ_ANSWERS,
    QUIZ_RESULTS,
    QUIZ_INVITES,
    CHAT_THREADS,
    CHAT_MESSAGES,
    CHAT_VIEWERS,
    CALENDAR_EVENTS,
    CALENDAR_SOUVENIRS,
    CALENDAR_TODOS,
    NOTIFICATIONS,
    NOTIFICATION_SETTINGS,
    PULSES,
    GAME_STATS,
    SERVICE_CATEGORIES,
    SERVICE_SUBCATEGORIES,
    SERVICE_PROVIDERS,
    SERVICE_STATS,
)

RESTRICT = "restrict"
CASCADE = "cascade"
SET_NULL = "set null"


@dataclass(frozen=True)
class ForeignKey:
    name: str
    table: str
    column: str
    ref_table: str
    on_delete: str = RESTRICT


def _fk(table: str, column: str, ref_table: str, on_delete: str = RESTRICT) -> ForeignKey:
    return ForeignKey(f"{table}_{column}_fkey", table, column, ref_table, on_delete)


FOREIGN_KEYS = (
    _fk(ANSWERS, "daily_question_id", DAILY_QUESTIONS, CASCADE),
    _fk(ANSWERS, "user_id", PROFILES),
    _fk(CALENDAR_EVENTS, "couple_id", COUPLES, CASCADE),
    _fk(CALENDAR_SOUVENIRS, "couple_id", COUPLES, CASCADE),
    _fk(CALENDAR_TODOS, "couple_id", COUPLES, CASCADE),
    _fk(CHAT_MESSAGES, "sender_id", PROFILES),
    _fk(CHAT_MESSAGES, "thread_id", CHAT_THREADS, CASCADE),
    _fk(CHAT_THREADS, "couple_id", COUPLES, CASCADE),
    _fk(CHAT_THREADS, "daily_question_id", DAILY_QUESTIONS, CASCADE),
    _fk(COUPLES, "user1_id", PROFILES),
    _fk(COUPLES, "user2_id", PROFILES),
    _fk(DAILY_QUESTIONS, "couple_id", COUPLES, CASCADE),
    _fk(DAILY_QUESTIONS, "question_id", QUESTIONS),
    _fk(QUIZ_ANSWERS, "couple_id", COUPLES, CASCADE),
    _fk(QUIZ_ANSWERS, "question_id", QUIZ_QUESTIONS),
    _fk(QUIZ_ANSWERS, "quiz_id", QUIZZES),
    _fk(QUIZ_ANSWERS, "user_id", PROFILES),
    _fk(QUIZ_QUESTIONS, "quiz_id", QUIZZES),
    _fk(QUIZ_RESULTS, "couple_id", COUPLES, CASCADE),
    _fk(QUIZ_RESULTS, "first_answered_by", PROFILES, SET_NULL),
    _fk(QUIZ_RESULTS, "quiz_id", QUIZZES),
    _fk(QUIZZES, "theme_id", QUIZ_THEMES),
    _fk(SERVICE_SUBCATEGORIES, "category_id", SERVICE_CATEGORIES),
    _fk(SERVICE_PROVIDERS, "subcategory_id", SERVICE_SUBCATEGORIES),
    _fk(SERVICE_STATS, "service_provider_id", SERVICE_PROVIDERS),
)


def foreign_keys_from(table: str) -> list[ForeignKey]:
    return [fk for fk in FOREIGN_KEYS if fk.table == table]


def foreign_keys_to(table: str) -> list[ForeignKey]:
    return [fk for fk in FOREIGN_KEYS if fk.ref_table == table]
