from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from faker import Faker

from data import schema

if TYPE_CHECKING:
    from data.memory import InMemoryBackend


fake = Faker()


COUNTRIES = ["France", "Morocco", "Tunisia", "Algeria", "Belgium", "Canada", "Senegal"]
INTERESTS = ["travel", "cooking", "movies", "music", "hiking", "reading", "sport", "gaming"]

QUIZ_CATALOG = {
    "Love Languages": {
        "How We Show Love": [
            "I feel most loved when my partner spends uninterrupted time with me.",
            "Small gifts matter more to me than big gestures.",
            "Words of affirmation make my day.",
            "Physical touch helps me feel connected.",
        ],
        "Acts of Service": [
            "I notice when my partner helps with chores.",
            "Planning things for each other is important to me.",
            "I prefer actions over words.",
        ],
    },
    "Finances": {
        "Money Talk": [
            "We agree on how much to save each month.",
            "I am comfortable talking about debt.",
            "Big purchases should be decided together.",
            "We should share one bank account.",
        ],
    },
    "Future Plans": {
        "Where Are We Going": [
            "We agree on where we want to live in five years.",
            "We have talked about having children.",
            "Career moves should be decided as a couple.",
        ],
        "Dream Trips": [
            "I would rather travel far once than close often.",
            "Adventure beats relaxation on holiday.",
        ],
    },
    "Fun & Games": {},
}

DAILY_PROMPTS = [
    "What made you smile today?",
    "What is one thing you appreciate about your partner?",
    "Where would you like to go on your next date?",
    "What song reminds you of us?",
    "What is a small habit of your partner you love?",
    "What is something new you would like to try together?",
    "What was the best moment of your week?",
    "What is one goal you want to reach this year?",
    "What do you miss most when we are apart?",
    "Which memory of us do you replay the most?",
]

SERVICE_DIRECTORY = {
    ("Restaurants", "🍽️"): {
        ("Romantic dinner", "🕯️"): ["Le Petit Jardin", "Dar Nour"],
        ("Brunch", "🥐"): ["Sunday Table", "Café Lumière"],
    },
    ("Wellness", "🧘"): {
        ("Couples massage", "💆"): ["Hammam Zaytouna", "Oasis Spa"],
        ("Yoga", "🧘‍♀️"): ["Studio Souffle"],
    },
    ("Activities", "🎯"): {
        ("Escape rooms", "🔐"): ["Lock & Key", "The Vault"],
        ("Cooking classes", "👩‍🍳"): ["Atelier Saveurs"],
        ("Outdoors", "🏕️"): ["Atlas Treks"],
    },
    ("Gifts", "🎁"): {
        ("Flowers", "💐"): ["Fleurs de Lune", "Bouquet Express"],
    },
}


def _ts(days_ago: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days_ago)).isoformat()


def _insert(backend: "InMemoryBackend", table: str, rows: list[dict]) -> list[dict]:
    return backend.table(table).insert(rows).execute().data


def seed_backend(backend: "InMemoryBackend", seed: int = 7) -> None:
    """Populate a fresh in-memory backend with a small, consistent couples-app dataset."""
    random.seed(seed)
    Faker.seed(seed)

    # --- users + auth accounts ---
    profiles = []
    for i in range(24):
        gender = random.choice(["male", "female", "other", None])
        first = fake.first_name_male() if gender == "male" else fake.first_name_female() if gender == "female" else fake.first_name()
        profiles.append(
            {
                "name": f"{first} {fake.last_name()}",
                "gender": gender,
                "country": random.choice(COUNTRIES + [None]),
                "interests": random.sample(INTERESTS, k=random.randint(0, 3)),
                "invite_code": fake.bothify("ZJ-####-??").upper(),
                "completed": random.random() < 0.75,
                "mood": random.choice(["happy", "calm", "tired", "excited", None]),
                "birth_date": fake.date_of_birth(minimum_age=19, maximum_age=45).isoformat(),
                "created_at": _ts(120 - i * 4.5),
            }
        )
    profiles = _insert(backend, schema.PROFILES, profiles)
    # A couple of profiles without an auth account show up as "N/A" in the Users screen.
    backend.auth_users.extend(
        {"id": p["id"], "email": fake.unique.email()} for p in profiles[:-2]
    )

    # --- couples (the last two are pending: no user2 yet) ---
    couples = []
    for i in range(9):
        u1 = profiles[2 * i]
        u2 = profiles[2 * i + 1] if i < 7 else None
        couples.append(
            {
                "user1_id": u1["id"],
                "user2_id": u2["id"] if u2 else None,
                "status": "active" if u2 else "pending",
                "created_at": _ts(100 - i * 8),
            }
        )
    couples = _insert(backend, schema.COUPLES, couples)

    # --- quiz content ---
    quiz_questions = []
    quizzes = []
    for t_idx, (theme_name, theme_quizzes) in enumerate(QUIZ_CATALOG.items()):
        theme = _insert(
            backend,
            schema.QUIZ_THEMES,
            [{"name": theme_name, "description": fake.sentence(nb_words=8), "created_at": _ts(90 - t_idx)}],
        )[0]
        for q_idx, (title, prompts) in enumerate(theme_quizzes.items()):
            quiz = _insert(
                backend,
                schema.QUIZZES,
                [
                    {
                        "theme_id": theme["id"],
                        "title": title,
                        "description": fake.sentence(nb_words=10),
                        "image": None,
                        "created_at": _ts(85 - t_idx * 3 - q_idx),
                    }
                ],
            )[0]
            quizzes.append(quiz)
            quiz_questions.extend(
                _insert(
                    backend,
                    schema.QUIZ_QUESTIONS,
                    [{"quiz_id": quiz["id"], "content": p, "ord": n + 1, "created_at": _ts(80)} for n, p in enumerate(prompts)],
                )
            )

    # Answers for the first three couples on the first quiz.
    first_quiz = quizzes[0]
    answers = []
    for couple in couples[:3]:
        for uid in (couple["user1_id"], couple["user2_id"]):
            for qq in (q for q in quiz_questions if q["quiz_id"] == first_quiz["id"]):
                answers.append(
                    {
                        "quiz_id": first_quiz["id"],
                        "question_id": qq["id"],
                        "couple_id": couple["id"],
                        "user_id": uid,
                        "answer_value": random.randint(1, 5),
                        "answered_at": _ts(random.uniform(1, 30)),
                    }
                )
        _insert(
            backend,
            schema.QUIZ_RESULTS,
            [
                {
                    "quiz_id": first_quiz["id"],
                    "couple_id": couple["id"],
                    "first_answered_by": couple["user1_id"],
                    "score": random.randint(40, 100),
                    "user1_percent": random.randint(30, 100),
                    "user2_percent": random.randint(30, 100),
                    "strengths": [],
                    "weaknesses": [],
                    "computed_at": _ts(1),
                }
            ],
        )
    _insert(backend, schema.QUIZ_ANSWERS, answers)

    # --- daily questions ---
    questions = _insert(
        backend,
        schema.QUESTIONS,
        [
            {"content": p, "scheduled_time": random.choice(["08:00:00", "12:30:00", "20:00:00"]), "created_at": _ts(70 - n)}
            for n, p in enumerate(DAILY_PROMPTS)
        ],
    )
    today = date.today()
    daily = []
    for n in range(15):
        couple = random.choice(couples + [None, None])
        daily.append(
            {
                "question_id": random.choice(questions)["id"],
                "couple_id": couple["id"] if couple else None,
                "scheduled_for": (today + timedelta(days=n - 7)).isoformat(),
                "created_at": _ts(20 - n),
            }
        )
    daily = _insert(backend, schema.DAILY_QUESTIONS, daily)

    # Answers + chat on the couple-scoped daily questions that are in the past.
    for dq in daily[:7]:
        if not dq["couple_id"]:
            continue
        couple = next(c for c in couples if c["id"] == dq["couple_id"])
        if not couple["user2_id"]:
            continue
        _insert(
            backend,
            schema.ANSWERS,
            [{"daily_question_id": dq["id"], "user_id": couple["user1_id"], "answer_text": fake.sentence()}],
        )
        thread = _insert(
            backend, schema.CHAT_THREADS, [{"couple_id": couple["id"], "daily_question_id": dq["id"]}]
        )[0]
        _insert(
            backend,
            schema.CHAT_MESSAGES,
            [
                {"thread_id": thread["id"], "sender_id": uid, "message_text": fake.sentence()}
                for uid in (couple["user1_id"], couple["user2_id"])
            ],
        )

    for couple in couples[:5]:
        _insert(
            backend,
            schema.CALENDAR_EVENTS,
            [
                {
                    "couple_id": couple["id"],
                    "title": random.choice(["Anniversary dinner", "Movie night", "Weekend trip"]),
                    "event_date": (today + timedelta(days=random.randint(1, 60))).isoformat(),
                }
            ],
        )

    _insert(
        backend,
        schema.NOTIFICATIONS,
        [
            {
                "user_id": p["id"],
                "type": "daily_question",
                "title": "New daily question",
                "message": "Your daily question is ready.",
                "is_read": random.random() < 0.5,
            }
            for p in profiles[:10]
        ],
    )

    # --- service directory + usage log ---
    providers = []
    for c_idx, ((cat_name, cat_icon), subs) in enumerate(SERVICE_DIRECTORY.items()):
        category = _insert(
            backend,
            schema.SERVICE_CATEGORIES,
            [{"name": cat_name, "icon": cat_icon, "description": fake.sentence(nb_words=6), "created_at": _ts(60 - c_idx)}],
        )[0]
        for s_idx, ((sub_name, sub_icon), names) in enumerate(subs.items()):
            sub = _insert(
                backend,
                schema.SERVICE_SUBCATEGORIES,
                [
                    {
                        "category_id": category["id"],
                        "name": sub_name,
                        "icon": sub_icon,
                        "description": fake.sentence(nb_words=6),
                        "created_at": _ts(55 - c_idx * 3 - s_idx),
                    }
                ],
            )[0]
            for name in names:
                providers.extend(
                    _insert(
                        backend,
                        schema.SERVICE_PROVIDERS,
                        [
                            {
                                "subcategory_id": sub["id"],
                                "name": name,
                                "description": fake.sentence(nb_words=12),
                                "address": fake.street_address(),
                                "city": fake.city(),
                                "phone": fake.phone_number(),
                                "website": f"https://{fake.domain_name()}",
                                "price_range": random.choice(["€", "€€", "€€€"]),
                                "image_url": None,
                                "opening_hours": {"mon-fri": "10:00-22:00", "sat-sun": "11:00-23:00"},
                                "latitude": round(random.uniform(33.5, 36.8), 6),
                                "longitude": round(random.uniform(-7.6, 10.2), 6),
                                "created_at": _ts(50 - len(providers)),
                            }
                        ],
                    )
                )

    # Every provider but the last gets at least one view; the last stays deletable.
    stats = []
    viewed = providers[:-1]
    weights = [random.uniform(0.2, 3.0) for _ in viewed]
    for n in range(320):
        provider = viewed[n] if n < len(viewed) else random.choices(viewed, weights=weights)[0]
        viewer = random.choice(profiles + [None])
        stats.append(
            {
                "service_provider_id": provider["id"],
                "user_id": viewer["id"] if viewer else None,
                "accessed_at": _ts(random.uniform(0, 45)),
            }
        )
    _insert(backend, schema.SERVICE_STATS, stats)
