import unittest
from datetime import date, time
from unittest import mock

from data import schema, service
from data.connection import AuthSession, DatabaseError, QueryResult
from data.memory import InMemoryBackend


class ServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryBackend()

    def insert(self, table, **values):
        return self.db.table(table).insert(values).execute().data[0]


class QuizThemeTests(ServiceTestCase):
    def test_theme_delete_is_refused_once_a_quiz_uses_it(self):
        self.assertTrue(service.save_quiz_theme(self.db, {"name": "Communication", "description": ""}).ok)
        theme = service.fetch_quiz_themes(self.db).rows[0]
        self.assertIsNone(theme["description"])

        free = self.insert(schema.QUIZ_THEMES, name="Spare")
        self.assertTrue(service.delete_quiz_theme(self.db, free["id"]).ok)

        result = service.save_quiz(self.db, {"title": "Trust Basics", "theme_id": theme["id"]})
        self.assertTrue(result.ok)
        self.assertEqual(result.message, "Quiz created successfully")

        refused = service.delete_quiz_theme(self.db, theme["id"])
        self.assertFalse(refused.ok)
        self.assertEqual(refused.title, "Cannot Delete Theme")
        self.assertEqual(len(service.fetch_quiz_themes(self.db).rows), 1)

    def test_missing_name_is_rejected_before_writing(self):
        result = service.save_quiz_theme(self.db, {"name": "   "})
        self.assertEqual((result.ok, result.title), (False, "Missing information"))
        self.assertEqual(self.db.rows(schema.QUIZ_THEMES), [])

    def test_created_row_is_listed_with_embed(self):
        theme = self.insert(schema.QUIZ_THEMES, name="Finances")
        service.save_quiz(self.db, {"title": "Money Talk", "theme_id": theme["id"], "description": "  "})
        quiz = service.fetch_quizzes(self.db).rows[0]
        self.assertEqual(quiz["quiz_themes"]["name"], "Finances")
        self.assertIsNone(quiz["description"])


class QuizTests(ServiceTestCase):
    def setUp(self):
        super().setUp()
        theme = self.insert(schema.QUIZ_THEMES, name="Love")
        self.quiz = self.insert(schema.QUIZZES, title="How We Show Love", theme_id=theme["id"])

    def test_quiz_with_questions_then_answers_is_refused(self):
        question = self.insert(schema.QUIZ_QUESTIONS, quiz_id=self.quiz["id"], content="Q", ord=1)
        refused = service.delete_quiz(self.db, self.quiz["id"])
        self.assertIn("has questions", refused.message)

        self.insert(schema.QUIZ_ANSWERS, quiz_id=self.quiz["id"], question_id=question["id"])
        self.db.rows(schema.QUIZ_QUESTIONS).clear()
        refused = service.delete_quiz(self.db, self.quiz["id"])
        self.assertIn("user responses", refused.message)

    def test_empty_quiz_deletes(self):
        self.assertTrue(service.delete_quiz(self.db, self.quiz["id"]).ok)
        self.assertEqual(self.db.rows(schema.QUIZZES), [])

    def test_questions_listed_by_ord_and_next_ord(self):
        for n in (2, 1, 3):
            self.insert(schema.QUIZ_QUESTIONS, quiz_id=self.quiz["id"], content=f"Q{n}", ord=n)
        rows = service.fetch_quiz_questions(self.db).rows
        self.assertEqual([r["ord"] for r in rows], [1, 2, 3])
        self.assertEqual(rows[0]["quizzes"]["quiz_themes"]["name"], "Love")
        self.assertEqual(service.next_ord(rows, self.quiz["id"]), 4)
        self.assertEqual(service.next_ord(rows, "other-quiz"), 1)
        self.assertEqual(service.next_ord(rows, None), 1)

    def test_reorder_touches_one_row(self):
        first = self.insert(schema.QUIZ_QUESTIONS, quiz_id=self.quiz["id"], content="A", ord=1)
        second = self.insert(schema.QUIZ_QUESTIONS, quiz_id=self.quiz["id"], content="B", ord=2)
        self.assertTrue(service.reorder_quiz_question(self.db, first["id"], 2).ok)
        ords = {r["id"]: r["ord"] for r in self.db.rows(schema.QUIZ_QUESTIONS)}
        self.assertEqual(ords, {first["id"]: 2, second["id"]: 2})

    def test_form_keeps_position_zero(self):
        rows = [{"quiz_id": "q", "ord": 0}, {"quiz_id": "q", "ord": 0}]
        self.assertEqual(service.form_ord(rows[0], rows, "q"), 0)
        self.assertEqual(service.form_ord({}, rows, "q"), 1)
        self.assertEqual(service.form_ord(None, [], "q"), 1)

        question = self.insert(schema.QUIZ_QUESTIONS, quiz_id=self.quiz["id"], content="Q", ord=0)
        ord_value = service.form_ord(question, [question], self.quiz["id"])
        draft = {"quiz_id": self.quiz["id"], "content": "Q", "ord": ord_value}
        self.assertTrue(service.save_quiz_question(self.db, draft, question["id"]).ok)
        self.assertEqual(self.db.rows(schema.QUIZ_QUESTIONS)[0]["ord"], 0)

    def test_non_numeric_ord_is_rejected(self):
        result = service.save_quiz_question(self.db, {"quiz_id": self.quiz["id"], "content": "Q", "ord": "first"})
        self.assertEqual(result.title, "Invalid order")


class QuestionTests(ServiceTestCase):
    def test_normalize_time(self):
        self.assertEqual(service.normalize_time(None), "08:00:00")
        self.assertEqual(service.normalize_time(""), "08:00:00")
        self.assertEqual(service.normalize_time("8:30"), "08:30:00")
        self.assertEqual(service.normalize_time(time(20, 5)), "20:05:00")
        with self.assertRaises(ValueError):
            service.normalize_time("25:00")

    def test_question_in_use_maps_foreign_key_violation(self):
        backend = mock.Mock()
        backend.table.return_value.delete.return_value.eq.return_value.execute.side_effect = DatabaseError(
            'update or delete on table "questions" violates foreign key constraint', code="23503"
        )
        result = service.delete_question(backend, "q1")
        self.assertEqual(result.title, "Cannot Delete Question")
        self.assertIn("scheduled as a daily question", result.message)

    def test_other_delete_failures_are_generic(self):
        backend = mock.Mock()
        backend.table.return_value.delete.return_value.eq.return_value.execute.side_effect = DatabaseError("timeout")
        result = service.delete_question(backend, "q1")
        self.assertEqual((result.title, result.message), ("Error", "Failed to delete question"))

    def test_daily_question_for_every_couple(self):
        question = self.insert(schema.QUESTIONS, content="What made you smile?")
        result = service.save_daily_question(
            self.db, {"question_id": question["id"], "couple_id": None, "scheduled_for": date(2026, 2, 14)}
        )
        self.assertEqual(result.message, "Daily question scheduled successfully")
        row = service.fetch_daily_questions(self.db).rows[0]
        self.assertEqual((row["scheduled_for"], row["couples"]), ("2026-02-14", None))
        self.assertEqual(row["questions"]["content"], "What made you smile?")

    def test_daily_question_needs_a_question(self):
        result = service.save_daily_question(
            self.db, {"question_id": None, "couple_id": None, "scheduled_for": date(2026, 1, 1)}
        )
        self.assertEqual((result.ok, result.title), (False, "Missing information"))
        self.assertIn("question_id", result.message)
        self.assertEqual(self.db.rows(schema.DAILY_QUESTIONS), [])


class ServiceDirectoryTests(ServiceTestCase):
    def test_newest_category_first_and_rename_keeps_created_at(self):
        service.save_service_category(self.db, {"name": "Restaurants", "icon": "🍽️"})
        service.save_service_category(self.db, {"name": "Wellness", "icon": "🧘"})

        rows = service.fetch_service_categories(self.db).rows
        self.assertEqual(rows[0]["name"], "Wellness")
        wellness = rows[0]

        result = service.save_service_category(self.db, {"name": "Wellness & Spa", "icon": "🧘"}, wellness["id"])
        self.assertEqual(result.message, "Category updated successfully")
        renamed = service.fetch_service_categories(self.db).rows[0]
        self.assertEqual(renamed["name"], "Wellness & Spa")
        self.assertEqual(renamed["created_at"], wellness["created_at"])

    def test_dependency_chain_blocks_each_level(self):
        cat = self.insert(schema.SERVICE_CATEGORIES, name="Gifts")
        sub = self.insert(schema.SERVICE_SUBCATEGORIES, name="Flowers", category_id=cat["id"])
        provider = self.insert(schema.SERVICE_PROVIDERS, name="Fleurs", subcategory_id=sub["id"])
        self.insert(schema.SERVICE_STATS, service_provider_id=provider["id"], user_id=None, accessed_at="2026-01-01T00:00:00+00:00")

        self.assertEqual(service.delete_service_category(self.db, cat["id"]).title, "Cannot Delete Category")
        self.assertEqual(service.delete_service_subcategory(self.db, sub["id"]).title, "Cannot Delete Subcategory")
        self.assertEqual(service.delete_service_provider(self.db, provider["id"]).title, "Cannot Delete Service Provider")

        self.db.rows(schema.SERVICE_STATS).clear()
        self.assertTrue(service.delete_service_provider(self.db, provider["id"]).ok)
        self.assertTrue(service.delete_service_subcategory(self.db, sub["id"]).ok)
        self.assertTrue(service.delete_service_category(self.db, cat["id"]).ok)

    def test_provider_fields(self):
        cat = self.insert(schema.SERVICE_CATEGORIES, name="Wellness")
        sub = self.insert(schema.SERVICE_SUBCATEGORIES, name="Spa", category_id=cat["id"])
        draft = {
            "name": "Oasis",
            "subcategory_id": sub["id"],
            "opening_hours": "Every day 10-22",
            "latitude": "33.57",
            "longitude": "",
        }
        self.assertTrue(service.save_service_provider(self.db, draft).ok)
        row = service.fetch_service_providers(self.db).rows[0]
        self.assertEqual(row["opening_hours"], {"general": "Every day 10-22"})
        self.assertEqual((row["latitude"], row["longitude"]), (33.57, None))
        self.assertEqual(row["service_subcategories"]["service_categories"]["name"], "Wellness")

        bad = service.save_service_provider(self.db, {**draft, "latitude": "91"})
        self.assertEqual(bad.title, "Invalid coordinates")

    def test_opening_hours_json(self):
        self.assertEqual(service.parse_opening_hours('{"mon": "9-5"}'), {"mon": "9-5"})
        self.assertIsNone(service.parse_opening_hours("  "))
        self.assertEqual(service.parse_opening_hours("42"), {"general": "42"})
        self.assertEqual(service.parse_opening_hours("null"), {"general": "null"})
        self.assertEqual(service.parse_opening_hours("[\"9-5\"]"), ["9-5"])
        self.assertEqual(service.format_opening_hours(None), "")


class UserTests(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.alice, self.bob, self.carol = (
            self.db.table(schema.PROFILES).insert([{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}]).execute().data
        )
        self.db.auth_users.append({"id": self.alice["id"], "email": "alice@zooj.app"})
        self.couple = self.insert(schema.COUPLES, user1_id=self.alice["id"], user2_id=self.bob["id"], status="active")

    def test_users_listing_joins_email_and_couple(self):
        users = {u["name"]: u for u in service.fetch_users(self.db).rows}
        self.assertEqual(users["Alice"]["email"], "alice@zooj.app")
        self.assertEqual(users["Alice"]["partner_id"], self.bob["id"])
        self.assertEqual(users["Bob"]["partner_id"], self.alice["id"])
        self.assertEqual(users["Carol"]["email"], "N/A")
        self.assertIsNone(users["Carol"]["couple_id"])

    def test_users_fall_back_to_profiles_when_function_fails(self):
        with mock.patch.object(self.db, "invoke", side_effect=DatabaseError("Function not found")):
            result = service.fetch_users(self.db)
        self.assertEqual(len(result.rows), 3)
        self.assertTrue(result.warning)
        self.assertTrue(all(u["email"] == "N/A" for u in result.rows))

    def test_user_in_a_couple_is_refused(self):
        result = service.delete_user(self.db, self.alice["id"])
        self.assertEqual(result.title, "Cannot Delete User")
        self.assertEqual(len(self.db.rows(schema.PROFILES)), 3)

    def test_user_delete_cleans_owned_rows(self):
        question = self.insert(schema.QUESTIONS, content="Q")
        daily = self.insert(schema.DAILY_QUESTIONS, question_id=question["id"], scheduled_for="2026-01-01")
        self.insert(schema.ANSWERS, daily_question_id=daily["id"], user_id=self.carol["id"])
        self.insert(schema.NOTIFICATIONS, user_id=self.carol["id"], title="t", message="m", type="x")
        self.insert(schema.PULSES, sender_id=self.alice["id"], receiver_id=self.carol["id"])

        result = service.delete_user(self.db, self.carol["id"])

        self.assertTrue(result.ok, result.message)
        for table in (schema.ANSWERS, schema.NOTIFICATIONS, schema.PULSES):
            self.assertEqual(self.db.rows(table), [], table)
        self.assertEqual([p["name"] for p in self.db.rows(schema.PROFILES)], ["Alice", "Bob"])

    def test_update_user(self):
        result = service.update_user(self.db, self.carol["id"], {"name": " Caroline ", "gender": "", "country": "Canada"})
        self.assertTrue(result.ok)
        stored = next(p for p in self.db.rows(schema.PROFILES) if p["id"] == self.carol["id"])
        self.assertEqual((stored["name"], stored["gender"], stored["country"]), ("Caroline", None, "Canada"))

    def test_couple_delete_is_a_single_cascading_delete(self):
        backend = mock.Mock()
        backend.table.return_value.delete.return_value.eq.return_value.execute.return_value = QueryResult()
        result = service.delete_couple(backend, "c1")
        self.assertEqual(result.message, "Couple and all related data deleted successfully")
        backend.table.assert_called_once_with(schema.COUPLES)


class FetchFailureTests(unittest.TestCase):
    def test_failed_read_is_empty_with_warning(self):
        backend = mock.Mock(source="supabase")
        backend.table.side_effect = DatabaseError("offline")
        result = service.fetch_quizzes(backend)
        self.assertEqual((result.rows, result.source), ([], "supabase"))
        self.assertEqual(result.warning, "Failed to fetch quizzes")
        self.assertTrue(result.df.empty)


class AuthTests(unittest.TestCase):
    def test_mock_sign_in_and_out(self):
        db = InMemoryBackend()
        session, result = service.sign_in(db, " admin@zooj.app ", "pw")
        self.assertIsInstance(session, AuthSession)
        self.assertEqual(session.email, "admin@zooj.app")
        self.assertTrue(result.ok)
        self.assertTrue(service.sign_out(db, session).ok)

    def test_empty_credentials_fail(self):
        session, result = service.sign_in(InMemoryBackend(), "", "")
        self.assertIsNone(session)
        self.assertEqual(result.title, "Sign-in failed")


if __name__ == "__main__":
    unittest.main()
