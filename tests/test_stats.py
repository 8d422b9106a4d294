import unittest
from unittest import mock

from data import schema
from data.connection import DatabaseError
from data.memory import InMemoryBackend
from data.stats import DashboardStats, aggregate_service_usage, fetch_dashboard_stats, fetch_service_usage


def _stat(provider_id, name, sub, category, user_id, accessed_at):
    return {
        "service_provider_id": provider_id,
        "user_id": user_id,
        "accessed_at": accessed_at,
        "service_providers": {
            "id": provider_id,
            "name": name,
            "service_subcategories": {"name": sub, "service_categories": {"name": category}},
        },
    }


def _provider(category):
    return {"service_subcategories": {"service_categories": {"name": category}}}


class DashboardStatsTests(unittest.TestCase):
    def test_engagement_ratios(self):
        stats = DashboardStats(total_users=4, total_quizzes=2, total_answers=6)
        self.assertEqual(stats.avg_answers_per_user, 1.5)
        self.assertEqual(stats.quiz_completion_rate, 0.75)

    def test_ratios_are_zero_without_users_or_quizzes(self):
        self.assertEqual(DashboardStats(total_answers=3).avg_answers_per_user, 0.0)
        self.assertEqual(DashboardStats(total_users=3, total_answers=3).quiz_completion_rate, 0.0)

    def test_counts_from_backend(self):
        db = InMemoryBackend()
        db.table(schema.PROFILES).insert([{"name": "A"}, {"name": "B"}]).execute()
        db.table(schema.QUESTIONS).insert({"content": "Q"}).execute()

        stats = fetch_dashboard_stats(db)

        self.assertEqual((stats.total_users, stats.total_questions, stats.total_couples), (2, 1, 0))
        self.assertIsNone(stats.warning)
        self.assertEqual(stats.overview()["value"].tolist(), [2, 0, 0, 1])

    def test_failed_count_reads_zero_with_warning(self):
        db = InMemoryBackend()
        db.table(schema.PROFILES).insert({"name": "A"}).execute()
        real_execute = db.execute

        def flaky(query):
            if query.table == schema.QUIZ_ANSWERS:
                raise DatabaseError("timeout")
            return real_execute(query)

        with mock.patch.object(db, "execute", side_effect=flaky):
            stats = fetch_dashboard_stats(db)

        self.assertEqual((stats.total_users, stats.total_answers), (1, 0))
        self.assertIn(schema.QUIZ_ANSWERS, stats.warning)


class ServiceUsageTests(unittest.TestCase):
    def test_grouping_and_sorting(self):
        rows = [
            _stat("p1", "Oasis Spa", "Couples massage", "Wellness", "u1", "2026-01-01T10:00:00+00:00"),
            _stat("p2", "Lock & Key", "Escape rooms", "Activities", "u1", "2026-01-02T10:00:00+00:00"),
            _stat("p2", "Lock & Key", "Escape rooms", "Activities", "u2", "2026-01-05T10:00:00+00:00"),
            _stat("p2", "Lock & Key", "Escape rooms", "Activities", None, "2026-01-03T10:00:00+00:00"),
            _stat("p3", "Studio Souffle", "Yoga", "Wellness", "u3", "2026-01-04T10:00:00+00:00"),
        ]
        providers = [_provider("Wellness"), _provider("Wellness"), _provider("Wellness"), _provider("Activities")]

        usage = aggregate_service_usage(rows, providers)

        top = usage.providers.iloc[0]
        self.assertEqual(top["provider_name"], "Lock & Key")
        self.assertEqual(top["total_views"], 3)
        self.assertEqual(top["unique_users"], 2)
        self.assertEqual(top["latest_access"], "2026-01-05T10:00:00+00:00")
        # Ties keep first-seen order.
        self.assertEqual(usage.providers["provider_id"].tolist(), ["p2", "p1", "p3"])

        self.assertEqual(usage.categories["category"].tolist(), ["Activities", "Wellness"])
        self.assertEqual(usage.categories["views"].tolist(), [3, 2])
        self.assertEqual(usage.categories["providers"].tolist(), [1, 3])

        self.assertEqual(usage.total_views, 5)
        self.assertEqual(usage.total_providers, 3)

    def test_no_views(self):
        usage = aggregate_service_usage([], [_provider("Gifts")])
        self.assertEqual((usage.total_views, usage.total_providers), (0, 0))
        self.assertTrue(usage.categories.empty)

    def test_seeded_backend_totals(self):
        db = InMemoryBackend.seeded(seed=11)
        usage = fetch_service_usage(db)

        self.assertIsNone(usage.warning)
        self.assertEqual(usage.total_views, len(db.rows(schema.SERVICE_STATS)))
        self.assertEqual(usage.total_providers, len(db.rows(schema.SERVICE_PROVIDERS)) - 1)
        views = usage.providers["total_views"].tolist()
        self.assertEqual(views, sorted(views, reverse=True))
        self.assertEqual(int(usage.categories["providers"].sum()), len(db.rows(schema.SERVICE_PROVIDERS)))

    def test_stats_query_failure(self):
        db = mock.Mock()
        db.table.side_effect = DatabaseError("offline")
        usage = fetch_service_usage(db)
        self.assertEqual(usage.warning, "Failed to fetch service statistics")
        self.assertEqual(usage.total_views, 0)


if __name__ == "__main__":
    unittest.main()
