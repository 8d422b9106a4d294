import unittest
from unittest import mock

from data import schema
from data.connection import DatabaseError
from data.integrity import USER_PROBES, cleanup_user_rows, find_blocking_dependency
from data.memory import InMemoryBackend


class BlockingDependencyTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryBackend()
        self.alice, self.bob = self.db.table(schema.PROFILES).insert([{"name": "Alice"}, {"name": "Bob"}]).execute().data

    def test_either_side_of_a_couple_blocks(self):
        self.db.table(schema.COUPLES).insert({"user1_id": self.alice["id"], "user2_id": self.bob["id"]}).execute()
        self.assertIs(find_blocking_dependency(self.db, USER_PROBES, self.alice["id"]), USER_PROBES[0])
        self.assertIs(find_blocking_dependency(self.db, USER_PROBES, self.bob["id"]), USER_PROBES[0])

    def test_no_dependents(self):
        self.assertIsNone(find_blocking_dependency(self.db, USER_PROBES, self.alice["id"]))


class CleanupTests(unittest.TestCase):
    def test_each_step_fails_independently(self):
        db = InMemoryBackend()
        real_execute = db.execute

        def flaky(query):
            if query.action == "delete" and query.table == schema.PULSES:
                raise DatabaseError("permission denied for table pulses", code="42501")
            return real_execute(query)

        with mock.patch.object(db, "execute", side_effect=flaky):
            report = cleanup_user_rows(db, "user-1")

        self.assertFalse(report.complete)
        self.assertEqual(set(report.failed), {"pulses.user_id", "pulses.sender_id/receiver_id"})
        self.assertIn("notifications.user_id", report.cleaned)
        self.assertIn("chat_viewers.user_id", report.cleaned)


if __name__ == "__main__":
    unittest.main()
