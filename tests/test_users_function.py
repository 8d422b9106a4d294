import unittest
from unittest import mock

from fastapi.testclient import TestClient

import get_users_with_emails as fn
from data import schema
from data.connection import DatabaseError
from data.memory import InMemoryBackend
from helpers import make_config


class GetUsersWithEmailsTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryBackend()
        self.alice, self.bob, self.carol = (
            self.db.table(schema.PROFILES).insert([{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}]).execute().data
        )
        self.db.auth_users.extend(
            [{"id": self.alice["id"], "email": "alice@zooj.app"}, {"id": self.bob["id"], "email": "bob@zooj.app"}]
        )
        self.couple = self.db.table(schema.COUPLES).insert(
            {"user1_id": self.alice["id"], "user2_id": self.bob["id"], "status": "active"}
        ).execute().data[0]

        self.app = fn.create_app()
        self.app.dependency_overrides[fn._backend_or_error] = lambda: self.db
        self.client = TestClient(self.app)

    def test_post_without_body_returns_joined_users(self):
        resp = self.client.post("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

        users = resp.json()["users"]
        self.assertEqual([u["name"] for u in users], ["Carol", "Bob", "Alice"])
        by_name = {u["name"]: u for u in users}
        self.assertEqual(by_name["Bob"]["email"], "bob@zooj.app")
        self.assertEqual(by_name["Bob"]["partner_id"], self.alice["id"])
        self.assertEqual(by_name["Bob"]["couple_id"], self.couple["id"])
        self.assertEqual(by_name["Bob"]["couple_status"], "active")
        self.assertEqual(by_name["Carol"]["email"], "N/A")
        self.assertIsNone(by_name["Carol"]["partner_id"])

    def test_preflight(self):
        resp = self.client.options("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.text, "ok")
        self.assertEqual(
            resp.headers["access-control-allow-headers"], "authorization, x-client-info, apikey, content-type"
        )

    def test_upstream_failure_is_a_400_with_error(self):
        broken = mock.Mock()
        broken.table.side_effect = DatabaseError("permission denied for table profiles")
        self.app.dependency_overrides[fn._backend_or_error] = lambda: broken

        resp = self.client.post("/")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "permission denied for table profiles"})
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_unreadable_upstream_body_is_a_400_with_error(self):
        broken = mock.Mock()
        broken.table.return_value.select.return_value.order.return_value.execute.side_effect = ValueError(
            "Expecting value: line 1 column 1 (char 0)"
        )
        self.app.dependency_overrides[fn._backend_or_error] = lambda: broken

        resp = self.client.post("/")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Expecting value: line 1 column 1 (char 0)"})
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_missing_service_role_key(self):
        self.app.dependency_overrides.clear()
        with mock.patch.object(fn, "get_config", return_value=make_config(supabase_service_role_key=None)):
            resp = self.client.post("/")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Missing SUPABASE_SERVICE_ROLE_KEY"})


if __name__ == "__main__":
    unittest.main()
