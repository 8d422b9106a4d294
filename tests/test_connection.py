import unittest
from unittest import mock

import requests

from data.connection import (
    AuthError,
    Backend,
    DatabaseError,
    SupabaseClient,
    TableQuery,
    build_params,
    parse_content_range,
)
from helpers import fake_response, make_config


class BuildParamsTests(unittest.TestCase):
    def test_select_with_embed_filter_order_and_limit(self):
        q = (
            TableQuery(Backend(), "couples")
            .select(" *,\n  user1:profiles!couples_user1_id_fkey ( name ) ")
            .eq("id", "c-1")
            .order("created_at", ascending=False)
            .limit(1)
            .query
        )
        self.assertEqual(
            build_params(q),
            [
                ("select", "*,user1:profiles!couples_user1_id_fkey(name)"),
                ("id", "eq.c-1"),
                ("order", "created_at.desc"),
                ("limit", "1"),
            ],
        )

    def test_or_group_and_null_filter(self):
        q = TableQuery(Backend(), "couples").delete().or_eq(("user1_id", "u"), ("user2_id", "u")).eq("status", None).query
        self.assertEqual(build_params(q), [("or", "(user1_id.eq.u,user2_id.eq.u)"), ("status", "is.null")])

    def test_content_range(self):
        self.assertEqual(parse_content_range("0-24/573"), 573)
        self.assertEqual(parse_content_range("*/0"), 0)
        self.assertEqual(parse_content_range("*/*"), 0)
        self.assertEqual(parse_content_range(None), 0)


class UnfilteredWriteTests(unittest.TestCase):
    def test_update_and_delete_require_a_filter(self):
        backend = mock.Mock(spec=Backend)
        with self.assertRaises(DatabaseError):
            TableQuery(backend, "quizzes").update({"title": "x"}).execute()
        with self.assertRaises(DatabaseError):
            TableQuery(backend, "quizzes").delete().execute()
        backend.execute.assert_not_called()


@mock.patch("data.connection.requests.request")
class SupabaseClientTests(unittest.TestCase):
    def setUp(self):
        self.client = SupabaseClient(make_config())

    def test_select_is_a_get_with_api_key(self, request):
        request.return_value = fake_response(200, [{"id": "q1"}])
        result = self.client.table("quizzes").select("*").order("created_at", ascending=False).execute()

        self.assertEqual(result.data, [{"id": "q1"}])
        args, kwargs = request.call_args
        self.assertEqual(args, ("GET", "https://project.supabase.co/rest/v1/quizzes"))
        self.assertIn(("order", "created_at.desc"), kwargs["params"])
        self.assertEqual(kwargs["headers"]["apikey"], "anon-key")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer anon-key")
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_count_only_uses_head_and_content_range(self, request):
        request.return_value = fake_response(200, None, headers={"Content-Range": "*/42"})
        result = self.client.table("profiles").select("id", count_only=True).execute()

        self.assertEqual(result.count, 42)
        args, kwargs = request.call_args
        self.assertEqual(args[0], "HEAD")
        self.assertEqual(kwargs["headers"]["Prefer"], "count=exact")

    def test_signed_in_token_is_sent_as_bearer(self, request):
        request.return_value = fake_response(200, [])
        SupabaseClient(make_config(), access_token="jwt").table("quizzes").select().execute()
        self.assertEqual(request.call_args.kwargs["headers"]["Authorization"], "Bearer jwt")

    def test_insert_posts_payload_and_returns_representation(self, request):
        request.return_value = fake_response(201, [{"id": "t1", "name": "Communication"}])
        result = self.client.table("quiz_themes").insert({"name": "Communication"}).execute()

        self.assertEqual(result.data[0]["id"], "t1")
        args, kwargs = request.call_args
        self.assertEqual(args[0], "POST")
        self.assertEqual(kwargs["json"], [{"name": "Communication"}])
        self.assertEqual(kwargs["headers"]["Prefer"], "return=representation")

    def test_foreign_key_violation_is_recognised(self, request):
        request.return_value = fake_response(
            409,
            {
                "code": "23503",
                "message": 'update or delete on table "questions" violates foreign key constraint',
                "details": "Key is still referenced",
            },
        )
        with self.assertRaises(DatabaseError) as ctx:
            self.client.table("questions").delete().eq("id", "q1").execute()
        self.assertTrue(ctx.exception.is_foreign_key_violation)
        self.assertEqual(ctx.exception.status, 409)

    def test_network_failure_becomes_database_error(self, request):
        request.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(DatabaseError):
            self.client.table("quizzes").select().execute()

    def test_missing_configuration_never_hits_the_network(self, request):
        client = SupabaseClient(make_config(supabase_url="", supabase_anon_key=""))
        with self.assertRaises(DatabaseError):
            client.table("quizzes").select().execute()
        request.assert_not_called()

    def test_sign_in_with_password(self, request):
        request.return_value = fake_response(
            200,
            {"access_token": "jwt", "refresh_token": "r", "expires_at": 1, "user": {"id": "u1", "email": "a@zooj.app"}},
        )
        session = self.client.sign_in("a@zooj.app", "secret")

        self.assertEqual(session.access_token, "jwt")
        self.assertEqual(session.user_id, "u1")
        args, kwargs = request.call_args
        self.assertEqual(args, ("POST", "https://project.supabase.co/auth/v1/token"))
        self.assertEqual(kwargs["params"], {"grant_type": "password"})

    def test_bad_credentials_raise_auth_error(self, request):
        request.return_value = fake_response(
            400, {"error": "invalid_grant", "error_description": "Invalid login credentials"}
        )
        with self.assertRaises(AuthError) as ctx:
            self.client.sign_in("a@zooj.app", "wrong")
        self.assertEqual(ctx.exception.message, "Invalid login credentials")

    def test_admin_user_listing_walks_pages(self, request):
        request.side_effect = [
            fake_response(200, {"users": [{"id": "1"}, {"id": "2"}]}),
            fake_response(200, {"users": [{"id": "3"}]}),
        ]
        users = SupabaseClient(make_config(), api_key="service-role-key").list_auth_users(per_page=2)

        self.assertEqual([u["id"] for u in users], ["1", "2", "3"])
        self.assertEqual(request.call_count, 2)
        self.assertEqual(request.call_args.kwargs["params"], {"page": 2, "per_page": 2})
        self.assertEqual(request.call_args.kwargs["headers"]["apikey"], "service-role-key")

    def test_invoke_posts_to_edge_function(self, request):
        request.return_value = fake_response(200, {"users": []})
        self.assertEqual(self.client.invoke("get-users-with-emails"), {"users": []})
        args, kwargs = request.call_args
        self.assertEqual(args, ("POST", "https://project.supabase.co/functions/v1/get-users-with-emails"))
        self.assertIsNone(kwargs["json"])


if __name__ == "__main__":
    unittest.main()
