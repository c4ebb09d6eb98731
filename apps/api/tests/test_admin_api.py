"""HTTP surface tests for user, user role and content entry routes."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from app.adapters.auth.mock_auth import MOCK_PHOTO_URL_TEMPLATE
from app.adapters.store import InMemoryDocumentStore
from app.core.config import get_settings
from app.main import create_app

_USERS = "tanam/site-1/users"
_OWNER_HEADERS = {"Authorization": "Bearer test:owner:admin"}


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "TANAM_AUTH_PROVIDER",
        "TANAM_SITE_ID",
        "TANAM_DOCUMENT_STORE",
        "TANAM_FIREBASE_PROJECT_ID",
        "TANAM_FIREBASE_AUDIENCE",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["TANAM_AUTH_PROVIDER"] = "mock"
        os.environ["TANAM_SITE_ID"] = "site-1"
        os.environ["TANAM_DOCUMENT_STORE"] = "memory"
        os.environ["TANAM_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["TANAM_FIREBASE_AUDIENCE"] = "test-audience"
        get_settings.cache_clear()
        self.store = InMemoryDocumentStore()
        self.app = create_app(store=self.store)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class CurrentUserApiTests(_SettingsEnvCase):
    def test_requests_without_bearer_token_are_rejected(self) -> None:
        for method, path in (
            ("GET", "/api/v1/users/me"),
            ("GET", "/api/v1/users"),
            ("GET", "/api/v1/user-roles"),
            ("GET", "/api/v1/content-entries"),
        ):
            with self.subTest(method=method, path=path):
                response = self.client.request(method, path)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["code"], "UNAUTHORIZED")

    def test_current_user_uses_camel_case_and_identity_photo_fallback(self) -> None:
        self.store.set(f"{_USERS}/owner", {"uid": "owner", "name": "Owner", "roles": ["admin"]})

        response = self.client.get("/api/v1/users/me", headers=_OWNER_HEADERS)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["uid"], "owner")
        self.assertEqual(body["photoUrl"], MOCK_PHOTO_URL_TEMPLATE.format(user_id="owner"))
        self.assertEqual(body["roles"], ["admin"])

    def test_current_user_without_record_is_not_found(self) -> None:
        response = self.client.get("/api/v1/users/me", headers=_OWNER_HEADERS)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"code": "RESOURCE_NOT_FOUND", "message": "Resource not found"})

    def test_role_check(self) -> None:
        self.store.set(f"{_USERS}/owner", {"uid": "owner", "roles": ["publisher"]})

        granted = self.client.get("/api/v1/users/me/roles/publisher", headers=_OWNER_HEADERS)
        denied = self.client.get("/api/v1/users/me/roles/admin", headers=_OWNER_HEADERS)

        self.assertEqual(granted.json(), {"role": "publisher", "granted": True})
        self.assertEqual(denied.json(), {"role": "admin", "granted": False})


class ThemeApiTests(_SettingsEnvCase):
    def test_theme_round_trip_preserves_other_prefs(self) -> None:
        self.store.set(f"{_USERS}/owner", {"uid": "owner", "prefs": {"language": "en"}})

        before = self.client.get("/api/v1/users/me/theme", headers=_OWNER_HEADERS)
        updated = self.client.put("/api/v1/users/me/theme", headers=_OWNER_HEADERS, json={"theme": "dark"})
        after = self.client.get("/api/v1/users/me/theme", headers=_OWNER_HEADERS)

        self.assertEqual(before.json(), {"theme": "tanam-light-theme"})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json(), {"theme": "tanam-dark-theme"})
        self.assertEqual(after.json(), {"theme": "tanam-dark-theme"})
        self.assertEqual(self.store.get(f"{_USERS}/owner").to_dict()["prefs"], {"language": "en", "theme": "dark"})

    def test_unknown_theme_is_rejected(self) -> None:
        self.store.set(f"{_USERS}/owner", {"uid": "owner"})

        response = self.client.put("/api/v1/users/me/theme", headers=_OWNER_HEADERS, json={"theme": "neon"})

        self.assertEqual(response.status_code, 422)

    def test_theme_update_for_missing_user_is_not_found(self) -> None:
        response = self.client.put("/api/v1/users/me/theme", headers=_OWNER_HEADERS, json={"theme": "light"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "RESOURCE_NOT_FOUND")

    def test_non_string_stored_theme_reads_as_default(self) -> None:
        self.store.set(f"{_USERS}/owner", {"uid": "owner", "prefs": {"theme": 5}})

        theme = self.client.get("/api/v1/users/me/theme", headers=_OWNER_HEADERS)
        me = self.client.get("/api/v1/users/me", headers=_OWNER_HEADERS)

        self.assertEqual(theme.status_code, 200)
        self.assertEqual(theme.json(), {"theme": "tanam-light-theme"})
        self.assertEqual(me.status_code, 200)


class UserListingApiTests(_SettingsEnvCase):
    def test_list_users_paginates_by_query_parameters(self) -> None:
        for index in range(25):
            self.store.set(f"{_USERS}/u{24 - index:02d}", {"name": f"user-{index:02d}"})

        first = self.client.get("/api/v1/users?order_by=name&sort_order=asc&limit=10", headers=_OWNER_HEADERS)
        second = self.client.get(
            "/api/v1/users?order_by=name&sort_order=asc&start_after=user-09&limit=10",
            headers=_OWNER_HEADERS,
        )

        self.assertEqual([u["name"] for u in first.json()], [f"user-{i:02d}" for i in range(10)])
        self.assertEqual([u["name"] for u in second.json()], [f"user-{i:02d}" for i in range(10, 20)])

    def test_invalid_limit_is_rejected(self) -> None:
        response = self.client.get("/api/v1/users?limit=0", headers=_OWNER_HEADERS)

        self.assertEqual(response.status_code, 422)

    def test_get_user_by_uid(self) -> None:
        self.store.set(f"{_USERS}/member", {"name": "Member"})

        found = self.client.get("/api/v1/users/member", headers=_OWNER_HEADERS)
        missing = self.client.get("/api/v1/users/nobody", headers=_OWNER_HEADERS)

        self.assertEqual(found.json()["uid"], "member")
        self.assertEqual(missing.status_code, 404)


class UserRoleApiTests(_SettingsEnvCase):
    def test_invite_list_and_revoke(self) -> None:
        invited = self.client.post(
            "/api/v1/user-roles",
            headers=_OWNER_HEADERS,
            json={"email": "new@example.test", "role": "author"},
        )
        self.assertEqual(invited.status_code, 201)
        role_id = invited.json()["id"]
        self.assertEqual(len(role_id), 20)

        kept = self.client.post(
            "/api/v1/user-roles",
            headers=_OWNER_HEADERS,
            json={"id": "r-kept", "email": "kept@example.test", "role": "admin"},
        )
        self.assertEqual(kept.json()["id"], "r-kept")

        deleted = self.client.delete(f"/api/v1/user-roles/{role_id}", headers=_OWNER_HEADERS)
        self.assertEqual(deleted.status_code, 204)

        listed = self.client.get("/api/v1/user-roles", headers=_OWNER_HEADERS)
        self.assertEqual([role["id"] for role in listed.json()], ["r-kept"])

    def test_invite_with_unknown_role_is_rejected(self) -> None:
        response = self.client.post(
            "/api/v1/user-roles",
            headers=_OWNER_HEADERS,
            json={"email": "new@example.test", "role": "owner"},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.write_count, 0)

    def test_invite_with_id_spanning_path_segments_is_rejected(self) -> None:
        response = self.client.post(
            "/api/v1/user-roles",
            headers=_OWNER_HEADERS,
            json={"id": "a/b", "email": "new@example.test", "role": "author"},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.write_count, 0)


class ContentEntryApiTests(_SettingsEnvCase):
    def test_save_get_and_soft_delete(self) -> None:
        payload = {
            "id": "post-1",
            "contentType": "blog",
            "title": "Hello",
            "url": {"root": "blog", "path": "hello"},
            "data": {"body": "Hi"},
            "status": "published",
            "tags": ["news"],
            "standalone": True,
        }

        saved = self.client.put("/api/v1/content-entries", headers=_OWNER_HEADERS, json=payload)
        self.assertEqual(saved.status_code, 200)
        self.assertEqual(saved.json()["revision"], 0)
        self.assertIsNotNone(saved.json()["publishTime"])

        fetched = self.client.get("/api/v1/content-entries/post-1", headers=_OWNER_HEADERS)
        self.assertEqual(fetched.json()["title"], "Hello")

        deleted = self.client.delete("/api/v1/content-entries/post-1", headers=_OWNER_HEADERS)
        self.assertEqual(deleted.json()["status"], "deleted")
        self.assertEqual(deleted.json()["revision"], 1)

        stale = self.client.put("/api/v1/content-entries", headers=_OWNER_HEADERS, json=payload)
        self.assertEqual(stale.status_code, 409)
        self.assertEqual(stale.json()["code"], "REVISION_CONFLICT")

    def test_list_by_content_type(self) -> None:
        for entry_id, content_type in (("a", "blog"), ("b", "page")):
            self.client.put(
                "/api/v1/content-entries",
                headers=_OWNER_HEADERS,
                json={
                    "id": entry_id,
                    "contentType": content_type,
                    "title": entry_id,
                    "url": {"root": content_type, "path": entry_id},
                },
            )

        response = self.client.get("/api/v1/content-entries?content_type=page", headers=_OWNER_HEADERS)

        self.assertEqual([entry["id"] for entry in response.json()], ["b"])

    def test_save_with_id_spanning_path_segments_is_rejected(self) -> None:
        response = self.client.put(
            "/api/v1/content-entries",
            headers=_OWNER_HEADERS,
            json={"id": "a/b", "contentType": "blog", "url": {"root": "blog", "path": "a"}},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.write_count, 0)


if __name__ == "__main__":
    unittest.main()
