"""
API tests for authentication, profiles, admin user management and KYC.

Uses FastAPI TestClient against an in-memory database.
"""

import pytest

from tradevault.domain.accounts.entities import User
from tradevault.domain.errors import DuplicateError
from tradevault.infrastructure.accounts.user_repository import SqlUserRepository
from tradevault.shared.security.rate_limiting import limiter

API = "/api/v1"
PNG = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def rate_limited(client):
    """The shared client with the limiter switched on and its counters cleared."""
    limiter.reset()
    limiter.enabled = True
    yield client
    limiter.enabled = False
    limiter.reset()


class TestHealth:
    def test_health_returns_ok(self, client) -> None:
        """Health endpoint reports ok with the database up."""
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["database"] == "up"

    def test_security_headers_present(self, client) -> None:
        """Responses carry the security headers."""
        resp = client.get(f"{API}/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Cache-Control"] == "no-store"
        assert "Strict-Transport-Security" not in resp.headers


class TestAuth:
    def test_register_returns_token_and_user(self, client, notifications) -> None:
        """Registration returns a token, the user and a welcome email."""
        resp = client.post(
            f"{API}/auth/register",
            json={
                "full_name": "Alice Doe",
                "email": "Alice@Example.com",
                "password": "correct-horse",
            },
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "alice@example.com"
        assert "password_hash" not in body["user"]
        assert len(notifications.messages) == 1

    def test_duplicate_email_conflicts(self, client, register) -> None:
        """Registering a taken email returns 409."""
        register()
        resp = client.post(
            f"{API}/auth/register",
            json={
                "full_name": "Other",
                "email": "alice@example.com",
                "password": "correct-horse",
            },
        )
        assert resp.status_code == 409

    def test_registration_race_conflicts(self, client, register, monkeypatch) -> None:
        """An email taken after the lookup still answers 409, not 500."""
        register()
        monkeypatch.setattr(SqlUserRepository, "get_by_email", lambda self, email: None)
        resp = client.post(
            f"{API}/auth/register",
            json={
                "full_name": "Other",
                "email": "alice@example.com",
                "password": "correct-horse",
            },
        )
        assert resp.status_code == 409

    def test_repository_maps_unique_email_violation(self, uow_factory) -> None:
        """A second insert with a taken email raises DuplicateError."""
        with uow_factory() as uow:
            uow.users.add(User(id="u-1", full_name="A", email="a@example.com", password_hash="x"))
        with pytest.raises(DuplicateError) as exc_info:
            with uow_factory() as uow:
                uow.users.add(
                    User(id="u-2", full_name="B", email="a@example.com", password_hash="x")
                )
        assert exc_info.value.field == "email"

    def test_short_password_is_validation_error(self, client) -> None:
        """A short password returns 400."""
        resp = client.post(
            f"{API}/auth/register",
            json={"full_name": "Bob", "email": "bob@example.com", "password": "short"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation error"

    def test_login_round_trip(self, client, register) -> None:
        """Login returns a token accepted by the profile endpoint."""
        register()
        resp = client.post(
            f"{API}/auth/login",
            json={"email": "alice@example.com", "password": "correct-horse"},
        )
        assert resp.status_code == 200
        token = resp.json()["access_token"]
        me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["full_name"] == "Alice Doe"

    def test_wrong_password_unauthorized(self, client, register) -> None:
        """A wrong password returns 401."""
        register()
        resp = client.post(
            f"{API}/auth/login",
            json={"email": "alice@example.com", "password": "wrong-horse"},
        )
        assert resp.status_code == 401

    def test_missing_token_unauthorized(self, client) -> None:
        """A request without a token returns 401 with a challenge."""
        resp = client.get(f"{API}/users/me")
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token_unauthorized(self, client) -> None:
        """A malformed token returns 401."""
        resp = client.get(f"{API}/users/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    def test_login_limit_ignores_rotating_tokens(self, rate_limited, register) -> None:
        """Made-up bearer tokens do not reset the per-address login budget."""
        register()
        statuses = [
            rate_limited.post(
                f"{API}/auth/login",
                json={"email": "alice@example.com", "password": "wrong-horse"},
                headers={"Authorization": f"Bearer forged{i}"},
            ).status_code
            for i in range(15)
        ]
        assert statuses == [401] * 10 + [429] * 5


class TestUsers:
    def test_profile_update(self, client, register) -> None:
        """Users can update their own profile fields."""
        _, headers = register()
        resp = client.patch(
            f"{API}/users/me",
            json={"city": "Lisbon", "phone": "+351 555 0100"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["city"] == "Lisbon"

    def test_user_list_requires_admin(self, client, register) -> None:
        """Non-admins cannot list users."""
        _, headers = register()
        assert client.get(f"{API}/users", headers=headers).status_code == 403

    def test_admin_lists_users(self, client, register, admin) -> None:
        """Admins see every registered user."""
        register()
        _, admin_headers = admin
        resp = client.get(f"{API}/users", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["total"] == 2

    def test_cannot_view_another_profile(self, client, register) -> None:
        """Users cannot read another user's profile."""
        alice_id, _ = register()
        _, bob_headers = register(email="bob@example.com", full_name="Bob")
        assert client.get(f"{API}/users/{alice_id}", headers=bob_headers).status_code == 403

    def test_suspended_user_is_locked_out(self, client, register, admin) -> None:
        """A suspended user's token stops working."""
        user_id, headers = register()
        _, admin_headers = admin
        resp = client.patch(
            f"{API}/users/{user_id}", json={"status": "suspended"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert client.get(f"{API}/users/me", headers=headers).status_code == 403
        login = client.post(
            f"{API}/auth/login",
            json={"email": "alice@example.com", "password": "correct-horse"},
        )
        assert login.status_code == 403

    def test_admin_cannot_suspend_self(self, client, admin) -> None:
        """Admins cannot suspend their own account."""
        admin_id, admin_headers = admin
        resp = client.patch(
            f"{API}/users/{admin_id}", json={"status": "suspended"}, headers=admin_headers
        )
        assert resp.status_code == 409


class TestKyc:
    def _submit(self, client, headers, id_number: str = "P1234567"):
        return client.post(
            f"{API}/kyc",
            json={
                "name": "Alice Doe",
                "email": "alice@example.com",
                "id_type": "passport",
                "id_number": id_number,
                "front_image": PNG,
                "back_image": PNG,
            },
            headers=headers,
        )

    def test_submit_uploads_both_images(self, client, register, image_storage) -> None:
        """KYC submission uploads the front and back images."""
        _, headers = register()
        resp = self._submit(client, headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["front_image"]["url"].startswith("https://img.test/")
        assert len(image_storage.uploads) == 2

    def test_second_pending_submission_conflicts(self, client, register) -> None:
        """A second pending KYC submission returns 409."""
        _, headers = register()
        self._submit(client, headers)
        assert self._submit(client, headers, id_number="P7654321").status_code == 409

    def test_admin_review_notifies_owner(
        self, client, register, admin, notifications
    ) -> None:
        """Admin KYC review emails the owner."""
        _, headers = register()
        kyc_id = self._submit(client, headers).json()["id"]
        _, admin_headers = admin
        sent_before = len(notifications.messages)

        resp = client.put(
            f"{API}/kyc/{kyc_id}/status", json={"status": "approved"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"
        assert len(notifications.messages) == sent_before + 1

        mine = client.get(f"{API}/kyc/me", headers=headers)
        assert mine.json()["status"] == "approved"

    def test_review_requires_admin(self, client, register) -> None:
        """Non-admins cannot review KYC submissions."""
        _, headers = register()
        kyc_id = self._submit(client, headers).json()["id"]
        resp = client.put(
            f"{API}/kyc/{kyc_id}/status", json={"status": "approved"}, headers=headers
        )
        assert resp.status_code == 403
