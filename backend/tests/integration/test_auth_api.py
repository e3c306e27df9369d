"""End-to-end authentication flows through the HTTP API."""

from __future__ import annotations

from datetime import datetime

import pytest

from blogapi.models.user import UserStatus
from blogapi.uow import SQLAlchemyUnitOfWork
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.assertions import assert_problem
from tests.helpers.auth import auth_header, bearer

AUTH = "/api/v1/auth"


def _register(client, email="a@x.com", password="Passw0rd!", **extra):
    return client.post(f"{AUTH}/register", json={"email": email, "password": password, **extra})


class TestRegisterAndMe:
    def test_register_then_me_returns_same_identity(self, client):
        resp = _register(client)

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        tokens = data["tokens"]
        assert tokens["token_type"] == "Bearer"
        assert datetime.fromisoformat(tokens["expires_at"]).tzinfo is not None
        assert "password_hash" not in data["user"]

        me = client.get(f"{AUTH}/me", headers=bearer(tokens["access_token"]))

        assert me.status_code == 200
        assert me.get_json()["data"]["id"] == data["user"]["id"]
        assert me.get_json()["data"]["email"] == "a@x.com"
        assert me.get_json()["data"]["role"] == "user"

    @pytest.mark.parametrize(
        "password", ["short1!", "alllowercase1!", "ALLUPPERCASE1!", "NoDigits!!", "NoSpecial123"]
    )
    def test_weak_password_is_a_field_error(self, client, password):
        body = assert_problem(_register(client, password=password), 422, "validation_error")
        assert "password" in body["details"]["errors"]

    def test_invalid_email_is_a_field_error(self, client):
        body = assert_problem(_register(client, email="not-an-email"), 422, "validation_error")
        assert "email" in body["details"]["errors"]

    def test_duplicate_email(self, client):
        _register(client)
        assert_problem(_register(client, email="A@X.COM"), 409, "email_exists")


class TestLogin:
    def test_login_returns_pair(self, client):
        UserFactory(email="reader@example.com")

        resp = client.post(
            f"{AUTH}/login", json={"email": "reader@example.com", "password": DEFAULT_PASSWORD}
        )

        assert resp.status_code == 200
        assert resp.get_json()["data"]["tokens"]["refresh_token"]

    def test_wrong_password_and_unknown_email_look_identical(self, client):
        UserFactory(email="reader@example.com")

        wrong = client.post(f"{AUTH}/login", json={"email": "reader@example.com", "password": "x"})
        unknown = client.post(f"{AUTH}/login", json={"email": "who@example.com", "password": "x"})

        a = assert_problem(wrong, 401, "invalid_credentials")
        b = assert_problem(unknown, 401, "invalid_credentials")
        for key in ("type", "title", "status", "detail", "code", "instance"):
            assert a[key] == b[key]

    def test_banned_account_is_forbidden(self, client):
        UserFactory(email="banned@example.com", status=UserStatus.BANNED)

        resp = client.post(
            f"{AUTH}/login", json={"email": "banned@example.com", "password": DEFAULT_PASSWORD}
        )

        assert_problem(resp, 403, "forbidden")


class TestRefreshAndLogout:
    def test_rotation_rejects_replayed_refresh_token(self, client):
        first = _register(client).get_json()["data"]["tokens"]

        rotated = client.post(f"{AUTH}/refresh", json={"refresh_token": first["refresh_token"]})
        assert rotated.status_code == 200
        second = rotated.get_json()["data"]
        assert second["refresh_token"] != first["refresh_token"]

        replay = client.post(f"{AUTH}/refresh", json={"refresh_token": first["refresh_token"]})
        assert_problem(replay, 401, "invalid_token")

    def test_refresh_with_access_token_is_rejected(self, client):
        tokens = _register(client).get_json()["data"]["tokens"]

        resp = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["access_token"]})

        assert_problem(resp, 401, "invalid_token")

    def test_logout_revokes_refresh_but_not_access(self, client):
        tokens = _register(client).get_json()["data"]["tokens"]
        headers = bearer(tokens["access_token"])

        assert client.post(f"{AUTH}/logout", headers=headers).status_code == 200

        resp = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert_problem(resp, 401, "invalid_token")
        # Access tokens are stateless and live until they expire.
        assert client.get(f"{AUTH}/me", headers=headers).status_code == 200


class TestChangePassword:
    def test_wrong_old_password(self, client):
        tokens = _register(client).get_json()["data"]["tokens"]

        resp = client.post(
            f"{AUTH}/change-password",
            headers=bearer(tokens["access_token"]),
            json={"old_password": "Wr0ng-pass!", "new_password": "N3w-Passw0rd!"},
        )

        assert_problem(resp, 400, "invalid_password")
        still_valid = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert still_valid.status_code == 200

    def test_success_forces_new_login(self, client):
        tokens = _register(client).get_json()["data"]["tokens"]

        resp = client.post(
            f"{AUTH}/change-password",
            headers=bearer(tokens["access_token"]),
            json={"old_password": "Passw0rd!", "new_password": "N3w-Passw0rd!"},
        )

        assert resp.status_code == 200
        refresh = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert_problem(refresh, 401, "invalid_token")
        login = client.post(f"{AUTH}/login", json={"email": "a@x.com", "password": "N3w-Passw0rd!"})
        assert login.status_code == 200

    def test_new_password_must_be_strong(self, client):
        tokens = _register(client).get_json()["data"]["tokens"]

        resp = client.post(
            f"{AUTH}/change-password",
            headers=bearer(tokens["access_token"]),
            json={"old_password": "Passw0rd!", "new_password": "weak"},
        )

        body = assert_problem(resp, 422, "validation_error")
        assert "new_password" in body["details"]["errors"]


class TestGuardOverHttp:
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer"}, bearer("garbage")],
    )
    def test_every_failure_is_a_uniform_401(self, client, headers):
        body = assert_problem(client.get(f"{AUTH}/me", headers=headers), 401, "unauthorized")
        assert body["detail"] == "Authentication required"

    def test_banned_user_with_valid_token(self, client):
        """Required guard rejects; optional guard treats the caller as anonymous."""
        user = UserFactory()
        headers = auth_header(user)
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.update_status(user.id, UserStatus.BANNED)

        assert_problem(client.get(f"{AUTH}/me", headers=headers), 401, "unauthorized")
        assert client.get("/api/v1/posts", headers=headers).status_code == 200
