"""Unit tests for the authentication lifecycle service."""

from __future__ import annotations

import pytest

from blogapi.api.deps import get_auth_service
from blogapi.core.extensions import db
from blogapi.models.user import User, UserRole, UserStatus
from blogapi.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidTokenError,
    UserNotFoundError,
)
from blogapi.services.auth.dto import ChangePasswordIn, LoginIn, RegisterIn
from blogapi.uow import SQLAlchemyUnitOfWork
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


@pytest.fixture()
def service(app):
    return get_auth_service()


def _stored_refresh(user_id) -> str | None:
    db.session.expire_all()
    return db.session.get(User, user_id).refresh_token


class TestRegister:
    def test_creates_active_user_and_stores_refresh(self, service):
        user, pair = service.register(RegisterIn(email="A@X.com", password="Passw0rd!"))

        assert user.email == "a@x.com"
        assert user.role == UserRole.USER
        assert user.status == UserStatus.ACTIVE
        assert user.password_hash != "Passw0rd!"
        assert _stored_refresh(user.id) == pair.refresh_token

    def test_duplicate_email_conflicts_case_insensitively(self, service):
        UserFactory(email="taken@example.com")

        with pytest.raises(ConflictError) as exc:
            service.register(RegisterIn(email="Taken@Example.com", password="Passw0rd!"))

        assert exc.value.code == "email_exists"

    def test_soft_deleted_email_stays_taken(self, service):
        user = UserFactory(email="gone@example.com")
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.delete(uow.users.find_by_id(user.id))

        with pytest.raises(ConflictError):
            service.register(RegisterIn(email="gone@example.com", password="Passw0rd!"))


class TestLogin:
    def test_success_issues_pair_and_records_login(self, service):
        created = UserFactory(email="reader@example.com")

        user, pair = service.login(LoginIn(email="READER@example.com", password=DEFAULT_PASSWORD))

        assert user.id == created.id
        assert user.last_login_at is not None
        assert _stored_refresh(user.id) == pair.refresh_token

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, service):
        UserFactory(email="reader@example.com")

        with pytest.raises(InvalidCredentialsError) as wrong:
            service.login(LoginIn(email="reader@example.com", password="Wr0ng-pass!"))
        with pytest.raises(InvalidCredentialsError) as unknown:
            service.login(LoginIn(email="nobody@example.com", password="Wr0ng-pass!"))

        assert type(wrong.value) is type(unknown.value)
        assert str(wrong.value) == str(unknown.value)

    @pytest.mark.parametrize("status", [UserStatus.BANNED, UserStatus.INACTIVE, UserStatus.PENDING])
    def test_inactive_account_is_forbidden_with_correct_password(self, service, status):
        UserFactory(email="locked@example.com", status=status)

        with pytest.raises(ForbiddenError):
            service.login(LoginIn(email="locked@example.com", password=DEFAULT_PASSWORD))

    def test_inactive_account_with_wrong_password_is_invalid_credentials(self, service):
        UserFactory(email="locked@example.com", status=UserStatus.BANNED)

        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(email="locked@example.com", password="Wr0ng-pass!"))


class TestRefresh:
    def test_rotation_invalidates_previous_refresh_token(self, service):
        """P1 -> refresh -> P2; presenting P1's refresh token again fails."""
        user, first = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        second = service.refresh_tokens(first.refresh_token)

        assert second.refresh_token != first.refresh_token
        assert _stored_refresh(user.id) == second.refresh_token
        with pytest.raises(InvalidTokenError):
            service.refresh_tokens(first.refresh_token)
        # The failed reuse leaves the current token usable.
        assert service.refresh_tokens(second.refresh_token).access_token

    def test_access_token_cannot_refresh(self, service):
        _, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        with pytest.raises(InvalidTokenError) as exc:
            service.refresh_tokens(pair.access_token)

        assert exc.value.reason == "kind"

    def test_login_supersedes_earlier_refresh_token(self, service):
        _, registered = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))
        service.login(LoginIn(email="a@x.com", password="Passw0rd!"))

        with pytest.raises(InvalidTokenError):
            service.refresh_tokens(registered.refresh_token)

    def test_banned_user_cannot_refresh(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.update_status(user.id, UserStatus.BANNED)

        with pytest.raises(ForbiddenError):
            service.refresh_tokens(pair.refresh_token)

    def test_deleted_user_is_not_found(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.delete(uow.users.find_by_id(user.id))

        with pytest.raises(UserNotFoundError):
            service.refresh_tokens(pair.refresh_token)

    def test_swap_lost_race_is_invalid_token(self, service, monkeypatch):
        """A concurrent refresh that already moved the stored token wins."""
        _, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))
        from blogapi.repositories.user import UserRepository

        monkeypatch.setattr(UserRepository, "swap_refresh_token", lambda *a, **k: False)

        with pytest.raises(InvalidTokenError):
            service.refresh_tokens(pair.refresh_token)


class TestLogoutAndPasswordChange:
    def test_logout_clears_refresh_token(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        service.logout(user.id)

        assert _stored_refresh(user.id) is None
        with pytest.raises(InvalidTokenError):
            service.refresh_tokens(pair.refresh_token)

    def test_wrong_old_password_changes_nothing(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        with pytest.raises(InvalidPasswordError):
            service.change_password(
                user.id, ChangePasswordIn(old_password="Nope-123!", new_password="N3w-Passw0rd!")
            )

        assert _stored_refresh(user.id) == pair.refresh_token
        service.login(LoginIn(email="a@x.com", password="Passw0rd!"))

    def test_change_password_clears_refresh_and_swaps_credentials(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        service.change_password(
            user.id, ChangePasswordIn(old_password="Passw0rd!", new_password="N3w-Passw0rd!")
        )

        assert _stored_refresh(user.id) is None
        with pytest.raises(InvalidTokenError):
            service.refresh_tokens(pair.refresh_token)
        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(email="a@x.com", password="Passw0rd!"))
        service.login(LoginIn(email="a@x.com", password="N3w-Passw0rd!"))


class TestIdentityFromClaims:
    def test_resolves_the_token_owner(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))

        claims = service.validate_token(pair.access_token)

        assert service.get_identity_from_claims(claims).id == user.id

    def test_deleted_identity_raises(self, service):
        user, pair = service.register(RegisterIn(email="a@x.com", password="Passw0rd!"))
        claims = service.validate_token(pair.access_token)
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.delete(uow.users.find_by_id(user.id))

        with pytest.raises(UserNotFoundError):
            service.get_identity_from_claims(claims)
