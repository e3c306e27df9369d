"""Unit tests for user administration rules."""

from __future__ import annotations

import uuid

import pytest

from blogapi.models.user import UserRole, UserStatus
from blogapi.services._shared.base import BaseService
from blogapi.services._shared.errors import ForbiddenError, UserNotFoundError
from blogapi.services.users import UserService
from tests.factories.user import UserFactory


@pytest.fixture()
def service(app):
    return UserService()


@pytest.fixture()
def admin(app):
    return UserFactory(role=UserRole.ADMIN)


class TestProfile:
    def test_user_updates_own_profile(self, service):
        user = UserFactory(first_name="Ann")

        updated = service.update_profile(user, user.id, {"first_name": "Anna", "bio": "Writer"})

        assert updated.first_name == "Anna"
        assert updated.bio == "Writer"

    def test_user_cannot_update_someone_else(self, service):
        user, other = UserFactory(), UserFactory()

        with pytest.raises(ForbiddenError):
            service.update_profile(user, other.id, {"first_name": "Mallory"})

    def test_admin_updates_anyone(self, service, admin):
        other = UserFactory()
        assert service.update_profile(admin, other.id, {"last_name": "Fixed"}).last_name == "Fixed"

    def test_unknown_user(self, service):
        with pytest.raises(UserNotFoundError):
            service.get_user(uuid.uuid4())


class TestAdministration:
    def test_admin_cannot_delete_self(self, service, admin):
        with pytest.raises(ForbiddenError):
            service.delete_user(admin, admin.id)

    def test_delete_hides_user_and_drops_refresh_token(self, service, admin, session):
        victim = UserFactory(refresh_token="rt-1")

        service.delete_user(admin, victim.id)

        with pytest.raises(UserNotFoundError):
            service.get_user(victim.id)
        session.expire_all()
        assert victim.refresh_token is None

    def test_admin_cannot_change_own_role_or_status(self, service, admin):
        with pytest.raises(ForbiddenError):
            service.update_role(admin, admin.id, UserRole.USER)
        with pytest.raises(ForbiddenError):
            service.update_status(admin, admin.id, UserStatus.INACTIVE)

    def test_role_and_status_changes(self, service, admin):
        user = UserFactory()

        assert service.update_role(admin, user.id, UserRole.MODERATOR).role == UserRole.MODERATOR
        assert service.update_status(admin, user.id, "banned").status == UserStatus.BANNED

    def test_role_change_on_missing_user(self, service, admin):
        with pytest.raises(UserNotFoundError):
            service.update_role(admin, uuid.uuid4(), UserRole.ADMIN)

    def test_listing_and_search(self, service):
        UserFactory(email="zed@example.com", first_name="Zed")
        UserFactory.create_batch(3)

        assert service.list_users(BaseService.ensure_pagination(page_size=2)).total == 4
        assert service.search_users("zed", BaseService.ensure_pagination()).total == 1
