"""Unit tests for UserRepository, the credential store."""

import pytest

from blogapi.models.user import User, UserRole, UserStatus
from blogapi.repositories import Pagination, UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` honours soft deletes and atomic token swaps."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def _reload(self, session, user_id):
        session.expire_all()
        return session.get(User, user_id)

    def test_find_by_email_is_case_insensitive(self, repo):
        user = UserFactory(email="alice@example.com")

        assert repo.find_by_email("  ALICE@Example.com ").id == user.id
        assert repo.find_by_email("bob@example.com") is None

    def test_soft_deleted_user_is_hidden_but_email_stays_taken(self, repo, session):
        user = UserFactory(email="carol@example.com")

        repo.delete(user)
        session.commit()

        assert repo.find_by_id(user.id) is None
        assert repo.find_by_email("carol@example.com") is None
        assert repo.exists_by_email("carol@example.com")
        assert self._reload(session, user.id).deleted_at is not None

    def test_swap_refresh_token_compare_and_swap(self, repo, session):
        user = UserFactory(refresh_token="rt-1")

        assert repo.swap_refresh_token(user.id, "rt-1", "rt-2") is True
        session.commit()
        # A second swap presenting the stale value matches no row.
        assert repo.swap_refresh_token(user.id, "rt-1", "rt-3") is False
        session.commit()

        assert self._reload(session, user.id).refresh_token == "rt-2"

    def test_swap_refresh_token_ignores_deleted_users(self, repo, session):
        user = UserFactory(refresh_token="rt-1")
        repo.delete(user)
        session.commit()

        assert repo.swap_refresh_token(user.id, "rt-1", "rt-2") is False

    def test_update_password_clears_refresh_token(self, repo, session):
        user = UserFactory(refresh_token="rt-1")

        assert repo.update_password(user.id, "new-hash") is True
        session.commit()

        reloaded = self._reload(session, user.id)
        assert reloaded.password_hash == "new-hash"
        assert reloaded.refresh_token is None

    def test_status_and_role_updates(self, repo, session):
        user = UserFactory()

        assert repo.update_status(user.id, UserStatus.BANNED)
        assert repo.update_role(user.id, UserRole.MODERATOR)
        session.commit()

        reloaded = self._reload(session, user.id)
        assert reloaded.status == UserStatus.BANNED
        assert reloaded.role == UserRole.MODERATOR

    def test_updates_on_unknown_id_report_false(self, repo):
        import uuid

        assert repo.update_refresh_token(uuid.uuid4(), "rt") is False

    def test_search_matches_email_and_names(self, repo):
        UserFactory(email="dana@example.com", first_name="Dana", last_name="Scully")
        UserFactory(email="fox@example.com", first_name="Fox", last_name="Mulder")

        page = repo.search("scul", Pagination(page=1, page_size=10, sort=[]))

        assert [u.email for u in page.items] == ["dana@example.com"]
        assert page.total == 1

    def test_paginate_reports_totals(self, repo):
        UserFactory.create_batch(5)

        page = repo.paginate(Pagination(page=2, page_size=2, sort=["email"]))

        assert page.total == 5
        assert page.total_pages == 3
        assert len(page.items) == 2

    def test_assign_updates_rejects_non_profile_fields(self, repo):
        user = UserFactory()

        with pytest.raises(ValueError):
            repo.assign_updates(user, {"role": UserRole.ADMIN})
