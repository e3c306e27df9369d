"""Unit tests for the SQLAlchemy units of work."""

import pytest

from blogapi.models.user import User
from blogapi.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from blogapi.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            user = UserFactory.build()
            uow.users.add(user)
            user_id = user.id

        session.expire_all()
        assert session.get(User, user_id) is not None

    def test_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError, match="boom"):
            with RWuow() as uow:
                user = UserFactory.build()
                uow.users.add(user)
                user_id = user.id
                raise RuntimeError("boom")

        assert session.get(User, user_id) is None


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        user = UserFactory()

        with ROuow() as uow:
            assert uow.users.find_by_id(user.id) is not None

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="cannot commit"):
            uow.commit()

    def test_pending_changes_are_refused_and_discarded(self, session):
        user = UserFactory(first_name="Original")

        with pytest.raises(RuntimeError, match="pending changes"):
            with ROuow() as uow:
                uow.users.find_by_id(user.id).first_name = "Mutated"

        session.expire_all()
        assert session.get(User, user.id).first_name == "Original"
