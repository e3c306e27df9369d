"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from blogapi.core.extensions import db
from blogapi.repositories import PostRepository, UserRepository
from blogapi.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.posts = PostRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW over the Flask-scoped session.

    Commits when the ``with`` block exits cleanly and rolls back when it
    raises, so a use-case either persists every write or none.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session or db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only UoW: never commits, always ends its transaction with a rollback.

    Pending ORM changes are refused at flush time, so a read path cannot
    persist anything even by accident.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session or db.session)

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.session.new or self.session.dirty or self.session.deleted:
            self.rollback()
            if exc_type is None:
                raise RuntimeError("Read-only unit of work has pending changes.")
            return
        self.rollback()

    def commit(self) -> None:
        raise RuntimeError("Read-only unit of work cannot commit.")

    def rollback(self) -> None:
        self.session.rollback()
