"""Transaction boundary contract shared by the read-write and read-only units of work."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blogapi.repositories import PostRepository, UserRepository


class UnitOfWork(ABC):
    """
    ``with`` block owning one transaction and the repositories bound to it.

    What happens on exit (commit, rollback, refusal of pending writes) is
    decided by the implementation.
    """

    users: UserRepository
    posts: PostRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
