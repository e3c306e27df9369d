from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from blogapi.repositories.base import Pagination
from blogapi.services._shared.errors import ForbiddenError
from blogapi.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers (pagination, ownership).
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    Services never touch the global session directly; they always go through
    a Unit of Work. The factories are injectable so tests can bind a specific
    session.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] | None = None,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] | None = None,
    ) -> None:
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork
        self._ro_uow_factory = ro_uow_factory or SQLAlchemyReadOnlyUnitOfWork

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Create a read-write Unit of Work (commit on success)."""
        return self._uow_factory()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Create a read-only Unit of Work (always rolled back)."""
        return self._ro_uow_factory()

    # ----------------------- Validation utilities ---------------------------

    @staticmethod
    def ensure_pagination(
        *, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, sort: Iterable[str] | None = None
    ) -> Pagination:
        """
        Build a Pagination value object with clamping.

        :param page: 1-based page number (values below 1 become 1).
        :param page_size: Page size, clamped to ``[1, MAX_PAGE_SIZE]``.
        :param sort: Sort tokens like ``["-created_at", "title"]``.
        """
        page = max(1, int(page))
        page_size = min(max(1, int(page_size)), MAX_PAGE_SIZE)
        return Pagination(page=page, page_size=page_size, sort=list(sort or []))

    # --------------------------- AuthZ --------------------------------

    @staticmethod
    def ensure_owner_or_admin(
        actor: Any, owner_id: uuid.UUID, *, msg: str | None = None
    ) -> None:
        """
        Allow the resource owner and administrators, reject everyone else.

        :param actor: Authenticated user (needs ``id`` and ``is_admin``).
        :param owner_id: Owner of the resource being touched.
        :raises ForbiddenError: If the actor is neither.
        """
        if actor.is_admin or actor.id == owner_id:
            return
        log.info("authz.denied: actor=%s owner=%s", actor.id, owner_id)
        raise ForbiddenError(msg or "You can only modify your own resources")
