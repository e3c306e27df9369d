from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from blogapi.models.user import User, UserRole, UserStatus
from blogapi.repositories.base import Page, Pagination
from blogapi.services._shared.base import BaseService
from blogapi.services._shared.errors import ForbiddenError, UserNotFoundError

log = logging.getLogger(__name__)


class UserService(BaseService):
    """
    User directory and administration.

    Route-level role gates already restrict the admin operations; the checks
    here cover rules that depend on *which* user is targeted (self-service vs.
    someone else).
    """

    # ----------------------------- Queries ---------------------------------

    def list_users(self, pagination: Pagination) -> Page[User]:
        with self.ro_uow() as uow:
            page = uow.users.paginate(pagination)
        return page

    def search_users(self, query: str, pagination: Pagination) -> Page[User]:
        with self.ro_uow() as uow:
            page = uow.users.search(query, pagination)
        return page

    def get_user(self, user_id: uuid.UUID) -> User:
        """:raises UserNotFoundError: Unknown or deleted user."""
        with self.ro_uow() as uow:
            user = uow.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(key=user_id)
        return user

    # ----------------------------- Commands --------------------------------

    def update_profile(self, actor: User, user_id: uuid.UUID, fields: Mapping[str, Any]) -> User:
        """
        Edit profile fields of ``user_id``.

        :raises ForbiddenError: ``actor`` is neither that user nor an admin.
        :raises UserNotFoundError: Unknown or deleted user.
        """
        self.ensure_owner_or_admin(actor, user_id, msg="You can only update your own profile")
        with self.rw_uow() as uow:
            user = uow.users.find_by_id(user_id)
            if user is None:
                raise UserNotFoundError(key=user_id)
            uow.users.assign_updates(user, fields)
        return user

    def delete_user(self, actor: User, user_id: uuid.UUID) -> None:
        """
        Soft-delete ``user_id`` and drop its refresh token.

        :raises ForbiddenError: Deleting your own account.
        """
        if actor.id == user_id:
            raise ForbiddenError("You cannot delete your own account")
        with self.rw_uow() as uow:
            user = uow.users.find_by_id(user_id)
            if user is None:
                raise UserNotFoundError(key=user_id)
            uow.users.update_refresh_token(user.id, None)
            uow.users.delete(user)
        log.info("users.deleted", extra={"user_id": str(user_id)})

    def update_status(self, actor: User, user_id: uuid.UUID, status: UserStatus) -> User:
        """
        :raises ForbiddenError: Changing your own status (an admin could lock
            themselves out).
        """
        if actor.id == user_id:
            raise ForbiddenError("You cannot change your own status")
        return self._set(user_id, "update_status", UserStatus(status))

    def update_role(self, actor: User, user_id: uuid.UUID, role: UserRole) -> User:
        """
        Role gates read the stored role, so the change applies immediately.

        :raises ForbiddenError: Changing your own role.
        """
        if actor.id == user_id:
            raise ForbiddenError("You cannot change your own role")
        return self._set(user_id, "update_role", UserRole(role))

    def _set(self, user_id: uuid.UUID, op: str, value: Any) -> User:
        with self.rw_uow() as uow:
            updated = getattr(uow.users, op)(user_id, value)
            user = uow.users.find_by_id(user_id) if updated else None
            if user is None:
                raise UserNotFoundError(key=user_id)
        log.info("users.%s", op, extra={"user_id": str(user_id)})
        return user
