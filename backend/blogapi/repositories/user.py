"""User repository: the credential store behind authentication."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, cast

from sqlalchemy import CursorResult, or_, select, update

from blogapi.models.base import utcnow
from blogapi.models.user import User, UserRole, UserStatus, normalize_email
from blogapi.repositories.base import BaseRepository, Page, Pagination


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups never return soft-deleted users. It never issues tokens or hashes
    passwords; services hand it ready-to-store values.
    """

    model = User

    def _sortable_fields(self):
        return {
            "email": User.email,
            "first_name": User.first_name,
            "last_name": User.last_name,
            "role": User.role,
            "status": User.status,
            "created_at": User.created_at,
            "last_login_at": User.last_login_at,
        }

    def _updatable_fields(self):
        """Profile fields a user (or an admin) may edit."""
        return {"first_name", "last_name", "bio", "phone_number", "avatar"}

    # ---------------------------- Lookups ----------------------------

    def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return self.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        """Fetch a live user by email (case-insensitive)."""
        return self._first(self._select(User.email == normalize_email(email)))

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when any row, soft-deleted included, owns ``email``.

        Deleted rows keep their unique email, so they still count.
        """
        stmt = select(User.id).where(User.email == normalize_email(email)).limit(1)
        return self.session.execute(stmt).first() is not None

    def search(self, query: str, pagination: Pagination) -> Page[User]:
        """Case-insensitive substring match on email and names."""
        pattern = f"%{query.strip().lower()}%"
        return self.paginate(
            pagination,
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            ),
        )

    # ---------------------------- Credential writes ----------------------------

    def _update_live(self, user_id: uuid.UUID, *criteria: Any, **values: Any) -> bool:
        """Single-statement UPDATE on a live row; ``True`` when a row matched.

        Loaded instances are not synchronized; they pick up the new values
        once the unit of work ends and expires them.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.deleted_at.is_(None), *criteria)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[Any], self.session.execute(stmt))
        return result.rowcount == 1

    def update_refresh_token(self, user_id: uuid.UUID, token: str | None) -> bool:
        """Overwrite (or clear, with ``None``) the stored refresh token."""
        return self._update_live(user_id, refresh_token=token)

    def swap_refresh_token(self, user_id: uuid.UUID, expected: str, new: str) -> bool:
        """Atomically replace ``expected`` with ``new``.

        Compare-and-swap: the ``WHERE`` clause includes the presented token, so
        of several concurrent refreshes holding the same token exactly one
        matches a row. Returns ``False`` when the stored token has moved on.
        """
        return self._update_live(user_id, User.refresh_token == expected, refresh_token=new)

    def update_password(self, user_id: uuid.UUID, password_hash: str) -> bool:
        """Store a new hash and clear the refresh token in the same statement."""
        return self._update_live(user_id, password_hash=password_hash, refresh_token=None)

    def update_status(self, user_id: uuid.UUID, status: UserStatus) -> bool:
        return self._update_live(user_id, status=status)

    def update_role(self, user_id: uuid.UUID, role: UserRole) -> bool:
        return self._update_live(user_id, role=role)

    def touch_last_login(self, user_id: uuid.UUID, when: datetime | None = None) -> bool:
        return self._update_live(user_id, last_login_at=when or utcnow())
