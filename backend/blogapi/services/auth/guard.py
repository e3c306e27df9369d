"""Per-request access control: resolve a bearer token to an identity, gate on roles."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from blogapi.models.user import User, UserRole
from blogapi.services._shared.base import BaseService
from blogapi.services._shared.errors import (
    AuthenticationError,
    ForbiddenError,
    GuardFailure,
    InternalError,
    InvalidTokenError,
)
from blogapi.services.auth.dto import TokenClaims
from blogapi.services.auth.tokens import TokenService

log = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Resolved caller handed to request handlers."""

    user: User
    claims: TokenClaims

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def role(self) -> UserRole:
        """Current role of the loaded user, not the one stamped into the token."""
        return UserRole(self.user.role)


class AccessGuard(BaseService):
    """
    Turn an ``Authorization`` header into an :class:`AuthContext`.

    Checks run in a fixed order and stop at the first failure: header present,
    ``Bearer`` scheme, non-empty token, signature and expiry, ``access`` kind,
    identity exists, identity active.
    """

    def __init__(self, *, tokens: TokenService, **kwargs) -> None:
        super().__init__(**kwargs)
        self.tokens = tokens

    def authenticate(self, header: str | None) -> AuthContext:
        """
        Required mode.

        :raises AuthenticationError: Carrying the :class:`GuardFailure` reason.
        """
        if not header or not header.strip():
            raise AuthenticationError(GuardFailure.MISSING_HEADER)
        scheme, _, token = header.strip().partition(" ")
        if scheme.lower() != BEARER_SCHEME:
            raise AuthenticationError(GuardFailure.INVALID_SCHEME)
        token = token.strip()
        if not token:
            raise AuthenticationError(GuardFailure.EMPTY_TOKEN)

        try:
            claims = self.tokens.validate_token(token)
        except InvalidTokenError as exc:
            reason = (
                GuardFailure.EXPIRED_TOKEN if exc.reason == "expired" else GuardFailure.INVALID_TOKEN
            )
            raise AuthenticationError(reason) from exc
        if not claims.is_access:
            raise AuthenticationError(GuardFailure.WRONG_TOKEN_KIND)

        try:
            with self.ro_uow() as uow:
                user = uow.users.find_by_id(claims.user_id)
        except SQLAlchemyError as exc:
            log.error(
                "guard.storage_failed", extra={"user_id": str(claims.user_id)}, exc_info=True
            )
            raise InternalError("Storage failure") from exc
        if user is None:
            raise AuthenticationError(GuardFailure.USER_NOT_FOUND)
        if not user.is_active:
            raise AuthenticationError(GuardFailure.INACTIVE_ACCOUNT)
        return AuthContext(user=user, claims=claims)

    def try_authenticate(self, header: str | None) -> AuthContext | None:
        """Optional mode: any failure means anonymous."""
        try:
            return self.authenticate(header)
        except AuthenticationError as exc:
            if exc.reason is not GuardFailure.MISSING_HEADER:
                log.info("guard.optional_anonymous", extra={"reason": exc.reason.value})
            return None

    @staticmethod
    def authorize(ctx: AuthContext, allowed: Iterable[UserRole | str]) -> None:
        """
        Role gate on an already-resolved caller.

        :raises ForbiddenError: Role not in ``allowed``.
        """
        roles = {UserRole(role) for role in allowed}
        if ctx.role not in roles:
            log.info(
                "guard.forbidden",
                extra={"user_id": str(ctx.user.id), "reason": f"role={ctx.role.value}"},
            )
            raise ForbiddenError("Insufficient permissions")
