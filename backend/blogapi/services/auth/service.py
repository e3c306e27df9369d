from __future__ import annotations

import hmac
import logging
import uuid
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blogapi.core.security import PasswordHasher, default_hasher
from blogapi.models.user import User, UserRole, UserStatus
from blogapi.services._shared.base import BaseService
from blogapi.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidTokenError,
    UserNotFoundError,
    violates,
)
from blogapi.services.auth.dto import (
    ChangePasswordIn,
    LoginIn,
    RegisterIn,
    TokenClaims,
    TokenPair,
)
from blogapi.services.auth.tokens import TokenService

log = logging.getLogger(__name__)

T = TypeVar("T")


class AuthService(BaseService):
    """
    Authentication lifecycle: register, login, refresh, logout, password change.

    Each identity holds exactly one valid refresh token, stored on the user
    row. Issuing a pair overwrites it; logout and password change clear it.
    Access tokens stay valid until they expire.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        hasher: PasswordHasher | None = None,
        **kwargs,
    ) -> None:
        """
        :param tokens: Issues and validates token pairs.
        :param hasher: Password hasher (defaults to the shared werkzeug one).
        """
        super().__init__(**kwargs)
        self.tokens = tokens
        self.hasher = hasher or default_hasher

    # ------------------------------------------------------------------ #
    # Storage guard
    # ------------------------------------------------------------------ #

    def _storage(self, op: str, fn: Callable[[], T]) -> T:
        """Run ``fn``; log storage failures with context and surface them as Internal."""
        try:
            return fn()
        except (InternalError, ConflictError):
            raise
        except SQLAlchemyError as exc:
            log.error("auth.storage_failed: op=%s", op, exc_info=True)
            raise InternalError("Storage failure") from exc

    # ------------------------------------------------------------------ #
    # Register / login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> tuple[User, TokenPair]:
        """
        Create an active ``user``-role account and sign it in.

        :raises ConflictError: ``email_exists`` if the email is taken.
        """

        def _run() -> tuple[User, TokenPair]:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(dto.email):
                    raise ConflictError("User", "Email already registered", code="email_exists")
                user = User(
                    email=dto.email,
                    password_hash=self.hasher.hash(dto.password),
                    first_name=dto.first_name or "",
                    last_name=dto.last_name or "",
                    role=UserRole.USER,
                    status=UserStatus.ACTIVE,
                )
                try:
                    uow.users.add(user)
                except IntegrityError as exc:
                    if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                        raise ConflictError(
                            "User", "Email already registered", code="email_exists"
                        ) from exc
                    raise
                pair = self.tokens.issue_token_pair(user)
                uow.users.update_refresh_token(user.id, pair.refresh_token)
            return user, pair

        user, pair = self._storage("register", _run)
        log.info("auth.registered", extra={"user_id": str(user.id)})
        return user, pair

    def login(self, dto: LoginIn) -> tuple[User, TokenPair]:
        """
        Verify credentials and issue a new pair.

        Unknown email and wrong password raise the same error; the hasher is
        exercised on both paths so they cost the same.

        :raises InvalidCredentialsError: Unknown email or wrong password.
        :raises ForbiddenError: Correct credentials but account not active.
        """

        def _run() -> tuple[User, TokenPair]:
            with self.rw_uow() as uow:
                user = uow.users.find_by_email(dto.email)
                if user is None:
                    self.hasher.burn(dto.password)
                    raise InvalidCredentialsError()
                if not self.hasher.verify(dto.password, user.password_hash):
                    raise InvalidCredentialsError()
                if not user.is_active:
                    raise ForbiddenError("Account is not active")
                pair = self.tokens.issue_token_pair(user)
                uow.users.update_refresh_token(user.id, pair.refresh_token)
                uow.users.touch_last_login(user.id)
            return user, pair

        try:
            user, pair = self._storage("login", _run)
        except (InvalidCredentialsError, ForbiddenError) as exc:
            log.warning("auth.login_failed: %s", type(exc).__name__)
            raise
        log.info("auth.login", extra={"user_id": str(user.id)})
        return user, pair

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def logout(self, user_id: uuid.UUID) -> None:
        """Clear the stored refresh token. Outstanding access tokens stay valid until expiry."""

        def _run() -> None:
            with self.rw_uow() as uow:
                uow.users.update_refresh_token(user_id, None)

        self._storage("logout", _run)
        log.info("auth.logout", extra={"user_id": str(user_id)})

    def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """
        Rotate ``refresh_token`` into a brand-new pair.

        The overwrite is a compare-and-swap on the stored token, so a token
        already rotated (or raced by a concurrent refresh) is rejected.

        :raises InvalidTokenError: Invalid, not a refresh token, or not the
            currently stored one.
        :raises UserNotFoundError: Identity no longer exists.
        :raises ForbiddenError: Account not active.
        """
        claims = self.tokens.validate_token(refresh_token)
        if not claims.is_refresh:
            raise InvalidTokenError("kind")

        def _run() -> TokenPair:
            with self.rw_uow() as uow:
                user = uow.users.find_by_id(claims.user_id)
                if user is None:
                    raise UserNotFoundError(key=claims.user_id)
                stored = user.refresh_token or ""
                if not hmac.compare_digest(stored.encode(), refresh_token.strip().encode()):
                    log.warning(
                        "auth.refresh_mismatch", extra={"user_id": str(claims.user_id)}
                    )
                    raise InvalidTokenError("superseded")
                if not user.is_active:
                    raise ForbiddenError("Account is not active")
                pair = self.tokens.issue_token_pair(user)
                if not uow.users.swap_refresh_token(user.id, stored, pair.refresh_token):
                    log.warning("auth.refresh_race", extra={"user_id": str(claims.user_id)})
                    raise InvalidTokenError("superseded")
            return pair

        return self._storage("refresh", _run)

    def change_password(self, user_id: uuid.UUID, dto: ChangePasswordIn) -> None:
        """
        Replace the password after checking the current one, then clear the
        refresh token so every session must log in again.

        :raises InvalidPasswordError: ``old_password`` is wrong (nothing changes).
        :raises UserNotFoundError: Identity no longer exists.
        """

        def _run() -> None:
            with self.rw_uow() as uow:
                user = uow.users.find_by_id(user_id)
                if user is None:
                    raise UserNotFoundError(key=user_id)
                if not self.hasher.verify(dto.old_password, user.password_hash):
                    raise InvalidPasswordError()
                uow.users.update_password(user.id, self.hasher.hash(dto.new_password))

        self._storage("change_password", _run)
        log.info("auth.password_changed", extra={"user_id": str(user_id)})

    # ------------------------------------------------------------------ #
    # Token helpers exposed to handlers
    # ------------------------------------------------------------------ #

    def validate_token(self, token: str) -> TokenClaims:
        return self.tokens.validate_token(token)

    def get_identity_from_claims(self, claims: TokenClaims) -> User:
        """
        Load the user a token was issued to.

        :raises UserNotFoundError: If the identity was deleted.
        """

        def _run() -> User:
            with self.ro_uow() as uow:
                user = uow.users.find_by_id(claims.user_id)
            if user is None:
                raise UserNotFoundError(key=claims.user_id)
            return user

        return self._storage("get_identity", _run)
