"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
concerns. They are the stable contract between repositories, services and the
API layer; the translation to RFC 7807 responses lives in
``blogapi/core/errors.py``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint to match (e.g. ``"uq_users_email"``).
    :returns: ``True`` if the error message mentions the constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    ``code`` optionally overrides the stable machine-readable identifier the
    API layer sends to clients.
    """

    code: str | None = None


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Unknown email or wrong password. Both causes are indistinguishable."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidTokenError(ServiceError):
    """
    Token failed validation or does not match the server-side state.

    :param reason: Internal cause (``expired``, ``signature``, ``kind``...),
        logged but never sent to the client.
    """

    def __init__(self, reason: str = "invalid") -> None:
        super().__init__(f"Invalid token ({reason})")
        self.reason = reason


class GuardFailure(str, enum.Enum):
    """Why the access guard rejected a request."""

    MISSING_HEADER = "missing_header"
    INVALID_SCHEME = "invalid_scheme"
    EMPTY_TOKEN = "empty_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    WRONG_TOKEN_KIND = "wrong_token_kind"
    USER_NOT_FOUND = "user_not_found"
    INACTIVE_ACCOUNT = "inactive_account"


class AuthenticationError(ServiceError):
    """
    Raised by the access guard in required mode.

    Every ``reason`` produces the same "unauthorized" client response.
    """

    def __init__(self, reason: GuardFailure) -> None:
        super().__init__(f"Authentication failed: {reason.value}")
        self.reason = reason


class InvalidPasswordError(ServiceError):
    """The current password supplied for a password change is wrong."""

    def __init__(self) -> None:
        super().__init__("Current password is incorrect")


# --------------------------------------------------------------------------- #
# Lookup / authorization / conflicts
# --------------------------------------------------------------------------- #


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Post").
    :param key: Identifier or search key.
    """

    entity: str
    key: Any

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True, eq=False)
class UserNotFoundError(NotFoundError):
    """Identity referenced by id/claims no longer exists."""

    entity: str = "User"
    key: Any = None


class ForbiddenError(ServiceError):
    """
    Caller is authenticated but not allowed to perform the action.

    Covers inactive accounts, self-demotion and insufficient role.
    """

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message)


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    :param code: Stable error code exposed to clients.
    """

    entity: str
    detail: str
    code: str | None = "conflict"

    def __str__(self) -> str:
        return self.detail


class InternalError(ServiceError):
    """Storage or crypto failure. Logged with context, reported without detail."""

    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(message)
