from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from blogapi.models.user import UserRole

ACCESS_KIND = "access"
REFRESH_KIND = "refresh"
TOKEN_TYPE = "Bearer"

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Email address (normalized by the model).
    :param password: Raw password, already checked against the strength policy.
    """

    email: str
    password: str
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :param password: Raw password (to be verified).
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    old_password: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access/refresh pair returned to clients.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param expires_at: Expiry of the access token.
    :param token_type: Always ``"Bearer"``.
    """

    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str = TOKEN_TYPE


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a token.

    ``role`` is the role at issuance time and goes stale after a role change;
    authorization reads the stored role instead.
    """

    user_id: uuid.UUID
    email: str
    role: UserRole
    kind: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    issuer: str | None
    subject: str
    jti: str | None = None

    @property
    def is_access(self) -> bool:
        return self.kind == ACCESS_KIND

    @property
    def is_refresh(self) -> bool:
        return self.kind == REFRESH_KIND


# ------------------------ Config DTO --------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    """

    access_expires: timedelta
    refresh_expires: timedelta

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from app config (``JWT_EXPIRY_HOURS`` / ``JWT_REFRESH_EXPIRY_HOURS``)."""
        return cls(
            access_expires=timedelta(hours=int(config.get("JWT_EXPIRY_HOURS", 24))),
            refresh_expires=timedelta(hours=int(config.get("JWT_REFRESH_EXPIRY_HOURS", 168))),
        )
