"""Token issuance and validation.

Pure with respect to storage: nothing here reads or writes the database.
Rotation against the stored refresh token is orchestrated by
:class:`blogapi.services.auth.service.AuthService`.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from blogapi.models.user import User, UserRole
from blogapi.services._shared.errors import InvalidTokenError
from blogapi.services._shared.ports import TokenProvider
from blogapi.services.auth.dto import (
    ACCESS_KIND,
    REFRESH_KIND,
    AuthTokenConfig,
    TokenClaims,
    TokenPair,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _from_ts(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


class TokenService:
    """
    Issue and validate signed access/refresh token pairs.

    :param provider: JWT adapter (signing, decoding, algorithm allow-list).
    :param cfg: Access/refresh lifetimes.
    :param clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        provider: TokenProvider,
        cfg: AuthTokenConfig,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.provider = provider
        self.cfg = cfg
        self._clock = clock

    def issue_token_pair(self, user: User) -> TokenPair:
        """Sign a fresh access/refresh pair for ``user``.

        Both tokens carry the same ``iat``/``nbf`` and the role the user has
        right now.
        """
        now = self._clock().replace(microsecond=0)
        issued = int(now.timestamp())
        identity = str(user.id)
        role = UserRole(user.role).value
        base: dict[str, Any] = {
            "user_id": identity,
            "email": user.email,
            "role": role,
            "iat": issued,
            "nbf": issued,
        }
        access_exp = now + self.cfg.access_expires
        refresh_exp = now + self.cfg.refresh_expires

        access = self.provider.create_access_token(
            identity=identity,
            additional_claims={**base, "exp": int(access_exp.timestamp())},
            expires_delta=self.cfg.access_expires,
        )
        refresh = self.provider.create_refresh_token(
            identity=identity,
            additional_claims={**base, "exp": int(refresh_exp.timestamp())},
            expires_delta=self.cfg.refresh_expires,
        )
        return TokenPair(access_token=access, refresh_token=refresh, expires_at=access_exp)

    def validate_token(self, token: str) -> TokenClaims:
        """Verify ``token`` and return its claims.

        :raises InvalidTokenError: Bad signature, unexpected algorithm,
            expired, not yet valid, wrong issuer, or claims that do not parse.
        """
        if not isinstance(token, str) or not token.strip():
            raise InvalidTokenError("empty")
        payload = self.provider.decode(token.strip())
        try:
            return self._claims_from_payload(payload)
        except (KeyError, ValueError, TypeError) as exc:
            raise InvalidTokenError("claims") from exc

    @staticmethod
    def _claims_from_payload(payload: Mapping[str, Any]) -> TokenClaims:
        kind = payload.get("type")
        if kind not in (ACCESS_KIND, REFRESH_KIND):
            raise ValueError(f"unknown token kind {kind!r}")
        subject = str(payload["sub"])
        user_id = uuid.UUID(str(payload["user_id"]))
        if subject != str(user_id):
            raise ValueError("subject does not match user_id")
        return TokenClaims(
            user_id=user_id,
            email=str(payload["email"]),
            role=UserRole(payload["role"]),
            kind=kind,
            issued_at=_from_ts(payload["iat"]),
            not_before=_from_ts(payload.get("nbf", payload["iat"])),
            expires_at=_from_ts(payload["exp"]),
            issuer=payload.get("iss"),
            subject=subject,
            jti=payload.get("jti"),
        )
