from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """Port for signing and decoding JWTs.

    Implementations sign with the configured HMAC secret and decode with the
    same single allowed algorithm. ``decode`` raises
    :class:`~blogapi.services._shared.errors.InvalidTokenError` on any invalid token
    (signature, algorithm, expiry, not-before, issuer, malformed input).
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any],
        expires_delta: timedelta,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any],
        expires_delta: timedelta,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...
