from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import jwt
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from blogapi.services._shared.errors import InvalidTokenError
from blogapi.services._shared.ports import TokenProvider

log = logging.getLogger(__name__)


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm (``JWT_ALGORITHM``), accepted algorithms
    (``JWT_DECODE_ALGORITHMS``) and issuer come from the app config, so an
    active Flask app context is required.

    ``flask-jwt-extended`` stamps ``type`` (access/refresh), ``jti`` and
    ``fresh``; everything in ``additional_claims`` is merged last, which lets
    the caller pin ``iat``/``nbf``/``exp`` to one shared instant.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any],
        expires_delta: timedelta,
    ) -> str:
        return cast(
            str,
            create_access_token(
                identity=identity,
                additional_claims=additional_claims,
                expires_delta=expires_delta,
            ),
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any],
        expires_delta: timedelta,
    ) -> str:
        return cast(
            str,
            create_refresh_token(
                identity=identity,
                additional_claims=additional_claims,
                expires_delta=expires_delta,
            ),
        )

    def decode(self, token: str) -> dict[str, Any]:
        """Verify signature, algorithm allow-list, ``exp``, ``nbf`` and ``iss``.

        :raises InvalidTokenError: With ``reason="expired"`` for expired
            tokens and the library exception name for everything else.
        """
        try:
            return cast(dict[str, Any], decode_token(token))
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("expired") from exc
        except (jwt.PyJWTError, JWTExtendedException) as exc:
            log.debug("token.decode_failed: %s", type(exc).__name__)
            raise InvalidTokenError(type(exc).__name__) from exc
