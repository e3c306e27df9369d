"""Shared API helpers: service wiring, request parsing and auth decorators."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from blogapi.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from blogapi.models.user import UserRole
from blogapi.repositories.base import Pagination
from blogapi.schemas.common import PaginationQuerySchema, SearchQuerySchema
from blogapi.services._shared.base import BaseService
from blogapi.services.auth import AccessGuard, AuthService, TokenService
from blogapi.services.auth.dto import AuthTokenConfig
from blogapi.services.posts import PostService
from blogapi.services.users import UserService

F = TypeVar("F", bound=Callable[..., Any])

_pagination_schema = PaginationQuerySchema()
_search_schema = SearchQuerySchema()


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def get_token_service() -> TokenService:
    return TokenService(JWTTokenProvider(), AuthTokenConfig.from_mapping(current_app.config))


def get_auth_service() -> AuthService:
    return AuthService(tokens=get_token_service())


def get_access_guard() -> AccessGuard:
    return AccessGuard(tokens=get_token_service())


def get_user_service() -> UserService:
    return UserService()


def get_post_service() -> PostService:
    return PostService()


# --------------------------------------------------------------------------- #
# Request parsing
# --------------------------------------------------------------------------- #


def parse_pagination() -> Pagination:
    """Parse ``page``, ``page_size`` and ``sort`` from ``request.args``."""

    data = _pagination_schema.load(request.args, unknown="exclude")
    return BaseService.ensure_pagination(
        page=data["page"], page_size=data["page_size"], sort=data["sort"]
    )


def parse_search() -> tuple[str, Pagination]:
    """Parse a required ``q`` plus pagination from ``request.args``."""

    data = _search_schema.load(request.args, unknown="exclude")
    pagination = BaseService.ensure_pagination(
        page=data["page"], page_size=data["page_size"], sort=data["sort"]
    )
    return data["q"], pagination


def json_body() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def auth_rate_limit() -> str:
    """Per-route limit for the unauthenticated auth endpoints."""

    return str(current_app.config.get("AUTH_RATE_LIMIT", "10 per minute"))


# --------------------------------------------------------------------------- #
# Access control
# --------------------------------------------------------------------------- #


def require_auth(func: F) -> F:
    """Resolve the bearer token or fail with 401; passes ``auth=AuthContext``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        kwargs["auth"] = get_access_guard().authenticate(request.headers.get("Authorization"))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Like :func:`require_auth` but passes ``auth=None`` for anonymous callers."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        kwargs["auth"] = get_access_guard().try_authenticate(
            request.headers.get("Authorization")
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*roles: UserRole | str) -> Callable[[F], F]:
    """Required auth followed by a role gate (403 on mismatch)."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            ctx = get_access_guard().authenticate(request.headers.get("Authorization"))
            AccessGuard.authorize(ctx, roles)
            kwargs["auth"] = ctx
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
