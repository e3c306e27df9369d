"""Centralized JSON (RFC 7807) error handling for the API.

Service-layer exceptions (:mod:`blogapi.services._shared.errors`) are
framework-agnostic; this module is the single place where they become HTTP
status codes and ``application/problem+json`` payloads.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from blogapi.core.logger import ensure_request_id
from blogapi.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    UserNotFoundError,
)

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


# Ordered: subclasses before their bases (UserNotFoundError before NotFoundError).
_SERVICE_ERROR_MAP: tuple[tuple[type[ServiceError], HTTPStatus, str, str], ...] = (
    (AuthenticationError, HTTPStatus.UNAUTHORIZED, "unauthorized", "Authentication required"),
    (InvalidCredentialsError, HTTPStatus.UNAUTHORIZED, "invalid_credentials", "Invalid email or password"),
    (InvalidTokenError, HTTPStatus.UNAUTHORIZED, "invalid_token", "Invalid or expired token"),
    (ForbiddenError, HTTPStatus.FORBIDDEN, "forbidden", ""),
    (UserNotFoundError, HTTPStatus.NOT_FOUND, "user_not_found", "User not found"),
    (NotFoundError, HTTPStatus.NOT_FOUND, "not_found", ""),
    (ConflictError, HTTPStatus.CONFLICT, "conflict", ""),
    (InvalidPasswordError, HTTPStatus.BAD_REQUEST, "invalid_password", "Current password is incorrect"),
    (InternalError, HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"),
)


def service_error_to_problem(err: ServiceError) -> tuple[dict[str, Any], int]:
    """Translate a service-layer error into ``(problem, status)``.

    Messages listed in the mapping are fixed so that different internal causes
    (unknown email vs. wrong password, expired vs. forged token) produce the
    same client payload. An empty mapped message means the error's own text is
    safe to expose.
    """
    for exc_type, status, code, message in _SERVICE_ERROR_MAP:
        if isinstance(err, exc_type):
            code = getattr(err, "code", None) or code
            problem = _as_problem(status=int(status), code=code, message=message or str(err))
            return problem, int(status)
    problem = _as_problem(
        status=HTTPStatus.BAD_REQUEST, code="bad_request", message=str(err) or "Bad request"
    )
    return problem, int(HTTPStatus.BAD_REQUEST)


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        problem, status = service_error_to_problem(err)
        extra: dict[str, Any] = {"status": status}
        if isinstance(err, AuthenticationError):
            # The client only ever sees "unauthorized"; operators see why.
            extra["reason"] = err.reason.value
        if status >= 500:
            log.error("ServiceError: code=%s", problem["code"], extra=extra, exc_info=err)
        else:
            log.warning("ServiceError: code=%s", problem["code"], extra=extra)
        return _problem_response(problem), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _problem_response(problem), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.normalized_messages()},
        )
        log.warning("ValidationError: fields=%s", sorted(err.normalized_messages()))
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        problem = _as_problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
        )
        log.error("IntegrityError", exc_info=True)
        return _problem_response(problem), HTTPStatus.CONFLICT

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError", exc_info=True)
        return _problem_response(problem), HTTPStatus.SERVICE_UNAVAILABLE

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("Unhandled exception", exc_info=True)
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
