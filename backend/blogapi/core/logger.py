"""JSON log lines tagged with a per-request correlation id."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Inbound ids are honoured in this order; otherwise a UUID4 is minted.
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra={...}`` keys promoted onto the JSON line.
EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "method",
    "path",
    "status",
    "remote_addr",
    "user_id",
    "reason",
)

access_log = logging.getLogger("blogapi.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, request id, extras."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        line: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        line.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Correlation id of the current request, stored on ``g`` on first use.

    Outside a request every call returns a fresh id.
    """
    if not has_request_context():
        return str(uuid4())
    current = g.get("request_id")
    if current:
        return current
    inbound = next(
        (request.headers[name] for name in INBOUND_ID_HEADERS if request.headers.get(name)),
        None,
    )
    g.request_id = inbound or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route every logger through a single JSON handler on stdout."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Tag each request with an id and emit one ``blogapi.access`` line per response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:  # pragma: no cover - integration glue
        # The test client can share one app context across requests.
        g.pop("request_id", None)
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_and_tag_response(response: Response) -> Response:  # pragma: no cover
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        access_log.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "request.completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": (
                    round((time.perf_counter() - started) * 1000, 2) if started else None
                ),
                "remote_addr": request.remote_addr,
            },
        )
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id"]
