"""Health check endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from blogapi.api.deps import json_response, timing
from blogapi.core.extensions import db

bp = Blueprint("health", __name__)


def database_ok() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        return False
    return True


@bp.get("")
@timing
def healthcheck():
    """Return application and database health information."""

    db_status = "ok" if database_ok() else "fail"
    version = current_app.config.get("APP_VERSION", "dev")
    commit = current_app.config.get("APP_COMMIT", "unknown")
    payload = {"status": "ok", "db": db_status, "version": version, "commit": commit}
    return json_response(payload)


@bp.get("/ready")
@timing
def readiness():
    """503 until the database answers."""

    if not database_ok():
        return json_response({"status": "not_ready", "db": "fail"}, status=503)
    return json_response({"status": "ready", "db": "ok"})


@bp.get("/live")
def liveness():
    return json_response({"status": "alive"})
