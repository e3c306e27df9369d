"""Administrative endpoints."""

from __future__ import annotations

import platform
import sys
from importlib.metadata import version

from flask import Blueprint, current_app

from blogapi.api.deps import json_response, require_roles, timing
from blogapi.api.v1.health import database_ok
from blogapi.models.user import UserRole
from blogapi.services.auth import AuthContext

bp = Blueprint("admin", __name__)


@bp.get("/health/info")
@require_roles(UserRole.ADMIN)
@timing
def health_info(auth: AuthContext):
    """Runtime details for operators."""

    cfg = current_app.config
    payload = {
        "app": cfg.get("APP_NAME"),
        "version": cfg.get("APP_VERSION", "dev"),
        "commit": cfg.get("APP_COMMIT", "unknown"),
        "environment": cfg.get("ENVIRONMENT"),
        "python": sys.version.split()[0],
        "flask": version("flask"),
        "platform": platform.platform(),
        "db": "ok" if database_ok() else "fail",
        "rate_limiting": bool(cfg.get("RATELIMIT_ENABLED", True)),
    }
    return json_response({"data": payload})
