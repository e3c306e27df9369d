"""User endpoints."""

from __future__ import annotations

import uuid

from flask import Blueprint

from blogapi.api.deps import (
    get_user_service,
    json_body,
    json_response,
    parse_pagination,
    parse_search,
    require_auth,
    require_roles,
    timing,
)
from blogapi.models.user import UserRole
from blogapi.schemas import (
    UserRoleSchema,
    UserSchema,
    UserStatusSchema,
    UserUpdateSchema,
    build_meta,
)
from blogapi.services.auth import AuthContext

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_update_schema = UserUpdateSchema()
user_status_schema = UserStatusSchema()
user_role_schema = UserRoleSchema()


@bp.get("")
@require_auth
@timing
def list_users(auth: AuthContext):
    """Return paginated users."""

    page = get_user_service().list_users(parse_pagination())
    return json_response({"data": user_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/search")
@require_auth
@timing
def search_users(auth: AuthContext):
    query, pagination = parse_search()
    page = get_user_service().search_users(query, pagination)
    return json_response({"data": user_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/<uuid:user_id>")
@require_auth
@timing
def get_user(user_id: uuid.UUID, auth: AuthContext):
    user = get_user_service().get_user(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.put("/<uuid:user_id>")
@require_auth
@timing
def update_user(user_id: uuid.UUID, auth: AuthContext):
    """Update profile fields (self or admin)."""

    data = user_update_schema.load(json_body())
    user = get_user_service().update_profile(auth.user, user_id, data)
    return json_response({"data": user_schema.dump(user)})


@bp.delete("/<uuid:user_id>")
@require_roles(UserRole.ADMIN)
@timing
def delete_user(user_id: uuid.UUID, auth: AuthContext):
    get_user_service().delete_user(auth.user, user_id)
    return "", 204


@bp.patch("/<uuid:user_id>/status")
@require_roles(UserRole.ADMIN)
@timing
def update_user_status(user_id: uuid.UUID, auth: AuthContext):
    data = user_status_schema.load(json_body())
    user = get_user_service().update_status(auth.user, user_id, data["status"])
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/<uuid:user_id>/role")
@require_roles(UserRole.ADMIN)
@timing
def update_user_role(user_id: uuid.UUID, auth: AuthContext):
    """Change a user's role; role gates see it on the next request."""

    data = user_role_schema.load(json_body())
    user = get_user_service().update_role(auth.user, user_id, data["role"])
    return json_response({"data": user_schema.dump(user)})
