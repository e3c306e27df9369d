"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from blogapi.api.deps import (
    auth_rate_limit,
    get_auth_service,
    json_body,
    json_response,
    require_auth,
    timing,
)
from blogapi.core.extensions import limiter
from blogapi.schemas import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from blogapi.services.auth import AuthContext
from blogapi.services.auth.dto import ChangePasswordIn, LoginIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


@bp.post("/register")
@limiter.limit(auth_rate_limit)
@timing
def register():
    """Create an account and return it with a fresh token pair."""

    data = register_schema.load(json_body())
    user, pair = get_auth_service().register(RegisterIn(**data))
    body = {"data": {"user": user_schema.dump(user), "tokens": token_schema.dump(pair)}}
    return json_response(body, status=201)


@bp.post("/login")
@limiter.limit(auth_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(json_body())
    user, pair = get_auth_service().login(LoginIn(**data))
    body = {"data": {"user": user_schema.dump(user), "tokens": token_schema.dump(pair)}}
    return json_response(body)


@bp.post("/refresh")
@limiter.limit(auth_rate_limit)
@timing
def refresh():
    """Rotate a refresh token into a new pair."""

    data = refresh_schema.load(json_body())
    pair = get_auth_service().refresh_tokens(data["refresh_token"])
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout(auth: AuthContext):
    get_auth_service().logout(auth.user_id)
    return json_response({"data": {"message": "Logged out successfully"}})


@bp.get("/me")
@require_auth
@timing
def me(auth: AuthContext):
    """Return the authenticated user profile."""

    return json_response({"data": user_schema.dump(auth.user)})


@bp.post("/change-password")
@require_auth
@timing
def change_password(auth: AuthContext):
    """Change the caller's password; every session must log in again."""

    data = change_password_schema.load(json_body())
    get_auth_service().change_password(auth.user_id, ChangePasswordIn(**data))
    return json_response({"data": {"message": "Password changed successfully"}})
