"""Post endpoints."""

from __future__ import annotations

import uuid

from flask import Blueprint

from blogapi.api.deps import (
    get_post_service,
    json_body,
    json_response,
    optional_auth,
    parse_pagination,
    parse_search,
    require_auth,
    timing,
)
from blogapi.schemas import PostCreateSchema, PostSchema, PostUpdateSchema, build_meta
from blogapi.services.auth import AuthContext

bp = Blueprint("posts", __name__)

post_schema = PostSchema()
post_list_schema = PostSchema(many=True)
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()


def _viewer(auth: AuthContext | None):
    return auth.user if auth is not None else None


@bp.get("")
@optional_auth
@timing
def list_posts(auth: AuthContext | None):
    """Published posts for everyone; admins also see drafts and archived posts."""

    page = get_post_service().list_posts(parse_pagination(), viewer=_viewer(auth))
    return json_response({"data": post_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/search")
@timing
def search_posts():
    query, pagination = parse_search()
    page = get_post_service().search_posts(query, pagination)
    return json_response({"data": post_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/my")
@require_auth
@timing
def my_posts(auth: AuthContext):
    page = get_post_service().list_by_author(auth.user_id, parse_pagination())
    return json_response({"data": post_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/<uuid:post_id>")
@optional_auth
@timing
def get_post(post_id: uuid.UUID, auth: AuthContext | None):
    post = get_post_service().view_post(post_id=post_id, viewer=_viewer(auth))
    return json_response({"data": post_schema.dump(post)})


@bp.get("/slug/<slug>")
@optional_auth
@timing
def get_post_by_slug(slug: str, auth: AuthContext | None):
    post = get_post_service().view_post(slug=slug, viewer=_viewer(auth))
    return json_response({"data": post_schema.dump(post)})


@bp.post("")
@require_auth
@timing
def create_post(auth: AuthContext):
    """Create a post owned by the caller (draft unless stated otherwise)."""

    data = post_create_schema.load(json_body())
    post = get_post_service().create_post(auth.user, data)
    return json_response({"data": post_schema.dump(post)}, status=201)


@bp.put("/<uuid:post_id>")
@require_auth
@timing
def update_post(post_id: uuid.UUID, auth: AuthContext):
    data = post_update_schema.load(json_body())
    post = get_post_service().update_post(auth.user, post_id, data)
    return json_response({"data": post_schema.dump(post)})


@bp.delete("/<uuid:post_id>")
@require_auth
@timing
def delete_post(post_id: uuid.UUID, auth: AuthContext):
    get_post_service().delete_post(auth.user, post_id)
    return "", 204
