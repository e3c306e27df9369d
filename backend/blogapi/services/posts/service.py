from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping
from typing import Any

from blogapi.models.post import Post, PostStatus
from blogapi.models.user import User
from blogapi.repositories.base import Page, Pagination
from blogapi.services._shared.base import BaseService
from blogapi.services._shared.errors import NotFoundError

log = logging.getLogger(__name__)

_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9-]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def generate_slug(title: str) -> str:
    """URL-friendly slug from ``title`` plus an 8-char random suffix.

    ``"Hello, World!"`` becomes something like ``"hello-world-1a2b3c4d"``.
    """
    slug = title.strip().lower().replace(" ", "-")
    slug = _INVALID_SLUG_CHARS.sub("", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug).strip("-")
    suffix = uuid.uuid4().hex[:8]
    return f"{slug}-{suffix}" if slug else suffix


def can_view(post: Post, viewer: User | None) -> bool:
    """Published posts are public; anything else needs the author or an admin."""
    if post.status == PostStatus.PUBLISHED:
        return True
    if viewer is None:
        return False
    return viewer.is_admin or viewer.id == post.user_id


class PostService(BaseService):
    """Blog post use-cases."""

    # ----------------------------- Queries ---------------------------------

    def list_posts(self, pagination: Pagination, viewer: User | None = None) -> Page[Post]:
        """Admins see every status; everyone else only published posts."""
        status = None if viewer is not None and viewer.is_admin else PostStatus.PUBLISHED
        with self.ro_uow() as uow:
            page = uow.posts.list_posts(pagination, status=status)
        return page

    def list_by_author(self, author_id: uuid.UUID, pagination: Pagination) -> Page[Post]:
        with self.ro_uow() as uow:
            page = uow.posts.list_posts(pagination, author_id=author_id)
        return page

    def search_posts(self, query: str, pagination: Pagination) -> Page[Post]:
        with self.ro_uow() as uow:
            page = uow.posts.search(query, pagination, status=PostStatus.PUBLISHED)
        return page

    def view_post(
        self,
        *,
        post_id: uuid.UUID | None = None,
        slug: str | None = None,
        viewer: User | None = None,
    ) -> Post:
        """
        Fetch a post for display and count the view.

        Posts the viewer may not see are reported as missing, so their
        existence does not leak.

        :raises NotFoundError: Unknown, deleted or not visible to ``viewer``.
        """
        key = post_id if post_id is not None else slug
        with self.rw_uow() as uow:
            if post_id is not None:
                post = uow.posts.get(post_id)
            else:
                post = uow.posts.get_by_slug(slug or "")
            if post is None or not can_view(post, viewer):
                raise NotFoundError("Post", key)
            uow.posts.increment_view_count(post.id)
        return post

    # ----------------------------- Commands --------------------------------

    def create_post(self, author: User, data: Mapping[str, Any]) -> Post:
        with self.rw_uow() as uow:
            slug = generate_slug(data["title"])
            while uow.posts.slug_exists(slug):
                slug = generate_slug(data["title"])
            post = Post(
                title=data["title"],
                slug=slug,
                content=data.get("content") or "",
                excerpt=data.get("excerpt"),
                featured_image=data.get("featured_image"),
                status=PostStatus(data.get("status") or PostStatus.DRAFT),
                user_id=author.id,
            )
            uow.posts.add(post)
        log.info("posts.created: %s", post.id)
        return post

    def update_post(self, actor: User, post_id: uuid.UUID, data: Mapping[str, Any]) -> Post:
        """
        Owner or admin only. A new title regenerates the slug.

        :raises NotFoundError: Unknown or deleted post.
        :raises ForbiddenError: ``actor`` is neither the author nor an admin.
        """
        with self.rw_uow() as uow:
            post = uow.posts.get(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner_or_admin(actor, post.user_id)
            fields = dict(data)
            if "status" in fields:
                fields["status"] = PostStatus(fields["status"])
            uow.posts.assign_updates(post, fields)
            if "title" in fields:
                post.slug = generate_slug(post.title)
        return post

    def delete_post(self, actor: User, post_id: uuid.UUID) -> None:
        """:raises ForbiddenError: ``actor`` is neither the author nor an admin."""
        with self.rw_uow() as uow:
            post = uow.posts.get(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner_or_admin(actor, post.user_id)
            uow.posts.delete(post)
        log.info("posts.deleted: %s", post_id)
