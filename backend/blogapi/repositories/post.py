"""Post repository."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ColumnElement, or_, select, update

from blogapi.models.post import Post, PostStatus
from blogapi.repositories.base import BaseRepository, Page, Pagination


class PostRepository(BaseRepository[Post]):
    """Persistence-only repository for :class:`Post`."""

    model = Post

    def _sortable_fields(self):
        return {
            "title": Post.title,
            "created_at": Post.created_at,
            "updated_at": Post.updated_at,
            "view_count": Post.view_count,
        }

    def _updatable_fields(self):
        return {"title", "content", "excerpt", "featured_image", "status"}

    def get_by_slug(self, slug: str) -> Post | None:
        return self._first(self._select(Post.slug == slug))

    def slug_exists(self, slug: str) -> bool:
        """Includes soft-deleted rows, which still hold their unique slug."""
        stmt = select(Post.id).where(Post.slug == slug).limit(1)
        return self.session.execute(stmt).first() is not None

    def list_posts(
        self,
        pagination: Pagination,
        *,
        status: PostStatus | None = None,
        author_id: uuid.UUID | None = None,
    ) -> Page[Post]:
        """Page through posts, optionally restricted by status and/or author."""
        criteria: list[ColumnElement[bool]] = []
        if status is not None:
            criteria.append(Post.status == status)
        if author_id is not None:
            criteria.append(Post.user_id == author_id)
        return self.paginate(pagination, *criteria)

    def search(
        self, query: str, pagination: Pagination, *, status: PostStatus | None = None
    ) -> Page[Post]:
        """Case-insensitive substring match on title and content."""
        pattern = f"%{query.strip()}%"
        criteria: list[Any] = [or_(Post.title.ilike(pattern), Post.content.ilike(pattern))]
        if status is not None:
            criteria.append(Post.status == status)
        return self.paginate(pagination, *criteria)

    def increment_view_count(self, post_id: uuid.UUID) -> None:
        """``view_count = view_count + 1`` in SQL, so concurrent reads never lose a hit."""
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)
