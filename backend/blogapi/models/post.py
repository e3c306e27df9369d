"""Blog post model."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogapi.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin
from .user import User


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Post(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Article authored by a :class:`~blogapi.models.user.User`.

    Only ``published`` posts are public; drafts and archived posts are visible
    to their author and to admins.
    """

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    excerpt: Mapped[str | None] = mapped_column(String(500))
    featured_image: Mapped[str | None] = mapped_column(String(500))
    status: Mapped[PostStatus] = mapped_column(
        Enum(
            PostStatus,
            native_enum=False,
            length=20,
            values_callable=lambda cls: [m.value for m in cls],
        ),
        nullable=False,
        default=PostStatus.DRAFT,
        index=True,
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author: Mapped[User] = relationship(back_populates="posts", lazy="joined")

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED
