"""Post resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from blogapi.models.post import PostStatus

from .user import AuthorSchema


class PostSchema(Schema):
    """Public representation of a post."""

    id = fields.UUID(required=True)
    title = fields.String(required=True)
    slug = fields.String(required=True)
    content = fields.String()
    excerpt = fields.String(allow_none=True)
    featured_image = fields.String(allow_none=True)
    status = fields.Enum(PostStatus, by_value=True)
    view_count = fields.Integer()
    user_id = fields.UUID()
    author = fields.Nested(AuthorSchema, allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class PostCreateSchema(Schema):
    """Payload for creating a post; ``status`` defaults to draft."""

    title = fields.String(required=True, validate=validate.Length(min=3, max=255))
    content = fields.String(required=True, validate=validate.Length(min=10))
    excerpt = fields.String(allow_none=True, validate=validate.Length(max=500))
    featured_image = fields.String(allow_none=True, validate=validate.Length(max=500))
    status = fields.Enum(PostStatus, by_value=True, load_default=PostStatus.DRAFT)


class PostUpdateSchema(Schema):
    title = fields.String(validate=validate.Length(min=3, max=255))
    content = fields.String(validate=validate.Length(min=10))
    excerpt = fields.String(allow_none=True, validate=validate.Length(max=500))
    featured_image = fields.String(allow_none=True, validate=validate.Length(max=500))
    status = fields.Enum(PostStatus, by_value=True)
