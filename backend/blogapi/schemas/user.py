"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from blogapi.models.user import UserRole, UserStatus


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.UUID(required=True)
    email = fields.Email(required=True)
    first_name = fields.String()
    last_name = fields.String()
    full_name = fields.String()
    role = fields.Enum(UserRole, by_value=True)
    status = fields.Enum(UserStatus, by_value=True)
    avatar = fields.String(allow_none=True)
    bio = fields.String(allow_none=True)
    phone_number = fields.String(allow_none=True)
    email_verified_at = fields.DateTime(allow_none=True)
    last_login_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class AuthorSchema(Schema):
    """Compact author block embedded in posts."""

    id = fields.UUID(required=True)
    first_name = fields.String()
    last_name = fields.String()
    full_name = fields.String()
    avatar = fields.String(allow_none=True)


class UserUpdateSchema(Schema):
    """Profile fields a user may edit."""

    first_name = fields.String(validate=validate.Length(min=1, max=100))
    last_name = fields.String(validate=validate.Length(min=1, max=100))
    bio = fields.String(allow_none=True, validate=validate.Length(max=2000))
    phone_number = fields.String(allow_none=True, validate=validate.Length(max=20))
    avatar = fields.String(allow_none=True, validate=validate.Length(max=500))


class UserStatusSchema(Schema):
    status = fields.Enum(UserStatus, by_value=True, required=True)


class UserRoleSchema(Schema):
    role = fields.Enum(UserRole, by_value=True, required=True)
