"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

import re

from marshmallow import Schema, ValidationError, fields, validate

_SPECIAL = re.compile(r"[^A-Za-z0-9]")


def validate_password_strength(value: str) -> None:
    """At least 8 characters with upper, lower, digit and special character."""

    problems = []
    if len(value) < 8:
        problems.append("Password must be at least 8 characters long.")
    if not any(ch.isupper() for ch in value):
        problems.append("Password must contain an uppercase letter.")
    if not any(ch.islower() for ch in value):
        problems.append("Password must contain a lowercase letter.")
    if not any(ch.isdigit() for ch in value):
        problems.append("Password must contain a digit.")
    if not _SPECIAL.search(value):
        problems.append("Password must contain a special character.")
    if problems:
        raise ValidationError(problems)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True,
        load_only=True,
        validate=[validate.Length(max=128), validate_password_strength],
    )
    first_name = fields.String(load_default="", validate=validate.Length(max=100))
    last_name = fields.String(load_default="", validate=validate.Length(max=100))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class ChangePasswordSchema(Schema):
    """Input payload for changing the caller's password."""

    old_password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))
    new_password = fields.String(
        required=True,
        load_only=True,
        validate=[validate.Length(max=128), validate_password_strength],
    )


class TokenPairSchema(Schema):
    """Wire form of an issued access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    expires_at = fields.DateTime(required=True, format="iso")
    token_type = fields.String(required=True)
