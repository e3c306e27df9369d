"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    validate_password_strength,
)
from .common import MetaSchema, PaginationQuerySchema, SearchQuerySchema, build_meta
from .post import PostCreateSchema, PostSchema, PostUpdateSchema
from .user import (
    AuthorSchema,
    UserRoleSchema,
    UserSchema,
    UserStatusSchema,
    UserUpdateSchema,
)

__all__ = [
    "ChangePasswordSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "validate_password_strength",
    "MetaSchema",
    "PaginationQuerySchema",
    "SearchQuerySchema",
    "build_meta",
    "PostCreateSchema",
    "PostSchema",
    "PostUpdateSchema",
    "AuthorSchema",
    "UserRoleSchema",
    "UserSchema",
    "UserStatusSchema",
    "UserUpdateSchema",
]
