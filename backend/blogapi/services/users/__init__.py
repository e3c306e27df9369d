"""User directory and administration."""

from blogapi.services.users.service import UserService

__all__ = ["UserService"]
