"""Authentication services: token issuance, session lifecycle and the access guard."""

from blogapi.services.auth.guard import AccessGuard, AuthContext
from blogapi.services.auth.service import AuthService
from blogapi.services.auth.tokens import TokenService

__all__ = ["AccessGuard", "AuthContext", "AuthService", "TokenService"]
