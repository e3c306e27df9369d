from blogapi.models.post import Post, PostStatus
from blogapi.models.user import User, UserRole, UserStatus

__all__ = [
    "Post",
    "PostStatus",
    "User",
    "UserRole",
    "UserStatus",
]
