"""Blog post use-cases."""

from blogapi.services.posts.service import PostService, can_view, generate_slug

__all__ = ["PostService", "can_view", "generate_slug"]
