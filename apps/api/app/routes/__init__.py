"""Route modules."""

from .content_entries import router as content_entries_router
from .user_roles import router as user_roles_router
from .users import router as users_router

__all__ = ["content_entries_router", "user_roles_router", "users_router"]
