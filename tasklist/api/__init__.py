from tasklist.api.auth import router as auth_router
from tasklist.api.profile import router as profile_router
from tasklist.api.todos import router as todos_router

__all__ = ["auth_router", "profile_router", "todos_router"]
