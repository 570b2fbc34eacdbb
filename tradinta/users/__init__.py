from .routes import users_router
from .service import UserService

__all__ = ["users_router", "UserService"]
