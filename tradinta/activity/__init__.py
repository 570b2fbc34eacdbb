from .routes import activity_router
from .schemas import ActivityActionEnum
from .service import ActivityService

__all__ = ["activity_router", "ActivityActionEnum", "ActivityService"]
