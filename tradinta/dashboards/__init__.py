from .registry import DASHBOARDS, Dashboard
from .routes import dashboards_router

__all__ = ["DASHBOARDS", "Dashboard", "dashboards_router"]
