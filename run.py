"""ASGI entry point:  uvicorn run:app"""

from tradinta.app import app

__all__ = ["app"]
