"""Tradinta marketplace backend — access control service."""

__version__ = "1.0.0"
