"""Availability domain - musician calendars and shareable update links"""

from .router import public_router, router

__all__ = ["public_router", "router"]
