"""Planner domain - monthly planners, slots and musician assignments"""

from .router import assignments_router, router, slots_router

__all__ = ["assignments_router", "router", "slots_router"]
