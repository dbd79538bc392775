"""Invoice domain - monthly musician invoices"""

from .router import planner_invoices_router, router

__all__ = ["planner_invoices_router", "router"]
