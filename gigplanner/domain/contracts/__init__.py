"""Contract domain - generation, sending and tokenized e-signature"""

from .router import planner_contracts_router, public_router, router

__all__ = ["planner_contracts_router", "public_router", "router"]
