"""Contract template domain - reusable terms with one default"""

from .router import router

__all__ = ["router"]
