"""Reference data domain - venues, categories, musicians and pay rates"""

from .router import router

__all__ = ["router"]
