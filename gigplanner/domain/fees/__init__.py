from .calculator import (
    CATEGORY_DEFAULT_RATES,
    FeeResult,
    calculate_fee,
    compute_hours,
    resolve_fee,
)
from .service import FeeService

__all__ = [
    "CATEGORY_DEFAULT_RATES",
    "FeeResult",
    "FeeService",
    "calculate_fee",
    "compute_hours",
    "resolve_fee",
]
