"""
Fee resolution for planner assignments

The fee for a musician playing a slot is resolved through a strict fallback
chain, first match wins:

1. manual override (assignment.actual_fee > 0)
2. negotiated hourly rate for (musician, event category) × hours
3. musician's default pay rate × hours
4. musician category default rate × hours
5. flat minimum, regardless of hours

The calculator is pure: it takes already-loaded records (ORM objects or any
object with the same attribute names) and never raises. Missing or malformed
data always degrades toward the next fallback.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)

# Default hourly rate per musician category id
CATEGORY_DEFAULT_RATES: dict[int, float] = {
    1: 150.0,  # Vocalist
    2: 125.0,  # Guitarist
    3: 125.0,  # Keyboardist
    4: 135.0,  # Drummer
    5: 125.0,  # Bassist
}
UNKNOWN_CATEGORY_RATE = 100.0

DEFAULT_HOURS = 3.0
FLAT_MINIMUM_FEE = 150.0

RULE_OVERRIDE = "override"
RULE_PAY_RATE = "pay_rate_table"
RULE_MUSICIAN_RATE = "musician_rate"
RULE_CATEGORY_RATE = "category_default"
RULE_FLAT_MINIMUM = "flat_minimum"


@dataclass(frozen=True)
class FeeResult:
    amount: float
    rule: str
    hours: Optional[float] = None
    hourly_rate: Optional[float] = None


def _parse_minutes(value: Optional[str]) -> Optional[int]:
    if not value or not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours <= 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def compute_hours(
    start_time: Optional[str],
    end_time: Optional[str],
    duration: Optional[float] = None,
    default_hours: float = DEFAULT_HOURS,
) -> float:
    """
    Hours a slot lasts.

    A positive explicit duration wins. Otherwise the span between the two
    "HH:MM" strings is used, wrapping past midnight when end < start, rounded
    to one decimal. Unparseable input falls back to default_hours.
    """
    if duration is not None:
        try:
            duration = float(duration)
        except (TypeError, ValueError):
            duration = None
        if duration is not None and duration > 0:
            return duration

    start = _parse_minutes(start_time)
    end = _parse_minutes(end_time)
    if start is None or end is None:
        return default_hours

    if end < start:
        end += 24 * 60

    span = end - start
    if span == 0:
        return default_hours
    return round(span / 60, 1)


def find_pay_rate(
    pay_rates: Iterable[Any], musician_id: Optional[int], event_category_id: Optional[int]
) -> Optional[Any]:
    """Exact (musician, event category) match in the pay-rate table"""
    if musician_id is None or event_category_id is None:
        return None
    for rate in pay_rates or ():
        if rate.musician_id == musician_id and rate.event_category_id == event_category_id:
            return rate
    return None


def resolve_fee(
    assignment: Any = None,
    musician: Any = None,
    slot: Any = None,
    pay_rates: Iterable[Any] = (),
    event_category_id: Optional[int] = None,
    *,
    category_rates: Optional[dict[int, float]] = None,
    default_hours: float = DEFAULT_HOURS,
    flat_minimum: float = FLAT_MINIMUM_FEE,
) -> FeeResult:
    """Resolve a fee and report which rule produced it"""
    rates = CATEGORY_DEFAULT_RATES if category_rates is None else category_rates

    actual_fee = getattr(assignment, "actual_fee", None)
    if actual_fee is not None and actual_fee > 0:
        return FeeResult(amount=float(actual_fee), rule=RULE_OVERRIDE)

    hours = compute_hours(
        getattr(slot, "start_time", None),
        getattr(slot, "end_time", None),
        getattr(slot, "duration", None),
        default_hours,
    )

    musician_id = getattr(musician, "id", None)
    if musician_id is None:
        musician_id = getattr(assignment, "musician_id", None)

    match = find_pay_rate(pay_rates, musician_id, event_category_id)
    if match is not None and match.hourly_rate is not None and match.hourly_rate > 0:
        return FeeResult(
            amount=round(match.hourly_rate * hours, 2),
            rule=RULE_PAY_RATE,
            hours=hours,
            hourly_rate=match.hourly_rate,
        )

    pay_rate = getattr(musician, "pay_rate", None)
    if pay_rate is not None and pay_rate > 0:
        return FeeResult(
            amount=round(pay_rate * hours, 2),
            rule=RULE_MUSICIAN_RATE,
            hours=hours,
            hourly_rate=pay_rate,
        )

    category_id = getattr(musician, "category_id", None)
    if category_id:
        category_rate = rates.get(category_id, UNKNOWN_CATEGORY_RATE)
        return FeeResult(
            amount=round(category_rate * hours, 2),
            rule=RULE_CATEGORY_RATE,
            hours=hours,
            hourly_rate=category_rate,
        )

    logger.debug(f"Falling back to flat minimum fee for musician {musician_id}")
    return FeeResult(amount=float(flat_minimum), rule=RULE_FLAT_MINIMUM)


def calculate_fee(
    assignment: Any = None,
    musician: Any = None,
    slot: Any = None,
    pay_rates: Iterable[Any] = (),
    event_category_id: Optional[int] = None,
    **options,
) -> float:
    """Resolved fee amount only; see resolve_fee"""
    return resolve_fee(assignment, musician, slot, pay_rates, event_category_id, **options).amount
