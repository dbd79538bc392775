"""Calendar helpers for month-based planners"""

import calendar
from datetime import date
from typing import Optional


def period_label(month: int, year: int) -> str:
    """Human label for a planner month, e.g. 'March 2025'"""
    return f"{calendar.month_name[month]} {year}"


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def in_month(day: date, month: int, year: int) -> bool:
    return day.year == year and day.month == month


def month_has_ended(month: int, year: int, today: Optional[date] = None) -> bool:
    """True once every day of the month lies in the past"""
    return (today or date.today()) > month_bounds(month, year)[1]
