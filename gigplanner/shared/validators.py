"""Shared validation and sanitization utilities"""

import html
import re
from datetime import date
from typing import Optional

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_time_string(value: Optional[str]) -> Optional[str]:
    """
    Validate a 24h clock time.

    Accepts "H:MM" and "HH:MM" and normalizes to "HH:MM".

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if value is None or value == "":
        return None

    value = value.strip()
    if re.match(r"^\d:\d\d$", value):
        value = f"0{value}"

    if not _TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def validate_month(month: int) -> int:
    if month < 1 or month > 12:
        raise ValueError("Month must be between 1 and 12")
    return month


def validate_year(year: int) -> int:
    if year < 2000 or year > 2100:
        raise ValueError("Year must be between 2000 and 2100")
    return year


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not _EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def month_key(day: date) -> str:
    """YYYY-MM bucket used to group availability rows"""
    return f"{day.year}-{day.month:02d}"


def sanitize_text(value: Optional[str], max_length: int = 5000) -> Optional[str]:
    """
    Escape HTML special characters in free text before it is stored.
    Returns None if input is None.
    """
    if value is None:
        return None
    value = str(value).strip()
    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")
    return html.escape(value, quote=True)
