"""
Field validators shared by the request schemas.

Each helper raises ``ValueError`` with the message that ends up in the
``fieldErrors`` map of a 400 response.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


def check_length(
    value: str,
    *,
    minimum: int = 0,
    maximum: Optional[int] = None,
    too_short: str,
    too_long: str,
) -> str:
    if len(value) < minimum:
        raise ValueError(too_short)
    if maximum is not None and len(value) > maximum:
        raise ValueError(too_long)
    return value


def normalize_email(value: Any) -> Any:
    """Trim and lowercase; anything that is not a string is left to the type check."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def parse_due_date(value) -> Optional[datetime]:
    """
    Accept an ISO date or datetime string (or ``datetime``/``date``).

    Empty strings and ``None`` clear the due date.  Naive values are UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError("Please enter a valid due date") from None
    else:
        raise ValueError("Please enter a valid due date")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_not_past(due: Optional[datetime], today: Optional[date] = None) -> Optional[datetime]:
    """Due dates may be today or later (compared by calendar day, UTC)."""
    if due is None:
        return None
    today = today or datetime.now(timezone.utc).date()
    if due.astimezone(timezone.utc).date() < today:
        raise ValueError("Due date cannot be in the past")
    return due


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
