"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. Archived notes are bucketed by the calendar
    date of these values, so mixing aware and naive datetimes would
    shift completions across days.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Return a new 128-bit identifier rendered as 32 lowercase hex chars."""
    return uuid4().hex


LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """
    Build a LIKE pattern that matches ``text`` anywhere in a value.

    ``%`` and ``_`` typed by a user are matched literally. Pass
    ``escape=LIKE_ESCAPE`` to ``like``/``ilike`` along with the pattern.
    """
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
