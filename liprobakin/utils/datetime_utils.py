"""
Datetime utility functions.
"""

from datetime import date, datetime
from typing import Optional, Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def isoformat_or_none(value: Optional[Union[date, datetime]]) -> Optional[str]:
    """Serialize a date/datetime to ISO 8601, passing None through."""
    return value.isoformat() if value else None


def game_sort_key(game_date: Optional[Union[str, date]]) -> str:
    """
    Sort key for game dates stored either as ``date`` or ISO strings.

    Missing dates sort first so that "newest first" orderings put them last.
    """
    if game_date is None:
        return ""
    if isinstance(game_date, (date, datetime)):
        return game_date.isoformat()
    return str(game_date).strip()
