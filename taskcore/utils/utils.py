from datetime import datetime, timedelta
from typing import Callable, Optional

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current local wall-clock time"""
    return datetime.now()


class FrozenClock:
    """Clock that always returns the same instant until moved"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta):
        """Move the clock forward by timedelta keyword arguments"""
        self.now = self.now + timedelta(**delta)


def get_date(date_str) -> Optional[datetime]:
    """Parse a date string in ISO or common formats. Returns None if invalid."""
    if not date_str:
        return None
    if isinstance(date_str, datetime):
        return date_str
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d-%m-%Y", "%d/%m/%Y", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"):
        try:
            return datetime.strptime(date_str, fmt)
        except (TypeError, ValueError):
            continue
    # Try parsing as ISO format
    try:
        return datetime.fromisoformat(date_str)
    except (TypeError, ValueError):
        return None
