from collections.abc import Iterable
from datetime import date, datetime, timedelta

from . import clock
from .dates import as_date

__all__ = ["calculate_streak", "get_weekly_progress"]


def _completed_days(completed_dates: Iterable[str]) -> list[date]:
    days = (as_date(d) for d in completed_dates)
    return [d for d in days if d is not None]


def calculate_streak(completed_dates: Iterable[str], now: datetime | None = None) -> int:
    """Consecutive completed days ending today.

    While today is still open a completion yesterday keeps the streak alive; any
    other gap ends it. Future dates are skipped, duplicates count once and
    unparsable strings are ignored.
    """
    days = sorted(set(_completed_days(completed_dates)), reverse=True)
    if not days:
        return 0

    streak = 0
    cursor = (now or clock.now()).date()

    for day in days:
        gap = (cursor - day).days
        if gap < 0:
            continue
        # first hit may be today (gap 0) or yesterday (gap 1); after that, one day at a time
        if gap > 1 or (streak > 0 and gap != 1):
            break
        streak += 1
        cursor = day

    return streak


def get_weekly_progress(completed_dates: Iterable[str], now: datetime | None = None) -> list[int]:
    """Completions per day for the 7 days ending today, oldest first."""
    today = (now or clock.now()).date()
    days = _completed_days(completed_dates)
    window = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
    return [sum(1 for d in days if d == day) for day in window]
