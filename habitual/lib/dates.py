import calendar
import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from . import clock

__all__ = [
    "as_date",
    "format_date",
    "get_current_date_string",
    "get_days_in_month",
    "get_end_of_month",
    "get_month_name",
    "get_week_start",
    "is_current_month",
    "is_current_week",
    "is_date_today",
    "is_same_date",
    "normalize_month",
    "parse_deadline",
    "sunday_weekday",
]

DateLike = date | datetime | str

_DAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
_DAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}
_OFFSET_RE = re.compile(r"^\+(\d+)([dw])$")


def as_date(value: DateLike) -> date | None:
    """Coerce a date, datetime or ISO-8601 string to a calendar day. None if unparsable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dateutil_parser.isoparse(value.strip()).date()
        except (ValueError, OverflowError):
            return None
    return None


def format_date(value: date) -> str:
    """Canonical YYYY-MM-DD key for day-level comparisons."""
    return value.strftime("%Y-%m-%d")


def get_current_date_string(now: datetime | None = None) -> str:
    return format_date(now or clock.now())


def is_same_date(d1: DateLike, d2: DateLike) -> bool:
    """True iff both values fall on the same calendar day. Time of day is ignored."""
    a = as_date(d1)
    b = as_date(d2)
    if a is None or b is None:
        return False
    return a == b


def is_date_today(date_string: DateLike, now: datetime | None = None) -> bool:
    day = as_date(date_string)
    if day is None:
        return False
    return day == (now or clock.now()).date()


def sunday_weekday(value: date) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return (value.weekday() + 1) % 7


def get_week_start(value: date) -> date:
    """The Sunday at or before the given day."""
    day = value.date() if isinstance(value, datetime) else value
    return day - timedelta(days=sunday_weekday(day))


def normalize_month(year: int, month0: int) -> tuple[int, int]:
    """Fold an out-of-range zero-based month into the neighbouring years."""
    extra, month0 = divmod(month0, 12)
    return year + extra, month0


def get_days_in_month(year: int, month0: int) -> int:
    """Days in a month; month0 is zero-based (0 = January)."""
    year, month0 = normalize_month(year, month0)
    return calendar.monthrange(year, month0 + 1)[1]


def get_end_of_month(year: int, month0: int) -> date:
    year, month0 = normalize_month(year, month0)
    return date(year, month0 + 1, get_days_in_month(year, month0))


def is_current_month(year: int, month0: int, now: datetime | None = None) -> bool:
    current = now or clock.now()
    return current.year == year and current.month - 1 == month0


def is_current_week(value: date | None = None, now: datetime | None = None) -> bool:
    """True iff the given day (default: today) shares the current Sunday-started week."""
    current = (now or clock.now()).date()
    if value is None:
        return True
    return get_week_start(value) == get_week_start(current)


def get_month_name(year: int, month0: int) -> str:
    """Locale-formatted '<year> <Month>' label."""
    year, month0 = normalize_month(year, month0)
    return date(year, month0 + 1, 1).strftime("%Y %B")


def parse_deadline(text: str, now: datetime | None = None) -> datetime | None:
    """Parse a deadline ('today', 'tomorrow', 'fri', '+10d', '2025-12-31', ...) to local midnight."""
    today = (now or clock.now()).date()
    lowered = text.strip().lower()
    if not lowered:
        return None
    lowered = _DAY_ALIASES.get(lowered, lowered)

    if lowered == "today":
        day = today
    elif lowered == "tomorrow":
        day = today + timedelta(days=1)
    elif lowered in _DAY_NAMES:
        days_ahead = (_DAY_NAMES.index(lowered) - today.weekday() + 7) % 7 or 7
        day = today + timedelta(days=days_ahead)
    elif match := _OFFSET_RE.match(lowered):
        amount = int(match.group(1))
        day = today + timedelta(days=amount * (7 if match.group(2) == "w" else 1))
    else:
        try:
            day = dateutil_parser.parse(
                text, default=datetime(today.year, today.month, today.day)
            ).date()
        except (ParserError, ValueError, OverflowError):
            return None

    return datetime(day.year, day.month, day.day)
