from habitual.core.models import Frequency, FrequencyUnit

from . import ansi

__all__ = [
    "UNIT_CHOICES",
    "format_frequency",
    "format_rate",
    "format_remaining",
    "format_streak",
    "short_id",
]

UNIT_CHOICES = ", ".join(str(u) for u in FrequencyUnit)


def short_id(item_id: str) -> str:
    """Eight-char handle: the random tail of a generated id."""
    return item_id.rsplit("-", 1)[-1][:8]


def format_frequency(frequency: Frequency) -> str:
    """'every day', '3x per week', ..."""
    if frequency.count == 1:
        return f"every {frequency.unit}"
    return f"{frequency.count}x per {frequency.unit}"


def format_remaining(days: int) -> str:
    if days == 0:
        return ansi.coral("due")
    if days == 1:
        return "1 day left"
    return f"{days} days left"


def format_streak(streak: int) -> str:
    if streak == 0:
        return ansi.dim("no streak")
    unit = "day" if streak == 1 else "days"
    return ansi.gold(f"{streak} {unit}")


def format_rate(rate: float) -> str:
    return f"{rate:.0f}%"
