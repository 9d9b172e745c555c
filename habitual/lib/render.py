from collections.abc import Sequence
from datetime import date, datetime, timedelta

from habitual.core.models import MonthlyHistoryData, Task, TaskStats
from habitual.tasks import (
    calculate_remaining_days,
    format_monthly_history_data,
    format_weekly_data,
    get_task_streak,
)

from . import ansi, clock
from .dates import get_month_name
from .format import format_frequency, format_rate, format_remaining, format_streak, short_id

__all__ = [
    "render_month",
    "render_stats",
    "render_task_list",
    "render_week",
]

_NAME_WIDTH = 18
_WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]


def _name(task: Task) -> str:
    content = task.content.lower()
    if len(content) > _NAME_WIDTH - 1:
        content = content[: _NAME_WIDTH - 2] + "…"
    return f"{content:<{_NAME_WIDTH}}"


def _mark(is_completed: bool, is_today: bool) -> str:
    mark = ansi.green("✓") if is_completed else "□"
    return ansi.bold(mark) if is_today else mark


def render_week(tasks: Sequence[Task], week_start: date, now: datetime | None = None) -> str:
    now = now or clock.now()
    if not tasks:
        return "no habits yet"

    end = week_start + timedelta(days=6)
    lines = [f"WEEK {week_start.isoformat()} → {end.isoformat()}\n"]
    header = " " * _NAME_WIDTH + " ".join(f"{d:<3}" for d in _WEEKDAYS) + "  done"
    lines.append(header)
    lines.append("-" * len(ansi.strip(header)))

    for task in sorted(tasks, key=lambda t: t.content.lower()):
        week = format_weekly_data(task, week_start, now)
        cells = " ".join(f"{_mark(d.is_completed, d.is_today)}  " for d in week.days)
        lines.append(f"{_name(task)}{cells}  {week.total_completions}/7")

    return "\n".join(lines)


def _render_grid(history: MonthlyHistoryData) -> list[str]:
    rows = [" ".join(f"{d:<3}" for d in _WEEKDAYS)]
    for start in range(0, len(history.days), 7):
        cells = []
        for day in history.days[start : start + 7]:
            label = f"{day.date.day:>2}"
            if not day.is_current_month:
                label = ansi.dim(label)
            elif day.is_completed:
                label = ansi.green(label)
            if day.is_today:
                label = ansi.bold(label)
            cells.append(f"{label} ")
        rows.append(" ".join(cells))
    return rows


def render_month(
    tasks: Sequence[Task], year: int, month: int, now: datetime | None = None
) -> str:
    now = now or clock.now()
    if not tasks:
        return "no habits yet"

    lines = [get_month_name(year, month).upper()]
    for task in sorted(tasks, key=lambda t: t.content.lower()):
        history = format_monthly_history_data(task, year, month, now)
        lines.append("")
        lines.append(f"{task.content.lower()}  {ansi.dim(f'{history.total_completions} done')}")
        lines.extend(f"  {row}" for row in _render_grid(history))
    return "\n".join(lines)


def render_stats(stats: TaskStats) -> str:
    return (
        f"habits {stats.total_tasks}  ·  "
        f"today {stats.completed_today}/{stats.total_tasks} ({format_rate(stats.completion_rate)})  ·  "
        f"streak {format_streak(stats.current_streak)}  ·  "
        f"total {stats.total_completions}"
    )


def render_task_list(tasks: Sequence[Task], now: datetime | None = None) -> str:
    now = now or clock.now()
    if not tasks:
        return "no habits yet"

    lines = []
    for task in tasks:
        done_today = any(
            i.scheduled_date == now.date() and i.completed_date is not None
            for i in task.instances
        )
        status = ansi.green("✓") if done_today else "□"
        id_str = ansi.dim(f"[{short_id(task.id)}]")
        lines.append(f"{status} {id_str}  {task.content.lower()}")
        details = [
            format_frequency(task.configuration.frequency),
            format_streak(get_task_streak(task, now)),
            format_remaining(calculate_remaining_days(task, now)),
        ]
        lines.append("    " + "  ·  ".join(details))
    return "\n".join(lines)
