import dataclasses
import logging
import math
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta
from fncli import cli

from .core.errors import ValidationError
from .core.models import (
    DayData,
    Deadline,
    Duration,
    Frequency,
    FrequencyUnit,
    MonthlyHistoryData,
    Task,
    TaskConfiguration,
    TaskInstance,
    TaskStats,
    TaskStatus,
    WeeklyData,
    WeeklyDayData,
)
from .lib import clock
from .lib.dates import (
    format_date,
    get_days_in_month,
    normalize_month,
    parse_deadline,
    sunday_weekday,
)
from .lib.errors import echo
from .lib.format import UNIT_CHOICES, format_frequency, short_id
from .lib.streaks import calculate_streak

__all__ = [
    "add_task",
    "build_task",
    "calculate_new_task_stats",
    "calculate_remaining_days",
    "create_task_instance",
    "delete_task",
    "find_instance_on",
    "format_monthly_history_data",
    "format_weekly_data",
    "generate_instances",
    "generate_task_configuration_id",
    "generate_task_instance",
    "generate_task_instance_id",
    "get_deadline",
    "get_monthly_instances",
    "get_task_streak",
    "get_weekly_instances",
    "is_task_instance_completed_today",
    "toggle_task",
    "toggle_task_instance_completion",
    "toggle_task_instance_completion_by_id",
    "toggle_task_today",
    "update_task",
]


# ── domain ───────────────────────────────────────────────────────────────────


logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)

_UNIT_DELTAS = {
    FrequencyUnit.DAY: lambda n: relativedelta(days=n),
    FrequencyUnit.WEEK: lambda n: relativedelta(weeks=n),
    FrequencyUnit.MONTH: lambda n: relativedelta(months=n),
    FrequencyUnit.YEAR: lambda n: relativedelta(years=n),
}


def _as_day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _generate_id(prefix: str, now: datetime | None) -> str:
    millis = int((now or clock.now()).timestamp() * 1000)
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:9]}"


def generate_task_configuration_id(now: datetime | None = None) -> str:
    return _generate_id("task-config", now)


def generate_task_instance_id(now: datetime | None = None) -> str:
    return _generate_id("task-instance", now)


def create_task_instance(
    configuration_id: str, scheduled_date: date, now: datetime | None = None
) -> TaskInstance:
    now = now or clock.now()
    return TaskInstance(
        id=generate_task_instance_id(now),
        configuration_id=configuration_id,
        status=TaskStatus.NOT_STARTED,
        scheduled_date=_as_day(scheduled_date),
        created_at=now,
    )


def generate_task_instance(
    configuration: TaskConfiguration, now: datetime | None = None
) -> TaskInstance:
    now = now or clock.now()
    return create_task_instance(configuration.id, now.date(), now)


def build_task(
    content: str, frequency: Frequency, duration: Duration, now: datetime | None = None
) -> Task:
    now = now or clock.now()
    configuration = TaskConfiguration(
        id=generate_task_configuration_id(now),
        content=content,
        frequency=frequency,
        duration=duration,
        created_at=now,
    )
    return Task(configuration=configuration, instances=[])


def is_task_instance_completed_today(instance: TaskInstance, now: datetime | None = None) -> bool:
    if instance.completed_date is None:
        return False
    return instance.completed_date.date() == (now or clock.now()).date()


def toggle_task_instance_completion(
    instance: TaskInstance, now: datetime | None = None
) -> TaskInstance:
    """done flips back to not-started; anything else becomes done, stamped with now."""
    if instance.status is TaskStatus.DONE:
        return dataclasses.replace(instance, status=TaskStatus.NOT_STARTED, completed_date=None)
    return dataclasses.replace(instance, status=TaskStatus.DONE, completed_date=now or clock.now())


def toggle_task_instance_completion_by_id(
    task: Task, instance_id: str, now: datetime | None = None
) -> Task:
    if not any(i.id == instance_id for i in task.instances):
        return task
    now = now or clock.now()
    instances = [
        toggle_task_instance_completion(i, now) if i.id == instance_id else i
        for i in task.instances
    ]
    return dataclasses.replace(task, instances=instances)


def find_instance_on(task: Task, day: date) -> TaskInstance | None:
    day = _as_day(day)
    return next((i for i in task.instances if i.scheduled_date == day), None)


def toggle_task_today(task: Task, now: datetime | None = None) -> Task:
    """Toggle today's instance, creating it already done if today has none yet."""
    now = now or clock.now()
    existing = find_instance_on(task, now.date())
    if existing is not None:
        return toggle_task_instance_completion_by_id(task, existing.id, now)
    instance = dataclasses.replace(
        create_task_instance(task.configuration.id, now.date(), now),
        status=TaskStatus.DONE,
        completed_date=now,
    )
    return dataclasses.replace(task, instances=[*task.instances, instance])


def generate_instances(
    task: Task, start: date, end: date, now: datetime | None = None
) -> Task:
    """Add a not-started instance for every day in [start, end] that has none."""
    now = now or clock.now()
    taken = {i.scheduled_date for i in task.instances}
    created = []
    day = _as_day(start)
    end = _as_day(end)
    while day <= end:
        if day not in taken:
            created.append(create_task_instance(task.configuration.id, day, now))
        day += _DAY
    if not created:
        return task
    return dataclasses.replace(task, instances=[*task.instances, *created])


def get_weekly_instances(task: Task, week_start: date) -> list[TaskInstance]:
    week_start = _as_day(week_start)
    week_end = week_start + timedelta(days=6)
    return [i for i in task.instances if week_start <= i.scheduled_date <= week_end]


def get_monthly_instances(task: Task, year: int, month: int) -> list[TaskInstance]:
    """Instances scheduled in a calendar month; month is zero-based."""
    year, month = normalize_month(year, month)
    return [
        i
        for i in task.instances
        if i.scheduled_date.year == year and i.scheduled_date.month == month + 1
    ]


def get_deadline(configuration: TaskConfiguration) -> datetime:
    duration = configuration.duration
    if isinstance(duration, Deadline):
        return duration.deadline
    return duration.started_at + _UNIT_DELTAS[duration.unit](duration.length)


def calculate_remaining_days(task: Task, now: datetime | None = None) -> int:
    remaining = get_deadline(task.configuration) - (now or clock.now())
    return max(0, math.ceil(remaining / _DAY))


def _done_count(instances: Sequence[TaskInstance]) -> int:
    return sum(1 for i in instances if i.status is TaskStatus.DONE)


def format_weekly_data(task: Task, week_start: date, now: datetime | None = None) -> WeeklyData:
    today = (now or clock.now()).date()
    week_start = _as_day(week_start)
    instances = get_weekly_instances(task, week_start)
    by_day = {}
    for instance in instances:
        by_day.setdefault(instance.scheduled_date, instance)

    days = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        instance = by_day.get(day)
        days.append(
            WeeklyDayData(
                date=day,
                is_completed=instance is not None and instance.status is TaskStatus.DONE,
                is_today=day == today,
            )
        )

    return WeeklyData(start_date=week_start, days=days, total_completions=_done_count(instances))


def _padding_day(day: date, today: date) -> DayData:
    return DayData(date=day, is_completed=False, is_today=day == today, is_current_month=False)


def format_monthly_history_data(
    task: Task, year: int, month: int, now: datetime | None = None
) -> MonthlyHistoryData:
    """Calendar grid for a month, padded with neighbouring days to whole Sunday-first weeks."""
    today = (now or clock.now()).date()
    year, month = normalize_month(year, month)
    instances = get_monthly_instances(task, year, month)
    by_day = {}
    for instance in instances:
        by_day.setdefault(instance.scheduled_date, instance)

    first = date(year, month + 1, 1)
    last = date(year, month + 1, get_days_in_month(year, month))

    days = [
        _padding_day(first - timedelta(days=n), today)
        for n in range(sunday_weekday(first), 0, -1)
    ]

    day = first
    while day <= last:
        instance = by_day.get(day)
        done = instance is not None and instance.status is TaskStatus.DONE
        days.append(
            DayData(
                date=day,
                is_completed=done,
                is_today=day == today,
                is_current_month=True,
                completion_count=1 if done else 0,
            )
        )
        day += _DAY

    days.extend(
        _padding_day(last + timedelta(days=n), today)
        for n in range(1, 7 - sunday_weekday(last))
    )

    return MonthlyHistoryData(
        year=year, month=month, days=days, total_completions=_done_count(instances)
    )


def get_task_streak(task: Task, now: datetime | None = None) -> int:
    completed = sorted(
        format_date(i.completed_date)
        for i in task.instances
        if i.status is TaskStatus.DONE and i.completed_date is not None
    )
    return calculate_streak(completed, now)


def calculate_new_task_stats(tasks: Sequence[Task], now: datetime | None = None) -> TaskStats:
    now = now or clock.now()
    today = now.date()
    total_tasks = len(tasks)

    completed_today = sum(
        1
        for task in tasks
        if any(i.scheduled_date == today and i.status is TaskStatus.DONE for i in task.instances)
    )
    total_completions = sum(_done_count(task.instances) for task in tasks)
    current_streak = max((get_task_streak(task, now) for task in tasks), default=0)
    completion_rate = completed_today / total_tasks * 100 if total_tasks else 0.0

    return TaskStats(
        total_tasks=total_tasks,
        completed_today=completed_today,
        current_streak=current_streak,
        total_completions=total_completions,
        completion_rate=completion_rate,
    )


def _replace_task(tasks: Sequence[Task], task_id: str, fn) -> list[Task]:
    if not any(t.id == task_id for t in tasks):
        return list(tasks)
    return [fn(t) if t.id == task_id else t for t in tasks]


def add_task(tasks: Sequence[Task], task: Task) -> list[Task]:
    return [*tasks, task]


def update_task(
    tasks: Sequence[Task],
    task_id: str,
    content: str | None = None,
    frequency: Frequency | None = None,
    duration: Duration | None = None,
) -> list[Task]:
    changes: dict[str, object] = {}
    if content is not None:
        changes["content"] = content
    if frequency is not None:
        changes["frequency"] = frequency
    if duration is not None:
        changes["duration"] = duration

    def _apply(task: Task) -> Task:
        return dataclasses.replace(
            task, configuration=dataclasses.replace(task.configuration, **changes)
        )

    return _replace_task(tasks, task_id, _apply)


def delete_task(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return [t for t in tasks if t.id != task_id]


def toggle_task(tasks: Sequence[Task], task_id: str, now: datetime | None = None) -> list[Task]:
    now = now or clock.now()
    return _replace_task(tasks, task_id, lambda t: toggle_task_today(t, now))


# ── cli ──────────────────────────────────────────────────────────────────────


_TASK_FLAGS = {
    "deadline": ["-d", "--deadline"],
    "unit": ["-u", "--unit"],
    "count": ["-c", "--count"],
}


def _clean_content(words: list[str] | str) -> str:
    content = (" ".join(words) if isinstance(words, list) else words).strip()
    if not content:
        raise ValidationError("content cannot be empty")
    return content


def _parse_frequency(unit: str | None, count: str | None, base: Frequency) -> Frequency:
    parsed_unit = base.unit
    if unit is not None:
        try:
            parsed_unit = FrequencyUnit(unit.strip().lower())
        except ValueError:
            raise ValidationError(f"unknown unit '{unit}', use one of: {UNIT_CHOICES}") from None
    parsed_count = base.count
    if count is not None:
        try:
            parsed_count = int(count)
        except ValueError:
            raise ValidationError(f"count must be a whole number, got '{count}'") from None
        if parsed_count < 1:
            raise ValidationError("count must be at least 1")
    return Frequency(unit=parsed_unit, count=parsed_count)


def _parse_duration(deadline: str, now: datetime) -> Deadline:
    parsed = parse_deadline(deadline, now)
    if parsed is None:
        raise ValidationError(f"invalid deadline '{deadline}'")
    return Deadline(deadline=parsed)


@cli("habitual", flags=_TASK_FLAGS)
def add(
    content: list[str],
    deadline: str | None = None,
    unit: str | None = None,
    count: str | None = None,
):
    """Add a habit"""
    from . import config, store

    now = clock.now()
    text = _clean_content(content)
    if not deadline:
        raise ValidationError("a deadline is required (--deadline)")
    base = Frequency(unit=config.get_default_unit(), count=config.get_default_count())
    task = build_task(
        text, _parse_frequency(unit, count, base), _parse_duration(deadline, now), now
    )
    store.save_tasks(add_task(store.load_tasks(), task))
    logger.info("added task %s", task.id)
    echo(f"□ {text}  {format_frequency(task.configuration.frequency)}  [{short_id(task.id)}]")


@cli("habitual")
def ls():
    """List habits with streaks and remaining days"""
    from . import store
    from .lib.render import render_task_list

    echo(render_task_list(store.load_tasks()))


@cli("habitual")
def check(ref: list[str]):
    """Toggle today's completion for a habit"""
    from . import store
    from .lib.resolve import resolve_task

    now = clock.now()
    tasks = store.load_tasks()
    task = resolve_task(" ".join(ref), tasks)
    updated = toggle_task(tasks, task.id, now)
    store.save_tasks(updated)

    toggled = next(t for t in updated if t.id == task.id)
    instance = find_instance_on(toggled, now.date())
    if instance is not None and instance.status is TaskStatus.DONE:
        echo(f"✓ {task.content.lower()}  streak {get_task_streak(toggled, now)}")
    else:
        echo(f"□ {task.content.lower()}")


@cli("habitual", flags=_TASK_FLAGS)
def edit(
    ref: str,
    content: str | None = None,
    deadline: str | None = None,
    unit: str | None = None,
    count: str | None = None,
):
    """Edit a habit's content, deadline or frequency"""
    from . import store
    from .lib.resolve import resolve_task_exact

    if content is None and deadline is None and unit is None and count is None:
        raise ValidationError("nothing to change")
    now = clock.now()
    tasks = store.load_tasks()
    task = resolve_task_exact(ref, tasks)
    updated = update_task(
        tasks,
        task.id,
        content=_clean_content(content) if content is not None else None,
        frequency=(
            _parse_frequency(unit, count, task.configuration.frequency)
            if unit is not None or count is not None
            else None
        ),
        duration=_parse_duration(deadline, now) if deadline is not None else None,
    )
    store.save_tasks(updated)
    logger.info("edited task %s", task.id)
    echo(f"→ {next(t for t in updated if t.id == task.id).content.lower()}")


@cli("habitual")
def rm(ref: list[str]):
    """Delete a habit and its history"""
    from . import store
    from .lib.resolve import resolve_task_exact

    tasks = store.load_tasks()
    task = resolve_task_exact(" ".join(ref), tasks)
    store.save_tasks(delete_task(tasks, task.id))
    logger.info("deleted task %s", task.id)
    echo(f"removed: {task.content.lower()}")
