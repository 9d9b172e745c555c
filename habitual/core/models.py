import dataclasses
from datetime import date, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"  # reserved, nothing transitions into it yet
    DONE = "done"


class FrequencyUnit(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclasses.dataclass(frozen=True)
class Frequency:
    unit: FrequencyUnit = FrequencyUnit.DAY
    count: int = 1


@dataclasses.dataclass(frozen=True)
class Deadline:
    deadline: datetime


@dataclasses.dataclass(frozen=True)
class DurationSpan:
    started_at: datetime
    unit: FrequencyUnit
    length: int


Duration = Deadline | DurationSpan


@dataclasses.dataclass(frozen=True)
class TaskConfiguration:
    id: str
    content: str
    frequency: Frequency
    duration: Duration
    created_at: datetime


@dataclasses.dataclass(frozen=True)
class TaskInstance:
    id: str
    configuration_id: str
    status: TaskStatus
    scheduled_date: date
    created_at: datetime
    completed_date: datetime | None = None


@dataclasses.dataclass(frozen=True)
class Task:
    configuration: TaskConfiguration
    instances: list[TaskInstance] = dataclasses.field(default_factory=list, hash=False)

    @property
    def id(self) -> str:
        return self.configuration.id

    @property
    def content(self) -> str:
        return self.configuration.content


@dataclasses.dataclass(frozen=True)
class TaskStats:
    total_tasks: int = 0
    completed_today: int = 0
    current_streak: int = 0
    total_completions: int = 0
    completion_rate: float = 0.0


@dataclasses.dataclass(frozen=True)
class WeeklyDayData:
    date: date
    is_completed: bool
    is_today: bool


@dataclasses.dataclass(frozen=True)
class WeeklyData:
    start_date: date
    days: list[WeeklyDayData] = dataclasses.field(default_factory=list, hash=False)
    total_completions: int = 0


@dataclasses.dataclass(frozen=True)
class DayData:
    date: date
    is_completed: bool
    is_today: bool
    is_current_month: bool
    completion_count: int | None = None


@dataclasses.dataclass(frozen=True)
class MonthlyHistoryData:
    year: int
    month: int
    days: list[DayData] = dataclasses.field(default_factory=list, hash=False)
    total_completions: int = 0
