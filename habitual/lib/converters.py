from datetime import date, datetime
from typing import Any

from dateutil import parser as dateutil_parser

from habitual.core.models import (
    Deadline,
    Duration,
    DurationSpan,
    Frequency,
    FrequencyUnit,
    Task,
    TaskConfiguration,
    TaskInstance,
    TaskStatus,
)

__all__ = [
    "dict_to_task",
    "is_legacy_record",
    "legacy_to_task",
    "task_to_dict",
]

TaskRecord = dict[str, Any]


def _parse_datetime(val: object) -> datetime:
    """Parse an ISO-8601 string or epoch-millis number into a naive local datetime."""
    if isinstance(val, bool):
        raise ValueError(f"not a datetime: {val!r}")
    if isinstance(val, (int, float)):
        return datetime.fromtimestamp(val / 1000)
    if isinstance(val, str) and val:
        parsed = dateutil_parser.isoparse(val)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
    raise ValueError(f"not a datetime: {val!r}")


def _parse_datetime_optional(val: object) -> datetime | None:
    if val is None or val == "":
        return None
    return _parse_datetime(val)


def _parse_date(val: object) -> date:
    return _parse_datetime(val).date()


def _format_datetime(val: datetime) -> str:
    return val.isoformat()


def _frequency_from_dict(data: object) -> Frequency:
    if not isinstance(data, dict):
        raise TypeError(f"frequency must be an object, got {type(data).__name__}")
    count = int(data.get("count", 1))
    if count < 1:
        raise ValueError(f"frequency count must be positive, got {count}")
    return Frequency(unit=FrequencyUnit(data.get("unit", FrequencyUnit.DAY)), count=count)


def _duration_from_dict(data: dict[str, Any]) -> Duration:
    if "deadline" in data:
        return Deadline(deadline=_parse_datetime(data["deadline"]))
    return DurationSpan(
        started_at=_parse_datetime(data["startedAt"]),
        unit=FrequencyUnit(data["unit"]),
        length=int(data["length"]),
    )


def _duration_to_dict(duration: Duration) -> dict[str, Any]:
    if isinstance(duration, Deadline):
        return {"deadline": _format_datetime(duration.deadline)}
    return {
        "startedAt": _format_datetime(duration.started_at),
        "unit": str(duration.unit),
        "length": duration.length,
    }


def _instance_from_dict(data: dict[str, Any]) -> TaskInstance:
    status = TaskStatus(data["status"])
    completed = _parse_datetime_optional(data.get("completedDate"))
    if (status is TaskStatus.DONE) != (completed is not None):
        raise ValueError(f"instance {data.get('id')!r}: completedDate must be set iff done")
    return TaskInstance(
        id=str(data["id"]),
        configuration_id=str(data["configurationId"]),
        status=status,
        scheduled_date=_parse_date(data["scheduledDate"]),
        created_at=_parse_datetime(data["createdAt"]),
        completed_date=completed,
    )


def _instance_to_dict(instance: TaskInstance) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": instance.id,
        "configurationId": instance.configuration_id,
        "status": str(instance.status),
        "scheduledDate": instance.scheduled_date.isoformat(),
        "createdAt": _format_datetime(instance.created_at),
    }
    if instance.completed_date is not None:
        data["completedDate"] = _format_datetime(instance.completed_date)
    return data


def dict_to_task(data: TaskRecord) -> Task:
    """
    Revives a stored {configuration, instances} record into a Task.
    Raises KeyError/TypeError/ValueError on malformed input.
    """
    raw_config = data["configuration"]
    configuration = TaskConfiguration(
        id=str(raw_config["id"]),
        content=str(raw_config["content"]),
        frequency=_frequency_from_dict(raw_config["frequency"]),
        duration=_duration_from_dict(raw_config["duration"]),
        created_at=_parse_datetime(raw_config["createdAt"]),
    )
    instances = [_instance_from_dict(raw) for raw in data["instances"]]
    return Task(configuration=configuration, instances=instances)


def task_to_dict(task: Task) -> TaskRecord:
    config = task.configuration
    return {
        "configuration": {
            "id": config.id,
            "content": config.content,
            "frequency": {"unit": str(config.frequency.unit), "count": config.frequency.count},
            "duration": _duration_to_dict(config.duration),
            "createdAt": _format_datetime(config.created_at),
        },
        "instances": [_instance_to_dict(i) for i in task.instances],
    }


def is_legacy_record(data: object) -> bool:
    """Flat records from before instances existed: {id, content, completedDates, ...}."""
    return isinstance(data, dict) and "configuration" not in data and "completedDates" in data


def legacy_to_task(data: TaskRecord) -> Task:
    """
    Upcasts a flat legacy record. Each completed date becomes one done instance
    scheduled and completed on that day.
    """
    config_id = str(data["id"])
    configuration = TaskConfiguration(
        id=config_id,
        content=str(data["content"]),
        frequency=_frequency_from_dict(data.get("frequency") or {}),
        duration=_duration_from_dict(data["duration"]),
        created_at=_parse_datetime(data["createdAt"]),
    )
    days = sorted({_parse_date(d) for d in data["completedDates"]})
    instances = []
    for day in days:
        midnight = datetime(day.year, day.month, day.day)
        instances.append(
            TaskInstance(
                id=f"{config_id}-legacy-{day.isoformat()}",
                configuration_id=config_id,
                status=TaskStatus.DONE,
                scheduled_date=day,
                created_at=midnight,
                completed_date=midnight,
            )
        )
    return Task(configuration=configuration, instances=instances)
