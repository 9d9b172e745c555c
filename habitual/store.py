import json
import logging
import sqlite3
from collections.abc import Sequence

from . import db
from .core.models import Task
from .lib.converters import dict_to_task, is_legacy_record, legacy_to_task, task_to_dict

__all__ = ["STORAGE_KEY", "clear_tasks", "load_tasks", "save_tasks"]

logger = logging.getLogger(__name__)

STORAGE_KEY = "habit-tracker-tasks"


def _revive(record: object) -> Task:
    if is_legacy_record(record):
        return legacy_to_task(record)  # type: ignore[arg-type]
    if not isinstance(record, dict):
        raise TypeError(f"task record must be an object, got {type(record).__name__}")
    return dict_to_task(record)


def load_tasks() -> list[Task]:
    """Load every stored task. Missing, corrupt or malformed data yields []."""
    try:
        raw = db.read_value(STORAGE_KEY)
    except sqlite3.Error as e:
        logger.warning("could not read stored tasks: %s", e)
        return []
    if raw is None:
        return []

    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, list):
            raise TypeError(f"expected a list of tasks, got {type(parsed).__name__}")
        tasks = [_revive(record) for record in parsed]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, OverflowError, OSError) as e:
        logger.warning("error parsing stored tasks, starting empty: %s", e)
        return []

    legacy = sum(1 for record in parsed if is_legacy_record(record))
    if legacy:
        logger.info("upcast %d legacy task record(s)", legacy)
    logger.debug("loaded %d task(s)", len(tasks))
    return tasks


def save_tasks(tasks: Sequence[Task]) -> None:
    payload = json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False)
    db.write_value(STORAGE_KEY, payload)
    logger.debug("saved %d task(s)", len(tasks))


def clear_tasks() -> None:
    db.delete_value(STORAGE_KEY)
