from collections.abc import Sequence

from habitual.core.errors import NotFoundError
from habitual.core.models import Task

from .fuzzy import find_in_pool, find_in_pool_exact

__all__ = ["resolve_task", "resolve_task_exact"]


def resolve_task(ref: str, pool: Sequence[Task]) -> Task:
    task = find_in_pool(ref, pool)
    if not task:
        raise NotFoundError(f"no task found: '{ref}'")
    return task


def resolve_task_exact(ref: str, pool: Sequence[Task]) -> Task:
    """Like resolve_task but no fuzzy matching, for destructive commands."""
    task = find_in_pool_exact(ref, pool)
    if not task:
        raise NotFoundError(f"no task found: '{ref}'")
    return task
