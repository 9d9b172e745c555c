from collections.abc import Sequence
from difflib import get_close_matches

from habitual.core.errors import AmbiguousError
from habitual.core.models import Task

from .format import short_id

__all__ = ["find_in_pool", "find_in_pool_exact"]

FUZZY_MATCH_CUTOFF = 0.8


def _match_id(ref: str, pool: Sequence[Task]) -> Task | None:
    exact = next((task for task in pool if task.id == ref), None)
    if exact:
        return exact
    ref_lower = ref.lower()
    matches = [task for task in pool if short_id(task.id).startswith(ref_lower)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        sample = [short_id(task.id) for task in matches[:3]]
        raise AmbiguousError(ref, count=len(matches), sample=sample)
    return None


def _match_substring(ref: str, pool: Sequence[Task]) -> Task | None:
    ref_lower = ref.lower()
    exact = next((task for task in pool if task.content.lower() == ref_lower), None)
    if exact:
        return exact
    matches = [task for task in pool if ref_lower in task.content.lower()]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        sample = [task.content for task in matches[:3]]
        raise AmbiguousError(ref, count=len(matches), sample=sample)
    return None


def _match_fuzzy(ref: str, pool: Sequence[Task]) -> Task | None:
    contents = [task.content.lower() for task in pool]
    matches = get_close_matches(ref.lower(), contents, n=1, cutoff=FUZZY_MATCH_CUTOFF)
    if matches:
        return next(task for task in pool if task.content.lower() == matches[0])
    return None


def find_in_pool(ref: str, pool: Sequence[Task]) -> Task | None:
    if not pool or not ref.strip():
        return None
    return _match_id(ref, pool) or _match_substring(ref, pool) or _match_fuzzy(ref, pool)


def find_in_pool_exact(ref: str, pool: Sequence[Task]) -> Task | None:
    if not pool or not ref.strip():
        return None
    return _match_id(ref, pool) or _match_substring(ref, pool)
