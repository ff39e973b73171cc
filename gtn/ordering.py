"""Stable merge sort of tasks by priority or deadline."""

from __future__ import annotations

from typing import Any, Callable, Sequence

from gtn.models import Task

KEY_PRIORITY = "priority"
KEY_DEADLINE = "deadline"

_KEYS: dict[str, Callable[[Task], Any]] = {
    KEY_PRIORITY: lambda t: t.priority,
    # Raw text comparison: "2024-5-1" sorts after "2024-10-01", and
    # "No Deadline" sorts among the dates by its letters.
    KEY_DEADLINE: lambda t: t.deadline,
}


def _merge(left: list[Task], right: list[Task], key: Callable[[Task], Any]) -> list[Task]:
    merged: list[Task] = []
    i = j = 0
    while i < len(left) and j < len(right):
        # ties take from the left run
        if key(left[i]) <= key(right[j]):
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


def _merge_sort(tasks: list[Task], key: Callable[[Task], Any]) -> list[Task]:
    if len(tasks) <= 1:
        return list(tasks)
    mid = len(tasks) // 2
    return _merge(_merge_sort(tasks[:mid], key), _merge_sort(tasks[mid:], key), key)


def key_order(tasks: Sequence[Task], key: str = KEY_PRIORITY) -> list[Task]:
    """Return *tasks* ordered ascending by ``priority`` or ``deadline``.

    Tasks with equal keys keep their input order. The input sequence is not
    modified.
    """
    if key not in _KEYS:
        raise ValueError(f"Unknown sort key: {key!r} (expected one of {', '.join(_KEYS)})")
    return _merge_sort(list(tasks), _KEYS[key])
