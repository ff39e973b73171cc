"""Heap sort of goals by progress, non-quantifiable goals last."""

from __future__ import annotations

from typing import Sequence

from gtn.models import Goal


def _outranks(a: Goal, b: Goal) -> bool:
    """True if *a* sits strictly above *b* in the max-heap.

    A goal without a progress value is below every measured goal, zero
    included, and level with any other unmeasured goal.
    """
    pa, pb = a.progress_value(), b.progress_value()
    if pa is None:
        return False
    if pb is None:
        return True
    return pa > pb


def _sift_down(heap: list[Goal], size: int, root: int) -> None:
    while True:
        largest = root
        left = 2 * root + 1
        right = 2 * root + 2
        if left < size and _outranks(heap[left], heap[largest]):
            largest = left
        if right < size and _outranks(heap[right], heap[largest]):
            largest = right
        if largest == root:
            return
        heap[root], heap[largest] = heap[largest], heap[root]
        root = largest


def heap_sort(goals: list[Goal]) -> None:
    """Sort *goals* in place, ascending, with unmeasured goals first."""
    n = len(goals)
    for i in range(n // 2 - 1, -1, -1):
        _sift_down(goals, n, i)
    for end in range(n - 1, 0, -1):
        goals[0], goals[end] = goals[end], goals[0]
        _sift_down(goals, end, 0)


def rank_by_progress(goals: Sequence[Goal]) -> list[Goal]:
    """Return *goals* ranked by descending progress.

    Every non-quantifiable goal comes after every quantified one. Heap sort
    is not stable: the relative order of non-quantifiable goals, and of goals
    with equal progress, is arbitrary.
    """
    ranked = list(goals)
    heap_sort(ranked)
    ranked.reverse()
    return ranked
