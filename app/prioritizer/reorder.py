"""Manual up/down reordering of goals, projects and tasks."""

from __future__ import annotations

from typing import MutableSequence, TypeVar

T = TypeVar("T")


def reorder(sequence: MutableSequence[T], index: int, direction: int) -> bool:
    """Swap sequence[index] with its neighbour in `direction`, clamped to bounds.

    Returns True if anything moved. Out-of-range indexes and moves past either
    end are no-ops.
    """
    length = len(sequence)
    if length == 0 or index < 0 or index >= length:
        return False

    target = min(max(index + direction, 0), length - 1)
    if target == index:
        return False

    sequence[index], sequence[target] = sequence[target], sequence[index]
    return True
