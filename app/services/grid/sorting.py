"""Stable in-memory sorting for record grids.

Rows are decorated with their original position before sorting so that rows
with equal sort values keep their relative order in both directions. Grid
pagination and selection rely on that order being identical across repeated
renders of the same data.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

from app.services.grid.columns import read_field

SortValueGetter = Callable[[Any, str], Any]


class SortDirection(enum.Enum):
    asc = "asc"
    desc = "desc"


@dataclass(frozen=True)
class SortState:
    column_key: str = ""
    direction: SortDirection = SortDirection.asc

    @property
    def is_active(self) -> bool:
        return bool(self.column_key)


def next_sort_state(current: SortState, column_key: str) -> SortState:
    """Header click: toggle the active column, reset any other column to asc."""
    if current.column_key == column_key and current.direction == SortDirection.asc:
        return SortState(column_key=column_key, direction=SortDirection.desc)
    return SortState(column_key=column_key, direction=SortDirection.asc)


def normalize_sort_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, str):
        return value.lower()
    return value


def compare_sort_values(left: Any, right: Any) -> int:
    left = normalize_sort_value(left)
    right = normalize_sort_value(right)
    try:
        if left < right:
            return -1
        if left > right:
            return 1
        return 0
    except TypeError:
        # Mixed types (e.g. "" against a number): order by text form.
        left_text = str(left).lower()
        right_text = str(right).lower()
        if left_text < right_text:
            return -1
        if left_text > right_text:
            return 1
        return 0


def stable_sort(
    rows: Sequence[Any],
    sort_key: str,
    direction: SortDirection = SortDirection.asc,
    value_getter: SortValueGetter | None = None,
) -> list[Any]:
    """Return a new, stably ordered list of ``rows``.

    An empty ``sort_key`` disables sorting and returns the rows in their
    original order. The input sequence is never mutated.
    """
    if not sort_key:
        return list(rows)

    def _value(row: Any) -> Any:
        if value_getter is not None:
            return value_getter(row, sort_key)
        return read_field(row, sort_key)

    sign = -1 if direction == SortDirection.desc else 1
    decorated = [(_value(row), index, row) for index, row in enumerate(rows)]

    def _compare(left: tuple[Any, int, Any], right: tuple[Any, int, Any]) -> int:
        order = compare_sort_values(left[0], right[0]) * sign
        if order != 0:
            return order
        return left[1] - right[1]

    decorated.sort(key=cmp_to_key(_compare))
    return [row for _, _, row in decorated]
