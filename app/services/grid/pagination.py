from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PageState:
    page_index: int = 0
    page_size: int = 10


@dataclass(frozen=True)
class PageWindow:
    rows: list[Any]
    total_count: int


def page_count(total_count: int, page_size: int) -> int:
    if total_count <= 0 or page_size <= 0:
        return 0
    return (total_count + page_size - 1) // page_size


def paginate(
    rows: Sequence[Any],
    page_index: int,
    page_size: int,
    enabled: bool = True,
) -> PageWindow:
    """Slice the visible page out of an already ordered sequence.

    ``total_count`` is always the length of the whole sequence so callers can
    render page controls. With pagination disabled the window is everything.
    """
    total = len(rows)
    if not enabled:
        return PageWindow(rows=list(rows), total_count=total)
    start = max(page_index, 0) * page_size
    return PageWindow(rows=list(rows[start : start + page_size]), total_count=total)
