from __future__ import annotations

import enum
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from app.services.grid.columns import read_field

ALL_VALUES = "all"

FieldGetter = Callable[[Any, str], Any]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value).lower()


def is_active_filter(value: str | None) -> bool:
    return bool(value) and str(value).strip().lower() != ALL_VALUES


def filter_rows(
    rows: Sequence[Any],
    search: str = "",
    filters: Mapping[str, str] | None = None,
    search_fields: Sequence[str] = (),
    getter: FieldGetter | None = None,
) -> list[Any]:
    """Keep rows matching the free-text search and every exact filter.

    Search is a case-insensitive substring test across ``search_fields``;
    filters compare whole values case-insensitively. A filter set to
    ``"all"`` or left empty is ignored.
    """
    read = getter or read_field
    term = (search or "").strip().lower()
    active = {
        key: str(value).strip().lower()
        for key, value in (filters or {}).items()
        if is_active_filter(value)
    }
    if not term and not active:
        return list(rows)

    result = []
    for row in rows:
        if term and not any(term in _text(read(row, key)) for key in search_fields):
            continue
        if any(_text(read(row, key)) != expected for key, expected in active.items()):
            continue
        result.append(row)
    return result
