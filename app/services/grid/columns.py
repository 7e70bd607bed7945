from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

CellRenderer = Callable[[Any], Any]


def read_field(row: Any, key: str) -> Any:
    """Read ``key`` from a mapping or an attribute-style record."""
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


@dataclass(frozen=True)
class GridColumn:
    id: str
    label: str
    sortable: bool = False
    sort_key: str | None = None
    render: CellRenderer | None = None
    align: str = "left"
    width: str | int | None = None

    @property
    def effective_sort_key(self) -> str:
        return self.sort_key or self.id

    def cell(self, row: Any) -> Any:
        if self.render is not None:
            return self.render(row)
        value = read_field(row, self.id)
        return "" if value is None else value


def validate_columns(columns: Sequence[GridColumn]) -> tuple[GridColumn, ...]:
    seen: set[str] = set()
    for column in columns:
        if not column.id:
            raise ValueError("Grid column id is required")
        if column.id in seen:
            raise ValueError(f"Duplicate grid column: {column.id}")
        seen.add(column.id)
    return tuple(columns)


def find_column(columns: Sequence[GridColumn], column_id: str) -> GridColumn | None:
    for column in columns:
        if column.id == column_id:
            return column
    return None
