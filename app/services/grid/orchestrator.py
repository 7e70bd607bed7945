from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from app.services.grid.columns import GridColumn, find_column, read_field, validate_columns
from app.services.grid.filtering import filter_rows
from app.services.grid.pagination import PageState, page_count, paginate
from app.services.grid.selection import SelectAllState
from app.services.grid.sorting import SortState, SortValueGetter, stable_sort
from app.services.grid.state import (
    GridState,
    apply_dataset,
    apply_filters,
    apply_page,
    apply_page_size,
    apply_sort,
    clear_selection,
    select_all_rows,
    toggle_all_rows,
    toggle_row,
)

logger = logging.getLogger(__name__)

RowIdGetter = Callable[[Any], Hashable]
RowPredicate = Callable[[Any], bool]
RowAnnotator = Callable[[Any], dict[str, Any]]
SelectionChanged = Callable[[list[Hashable]], None]
RowClicked = Callable[[Any], Any]


def default_row_id(row: Any) -> Hashable:
    return read_field(row, "id")


@dataclass(frozen=True)
class GridDefinition:
    table_key: str
    columns: tuple[GridColumn, ...]
    row_id: RowIdGetter = default_row_id
    sort_value_getter: SortValueGetter | None = None
    is_row_selectable: RowPredicate | None = None
    row_annotator: RowAnnotator | None = None
    paginated: bool = True
    page_size_options: tuple[int, ...] = (5, 10, 25, 50)
    default_page_size: int = 10
    default_sort: SortState = field(default_factory=SortState)
    search_fields: tuple[str, ...] = ()
    filter_fields: tuple[str, ...] = ()
    empty_message: str = "No data found"

    def __post_init__(self) -> None:
        if not self.table_key:
            raise ValueError("table_key is required")
        object.__setattr__(self, "columns", validate_columns(self.columns))
        if self.default_page_size not in self.page_size_options:
            raise ValueError(
                f"Default page size {self.default_page_size} is not one of "
                f"{list(self.page_size_options)}"
            )
        if self.default_sort.column_key:
            column = find_column(self.columns, self.default_sort.column_key)
            if column is None or not column.sortable:
                raise ValueError(f"Default sort column is not sortable: {self.default_sort.column_key}")

    def initial_state(self) -> GridState:
        return GridState(
            sort=self.default_sort,
            page=PageState(page_index=0, page_size=self.default_page_size),
        )

    def is_selectable(self, row: Any) -> bool:
        if self.is_row_selectable is None:
            return True
        return bool(self.is_row_selectable(row))

    def sort_key_for(self, column_key: str) -> str:
        column = find_column(self.columns, column_key)
        if column is None:
            return ""
        return column.effective_sort_key


@dataclass(frozen=True)
class GridHeader:
    id: str
    label: str
    sortable: bool
    align: str
    width: str | int | None
    sort_active: bool
    sort_direction: str | None


@dataclass(frozen=True)
class GridRow:
    id: Hashable
    cells: dict[str, Any]
    selected: bool
    selectable: bool
    annotations: dict[str, Any]
    record: Any


@dataclass(frozen=True)
class GridView:
    table_key: str
    columns: list[GridHeader]
    rows: list[GridRow]
    total_count: int
    page_index: int
    page_size: int
    page_count: int
    page_size_options: list[int]
    paginated: bool
    sort_column: str | None
    sort_direction: str | None
    select_all: SelectAllState
    selected_ids: list[Hashable]
    search: str
    filters: dict[str, str]
    empty_message: str

    @property
    def selected_count(self) -> int:
        return len(self.selected_ids)


def ordered_rows(definition: GridDefinition, rows: Sequence[Any], state: GridState) -> list[Any]:
    """Filter then sort ``rows`` for ``state``; the full sequence before windowing."""
    filtered = filter_rows(
        rows,
        search=state.search,
        filters=state.filter_map,
        search_fields=definition.search_fields,
    )
    sort_key = definition.sort_key_for(state.sort.column_key) if state.sort.is_active else ""
    return stable_sort(
        filtered,
        sort_key,
        state.sort.direction,
        definition.sort_value_getter,
    )


def eligible_row_ids(definition: GridDefinition, rows: Iterable[Any]) -> list[Hashable]:
    return [definition.row_id(row) for row in rows if definition.is_selectable(row)]


def build_view(definition: GridDefinition, rows: Sequence[Any], state: GridState) -> GridView:
    ordered = ordered_rows(definition, rows, state)
    window = paginate(
        ordered,
        state.page.page_index,
        state.page.page_size,
        enabled=definition.paginated,
    )
    selection = state.selection
    headers = [
        GridHeader(
            id=column.id,
            label=column.label,
            sortable=column.sortable,
            align=column.align,
            width=column.width,
            sort_active=column.sortable and state.sort.column_key == column.id,
            sort_direction=(
                state.sort.direction.value
                if column.sortable and state.sort.column_key == column.id
                else None
            ),
        )
        for column in definition.columns
    ]
    grid_rows = []
    for row in window.rows:
        row_id = definition.row_id(row)
        grid_rows.append(
            GridRow(
                id=row_id,
                cells={column.id: column.cell(row) for column in definition.columns},
                selected=row_id in selection,
                selectable=definition.is_selectable(row),
                annotations=definition.row_annotator(row) if definition.row_annotator else {},
                record=row,
            )
        )
    return GridView(
        table_key=definition.table_key,
        columns=headers,
        rows=grid_rows,
        total_count=window.total_count,
        page_index=state.page.page_index,
        page_size=state.page.page_size,
        page_count=page_count(window.total_count, state.page.page_size)
        if definition.paginated
        else 1,
        page_size_options=list(definition.page_size_options),
        paginated=definition.paginated,
        sort_column=state.sort.column_key or None,
        sort_direction=state.sort.direction.value if state.sort.is_active else None,
        select_all=selection.all_state(eligible_row_ids(definition, ordered)),
        selected_ids=list(selection.ids),
        search=state.search,
        filters=state.filter_map,
        empty_message=definition.empty_message,
    )


class DataGrid:
    """Stateful wrapper binding a grid definition to a dataset.

    Holds the current immutable ``GridState`` and the loaded rows, applies the
    reducers on interaction and notifies the selection and row-click callbacks.
    """

    def __init__(
        self,
        definition: GridDefinition,
        rows: Iterable[Any] = (),
        state: GridState | None = None,
        on_selection_change: SelectionChanged | None = None,
        on_row_click: RowClicked | None = None,
    ):
        self.definition = definition
        self.on_selection_change = on_selection_change
        self.on_row_click = on_row_click
        self._state = state or definition.initial_state()
        self._rows: list[Any] = []
        self.load(rows)

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def rows(self) -> list[Any]:
        return list(self._rows)

    @property
    def selected_ids(self) -> list[Hashable]:
        return list(self._state.selection.ids)

    def load(self, rows: Iterable[Any]) -> None:
        self._rows = list(rows)
        self._sync_dataset()

    def ordered_rows(self) -> list[Any]:
        return ordered_rows(self.definition, self._rows, self._state)

    def eligible_ids(self) -> list[Hashable]:
        return eligible_row_ids(self.definition, self.ordered_rows())

    def sort_by(self, column_id: str) -> None:
        self._set_state(apply_sort(self._state, column_id, self.definition.columns))

    def go_to_page(self, page_index: int) -> None:
        total = len(self.ordered_rows())
        self._set_state(apply_page(self._state, page_index, total))

    def set_page_size(self, page_size: int) -> None:
        self._set_state(
            apply_page_size(self._state, page_size, self.definition.page_size_options)
        )

    def set_filters(
        self,
        search: str | None = None,
        filters: Mapping[str, str] | None = None,
    ) -> None:
        if filters is not None:
            unknown = set(filters) - set(self.definition.filter_fields)
            if unknown:
                raise ValueError(f"Unsupported filter: {', '.join(sorted(unknown))}")
        self._set_state(apply_filters(self._state, search, filters))
        self._sync_dataset()

    def toggle(self, row_id: Hashable) -> None:
        self._set_state(toggle_row(self._state, row_id))

    def toggle_all(self) -> None:
        self._set_state(toggle_all_rows(self._state, self.eligible_ids()))

    def select_all(self) -> None:
        self._set_state(select_all_rows(self._state, self.eligible_ids()))

    def clear_selection(self) -> None:
        self._set_state(clear_selection(self._state))

    def find_row(self, row_id: Hashable) -> Any | None:
        for row in self._rows:
            if self.definition.row_id(row) == row_id:
                return row
        return None

    def click_row(self, row_id: Hashable) -> Any | None:
        row = self.find_row(row_id)
        if row is None:
            return None
        if self.on_row_click is not None:
            return self.on_row_click(row)
        return row

    def view(self) -> GridView:
        return build_view(self.definition, self._rows, self._state)

    def _sync_dataset(self) -> None:
        row_count = len(self.ordered_rows())
        if self._state.row_count is not None and self._state.row_count != row_count:
            logger.debug(
                "Grid %s dataset size changed %d -> %d; returning to first page",
                self.definition.table_key,
                self._state.row_count,
                row_count,
            )
        self._set_state(apply_dataset(self._state, row_count))

    def _set_state(self, new_state: GridState) -> None:
        previous = self._state
        self._state = new_state
        if previous.selection != new_state.selection and self.on_selection_change:
            self.on_selection_change(list(new_state.selection.ids))
