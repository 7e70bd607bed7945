"""Grid view state and the pure reducers that evolve it.

``GridState`` is immutable; every interaction produces a new state through one
of the ``apply_*`` functions below so the whole engine can be exercised
without an HTTP or UI harness.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from app.services.grid.columns import GridColumn, find_column
from app.services.grid.pagination import PageState, page_count
from app.services.grid.selection import Selection
from app.services.grid.sorting import SortState, next_sort_state


@dataclass(frozen=True)
class GridState:
    sort: SortState = field(default_factory=SortState)
    page: PageState = field(default_factory=PageState)
    selection: Selection = field(default_factory=Selection)
    search: str = ""
    filters: tuple[tuple[str, str], ...] = ()
    # Size of the filtered dataset the page index was last validated against.
    row_count: int | None = None

    @property
    def filter_map(self) -> dict[str, str]:
        return dict(self.filters)


def apply_sort(state: GridState, column_id: str, columns: Sequence[GridColumn]) -> GridState:
    """Header click on ``column_id``. Unknown and non-sortable columns are ignored."""
    column = find_column(columns, column_id)
    if column is None or not column.sortable:
        return state
    return replace(state, sort=next_sort_state(state.sort, column.id))


def apply_page(state: GridState, page_index: int, total_count: int | None = None) -> GridState:
    if total_count is not None:
        last_page = max(page_count(total_count, state.page.page_size) - 1, 0)
        page_index = min(page_index, last_page)
    page_index = max(page_index, 0)
    return replace(state, page=replace(state.page, page_index=page_index))


def apply_page_size(state: GridState, page_size: int, options: Sequence[int]) -> GridState:
    if page_size not in options:
        raise ValueError(f"Unsupported page size: {page_size}")
    return replace(state, page=PageState(page_index=0, page_size=page_size))


def apply_selection(state: GridState, selection: Selection) -> GridState:
    return replace(state, selection=selection)


def toggle_row(state: GridState, row_id: Hashable) -> GridState:
    return apply_selection(state, state.selection.toggle(row_id))


def select_all_rows(state: GridState, eligible_ids: Sequence[Hashable]) -> GridState:
    return apply_selection(state, state.selection.select_all(eligible_ids))


def toggle_all_rows(state: GridState, eligible_ids: Sequence[Hashable]) -> GridState:
    return apply_selection(state, state.selection.toggle_all(eligible_ids))


def clear_selection(state: GridState) -> GridState:
    return apply_selection(state, state.selection.clear())


def apply_filters(
    state: GridState,
    search: str | None = None,
    filters: Mapping[str, str] | None = None,
) -> GridState:
    new_search = state.search if search is None else search.strip()
    new_filters = state.filters if filters is None else tuple(sorted(filters.items()))
    if new_search == state.search and new_filters == state.filters:
        return state
    return replace(
        state,
        search=new_search,
        filters=new_filters,
        page=replace(state.page, page_index=0),
    )


def apply_dataset(state: GridState, row_count: int) -> GridState:
    """Record the filtered dataset size, returning to the first page when it changes."""
    if state.row_count == row_count:
        return state
    return replace(
        state,
        row_count=row_count,
        page=replace(state.page, page_index=0),
    )
