"""Record grid engine.

Pure sort, filter, pagination and selection logic behind the admin record
lists, plus the ``DataGrid`` orchestrator that composes them into a
render-ready view:

    from app.services.grid import DataGrid, GridColumn, GridDefinition
"""

from app.services.grid.columns import GridColumn, find_column, read_field, validate_columns
from app.services.grid.filtering import ALL_VALUES, filter_rows
from app.services.grid.orchestrator import (
    DataGrid,
    GridDefinition,
    GridHeader,
    GridRow,
    GridView,
    build_view,
    default_row_id,
    eligible_row_ids,
    ordered_rows,
)
from app.services.grid.pagination import PageState, PageWindow, page_count, paginate
from app.services.grid.selection import SelectAllState, Selection
from app.services.grid.sorting import (
    SortDirection,
    SortState,
    compare_sort_values,
    next_sort_state,
    stable_sort,
)
from app.services.grid.state import (
    GridState,
    apply_dataset,
    apply_filters,
    apply_page,
    apply_page_size,
    apply_selection,
    apply_sort,
    clear_selection,
    select_all_rows,
    toggle_all_rows,
    toggle_row,
)

__all__ = [
    "ALL_VALUES",
    "DataGrid",
    "GridColumn",
    "GridDefinition",
    "GridHeader",
    "GridRow",
    "GridState",
    "GridView",
    "PageState",
    "PageWindow",
    "SelectAllState",
    "Selection",
    "SortDirection",
    "SortState",
    "apply_dataset",
    "apply_filters",
    "apply_page",
    "apply_page_size",
    "apply_selection",
    "apply_sort",
    "build_view",
    "clear_selection",
    "compare_sort_values",
    "default_row_id",
    "eligible_row_ids",
    "filter_rows",
    "find_column",
    "next_sort_state",
    "ordered_rows",
    "page_count",
    "paginate",
    "read_field",
    "select_all_rows",
    "stable_sort",
    "toggle_all_rows",
    "toggle_row",
    "validate_columns",
]
