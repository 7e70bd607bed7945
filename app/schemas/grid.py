from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class GridSortRequest(BaseModel):
    column_id: str = Field(min_length=1, max_length=80)


class GridPageRequest(BaseModel):
    page_index: int = Field(ge=0)


class GridPageSizeRequest(BaseModel):
    page_size: int = Field(ge=1)


class GridFilterRequest(BaseModel):
    search: str | None = Field(default=None, max_length=200)
    filters: dict[str, str] | None = None


class GridToggleRequest(BaseModel):
    row_id: str = Field(min_length=1)


class GridHeaderRead(BaseModel):
    id: str
    label: str
    sortable: bool
    align: str
    width: str | int | None = None
    sort_active: bool
    sort_direction: str | None = None


class GridRowRead(BaseModel):
    id: str
    cells: dict[str, Any]
    selected: bool
    selectable: bool
    annotations: dict[str, Any] = Field(default_factory=dict)


class GridViewResponse(BaseModel):
    table_key: str
    columns: list[GridHeaderRead]
    rows: list[GridRowRead]
    total_count: int
    page_index: int
    page_size: int
    page_count: int
    page_size_options: list[int]
    paginated: bool
    sort_column: str | None = None
    sort_direction: str | None = None
    select_all: str
    selected_ids: list[str]
    selected_count: int
    search: str
    filters: dict[str, str]
    empty_message: str
    actions: list[str]
    batch_running: bool


class BatchNotificationRead(BaseModel):
    message: str
    severity: str


class BatchActionResponse(BaseModel):
    action: str
    success_count: int
    fail_count: int
    notification: BatchNotificationRead
    view: GridViewResponse


class GridRowDetail(BaseModel):
    table_key: str
    id: str
    record: dict[str, Any]
