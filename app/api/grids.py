from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.grid import (
    BatchActionResponse,
    BatchNotificationRead,
    GridFilterRequest,
    GridHeaderRead,
    GridPageRequest,
    GridPageSizeRequest,
    GridRowDetail,
    GridRowRead,
    GridSortRequest,
    GridToggleRequest,
    GridViewResponse,
)
from app.services.batch_operations import BatchInProgressError
from app.services.grid import find_column
from app.services.grid_sessions import GridSession, grid_sessions

router = APIRouter(prefix="/grids", tags=["grids"])


def get_grid_session(
    table_key: str,
    db: Session = Depends(get_db),
    x_grid_session: str | None = Header(default=None, alias="X-Grid-Session"),
) -> GridSession:
    return grid_sessions.get(db, table_key, x_grid_session)


def _view_response(session: GridSession) -> GridViewResponse:
    view = session.grid.view()
    return GridViewResponse(
        table_key=view.table_key,
        columns=[
            GridHeaderRead(
                id=header.id,
                label=header.label,
                sortable=header.sortable,
                align=header.align,
                width=header.width,
                sort_active=header.sort_active,
                sort_direction=header.sort_direction,
            )
            for header in view.columns
        ],
        rows=[
            GridRowRead(
                id=str(row.id),
                cells=row.cells,
                selected=row.selected,
                selectable=row.selectable,
                annotations=row.annotations,
            )
            for row in view.rows
        ],
        total_count=view.total_count,
        page_index=view.page_index,
        page_size=view.page_size,
        page_count=view.page_count,
        page_size_options=view.page_size_options,
        paginated=view.paginated,
        sort_column=view.sort_column,
        sort_direction=view.sort_direction,
        select_all=view.select_all.value,
        selected_ids=[str(row_id) for row_id in view.selected_ids],
        selected_count=view.selected_count,
        search=view.search,
        filters=view.filters,
        empty_message=view.empty_message,
        actions=sorted(session.table.actions),
        batch_running=session.executor.is_running,
    )


@router.get("/{table_key}", response_model=GridViewResponse)
def get_grid(session: GridSession = Depends(get_grid_session)):
    return _view_response(session)


@router.post("/{table_key}/sort", response_model=GridViewResponse)
def sort_grid(payload: GridSortRequest, session: GridSession = Depends(get_grid_session)):
    column = find_column(session.grid.definition.columns, payload.column_id)
    if column is None:
        raise HTTPException(status_code=400, detail=f"Unknown column: {payload.column_id}")
    if not column.sortable:
        raise HTTPException(status_code=400, detail=f"Column is not sortable: {column.id}")
    session.grid.sort_by(column.id)
    return _view_response(session)


@router.post("/{table_key}/page", response_model=GridViewResponse)
def change_page(payload: GridPageRequest, session: GridSession = Depends(get_grid_session)):
    session.grid.go_to_page(payload.page_index)
    return _view_response(session)


@router.post("/{table_key}/page-size", response_model=GridViewResponse)
def change_page_size(
    payload: GridPageSizeRequest, session: GridSession = Depends(get_grid_session)
):
    try:
        session.grid.set_page_size(payload.page_size)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _view_response(session)


@router.post("/{table_key}/filters", response_model=GridViewResponse)
def filter_grid(payload: GridFilterRequest, session: GridSession = Depends(get_grid_session)):
    try:
        session.grid.set_filters(search=payload.search, filters=payload.filters)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _view_response(session)


@router.post("/{table_key}/selection/toggle", response_model=GridViewResponse)
def toggle_row(payload: GridToggleRequest, session: GridSession = Depends(get_grid_session)):
    row_id = session.table.row_id(payload.row_id)
    # Already-selected ids can always be removed, even once the row is gone.
    if row_id not in session.grid.selected_ids:
        row = session.grid.find_row(row_id)
        if row is None:
            raise HTTPException(status_code=404, detail="Row not found")
        if not session.grid.definition.is_selectable(row):
            raise HTTPException(status_code=400, detail="Row cannot be selected")
    session.grid.toggle(row_id)
    return _view_response(session)


@router.post("/{table_key}/selection/toggle-all", response_model=GridViewResponse)
def toggle_all_rows(session: GridSession = Depends(get_grid_session)):
    session.grid.toggle_all()
    return _view_response(session)


@router.post("/{table_key}/selection/select-all", response_model=GridViewResponse)
def select_all_rows(session: GridSession = Depends(get_grid_session)):
    session.grid.select_all()
    return _view_response(session)


@router.post("/{table_key}/selection/clear", response_model=GridViewResponse)
def clear_selection(session: GridSession = Depends(get_grid_session)):
    session.grid.clear_selection()
    return _view_response(session)


@router.post("/{table_key}/rows/{row_id}/open", response_model=GridRowDetail)
def open_row(row_id: str, session: GridSession = Depends(get_grid_session)):
    parsed = session.table.row_id(row_id)
    row = session.open_row(parsed)
    if row is None:
        raise HTTPException(status_code=404, detail="Row not found")
    return GridRowDetail(
        table_key=session.table_key,
        id=str(parsed),
        record=row.model_dump(mode="json"),
    )


@router.post("/{table_key}/actions/{action}", response_model=BatchActionResponse)
async def run_batch_action(
    action: str,
    db: Session = Depends(get_db),
    session: GridSession = Depends(get_grid_session),
):
    session.table.action(action)
    if not session.grid.selected_ids:
        raise HTTPException(status_code=400, detail="No rows selected")
    try:
        result = await session.run_action(db, action)
    except BatchInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    notification = session.last_notification
    return BatchActionResponse(
        action=action,
        success_count=result.success_count,
        fail_count=result.fail_count,
        notification=BatchNotificationRead(
            message=notification.message,
            severity=notification.severity.value,
        ),
        view=_view_response(session),
    )
