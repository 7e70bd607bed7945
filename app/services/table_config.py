"""Registry of the admin record grids and their bulk actions.

Each registered table binds a generic ``GridDefinition`` to a row loader and
to the per-item operations its bulk actions run. Users and organizations are
registered at import time at the bottom of this module.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.services import organizations as organizations_service
from app.services import reminders as reminders_service
from app.services import users as users_service
from app.services.common import coerce_uuid
from app.services.grid import GridColumn, GridDefinition, SortDirection, SortState, read_field

RowLoader = Callable[[Session], list[Any]]
ItemOperation = Callable[[Hashable], Awaitable[Any]]
OperationFactory = Callable[[Session], ItemOperation]
IdParser = Callable[[str], Hashable]


@dataclass(frozen=True)
class GridAction:
    name: str
    verb: str
    noun: str
    operation: OperationFactory


@dataclass(frozen=True)
class GridTable:
    definition: GridDefinition
    loader: RowLoader
    actions: dict[str, GridAction] = field(default_factory=dict)
    parse_id: IdParser = coerce_uuid

    @property
    def table_key(self) -> str:
        return self.definition.table_key

    def action(self, name: str) -> GridAction:
        action = self.actions.get(name)
        if action is None:
            raise HTTPException(status_code=404, detail=f"Unknown action: {name}")
        return action

    def row_id(self, raw: str) -> Hashable:
        try:
            return self.parse_id(raw)
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid row id: {raw}") from exc


class GridRegistry:
    _tables: dict[str, GridTable] = {}

    @classmethod
    def register(
        cls,
        *,
        definition: GridDefinition,
        loader: RowLoader,
        actions: list[GridAction] | None = None,
        parse_id: IdParser = coerce_uuid,
    ) -> GridTable:
        action_map: dict[str, GridAction] = {}
        for action in actions or []:
            if action.name in action_map:
                raise ValueError(f"Duplicate grid action: {action.name}")
            action_map[action.name] = action
        table = GridTable(
            definition=definition,
            loader=loader,
            actions=action_map,
            parse_id=parse_id,
        )
        cls._tables[definition.table_key] = table
        return table

    @classmethod
    def get(cls, table_key: str) -> GridTable:
        table = cls._tables.get(table_key)
        if not table:
            raise HTTPException(status_code=404, detail="Unregistered grid")
        return table

    @classmethod
    def exists(cls, table_key: str) -> bool:
        return table_key in cls._tables

    @classmethod
    def keys(cls) -> list[str]:
        return sorted(cls._tables)


def _titled(key: str) -> Callable[[Any], str]:
    def _render(row: Any) -> str:
        value = read_field(row, key)
        if not value:
            return ""
        return str(value).replace("_", " ").capitalize()

    return _render


def _user_sort_value(row: Any, key: str) -> Any:
    # Sort people by surname first.
    if key == "full_name":
        return " ".join(part for part in (row.lastname, row.firstname) if part) or row.username
    return read_field(row, key)


def _organization_sort_value(row: Any, key: str) -> Any:
    # Location sorts from the widest area down; it is displayed city first.
    if key == "location":
        parts = [row.continent, row.region, row.province, row.city]
        return " / ".join(part for part in parts if part)
    return read_field(row, key)


def _isolated(db: Session, service_call: Callable[[Session, Hashable], Any]) -> ItemOperation:
    """Run a blocking service call for one row off the event loop.

    A failed item rolls back the shared session so its pending changes do not
    leak into the next item's commit.
    """

    def _call(row_id: Hashable) -> None:
        try:
            service_call(db, row_id)
        except Exception:
            db.rollback()
            raise

    async def _run(row_id: Hashable) -> None:
        await asyncio.to_thread(_call, row_id)

    return _run


def _delete_user(db: Session) -> ItemOperation:
    return _isolated(db, users_service.users.delete)


def _remind_user(db: Session) -> ItemOperation:
    return _isolated(db, reminders_service.send_survey_reminder)


def _delete_organization(db: Session) -> ItemOperation:
    return _isolated(db, organizations_service.organizations.delete)


def _remind_organization(db: Session) -> ItemOperation:
    return _isolated(db, reminders_service.remind_organization)


PAGE_SIZE_OPTIONS = tuple(settings.grid_page_size_options)


USERS_GRID = GridDefinition(
    table_key="users",
    columns=(
        GridColumn(
            id="name",
            label="Name",
            sortable=True,
            sort_key="full_name",
            render=lambda row: row.full_name or row.username,
        ),
        GridColumn(id="username", label="Username", sortable=True),
        GridColumn(id="email", label="Email", sortable=True),
        GridColumn(id="ui_role", label="Role", sortable=True, render=_titled("ui_role")),
        GridColumn(id="organization_name", label="Organization", sortable=True),
        GridColumn(
            id="survey_status",
            label="Survey",
            sortable=True,
            render=_titled("survey_status"),
        ),
        GridColumn(id="reminder_count", label="Reminders", sortable=True, align="right", width=110),
    ),
    sort_value_getter=_user_sort_value,
    is_row_selectable=lambda row: row.ui_role != "root",
    row_annotator=lambda row: {
        "role": row.ui_role,
        "survey_outstanding": reminders_service.is_remindable(row.survey_status),
    },
    page_size_options=PAGE_SIZE_OPTIONS,
    default_page_size=settings.grid_default_page_size,
    default_sort=SortState(column_key="name", direction=SortDirection.asc),
    search_fields=("username", "email", "firstname", "lastname", "organization_name"),
    filter_fields=("ui_role", "survey_status", "organization_name"),
    empty_message="No users found",
)

ORGANIZATIONS_GRID = GridDefinition(
    table_key="organizations",
    columns=(
        GridColumn(id="name", label="Name", sortable=True),
        GridColumn(id="org_type", label="Type", sortable=True, render=_titled("org_type")),
        GridColumn(
            id="location",
            label="Location",
            sortable=True,
            sort_key="location",
            render=lambda row: row.location,
        ),
        GridColumn(
            id="denomination",
            label="Denomination",
            render=lambda row: row.denomination or "N/A",
        ),
        GridColumn(id="member_count", label="Members", sortable=True, align="right"),
        GridColumn(
            id="pending_survey_count",
            label="Pending Surveys",
            sortable=True,
            align="right",
        ),
    ),
    sort_value_getter=_organization_sort_value,
    row_annotator=lambda row: {
        "type": row.org_type,
        "has_members": row.member_count > 0,
    },
    page_size_options=PAGE_SIZE_OPTIONS,
    default_page_size=settings.grid_default_page_size,
    default_sort=SortState(column_key="name", direction=SortDirection.asc),
    search_fields=("name", "city", "province", "region", "continent", "denomination"),
    filter_fields=("org_type",),
    empty_message="No organizations found",
)


GridRegistry.register(
    definition=USERS_GRID,
    loader=users_service.users.list_rows,
    actions=[
        GridAction(name="delete", verb="deleted", noun="user(s)", operation=_delete_user),
        GridAction(name="remind", verb="reminded", noun="user(s)", operation=_remind_user),
    ],
)

GridRegistry.register(
    definition=ORGANIZATIONS_GRID,
    loader=organizations_service.organizations.list_rows,
    actions=[
        GridAction(
            name="delete",
            verb="deleted",
            noun="organization(s)",
            operation=_delete_organization,
        ),
        GridAction(
            name="remind",
            verb="reminded",
            noun="organization(s)",
            operation=_remind_organization,
        ),
    ],
)
