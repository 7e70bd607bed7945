import uuid
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.models.user import SurveyStatus, UserRole
from app.services.grid import DataGrid, GridColumn, GridDefinition
from app.services.table_config import (
    ORGANIZATIONS_GRID,
    USERS_GRID,
    GridAction,
    GridRegistry,
)
from app.services import users as users_service
from app.services import organizations as organizations_service


def test_builtin_grids_are_registered():
    assert GridRegistry.exists("users")
    assert GridRegistry.exists("organizations")
    assert set(GridRegistry.get("users").actions) == {"delete", "remind"}
    assert set(GridRegistry.get("organizations").actions) == {"delete", "remind"}


def test_unknown_grid_is_404():
    with pytest.raises(HTTPException) as exc:
        GridRegistry.get("invoices")
    assert exc.value.status_code == 404


def test_unknown_action_is_404():
    with pytest.raises(HTTPException) as exc:
        GridRegistry.get("users").action("archive")
    assert exc.value.status_code == 404


def test_row_id_parsing():
    table = GridRegistry.get("users")
    raw = uuid.uuid4()
    assert table.row_id(str(raw)) == raw
    with pytest.raises(HTTPException) as exc:
        table.row_id("nope")
    assert exc.value.status_code == 400


def test_register_rejects_duplicate_actions():
    definition = GridDefinition(
        table_key="scratch",
        columns=(GridColumn(id="name", label="Name"),),
        page_size_options=(10,),
    )

    async def _noop(row_id):
        return None

    action = GridAction(name="delete", verb="deleted", noun="item(s)", operation=lambda db: _noop)
    with pytest.raises(ValueError):
        GridRegistry.register(definition=definition, loader=lambda db: [], actions=[action, action])
    assert not GridRegistry.exists("scratch")


def test_users_grid_excludes_root_from_selection(db_session, make_user):
    make_user("root-admin", ui_role=UserRole.root)
    make_user("plain")
    grid = DataGrid(USERS_GRID, users_service.users.list_rows(db_session))
    grid.select_all()
    selected = {grid.find_row(row_id).username for row_id in grid.selected_ids}
    assert selected == {"plain"}


def test_users_grid_sorts_names_by_surname(db_session, make_user):
    make_user("u1", firstname="Zoe", lastname="Adams")
    make_user("u2", firstname="Adam", lastname="Zimmer")
    make_user("u3", firstname=None, lastname=None)
    grid = DataGrid(USERS_GRID, users_service.users.list_rows(db_session))
    view = grid.view()
    assert view.sort_column == "name"
    assert [row.cells["name"] for row in view.rows] == ["Zoe Adams", "u3", "Adam Zimmer"]


def test_users_grid_renders_and_annotates(db_session, make_user, organization):
    make_user(
        "annotated",
        ui_role=UserRole.manager,
        survey_status=SurveyStatus.in_progress,
        organization=organization,
    )
    row = DataGrid(USERS_GRID, users_service.users.list_rows(db_session)).view().rows[0]
    assert row.cells["ui_role"] == "Manager"
    assert row.cells["survey_status"] == "In progress"
    assert row.cells["organization_name"] == "Grace Community Church"
    assert row.annotations == {"role": "manager", "survey_outstanding": True}


def test_organizations_grid_location_sorts_widest_area_first():
    rows = [
        SimpleNamespace(
            id=1, name="North", org_type="church", continent="Europe", region="North",
            province=None, city="Oslo", town=None, denomination=None, member_count=0,
        ),
        SimpleNamespace(
            id=2, name="South", org_type="school", continent="Africa", region="South",
            province=None, city="Zomba", town=None, denomination=None, member_count=2,
        ),
    ]
    for row in rows:
        row.location = ", ".join(part for part in (row.city, row.region, row.continent) if part)
    grid = DataGrid(ORGANIZATIONS_GRID, rows)
    grid.sort_by("location")
    view = grid.view()
    assert [row.id for row in view.rows] == [2, 1]
    assert view.rows[0].cells["location"] == "Zomba, South, Africa"
    assert view.rows[0].cells["denomination"] == "N/A"
    assert view.rows[0].annotations == {"type": "school", "has_members": True}


def test_organizations_grid_filters_by_type(db_session, organization):
    grid = DataGrid(ORGANIZATIONS_GRID, organizations_service.organizations.list_rows(db_session))
    grid.set_filters(filters={"org_type": "school"})
    assert grid.view().rows == []
    grid.set_filters(filters={"org_type": "church"})
    assert [row.record.name for row in grid.view().rows] == ["Grace Community Church"]
