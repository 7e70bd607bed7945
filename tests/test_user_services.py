import uuid

import pytest
from fastapi import HTTPException

from app.models.user import SurveyStatus, User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.services import users as users_service


def test_create_user_normalizes_email(db_session, organization):
    user = users_service.users.create(
        db_session,
        UserCreate(
            username=" jdoe ",
            email="JDoe@Example.com",
            firstname="Jane",
            lastname="Doe",
            organization_id=organization.id,
        ),
    )
    assert user.username == "jdoe"
    assert user.email == "jdoe@example.com"
    assert user.ui_role == UserRole.user
    assert user.survey_status == SurveyStatus.not_assigned


def test_create_user_rejects_duplicate_email(db_session, make_user):
    existing = make_user("taken")
    with pytest.raises(HTTPException) as exc:
        users_service.users.create(
            db_session,
            UserCreate(username="other", email=existing.email.upper()),
        )
    assert exc.value.status_code == 409


def test_create_user_rejects_duplicate_username(db_session, make_user):
    make_user("taken")
    with pytest.raises(HTTPException) as exc:
        users_service.users.create(
            db_session,
            UserCreate(username="TAKEN", email="fresh@example.com"),
        )
    assert exc.value.status_code == 409


def test_create_user_requires_existing_organization(db_session):
    with pytest.raises(HTTPException) as exc:
        users_service.users.create(
            db_session,
            UserCreate(username="lonely", email="lonely@example.com", organization_id=uuid.uuid4()),
        )
    assert exc.value.status_code == 404


def test_get_user_with_malformed_id_is_404(db_session):
    with pytest.raises(HTTPException) as exc:
        users_service.users.get(db_session, "not-a-uuid")
    assert exc.value.status_code == 404


def test_list_users_filters(db_session, make_user, organization):
    make_user("alpha", ui_role=UserRole.admin, organization=organization)
    make_user("beta", survey_status=SurveyStatus.completed)
    make_user("gamma", lastname="Alphonse")

    admins = users_service.users.list(db_session, ui_role="admin")
    assert [user.username for user in admins] == ["alpha"]

    completed = users_service.users.list(db_session, survey_status="completed")
    assert [user.username for user in completed] == ["beta"]

    matches = users_service.users.list(
        db_session, search="alph", order_by="username", order_dir="asc"
    )
    assert [user.username for user in matches] == ["alpha", "gamma"]

    members = users_service.users.list(db_session, organization_id=str(organization.id))
    assert [user.username for user in members] == ["alpha"]


def test_list_users_rejects_unknown_role(db_session):
    with pytest.raises(HTTPException) as exc:
        users_service.users.list(db_session, ui_role="wizard")
    assert exc.value.status_code == 400


def test_list_users_rejects_unknown_order(db_session):
    with pytest.raises(HTTPException) as exc:
        users_service.users.list(db_session, order_by="password")
    assert exc.value.status_code == 400


def test_list_rows_flattens_organization(db_session, make_user, organization):
    make_user("member", firstname="Mary", lastname="Okafor", organization=organization)
    make_user("solo", firstname=None, lastname=None)
    rows = {row.username: row for row in users_service.users.list_rows(db_session)}

    assert rows["member"].organization_name == "Grace Community Church"
    assert rows["member"].full_name == "Mary Okafor"
    assert rows["member"].ui_role == "user"
    assert rows["member"].survey_status == "pending"
    assert rows["solo"].organization_name is None
    assert rows["solo"].full_name == ""


def test_update_user(db_session, make_user):
    user = make_user("changing")
    updated = users_service.users.update(
        db_session,
        str(user.id),
        UserUpdate(email="NEW@example.com", survey_status=SurveyStatus.in_progress),
    )
    assert updated.email == "new@example.com"
    assert updated.survey_status == SurveyStatus.in_progress


def test_update_user_rejects_taken_email(db_session, make_user):
    make_user("first")
    second = make_user("second")
    with pytest.raises(HTTPException) as exc:
        users_service.users.update(
            db_session, second.id, UserUpdate(email="first@example.com")
        )
    assert exc.value.status_code == 409


def test_delete_user(db_session, make_user):
    user = make_user("doomed")
    users_service.users.delete(db_session, user.id)
    assert db_session.get(User, user.id) is None


def test_delete_missing_user_is_404(db_session):
    with pytest.raises(HTTPException) as exc:
        users_service.users.delete(db_session, uuid.uuid4())
    assert exc.value.status_code == 404
