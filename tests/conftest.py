import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import get_db, init_db
from app.models.organization import Organization, OrganizationType
from app.models.user import SurveyStatus, User, UserRole
from app.services import email as email_service
from app.services.grid_sessions import clear_sessions


@pytest.fixture(scope="session")
def engine():
    database_url = os.getenv("TEST_DATABASE_URL")
    if database_url:
        engine = create_engine(database_url)
    else:
        engine = create_engine(
            "sqlite+pysqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        # pysqlite manages BEGIN itself and breaks SAVEPOINT nesting.
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autoflush=False,
        autocommit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def _reset_grid_sessions():
    clear_sessions()
    yield
    clear_sessions()


class Outbox:
    """Records reminder emails instead of talking to an SMTP server."""

    def __init__(self):
        self.messages: list[dict] = []
        self.failing: set[str] = set()

    def send(self, to_email, subject, body_html, body_text=None, config=None):
        if to_email in self.failing:
            return False
        self.messages.append(
            {"to": to_email, "subject": subject, "html": body_html, "text": body_text}
        )
        return True

    @property
    def recipients(self) -> list[str]:
        return [message["to"] for message in self.messages]


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    box = Outbox()
    monkeypatch.setattr(email_service, "send_email", box.send)
    return box


@pytest.fixture()
def client(db_session):
    from app.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def _unique(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@pytest.fixture()
def organization(db_session):
    organization = Organization(
        name="Grace Community Church",
        org_type=OrganizationType.church,
        continent="Africa",
        region="East",
        province="Nairobi",
        city="Nairobi",
        denomination="Baptist",
    )
    db_session.add(organization)
    db_session.commit()
    db_session.refresh(organization)
    return organization


@pytest.fixture()
def make_user(db_session):
    def _make_user(
        username: str | None = None,
        *,
        firstname: str | None = "Test",
        lastname: str | None = "User",
        ui_role: UserRole = UserRole.user,
        survey_status: SurveyStatus = SurveyStatus.pending,
        organization: Organization | None = None,
        survey_code: str | None = None,
    ) -> User:
        username = username or _unique("user")
        user = User(
            username=username,
            email=f"{username}@example.com",
            firstname=firstname,
            lastname=lastname,
            ui_role=ui_role,
            survey_status=survey_status,
            organization_id=organization.id if organization else None,
            survey_code=survey_code,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user
