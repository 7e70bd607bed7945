from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app.models.organization import Organization
from app.models.user import SurveyStatus, User, UserRole
from app.schemas.user import UserCreate, UserRow, UserUpdate
from app.services.common import (
    apply_ordering,
    apply_pagination,
    coerce_uuid,
    get_or_404,
    list_payload,
    validate_enum,
)

logger = logging.getLogger(__name__)


def _normalize_email(value: str | None) -> str | None:
    if not value:
        return None
    candidate = value.strip().lower()
    return candidate or None


def _find_by_email(db: Session, email: str | None) -> User | None:
    normalized = _normalize_email(email)
    if not normalized:
        return None
    return db.query(User).filter(func.lower(User.email) == normalized).first()


def _find_by_username(db: Session, username: str | None) -> User | None:
    if not username:
        return None
    return db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()


def _ensure_organization(db: Session, organization_id) -> None:
    if organization_id is None:
        return
    if not db.get(Organization, coerce_uuid(organization_id)):
        raise HTTPException(status_code=404, detail="Organization not found")


def to_row(user: User) -> UserRow:
    return UserRow(
        id=user.id,
        username=user.username,
        email=user.email,
        firstname=user.firstname,
        lastname=user.lastname,
        ui_role=user.ui_role.value,
        organization_id=user.organization_id,
        organization_name=user.organization.name if user.organization else None,
        survey_status=user.survey_status.value,
        reminder_count=user.reminder_count or 0,
        last_reminded_at=user.last_reminded_at,
        created_at=user.created_at,
    )


class Users:
    @staticmethod
    def create(db: Session, payload: UserCreate) -> User:
        data = payload.model_dump()
        data["email"] = _normalize_email(data.get("email")) or data.get("email")
        data["username"] = data["username"].strip()
        if _find_by_email(db, data["email"]):
            raise HTTPException(status_code=409, detail="Email already belongs to another user")
        if _find_by_username(db, data["username"]):
            raise HTTPException(status_code=409, detail="Username already taken")
        _ensure_organization(db, data.get("organization_id"))
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Created user %s", user.id)
        return user

    @staticmethod
    def get(db: Session, user_id) -> User:
        return get_or_404(
            db, User, user_id, "User not found", options=[selectinload(User.organization)]
        )

    @staticmethod
    def list(
        db: Session,
        search: str | None = None,
        ui_role: str | None = None,
        survey_status: str | None = None,
        organization_id: str | None = None,
        order_by: str = "created_at",
        order_dir: str = "desc",
        limit: int = 100,
        offset: int = 0,
    ) -> list[User]:
        query = db.query(User).options(selectinload(User.organization))
        if search:
            query = query.filter(
                or_(
                    User.username.ilike(f"%{search}%"),
                    User.email.ilike(f"%{search}%"),
                    User.firstname.ilike(f"%{search}%"),
                    User.lastname.ilike(f"%{search}%"),
                )
            )
        if ui_role:
            query = query.filter(User.ui_role == validate_enum(ui_role, UserRole, "ui_role"))
        if survey_status:
            query = query.filter(
                User.survey_status
                == validate_enum(survey_status, SurveyStatus, "survey_status")
            )
        if organization_id:
            query = query.filter(User.organization_id == coerce_uuid(organization_id))
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {
                "created_at": User.created_at,
                "username": User.username,
                "email": User.email,
                "lastname": User.lastname,
            },
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def list_response(db: Session, *, limit: int, offset: int, **filters) -> dict:
        items = Users.list(db, limit=limit, offset=offset, **filters)
        return list_payload(items, limit, offset)

    @staticmethod
    def list_rows(db: Session) -> list[UserRow]:
        """Every user as a grid row, in creation order."""
        users = (
            db.query(User)
            .options(selectinload(User.organization))
            .order_by(User.created_at.asc(), User.username.asc())
            .all()
        )
        return [to_row(user) for user in users]

    @staticmethod
    def update(db: Session, user_id, payload: UserUpdate) -> User:
        user = get_or_404(db, User, user_id, "User not found")
        data = payload.model_dump(exclude_unset=True)
        if "email" in data:
            normalized = _normalize_email(data["email"])
            existing = _find_by_email(db, normalized)
            if existing and existing.id != user.id:
                raise HTTPException(status_code=409, detail="Email already belongs to another user")
            data["email"] = normalized or data["email"]
        if "username" in data:
            existing = _find_by_username(db, data["username"])
            if existing and existing.id != user.id:
                raise HTTPException(status_code=409, detail="Username already taken")
        if "organization_id" in data:
            _ensure_organization(db, data["organization_id"])
        for key, value in data.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, user_id) -> None:
        user = get_or_404(db, User, user_id, "User not found")
        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user_id)


users = Users()
