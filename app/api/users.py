from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.common import ListResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services import reminders as reminders_service
from app.services import users as users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return users_service.users.create(db, payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return users_service.users.get(db, user_id)


@router.get("", response_model=ListResponse[UserRead])
def list_users(
    search: str | None = Query(default=None, max_length=200),
    ui_role: str | None = None,
    survey_status: str | None = None,
    organization_id: str | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return users_service.users.list_response(
        db,
        search=search,
        ui_role=ui_role,
        survey_status=survey_status,
        organization_id=organization_id,
        order_by=order_by,
        order_dir=order_dir,
        limit=limit,
        offset=offset,
    )


@router.patch("/{user_id}", response_model=UserRead)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    return users_service.users.update(db, user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    users_service.users.delete(db, user_id)


@router.post("/{user_id}/remind", response_model=UserRead)
def remind_user(user_id: str, db: Session = Depends(get_db)):
    return reminders_service.send_survey_reminder(db, user_id)
