from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.common import ListResponse
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationRead,
    OrganizationUpdate,
)
from app.services import organizations as organizations_service
from app.services import reminders as reminders_service

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def create_organization(payload: OrganizationCreate, db: Session = Depends(get_db)):
    return organizations_service.organizations.create(db, payload)


@router.get("/{organization_id}", response_model=OrganizationRead)
def get_organization(organization_id: str, db: Session = Depends(get_db)):
    return organizations_service.organizations.get(db, organization_id)


@router.get("", response_model=ListResponse[OrganizationRead])
def list_organizations(
    search: str | None = Query(default=None, max_length=160),
    org_type: str | None = None,
    order_by: str = Query(default="name"),
    order_dir: str = Query(default="asc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return organizations_service.organizations.list_response(
        db,
        search=search,
        org_type=org_type,
        order_by=order_by,
        order_dir=order_dir,
        limit=limit,
        offset=offset,
    )


@router.patch("/{organization_id}", response_model=OrganizationRead)
def update_organization(
    organization_id: str, payload: OrganizationUpdate, db: Session = Depends(get_db)
):
    return organizations_service.organizations.update(db, organization_id, payload)


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_organization(organization_id: str, db: Session = Depends(get_db)):
    organizations_service.organizations.delete(db, organization_id)


@router.post("/{organization_id}/remind")
def remind_organization(organization_id: str, db: Session = Depends(get_db)):
    sent = reminders_service.remind_organization(db, organization_id)
    return {"organization_id": organization_id, "sent": sent}
