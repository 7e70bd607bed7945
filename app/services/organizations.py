from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.models.organization import Organization, OrganizationType
from app.models.user import SurveyStatus, User
from app.schemas.organization import OrganizationCreate, OrganizationRow, OrganizationUpdate
from app.services.common import (
    apply_ordering,
    apply_pagination,
    get_or_404,
    list_payload,
    validate_enum,
)

logger = logging.getLogger(__name__)

PENDING_SURVEY_STATUSES = (SurveyStatus.pending, SurveyStatus.in_progress)


class Organizations:
    @staticmethod
    def create(db: Session, payload: OrganizationCreate) -> Organization:
        organization = Organization(**payload.model_dump())
        db.add(organization)
        db.commit()
        db.refresh(organization)
        logger.info("Created organization %s", organization.id)
        return organization

    @staticmethod
    def get(db: Session, organization_id) -> Organization:
        return get_or_404(db, Organization, organization_id, "Organization not found")

    @staticmethod
    def list(
        db: Session,
        search: str | None = None,
        org_type: str | None = None,
        order_by: str = "name",
        order_dir: str = "asc",
        limit: int = 100,
        offset: int = 0,
    ) -> list[Organization]:
        query = db.query(Organization)
        if search:
            query = query.filter(Organization.name.ilike(f"%{search}%"))
        if org_type and org_type != "all":
            query = query.filter(
                Organization.org_type == validate_enum(org_type, OrganizationType, "org_type")
            )
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {
                "name": Organization.name,
                "created_at": Organization.created_at,
                "city": Organization.city,
            },
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def list_response(db: Session, *, limit: int, offset: int, **filters) -> dict:
        items = Organizations.list(db, limit=limit, offset=offset, **filters)
        return list_payload(items, limit, offset)

    @staticmethod
    def list_rows(db: Session) -> list[OrganizationRow]:
        """Every organization as a grid row with member counts, in creation order."""
        pending = case((User.survey_status.in_(PENDING_SURVEY_STATUSES), 1), else_=0)
        counts = (
            db.query(
                User.organization_id.label("organization_id"),
                func.count(User.id).label("member_count"),
                func.coalesce(func.sum(pending), 0).label("pending_count"),
            )
            .filter(User.organization_id.isnot(None))
            .group_by(User.organization_id)
            .subquery()
        )
        results = (
            db.query(Organization, counts.c.member_count, counts.c.pending_count)
            .outerjoin(counts, counts.c.organization_id == Organization.id)
            .order_by(Organization.created_at.asc(), Organization.name.asc())
            .all()
        )
        return [
            OrganizationRow(
                id=organization.id,
                name=organization.name,
                org_type=organization.org_type.value,
                continent=organization.continent,
                region=organization.region,
                province=organization.province,
                city=organization.city,
                town=organization.town,
                denomination=organization.denomination,
                member_count=int(member_count or 0),
                pending_survey_count=int(pending_count or 0),
                created_at=organization.created_at,
            )
            for organization, member_count, pending_count in results
        ]

    @staticmethod
    def update(db: Session, organization_id, payload: OrganizationUpdate) -> Organization:
        organization = get_or_404(db, Organization, organization_id, "Organization not found")
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(organization, key, value)
        db.commit()
        db.refresh(organization)
        return organization

    @staticmethod
    def delete(db: Session, organization_id) -> None:
        organization = get_or_404(db, Organization, organization_id, "Organization not found")
        member_count = (
            db.query(func.count(User.id))
            .filter(User.organization_id == organization.id)
            .scalar()
        )
        if member_count:
            raise HTTPException(
                status_code=409,
                detail="Organization still has members and cannot be deleted",
            )
        db.delete(organization)
        db.commit()
        logger.info("Deleted organization %s", organization_id)


organizations = Organizations()
