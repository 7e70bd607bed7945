from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.organization import OrganizationType


class OrganizationBase(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    org_type: OrganizationType = OrganizationType.church
    continent: str | None = Field(default=None, max_length=80)
    region: str | None = Field(default=None, max_length=80)
    province: str | None = Field(default=None, max_length=80)
    city: str | None = Field(default=None, max_length=80)
    town: str | None = Field(default=None, max_length=80)
    denomination: str | None = Field(default=None, max_length=120)


class OrganizationCreate(OrganizationBase):
    pass


class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    org_type: OrganizationType | None = None
    continent: str | None = Field(default=None, max_length=80)
    region: str | None = Field(default=None, max_length=80)
    province: str | None = Field(default=None, max_length=80)
    city: str | None = Field(default=None, max_length=80)
    town: str | None = Field(default=None, max_length=80)
    denomination: str | None = Field(default=None, max_length=120)


class OrganizationRead(OrganizationBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class OrganizationRow(BaseModel):
    """Flattened organization record shown in the organizations grid."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    org_type: str
    continent: str | None = None
    region: str | None = None
    province: str | None = None
    city: str | None = None
    town: str | None = None
    denomination: str | None = None
    member_count: int = 0
    pending_survey_count: int = 0
    created_at: datetime | None = None

    @property
    def location(self) -> str:
        parts = [self.city, self.province, self.region, self.continent]
        return ", ".join(part for part in parts if part)
