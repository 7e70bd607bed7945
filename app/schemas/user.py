from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import SurveyStatus, UserRole


class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=80)
    email: EmailStr
    firstname: str | None = Field(default=None, max_length=80)
    lastname: str | None = Field(default=None, max_length=80)
    ui_role: UserRole = UserRole.user
    organization_id: UUID | None = None
    survey_status: SurveyStatus = SurveyStatus.not_assigned
    survey_code: str | None = Field(default=None, max_length=40)


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=80)
    email: EmailStr | None = None
    firstname: str | None = Field(default=None, max_length=80)
    lastname: str | None = Field(default=None, max_length=80)
    ui_role: UserRole | None = None
    organization_id: UUID | None = None
    survey_status: SurveyStatus | None = None
    survey_code: str | None = Field(default=None, max_length=40)


class UserRead(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reminder_count: int
    last_reminded_at: datetime | None
    created_at: datetime
    updated_at: datetime


class UserRow(BaseModel):
    """Flattened user record shown in the users grid."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    username: str
    email: str
    firstname: str | None = None
    lastname: str | None = None
    ui_role: str
    organization_id: UUID | None = None
    organization_name: str | None = None
    survey_status: str
    reminder_count: int = 0
    last_reminded_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.firstname, self.lastname) if part)
