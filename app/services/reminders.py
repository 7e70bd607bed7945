"""Survey reminder emails for users and whole organizations."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload

from app.config import settings
from app.models.organization import Organization
from app.models.user import SurveyStatus, User
from app.services import email as email_service
from app.services.common import get_or_404
from app.services.email_templates import (
    REMINDER_HTML_TEMPLATE,
    REMINDER_TEXT_TEMPLATE,
    render_template_text,
)

logger = logging.getLogger(__name__)

REMINDABLE_STATUSES = {SurveyStatus.pending, SurveyStatus.in_progress}


class ReminderDeliveryError(Exception):
    """Raised when a reminder email could not be handed to the mail server."""


def is_remindable(survey_status: SurveyStatus | str) -> bool:
    return SurveyStatus(survey_status) in REMINDABLE_STATUSES


def reminder_variables(user: User) -> dict[str, str]:
    code = user.survey_code or "N/A"
    return {
        "firstname": user.firstname or user.username,
        "username": user.username,
        "organization_name": user.organization.name if user.organization else "your organization",
        "survey_code": code,
        "survey_link": f"{settings.survey_base_url.rstrip('/')}/{code}",
    }


def _deliver(db: Session, user: User) -> None:
    variables = reminder_variables(user)
    sent = email_service.send_email(
        to_email=user.email,
        subject=render_template_text(settings.reminder_subject, variables),
        body_html=render_template_text(REMINDER_HTML_TEMPLATE, variables),
        body_text=render_template_text(REMINDER_TEXT_TEMPLATE, variables),
    )
    if not sent:
        raise ReminderDeliveryError(f"Reminder delivery failed for {user.email}")
    user.reminder_count = (user.reminder_count or 0) + 1
    user.last_reminded_at = datetime.now(UTC)
    db.commit()


def send_survey_reminder(db: Session, user_id) -> User:
    user = get_or_404(
        db, User, user_id, "User not found", options=[selectinload(User.organization)]
    )
    if user.survey_status not in REMINDABLE_STATUSES:
        raise HTTPException(status_code=409, detail="User has no outstanding survey")
    _deliver(db, user)
    logger.info("Sent survey reminder to user %s", user.id)
    return user


def remind_organization(db: Session, organization_id) -> int:
    """Remind every member of an organization with an outstanding survey.

    Returns the number of reminders sent. Raises when the organization has no
    such member or when any delivery fails; reminders already sent stay sent.
    """
    organization = get_or_404(db, Organization, organization_id, "Organization not found")
    members = (
        db.query(User)
        .options(selectinload(User.organization))
        .filter(User.organization_id == organization.id)
        .filter(User.survey_status.in_(REMINDABLE_STATUSES))
        .order_by(User.username.asc())
        .all()
    )
    if not members:
        raise HTTPException(
            status_code=409,
            detail="Organization has no members with outstanding surveys",
        )
    sent = 0
    failed = 0
    for member in members:
        try:
            _deliver(db, member)
            sent += 1
        except ReminderDeliveryError as exc:
            failed += 1
            logger.warning("Organization %s reminder failed: %s", organization.id, exc)
    if failed:
        raise ReminderDeliveryError(
            f"{failed} of {len(members)} reminders failed for organization {organization.id}"
        )
    logger.info("Sent %d survey reminders for organization %s", sent, organization.id)
    return sent
