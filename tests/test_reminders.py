import pytest
from fastapi import HTTPException

from app.models.user import SurveyStatus
from app.services import reminders as reminders_service


def test_send_survey_reminder_records_delivery(db_session, make_user, organization, outbox):
    user = make_user(
        "pending-user",
        firstname="Ada",
        organization=organization,
        survey_code="SRV-7",
    )

    reminded = reminders_service.send_survey_reminder(db_session, str(user.id))

    assert reminded.reminder_count == 1
    assert reminded.last_reminded_at is not None
    assert outbox.recipients == ["pending-user@example.com"]
    message = outbox.messages[0]
    assert "Hello Ada," in message["text"]
    assert "Grace Community Church" in message["html"]
    assert "SRV-7" in message["text"]
    assert message["text"].count("/SRV-7") == 1


def test_reminder_for_completed_survey_conflicts(db_session, make_user, outbox):
    user = make_user(survey_status=SurveyStatus.completed)
    with pytest.raises(HTTPException) as exc:
        reminders_service.send_survey_reminder(db_session, user.id)
    assert exc.value.status_code == 409
    assert outbox.messages == []


def test_failed_delivery_raises_and_leaves_count(db_session, make_user, outbox):
    user = make_user("bounce")
    outbox.failing.add(user.email)
    with pytest.raises(reminders_service.ReminderDeliveryError):
        reminders_service.send_survey_reminder(db_session, user.id)
    db_session.refresh(user)
    assert user.reminder_count == 0


def test_remind_organization_only_targets_outstanding_surveys(
    db_session, make_user, organization, outbox
):
    make_user("org-a", organization=organization, survey_status=SurveyStatus.pending)
    make_user("org-b", organization=organization, survey_status=SurveyStatus.in_progress)
    make_user("org-c", organization=organization, survey_status=SurveyStatus.completed)
    make_user("outsider", survey_status=SurveyStatus.pending)

    sent = reminders_service.remind_organization(db_session, organization.id)

    assert sent == 2
    assert outbox.recipients == ["org-a@example.com", "org-b@example.com"]


def test_remind_organization_without_outstanding_members_conflicts(
    db_session, make_user, organization
):
    make_user(organization=organization, survey_status=SurveyStatus.completed)
    with pytest.raises(HTTPException) as exc:
        reminders_service.remind_organization(db_session, organization.id)
    assert exc.value.status_code == 409


def test_remind_organization_reports_partial_delivery(db_session, make_user, organization, outbox):
    make_user("ok-member", organization=organization)
    failing = make_user("bad-member", organization=organization)
    outbox.failing.add(failing.email)

    with pytest.raises(reminders_service.ReminderDeliveryError):
        reminders_service.remind_organization(db_session, organization.id)
    assert outbox.recipients == ["ok-member@example.com"]


def test_is_remindable():
    assert reminders_service.is_remindable("pending") is True
    assert reminders_service.is_remindable(SurveyStatus.in_progress) is True
    assert reminders_service.is_remindable("completed") is False
    assert reminders_service.is_remindable("not_assigned") is False
