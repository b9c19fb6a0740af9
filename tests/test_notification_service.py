import asyncio
import logging
from datetime import date

import pytest

from helpers import RecordingMailer
from model.leave_model import LeaveStatus
from service.notification_service import LeaveDecisionNotice, NotificationDispatcher
from settings import Settings
from utils.exceptions import NotificationFailure
from utils.mail_config_utils import build_connection_config, generate_decision_html, generate_decision_text


def make_notice(**overrides):
    fields = {
        "leave_id": 1,
        "employee_email": "anna@example.com",
        "employee_name": "Anna Kowalska",
        "leave_type": "Annual",
        "start_date": date(2024, 6, 1),
        "end_date": date(2024, 6, 3),
        "status": LeaveStatus.approved,
        "admin_comment": None,
    }
    fields.update(overrides)
    return LeaveDecisionNotice(**fields)


def test_duration_is_inclusive():
    assert make_notice().duration_days == 3
    assert make_notice(end_date=date(2024, 6, 1)).duration_days == 1
    assert make_notice(start_date=date(2024, 2, 28), end_date=date(2024, 3, 1)).duration_days == 3


def test_message_contents():
    notice = make_notice(status=LeaveStatus.rejected, admin_comment="Team is short-staffed")
    message = NotificationDispatcher(RecordingMailer()).build_message(notice)

    assert message.subject == "Leave Request Rejected"
    assert message.recipients[0].email == "anna@example.com"
    assert "Jun 01, 2024" in message.body
    assert "Team is short-staffed" in message.body
    assert "3 day(s)" in message.alternative_body


def test_html_escapes_user_text():
    html_body = generate_decision_html(make_notice(admin_comment="<script>alert(1)</script>"))
    assert "<script>" not in html_body
    assert "&lt;script&gt;" in html_body


def test_text_body_omits_empty_comment():
    assert "Admin Comment" not in generate_decision_text(make_notice())
    assert 'Admin Comment: "Fine"' in generate_decision_text(make_notice(admin_comment="Fine"))


def test_notify_sends_one_message():
    mailer = RecordingMailer()
    asyncio.run(NotificationDispatcher(mailer).notify_decision(make_notice()))
    assert len(mailer.messages) == 1


def test_disabled_dispatcher_is_a_no_op():
    dispatcher = NotificationDispatcher(None)
    assert not dispatcher.enabled
    asyncio.run(dispatcher.notify_decision(make_notice()))


def test_notify_wraps_transport_errors():
    dispatcher = NotificationDispatcher(RecordingMailer(fail=True))
    with pytest.raises(NotificationFailure):
        asyncio.run(dispatcher.notify_decision(make_notice()))


def test_dispatch_safely_logs_and_swallows_failures(caplog):
    dispatcher = NotificationDispatcher(RecordingMailer(fail=True))
    with caplog.at_level(logging.ERROR, logger="service.notification_service"):
        asyncio.run(dispatcher.dispatch_safely(make_notice()))
    assert "SMTP server unavailable" in caplog.text


def test_mail_config_is_built_only_when_configured():
    assert build_connection_config(Settings()) is None

    conf = build_connection_config(Settings(
        mail_server="smtp.example.com",
        mail_username="mailer",
        mail_password="pw",
        mail_from="noreply@example.com",
    ))
    assert conf.MAIL_SERVER == "smtp.example.com"
    assert conf.USE_CREDENTIALS is True
