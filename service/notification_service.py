import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fastapi_mail import MessageSchema, MessageType
from fastapi_mail.schemas import MultipartSubtypeEnum

from model.leave_model import LeaveStatus
from Schema.leave_management_schema import LeaveRequestWithOwnerResponse
from utils.exceptions import NotificationFailure
from utils.mail_config_utils import generate_decision_html, generate_decision_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveDecisionNotice:
    leave_id: int
    employee_email: str
    employee_name: str
    leave_type: str
    start_date: date
    end_date: date
    status: LeaveStatus
    admin_comment: Optional[str] = None

    @property
    def duration_days(self) -> int:
        """Inclusive number of calendar days covered by the leave."""
        return abs((self.end_date - self.start_date).days) + 1

    @classmethod
    def from_leave(cls, leave: LeaveRequestWithOwnerResponse) -> "LeaveDecisionNotice":
        return cls(
            leave_id=leave.id,
            employee_email=leave.email,
            employee_name=leave.employee_name,
            leave_type=leave.leave_type,
            start_date=leave.start_date,
            end_date=leave.end_date,
            status=LeaveStatus(leave.status),
            admin_comment=leave.admin_comment,
        )


class NotificationDispatcher:
    """Sends leave decision e-mails through a fastapi-mail ``FastMail`` instance.

    ``mailer`` is None when SMTP is not configured; every send is then a
    logged no-op.
    """

    def __init__(self, mailer=None):
        self.mailer = mailer

    @property
    def enabled(self) -> bool:
        return self.mailer is not None

    def build_message(self, notice: LeaveDecisionNotice) -> MessageSchema:
        return MessageSchema(
            subject=f"Leave Request {notice.status.value.capitalize()}",
            recipients=[notice.employee_email],
            body=generate_decision_html(notice),
            alternative_body=generate_decision_text(notice),
            subtype=MessageType.html,
            multipart_subtype=MultipartSubtypeEnum.alternative,
        )

    async def notify_decision(self, notice: LeaveDecisionNotice) -> None:
        if not self.enabled:
            logger.info(f"Email notification skipped for leave {notice.leave_id} - SMTP not configured")
            return

        try:
            message = self.build_message(notice)
            await self.mailer.send_message(message)
        except Exception as exc:
            raise NotificationFailure(f"Failed to send email notification: {exc}") from exc

        logger.info(f"Email notification sent to {notice.employee_email} for leave {notice.status.value}")

    async def dispatch_safely(self, notice: LeaveDecisionNotice) -> None:
        """Background-task entry point; a failed send never reaches the caller."""
        try:
            await self.notify_decision(notice)
        except NotificationFailure as exc:
            logger.error(
                exc.message,
                extra={"leave_id": notice.leave_id, "recipient": notice.employee_email},
            )
