import html
import logging
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail

from settings import Settings

logger = logging.getLogger(__name__)

STATUS_COLORS = {"approved": "#10B981", "rejected": "#EF4444"}
STATUS_ICONS = {"approved": "✅", "rejected": "❌"}
DATE_FORMAT = "%b %d, %Y"


def build_connection_config(settings: Settings) -> Optional[ConnectionConfig]:
    """SMTP config for fastapi-mail, or None when mail is not configured."""
    if not settings.mail_enabled:
        return None

    return ConnectionConfig(
        MAIL_USERNAME=settings.mail_username or "",
        MAIL_PASSWORD=settings.mail_password or "",
        MAIL_FROM=settings.mail_from,
        MAIL_FROM_NAME=settings.mail_from_name,
        MAIL_PORT=settings.mail_port,
        MAIL_SERVER=settings.mail_server,
        MAIL_STARTTLS=settings.mail_starttls,
        MAIL_SSL_TLS=settings.mail_ssl_tls,
        USE_CREDENTIALS=bool(settings.mail_username),
        VALIDATE_CERTS=True,
    )


def build_mailer(settings: Settings) -> Optional[FastMail]:
    conf = build_connection_config(settings)
    if conf is None:
        logger.info("Mail transport not configured, leave notifications are disabled")
        return None
    return FastMail(conf)


def format_date(value) -> str:
    return value.strftime(DATE_FORMAT)


def generate_decision_text(notice) -> str:
    status = notice.status.value
    lines = [
        f"Leave Request {status.upper()}",
        "",
        f"Hello {notice.employee_name},",
        "",
        f"Your leave request has been {status}.",
        "",
        "Leave Details:",
        f"- Leave Type: {notice.leave_type}",
        f"- Start Date: {format_date(notice.start_date)}",
        f"- End Date: {format_date(notice.end_date)}",
        f"- Duration: {notice.duration_days} day(s)",
        f"- Status: {status.upper()}",
    ]
    if notice.admin_comment:
        lines += ["", f'Admin Comment: "{notice.admin_comment}"']
    lines += [
        "",
        "If you have any questions about this decision, please contact your HR department or supervisor.",
        "",
        "This is an automated message from the Employee Leave Management System.",
    ]
    return "\n".join(lines)


def generate_decision_html(notice) -> str:
    status = notice.status.value
    color = STATUS_COLORS.get(status, "#6c757d")
    icon = STATUS_ICONS.get(status, "")
    comment_block = ""
    if notice.admin_comment:
        comment_block = f"""
            <div style="background: #e3f2fd; border: 1px solid #2196f3; padding: 15px; border-radius: 6px; margin: 20px 0;">
              <h4 style="margin-top: 0; color: #1976d2;">Admin Comment:</h4>
              <p style="margin-bottom: 0; font-style: italic;">"{html.escape(notice.admin_comment)}"</p>
            </div>"""

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Leave Request {status}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: #667eea; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
    <h1 style="color: white; margin: 0; font-size: 28px;">Leave Request Update</h1>
  </div>
  <div style="background: #f8f9fa; padding: 30px; border-radius: 0 0 10px 10px; border: 1px solid #e9ecef;">
    <p style="font-size: 18px;">Hello <strong>{html.escape(notice.employee_name)}</strong>,</p>
    <div style="border-left: 4px solid {color}; padding: 15px; margin: 20px 0;">
      <p style="margin: 0; font-weight: bold; color: {color};">{icon} Your leave request has been {status.upper()}</p>
    </div>
    <h3 style="color: #495057;">Leave Details:</h3>
    <table style="width: 100%; border-collapse: collapse;">
      <tr><td style="padding: 8px 0; font-weight: bold; width: 30%;">Leave Type:</td><td>{html.escape(notice.leave_type)}</td></tr>
      <tr><td style="padding: 8px 0; font-weight: bold;">Start Date:</td><td>{format_date(notice.start_date)}</td></tr>
      <tr><td style="padding: 8px 0; font-weight: bold;">End Date:</td><td>{format_date(notice.end_date)}</td></tr>
      <tr><td style="padding: 8px 0; font-weight: bold;">Duration:</td><td>{notice.duration_days} day(s)</td></tr>
      <tr><td style="padding: 8px 0; font-weight: bold;">Status:</td><td>{status.upper()}</td></tr>
    </table>{comment_block}
    <p style="margin-top: 30px; color: #6c757d; font-size: 14px;">
      If you have any questions about this decision, please contact your HR department or supervisor.
    </p>
  </div>
  <div style="text-align: center; margin-top: 20px; color: #6c757d; font-size: 12px;">
    <p>This is an automated message from the Employee Leave Management System.</p>
    <p>Please do not reply to this email.</p>
  </div>
</body>
</html>"""
