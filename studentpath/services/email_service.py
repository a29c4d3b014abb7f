"""
Transactional email over SMTP (STARTTLS).

Two messages are sent by the platform:
- password reset links (15 minute expiry)
- daily reminders for pending career-plan tasks
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from studentpath.core.config import get_settings
from studentpath.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

settings = get_settings()

PLATFORM_NAME = "StudentPath"
SMTP_TIMEOUT_SECONDS = 20


def send_email(to: str, subject: str, text_body: str, html_body: Optional[str] = None, from_name: str = None) -> None:
    """
    Send one email.

    Raises:
        ExternalServiceError: SMTP is not configured or the relay rejected the message
    """
    if not settings.smtp_user or not settings.smtp_password:
        raise ExternalServiceError("smtp", "SMTP email settings are missing")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f'"{from_name or settings.smtp_from_name}" <{settings.smtp_user}>'
    msg["To"] = to
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception(f"Failed to send email to {to}")
        raise ExternalServiceError("smtp", f"Failed to send email: {e}")

    logger.info(f"Email sent to {to}: {subject}")


def _user_type_display(user_type: str) -> str:
    return {
        "college": "College Administrator",
        "professional": "Professional",
    }.get(user_type, "Student")


def send_password_reset_email(to: str, name: str, reset_url: str, user_type: str) -> None:
    account = _user_type_display(user_type)

    text_body = f"""Password Reset Request - {PLATFORM_NAME}

Hello {name},

We received a request to reset the password for your {account} account.

If you made this request, please visit the following link to create a new password:
{reset_url}

Security Information:
- This link will expire in 15 minutes for your security
- If you didn't request this reset, please ignore this email
- Your password won't change until you create a new one

Best regards,
The {PLATFORM_NAME} Team

This is an automated message, please do not reply to this email.
"""

    html_body = f"""<!DOCTYPE html>
<html lang="en">
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f8f9fa; margin: 0; padding: 0;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 12px; overflow: hidden;">
    <div style="background: linear-gradient(135deg, #10b981, #059669); padding: 40px 20px; text-align: center;">
      <h1 style="color: white; margin: 0;">🔐 {PLATFORM_NAME}</h1>
      <p style="color: rgba(255, 255, 255, 0.9); margin: 8px 0 0;">Password Reset Request</p>
    </div>
    <div style="padding: 40px 30px; color: #374151;">
      <p style="font-size: 18px;">Hello {name},</p>
      <p style="color: #6b7280; line-height: 1.6;">
        We received a request to reset the password for your {account} account.
        If you made this request, click the button below to create a new password.
      </p>
      <div style="text-align: center; margin: 40px 0;">
        <a href="{reset_url}" style="background: #10b981; color: white; padding: 16px 32px; text-decoration: none; border-radius: 8px; font-weight: bold;">Reset My Password</a>
      </div>
      <p style="color: #6b7280; font-size: 14px;">
        This link will expire in 15 minutes. If you didn't request this reset, please ignore this email.
      </p>
      <p style="color: #6b7280; font-size: 14px; word-break: break-all;">{reset_url}</p>
    </div>
  </div>
</body>
</html>"""

    send_email(
        to,
        f"🔐 Reset Your {PLATFORM_NAME} Password",
        text_body,
        html_body,
        from_name=f"{PLATFORM_NAME} Support",
    )


def reminder_subject(task_count: int) -> str:
    plural = "s" if task_count > 1 else ""
    return f"⚡ {task_count} Task{plural} Pending Today: Don't Break Your Streak!"


def send_task_reminder_email(to: str, name: str, task_count: int, target_name: str) -> None:
    plural = "s" if task_count > 1 else ""
    plan_url = f"{settings.app_url}/dashboard/career-tracks/my-plan"

    text_body = f"""Hey {name},

You have {task_count} task{plural} pending today for your {target_name} preparation plan.

Complete them to keep your daily streak, earn bonus XP and unlock badges:
{plan_url}

Keep going! Every task completed brings you closer to your goal.
"""

    html_body = f"""<!DOCTYPE html>
<html lang="en">
<body style="margin: 0; padding: 0; background: #0f172a; font-family: 'Segoe UI', sans-serif;">
  <div style="max-width: 600px; margin: 20px auto 0; background: #1e293b; border-radius: 16px; overflow: hidden;">
    <div style="background: linear-gradient(135deg, #6366f1, #8b5cf6); padding: 40px 30px; text-align: center;">
      <h1 style="color: white; margin: 0;">Don't Break Your Streak!</h1>
      <p style="color: rgba(255, 255, 255, 0.85);">You have pending tasks for today</p>
    </div>
    <div style="padding: 32px 30px; color: #e2e8f0;">
      <p>Hey <strong>{name}</strong> 👋</p>
      <p>
        You have <strong style="color: #f59e0b;">{task_count} task{plural}</strong> pending today
        for your <strong style="color: #a78bfa;">{target_name}</strong> preparation plan.
      </p>
      <div style="text-align: center; margin: 32px 0;">
        <a href="{plan_url}" style="background: #6366f1; color: white; padding: 14px 32px; text-decoration: none; border-radius: 8px; font-weight: 700;">Complete Today's Tasks</a>
      </div>
    </div>
  </div>
</body>
</html>"""

    send_email(to, reminder_subject(task_count), text_body, html_body, from_name=f"{PLATFORM_NAME} Career OS")
