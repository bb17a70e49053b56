"""
Email service for the Task Tracker API
Delivers password reset links; without SMTP credentials the link is logged instead
"""
import logging
import smtplib
from email.message import EmailMessage

from ..config import Settings

logger = logging.getLogger(__name__)


RESET_EMAIL_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #6366f1;">Password Reset</h2>
    <p>You requested a password reset for your {app_name} account.</p>
    <p>Click the link below to reset your password:</p>
    <p><a href="{reset_url}">Reset Password</a></p>
    <p>Or copy and paste this link:</p>
    <p style="word-break: break-all; color: #64748b;">{reset_url}</p>
    <p>This link will expire in {ttl_minutes} minutes.</p>
    <p>If you didn't request this, please ignore this email.</p>
</div>
"""


class EmailService:
    """Outbound email capability"""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return self.settings.email_configured

    def build_reset_url(self, reset_token: str) -> str:
        return f"{self.settings.client_url.rstrip('/')}/reset-password.html?token={reset_token}"

    def send_reset_password_email(self, email: str, reset_token: str) -> bool:
        """
        Send a password reset link.

        Returns:
            True when the link was sent, or logged because email is not configured;
            False when sending failed
        """
        reset_url = self.build_reset_url(reset_token)

        if not self.is_configured:
            logger.warning("Email service not configured; password reset link for %s: %s", email, reset_url)
            return True

        message = EmailMessage()
        message["Subject"] = "Password Reset Request"
        message["From"] = f'"{self.settings.email_from_name}" <{self.settings.email_user}>'
        message["To"] = email
        message.set_content(f"Reset your password: {reset_url}")
        message.add_alternative(
            RESET_EMAIL_HTML.format(
                app_name=self.settings.email_from_name,
                reset_url=reset_url,
                ttl_minutes=self.settings.reset_token_ttl_minutes,
            ),
            subtype="html",
        )

        try:
            with smtplib.SMTP(self.settings.email_host, self.settings.email_port, timeout=10) as smtp:
                smtp.starttls()
                smtp.login(self.settings.email_user, self.settings.email_pass)
                smtp.send_message(message)
            logger.info("Password reset email sent to %s", email)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email send error for %s: %s", email, e)
            return False


__all__ = [
    "EmailService",
]
