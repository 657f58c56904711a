"""Email integration utilities for sending emails."""

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional, List

from core.config import settings
from core.utils.formatting import mask_email

logger = logging.getLogger(__name__)


class EmailService:
    """
    Email service for sending emails via SMTP.

    Without an SMTP host the service runs in log-only mode: messages are
    logged instead of delivered, which is what local development wants.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        """
        Initialize email service.

        Args:
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Default sender email
            from_name: Default sender name
        """
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.from_email
        self.from_name = from_name or settings.from_name

    def send_email(
        self,
        to_email: str | List[str],
        subject: str,
        body: str,
        html_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            body: Plain text body
            html_body: Optional HTML alternative
            reply_to: Reply-to email address

        Returns:
            True if email sent successfully
        """
        recipients = to_email if isinstance(to_email, list) else [to_email]

        if not self.smtp_host:
            logger.info(
                f"SMTP not configured, email to "
                f"{', '.join(mask_email(r) for r in recipients)} not sent: {subject}"
            )
            logger.debug(body)
            return True

        msg = MIMEMultipart('alternative')
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = ", ".join(recipients)
        msg['Subject'] = subject
        if reply_to:
            msg['Reply-To'] = reply_to

        msg.attach(MIMEText(body, 'plain'))
        if html_body:
            msg.attach(MIMEText(html_body, 'html'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, from_addr=self.from_email, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email: {e}")
            return False

        logger.info(f"Email sent to {', '.join(mask_email(r) for r in recipients)}")
        return True

    def send_team_invitation(
        self,
        to_email: str,
        inviter_name: str,
        team_name: str,
        token: str,
        role: str,
    ) -> bool:
        """
        Send the "join my team" email for an email invitation.

        Returns:
            True if email sent successfully
        """
        template = EmailTemplates.team_invitation(
            inviter_name=inviter_name,
            team_name=team_name,
            invitation_url=f"{settings.frontend_url.rstrip('/')}/join/{token}",
            role=role,
            expire_days=settings.invitation_expire_days,
        )
        return self.send_email(to_email, **template)

    async def send_team_invitation_async(self, *args, **kwargs) -> bool:
        """Run ``send_team_invitation`` off the event loop."""
        return await asyncio.to_thread(self.send_team_invitation, *args, **kwargs)


class EmailTemplates:
    """Pre-configured email templates."""

    @staticmethod
    def team_invitation(
        inviter_name: str,
        team_name: str,
        invitation_url: str,
        role: str,
        expire_days: int,
    ) -> dict:
        """Team invitation email template."""
        role_label = role.lower()
        return {
            'subject': f"{inviter_name} invited you to join {team_name}",
            'body': (
                f"Hi,\n\n"
                f"{inviter_name} has invited you to join {team_name} as a {role_label}.\n\n"
                f"Accept the invitation: {invitation_url}\n\n"
                f"This invitation expires in {expire_days} days. "
                f"If you weren't expecting it, you can ignore this email.\n"
            ),
            'html_body': f"""
                <html>
                <body>
                    <h2>You're invited to join {escape(team_name)}</h2>
                    <p>{escape(inviter_name)} has invited you to join
                       <strong>{escape(team_name)}</strong> as a {escape(role_label)}.</p>
                    <p><a href="{escape(invitation_url)}">Accept invitation</a></p>
                    <p>This invitation expires in {expire_days} days.
                       If you weren't expecting it, you can ignore this email.</p>
                </body>
                </html>
            """,
        }
