"""
Email Service
Delivers notifications through the configured SMTP relay
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import Optional

import aiosmtplib

from teamfinder.core.errors import EmailDeliveryError
from teamfinder.core.logger import logger
from teamfinder.notifications.models import Notification


class EmailService:
    """SMTP email sender"""

    def __init__(
        self,
        host: str,
        port: int,
        from_email: str,
        from_name: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.from_email = from_email
        self.from_name = from_name
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "EmailService":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            from_email=config.smtp_from_email,
            from_name=config.smtp_from_name,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            timeout=config.smtp_timeout_seconds,
        )

    def build_message(self, to: str, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to
        msg.attach(MIMEText(html_body, "html"))
        return msg

    async def send_email(self, to: str, subject: str, html_body: str) -> None:
        """
        Send one HTML email

        Raises:
            EmailDeliveryError: when the relay rejects the message or cannot be reached
        """
        msg = self.build_message(to, subject, html_body)
        try:
            async with aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                start_tls=self.use_tls,
                timeout=self.timeout,
            ) as smtp:
                if self.username and self.password:
                    await smtp.login(self.username, self.password)
                await smtp.send_message(msg)
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to send email to {to}",
                metadata={"subject": subject, "smtpHost": self.host},
                error=e,
            )
            raise EmailDeliveryError(to, str(e)) from e

        logger.info(f"Email sent to {to}", metadata={"subject": subject})

    async def send_email_notification(self, to: str, notification: Notification) -> None:
        subject = f"Notification: {notification.type}"
        body = f"<h2>{escape(notification.type)}</h2><p>{escape(notification.message)}</p>"
        await self.send_email(to, subject, body)
