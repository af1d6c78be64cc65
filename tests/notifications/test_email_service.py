"""Tests for SMTP email delivery"""
import pytest
import aiosmtplib
from unittest.mock import AsyncMock, MagicMock, patch

from teamfinder.core.errors import EmailDeliveryError
from teamfinder.notifications import EmailService, Notification


def make_service(**kwargs):
    options = dict(host="smtp.example.com", port=587, from_email="noreply@example.com", from_name="Team Finder")
    options.update(kwargs)
    return EmailService(**options)


def mock_smtp():
    smtp = MagicMock()
    smtp.login = AsyncMock()
    smtp.send_message = AsyncMock()
    smtp_class = MagicMock()
    smtp_class.return_value.__aenter__ = AsyncMock(return_value=smtp)
    smtp_class.return_value.__aexit__ = AsyncMock(return_value=False)
    return smtp_class, smtp


class TestEmailService:

    def test_build_message(self):
        msg = make_service().build_message("alice@example.com", "Hello", "<p>Hi</p>")
        assert msg["To"] == "alice@example.com"
        assert msg["Subject"] == "Hello"
        assert msg["From"] == "Team Finder <noreply@example.com>"

    @pytest.mark.asyncio
    async def test_send_email(self):
        smtp_class, smtp = mock_smtp()
        with patch("teamfinder.notifications.email_service.aiosmtplib.SMTP", smtp_class):
            await make_service().send_email("alice@example.com", "Hello", "<p>Hi</p>")

        assert smtp_class.call_args.kwargs["hostname"] == "smtp.example.com"
        assert smtp_class.call_args.kwargs["start_tls"] is True
        smtp.login.assert_not_awaited()
        smtp.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_send_email_logs_in_with_credentials(self):
        smtp_class, smtp = mock_smtp()
        with patch("teamfinder.notifications.email_service.aiosmtplib.SMTP", smtp_class):
            await make_service(username="user", password="secret").send_email("a@example.com", "S", "B")

        smtp.login.assert_awaited_once_with("user", "secret")

    @pytest.mark.asyncio
    async def test_relay_failure_raises_email_delivery_error(self):
        smtp_class, smtp = mock_smtp()
        smtp.send_message = AsyncMock(side_effect=aiosmtplib.SMTPRecipientsRefused([]))
        with patch("teamfinder.notifications.email_service.aiosmtplib.SMTP", smtp_class):
            with pytest.raises(EmailDeliveryError) as exc_info:
                await make_service().send_email("alice@example.com", "Hello", "<p>Hi</p>")

        assert exc_info.value.recipient == "alice@example.com"

    @pytest.mark.asyncio
    async def test_unreachable_relay_raises_email_delivery_error(self):
        smtp_class = MagicMock()
        smtp_class.return_value.__aenter__ = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        smtp_class.return_value.__aexit__ = AsyncMock(return_value=False)
        with patch("teamfinder.notifications.email_service.aiosmtplib.SMTP", smtp_class):
            with pytest.raises(EmailDeliveryError):
                await make_service().send_email("alice@example.com", "Hello", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_send_email_notification_formats_subject_and_body(self):
        service = make_service()
        service.send_email = AsyncMock()

        await service.send_email_notification(
            "alice@example.com", Notification(type="TeamJoined", message="Welcome <b>aboard</b>")
        )

        service.send_email.assert_awaited_once_with(
            "alice@example.com",
            "Notification: TeamJoined",
            "<h2>TeamJoined</h2><p>Welcome &lt;b&gt;aboard&lt;/b&gt;</p>",
        )
