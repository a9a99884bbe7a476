"""
Tests for account email rendering and delivery
"""
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from backoffice.modules.email.service import EmailService
from backoffice.modules.email.tasks import send_password_reset_email_task, send_verification_email_task


@pytest.fixture
def service():
    return EmailService()


@pytest.fixture
def configured(service):
    service.username = "mailer@example.com"
    service.sender = "mailer@example.com"
    return service


class TestEmailTemplates:

    def test_verification_email_renders_link(self, service):
        text, html = service.render("verification_email", {
            "user_name": "Maria",
            "company_name": "Sunrise Grocers",
            "verification_url": service.link("verify-email", "abc"),
            "expires_hours": 24,
        })
        assert "Hello Maria" in text
        assert "Sunrise Grocers" in text
        assert "verify-email?token=abc" in text
        assert 'href="http://localhost:3000/verify-email?token=abc"' in html

    def test_html_is_escaped(self, service):
        _, html = service.render("password_reset_email", {
            "user_name": "<script>x</script>",
            "reset_url": service.link("reset-password", "abc"),
            "expires_minutes": 60,
        })
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestEmailDelivery:

    def test_unconfigured_service_only_logs(self, service, caplog):
        service.username = ""
        with caplog.at_level("INFO"):
            assert service.send(["a@example.com"], "Hi", "Body") is True
        assert "would send 'Hi'" in caplog.text

    def test_configured_service_sends_over_smtp(self, configured):
        server = MagicMock()
        with patch.object(EmailService, "_connect") as connect:
            connect.return_value.__enter__.return_value = server
            assert configured.send(["a@example.com"], "Hi", "Body", "<p>Body</p>") is True

        message = server.send_message.call_args[0][0]
        assert message["To"] == "a@example.com"
        assert message["Subject"] == "Hi"
        assert message.is_multipart()

    def test_smtp_failure_returns_false(self, configured):
        with patch.object(EmailService, "_connect", side_effect=smtplib.SMTPConnectError(421, "busy")):
            assert configured.send(["a@example.com"], "Hi", "Body") is False


class TestEmailTasks:
    """Tasks run eagerly in tests"""

    def test_verification_task(self):
        result = send_verification_email_task.delay("a@example.com", "Maria", "tok-1", "Sunrise Grocers")
        assert result.get() == {"status": "success", "email": "a@example.com"}

    def test_password_reset_task(self):
        result = send_password_reset_email_task.delay("a@example.com", "Maria", "tok-2")
        assert result.get()["status"] == "success"
