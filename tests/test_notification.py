"""邮件通知与 Celery 任务测试"""
import smtplib
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from storefront.services.notification_service import (
    EmailDispatcher,
    EmailSender,
    format_date,
    notify_safely,
    render_order_confirmation,
    render_status_update,
)
from tasks.notification_tasks import send_email


class TestTemplates:

    def test_format_date(self):
        assert format_date(datetime(2025, 3, 5, 14, 30)) == "March 5, 2025"

    def test_order_confirmation(self):
        html = render_order_confirmation(
            order_id=123,
            order_time=datetime(2025, 3, 5, 14, 30),
            lines=[{
                "name": "ThinkPad <X1>",
                "quantity": 2,
                "unit_price": Decimal("100.00"),
                "subtotal": Decimal("200.00"),
            }],
            subtotal=Decimal("200.00"),
            tax=Decimal("26.00"),
            total=Decimal("226.00"),
            delivery_days=5,
        )

        assert "Order number: <strong>123</strong>" in html
        assert "March 5, 2025" in html
        assert "Estimated delivery: <strong>March 10, 2025</strong>" in html
        assert "ThinkPad &lt;X1&gt;" in html
        assert "$26.00" in html
        assert "$226.00" in html

    def test_status_update(self):
        html = render_status_update(123, "shipped", "On its way")

        assert "Shipped" in html
        assert "On its way" in html
        assert "<p></p>" not in render_status_update(123, "shipped")


class TestNotifySafely:

    def test_sends_from_configured_sender(self):
        notifier = Mock()
        notifier.send.return_value = {"id": "1", "status": "queued"}

        assert notify_safely(notifier, "x@y.com", "Order Receipt", "<p/>") == {"id": "1", "status": "queued"}
        sender, to, subject, html = notifier.send.call_args.args
        assert sender == "Laptop Store <shop@example.com>"
        assert (to, subject, html) == ("x@y.com", "Order Receipt", "<p/>")

    def test_skips_without_recipient(self):
        notifier = Mock()

        assert notify_safely(notifier, None, "Order Receipt", "<p/>") is None
        notifier.send.assert_not_called()

    def test_failure_is_reported_not_raised(self):
        notifier = Mock()
        notifier.send.side_effect = RuntimeError("broker unreachable")

        assert notify_safely(notifier, "x@y.com", "Order Receipt", "<p/>") == {"error": "broker unreachable"}


class TestEmailSender:

    @patch("storefront.services.notification_service.smtplib.SMTP")
    def test_send_with_login(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        sender = EmailSender(host="smtp.test", port=587, user="shop", password="secret", starttls=True)

        result = sender.send("shop@example.com", "x@y.com", "Hello", "<p>Hi</p>")

        assert result == {"status": "sent", "to": "x@y.com"}
        mock_smtp.assert_called_once_with("smtp.test", 587, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("shop", "secret")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "x@y.com"
        assert message["Subject"] == "Hello"

    @patch("storefront.services.notification_service.smtplib.SMTP")
    def test_send_without_credentials(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value

        EmailSender(host="localhost", port=25, user="", password="", starttls=False).send(
            "shop@example.com", "x@y.com", "Hello", "<p>Hi</p>"
        )

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()


class TestEmailDispatcher:

    @patch("tasks.notification_tasks.send_email")
    def test_queues_task(self, mock_task):
        mock_task.delay.return_value = Mock(id="task-1")

        result = EmailDispatcher().send("shop@example.com", "x@y.com", "Hello", "<p>Hi</p>")

        assert result == {"id": "task-1", "status": "queued"}
        mock_task.delay.assert_called_once_with("shop@example.com", "x@y.com", "Hello", "<p>Hi</p>")


class TestSendEmailTask:

    def test_task_is_routed_to_notification_queue(self):
        from celery_app import app

        assert send_email.name == "tasks.notification.send_email"
        assert app.conf.task_routes["tasks.notification.*"] == {"queue": "notification"}

    @patch("tasks.notification_tasks.EmailSender")
    def test_task_sends_email(self, mock_sender):
        mock_sender.return_value.send.return_value = {"status": "sent", "to": "x@y.com"}

        result = send_email.run("shop@example.com", "x@y.com", "Hello", "<p>Hi</p>")

        assert result == {"status": "sent", "to": "x@y.com"}
        mock_sender.return_value.send.assert_called_once_with(
            "shop@example.com", "x@y.com", "Hello", "<p>Hi</p>"
        )

    @patch("tasks.notification_tasks.EmailSender")
    def test_task_retries_on_smtp_error(self, mock_sender):
        error = smtplib.SMTPServerDisconnected("gone")
        mock_sender.return_value.send.side_effect = error

        with patch.object(send_email, "retry", side_effect=RuntimeError("retry")) as mock_retry:
            with pytest.raises(RuntimeError, match="retry"):
                send_email.run("shop@example.com", "x@y.com", "Hello", "<p>Hi</p>")

        mock_retry.assert_called_once_with(exc=error)
