"""Tests for alert message formatting and delivery channels."""

import asyncio
import smtplib
from unittest.mock import MagicMock, patch

from pricewatch.models import TriggerType
from pricewatch.notifications.console_notifier import ConsoleNotifier
from pricewatch.notifications.email_notifier import EmailNotifier
from pricewatch.notifications.messages import build_alert_message, format_price


class TestMessages:

    def test_downward_message(self):
        message = build_alert_message(TriggerType.DOWNWARD_BREACH, 49876.5, "BTCUSDT")
        assert "SHARP DROP (BTCUSDT)" in message.subject
        assert "49,876.50 USD" in message.text_body
        assert "<b>49,876.50 USD</b>" in message.html_body

    def test_upward_message(self):
        message = build_alert_message(TriggerType.UPWARD_BREACH, 3100, "ETHUSDT")
        assert "STRONG RISE (ETHUSDT)" in message.subject

    def test_small_prices_keep_precision(self):
        assert format_price(0.00001234) == "0.00001234"
        assert format_price(1234.5) == "1,234.50"


def _notifier(**kwargs):
    return EmailNotifier(
        smtp_server="smtp.resend.com",
        smtp_port=kwargs.pop("smtp_port", 587),
        smtp_username="resend",
        smtp_password="re_key",
        from_address="noreply@uth.asia",
        from_name="Price Alert Bot",
        timeout=1.0,
        **kwargs,
    )


class TestEmailNotifier:

    @patch("pricewatch.notifications.email_notifier.smtplib.SMTP")
    def test_send_uses_starttls_and_login(self, mock_smtp):
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server

        ok = asyncio.run(_notifier().send("trader@example.com", "subject", "body", html_body="<b>body</b>"))

        assert ok is True
        mock_smtp.assert_called_once_with("smtp.resend.com", 587, timeout=1.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("resend", "re_key")
        from_addr, recipients, raw = server.sendmail.call_args[0]
        assert from_addr == "noreply@uth.asia"
        assert recipients == ["trader@example.com"]
        assert "Price Alert Bot" in raw

    @patch("pricewatch.notifications.email_notifier.smtplib.SMTP")
    def test_smtp_failure_returns_false(self, mock_smtp):
        server = MagicMock()
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad key")
        mock_smtp.return_value.__enter__.return_value = server

        assert asyncio.run(_notifier().send("trader@example.com", "s", "b")) is False

    @patch("pricewatch.notifications.email_notifier.smtplib.SMTP_SSL")
    def test_port_465_uses_implicit_tls(self, mock_smtp_ssl):
        server = MagicMock()
        mock_smtp_ssl.return_value.__enter__.return_value = server

        assert asyncio.run(_notifier(smtp_port=465).send("t@example.com", "s", "b")) is True
        server.sendmail.assert_called_once()

    def test_missing_recipient(self):
        assert asyncio.run(_notifier().send("", "s", "b")) is False


def test_console_notifier_prints(capsys):
    notifier = ConsoleNotifier()
    assert asyncio.run(notifier.send("t@example.com", "Subject line", "Body text")) is True
    out = capsys.readouterr().out
    assert "Subject line" in out
    assert notifier.sent_count == 1
