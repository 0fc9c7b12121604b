# tests/test_notification_service.py
"""Unit tests for receipt text and the receipt hand-off senders."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch, MagicMock
from urllib.parse import unquote
import requests
from smartwash.config import Settings
from smartwash.exceptions import NotificationError
from smartwash.schemas.service import Service
from smartwash.schemas.transaction import PaymentMethod, Transaction
from smartwash.services.notification_service import (
    WebhookNotificationSender, WhatsAppLinkSender, build_sender, phone_digits,
)
from smartwash.services.receipt_service import format_currency, format_receipt_text


def make_txn(method=PaymentMethod.CASH, reference=None):
    txn = Transaction.build(
        license_plate="ABC123",
        services=[Service(id="svc-1", name="Exterior Wash", price="50"),
                  Service(id="svc-3", name="Tire Shine", price="15")],
        method=method,
        reference=reference,
        attendant_id="user-2",
        attendant_name="John Doe",
    )
    return txn.model_copy(update={"timestamp": datetime(2024, 5, 17, 14, 30)})


class TestReceiptText:
    def test_currency_format(self):
        assert format_currency(Decimal("65"), "K") == "K65.00"
        assert format_currency(Decimal("1250.5"), "K") == "K1,250.50"

    def test_receipt_lines(self):
        text = format_receipt_text(make_txn(), business_name="Spillway Car Wash", currency="K")
        lines = text.split("\n")
        assert lines[0] == "*Spillway Car Wash Receipt*"
        assert "Date: 2024-05-17 14:30 UTC" in lines
        assert "Plate: ABC123" in lines
        assert "- Exterior Wash: K50.00" in lines
        assert "- Tire Shine: K15.00" in lines
        assert "*Total: K65.00*" in lines
        assert "Paid via: Cash" in lines
        assert not any(line.startswith("Reference:") for line in lines)

    def test_mobile_money_reference_shown(self):
        txn = make_txn(PaymentMethod.MOBILE_MONEY, "MM-12345")
        text = format_receipt_text(txn, business_name="Spillway Car Wash", currency="K")
        assert "Paid via: Mobile Money" in text
        assert "Reference: MM-12345" in text


class TestWhatsAppLinkSender:
    def test_phone_digits(self):
        assert phone_digits("+260 97-712 3456") == "260977123456"

    def test_link_carries_digits_and_text(self):
        link = WhatsAppLinkSender("https://wa.me").send("+260 977 123456", "Total: K65.00")
        assert link.startswith("https://wa.me/260977123456?text=")
        assert unquote(link.split("text=", 1)[1]) == "Total: K65.00"

    def test_unusable_number_raises(self):
        with pytest.raises(NotificationError):
            WhatsAppLinkSender("https://wa.me").send("n/a", "hello")


class TestWebhookSender:
    @patch("smartwash.services.notification_service.requests.post")
    def test_posts_destination_and_text(self, mock_post):
        mock_post.return_value = MagicMock(status_code=202)
        sender = WebhookNotificationSender("http://gateway.local/send", timeout=3)

        assert sender.send("260977123456", "receipt") is None
        mock_post.assert_called_once_with("http://gateway.local/send",
                                          json={"to": "260977123456", "text": "receipt"}, timeout=3)

    @patch("smartwash.services.notification_service.requests.post")
    def test_gateway_error_status_raises(self, mock_post):
        mock_post.return_value = MagicMock(status_code=503)
        with pytest.raises(NotificationError):
            WebhookNotificationSender("http://gateway.local/send", timeout=3).send("2609", "receipt")

    @patch("smartwash.services.notification_service.requests.post")
    def test_unreachable_gateway_raises(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NotificationError):
            WebhookNotificationSender("http://gateway.local/send", timeout=3).send("2609", "receipt")


class TestBuildSender:
    def test_whatsapp_backend(self):
        assert isinstance(build_sender(Settings(NOTIFY_BACKEND="whatsapp")), WhatsAppLinkSender)

    def test_webhook_backend(self):
        config = Settings(NOTIFY_BACKEND="webhook", NOTIFY_WEBHOOK_URL="http://gateway.local/send")
        assert isinstance(build_sender(config), WebhookNotificationSender)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_sender(Settings(NOTIFY_BACKEND="carrier-pigeon"))
