# smartwash/services/notification_service.py
"""
Receipt hand-off to the customer.

Every sender implements send(destination, text). Delivery is never confirmed
back to the workflow; a sender raises NotificationError only when the
hand-off itself could not be made.
  - WhatsAppLinkSender: builds a wa.me deep link for the client to open
  - WebhookNotificationSender: POSTs {to, text} to a messaging gateway
"""

import re
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import requests

from smartwash.config import Settings, settings
from smartwash.exceptions import NotificationError
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D")


def phone_digits(phone_number: str) -> str:
    return _NON_DIGITS.sub("", phone_number or "")


class NotificationSender(ABC):

    @abstractmethod
    def send(self, destination: str, text: str) -> Optional[str]:
        """
        Hand text off towards destination.
        Returns a link the client must open to finish the hand-off, or None.
        """


class WhatsAppLinkSender(NotificationSender):

    def __init__(self, base_url: str = None):
        self._base_url = (base_url or settings.WHATSAPP_BASE_URL).rstrip("/")

    def send(self, destination: str, text: str) -> Optional[str]:
        digits = phone_digits(destination)
        if not digits:
            raise NotificationError(f"Not a usable phone number: {destination!r}")
        link = f"{self._base_url}/{digits}?text={quote(text, safe='')}"
        logger.info(f"[NOTIFY] WhatsApp hand-off prepared for {digits}")
        return link


class WebhookNotificationSender(NotificationSender):

    def __init__(self, url: str = None, timeout: float = None):
        self._url = url or settings.NOTIFY_WEBHOOK_URL
        self._timeout = timeout or settings.NOTIFY_TIMEOUT_SECONDS
        if not self._url:
            raise NotificationError("NOTIFY_WEBHOOK_URL is not set")

    def send(self, destination: str, text: str) -> Optional[str]:
        try:
            resp = requests.post(self._url, json={"to": destination, "text": text}, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"[NOTIFY] Gateway unreachable: {e}")
            raise NotificationError(f"Messaging gateway unreachable: {e}") from e
        if resp.status_code >= 300:
            logger.warning(f"[NOTIFY] Gateway returned HTTP {resp.status_code}")
            raise NotificationError(f"Messaging gateway returned HTTP {resp.status_code}")
        logger.info(f"[NOTIFY] Receipt handed to gateway for {destination}")
        return None


def build_sender(config: Settings = settings) -> NotificationSender:
    backend = config.NOTIFY_BACKEND.lower()
    if backend == "webhook":
        return WebhookNotificationSender(config.NOTIFY_WEBHOOK_URL, config.NOTIFY_TIMEOUT_SECONDS)
    if backend == "whatsapp":
        return WhatsAppLinkSender(config.WHATSAPP_BASE_URL)
    raise ValueError(f"Unknown NOTIFY_BACKEND: {backend}")
