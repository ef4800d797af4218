"""
Notifier factory.
Configures which notification channel the booking service uses.
"""

from typing import Optional

from app.services.interfaces.notifier import BookingNotifier
from app.services.interfaces.log_notifier import LogNotifier
from app.services.webhook_notifier import WebhookNotifier
from app.core.config import get_settings


def build_notifier() -> BookingNotifier:
    """
    Select the notifier from settings.NOTIFIER:
    - "log" (default): LogNotifier
    - "webhook": WebhookNotifier posting to NOTIFICATION_WEBHOOK_URL
    """
    settings = get_settings()

    if settings.NOTIFIER == "webhook" and settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotifier(
            settings.NOTIFICATION_WEBHOOK_URL,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    return LogNotifier()


_notifier: Optional[BookingNotifier] = None


def get_notifier() -> BookingNotifier:
    """Notifier singleton; also used as a FastAPI dependency."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier
