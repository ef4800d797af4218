"""
Log-only notifier. Default in development and tests.
"""

from app.core.logging import get_logger
from app.services.interfaces.notifier import BookingNotifier, BookingSummary

logger = get_logger(__name__)


class LogNotifier(BookingNotifier):
    """Records the confirmation in the log instead of delivering it."""

    async def send_booking_confirmation(self, summary: BookingSummary) -> None:
        logger.info("booking_confirmation_logged", **summary.to_dict())
