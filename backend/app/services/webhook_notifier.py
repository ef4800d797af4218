"""
Webhook notifier: hands booking confirmations to an external mail relay.

Delivery is a single POST of the summary JSON. No retries here; the
booking service logs and drops failures.
"""

from typing import Optional

import httpx

from app.core.logging import get_logger
from app.services.interfaces.notifier import BookingNotifier, BookingSummary

logger = get_logger(__name__)


class WebhookNotifier(BookingNotifier):

    def __init__(self, url: str, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def send_booking_confirmation(self, summary: BookingSummary) -> None:
        payload = {"type": "booking_confirmation", "booking": summary.to_dict()}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()

        logger.info(
            "booking_confirmation_sent",
            booking_id=summary.booking_id,
            status_code=response.status_code,
        )
