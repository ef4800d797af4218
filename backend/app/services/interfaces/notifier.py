"""
Booking notification interface.
Lets the booking service request confirmations without knowing the channel.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict


@dataclass(frozen=True)
class BookingSummary:
    booking_id: int
    space_id: int
    space_name: str
    client_name: str
    client_email: str
    booking_kind: str
    starts_at: datetime
    ends_at: datetime
    total_price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["starts_at"] = self.starts_at.isoformat()
        data["ends_at"] = self.ends_at.isoformat()
        data["total_price"] = str(self.total_price)
        return data


class BookingNotifier(ABC):
    """
    Implementations:
    - LogNotifier: writes the summary to the structured log
    - WebhookNotifier: POSTs the summary to an external mail relay
    """

    @abstractmethod
    async def send_booking_confirmation(self, summary: BookingSummary) -> None:
        """
        Deliver a booking confirmation.

        May raise; the booking service treats delivery as best-effort
        and never lets a failure here reach the caller.
        """
        pass
