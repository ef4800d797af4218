"""
Booking status state machine.

    pending   -> confirmed | declined | cancelled
    confirmed -> cancelled | completed
    declined, cancelled, completed are terminal.

Two entry points mutate a booking:

- transition(): owner-driven. Only the owner of the booking's space may
  call it, and `pending` can never be requested.
- confirm_payment() / record_payment(): system-driven, used by payment
  reconciliation. confirm_payment() is restricted to the
  pending|confirmed -> confirmed edge and skips the owner check.

Functions mutate the booking in place and return it; persistence and
optimistic concurrency are the caller's concern.
"""

from typing import Optional, Union

from app.core.exceptions import InvalidTransitionError, UnauthorizedError, ValidationError
from app.domain.enums import BookingStatus, PaymentStatus

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.DECLINED, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.DECLINED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)
CLOSING_STATUSES = frozenset({BookingStatus.DECLINED, BookingStatus.CANCELLED})
PAYABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def parse_status(value: Union[str, BookingStatus]) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus if s != BookingStatus.PENDING)
        raise ValidationError(f"Please provide a valid status ({allowed})")


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[BookingStatus(current)]


def transition(
    booking,
    requested_status: Union[str, BookingStatus],
    actor_id: int,
    owner_id: int,
    reason: Optional[str] = None,
):
    """
    Apply an owner-requested status change.

    Authorization is checked before anything else, so a non-owner gets
    UnauthorizedError whatever status was requested.
    """
    if actor_id != owner_id:
        raise UnauthorizedError(
            "Not authorized to update this booking",
            details={"booking_id": booking.id},
        )

    target = parse_status(requested_status)
    current = BookingStatus(booking.status)

    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change booking {booking.id} from {current.value} to {target.value}",
            details={"booking_id": booking.id, "from": current.value, "to": target.value},
        )

    booking.status = target.value
    if target in CLOSING_STATUSES:
        if reason:
            booking.cancellation_reason = reason
        if booking.payment_status == PaymentStatus.PENDING.value:
            booking.payment_status = PaymentStatus.CANCELLED.value
    return booking


def confirm_payment(booking):
    """Record a successful payment and promote the booking to confirmed."""
    current = BookingStatus(booking.status)
    if current not in PAYABLE_STATUSES:
        raise InvalidTransitionError(
            f"Booking {booking.id} is {current.value} and cannot be confirmed by payment",
            details={"booking_id": booking.id, "from": current.value, "to": BookingStatus.CONFIRMED.value},
        )
    booking.payment_status = PaymentStatus.COMPLETED.value
    booking.status = BookingStatus.CONFIRMED.value
    return booking


def record_payment(booking, payment_status: Union[str, PaymentStatus]):
    """Update the payment axis only; booking status is left untouched."""
    booking.payment_status = PaymentStatus(payment_status).value
    return booking
