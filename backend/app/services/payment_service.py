"""
Mobile money payment flow and reconciliation with the booking lifecycle.

initiate_mobile_money_payment:
  The booking's client asks a provider to collect exactly the booking's
  total price. Acceptance records the reference/transaction id and leaves
  payment_status=pending; a provider failure records payment_status=failed.

reconcile_payment_status:
  Polls the provider. SUCCESSFUL goes through the state machine's
  payment entry (payment_status=completed, pending -> confirmed). If the
  booking was closed meanwhile, the payment is still recorded as
  completed but the status is not touched. FAILED records
  payment_status=failed. Any other provider state leaves the booking as is.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import (
    InvalidTransitionError, PaymentError, UnauthorizedError, ValidationError,
)
from app.core.logging import get_logger
from app.core.metrics import (
    record_payment_reconciliation, record_payment_request, record_transition,
)
from app.domain.enums import BookingStatus, PaymentStatus
from app.domain.state_machine import PAYABLE_STATUSES, confirm_payment, record_payment
from app.infrastructure.mobile_money import (
    GatewayFactory, MobileMoneyProvider, PaymentRequest, ProviderResult, ProviderStatus,
    format_phone_number, is_valid_phone_number,
)
from app.models.booking import Booking
from app.schemas.payment import MobileMoneyPaymentCreate, PaymentMethod
from app.services.booking_service import commit_booking, load_booking, space_owner_id

logger = get_logger(__name__)


def payment_reference(booking_id: int) -> str:
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"BOOKING_{booking_id}_{millis}"


def available_payment_methods() -> list[PaymentMethod]:
    methods = [
        PaymentMethod(
            id="cash",
            name="Cash Payment",
            description="Pay in cash at the venue",
            type="offline",
        )
    ]
    if get_settings().MOBILE_MONEY_ENABLED:
        methods.extend([
            PaymentMethod(
                id="mobile_money_mtn",
                name="MTN Mobile Money",
                description="Pay using MTN Mobile Money",
                type="mobile_money",
                provider=MobileMoneyProvider.MTN.value,
            ),
            PaymentMethod(
                id="mobile_money_airtel",
                name="Airtel Money",
                description="Pay using Airtel Money",
                type="mobile_money",
                provider=MobileMoneyProvider.AIRTEL.value,
            ),
        ])
    return methods


def _check_payable(booking: Booking, payment_data: MobileMoneyPaymentCreate) -> None:
    if BookingStatus(booking.status) not in PAYABLE_STATUSES:
        raise ValidationError(
            f"Booking {booking.id} is {booking.status} and cannot be paid",
            details={"booking_id": booking.id},
        )
    if booking.payment_status == PaymentStatus.COMPLETED.value:
        raise ValidationError(
            f"Booking {booking.id} is already paid",
            details={"booking_id": booking.id},
        )
    if Decimal(payment_data.amount) != Decimal(booking.total_price):
        raise ValidationError(
            "Payment amount does not match booking total",
            details={"booking_id": booking.id, "expected": str(booking.total_price)},
        )


async def initiate_mobile_money_payment(
    db: AsyncSession,
    payment_data: MobileMoneyPaymentCreate,
    actor_id: int,
    gateway_factory: GatewayFactory,
) -> Tuple[Booking, ProviderResult]:
    settings = get_settings()
    if not settings.MOBILE_MONEY_ENABLED:
        raise PaymentError("Mobile money payments are currently disabled")

    booking = await load_booking(db, payment_data.booking_id)
    if booking.user_id != actor_id:
        raise UnauthorizedError("Not authorized to pay for this booking", details={"booking_id": booking.id})
    _check_payable(booking, payment_data)

    phone_number = format_phone_number(payment_data.phone_number)
    if not is_valid_phone_number(phone_number):
        raise ValidationError("Invalid phone number format. Use format: 256XXXXXXXXX or 0XXXXXXXXX")

    provider = MobileMoneyProvider(payment_data.provider)
    reference = payment_reference(booking.id)
    result = await gateway_factory(provider).request_payment(
        PaymentRequest(
            phone_number=phone_number,
            amount=Decimal(booking.total_price),
            currency=payment_data.currency or settings.PAYMENT_CURRENCY,
            reference=reference,
            description=f"Payment for booking {booking.id}",
        )
    )
    record_payment_request(provider.value, result.success)

    booking_id = booking.id
    booking.payment_provider = provider.value
    booking.payment_reference = reference
    if result.success:
        booking.payment_transaction_id = result.transaction_id
        record_payment(booking, PaymentStatus.PENDING)
        await commit_booking(db, booking)
        logger.info(
            "mobile_money_payment_initiated",
            booking_id=booking_id,
            provider=provider.value,
            transaction_id=result.transaction_id,
        )
        return booking, result

    record_payment(booking, PaymentStatus.FAILED)
    await commit_booking(db, booking)
    logger.error("mobile_money_payment_failed", booking_id=booking_id, provider=provider.value, error=result.error)
    raise PaymentError(
        "Payment processing failed",
        details={"booking_id": booking_id, "provider_error": result.error},
    )


async def reconcile_payment_status(
    db: AsyncSession,
    booking_id: int,
    actor_id: int,
    gateway_factory: GatewayFactory,
) -> Booking:
    booking = await load_booking(db, booking_id)
    if actor_id not in (booking.user_id, await space_owner_id(db, booking)):
        raise UnauthorizedError("Not authorized to view this payment", details={"booking_id": booking_id})
    if not booking.payment_transaction_id or not booking.payment_provider:
        raise ValidationError(
            "No mobile money payment found for this booking",
            details={"booking_id": booking_id},
        )

    provider = MobileMoneyProvider(booking.payment_provider)
    result = await gateway_factory(provider).get_status(booking.payment_transaction_id)
    if not result.success:
        raise PaymentError(
            "Failed to check payment status",
            details={"booking_id": booking_id, "provider_error": result.error},
        )
    record_payment_reconciliation(provider.value, result.status)

    if result.status == ProviderStatus.SUCCESSFUL.value:
        try:
            confirm_payment(booking)
            record_transition("payment", booking.status)
        except InvalidTransitionError:
            record_payment(booking, PaymentStatus.COMPLETED)
            logger.warning(
                "payment_completed_for_closed_booking",
                booking_id=booking_id,
                booking_status=booking.status,
            )
    elif result.status == ProviderStatus.FAILED.value:
        record_payment(booking, PaymentStatus.FAILED)
    else:
        return booking

    await commit_booking(db, booking)
    logger.info(
        "payment_reconciled",
        booking_id=booking_id,
        provider=provider.value,
        provider_status=result.status,
        payment_status=booking.payment_status,
        booking_status=booking.status,
    )
    return booking
