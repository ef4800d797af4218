"""
Mobile money payment endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import Actor, get_current_actor
from app.db.session import get_db
from app.infrastructure.mobile_money import (
    GatewayFactory, format_phone_number, get_gateway_factory, is_valid_phone_number,
)
from app.schemas.payment import (
    MobileMoneyPaymentCreate, PaymentInitiatedResponse, PaymentMethod,
    PaymentStatusResponse, PhoneValidationRequest, PhoneValidationResponse,
)
from app.services.payment_service import (
    available_payment_methods, initiate_mobile_money_payment, reconcile_payment_status,
)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/mobile-money", response_model=PaymentInitiatedResponse)
async def pay_with_mobile_money(
    payment_data: MobileMoneyPaymentCreate,
    actor: Actor = Depends(get_current_actor),
    gateway_factory: GatewayFactory = Depends(get_gateway_factory),
    db: AsyncSession = Depends(get_db),
):
    """
    Ask the provider to collect the booking's total from the payer's phone.
    The payer approves on the handset; poll /payments/status/{booking_id}.
    """
    booking, result = await initiate_mobile_money_payment(db, payment_data, actor.id, gateway_factory)
    return PaymentInitiatedResponse(
        booking_id=booking.id,
        transaction_id=result.transaction_id,
        status=result.status,
        provider=booking.payment_provider,
        reference=booking.payment_reference,
        message=result.message or "Payment request sent. Approve it on your phone.",
    )


@router.get("/status/{booking_id}", response_model=PaymentStatusResponse)
async def payment_status(
    booking_id: int,
    actor: Actor = Depends(get_current_actor),
    gateway_factory: GatewayFactory = Depends(get_gateway_factory),
    db: AsyncSession = Depends(get_db),
):
    booking = await reconcile_payment_status(db, booking_id, actor.id, gateway_factory)
    return PaymentStatusResponse(
        booking_id=booking.id,
        payment_status=booking.payment_status,
        booking_status=booking.status,
        transaction_id=booking.payment_transaction_id,
        provider=booking.payment_provider,
    )


@router.get("/methods", response_model=list[PaymentMethod])
async def payment_methods():
    return available_payment_methods()


@router.post("/validate-phone", response_model=PhoneValidationResponse)
async def validate_phone(request: PhoneValidationRequest):
    formatted = format_phone_number(request.phone_number)
    return PhoneValidationResponse(
        original=request.phone_number,
        formatted=formatted,
        is_valid=is_valid_phone_number(formatted),
    )
