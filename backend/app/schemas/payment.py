"""
Pydantic schemas for mobile money payments.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

SUPPORTED_PROVIDERS = ("MTN", "AIRTEL")


class MobileMoneyPaymentCreate(BaseModel):
    booking_id: int
    provider: str
    phone_number: str = Field(..., min_length=9, max_length=20)
    amount: Decimal = Field(..., gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("provider")
    @classmethod
    def normalise_provider(cls, value: str) -> str:
        provider = value.strip().upper()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError("Unsupported mobile money provider")
        return provider


class PaymentInitiatedResponse(BaseModel):
    booking_id: int
    transaction_id: Optional[str]
    status: str
    provider: str
    reference: str
    message: str


class PaymentStatusResponse(BaseModel):
    booking_id: int
    payment_status: str
    booking_status: str
    transaction_id: Optional[str]
    provider: Optional[str]


class PaymentMethod(BaseModel):
    id: str
    name: str
    description: str
    enabled: bool = True
    type: str
    provider: Optional[str] = None


class PhoneValidationRequest(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=32)


class PhoneValidationResponse(BaseModel):
    original: str
    formatted: str
    is_valid: bool
