from app.schemas.user import UserCreate, UserResponse, UserLogin, Token
from app.schemas.space import SpaceCreate, SpaceResponse, SpaceListResponse, PricePolicySchema
from app.schemas.booking import (
    BookingCreate, SingleBookingCreate, MultiNightBookingCreate,
    BookingStatusUpdate, BookingResponse, BookingListResponse, BookingStatsResponse,
)
from app.schemas.payment import (
    MobileMoneyPaymentCreate, PaymentInitiatedResponse, PaymentStatusResponse,
    PaymentMethod, PhoneValidationRequest, PhoneValidationResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "SpaceCreate", "SpaceResponse", "SpaceListResponse", "PricePolicySchema",
    "BookingCreate", "SingleBookingCreate", "MultiNightBookingCreate",
    "BookingStatusUpdate", "BookingResponse", "BookingListResponse", "BookingStatsResponse",
    "MobileMoneyPaymentCreate", "PaymentInitiatedResponse", "PaymentStatusResponse",
    "PaymentMethod", "PhoneValidationRequest", "PhoneValidationResponse",
]
