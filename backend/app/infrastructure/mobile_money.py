"""
Mobile money gateways (MTN MoMo, Airtel Money).

Thin httpx clients for the collection APIs. They never raise for provider
or transport failures: every call returns a ProviderResult whose
`success` flag tells the payment service what happened.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional

import httpx

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_PHONE_NOISE = re.compile(r"[\s\-()]")
_PHONE_MASK = re.compile(r"(\d{3})\d{3}(\d{3})")
_INTERNATIONAL = re.compile(r"^256\d{9}$")
_LOCAL = re.compile(r"^0\d{9}$")


class MobileMoneyProvider(str, Enum):
    MTN = "MTN"
    AIRTEL = "AIRTEL"


class ProviderStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"


def is_valid_phone_number(phone_number: str) -> bool:
    cleaned = _PHONE_NOISE.sub("", phone_number)
    if cleaned.startswith("256"):
        return bool(_INTERNATIONAL.match(cleaned))
    if cleaned.startswith("0"):
        return bool(_LOCAL.match(cleaned))
    return False


def format_phone_number(phone_number: str) -> str:
    """Normalise to the 256XXXXXXXXX international form."""
    cleaned = _PHONE_NOISE.sub("", phone_number)
    if cleaned.startswith("256"):
        return cleaned
    if cleaned.startswith("0"):
        return "256" + cleaned[1:]
    return "256" + cleaned


def mask_phone_number(phone_number: str) -> str:
    return _PHONE_MASK.sub(r"\1***\2", phone_number)


@dataclass(frozen=True)
class PaymentRequest:
    phone_number: str
    amount: Decimal
    currency: str
    reference: str
    description: str


@dataclass
class ProviderResult:
    success: bool
    provider: MobileMoneyProvider
    status: str
    transaction_id: Optional[str] = None
    message: str = ""
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


class MobileMoneyGateway(ABC):
    """Base class for collection APIs."""

    provider: ClassVar[MobileMoneyProvider]
    request_path: ClassVar[str]
    status_path: ClassVar[str]

    def __init__(
        self,
        base_url: str,
        api_key: str,
        environment: str = "sandbox",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.environment = environment
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    @abstractmethod
    def _headers(self, currency: Optional[str] = None) -> Dict[str, str]:
        pass

    def _payload(self, request: PaymentRequest) -> Dict[str, Any]:
        return {
            "amount": str(request.amount),
            "currency": request.currency,
            "externalId": request.reference,
            "payer": {"partyIdType": "MSISDN", "partyId": request.phone_number},
            "payerMessage": request.description or "Space booking payment",
            "payeeNote": f"Payment for booking {request.reference}",
        }

    @staticmethod
    def _json_body(response: httpx.Response) -> Dict[str, Any]:
        """Decoded JSON object, or {} for an empty, non-JSON or non-object body."""
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @classmethod
    def _provider_error(cls, exc: httpx.HTTPError) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            return cls._json_body(exc.response).get("message") or str(exc)
        return str(exc)

    async def request_payment(self, request: PaymentRequest) -> ProviderResult:
        logger.info(
            "mobile_money_request",
            provider=self.provider.value,
            phone_number=mask_phone_number(request.phone_number),
            amount=str(request.amount),
            currency=request.currency,
            reference=request.reference,
        )
        try:
            async with self._client() as client:
                response = await client.post(
                    self.request_path,
                    json=self._payload(request),
                    headers={**self._headers(request.currency), "X-Reference-Id": request.reference},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            error = self._provider_error(e)
            logger.error(
                "mobile_money_request_failed",
                provider=self.provider.value,
                reference=request.reference,
                phone_number=mask_phone_number(request.phone_number),
                error=error,
            )
            return ProviderResult(
                success=False,
                provider=self.provider,
                status=ProviderStatus.FAILED.value,
                error=error,
            )

        data = self._json_body(response)
        logger.info(
            "mobile_money_request_accepted",
            provider=self.provider.value,
            reference=request.reference,
            status_code=response.status_code,
        )
        return ProviderResult(
            success=True,
            provider=self.provider,
            status=ProviderStatus.PENDING.value,
            transaction_id=data.get("transactionId") or request.reference,
            message=f"Payment request sent to {self.display_name}",
            data=data,
        )

    async def get_status(self, transaction_id: str) -> ProviderResult:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.status_path}/{transaction_id}",
                    headers=self._headers(),
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            error = self._provider_error(e)
            logger.error(
                "mobile_money_status_failed",
                provider=self.provider.value,
                transaction_id=transaction_id,
                error=error,
            )
            return ProviderResult(
                success=False,
                provider=self.provider,
                status=ProviderStatus.FAILED.value,
                transaction_id=transaction_id,
                error=error,
            )

        data = self._json_body(response)
        return ProviderResult(
            success=True,
            provider=self.provider,
            status=str(data.get("status", ProviderStatus.PENDING.value)).upper(),
            transaction_id=transaction_id,
            data=data,
        )

    @property
    def display_name(self) -> str:
        return self.provider.value


class MTNGateway(MobileMoneyGateway):
    provider = MobileMoneyProvider.MTN
    request_path = "/collection/v1_0/requesttopay"
    status_path = "/collection/v1_0/requesttopay"

    def _headers(self, currency: Optional[str] = None) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Target-Environment": self.environment,
        }

    @property
    def display_name(self) -> str:
        return "MTN Mobile Money"


class AirtelGateway(MobileMoneyGateway):
    provider = MobileMoneyProvider.AIRTEL
    request_path = "/merchant/v1/payments/"
    status_path = "/merchant/v1/payments"

    def _headers(self, currency: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Country": "UG",
        }
        if currency:
            headers["X-Currency"] = currency
        return headers

    @property
    def display_name(self) -> str:
        return "Airtel Money"


GatewayFactory = Callable[[MobileMoneyProvider], MobileMoneyGateway]


def build_gateway(provider: MobileMoneyProvider) -> MobileMoneyGateway:
    settings = get_settings()
    provider = MobileMoneyProvider(provider)
    if provider == MobileMoneyProvider.MTN:
        return MTNGateway(
            settings.MTN_API_URL,
            settings.MTN_API_KEY,
            environment=settings.MOBILE_MONEY_ENVIRONMENT,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        )
    return AirtelGateway(
        settings.AIRTEL_API_URL,
        settings.AIRTEL_API_KEY,
        environment=settings.MOBILE_MONEY_ENVIRONMENT,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )


def get_gateway_factory() -> GatewayFactory:
    """FastAPI dependency; tests override it with a mock-transport factory."""
    return build_gateway
