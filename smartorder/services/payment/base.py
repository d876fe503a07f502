"""Payment gateway interface."""
from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel


class PaymentError(Exception):
    """The processor rejected a request or could not be reached."""


class PaymentStatus(str, Enum):
    """Payment intent status as seen by checkout."""

    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    OTHER = "other"

    @classmethod
    def from_processor(cls, status: Optional[str]) -> "PaymentStatus":
        try:
            return cls(status)
        except ValueError:
            return cls.OTHER


class PaymentIntent(BaseModel):
    """Created payment intent."""

    id: str
    client_secret: str
    amount: int
    currency: str
    status: PaymentStatus = PaymentStatus.OTHER


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal amount to the smallest currency unit."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def intent_id_from_client_secret(client_secret: str) -> str:
    """Payment intent id embedded in a client secret (`pi_..._secret_...`)."""
    return client_secret.split("_secret_", 1)[0]


class PaymentGateway(ABC):
    """Abstract base class for payment processors."""

    @abstractmethod
    async def create_intent(
        self, amount: int, metadata: Optional[Dict[str, str]] = None
    ) -> PaymentIntent:
        """Create a payment intent for `amount` in the smallest currency unit."""
        pass

    @abstractmethod
    async def get_status(self, intent_id: str) -> PaymentStatus:
        """Current status of a payment intent."""
        pass
