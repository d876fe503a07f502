"""Order models."""
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ParsedOrderItem(BaseModel):
    """Order line as understood by the order interpreter."""

    item_name: str
    quantity: int = Field(default=1, ge=1)
    special_requests: Optional[str] = None
    is_ambiguous: bool = False
    alternatives: List[str] = []


class CartLine(BaseModel):
    """Priced line in the active order."""

    product_id: str
    name: str
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    special_requests: Optional[str] = None
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class ResolutionOutcome(str, Enum):
    """How much of an interpreted order could be placed in the cart."""

    PROCESSED = "processed"
    PARTIAL = "partial"
    NOTHING_MATCHED = "nothing_matched"
    NOTHING_UNDERSTOOD = "nothing_understood"


class CartResolution(BaseModel):
    """Result of matching interpreted items against the catalog."""

    lines: List[CartLine] = []
    unmatched_names: List[str] = []
    clarifications: Dict[str, List[str]] = {}
    total_amount: Decimal = Decimal("0")

    @property
    def outcome(self) -> ResolutionOutcome:
        if not self.lines and not self.unmatched_names:
            return ResolutionOutcome.NOTHING_UNDERSTOOD
        if not self.lines:
            return ResolutionOutcome.NOTHING_MATCHED
        if self.unmatched_names:
            return ResolutionOutcome.PARTIAL
        return ResolutionOutcome.PROCESSED


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    CANCELLED = "cancelled"
