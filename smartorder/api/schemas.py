"""Response models shared by API routers."""
from typing import Dict, List, Optional
from pydantic import BaseModel

from smartorder.db.models import Order
from smartorder.services.catalog.base import Product
from smartorder.services.ordering.models import CartLine


class ProductResponse(BaseModel):
    """Catalog product response model."""
    id: str
    name: str
    price: float
    category: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None
    display_order: int = 0


class CartLineResponse(BaseModel):
    """Cart line response model."""
    product_id: str
    name: str
    quantity: int
    unit_price: float
    special_requests: Optional[str] = None
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None


class CartResponse(BaseModel):
    """Cart contents with total."""
    items: List[CartLineResponse]
    total_amount: float


class OrderResponse(BaseModel):
    """Order response model."""
    id: int
    status: str
    payment_method: Optional[str] = None
    payment_intent_id: Optional[str] = None
    total_amount: float
    raw_text: Optional[str] = None
    created_at: str
    items: List[CartLineResponse] = []


class ParseOrderResponse(BaseModel):
    """Interpreted order response model."""
    outcome: str
    message: str
    items: List[CartLineResponse]
    unmatched_items: List[str] = []
    clarifications: Dict[str, List[str]] = {}
    total_amount: float


def product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=float(product.price),
        category=product.category,
        description=product.description,
        image_url=product.image_url,
        ai_hint=product.ai_hint,
        display_order=product.display_order,
    )


def cart_line_response(line: CartLine) -> CartLineResponse:
    return CartLineResponse(
        product_id=line.product_id,
        name=line.name,
        quantity=line.quantity,
        unit_price=float(line.unit_price),
        special_requests=line.special_requests,
        image_url=line.image_url,
        ai_hint=line.ai_hint,
    )


def order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        status=order.status,
        payment_method=order.payment_method,
        payment_intent_id=order.payment_intent_id,
        total_amount=float(order.total_amount),
        raw_text=order.raw_text,
        created_at=order.created_at.isoformat() if order.created_at else "",
        items=[
            CartLineResponse(
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                unit_price=float(item.unit_price),
                special_requests=item.special_requests,
                image_url=item.image_url,
                ai_hint=item.ai_hint,
            )
            for item in order.items
        ],
    )
