"""Manual cart editing."""
from decimal import Decimal
from typing import List, Sequence

from smartorder.services.catalog.base import Product
from smartorder.services.ordering.models import CartLine


def cart_total(lines: Sequence[CartLine]) -> Decimal:
    """Sum of quantity times unit price over all lines."""
    return sum((line.line_total for line in lines), Decimal("0"))


def add_product(lines: Sequence[CartLine], product: Product, quantity: int = 1) -> List[CartLine]:
    """Add a product picked from the menu.

    An existing line for the same product without special requests absorbs
    the quantity; otherwise a new line is appended.
    """
    updated = list(lines)
    for index, line in enumerate(updated):
        if line.product_id == product.id and not line.special_requests:
            updated[index] = line.model_copy(update={"quantity": line.quantity + quantity})
            return updated

    updated.append(
        CartLine(
            product_id=product.id,
            name=product.name,
            quantity=quantity,
            unit_price=product.price,
            image_url=product.image_url,
            ai_hint=product.ai_hint,
        )
    )
    return updated


def update_quantity(lines: Sequence[CartLine], index: int, quantity: int) -> List[CartLine]:
    """Set the quantity of one line; zero or less removes it."""
    if index < 0 or index >= len(lines):
        raise IndexError(f"Cart has no line {index}")
    updated = list(lines)
    if quantity <= 0:
        del updated[index]
    else:
        updated[index] = updated[index].model_copy(update={"quantity": quantity})
    return updated
