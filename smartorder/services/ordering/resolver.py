"""Cart resolution: interpreted order items to priced cart lines."""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from smartorder.services.catalog.base import CatalogStore, Product
from smartorder.services.ordering.models import CartLine, CartResolution, ParsedOrderItem

logger = logging.getLogger(__name__)


def match_product(products: Sequence[Product], item_name: str) -> Optional[Product]:
    """Find the product whose name equals `item_name`, ignoring case.

    Matching is exact apart from case and surrounding whitespace. The first
    product in catalog order wins.
    """
    wanted = item_name.lower().strip()
    for product in products:
        if product.name.lower().strip() == wanted:
            return product
    return None


def resolve_cart(
    products: Sequence[Product], items: Sequence[ParsedOrderItem]
) -> CartResolution:
    """Price interpreted items against the catalog.

    Lines keep the input order. Unmatched names are reported, never raised,
    and do not contribute to the total.
    """
    lines: List[CartLine] = []
    unmatched: List[str] = []
    clarifications = {}
    total = Decimal("0")

    for item in items:
        product = match_product(products, item.item_name)
        if product is None:
            unmatched.append(item.item_name)
            if item.is_ambiguous and item.alternatives:
                clarifications[item.item_name] = list(item.alternatives)
            continue

        line = CartLine(
            product_id=product.id,
            name=product.name,
            quantity=item.quantity,
            unit_price=product.price,
            special_requests=item.special_requests,
            image_url=product.image_url,
            ai_hint=product.ai_hint,
        )
        lines.append(line)
        total += line.line_total

    return CartResolution(
        lines=lines,
        unmatched_names=unmatched,
        clarifications=clarifications,
        total_amount=total,
    )


class CartResolver:
    """Resolves interpreted orders against a catalog store."""

    def __init__(self, store: CatalogStore):
        self.store = store

    async def resolve(self, items: Sequence[ParsedOrderItem]) -> CartResolution:
        products = await self.store.list_products()
        resolution = resolve_cart(products, items)
        logger.info(
            f"[ORDERS] Resolved {len(items)} items - matched: {len(resolution.lines)}, "
            f"unmatched: {resolution.unmatched_names}, total: {resolution.total_amount}"
        )
        return resolution
