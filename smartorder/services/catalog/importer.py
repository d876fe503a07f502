"""Catalog import from AI-extracted products."""
import logging
import math
from decimal import Decimal
from typing import List, Optional, Sequence
from urllib.parse import quote
from pydantic import BaseModel

from smartorder.services.catalog.allocator import CategoryOrderAllocator
from smartorder.services.catalog.base import CatalogStore, Product, ProductDraft

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
UNNAMED_PRODUCT = "Unnamed Product"
DEFAULT_AI_HINT = "food item"
PLACEHOLDER_IMAGE_URL = "https://placehold.co/300x200.png"


class ExtractedProduct(BaseModel):
    """Product candidate read from a menu image."""

    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None


def default_ai_hint(name: str, category: str) -> str:
    """First one or two words of the name (or category), lowercased."""
    source = category if name == UNNAMED_PRODUCT else name
    words = source.split()[:2]
    if not words:
        return DEFAULT_AI_HINT
    return " ".join(words).lower()


def placeholder_image_url(name: str) -> str:
    """Placeholder image labelled with the product name."""
    return f"{PLACEHOLDER_IMAGE_URL}?text={quote(name)}"


def to_draft(extracted: ExtractedProduct, display_order: int, category: str) -> ProductDraft:
    """Build a catalog draft from an extracted product."""
    name = (extracted.name or "").strip() or UNNAMED_PRODUCT
    price = Decimal("0")
    # NaN, infinite and negative readings count as no price
    if extracted.price is not None and math.isfinite(extracted.price) and extracted.price > 0:
        price = Decimal(str(extracted.price))
    return ProductDraft(
        name=name,
        price=price,
        category=category,
        description=(extracted.description or "").strip(),
        image_url=placeholder_image_url(name),
        ai_hint=default_ai_hint(name, category),
        display_order=display_order,
    )


async def import_extracted_products(
    store: CatalogStore, extracted_products: Sequence[ExtractedProduct]
) -> List[Product]:
    """Append extracted products to the catalog in one batch write.

    Items are allocated sequentially so each category receives a gap-free
    run of display orders following its current maximum.
    """
    allocator = CategoryOrderAllocator(store)
    drafts = []
    for extracted in extracted_products:
        category = (extracted.category or "").strip() or UNCATEGORIZED
        display_order = await allocator.allocate(category)
        drafts.append(to_draft(extracted, display_order, category))

    if not drafts:
        return []

    created = await store.add_products(drafts)
    logger.info(f"[IMPORT] Saved {len(created)} extracted products")
    return created
