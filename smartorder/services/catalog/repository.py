"""Catalog repository."""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from smartorder.services.catalog.allocator import next_display_order
from smartorder.services.catalog.base import CatalogStore, CategorySummary, Product, ProductDraft
from smartorder.services.catalog.importer import DEFAULT_AI_HINT, PLACEHOLDER_IMAGE_URL
from smartorder.services.storage.images import ImageStorage

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    """No product with the given id."""


class CatalogRepository:
    """Repository for catalog operations."""

    def __init__(self, store: CatalogStore, image_storage: Optional[ImageStorage] = None):
        self.store = store
        self.image_storage = image_storage

    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        """List products in presentation order."""
        return await self.store.list_products(category)

    async def list_categories(self) -> List[CategorySummary]:
        """Categories with product counts."""
        return await self.store.list_categories()

    async def get_product(self, product_id: str) -> Product:
        """Get a product by id."""
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def add_product(
        self,
        name: str,
        price: Decimal,
        category: str,
        description: Optional[str] = None,
        ai_hint: Optional[str] = None,
        image_data_uri: Optional[str] = None,
        image_filename: Optional[str] = None,
    ) -> Product:
        """Add a product at the end of its category."""
        category = category.strip()
        image_url = PLACEHOLDER_IMAGE_URL
        if image_data_uri and self.image_storage:
            image_url = await self.image_storage.save(image_data_uri, image_filename)

        draft = ProductDraft(
            name=name.strip(),
            price=price,
            category=category,
            description=(description or "").strip(),
            image_url=image_url,
            ai_hint=(ai_hint or "").strip().lower() or DEFAULT_AI_HINT,
            display_order=await next_display_order(self.store, category),
        )
        product = await self.store.add_product(draft)
        logger.info(
            f"[CATALOG] Added '{product.name}' to '{product.category}' "
            f"at position {product.display_order}"
        )
        return product

    async def update_product(
        self,
        product_id: str,
        changes: Dict[str, Any],
        image_data_uri: Optional[str] = None,
        image_filename: Optional[str] = None,
        remove_image: bool = False,
    ) -> Product:
        """Apply an admin edit.

        Changing the category keeps the product's display order.
        """
        current = await self.get_product(product_id)
        updates: Dict[str, Any] = {}
        for field in ("name", "category", "description"):
            if changes.get(field) is not None:
                updates[field] = changes[field].strip()
        if changes.get("price") is not None:
            updates["price"] = changes["price"]
        if "ai_hint" in changes or "name" in updates:
            hint = (changes.get("ai_hint") or "").strip().lower()
            name = updates.get("name", current.name)
            updates["ai_hint"] = hint or name.lower() or DEFAULT_AI_HINT

        old_image_url = current.image_url
        replace_old_image = False
        if image_data_uri and self.image_storage:
            updates["image_url"] = await self.image_storage.save(image_data_uri, image_filename)
            replace_old_image = bool(old_image_url and old_image_url != updates["image_url"])
        elif remove_image:
            updates["image_url"] = ""
            replace_old_image = bool(old_image_url)

        product = await self.store.update_product(product_id, updates)
        if product is None:
            raise ProductNotFoundError(product_id)

        if replace_old_image:
            await self._delete_image(old_image_url)
        logger.info(f"[CATALOG] Updated product {product_id}: {sorted(updates)}")
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product and its stored image."""
        product = await self.get_product(product_id)
        await self.store.delete_product(product_id)
        if product.image_url:
            await self._delete_image(product.image_url)
        logger.info(f"[CATALOG] Deleted product {product_id} ('{product.name}')")

    async def _delete_image(self, url: str) -> None:
        if not self.image_storage:
            return
        try:
            await self.image_storage.delete(url)
        except OSError as e:
            # The catalog change is already committed
            logger.error(f"[CATALOG] Error deleting old image {url}: {e}", exc_info=True)

    async def get_menu_text(self) -> str:
        """Get catalog as formatted text for LLM context."""
        products = await self.store.list_products()
        lines = ["Menu:"]
        current_category = None
        for product in products:
            if product.category != current_category:
                current_category = product.category
                lines.append(f"\n{current_category}:")
            desc_str = f" - {product.description}" if product.description else ""
            lines.append(f"  - {product.name} ${product.price:.2f}{desc_str}")
        return "\n".join(lines)
