"""In-memory catalog store."""
import uuid
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from smartorder.services.catalog.base import (
    PRODUCT_FIELDS,
    CatalogStore,
    Product,
    ProductDraft,
    sort_key,
)

DEFAULT_CATALOG_FILE = Path(__file__).parent / "data" / "catalog.yaml"


def load_catalog_file(catalog_file: Optional[str] = None) -> List[Product]:
    """Load products from a YAML catalog file."""
    path = Path(catalog_file) if catalog_file else DEFAULT_CATALOG_FILE
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return [Product(**item) for item in data.get("products", [])]


def to_product(draft: ProductDraft) -> Product:
    """Assign an id to a draft unless it already has one."""
    data = draft.model_dump()
    product_id = data.pop("id", None) or uuid.uuid4().hex
    return Product(id=product_id, **data)


class InMemoryCatalogStore(CatalogStore):
    """Catalog store kept in a dict, seeded from YAML or a product list."""

    def __init__(
        self,
        products: Optional[Sequence[Product]] = None,
        catalog_file: Optional[str] = None,
    ):
        if products is None:
            products = load_catalog_file(catalog_file)
        self._products: Dict[str, Product] = {p.id: p for p in products}

    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        products = [
            p for p in self._products.values()
            if category is None or p.category == category
        ]
        return sorted(products, key=sort_key)

    async def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    async def max_display_order(self, category: str) -> Optional[int]:
        orders = [
            p.display_order for p in self._products.values() if p.category == category
        ]
        return max(orders) if orders else None

    async def add_product(self, draft: ProductDraft) -> Product:
        product = to_product(draft)
        self._products[product.id] = product
        return product

    async def add_products(self, drafts: Sequence[ProductDraft]) -> List[Product]:
        created = [to_product(d) for d in drafts]
        for product in created:
            self._products[product.id] = product
        return created

    async def update_product(
        self, product_id: str, changes: Dict[str, Any]
    ) -> Optional[Product]:
        product = self._products.get(product_id)
        if product is None:
            return None
        updates = {k: v for k, v in changes.items() if k in PRODUCT_FIELDS}
        updated = product.model_copy(update=updates)
        self._products[product_id] = updated
        return updated

    async def delete_product(self, product_id: str) -> bool:
        return self._products.pop(product_id, None) is not None
