"""Catalog store interface."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from pydantic import BaseModel, Field


class ProductDraft(BaseModel):
    """Product fields before the store assigns an id."""

    name: str
    price: Decimal = Field(default=Decimal("0"), ge=0)
    category: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None
    display_order: int = Field(default=0, ge=0)


# Fields a partial update may change
PRODUCT_FIELDS = tuple(ProductDraft.model_fields)


class Product(ProductDraft):
    """Catalog product."""

    id: str


class CategorySummary(BaseModel):
    """Category name with the number of products in it."""

    name: str
    count: int


class CatalogStore(ABC):
    """Abstract base class for catalog stores."""

    @abstractmethod
    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        """List products, optionally restricted to one category.

        Products are ordered by category, then display order.
        """
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by id."""
        pass

    @abstractmethod
    async def max_display_order(self, category: str) -> Optional[int]:
        """Highest display order in a category, None when it is empty."""
        pass

    @abstractmethod
    async def add_product(self, draft: ProductDraft) -> Product:
        """Insert a single product."""
        pass

    @abstractmethod
    async def add_products(self, drafts: Sequence[ProductDraft]) -> List[Product]:
        """Insert several products in one atomic batch."""
        pass

    @abstractmethod
    async def update_product(
        self, product_id: str, changes: Dict[str, Any]
    ) -> Optional[Product]:
        """Apply a partial update. Returns None if the product does not exist."""
        pass

    @abstractmethod
    async def delete_product(self, product_id: str) -> bool:
        """Delete a product. Returns False if it did not exist."""
        pass

    async def list_categories(self) -> List[CategorySummary]:
        """Distinct categories with product counts, in first-seen order."""
        counts: Dict[str, int] = {}
        for product in await self.list_products():
            counts[product.category] = counts.get(product.category, 0) + 1
        return [CategorySummary(name=name, count=count) for name, count in counts.items()]


def sort_key(product: Product) -> Tuple[str, int, str]:
    """Catalog presentation order."""
    return (product.category, product.display_order, product.name)
