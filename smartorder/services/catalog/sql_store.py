"""SQLAlchemy-backed catalog store."""
import uuid
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from smartorder.db import models
from smartorder.services.catalog.base import (
    CatalogStore,
    CategorySummary,
    PRODUCT_FIELDS,
    Product,
    ProductDraft,
)


def to_row(draft: ProductDraft) -> models.Product:
    """Build a new database row, keeping the id of drafts that already have one."""
    data = draft.model_dump()
    product_id = data.pop("id", None) or uuid.uuid4().hex
    return models.Product(id=product_id, **data)


def to_product(row: models.Product) -> Product:
    """Convert a database row to the catalog model."""
    return Product(
        id=row.id,
        name=row.name,
        price=row.price,
        category=row.category,
        description=row.description,
        image_url=row.image_url,
        ai_hint=row.ai_hint,
        display_order=row.display_order,
    )


class SqlCatalogStore(CatalogStore):
    """Catalog store persisted in the `products` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        query = select(models.Product)
        if category is not None:
            query = query.where(models.Product.category == category)
        query = query.order_by(
            models.Product.category,
            models.Product.display_order,
            models.Product.name,
        )
        result = await self.db.execute(query)
        return [to_product(row) for row in result.scalars().all()]

    async def get_product(self, product_id: str) -> Optional[Product]:
        row = await self.db.get(models.Product, product_id)
        return to_product(row) if row else None

    async def max_display_order(self, category: str) -> Optional[int]:
        result = await self.db.execute(
            select(models.Product.display_order)
            .where(models.Product.category == category)
            .order_by(desc(models.Product.display_order))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def add_product(self, draft: ProductDraft) -> Product:
        row = to_row(draft)
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return to_product(row)

    async def add_products(self, drafts: Sequence[ProductDraft]) -> List[Product]:
        rows = [to_row(d) for d in drafts]
        try:
            self.db.add_all(rows)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        for row in rows:
            await self.db.refresh(row)
        return [to_product(row) for row in rows]

    async def update_product(
        self, product_id: str, changes: Dict[str, Any]
    ) -> Optional[Product]:
        row = await self.db.get(models.Product, product_id)
        if row is None:
            return None
        for field, value in changes.items():
            if field in PRODUCT_FIELDS:
                setattr(row, field, value)
        await self.db.commit()
        await self.db.refresh(row)
        return to_product(row)

    async def delete_product(self, product_id: str) -> bool:
        row = await self.db.get(models.Product, product_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.commit()
        return True

    async def list_categories(self) -> List[CategorySummary]:
        result = await self.db.execute(
            select(models.Product.category, func.count(models.Product.id))
            .group_by(models.Product.category)
            .order_by(models.Product.category)
        )
        return [CategorySummary(name=name, count=count) for name, count in result.all()]

    async def count(self) -> int:
        """Number of products in the catalog."""
        result = await self.db.execute(select(func.count(models.Product.id)))
        return result.scalar_one()
