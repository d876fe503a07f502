"""Initial catalog data."""
import logging
from typing import Optional

from smartorder.services.catalog.in_memory_store import load_catalog_file
from smartorder.services.catalog.sql_store import SqlCatalogStore

logger = logging.getLogger(__name__)


async def seed_catalog_if_empty(store: SqlCatalogStore, catalog_file: Optional[str] = None) -> int:
    """Load the YAML catalog into an empty store. Returns products added."""
    if await store.count() > 0:
        return 0
    products = load_catalog_file(catalog_file)
    await store.add_products(products)
    logger.info(f"[CATALOG] Seeded catalog with {len(products)} products")
    return len(products)
