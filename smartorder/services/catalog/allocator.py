"""Per-category display order allocation."""
from typing import Dict
from smartorder.services.catalog.base import CatalogStore


async def next_display_order(store: CatalogStore, category: str) -> int:
    """Display order for a product appended to the end of a category."""
    existing_max = await store.max_display_order(category)
    if existing_max is None:
        existing_max = -1
    return max(existing_max, -1) + 1


class CategoryOrderAllocator:
    """Allocates display orders for one import batch.

    The store is queried once per distinct category; later items of the same
    category are numbered from an in-memory counter, so a batch always gets a
    contiguous run per category no matter how categories are interleaved.
    Create a new allocator for every batch.
    """

    def __init__(self, store: CatalogStore):
        self.store = store
        self._next_order: Dict[str, int] = {}

    async def allocate(self, category: str) -> int:
        """Return the next display order for `category` in this batch."""
        if category not in self._next_order:
            self._next_order[category] = await next_display_order(self.store, category)
        order = self._next_order[category]
        self._next_order[category] = order + 1
        return order
