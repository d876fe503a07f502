"""Menu API endpoints."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from smartorder.api.schemas import ProductResponse, product_response
from smartorder.core.dependencies import get_catalog_repository
from smartorder.services.catalog.repository import CatalogRepository

router = APIRouter()
logger = logging.getLogger(__name__)


class MenuResponse(BaseModel):
    """Menu response model."""
    items: List[ProductResponse]
    categories: List[str] = []


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Get the full menu, grouped by category in display order."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        products = await repository.list_products()
    except SQLAlchemyError as e:
        logger.error(f"[MENU] Error fetching menu - {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Could not load the menu. Please try again.")

    categories: List[str] = []
    for product in products:
        if product.category not in categories:
            categories.append(product.category)
    logger.info(f"[MENU] Menu loaded - {len(products)} items, {len(categories)} categories")

    return MenuResponse(
        items=[product_response(p) for p in products],
        categories=categories,
    )
