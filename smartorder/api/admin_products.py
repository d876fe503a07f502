"""Admin catalog endpoints."""
import logging
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from smartorder.api.auth import require_auth
from smartorder.api.schemas import ProductResponse, product_response
from smartorder.core.config import settings
from smartorder.core.dependencies import get_catalog_repository, get_product_extractor
from smartorder.services.catalog.base import CategorySummary
from smartorder.services.catalog.importer import ExtractedProduct, import_extracted_products
from smartorder.services.catalog.repository import CatalogRepository, ProductNotFoundError
from smartorder.services.interpreter.base import InterpreterError, ProductExtractor, SafetyBlockedError
from smartorder.services.storage.images import parse_data_uri

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)

STORE_ERROR_DETAIL = "Saving to the database failed. Please try again."


def check_image(data_uri: Optional[str]) -> None:
    """Reject malformed or oversized image uploads."""
    if not data_uri:
        return
    try:
        image = parse_data_uri(data_uri)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if len(image.data) > settings.max_image_bytes:
        limit_mb = settings.max_image_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=413, detail=f"Image is larger than {limit_mb}MB. Please upload a smaller image."
        )


class ProductCreateRequest(BaseModel):
    """New product form."""
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    ai_hint: Optional[str] = None
    image_data_uri: Optional[str] = None
    image_filename: Optional[str] = None

    @field_validator("name", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ProductUpdateRequest(BaseModel):
    """Product edit form. Omitted fields are left unchanged."""
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    ai_hint: Optional[str] = None
    image_data_uri: Optional[str] = None
    image_filename: Optional[str] = None
    remove_image: bool = False


class ExtractRequest(BaseModel):
    """Menu image to extract products from."""
    image_data_uri: str
    context_prompt: Optional[str] = None


class ExtractResponse(BaseModel):
    """Extraction preview."""
    extracted_products: List[ExtractedProduct]
    message: str


class ImportRequest(BaseModel):
    """Reviewed extraction to save."""
    extracted_products: List[ExtractedProduct] = Field(min_length=1)


@router.get("/categories", response_model=List[CategorySummary])
async def list_categories(repository: CatalogRepository = Depends(get_catalog_repository)):
    """Categories with product counts."""
    return await repository.list_categories()


@router.get("/products", response_model=List[ProductResponse])
async def list_products(
    category: Optional[str] = None,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Products, optionally of one category, in display order."""
    return [product_response(p) for p in await repository.list_products(category)]


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    try:
        return product_response(await repository.get_product(product_id))
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")


@router.post("/products", response_model=ProductResponse)
async def create_product(
    body: ProductCreateRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Add a product at the end of its category."""
    check_image(body.image_data_uri)
    try:
        product = await repository.add_product(
            name=body.name,
            price=body.price,
            category=body.category,
            description=body.description,
            ai_hint=body.ai_hint,
            image_data_uri=body.image_data_uri,
            image_filename=body.image_filename,
        )
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"[CATALOG] Error adding product '{body.name}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)
    return product_response(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductUpdateRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Edit a product."""
    check_image(body.image_data_uri)
    changes = body.model_dump(
        exclude_unset=True,
        exclude={"image_data_uri", "image_filename", "remove_image"},
    )
    for field in ("name", "category"):
        if field in changes and not (changes[field] or "").strip():
            raise HTTPException(status_code=422, detail=f"{field} must not be blank")

    try:
        product = await repository.update_product(
            product_id,
            changes,
            image_data_uri=body.image_data_uri,
            image_filename=body.image_filename,
            remove_image=body.remove_image,
        )
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"[CATALOG] Error updating product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)
    return product_response(product)


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Delete a product."""
    try:
        await repository.delete_product(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    except SQLAlchemyError as e:
        logger.error(f"[CATALOG] Error deleting product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)
    return {"success": True, "message": f"Product '{product_id}' deleted"}


@router.post("/products/import/extract", response_model=ExtractResponse)
async def extract_products(
    body: ExtractRequest,
    extractor: ProductExtractor = Depends(get_product_extractor),
):
    """Read product candidates off a menu image for review."""
    check_image(body.image_data_uri)
    try:
        extracted = await extractor.extract(body.image_data_uri, body.context_prompt or None)
    except SafetyBlockedError as e:
        logger.warning(f"[IMPORT] Extraction blocked: {e}")
        raise HTTPException(
            status_code=422,
            detail="The image may violate the AI safety policy and cannot be processed. Please try a different image.",
        )
    except InterpreterError as e:
        logger.error(f"[IMPORT] Extraction failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=502,
            detail="An error occurred while the AI analysed the image. Please try again.",
        )

    if extracted:
        message = f"Identified {len(extracted)} products in the image. Please review them below."
    else:
        message = "No products could be identified. Try a clearer image or adjust the prompt."
    return ExtractResponse(extracted_products=extracted, message=message)


@router.post("/products/import", response_model=List[ProductResponse])
async def import_products(
    body: ImportRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Save reviewed extracted products to the catalog in one batch."""
    try:
        created = await import_extracted_products(repository.store, body.extracted_products)
    except SQLAlchemyError as e:
        logger.error(f"[IMPORT] Error saving extracted products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=STORE_ERROR_DETAIL)
    return [product_response(p) for p in created]
