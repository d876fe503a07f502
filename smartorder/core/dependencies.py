"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smartorder.core.config import settings
from smartorder.db.database import get_db
from smartorder.services.catalog.base import CatalogStore
from smartorder.services.catalog.repository import CatalogRepository
from smartorder.services.catalog.sql_store import SqlCatalogStore
from smartorder.services.interpreter.base import LanguageIdentifier, OrderInterpreter, ProductExtractor
from smartorder.services.interpreter.openai_interpreter import (
    OpenAILanguageIdentifier,
    OpenAIOrderInterpreter,
    OpenAIProductExtractor,
)
from smartorder.services.payment.base import PaymentGateway
from smartorder.services.payment.stripe_gateway import StripePaymentGateway
from smartorder.services.persistence.orders import OrderPersistenceService
from smartorder.services.storage.images import ImageStorage, LocalImageStorage


def get_catalog_store(db: AsyncSession = Depends(get_db)) -> CatalogStore:
    """Get catalog store bound to the request session."""
    return SqlCatalogStore(db)


def get_image_storage() -> ImageStorage:
    """Get product image storage."""
    return LocalImageStorage(settings.media_dir, settings.media_url)


def get_catalog_repository(
    store: CatalogStore = Depends(get_catalog_store),
    image_storage: ImageStorage = Depends(get_image_storage),
) -> CatalogRepository:
    """Get catalog repository instance."""
    return CatalogRepository(store, image_storage)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderPersistenceService:
    """Get order persistence service."""
    return OrderPersistenceService(db)


def get_order_interpreter() -> OrderInterpreter:
    """Get order text interpreter."""
    return OpenAIOrderInterpreter()


def get_product_extractor() -> ProductExtractor:
    """Get menu image extractor."""
    return OpenAIProductExtractor()


def get_language_identifier() -> LanguageIdentifier:
    """Get language identifier."""
    return OpenAILanguageIdentifier()


def get_payment_gateway() -> PaymentGateway:
    """Get payment gateway."""
    return StripePaymentGateway()
