"""Shared test fixtures and configuration."""
import os
import tempfile
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DASHBOARD_PASSWORD", "testpass123")
os.environ.setdefault("RESTAURANT_NAME", "Test Restaurant")
os.environ.setdefault("MEDIA_DIR", tempfile.mkdtemp(prefix="smartorder-media-"))

from smartorder.main import app
from smartorder.db.database import get_db
from smartorder.db.models import Base
from smartorder.core import dependencies
from smartorder.services.catalog.importer import ExtractedProduct
from smartorder.services.catalog.in_memory_store import InMemoryCatalogStore, load_catalog_file
from smartorder.services.catalog.sql_store import SqlCatalogStore
from smartorder.services.interpreter.base import OrderInterpreter, ProductExtractor
from smartorder.services.ordering.models import ParsedOrderItem
from smartorder.services.payment.base import (
    PaymentError,
    PaymentGateway,
    PaymentIntent,
    PaymentStatus,
)
from smartorder.services.storage.images import LocalImageStorage


TEST_CATALOG_PATH = Path(__file__).parent / "fixtures" / "test_catalog.yaml"

# 1x1 transparent PNG
PNG_DATA_URI = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


class FakeOrderInterpreter(OrderInterpreter):
    """Returns canned order items."""

    def __init__(self, items: Optional[List[ParsedOrderItem]] = None, error: Optional[Exception] = None):
        self.items = items or []
        self.error = error
        self.calls = []

    async def interpret(self, order_text, menu_context=None):
        self.calls.append((order_text, menu_context))
        if self.error:
            raise self.error
        return list(self.items)


class FakeProductExtractor(ProductExtractor):
    """Returns canned extracted products."""

    def __init__(self, products: Optional[List[ExtractedProduct]] = None, error: Optional[Exception] = None):
        self.products = products or []
        self.error = error
        self.calls = []

    async def extract(self, image_data_uri, context_prompt=None):
        self.calls.append((image_data_uri, context_prompt))
        if self.error:
            raise self.error
        return list(self.products)


class FakePaymentGateway(PaymentGateway):
    """In-process payment processor."""

    def __init__(self, status: PaymentStatus = PaymentStatus.SUCCEEDED, error: Optional[PaymentError] = None):
        self.status = status
        self.error = error
        self.created = []

    async def create_intent(self, amount, metadata=None):
        if self.error:
            raise self.error
        intent_id = f"pi_test{len(self.created) + 1}"
        self.created.append((amount, metadata))
        return PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_abc",
            amount=amount,
            currency="hkd",
            status=PaymentStatus.REQUIRES_PAYMENT_METHOD,
        )

    async def get_status(self, intent_id):
        if self.error:
            raise self.error
        return self.status


@pytest.fixture
def catalog_products():
    """Products from the fixture catalog."""
    return load_catalog_file(str(TEST_CATALOG_PATH))


@pytest.fixture
def memory_store(catalog_products):
    """In-memory store seeded with the fixture catalog."""
    return InMemoryCatalogStore(products=catalog_products)


@pytest.fixture
async def test_db_engine(tmp_path):
    """Create test database engine on a per-test SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
async def sql_store(test_db, catalog_products):
    """SQL catalog store seeded with the fixture catalog."""
    store = SqlCatalogStore(test_db)
    await store.add_products(catalog_products)
    return store


@pytest.fixture
def image_storage(tmp_path):
    """Image storage in a temporary media directory."""
    return LocalImageStorage(str(tmp_path / "media"), "/media")


@pytest.fixture
def order_interpreter():
    return FakeOrderInterpreter()


@pytest.fixture
def product_extractor():
    return FakeProductExtractor()


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def override_get_db(test_db_engine):
    """Override get_db with sessions on the test database."""
    session_factory = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    return _override_get_db


@pytest.fixture
def test_client(
    sql_store,
    override_get_db,
    image_storage,
    order_interpreter,
    product_extractor,
    payment_gateway,
    clean_auth_sessions,
):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[dependencies.get_image_storage] = lambda: image_storage
    app.dependency_overrides[dependencies.get_order_interpreter] = lambda: order_interpreter
    app.dependency_overrides[dependencies.get_product_extractor] = lambda: product_extractor
    app.dependency_overrides[dependencies.get_payment_gateway] = lambda: payment_gateway

    client = TestClient(app)

    yield client

    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(test_client):
    """Create test client with valid admin session cookie."""
    response = test_client.post("/api/auth/login", json={"password": "testpass123"})
    assert response.status_code == 200
    return test_client


@pytest.fixture
def clean_auth_sessions():
    """Clean up authentication sessions before and after tests."""
    from smartorder.api import auth
    auth._sessions.clear()
    yield
    auth._sessions.clear()


@pytest.fixture
def png_data_uri():
    """Small valid PNG image as a data URI."""
    return PNG_DATA_URI
