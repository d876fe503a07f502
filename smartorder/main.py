"""Main FastAPI application."""
from contextlib import asynccontextmanager
import os
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from smartorder.api import admin_products, auth, health, language, menu, orders, payments
from smartorder.core.config import settings
from smartorder.core.logging import setup_logging
from smartorder.db.database import AsyncSessionLocal, init_db
from smartorder.services.catalog.seed import seed_catalog_if_empty
from smartorder.services.catalog.sql_store import SqlCatalogStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    await init_db()
    if settings.seed_catalog:
        async with AsyncSessionLocal() as session:
            await seed_catalog_if_empty(SqlCatalogStore(session))
    yield


app = FastAPI(
    title="SmartOrder",
    description="AI-assisted restaurant ordering and catalog administration",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, tags=["auth"])
app.include_router(menu.router, tags=["menu"])
app.include_router(orders.router, tags=["orders"])
app.include_router(payments.router, tags=["payments"])
app.include_router(language.router, tags=["language"])
app.include_router(admin_products.router, tags=["admin"])

# Uploaded product images
os.makedirs(settings.media_dir, exist_ok=True)
app.mount(settings.media_url, StaticFiles(directory=settings.media_dir), name="media")


@app.get("/")
async def root():
    return {
        "message": f"{settings.restaurant_name} API",
        "version": "0.1.0",
    }
