"""Main FastAPI application."""
from fastapi import FastAPI
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.database import AsyncSessionLocal, init_db
from app.api import health, menu, cart, orders, inventory, sync
from app.services.catalog.bundled import BundledCatalog
from app.services.persistence.cache import JsonFileCache, MemoryCache
from app.services.persistence.store import SqlRecordStore
from app.services.state import AppState


def build_state() -> AppState:
    """Wire the application state from settings."""
    cache = JsonFileCache(settings.cache_dir) if settings.cache_dir else MemoryCache()
    return AppState(
        record_store=SqlRecordStore(AsyncSessionLocal),
        cache=cache,
        defaults=BundledCatalog(settings.catalog_file),
        seed_remote=settings.seed_remote_catalog,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    app.state.pos = build_state()
    await app.state.pos.start()
    yield
    # Shutdown
    await app.state.pos.shutdown()


app = FastAPI(
    title="Restaurant POS",
    description=f"Point of sale and inventory tracking for {settings.restaurant_name}",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(cart.router, tags=["cart"])
app.include_router(orders.router, tags=["orders"])
app.include_router(inventory.router, tags=["inventory"])
app.include_router(sync.router, tags=["sync"])


@app.get("/")
async def root():
    """Service banner."""
    return {
        "message": f"{settings.restaurant_name} POS API",
        "version": "0.1.0",
    }
