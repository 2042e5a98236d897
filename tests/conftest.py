"""Shared test fixtures and configuration."""
import pytest
import os
from datetime import datetime
from typing import Dict, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RESTAURANT_NAME", "Test Restaurant")
os.environ.pop("CACHE_DIR", None)

from app.main import app
from app.db.models import Base
from app.core.dependencies import get_app_state
from app.services.catalog.models import InventoryItem, MenuItem
from app.services.ordering.models import Order, OrderLineItem
from app.services.persistence.base import RecordStore
from app.services.persistence.cache import MemoryCache
from app.services.persistence.store import SqlRecordStore
from app.services.state import AppState


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryRecordStore(RecordStore):
    """Record store kept in dicts; independent of any event loop."""

    def __init__(self):
        self.menu: Dict[str, MenuItem] = {}
        self.inventory: Dict[str, InventoryItem] = {}
        self.orders: Dict[str, Order] = {}
        self.order_items: Dict[str, List[OrderLineItem]] = {}

    async def fetch_menu_items(self) -> List[MenuItem]:
        return [item.model_copy(deep=True) for item in self.menu.values()]

    async def fetch_inventory_items(self) -> List[InventoryItem]:
        return [item.model_copy(deep=True) for item in self.inventory.values()]

    async def fetch_orders(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Order]:
        return [
            order.model_copy(update={"items": self.order_items.get(order.id, [])})
            for order in self.orders.values()
            if (start is None or order.timestamp >= start)
            and (end is None or order.timestamp <= end)
        ]

    async def insert_order(self, order: Order) -> None:
        self.orders[order.id] = order.model_copy(update={"items": []})

    async def insert_order_items(self, order_id: str, items: List[OrderLineItem]) -> None:
        if order_id not in self.orders:
            raise ValueError(f"Order {order_id} not found")
        self.order_items.setdefault(order_id, []).extend(items)

    async def get_inventory_quantity(self, item_id: str) -> Optional[float]:
        item = self.inventory.get(item_id)
        return item.quantity if item else None

    async def update_inventory_item(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        wastage: Optional[float] = None,
    ) -> bool:
        item = self.inventory.get(item_id)
        if item is None:
            return False
        if quantity is not None:
            item.quantity = quantity
        if wastage is not None:
            item.wastage = wastage
        return True

    async def insert_inventory_items(self, items: List[InventoryItem]) -> None:
        for item in items:
            if item.id in self.inventory:
                raise ValueError(f"Inventory item {item.id} already exists")
            self.inventory[item.id] = item.model_copy(deep=True)

    async def upsert_menu_item(self, item: MenuItem) -> None:
        self.menu[item.id] = item.model_copy(deep=True)


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    """Create test database session."""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def sql_store(test_session_factory):
    """Record store over the test database."""
    return SqlRecordStore(test_session_factory)


@pytest.fixture
async def app_state(sql_store):
    """
    Started application state on the test database.

    Boot seeds the empty database with the bundled catalog.
    """
    state = AppState(record_store=sql_store, cache=MemoryCache())
    await state.start()
    yield state
    await state.shutdown()


@pytest.fixture
def memory_store():
    """In-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def api_state(memory_store):
    """Application state for API tests, started by the app lifespan."""
    return AppState(record_store=memory_store, cache=MemoryCache())


@pytest.fixture
def test_client(api_state, monkeypatch):
    """Create FastAPI test client with overrides."""
    monkeypatch.setattr("app.main.build_state", lambda: api_state)
    app.dependency_overrides[get_app_state] = lambda: api_state

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


def _menu_item(item_id: str, price: str = "10.00", ingredients=None, name: Optional[str] = None):
    return MenuItem(
        id=item_id,
        name=name or item_id.replace("-", " ").title(),
        price=price,
        category="main",
        ingredients=ingredients or [],
    )


def _inventory_item(item_id: str, quantity: float, name: Optional[str] = None, min_level: float = 0):
    return InventoryItem(
        id=item_id,
        name=name or item_id.replace("-", " ").title(),
        quantity=quantity,
        min_level=min_level,
    )


@pytest.fixture
def make_menu_item():
    """Factory for menu items (id, price, ingredients, name)."""
    return _menu_item


@pytest.fixture
def make_inventory_item():
    """Factory for inventory items (id, quantity, name, min_level)."""
    return _inventory_item
