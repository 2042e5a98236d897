"""Unit tests for the catalog store, catalog manager and order history."""
import asyncio
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

from app.core.errors import (
    DuplicateInventoryItemError,
    RemoteFetchError,
    UnknownInventoryItemError,
    UnknownMenuItemError,
)
from app.services.catalog.bundled import BundledCatalog
from app.services.catalog.models import MenuItem, StockLevel
from app.services.catalog.store import CatalogStore
from app.services.events import INVENTORY_CHANGED, EventBus
from app.services.ordering.history import OrderHistory
from app.services.ordering.models import Order, OrderLineItem
from app.services.persistence.cache import MemoryCache
from app.services.state import AppState


def _order(order_id: str, total: str, timestamp: datetime) -> Order:
    return Order(
        id=order_id,
        items=[OrderLineItem(menu_item_id="soda", name="Soda", price=Decimal(total), quantity=1)],
        total=Decimal(total),
        timestamp=timestamp,
    )


class TestBundledCatalog:
    """Test the bundled default dataset."""

    def test_loads_defaults(self):
        """Test the bundled menu and inventory load."""
        catalog = BundledCatalog()

        menu = {item.id: item for item in catalog.menu_items()}
        inventory = {item.id: item for item in catalog.inventory_items()}

        assert len(menu) == 8
        assert menu["burger-classic"].price == Decimal("199.99")
        assert inventory["chicken-patty"].quantity == 50
        assert all(
            requirement.inventory_item_id in inventory
            for item in menu.values()
            for requirement in item.ingredients
        )

    def test_returns_fresh_copies(self):
        """Test callers cannot mutate the cached dataset."""
        catalog = BundledCatalog()
        catalog.inventory_items()[0].quantity = 0

        assert catalog.inventory_items()[0].quantity > 0

    def test_missing_file_falls_back(self, tmp_path):
        """Test a missing catalog file falls back to the bundled one."""
        catalog = BundledCatalog(str(tmp_path / "missing.yaml"))

        assert len(catalog.menu_items()) == 8

    def test_custom_file(self, tmp_path):
        """Test loading a custom YAML catalog."""
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "menu_items:\n"
            "  - {id: tea, name: Tea, price: '20.00', category: drink}\n"
            "inventory_items:\n"
            "  - {id: leaves, name: Tea Leaves, quantity: 5}\n"
        )

        catalog = BundledCatalog(str(path))

        assert [item.id for item in catalog.menu_items()] == ["tea"]
        assert catalog.inventory_items()[0].unit == "pieces"


class TestCatalogStore:
    """Test the in-memory catalog."""

    def test_consume_clamps_at_zero(self, make_inventory_item):
        """Test decrements never go below zero."""
        store = CatalogStore()
        store.replace_inventory([make_inventory_item("patty", 3), make_inventory_item("bun", 10)])

        updated = store.consume({"patty": 5, "bun": 2})

        assert updated == {"patty": 0, "bun": 8}
        assert store.get_inventory_item("patty").quantity == 0

    def test_consume_skips_unknown(self, make_inventory_item):
        """Test unknown ids are ignored."""
        store = CatalogStore()
        store.replace_inventory([make_inventory_item("bun", 10)])

        assert store.consume({"ghost": 1}) == {}

    def test_inventory_events(self, make_inventory_item):
        """Test inventory changes are announced."""
        events = EventBus()
        received = []
        events.subscribe(INVENTORY_CHANGED, received.append)
        store = CatalogStore(events)

        store.replace_inventory([make_inventory_item("bun", 10)])
        store.set_quantity("bun", 4)
        store.consume({"ghost": 1})

        assert len(received) == 2

    def test_unknown_lookups(self):
        """Test unknown ids raise lookup errors."""
        store = CatalogStore()

        with pytest.raises(UnknownMenuItemError):
            store.get_menu_item("ghost")
        with pytest.raises(UnknownInventoryItemError):
            store.set_quantity("ghost", 1)

    def test_categories_in_first_seen_order(self, make_menu_item):
        """Test categories are listed once each."""
        store = CatalogStore()
        soda = MenuItem(id="soda", name="Soda", price="49.99", category="drink")
        store.replace_menu([make_menu_item("burger"), soda, make_menu_item("wrap")])

        assert store.categories == ["main", "drink"]

    @pytest.mark.parametrize(
        "quantity,expected",
        [(4, StockLevel.LOW), (5, StockLevel.LOW), (8, StockLevel.MEDIUM), (10, StockLevel.MEDIUM), (11, StockLevel.OK)],
    )
    def test_stock_level(self, make_inventory_item, quantity, expected):
        """Test stock levels against a minimum level of 10."""
        item = make_inventory_item("bun", quantity, min_level=10)

        assert item.stock_level == expected

    def test_low_stock_items(self, make_inventory_item):
        """Test only items at or below their minimum level are listed."""
        store = CatalogStore()
        store.replace_inventory([
            make_inventory_item("bun", 40, min_level=15),
            make_inventory_item("onion", 3, min_level=5),
            make_inventory_item("cheese", 20, min_level=20),
        ])

        assert [item.id for item in store.low_stock_items()] == ["onion", "cheese"]


class TestCatalogManager:
    """Test catalog refresh and edits against the backend."""

    @pytest.mark.asyncio
    async def test_boot_seeds_empty_backend(self, app_state, sql_store):
        """Test an empty backend receives the bundled catalog."""
        remote_menu = await sql_store.fetch_menu_items()
        remote_inventory = await sql_store.fetch_inventory_items()

        assert len(remote_menu) == 8
        assert len(remote_inventory) == 11
        assert len(app_state.catalog.menu_items) == 8

    @pytest.mark.asyncio
    async def test_refresh_replaces_from_backend(self, app_state, sql_store):
        """Test refresh loads the backend values."""
        await sql_store.update_inventory_item("onion", quantity=3)

        await app_state.catalog_manager.refresh()

        assert app_state.catalog.get_inventory_item("onion").quantity == 3
        assert app_state.catalog.get_menu_item("burger-classic").price == Decimal("199.99")

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_snapshot(self, app_state, sql_store, monkeypatch):
        """Test a failed fetch raises and leaves the local data in place."""
        app_state.catalog.set_quantity("onion", 7)
        monkeypatch.setattr(
            sql_store, "fetch_inventory_items", AsyncMock(side_effect=ConnectionError("offline"))
        )

        with pytest.raises(RemoteFetchError) as exc_info:
            await app_state.catalog_manager.refresh()

        assert exc_info.value.source == "inventory items"
        assert app_state.catalog.get_inventory_item("onion").quantity == 7
        assert len(app_state.catalog.menu_items) == 8

    @pytest.mark.asyncio
    async def test_refresh_keeps_local_only_orders(self, app_state, sql_store, monkeypatch):
        """Test orders the backend never received survive a refresh."""
        monkeypatch.setattr(
            sql_store, "insert_order", AsyncMock(side_effect=ConnectionError("offline"))
        )
        app_state.cart.add(app_state.catalog.get_menu_item("soda"))
        result = app_state.orders.commit()
        await result.wait()
        monkeypatch.undo()

        await app_state.catalog_manager.refresh()

        assert [order.id for order in app_state.history.orders] == [result.order.id]
        assert app_state.history.total_orders == 1

    @pytest.mark.asyncio
    async def test_refresh_keeps_in_flight_decrements(self, app_state, sql_store, monkeypatch):
        """Test a refresh during an order save does not restore the consumed stock."""
        insert_order = sql_store.insert_order
        release = asyncio.Event()

        async def delayed_insert(order):
            await release.wait()
            await insert_order(order)

        monkeypatch.setattr(sql_store, "insert_order", delayed_insert)
        app_state.cart.add(app_state.catalog.get_menu_item("burger-classic"))
        app_state.cart.add(app_state.catalog.get_menu_item("burger-classic"))
        result = app_state.orders.commit()

        await app_state.catalog_manager.refresh()
        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 48

        release.set()
        await result.wait()
        assert await sql_store.get_inventory_quantity("chicken-patty") == 48
        assert app_state.orders.unsynced_demand() == {}

        await app_state.catalog_manager.refresh()
        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 48

    @pytest.mark.asyncio
    async def test_refresh_keeps_failed_decrements(self, app_state, sql_store, monkeypatch):
        """Test decrements of an order the backend never received survive a refresh."""
        monkeypatch.setattr(
            sql_store, "insert_order", AsyncMock(side_effect=ConnectionError("offline"))
        )
        app_state.cart.add(app_state.catalog.get_menu_item("burger-classic"))
        result = app_state.orders.commit()
        await result.wait()

        await app_state.catalog_manager.refresh()

        assert await sql_store.get_inventory_quantity("chicken-patty") == 50
        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 49
        assert app_state.orders.unsynced_demand()["chicken-patty"] == 1

    @pytest.mark.asyncio
    async def test_refresh_empty_backend_without_seeding(self, memory_store):
        """Test an empty backend leaves the local catalog alone when seeding is off."""
        state = AppState(record_store=memory_store, cache=MemoryCache(), seed_remote=False)

        await state.start()

        assert len(state.catalog.menu_items) == 8
        assert state.catalog.get_inventory_item("chicken-patty").quantity == 50
        assert memory_store.menu == {}
        assert memory_store.inventory == {}

    @pytest.mark.asyncio
    async def test_upsert_menu_item(self, app_state, sql_store, make_menu_item):
        """Test a new menu item is available locally and saved remotely."""
        app_state.catalog_manager.upsert_menu_item(make_menu_item("wrap", price="129.00"))

        assert app_state.catalog.get_menu_item("wrap").price == Decimal("129.00")
        await app_state.writer.drain()
        assert "wrap" in {item.id for item in await sql_store.fetch_menu_items()}

    @pytest.mark.asyncio
    async def test_add_duplicate_inventory_item(self, app_state, make_inventory_item):
        """Test adding an existing inventory id is refused."""
        with pytest.raises(DuplicateInventoryItemError):
            app_state.catalog_manager.add_inventory_item(make_inventory_item("onion", 1))

        assert app_state.catalog.get_inventory_item("onion").quantity == 20

    @pytest.mark.asyncio
    async def test_add_inventory_item_remote_failure(self, app_state, sql_store, monkeypatch, make_inventory_item):
        """Test a failed save keeps the local item and reports a catalog warning."""
        monkeypatch.setattr(
            sql_store, "insert_inventory_items", AsyncMock(side_effect=ConnectionError("offline"))
        )

        app_state.catalog_manager.add_inventory_item(make_inventory_item("lettuce", 12))
        await app_state.writer.drain()

        assert app_state.catalog.get_inventory_item("lettuce").quantity == 12
        assert [w.stage for w in app_state.warnings.warnings] == ["catalog"]


class TestOrderHistory:
    """Test order history and aggregates."""

    def test_append_updates_aggregates(self):
        """Test append bumps count and revenue."""
        history = OrderHistory()
        history.append(_order("a", "10.00", datetime(2024, 5, 1, 9, tzinfo=timezone.utc)))
        history.append(_order("b", "5.50", datetime(2024, 5, 1, 10, tzinfo=timezone.utc)))

        assert history.total_orders == 2
        assert history.total_revenue == Decimal("15.50")

    def test_merge_prefers_remote_and_keeps_local_only(self):
        """Test merge keys by id and keeps orders only known locally."""
        history = OrderHistory()
        history.append(_order("a", "10.00", datetime(2024, 5, 1, 9, tzinfo=timezone.utc)))
        history.append(_order("local", "3.00", datetime(2024, 5, 1, 11, tzinfo=timezone.utc)))

        local_only = history.merge([
            _order("a", "10.00", datetime(2024, 5, 1, 9, tzinfo=timezone.utc)),
            _order("remote", "7.00", datetime(2024, 5, 1, 10, tzinfo=timezone.utc)),
        ])

        assert local_only == 1
        assert [order.id for order in history.orders] == ["a", "remote", "local"]
        assert history.total_orders == 3
        assert history.total_revenue == Decimal("20.00")

    def test_orders_on_day(self):
        """Test filtering orders by calendar day."""
        history = OrderHistory()
        history.append(_order("before", "1.00", datetime(2024, 4, 30, 23, 59, tzinfo=timezone.utc)))
        history.append(_order("start", "1.00", datetime(2024, 5, 1, 0, 0, tzinfo=timezone.utc)))
        history.append(_order("end", "1.00", datetime(2024, 5, 1, 23, 59, 59, tzinfo=timezone.utc)))
        history.append(_order("after", "1.00", datetime(2024, 5, 2, 0, 0, tzinfo=timezone.utc)))

        assert [order.id for order in history.orders_on(date(2024, 5, 1))] == ["start", "end"]

    def test_aggregates_are_copies(self):
        """Test callers cannot modify the counters through the returned object."""
        history = OrderHistory()
        aggregates = history.aggregates
        aggregates.total_orders = 99

        assert history.total_orders == 0
