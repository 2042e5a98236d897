"""Application state shared by the API."""
import logging
from typing import Any, Optional

from pydantic import ValidationError

from app.core.errors import RemoteFetchError
from app.services.catalog.bundled import BundledCatalog
from app.services.catalog.manager import CatalogManager
from app.services.catalog.models import InventoryItem, MenuItem
from app.services.catalog.store import CatalogStore
from app.services.events import (
    CART_CHANGED,
    INVENTORY_CHANGED,
    MENU_CHANGED,
    ORDERS_CHANGED,
    EventBus,
)
from app.services.inventory.mutator import InventoryMutator
from app.services.ordering.cart import Cart
from app.services.ordering.history import OrderHistory
from app.services.ordering.models import Aggregates, CartEntry, Order
from app.services.ordering.processor import OrderProcessor
from app.services.persistence.background import BackgroundWriter
from app.services.persistence.base import RecordStore
from app.services.persistence.cache import CacheKeys, MemoryCache, SnapshotCache
from app.services.warnings import WarningChannel

logger = logging.getLogger(__name__)


class AppState:
    """
    Session-wide cart, catalog, inventory and order history.

    Built once at startup and handed to endpoints through a dependency.
    Every change event is written through to the snapshot cache.
    """

    def __init__(
        self,
        record_store: RecordStore,
        cache: Optional[SnapshotCache] = None,
        defaults: Optional[BundledCatalog] = None,
        seed_remote: bool = True,
    ):
        self.record_store = record_store
        self.cache = cache or MemoryCache()
        self.events = EventBus()
        self.warnings = WarningChannel()
        self.writer = BackgroundWriter()

        self.catalog = CatalogStore(self.events)
        self.cart = Cart(self.events)
        self.history = OrderHistory(self.events)

        sink = self.warnings.sink()
        self.orders = OrderProcessor(
            self.cart, self.catalog, self.history, record_store, self.writer, sink
        )
        self.catalog_manager = CatalogManager(
            self.catalog,
            self.history,
            record_store,
            self.writer,
            sink,
            defaults=defaults,
            seed_remote=seed_remote,
            unsynced_demand=self.orders.unsynced_demand,
        )
        self.inventory = InventoryMutator(self.catalog, record_store, self.writer, sink)

        self.events.subscribe(MENU_CHANGED, lambda _: self._write_menu())
        self.events.subscribe(INVENTORY_CHANGED, lambda _: self._write_inventory())
        self.events.subscribe(ORDERS_CHANGED, lambda _: self._write_orders())
        self.events.subscribe(CART_CHANGED, lambda _: self._write_cart())

    # Cache write-through

    def _write_menu(self) -> None:
        self.cache.set(
            CacheKeys.MENU, [item.model_dump(mode="json") for item in self.catalog.menu_items]
        )

    def _write_inventory(self) -> None:
        self.cache.set(
            CacheKeys.INVENTORY,
            [item.model_dump(mode="json") for item in self.catalog.inventory_items],
        )

    def _write_orders(self) -> None:
        self.cache.set(
            CacheKeys.ORDERS, [order.model_dump(mode="json") for order in self.history.orders]
        )
        self.cache.set(CacheKeys.AGGREGATES, self.history.aggregates.model_dump(mode="json"))

    def _write_cart(self) -> None:
        self.cache.set(
            CacheKeys.CART, [entry.model_dump(mode="json") for entry in self.cart.entries]
        )

    # Boot

    def _read(self, key: str, model: Any) -> Optional[list]:
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return [model.model_validate(value) for value in raw]
        except (ValidationError, TypeError) as e:
            logger.warning(f"[STATE] Discarding invalid cached '{key}' snapshot: {e}")
            return None

    def load_snapshot(self) -> None:
        """
        Populate state from the snapshot cache, falling back to bundled defaults.

        Read once at boot, before the first remote fetch completes.
        """
        menu = self._read(CacheKeys.MENU, MenuItem)
        inventory = self._read(CacheKeys.INVENTORY, InventoryItem)
        if menu is None or inventory is None:
            self.catalog_manager.load_defaults()
        else:
            self.catalog.replace_menu(menu)
            self.catalog.replace_inventory(inventory)

        orders = self._read(CacheKeys.ORDERS, Order)
        if orders is not None:
            self.history.replace(orders)
        else:
            aggregates = self.cache.get(CacheKeys.AGGREGATES)
            if aggregates is not None:
                try:
                    self.history.restore_aggregates(Aggregates.model_validate(aggregates))
                except ValidationError as e:
                    logger.warning(f"[STATE] Discarding invalid cached aggregates: {e}")

        cart = self._read(CacheKeys.CART, CartEntry)
        if cart:
            self.cart.restore(cart)

        logger.info(
            f"[STATE] Local snapshot loaded - {len(self.catalog.menu_items)} menu items, "
            f"{len(self.catalog.inventory_items)} inventory items, {len(self.history)} orders, "
            f"{len(self.cart)} cart entries"
        )

    async def start(self) -> None:
        """Load the local snapshot, then try the backend."""
        self.load_snapshot()
        try:
            await self.catalog_manager.refresh()
        except RemoteFetchError as e:
            logger.warning(f"[STATE] {e}; continuing with local data")

    async def shutdown(self) -> None:
        """Let in-flight remote writes finish."""
        if self.writer.pending:
            logger.info(f"[STATE] Waiting for {self.writer.pending} pending remote writes")
        await self.writer.drain()
