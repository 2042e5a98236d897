"""Catalog loading and management against the backend."""
import logging
from typing import Callable, Mapping, Optional

from app.core.errors import DuplicateInventoryItemError, RemoteFetchError, RemotePersistenceWarning
from app.services.catalog.bundled import BundledCatalog
from app.services.catalog.models import InventoryItem, MenuItem
from app.services.catalog.store import CatalogStore
from app.services.ordering.history import OrderHistory
from app.services.ordering.models import PersistStage
from app.services.persistence.background import BackgroundWriter
from app.services.persistence.base import RecordStore
from app.services.warnings import WarningSink

logger = logging.getLogger(__name__)


class CatalogManager:
    """Fetches the catalog and order history, and adds or edits catalog items."""

    def __init__(
        self,
        catalog: CatalogStore,
        history: OrderHistory,
        record_store: RecordStore,
        writer: BackgroundWriter,
        warnings: WarningSink,
        defaults: Optional[BundledCatalog] = None,
        seed_remote: bool = True,
        unsynced_demand: Optional[Callable[[], Mapping[str, float]]] = None,
    ):
        self.catalog = catalog
        self.history = history
        self.record_store = record_store
        self.writer = writer
        self.warnings = warnings
        self.defaults = defaults or BundledCatalog()
        self.seed_remote = seed_remote
        self.unsynced_demand = unsynced_demand

    def load_defaults(self) -> None:
        """Populate the catalog from the bundled dataset."""
        self.catalog.replace_menu(self.defaults.menu_items())
        self.catalog.replace_inventory(self.defaults.inventory_items())
        logger.info(
            f"[CATALOG] Bundled defaults loaded - {len(self.catalog.menu_items)} menu items, "
            f"{len(self.catalog.inventory_items)} inventory items"
        )

    async def refresh(self) -> None:
        """
        Re-fetch menu, inventory and orders from the backend.

        Each part is only replaced once it has been fetched successfully.

        Raises:
            RemoteFetchError: a fetch failed; the current snapshot is kept
        """
        try:
            menu_items = await self.record_store.fetch_menu_items()
        except Exception as e:
            raise RemoteFetchError("menu items", e) from e
        try:
            inventory_items = await self.record_store.fetch_inventory_items()
        except Exception as e:
            raise RemoteFetchError("inventory items", e) from e

        if not menu_items and not inventory_items:
            if self.seed_remote:
                await self._seed_backend()
            else:
                logger.warning("[CATALOG] Backend catalog is empty, keeping the local catalog")
        else:
            self.catalog.replace_menu(menu_items)
            self.catalog.replace_inventory(inventory_items)
            self._reapply_unsynced()

        try:
            orders = await self.record_store.fetch_orders()
        except Exception as e:
            raise RemoteFetchError("orders", e) from e
        local_only = self.history.merge(orders)

        logger.info(
            f"[CATALOG] Refreshed from backend - {len(self.catalog.menu_items)} menu items, "
            f"{len(self.catalog.inventory_items)} inventory items, {len(self.history)} orders "
            f"({local_only} not yet saved remotely)"
        )

    def _reapply_unsynced(self) -> None:
        """Decrement the fetched inventory by committed demand the backend has not seen."""
        if self.unsynced_demand is None:
            return
        pending = self.unsynced_demand()
        if pending:
            self.catalog.consume(pending)
            logger.info(
                f"[CATALOG] Re-applied unsaved order demand to {len(pending)} inventory items"
            )

    async def _seed_backend(self) -> None:
        """Write the current (cached or bundled) catalog into an empty backend."""
        if not self.catalog.menu_items and not self.catalog.inventory_items:
            self.load_defaults()
        logger.info("[CATALOG] Backend catalog is empty, seeding it from the local catalog")
        try:
            await self.record_store.insert_inventory_items(self.catalog.inventory_items)
            for item in self.catalog.menu_items:
                await self.record_store.upsert_menu_item(item)
        except Exception as e:
            raise RemoteFetchError("catalog seed", e) from e

    def upsert_menu_item(self, item: MenuItem) -> MenuItem:
        """Add or edit a menu item locally and save it in the background."""
        self.catalog.upsert_menu_item(item)
        logger.info(f"[CATALOG] Menu item saved locally - {item.id} ({item.name})")
        self.writer.spawn(
            self._persist(item.id, self.record_store.upsert_menu_item(item)),
            name=f"persist-menu-{item.id}",
        )
        return item

    def add_inventory_item(self, item: InventoryItem) -> InventoryItem:
        """
        Add an inventory item locally and save it in the background.

        Raises:
            DuplicateInventoryItemError: an item with this id already exists
        """
        if item.id in self.catalog.inventory:
            raise DuplicateInventoryItemError(item.id)
        self.catalog.add_inventory_item(item)
        logger.info(f"[CATALOG] Inventory item added locally - {item.id} ({item.name})")
        self.writer.spawn(
            self._persist(item.id, self.record_store.insert_inventory_items([item])),
            name=f"persist-inventory-new-{item.id}",
        )
        return item

    async def _persist(self, subject: str, write) -> bool:
        try:
            await write
        except Exception as e:
            logger.error(
                f"[CATALOG] Remote save failed - {subject}, Error: {type(e).__name__}: {str(e)}"
            )
            self.warnings.report(RemotePersistenceWarning(str(PersistStage.CATALOG), e, subject=subject))
            return False
        return True
