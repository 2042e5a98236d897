"""In-memory catalog and inventory snapshot."""
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from app.core.errors import UnknownInventoryItemError, UnknownMenuItemError
from app.services.catalog.models import InventoryItem, MenuItem, StockLevel
from app.services.events import INVENTORY_CHANGED, MENU_CHANGED, EventBus

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Current known menu items and inventory quantities.

    Mutated in place by the order processor and the inventory mutator. The
    service runs on one event loop and none of these methods await, so no
    locking is needed.
    """

    def __init__(self, events: Optional[EventBus] = None):
        self._menu: Dict[str, MenuItem] = {}
        self._inventory: Dict[str, InventoryItem] = {}
        self._events = events

    def _emit(self, event_name: str) -> None:
        if self._events is not None:
            self._events.emit(event_name, self)

    # Menu

    @property
    def menu_items(self) -> List[MenuItem]:
        return list(self._menu.values())

    @property
    def categories(self) -> List[str]:
        """Menu categories in first-seen order."""
        seen: List[str] = []
        for item in self._menu.values():
            if item.category.value not in seen:
                seen.append(item.category.value)
        return seen

    def get_menu_item(self, item_id: str) -> MenuItem:
        item = self._menu.get(item_id)
        if item is None:
            raise UnknownMenuItemError(item_id)
        return item

    def replace_menu(self, items: Iterable[MenuItem]) -> None:
        self._menu = {item.id: item for item in items}
        self._emit(MENU_CHANGED)

    def upsert_menu_item(self, item: MenuItem) -> None:
        self._menu[item.id] = item
        self._emit(MENU_CHANGED)

    # Inventory

    @property
    def inventory(self) -> Mapping[str, InventoryItem]:
        return self._inventory

    @property
    def inventory_items(self) -> List[InventoryItem]:
        return list(self._inventory.values())

    def get_inventory_item(self, item_id: str) -> InventoryItem:
        item = self._inventory.get(item_id)
        if item is None:
            raise UnknownInventoryItemError(item_id)
        return item

    def replace_inventory(self, items: Iterable[InventoryItem]) -> None:
        self._inventory = {item.id: item for item in items}
        self._emit(INVENTORY_CHANGED)

    def add_inventory_item(self, item: InventoryItem) -> None:
        self._inventory[item.id] = item
        self._emit(INVENTORY_CHANGED)

    def set_quantity(self, item_id: str, quantity: float) -> InventoryItem:
        item = self.get_inventory_item(item_id)
        item.quantity = quantity
        self._emit(INVENTORY_CHANGED)
        return item

    def set_wastage(self, item_id: str, wastage: float) -> InventoryItem:
        item = self.get_inventory_item(item_id)
        item.wastage = wastage
        self._emit(INVENTORY_CHANGED)
        return item

    def consume(self, demand: Mapping[str, float]) -> Dict[str, float]:
        """
        Decrement quantities by the given demand, clamping at zero.

        Unknown ids are skipped. Returns the new quantity of every item touched.
        """
        updated: Dict[str, float] = {}
        for item_id, amount in demand.items():
            item = self._inventory.get(item_id)
            if item is None:
                logger.warning(f"[CATALOG] Cannot decrement unknown inventory item {item_id}")
                continue
            item.quantity = max(0.0, item.quantity - amount)
            updated[item_id] = item.quantity
        if updated:
            self._emit(INVENTORY_CHANGED)
        return updated

    def low_stock_items(self) -> List[InventoryItem]:
        """Items at or below their minimum level."""
        return [item for item in self._inventory.values() if item.stock_level != StockLevel.OK]
