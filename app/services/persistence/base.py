"""Remote record store interface."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from app.services.catalog.models import InventoryItem, MenuItem
from app.services.ordering.models import Order, OrderLineItem


class RecordStore(ABC):
    """
    Abstract base class for the backend holding menu, inventory and orders.

    Every call is an independent write or read; no multi-statement
    transaction spans two calls.
    """

    @abstractmethod
    async def fetch_menu_items(self) -> List[MenuItem]:
        """Get all menu items with their ingredient requirements."""
        pass

    @abstractmethod
    async def fetch_inventory_items(self) -> List[InventoryItem]:
        """Get all inventory items."""
        pass

    @abstractmethod
    async def fetch_orders(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Order]:
        """Get orders with their line items, optionally within a timestamp range."""
        pass

    @abstractmethod
    async def insert_order(self, order: Order) -> None:
        """Insert the order record (without line items)."""
        pass

    @abstractmethod
    async def insert_order_items(self, order_id: str, items: List[OrderLineItem]) -> None:
        """Insert line items for an already stored order."""
        pass

    @abstractmethod
    async def get_inventory_quantity(self, item_id: str) -> Optional[float]:
        """Get the stored quantity of an inventory item, None if absent."""
        pass

    @abstractmethod
    async def update_inventory_item(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        wastage: Optional[float] = None,
    ) -> bool:
        """Update an inventory item by id. Returns False if it does not exist."""
        pass

    @abstractmethod
    async def insert_inventory_items(self, items: List[InventoryItem]) -> None:
        """Insert new inventory items."""
        pass

    @abstractmethod
    async def upsert_menu_item(self, item: MenuItem) -> None:
        """Insert or replace a menu item and its ingredient requirements."""
        pass
