"""SQLAlchemy-backed record store."""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.catalog.models import InventoryItem, MenuItem
from app.services.ordering.models import Order, OrderLineItem
from app.services.persistence.base import RecordStore
from app.services.persistence.catalog import CatalogPersistenceService
from app.services.persistence.inventory import (
    InventoryPersistenceService,
    to_domain_inventory_item,
)
from app.services.persistence.orders import OrderPersistenceService, to_domain_order

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    """
    Record store over the relational backend.

    Opens a fresh session for every call so background writes never share
    a session with a request handler.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def fetch_menu_items(self) -> List[MenuItem]:
        async with self.session_factory() as db:
            return await CatalogPersistenceService(db).list_menu_items()

    async def fetch_inventory_items(self) -> List[InventoryItem]:
        async with self.session_factory() as db:
            records = await InventoryPersistenceService(db).list_items()
            return [to_domain_inventory_item(record) for record in records]

    async def fetch_orders(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Order]:
        async with self.session_factory() as db:
            records = await OrderPersistenceService(db).list_orders(start, end)
            return [to_domain_order(record) for record in records]

    async def insert_order(self, order: Order) -> None:
        async with self.session_factory() as db:
            await OrderPersistenceService(db).create_order(order)
        logger.debug(f"[STORE] Order inserted - {order.id}")

    async def insert_order_items(self, order_id: str, items: List[OrderLineItem]) -> None:
        async with self.session_factory() as db:
            await OrderPersistenceService(db).add_order_items(order_id, items)
        logger.debug(f"[STORE] {len(items)} order items inserted for order {order_id}")

    async def get_inventory_quantity(self, item_id: str) -> Optional[float]:
        async with self.session_factory() as db:
            item = await InventoryPersistenceService(db).get_item(item_id)
            return float(item.quantity) if item else None

    async def update_inventory_item(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        wastage: Optional[float] = None,
    ) -> bool:
        async with self.session_factory() as db:
            item = await InventoryPersistenceService(db).update_item(
                item_id, quantity=quantity, wastage=wastage
            )
            return item is not None

    async def insert_inventory_items(self, items: List[InventoryItem]) -> None:
        async with self.session_factory() as db:
            await InventoryPersistenceService(db).create_items(items)

    async def upsert_menu_item(self, item: MenuItem) -> None:
        async with self.session_factory() as db:
            await CatalogPersistenceService(db).upsert_menu_item(item)
