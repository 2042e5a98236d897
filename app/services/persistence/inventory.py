"""Inventory persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.models import InventoryItem
from app.services.catalog import models


def to_domain_inventory_item(item: InventoryItem) -> models.InventoryItem:
    """Convert an ORM inventory row to the domain model."""
    return models.InventoryItem(
        id=item.id,
        name=item.name,
        # Rows written by other clients may have drifted below zero
        quantity=max(0.0, float(item.quantity or 0)),
        unit=item.unit,
        min_level=float(item.min_level or 0),
        category=item.category,
        wastage=max(0.0, float(item.wastages or 0)),
    )


class InventoryPersistenceService:
    """Service for persisting inventory data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_item(self, item_id: str) -> Optional[InventoryItem]:
        """Get inventory item by ID."""
        result = await self.db.execute(
            select(InventoryItem).where(InventoryItem.id == item_id)
        )
        return result.scalar_one_or_none()

    async def list_items(self) -> List[InventoryItem]:
        """List inventory items ordered by name."""
        result = await self.db.execute(select(InventoryItem).order_by(InventoryItem.name))
        return list(result.scalars().all())

    async def create_items(self, items: List[models.InventoryItem]) -> List[InventoryItem]:
        """Insert inventory items."""
        records = [
            InventoryItem(
                id=item.id,
                name=item.name,
                quantity=item.quantity,
                unit=item.unit,
                min_level=item.min_level,
                category=item.category,
                wastages=item.wastage,
            )
            for item in items
        ]
        self.db.add_all(records)
        await self.db.commit()
        return records

    async def update_item(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        wastage: Optional[float] = None,
    ) -> Optional[InventoryItem]:
        """Update quantity and/or wastage of an inventory item."""
        item = await self.get_item(item_id)
        if item:
            if quantity is not None:
                item.quantity = quantity
            if wastage is not None:
                item.wastages = wastage
            await self.db.commit()
            await self.db.refresh(item)
        return item
