"""Order persistence service."""
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.models import Order, OrderItem
from app.services.ordering import models


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_domain_order(order: Order) -> models.Order:
    """Convert an ORM order with loaded items to the domain model."""
    return models.Order(
        id=order.id,
        items=[
            models.OrderLineItem(
                menu_item_id=item.menu_item_id,
                name=item.name,
                price=item.price,
                quantity=item.quantity,
            )
            for item in sorted(order.items, key=lambda i: i.id)
        ],
        total=order.total,
        timestamp=_as_utc(order.timestamp),
    )


class OrderPersistenceService:
    """Service for persisting order data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(self, order: models.Order) -> Order:
        """Create the order record."""
        record = Order(
            id=order.id,
            total=order.total,
            timestamp=order.timestamp,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID with items."""
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
        )
        return result.scalar_one_or_none()

    async def add_order_items(
        self, order_id: str, items: List[models.OrderLineItem]
    ) -> List[OrderItem]:
        """Add line items to an order."""
        order = await self.get_order_by_id(order_id)
        if not order:
            raise ValueError(f"Order {order_id} not found")

        order_items = []
        for item in items:
            order_item = OrderItem(
                order_id=order_id,
                menu_item_id=item.menu_item_id,
                name=item.name,
                price=item.price,
                quantity=item.quantity,
            )
            order_items.append(order_item)
            order.items.append(order_item)

        await self.db.commit()
        for item in order_items:
            await self.db.refresh(item)
        return order_items

    async def list_orders(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Order]:
        """List orders with items, oldest first, optionally within [start, end]."""
        query = select(Order).options(selectinload(Order.items)).order_by(Order.timestamp)
        if start is not None:
            query = query.where(Order.timestamp >= start)
        if end is not None:
            query = query.where(Order.timestamp <= end)
        result = await self.db.execute(query)
        return list(result.scalars().all())
