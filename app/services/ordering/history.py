"""Committed order history and lifetime aggregates."""
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from app.services.events import ORDERS_CHANGED, EventBus
from app.services.ordering.models import Aggregates, Order


class OrderHistory:
    """Append-only list of orders with running totals."""

    def __init__(self, events: Optional[EventBus] = None):
        self._orders: List[Order] = []
        self._aggregates = Aggregates()
        self._events = events

    def _emit(self) -> None:
        if self._events is not None:
            self._events.emit(ORDERS_CHANGED, self)

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def aggregates(self) -> Aggregates:
        return self._aggregates.model_copy()

    @property
    def total_orders(self) -> int:
        return self._aggregates.total_orders

    @property
    def total_revenue(self) -> Decimal:
        return self._aggregates.total_revenue

    def append(self, order: Order) -> None:
        """Record a committed order and bump the aggregates."""
        self._orders.append(order)
        self._aggregates = Aggregates(
            total_orders=self._aggregates.total_orders + 1,
            total_revenue=self._aggregates.total_revenue + order.total,
        )
        self._emit()

    def replace(self, orders: Iterable[Order]) -> None:
        """Load a full history and recompute aggregates from it."""
        self._orders = sorted(orders, key=lambda o: o.timestamp)
        self._aggregates = Aggregates(
            total_orders=len(self._orders),
            total_revenue=sum((o.total for o in self._orders), Decimal("0")),
        )
        self._emit()

    def restore_aggregates(self, aggregates: Aggregates) -> None:
        """Seed counters from a cached snapshot when no history is available."""
        self._aggregates = aggregates

    def merge(self, remote_orders: Iterable[Order]) -> int:
        """
        Merge orders fetched from the backend with local ones by id.

        Local orders the backend never received are kept. Returns the number
        of local-only orders.
        """
        merged: Dict[str, Order] = {order.id: order for order in remote_orders}
        local_only = 0
        for order in self._orders:
            if order.id not in merged:
                merged[order.id] = order
                local_only += 1
        self.replace(merged.values())
        return local_only

    def orders_between(self, start: datetime, end: datetime) -> List[Order]:
        """Orders with start <= timestamp <= end."""
        return [order for order in self._orders if start <= order.timestamp <= end]

    def orders_on(self, day: date) -> List[Order]:
        """Orders placed on a calendar day (UTC)."""
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        return self.orders_between(start, end)

    def __len__(self) -> int:
        return len(self._orders)
