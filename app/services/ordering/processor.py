"""Order commit orchestration."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from app.core.errors import EmptyCartError, InsufficientStockError, RemotePersistenceWarning
from app.services.catalog.store import CatalogStore
from app.services.ordering.cart import Cart
from app.services.ordering.history import OrderHistory
from app.services.ordering.models import (
    CommitStage,
    Order,
    OrderLineItem,
    PersistStage,
    StockCheckResult,
)
from app.services.ordering.stock import check_stock, required_quantities
from app.services.persistence.background import BackgroundWriter
from app.services.persistence.base import RecordStore
from app.services.warnings import WarningSink

logger = logging.getLogger(__name__)


class CommitResult:
    """
    Outcome of a commit that passed validation.

    ``success`` is always True: the order is committed locally as soon as
    this object exists. Whether the backend received it is reported later
    through ``stage``/``warning`` and the warning channel.
    """

    def __init__(self, order: Order):
        self.order = order
        self.stages: List[CommitStage] = [CommitStage.VALIDATING, CommitStage.COMMITTED]
        self.warning: Optional[RemotePersistenceWarning] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def success(self) -> bool:
        return True

    @property
    def stage(self) -> CommitStage:
        return self.stages[-1]

    def _advance(self, stage: CommitStage) -> None:
        self.stages.append(stage)

    @property
    def done(self) -> bool:
        return self.stage in (CommitStage.PERSISTED_OK, CommitStage.PERSISTED_WITH_WARNING)

    async def wait(self) -> CommitStage:
        """Wait for the remote writes to finish and return the final stage."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self.stage


class OrderProcessor:
    """Turns the cart into an order, applies it locally, then persists it."""

    def __init__(
        self,
        cart: Cart,
        catalog: CatalogStore,
        history: OrderHistory,
        record_store: RecordStore,
        writer: BackgroundWriter,
        warnings: WarningSink,
    ):
        self.cart = cart
        self.catalog = catalog
        self.history = history
        self.record_store = record_store
        self.writer = writer
        self.warnings = warnings
        # Per-order inventory demand the backend has not received yet
        self._unsynced: Dict[str, Dict[str, float]] = {}

    def unsynced_demand(self) -> Dict[str, float]:
        """
        Inventory demand applied locally but not yet written to the backend.

        Covers orders whose remote writes are still running and orders whose
        remote writes failed before every inventory decrement landed.
        """
        total: Dict[str, float] = {}
        for demand in self._unsynced.values():
            for item_id, amount in demand.items():
                total[item_id] = total.get(item_id, 0) + amount
        return total

    def check_stock(self) -> StockCheckResult:
        """Stock verdict for the current cart against the live inventory."""
        return check_stock(self.cart.entries, self.catalog.inventory)

    def commit(self) -> CommitResult:
        """
        Commit the cart as an order.

        Validation and local state changes happen before this returns; the
        remote writes run as a background task on the running event loop.

        Raises:
            EmptyCartError: the cart has no items
            InsufficientStockError: the inventory cannot fulfil the cart
        """
        # Validate
        if not self.cart:
            raise EmptyCartError()
        verdict = self.check_stock()
        if not verdict.sufficient:
            logger.info(
                f"[ORDERS] Commit rejected - insufficient stock: "
                f"{', '.join(verdict.insufficient_item_names)}"
            )
            raise InsufficientStockError(verdict.insufficient_item_names)

        # Compute
        entries = self.cart.entries
        order = Order(
            id=str(uuid4()),
            items=[
                OrderLineItem(
                    menu_item_id=entry.menu_item.id,
                    name=entry.menu_item.name,
                    price=entry.menu_item.price,
                    quantity=entry.quantity,
                )
                for entry in entries
            ],
            total=self.cart.total(),
            timestamp=datetime.now(timezone.utc),
        )
        demand = required_quantities(entries)

        # Apply local state
        self.history.append(order)
        if demand:
            self._unsynced[order.id] = dict(demand)
        self.catalog.consume(demand)
        self.cart.clear()
        result = CommitResult(order)
        logger.info(
            f"[ORDERS] Order committed locally - id: {order.id}, "
            f"{len(order.items)} lines, total: {order.total}"
        )

        # Persist remotely
        result._advance(CommitStage.PERSISTING)
        result._task = self.writer.spawn(
            self._persist(order, demand, result), name=f"persist-order-{order.id}"
        )
        return result

    async def _persist(
        self, order: Order, demand: Dict[str, float], result: CommitResult
    ) -> CommitStage:
        stage = PersistStage.ORDER
        try:
            await self.record_store.insert_order(order)

            stage = PersistStage.ORDER_ITEMS
            await self.record_store.insert_order_items(order.id, list(order.items))

            stage = PersistStage.INVENTORY
            for item_id, amount in demand.items():
                await self._decrement_remote(item_id, amount)
                self._unsynced.get(order.id, {}).pop(item_id, None)
            self._unsynced.pop(order.id, None)
        except Exception as e:
            logger.error(
                f"[ORDERS] Remote save failed - order: {order.id}, stage: {stage}, "
                f"Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            result.warning = RemotePersistenceWarning(str(stage), e, subject=order.id)
            result._advance(CommitStage.PERSISTED_WITH_WARNING)
            self.warnings.report(result.warning)
            return result.stage

        result._advance(CommitStage.PERSISTED_OK)
        logger.info(f"[ORDERS] Order saved to backend - id: {order.id}")
        return result.stage

    async def _decrement_remote(self, item_id: str, amount: float) -> None:
        # Read-then-write with no version check: two terminals committing at
        # once can lose one of the decrements.
        current = await self.record_store.get_inventory_quantity(item_id)
        if current is None:
            raise LookupError(f"Inventory item '{item_id}' not found in backend")
        updated = await self.record_store.update_inventory_item(
            item_id, quantity=max(0.0, current - amount)
        )
        if not updated:
            raise LookupError(f"Inventory item '{item_id}' not found in backend")
