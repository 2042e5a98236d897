"""Manual inventory adjustments."""
import asyncio
import logging
from numbers import Real

from app.core.errors import NegativeQuantityError, RemotePersistenceWarning
from app.services.catalog.models import InventoryItem
from app.services.catalog.store import CatalogStore
from app.services.ordering.models import PersistStage
from app.services.persistence.background import BackgroundWriter
from app.services.persistence.base import RecordStore
from app.services.warnings import WarningSink

logger = logging.getLogger(__name__)


def _validate_amount(amount: float) -> float:
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise TypeError(f"Quantity must be a number (got {amount!r})")
    if amount < 0:
        raise NegativeQuantityError(amount)
    return float(amount)


class InventoryMutator:
    """
    Restock, correction and wastage bookkeeping outside the order flow.

    Local values are updated first and kept even when the backend update
    fails; the failure becomes a persistence warning.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        record_store: RecordStore,
        writer: BackgroundWriter,
        warnings: WarningSink,
    ):
        self.catalog = catalog
        self.record_store = record_store
        self.writer = writer
        self.warnings = warnings

    def set_quantity(self, item_id: str, new_quantity: float) -> InventoryItem:
        """
        Set an item's stock level.

        Raises:
            NegativeQuantityError: new_quantity is below zero
            UnknownInventoryItemError: no such inventory item
        """
        quantity = _validate_amount(new_quantity)

        item = self.catalog.set_quantity(item_id, quantity)
        logger.info(f"[INVENTORY] Quantity set - {item_id}: {quantity} {item.unit}")
        self._spawn_update(item_id, quantity=quantity)
        return item

    def record_wastage(self, item_id: str, amount: float) -> InventoryItem:
        """
        Add to an item's wastage counter. Stock quantity is left untouched.

        Raises:
            NegativeQuantityError: amount is below zero
            UnknownInventoryItemError: no such inventory item
        """
        amount = _validate_amount(amount)
        current = self.catalog.get_inventory_item(item_id)

        item = self.catalog.set_wastage(item_id, current.wastage + amount)
        logger.info(f"[INVENTORY] Wastage recorded - {item_id}: +{amount} (total {item.wastage})")
        self._spawn_update(item_id, wastage=item.wastage)
        return item

    def _spawn_update(self, item_id: str, **fields: float) -> asyncio.Task:
        return self.writer.spawn(
            self._persist(item_id, fields), name=f"persist-inventory-{item_id}"
        )

    async def _persist(self, item_id: str, fields: dict) -> bool:
        try:
            updated = await self.record_store.update_inventory_item(item_id, **fields)
            if not updated:
                raise LookupError(f"Inventory item '{item_id}' not found in backend")
        except Exception as e:
            logger.error(
                f"[INVENTORY] Remote update failed - {item_id}, "
                f"Error: {type(e).__name__}: {str(e)}"
            )
            self.warnings.report(
                RemotePersistenceWarning(str(PersistStage.INVENTORY_UPDATE), e, subject=item_id)
            )
            return False
        return True
