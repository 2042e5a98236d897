"""Shopping cart for the active session."""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from app.core.errors import InvalidQuantityError
from app.services.catalog.models import MenuItem
from app.services.events import CART_CHANGED, EventBus
from app.services.ordering.models import CartEntry

logger = logging.getLogger(__name__)


def _coerce_quantity(quantity: object) -> int:
    """Accept whole numbers only; integral floats are normalised to int."""
    if isinstance(quantity, bool):
        raise InvalidQuantityError(quantity)
    if isinstance(quantity, int):
        return quantity
    if isinstance(quantity, float) and quantity.is_integer():
        return int(quantity)
    raise InvalidQuantityError(quantity)


class Cart:
    """
    Ordered mapping from menu item id to a cart entry.

    Entries keep the menu item as it was when first added, so later price
    edits in the catalog do not change an in-progress cart.
    """

    def __init__(self, events: Optional[EventBus] = None):
        self._entries: Dict[str, CartEntry] = {}
        self._events = events

    def _changed(self) -> None:
        if self._events is not None:
            self._events.emit(CART_CHANGED, self)

    @property
    def entries(self) -> List[CartEntry]:
        return list(self._entries.values())

    def get(self, item_id: str) -> Optional[CartEntry]:
        return self._entries.get(item_id)

    def add(self, menu_item: MenuItem) -> CartEntry:
        """Add one unit of a menu item."""
        existing = self._entries.get(menu_item.id)
        if existing:
            entry = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            entry = CartEntry(menu_item=menu_item.model_copy(deep=True), quantity=1)
        self._entries[menu_item.id] = entry
        logger.info(f"[CART] Added to cart - {menu_item.name} (x{entry.quantity})")
        self._changed()
        return entry

    def remove(self, item_id: str) -> None:
        """Remove an entry outright. Removing an absent id is a no-op."""
        if self._entries.pop(item_id, None) is not None:
            logger.info(f"[CART] Removed from cart - {item_id}")
            self._changed()

    def set_quantity(self, item_id: str, quantity: object) -> Optional[CartEntry]:
        """
        Replace an entry's quantity.

        A quantity of zero or less removes the entry. Ids not in the cart are
        ignored.

        Raises:
            InvalidQuantityError: quantity is not a whole number
        """
        quantity = _coerce_quantity(quantity)
        if quantity <= 0:
            self.remove(item_id)
            return None

        existing = self._entries.get(item_id)
        if existing is None:
            return None
        if existing.quantity == quantity:
            return existing

        entry = existing.model_copy(update={"quantity": quantity})
        self._entries[item_id] = entry
        self._changed()
        return entry

    def clear(self) -> None:
        """Empty the cart."""
        if self._entries:
            self._entries.clear()
            self._changed()

    def total(self) -> Decimal:
        """Sum of snapshotted price times quantity."""
        return sum((entry.line_total for entry in self._entries.values()), Decimal("0"))

    def restore(self, entries: List[CartEntry]) -> None:
        """Replace contents from a cached snapshot, merging duplicate ids."""
        self._entries.clear()
        for entry in entries:
            existing = self._entries.get(entry.menu_item.id)
            if existing:
                entry = existing.model_copy(update={"quantity": existing.quantity + entry.quantity})
            self._entries[entry.menu_item.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self):
        return iter(self.entries)
