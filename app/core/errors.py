"""Domain errors and warnings."""
from typing import List, Optional


class PosError(Exception):
    """Base class for point-of-sale domain errors."""


class EmptyCartError(PosError):
    """Commit attempted with no items in the cart."""

    def __init__(self, message: str = "Cannot place an order with an empty cart"):
        super().__init__(message)


class InsufficientStockError(PosError):
    """Commit blocked because some ingredients are short."""

    def __init__(self, short_items: List[str]):
        self.short_items = list(short_items)
        super().__init__(
            f"Insufficient stock for: {', '.join(self.short_items)}"
        )


class NegativeQuantityError(PosError, ValueError):
    """A negative inventory quantity or wastage amount was requested."""

    def __init__(self, quantity: float):
        self.quantity = quantity
        super().__init__(f"Quantity cannot be negative (got {quantity})")


class InvalidQuantityError(PosError, ValueError):
    """A cart quantity that is not a whole number."""

    def __init__(self, quantity: object):
        self.quantity = quantity
        super().__init__(f"Cart quantity must be a whole number (got {quantity!r})")


class UnknownMenuItemError(PosError, LookupError):
    """Menu item id not present in the catalog."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Menu item '{item_id}' not found")


class UnknownInventoryItemError(PosError, LookupError):
    """Inventory item id not present in the inventory snapshot."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Inventory item '{item_id}' not found")


class RemoteFetchError(PosError):
    """Loading catalog, inventory or orders from the backend failed."""

    def __init__(self, source: str, cause: Optional[BaseException] = None):
        self.source = source
        self.cause = cause
        detail = f": {type(cause).__name__}: {cause}" if cause else ""
        super().__init__(f"Failed to fetch {source} from backend{detail}")


class RemotePersistenceWarning(UserWarning):
    """
    A remote write failed after local state was already applied.

    Reported through the warning channel, never raised to the caller that
    triggered the write.
    """

    def __init__(self, stage: str, cause: BaseException, subject: Optional[str] = None):
        self.stage = stage
        self.cause = cause
        self.subject = subject
        super().__init__(
            f"Processed locally, but saving to the backend failed at stage "
            f"'{stage}': {type(cause).__name__}: {cause}"
        )


class DuplicateInventoryItemError(PosError, ValueError):
    """An inventory item with this id already exists."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Inventory item '{item_id}' already exists")
