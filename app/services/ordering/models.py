"""Order models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.services.catalog.models import MenuItem


class CartEntry(BaseModel):
    """Menu item snapshot plus the quantity requested."""

    model_config = ConfigDict(frozen=True)

    menu_item: MenuItem
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.menu_item.price * self.quantity


class OrderLineItem(BaseModel):
    """Point-in-time snapshot of a menu item inside an order."""

    model_config = ConfigDict(frozen=True)

    menu_item_id: str
    name: str
    price: Decimal
    quantity: int = Field(ge=1)


class Order(BaseModel):
    """Committed order. The total is computed once at commit time."""

    model_config = ConfigDict(frozen=True)

    id: str
    items: List[OrderLineItem]
    total: Decimal
    timestamp: datetime


class StockCheckResult(BaseModel):
    """Verdict of the stock sufficiency check."""

    sufficient: bool
    insufficient_item_names: List[str] = []


class Aggregates(BaseModel):
    """Lifetime order counters."""

    total_orders: int = 0
    total_revenue: Decimal = Decimal("0")


class CommitStage(str, Enum):
    """Stages of an order commit."""

    IDLE = "idle"
    VALIDATING = "validating"
    COMMITTED = "committed"  # Local state applied
    PERSISTING = "persisting"
    PERSISTED_OK = "persisted_ok"
    PERSISTED_WITH_WARNING = "persisted_with_warning"

    def __str__(self) -> str:
        return self.value


class PersistStage(str, Enum):
    """Remote write stages reported in persistence warnings."""

    ORDER = "order"
    ORDER_ITEMS = "order_items"
    INVENTORY = "inventory"
    INVENTORY_UPDATE = "inventory_update"
    CATALOG = "catalog"

    def __str__(self) -> str:
        return self.value
