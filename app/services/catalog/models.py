"""Catalog models."""
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MenuCategory(str, Enum):
    """Menu sections."""

    MAIN = "main"
    SIDE = "side"
    DRINK = "drink"
    DESSERT = "dessert"

    def __str__(self) -> str:
        return self.value


class StockLevel(str, Enum):
    """Low-stock signal for an inventory item."""

    OK = "ok"
    MEDIUM = "medium"
    LOW = "low"

    def __str__(self) -> str:
        return self.value


class IngredientRequirement(BaseModel):
    """Amount of one inventory item consumed per unit of a menu item sold."""

    inventory_item_id: str
    quantity: float = Field(gt=0)
    name: Optional[str] = None  # Display fallback when the inventory item is missing


class MenuItem(BaseModel):
    """Sellable menu item."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(ge=0, decimal_places=2)
    category: MenuCategory
    ingredients: List[IngredientRequirement] = []
    image_url: Optional[str] = None


class InventoryItem(BaseModel):
    """Stocked ingredient. Quantity and wastage are never negative."""

    model_config = ConfigDict(validate_assignment=True)

    id: str
    name: str
    quantity: float = Field(ge=0)
    unit: str = "pieces"
    min_level: float = Field(default=0, ge=0)
    category: str = "other"
    wastage: float = Field(default=0, ge=0)

    @property
    def stock_level(self) -> StockLevel:
        """Classify the item against its minimum level."""
        if self.quantity <= self.min_level * 0.5:
            return StockLevel.LOW
        if self.quantity <= self.min_level:
            return StockLevel.MEDIUM
        return StockLevel.OK
