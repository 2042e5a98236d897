"""Stock sufficiency checks."""
from typing import Dict, Iterable, List, Mapping

from app.services.catalog.models import InventoryItem
from app.services.ordering.models import CartEntry, StockCheckResult


def required_quantities(entries: Iterable[CartEntry]) -> Dict[str, float]:
    """
    Aggregate ingredient demand across cart entries.

    Each requirement is multiplied by the entry quantity and summed per
    inventory item id, in order of first appearance.
    """
    demand: Dict[str, float] = {}
    for entry in entries:
        for requirement in entry.menu_item.ingredients:
            demand[requirement.inventory_item_id] = (
                demand.get(requirement.inventory_item_id, 0)
                + requirement.quantity * entry.quantity
            )
    return demand


def _requirement_names(entries: Iterable[CartEntry]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for entry in entries:
        for requirement in entry.menu_item.ingredients:
            if requirement.name and requirement.inventory_item_id not in names:
                names[requirement.inventory_item_id] = requirement.name
    return names


def check_stock(
    entries: Iterable[CartEntry], inventory: Mapping[str, InventoryItem]
) -> StockCheckResult:
    """
    Check whether the inventory can fulfil the given cart entries.

    An item is short when it is missing from the inventory or holds less
    than the aggregate demand. Not cached: call again after any change to
    the cart or inventory.
    """
    entries = list(entries)
    demand = required_quantities(entries)
    if not demand:
        return StockCheckResult(sufficient=True)

    fallback_names = _requirement_names(entries)
    short: List[str] = []
    for item_id, required in demand.items():
        item = inventory.get(item_id)
        if item is not None and item.quantity >= required:
            continue
        name = item.name if item is not None else fallback_names.get(item_id, item_id)
        if name not in short:
            short.append(name)

    return StockCheckResult(sufficient=not short, insufficient_item_names=short)
