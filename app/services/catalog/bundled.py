"""Bundled default catalog."""
import logging
import yaml
from pathlib import Path
from typing import List, Optional, Tuple

from app.services.catalog.models import InventoryItem, MenuItem

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILE = Path(__file__).parent / "data" / "catalog.yaml"


class BundledCatalog:
    """Default menu and inventory loaded from a YAML file."""

    def __init__(self, catalog_file: Optional[str] = None):
        """Initialize with optional catalog file path."""
        path = Path(catalog_file) if catalog_file else DEFAULT_CATALOG_FILE
        if not path.exists():
            logger.warning(f"[CATALOG] Catalog file {path} not found, using bundled defaults")
            path = DEFAULT_CATALOG_FILE
        self.catalog_file = path
        self._loaded: Optional[Tuple[List[MenuItem], List[InventoryItem]]] = None

    def _load(self) -> Tuple[List[MenuItem], List[InventoryItem]]:
        """Load catalog from YAML file."""
        if self._loaded is None:
            with open(self.catalog_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            menu_items = [MenuItem(**item) for item in data.get("menu_items", [])]
            inventory_items = [
                InventoryItem(**item) for item in data.get("inventory_items", [])
            ]
            self._loaded = (menu_items, inventory_items)
        return self._loaded

    def menu_items(self) -> List[MenuItem]:
        """Fresh copies of the default menu items."""
        return [item.model_copy(deep=True) for item in self._load()[0]]

    def inventory_items(self) -> List[InventoryItem]:
        """Fresh copies of the default inventory items."""
        return [item.model_copy(deep=True) for item in self._load()[1]]
