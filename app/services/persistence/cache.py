"""Local snapshot cache (best-effort secondary persistence)."""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class CacheKeys:
    """Keys under which state snapshots are stored."""

    MENU = "menu"
    INVENTORY = "inventory"
    ORDERS = "orders"
    AGGREGATES = "aggregates"
    CART = "cart"


class SnapshotCache(ABC):
    """Key-value capability for JSON-serialisable snapshots."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, None if absent or unreadable."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Overwrite a cached value."""
        pass


class MemoryCache(SnapshotCache):
    """Process-local cache, used when no cache directory is configured."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # Stored serialised so callers never share mutable state with the cache
        self._data[key] = json.dumps(value)


class JsonFileCache(SnapshotCache):
    """One JSON file per key inside a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[CACHE] Ignoring unreadable snapshot '{key}': {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f)
            tmp_path.replace(path)
        except OSError as e:
            logger.warning(f"[CACHE] Failed to write snapshot '{key}': {e}")
