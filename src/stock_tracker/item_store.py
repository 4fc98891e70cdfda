"""Item persistence for Stock Tracker.

This module provides the item store interface with in-memory, JSON (default)
and SQLite backends. Use create_item_store() to get the backend named in
configuration.
"""

import json
import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .models import InventoryItem

logger = logging.getLogger(__name__)


class BackendType(str, Enum):
    """Item storage backend types."""

    MEMORY = "memory"
    JSON = "json"
    SQLITE = "sqlite"


class ItemStore(Protocol):
    """Protocol defining the item store interface."""

    def get_by_id(self, item_id: str) -> InventoryItem | None: ...
    def list(self) -> list[InventoryItem]: ...
    def upsert(self, item: InventoryItem) -> None: ...
    def delete(self, item_id: str) -> bool: ...


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for our data types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def load_items(records: list[Any]) -> list[InventoryItem]:
    """Validate raw records, skipping any that are not valid items."""
    items = []
    for record in records:
        try:
            items.append(InventoryItem.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping invalid inventory record: %s", e.errors()[0]["msg"])
    return items


class InMemoryItemStore:
    """Keeps items in a dict, in insertion order."""

    def __init__(self, items: list[InventoryItem] | None = None):
        self._items: dict[str, InventoryItem] = {}
        for item in items or []:
            self.upsert(item)

    def get_by_id(self, item_id: str) -> InventoryItem | None:
        return self._items.get(item_id)

    def list(self) -> list[InventoryItem]:
        return list(self._items.values())

    def upsert(self, item: InventoryItem) -> None:
        self._items[item.id] = item

    def delete(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None


class JSONItemStore:
    """Manages JSON file persistence for inventory items."""

    def __init__(self, data_dir: Path | None = None):
        """Initialize item store.

        Args:
            data_dir: Directory for data files. Defaults to ./data
        """
        self.data_dir = data_dir or Path.cwd() / "data"
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _inventory_path(self) -> Path:
        """Path to inventory file."""
        return self.data_dir / "inventory.json"

    def _load(self) -> list[InventoryItem]:
        path = self._inventory_path()
        if not path.exists():
            return []

        with open(path) as f:
            data = json.load(f)

        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a list of items", path)
            return []
        return load_items(data)

    def _save(self, items: list[InventoryItem]) -> None:
        path = self._inventory_path()

        with open(path, "w") as f:
            json.dump([i.model_dump() for i in items], f, cls=JSONEncoder, indent=2)

    def get_by_id(self, item_id: str) -> InventoryItem | None:
        """Get a single item.

        Args:
            item_id: Item id

        Returns:
            InventoryItem or None
        """
        for item in self._load():
            if item.id == item_id:
                return item
        return None

    def list(self) -> list[InventoryItem]:
        """Load all items in stored order."""
        return self._load()

    def upsert(self, item: InventoryItem) -> None:
        """Insert an item or replace the one with the same id."""
        items = self._load()
        for i, existing in enumerate(items):
            if existing.id == item.id:
                items[i] = item
                break
        else:
            items.append(item)
        self._save(items)

    def delete(self, item_id: str) -> bool:
        """Delete an item.

        Returns:
            True if an item was removed
        """
        items = self._load()
        remaining = [i for i in items if i.id != item_id]
        if len(remaining) == len(items):
            return False
        self._save(remaining)
        return True


def create_item_store(
    backend: BackendType = BackendType.JSON,
    data_dir: Path | None = None,
    db_path: Path | None = None,
) -> ItemStore:
    """Create an item store with the specified backend.

    Args:
        backend: Which backend to use (memory, json or sqlite)
        data_dir: Directory for data files (used by the JSON backend, and as
                  base path for SQLite if db_path is not specified)
        db_path: Path to SQLite database file (only used by SQLite backend)

    Returns:
        An InMemoryItemStore, JSONItemStore or SQLiteItemStore instance
    """
    if backend == BackendType.MEMORY:
        return InMemoryItemStore()
    if backend == BackendType.SQLITE:
        from .sqlite_store import SQLiteItemStore

        if db_path is None and data_dir is not None:
            db_path = data_dir / "inventory.db"

        return SQLiteItemStore(db_path=db_path)
    return JSONItemStore(data_dir=data_dir)
