"""Inventory management for Stock Tracker."""

import logging
from datetime import datetime
from typing import Any
from uuid import uuid4

from .item_store import InMemoryItemStore, ItemStore
from .models import InventoryItem, ItemStatus, ItemUpdate, utc_now

logger = logging.getLogger(__name__)


class ItemNotFoundError(Exception):
    """Raised when an item id is not in the store."""


class InventoryManager:
    """Creates, updates and removes items through an item store."""

    def __init__(self, store: ItemStore | None = None):
        self.store = store if store is not None else InMemoryItemStore()

    def add_item(
        self,
        name: str,
        type: str,
        quantity: int = 0,
        status: ItemStatus = ItemStatus.AVAILABLE,
        reorder_threshold: int | None = None,
        reorder_quantity: int | None = None,
        expiry_date: datetime | None = None,
        next_maintenance_date: datetime | None = None,
        location: str | None = None,
        supplier: str | None = None,
        image_url: str | None = None,
    ) -> InventoryItem:
        """Add an item to inventory.

        Args:
            name: Display name
            type: Item type, e.g. "Electronics"
            quantity: Units in stock
            status: Initial status
            reorder_threshold: Alert when quantity drops to this
            reorder_quantity: Units to order when restocking
            expiry_date: Optional expiry date
            next_maintenance_date: Optional next service date
            location: Where the item is kept
            supplier: Who supplies it
            image_url: Optional picture

        Returns:
            The created InventoryItem
        """
        item = InventoryItem(
            id=str(uuid4()),
            name=name,
            type=type,
            quantity=quantity,
            status=status,
            reorder_threshold=reorder_threshold,
            reorder_quantity=reorder_quantity,
            expiry_date=expiry_date,
            next_maintenance_date=next_maintenance_date,
            date_added=utc_now(),
            location=location,
            supplier=supplier,
            image_url=image_url,
        )
        self.store.upsert(item)
        logger.info("Added item %s (%s)", item.id, item.name)
        return item

    def get_item(self, item_id: str) -> InventoryItem:
        """Get an item by id.

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.store.get_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(f"Inventory item not found: {item_id}")
        return item

    def get_inventory(
        self,
        status: ItemStatus | None = None,
        type: str | None = None,
    ) -> list[InventoryItem]:
        """Get inventory items with optional filters.

        Args:
            status: Filter by status
            type: Filter by item type (case-insensitive)

        Returns:
            List of matching inventory items
        """
        inventory = self.store.list()

        if status:
            inventory = [i for i in inventory if i.status == status]
        if type:
            inventory = [i for i in inventory if i.type.lower() == type.lower()]

        return inventory

    def update_item(self, item_id: str, **fields: Any) -> InventoryItem:
        """Update editable item fields.

        Fields passed as None are left unchanged. The id cannot be changed.

        Returns:
            Updated item

        Raises:
            ItemNotFoundError: If item not found
            pydantic.ValidationError: If the result is not a valid item
        """
        item = self.get_item(item_id)
        changes = {k: v for k, v in fields.items() if v is not None and k != "id"}
        if not changes:
            return item

        updated = InventoryItem.model_validate({**item.model_dump(), **changes})
        self.store.upsert(updated)
        logger.info("Updated item %s: %s", item_id, ", ".join(sorted(changes)))
        return updated

    def apply_update(self, item_id: str, update: ItemUpdate) -> InventoryItem:
        """Merge the fields set on a parsed update into an item."""
        return self.update_item(item_id, **update.changes())

    def adjust_quantity(self, item_id: str, delta: int) -> InventoryItem:
        """Add to or subtract from an item's quantity, never going below zero."""
        item = self.get_item(item_id)
        return self.update_item(item_id, quantity=max(0, item.quantity + delta))

    def remove_item(self, item_id: str) -> InventoryItem:
        """Remove an item from inventory.

        Returns:
            The removed item

        Raises:
            ItemNotFoundError: If item not found
        """
        item = self.get_item(item_id)
        self.store.delete(item_id)
        logger.info("Removed item %s (%s)", item_id, item.name)
        return item
