"""Core data models for Stock Tracker."""

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Ids are printed into scannable codes. 512 characters of up to 4 UTF-8 bytes
# each stay within the byte capacity of a QR code at medium error correction.
MAX_ID_LENGTH = 512


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def coerce_instant(value: Any) -> datetime | None:
    """Convert a stored date value into an aware UTC datetime.

    Accepts datetimes, dates and ISO 8601 strings (including a trailing
    ``Z``). Naive values are taken as UTC. Anything that cannot be read as
    an instant becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Ignoring unparseable date %r", value)
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    logger.debug("Ignoring non-date value %r", value)
    return None


class ItemStatus(str, Enum):
    """Lifecycle status of an inventory item."""

    AVAILABLE = "Available"
    CHECKED_OUT = "Checked Out"
    IN_MAINTENANCE = "In Maintenance"
    LOW_STOCK = "Low Stock"
    WASTED = "Wasted"


class InventoryItem(BaseModel):
    """A tracked inventory item.

    Input accepts snake_case field names as well as the camelCase keys of
    the browser storage format (``reorderThreshold``, ``expiryDate``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()), min_length=1, max_length=MAX_ID_LENGTH
    )
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)
    status: ItemStatus = ItemStatus.AVAILABLE
    reorder_threshold: int | None = Field(default=None, ge=0)
    reorder_quantity: int | None = Field(default=None, ge=0)
    expiry_date: datetime | None = None
    next_maintenance_date: datetime | None = None
    date_added: datetime | None = Field(default_factory=utc_now)
    location: str | None = None
    supplier: str | None = None
    image_url: str | None = None

    @field_validator("expiry_date", "next_maintenance_date", "date_added", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> datetime | None:
        return coerce_instant(v)

    @property
    def is_out_of_stock(self) -> bool:
        """Check if no units are left."""
        return self.quantity == 0


class AlertKind(str, Enum):
    """Kinds of derived alerts."""

    LOW_STOCK = "low_stock"
    EXPIRING_SOON = "expiring_soon"
    MAINTENANCE_DUE = "maintenance_due"


class Alert(BaseModel):
    """A derived notice that an item needs attention. Never persisted."""

    kind: AlertKind
    item_id: str
    item_name: str
    detail: str
    due_at: datetime | None = None


class DashboardStats(BaseModel):
    """Headline figures for the dashboard."""

    total_items: int = 0
    total_quantity: int = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0


class ItemUpdate(BaseModel):
    """Partial record produced by parsing a free-text command.

    Only the fields the command mentions are set.
    """

    name: str | None = Field(default=None, min_length=1)
    type: str | None = Field(default=None, min_length=1)
    quantity: int | None = Field(default=None, ge=0)
    status: ItemStatus | None = None
    location: str | None = None
    supplier: str | None = None

    def changes(self) -> dict[str, Any]:
        """Fields explicitly present on this update."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ChatTurn(BaseModel):
    """One earlier message in an investigator conversation."""

    role: Literal["user", "model"]
    content: str


class ReportKind(str, Enum):
    """Reports the assistant can generate."""

    PURCHASE_ORDERS = "purchase_orders"
    WASTAGE = "wastage"
    INVENTORY_FORECAST = "inventory_forecast"
    ANALYTICS = "analytics"
