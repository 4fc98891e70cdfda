"""Alert derivation for low stock, expiry and maintenance.

Every function here is pure: it reads a snapshot of items and an instant
and returns new values. Callers re-run them whenever the collection
changes.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from .models import (
    Alert,
    AlertKind,
    DashboardStats,
    InventoryItem,
    ItemStatus,
    coerce_instant,
    utc_now,
)

DEFAULT_HORIZON_DAYS = 30


def _window(now: datetime | None, horizon_days: int) -> tuple[datetime, datetime]:
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be non-negative, got {horizon_days}")
    start = coerce_instant(now) if now is not None else None
    if start is None:
        start = utc_now()
    return start, start + timedelta(days=horizon_days)


def _due_within(value: object, start: datetime, end: datetime) -> datetime | None:
    """Return the instant when it falls in (start, end], else None."""
    when = coerce_instant(value)
    if when is not None and start < when <= end:
        return when
    return None


def is_low_stock(item: InventoryItem) -> bool:
    """Check if an item should raise a low-stock alert.

    A ``Low Stock`` status always counts. Otherwise the item needs a
    reorder threshold and a positive quantity at or below it; an empty
    shelf on its own is not low stock.
    """
    if item.status == ItemStatus.LOW_STOCK:
        return True
    threshold = item.reorder_threshold
    return threshold is not None and 0 < item.quantity <= threshold


def is_expiring_soon(
    item: InventoryItem,
    now: datetime | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> bool:
    """Check if an item expires after now and within the horizon."""
    start, end = _window(now, horizon_days)
    return _due_within(item.expiry_date, start, end) is not None


def is_maintenance_due(
    item: InventoryItem,
    now: datetime | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> bool:
    """Check if an item's next maintenance falls after now and within the horizon."""
    start, end = _window(now, horizon_days)
    return _due_within(item.next_maintenance_date, start, end) is not None


def compute_alerts(
    items: Iterable[InventoryItem],
    now: datetime | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[Alert]:
    """Derive all active alerts for a snapshot of items.

    Args:
        items: Snapshot of inventory items
        now: Reference instant. Defaults to the current UTC time
        horizon_days: Look-ahead window for expiry and maintenance dates

    Returns:
        Alerts grouped by kind (low stock, expiring soon, maintenance due),
        each group in input order
    """
    start, end = _window(now, horizon_days)

    low_stock: list[Alert] = []
    expiring: list[Alert] = []
    maintenance: list[Alert] = []

    for item in items:
        if is_low_stock(item):
            low_stock.append(
                Alert(
                    kind=AlertKind.LOW_STOCK,
                    item_id=item.id,
                    item_name=item.name,
                    detail=f"{item.name} has only {item.quantity} unit(s) left.",
                )
            )

        expires_at = _due_within(item.expiry_date, start, end)
        if expires_at is not None:
            expiring.append(
                Alert(
                    kind=AlertKind.EXPIRING_SOON,
                    item_id=item.id,
                    item_name=item.name,
                    detail=f"{item.name} will expire on {expires_at.date().isoformat()}.",
                    due_at=expires_at,
                )
            )

        service_at = _due_within(item.next_maintenance_date, start, end)
        if service_at is not None:
            maintenance.append(
                Alert(
                    kind=AlertKind.MAINTENANCE_DUE,
                    item_id=item.id,
                    item_name=item.name,
                    detail=(
                        f"{item.name} is due for maintenance on "
                        f"{service_at.date().isoformat()}."
                    ),
                    due_at=service_at,
                )
            )

    return low_stock + expiring + maintenance


def has_alerts(
    items: Iterable[InventoryItem],
    now: datetime | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> bool:
    """Check if any item needs attention."""
    start, end = _window(now, horizon_days)
    return any(
        is_low_stock(item)
        or _due_within(item.expiry_date, start, end) is not None
        or _due_within(item.next_maintenance_date, start, end) is not None
        for item in items
    )


def dashboard_stats(items: Iterable[InventoryItem]) -> DashboardStats:
    """Summarize item count, units in stock, low and empty items."""
    stats = DashboardStats()
    for item in items:
        stats.total_items += 1
        stats.total_quantity += item.quantity
        if is_low_stock(item):
            stats.low_stock_items += 1
        if item.is_out_of_stock:
            stats.out_of_stock_items += 1
    return stats


def lowest_stocked(items: Iterable[InventoryItem], limit: int = 5) -> list[InventoryItem]:
    """Items still in stock with the fewest units, lowest first."""
    in_stock = [item for item in items if item.quantity > 0]
    return sorted(in_stock, key=lambda i: i.quantity)[:limit]
