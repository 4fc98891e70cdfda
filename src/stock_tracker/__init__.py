"""Stock Tracker - inventory tracking with alerts, scannable codes and AI reports."""

from .assistant import (
    REPORT_INSTRUCTIONS,
    AssistantError,
    INVESTIGATOR_INSTRUCTION,
    CommandParser,
    InventoryAssistant,
    ReportGenerator,
)
from .config import ConfigManager
from .identity import encode_identity, hash_identity, render_identity_code, resolve_identity
from .inventory_manager import InventoryManager, ItemNotFoundError
from .item_store import (
    BackendType,
    InMemoryItemStore,
    ItemStore,
    JSONItemStore,
    create_item_store,
)
from .models import (
    Alert,
    AlertKind,
    ChatTurn,
    DashboardStats,
    InventoryItem,
    ItemStatus,
    ItemUpdate,
    ReportKind,
)
from .notifications import (
    compute_alerts,
    dashboard_stats,
    has_alerts,
    is_expiring_soon,
    is_low_stock,
    is_maintenance_due,
    lowest_stocked,
)
from .output_formatter import OutputFormatter
from .sqlite_store import SQLiteItemStore

__version__ = "0.1.0"

__all__ = [
    "Alert",
    "AlertKind",
    "AssistantError",
    "BackendType",
    "ChatTurn",
    "CommandParser",
    "compute_alerts",
    "ConfigManager",
    "create_item_store",
    "dashboard_stats",
    "DashboardStats",
    "encode_identity",
    "has_alerts",
    "hash_identity",
    "InMemoryItemStore",
    "INVESTIGATOR_INSTRUCTION",
    "InventoryAssistant",
    "InventoryItem",
    "InventoryManager",
    "is_expiring_soon",
    "is_low_stock",
    "is_maintenance_due",
    "ItemNotFoundError",
    "ItemStatus",
    "ItemStore",
    "ItemUpdate",
    "JSONItemStore",
    "lowest_stocked",
    "OutputFormatter",
    "render_identity_code",
    "REPORT_INSTRUCTIONS",
    "ReportGenerator",
    "ReportKind",
    "resolve_identity",
    "SQLiteItemStore",
]
