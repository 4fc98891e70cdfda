"""SQLite-based item persistence for Stock Tracker.

Implements the same interface as JSONItemStore for seamless switching.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path

from .item_store import load_items
from .models import InventoryItem


_COLUMNS = (
    "id",
    "name",
    "type",
    "quantity",
    "status",
    "reorder_threshold",
    "reorder_quantity",
    "expiry_date",
    "next_maintenance_date",
    "date_added",
    "location",
    "supplier",
    "image_url",
)


class SQLiteItemStore:
    """Manages SQLite database persistence for inventory items."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path | None = None):
        """Initialize SQLite store.

        Args:
            db_path: Path to the SQLite database file. Defaults to ./data/inventory.db
        """
        if db_path is None:
            db_path = Path.cwd() / "data" / "inventory.db"
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema if not exists."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                );

                CREATE TABLE IF NOT EXISTS inventory (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    quantity INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'Available',
                    reorder_threshold INTEGER,
                    reorder_quantity INTEGER,
                    expiry_date TEXT,
                    next_maintenance_date TEXT,
                    date_added TEXT,
                    location TEXT,
                    supplier TEXT,
                    image_url TEXT
                );
            """)
            conn.execute(
                "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    def _row_values(self, item: InventoryItem) -> tuple:
        return (
            item.id,
            item.name,
            item.type,
            item.quantity,
            item.status.value,
            item.reorder_threshold,
            item.reorder_quantity,
            item.expiry_date.isoformat() if item.expiry_date else None,
            item.next_maintenance_date.isoformat() if item.next_maintenance_date else None,
            item.date_added.isoformat() if item.date_added else None,
            item.location,
            item.supplier,
            item.image_url,
        )

    def get_by_id(self, item_id: str) -> InventoryItem | None:
        """Get a single item.

        Args:
            item_id: Item id

        Returns:
            InventoryItem or None
        """
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM inventory WHERE id = ?", (item_id,)).fetchone()

        if row is None:
            return None
        items = load_items([{key: row[key] for key in _COLUMNS}])
        return items[0] if items else None

    def list(self) -> list[InventoryItem]:
        """Load all items in insertion order."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM inventory ORDER BY seq").fetchall()

        return load_items([{key: row[key] for key in _COLUMNS} for row in rows])

    def upsert(self, item: InventoryItem) -> None:
        """Insert an item or replace the one with the same id."""
        columns = ", ".join(_COLUMNS)
        placeholders = ", ".join("?" for _ in _COLUMNS)
        updates = ", ".join(f"{col} = excluded.{col}" for col in _COLUMNS[1:])
        with self._get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO inventory ({columns})
                VALUES ({placeholders})
                ON CONFLICT(id) DO UPDATE SET {updates}
                """,
                self._row_values(item),
            )

    def delete(self, item_id: str) -> bool:
        """Delete an item.

        Returns:
            True if an item was removed
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM inventory WHERE id = ?", (item_id,))
            return cursor.rowcount > 0
