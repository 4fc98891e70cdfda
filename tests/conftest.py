"""Shared test fixtures for Stock Tracker."""

from datetime import datetime, timezone

import pytest

from stock_tracker.inventory_manager import InventoryManager
from stock_tracker.item_store import InMemoryItemStore, JSONItemStore
from stock_tracker.models import InventoryItem


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def now():
    """Fixed reference instant."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_store():
    """Create an empty in-memory item store."""
    return InMemoryItemStore()


@pytest.fixture
def json_store(temp_data_dir):
    """Create a JSON item store with temporary directory."""
    return JSONItemStore(data_dir=temp_data_dir)


@pytest.fixture
def inv_manager(memory_store):
    """Create an InventoryManager over the in-memory store."""
    return InventoryManager(store=memory_store)


@pytest.fixture
def make_item():
    """Build items with sensible defaults."""

    def _make(**fields) -> InventoryItem:
        fields.setdefault("name", "Laptop Pro")
        fields.setdefault("type", "Electronics")
        return InventoryItem(**fields)

    return _make


class FakeReportGenerator:
    """Deterministic stand-in for a language model writing reports."""

    def __init__(self, reply: str = "# Report\n\nAll good."):
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def generate_report(self, instruction: str, data_snapshot: str) -> str:
        self.calls.append((instruction, data_snapshot))
        return self.reply


class FakeCommandParser:
    """Deterministic stand-in for a language model parsing commands."""

    def __init__(self, result: dict | None = None):
        self.result = result if result is not None else {}
        self.calls: list[tuple[str, dict]] = []

    def parse_command(self, text: str, target_schema: dict) -> dict:
        self.calls.append((text, target_schema))
        return self.result


@pytest.fixture
def fake_generator():
    """Report generator returning a fixed markdown report."""
    return FakeReportGenerator()


@pytest.fixture
def fake_parser():
    """Command parser returning no changes unless configured."""
    return FakeCommandParser()
