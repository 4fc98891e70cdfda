"""AI-backed reports, investigation and command parsing.

The language model is an injected collaborator: anything implementing
ReportGenerator and/or CommandParser can be plugged in. Report and answer
wording is up to the model; this module only prepares the instruction and
the data snapshot, and validates what comes back from command parsing.
"""

import json
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import ValidationError

from .inventory_manager import InventoryManager
from .item_store import JSONEncoder
from .models import ChatTurn, InventoryItem, ItemUpdate, ReportKind

logger = logging.getLogger(__name__)


class AssistantError(Exception):
    """Raised when an AI capability is missing, fails or returns unusable output."""


class ReportGenerator(Protocol):
    """Produces free-text (markdown) reports from an instruction and data."""

    def generate_report(self, instruction: str, data_snapshot: str) -> str: ...


class CommandParser(Protocol):
    """Turns free text into a partial record matching a target schema."""

    def parse_command(self, text: str, target_schema: dict[str, Any]) -> dict[str, Any]: ...


REPORT_INSTRUCTIONS: dict[ReportKind, str] = {
    ReportKind.PURCHASE_ORDERS: """\
You are an expert in supply chain management and purchasing.

Using the inventory data, identify items that need reordering: items whose
'quantity' is at or below their 'reorderThreshold', and items whose status is
'Low Stock'. The quantity to order is 'reorderQuantity', defaulting to 50.

Group the items by 'supplier' (use "Unknown Supplier" when missing) and write
one purchase order proposal per supplier in markdown, each with a heading
naming the supplier, the current date, a table with the columns "Item Name",
"Current Quantity", "Reorder Quantity" and "Reason", and a closing line with a
signature placeholder. Separate proposals with a horizontal rule.

If nothing needs reordering, state: "All inventory levels are sufficient. No
action is needed at this time."
""",
    ReportKind.WASTAGE: """\
You are an expert in inventory management and supply chain optimization.

Analyze the items whose status is 'Wasted' and write a markdown Wastage
Analysis Report with these sections:
1. Top Wasted Products: a table with "Product Name", "Type" and "Total Wasted
   Quantity" for the top 3-5 products.
2. Wastage Root Cause Analysis: likely causes per product (overstocking, low
   demand, short shelf-life when expiry dates are present).
3. Purchasing Recommendations: specific adjustments to purchasing.
4. Overall Summary.

If no items are marked 'Wasted', state that there is no wastage data to
analyze.
""",
    ReportKind.INVENTORY_FORECAST: """\
You are an expert in predictive analytics and inventory management.

Write a markdown Predictive Inventory Analysis with these sections:
1. Demand Forecast & Stock-out Alerts.
2. Optimal Stock Level Recommendations: a table with "Product Name",
   "Location", "Current Quantity", "Predicted Trend" and "Recommendation".
3. Upcoming Maintenance Schedule: equipment whose 'nextMaintenanceDate' is
   within 30 days, with "Equipment Name", "Location", "Maintenance Due Date"
   and "Suggested Action".
4. Waste Reduction Action Plan: items whose 'expiryDate' is within 30 days,
   with "Product Name", "Expires On", "Quantity Left" and "Suggested Action".
""",
    ReportKind.ANALYTICS: """\
You are an expert in inventory analytics.

From the inventory data, write a short markdown narrative covering: items
forecast to stock out soon, reordering trends relative to reorder thresholds,
fast-moving items, slow-moving stock, and any seasonal or time-based
patterns suggested by 'dateAdded' and expiry dates.
""",
}


INVESTIGATOR_INSTRUCTION = """\
You are an expert inventory analyst and investigator. Help the user
understand their inventory by answering their question. Be friendly,
helpful and concise.

Base every answer on the inventory data you are given. When a filter is
noted, the data has already been narrowed to matching items. Format answers
clearly with markdown tables, lists and bold text. If the question is
ambiguous, ask for clarification. If it is outside the scope of inventory
management, politely decline to answer.
"""


class InventoryAssistant:
    """Runs report and command flows against the current inventory."""

    def __init__(
        self,
        manager: InventoryManager,
        generator: ReportGenerator | None = None,
        parser: CommandParser | None = None,
    ):
        self.manager = manager
        self.generator = generator
        self.parser = parser

    def snapshot(self, items: Iterable[InventoryItem] | None = None) -> str:
        """Serialize items as a JSON array in the storage (camelCase) shape.

        Defaults to the whole inventory.
        """
        if items is None:
            items = self.manager.get_inventory()
        return json.dumps(
            [i.model_dump(by_alias=True, exclude_none=True) for i in items],
            cls=JSONEncoder,
        )

    def investigate(
        self,
        question: str,
        history: list[ChatTurn] | None = None,
        name: str | None = None,
        type: str | None = None,
    ) -> str:
        """Answer a free-text question about the inventory.

        Args:
            question: The user's question, e.g. "how many laptops do I have?"
            history: Earlier turns of the conversation, oldest first
            name: Only include items whose name contains this (case-insensitive)
            type: Only include items of this type (case-insensitive)

        Returns:
            The model's markdown answer

        Raises:
            AssistantError: If no generator is configured, the question is
                blank, or the generator returns nothing
        """
        if self.generator is None:
            raise AssistantError("No report generator configured")
        if not question.strip():
            raise AssistantError("Question is empty")

        items = self.manager.get_inventory(type=type)
        if name:
            items = [i for i in items if name.lower() in i.name.lower()]

        parts = [INVESTIGATOR_INSTRUCTION]
        filters = [
            f"{key} matches '{value}'" for key, value in (("name", name), ("type", type)) if value
        ]
        if filters:
            parts.append(f"Filter applied: {', '.join(filters)}.")
        if history:
            parts.append("Conversation so far:")
            parts.extend(f"{turn.role}: {turn.content}" for turn in history)
        parts.append(f"Question: {question}")

        logger.info("Investigating question over %d items", len(items))
        answer = self.generator.generate_report("\n".join(parts), self.snapshot(items))
        if not answer or not answer.strip():
            raise AssistantError("Investigator returned no answer")
        return answer

    def generate_report(self, kind: ReportKind) -> str:
        """Generate a report of the given kind.

        Raises:
            AssistantError: If no generator is configured or it returns nothing
        """
        if self.generator is None:
            raise AssistantError("No report generator configured")

        logger.info("Generating %s report", kind.value)
        report = self.generator.generate_report(REPORT_INSTRUCTIONS[kind], self.snapshot())
        if not report or not report.strip():
            raise AssistantError(f"Report generator returned no content for {kind.value}")
        return report

    def apply_command(self, item_id: str, text: str) -> InventoryItem | None:
        """Parse a free-text command and merge the result into an item.

        Args:
            item_id: Item the command is about
            text: The command, e.g. "set quantity to 12 and move it to Storage"

        Returns:
            The updated item, or None when the command was not understood
            and nothing was changed

        Raises:
            ItemNotFoundError: If the item does not exist
            AssistantError: If no parser is configured or its output is invalid
        """
        if self.parser is None:
            raise AssistantError("No command parser configured")

        self.manager.get_item(item_id)
        raw = self.parser.parse_command(text, ItemUpdate.model_json_schema())
        try:
            update = ItemUpdate.model_validate(raw or {})
        except ValidationError as e:
            raise AssistantError(f"Command produced an invalid update: {e}") from e

        if not update.changes():
            logger.info("Command for item %s produced no changes", item_id)
            return None
        return self.manager.apply_update(item_id, update)
