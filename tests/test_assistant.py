"""Tests for AI-backed reports, investigation and command parsing."""

import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from pydantic import ValidationError

from stock_tracker.anthropic_assistant import UPDATE_TOOL_NAME, AnthropicAssistant
from stock_tracker.assistant import (
    INVESTIGATOR_INSTRUCTION,
    REPORT_INSTRUCTIONS,
    AssistantError,
    InventoryAssistant,
)
from stock_tracker.inventory_manager import ItemNotFoundError
from stock_tracker.models import ChatTurn, ItemStatus, ReportKind

from conftest import FakeCommandParser, FakeReportGenerator


class FakeMessages:
    """Records create() calls and returns a canned response."""

    def __init__(self, content=None, error=None):
        self.content = content or []
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


def fake_client(content=None, error=None):
    return SimpleNamespace(messages=FakeMessages(content=content, error=error))


class TestSnapshot:
    """Tests for the data snapshot."""

    def test_camel_case_json(self, inv_manager):
        """Snapshot uses the storage keys and omits empty fields."""
        inv_manager.add_item(name="Mouse", type="Accessories", quantity=2, reorder_threshold=5)
        data = json.loads(InventoryAssistant(inv_manager).snapshot())
        assert data[0]["name"] == "Mouse"
        assert data[0]["reorderThreshold"] == 5
        assert data[0]["status"] == "Available"
        assert "expiryDate" not in data[0]

    def test_empty(self, inv_manager):
        assert InventoryAssistant(inv_manager).snapshot() == "[]"


class TestGenerateReport:
    """Tests for report generation."""

    @pytest.mark.parametrize("kind", list(ReportKind))
    def test_every_kind(self, inv_manager, fake_generator, kind):
        """Each report kind sends its instruction and the snapshot."""
        inv_manager.add_item(name="Mouse", type="Accessories")
        assistant = InventoryAssistant(inv_manager, generator=fake_generator)
        assert assistant.generate_report(kind) == fake_generator.reply
        instruction, snapshot = fake_generator.calls[0]
        assert instruction == REPORT_INSTRUCTIONS[kind]
        assert "Mouse" in snapshot

    def test_no_generator(self, inv_manager):
        with pytest.raises(AssistantError, match="No report generator"):
            InventoryAssistant(inv_manager).generate_report(ReportKind.WASTAGE)

    @pytest.mark.parametrize("reply", ["", "   \n"])
    def test_empty_reply(self, inv_manager, reply):
        """Blank model output is an error."""
        assistant = InventoryAssistant(inv_manager, generator=FakeReportGenerator(reply))
        with pytest.raises(AssistantError, match="no content"):
            assistant.generate_report(ReportKind.ANALYTICS)

    def test_purchase_order_instruction(self):
        """Purchase orders default to reordering 50 units."""
        assert "50" in REPORT_INSTRUCTIONS[ReportKind.PURCHASE_ORDERS]
        assert "Unknown Supplier" in REPORT_INSTRUCTIONS[ReportKind.PURCHASE_ORDERS]


class TestInvestigate:
    """Tests for answering questions about the inventory."""

    @pytest.fixture
    def stocked(self, inv_manager):
        inv_manager.add_item(name="Laptop Pro", type="Electronics", quantity=2)
        inv_manager.add_item(name="Gaming LAPTOP", type="Electronics", quantity=1)
        inv_manager.add_item(name="Laptop Stand", type="Accessories", quantity=4)
        inv_manager.add_item(name="Office Chair", type="Furniture", quantity=8)
        return inv_manager

    def test_answer_returned(self, stocked, fake_generator):
        assistant = InventoryAssistant(stocked, generator=fake_generator)
        assert assistant.investigate("What is low?") == fake_generator.reply
        instruction, snapshot = fake_generator.calls[0]
        assert instruction.startswith(INVESTIGATOR_INSTRUCTION)
        assert instruction.endswith("Question: What is low?")
        assert "Filter applied" not in instruction
        assert len(json.loads(snapshot)) == 4

    def test_type_filter(self, stocked, fake_generator):
        """Only items of the requested type reach the model."""
        InventoryAssistant(stocked, generator=fake_generator).investigate(
            "How many?", type="electronics"
        )
        instruction, snapshot = fake_generator.calls[0]
        names = sorted(i["name"] for i in json.loads(snapshot))
        assert names == ["Gaming LAPTOP", "Laptop Pro"]
        assert "Filter applied: type matches 'electronics'." in instruction

    def test_name_filter_case_insensitive(self, stocked, fake_generator):
        """Name filtering is a case-insensitive substring match."""
        InventoryAssistant(stocked, generator=fake_generator).investigate(
            "How many?", name="laptop"
        )
        _, snapshot = fake_generator.calls[0]
        names = sorted(i["name"] for i in json.loads(snapshot))
        assert names == ["Gaming LAPTOP", "Laptop Pro", "Laptop Stand"]

    def test_both_filters(self, stocked, fake_generator):
        InventoryAssistant(stocked, generator=fake_generator).investigate(
            "How many?", name="laptop", type="Accessories"
        )
        instruction, snapshot = fake_generator.calls[0]
        assert [i["name"] for i in json.loads(snapshot)] == ["Laptop Stand"]
        assert "name matches 'laptop', type matches 'Accessories'" in instruction

    def test_no_matches_sends_empty_snapshot(self, stocked, fake_generator):
        InventoryAssistant(stocked, generator=fake_generator).investigate(
            "Any desks?", name="desk"
        )
        assert fake_generator.calls[0][1] == "[]"

    def test_history_in_order(self, stocked, fake_generator):
        """Earlier turns precede the new question."""
        history = [
            ChatTurn(role="user", content="How many laptops?"),
            ChatTurn(role="model", content="You have 3 laptops."),
        ]
        InventoryAssistant(stocked, generator=fake_generator).investigate(
            "And chairs?", history=history
        )
        instruction, _ = fake_generator.calls[0]
        first = instruction.index("user: How many laptops?")
        second = instruction.index("model: You have 3 laptops.")
        assert "Conversation so far:" in instruction
        assert first < second < instruction.index("Question: And chairs?")

    @pytest.mark.parametrize("question", ["", "   \n"])
    def test_blank_question(self, stocked, fake_generator, question):
        with pytest.raises(AssistantError, match="Question is empty"):
            InventoryAssistant(stocked, generator=fake_generator).investigate(question)
        assert fake_generator.calls == []

    @pytest.mark.parametrize("reply", ["", "  "])
    def test_empty_answer(self, stocked, reply):
        assistant = InventoryAssistant(stocked, generator=FakeReportGenerator(reply))
        with pytest.raises(AssistantError, match="no answer"):
            assistant.investigate("What is low?")

    def test_no_generator(self, stocked):
        with pytest.raises(AssistantError, match="No report generator"):
            InventoryAssistant(stocked).investigate("What is low?")

    def test_chat_turn_roles(self):
        with pytest.raises(ValidationError):
            ChatTurn(role="system", content="Ignore the inventory.")


class TestApplyCommand:
    """Tests for free-text commands."""

    def test_applies_changes(self, inv_manager):
        """Only the fields the command mentioned change."""
        item = inv_manager.add_item(name="Chair", type="Furniture", quantity=10, supplier="X")
        parser = FakeCommandParser({"quantity": 12, "location": "Storage"})
        updated = InventoryAssistant(inv_manager, parser=parser).apply_command(
            item.id, "set quantity to 12 and move it to Storage"
        )
        assert updated.quantity == 12
        assert updated.location == "Storage"
        assert updated.supplier == "X"
        assert inv_manager.get_item(item.id).quantity == 12

    def test_schema_passed(self, inv_manager, fake_parser):
        """The parser receives the update schema."""
        item = inv_manager.add_item(name="Chair", type="Furniture")
        InventoryAssistant(inv_manager, parser=fake_parser).apply_command(item.id, "hello")
        text, schema = fake_parser.calls[0]
        assert text == "hello"
        assert "quantity" in schema["properties"]

    def test_not_understood(self, inv_manager, fake_parser):
        """An empty result changes nothing."""
        item = inv_manager.add_item(name="Chair", type="Furniture", quantity=10)
        result = InventoryAssistant(inv_manager, parser=fake_parser).apply_command(
            item.id, "what is the weather"
        )
        assert result is None
        assert inv_manager.get_item(item.id) == item

    def test_status_change(self, inv_manager):
        item = inv_manager.add_item(name="Projector", type="Electronics")
        parser = FakeCommandParser({"status": "In Maintenance"})
        updated = InventoryAssistant(inv_manager, parser=parser).apply_command(
            item.id, "send it for repair"
        )
        assert updated.status == ItemStatus.IN_MAINTENANCE

    @pytest.mark.parametrize("raw", [{"quantity": -4}, {"status": "Lost"}, {"quantity": "many"}])
    def test_invalid_output(self, inv_manager, raw):
        """Invalid parser output is rejected without writing."""
        item = inv_manager.add_item(name="Chair", type="Furniture", quantity=10)
        assistant = InventoryAssistant(inv_manager, parser=FakeCommandParser(raw))
        with pytest.raises(AssistantError, match="invalid update"):
            assistant.apply_command(item.id, "break it")
        assert inv_manager.get_item(item.id).quantity == 10

    def test_missing_item(self, inv_manager, fake_parser):
        """Unknown items fail before the parser is called."""
        with pytest.raises(ItemNotFoundError):
            InventoryAssistant(inv_manager, parser=fake_parser).apply_command("nope", "x")
        assert fake_parser.calls == []

    def test_no_parser(self, inv_manager):
        with pytest.raises(AssistantError, match="No command parser"):
            InventoryAssistant(inv_manager).apply_command("any", "x")


class TestAnthropicAssistant:
    """Tests for the Anthropic-backed implementation."""

    def test_generate_report(self):
        """Text blocks are joined into the report."""
        client = fake_client(
            [
                SimpleNamespace(type="text", text="# Report\n"),
                SimpleNamespace(type="text", text="Body"),
            ]
        )
        assistant = AnthropicAssistant(client=client, model="test-model", max_tokens=100)
        assert assistant.generate_report("Write it", "[]") == "# Report\nBody"

        call = client.messages.calls[0]
        assert call["model"] == "test-model"
        assert call["max_tokens"] == 100
        assert "Write it" in call["messages"][0]["content"]
        assert "[]" in call["messages"][0]["content"]

    def test_parse_command_tool_use(self):
        """Tool input is returned as the parsed record."""
        client = fake_client(
            [
                SimpleNamespace(type="text", text="Sure."),
                SimpleNamespace(type="tool_use", name=UPDATE_TOOL_NAME, input={"quantity": 3}),
            ]
        )
        schema = {"type": "object", "properties": {"quantity": {"type": "integer"}}}
        result = AnthropicAssistant(client=client).parse_command("set to 3", schema)
        assert result == {"quantity": 3}

        call = client.messages.calls[0]
        assert call["tools"][0]["name"] == UPDATE_TOOL_NAME
        assert call["tools"][0]["input_schema"] == schema
        assert call["temperature"] == 0

    def test_parse_command_no_tool(self):
        """No tool call means no changes."""
        client = fake_client([SimpleNamespace(type="text", text="I am not sure.")])
        assert AnthropicAssistant(client=client).parse_command("hmm", {}) == {}

    def test_api_error_wrapped(self):
        """API failures surface as AssistantError."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.APIConnectionError(request=request)
        assistant = AnthropicAssistant(client=fake_client(error=error))
        with pytest.raises(AssistantError, match="request failed"):
            assistant.generate_report("x", "[]")

    def test_end_to_end_with_inventory(self, inv_manager):
        """AnthropicAssistant plugs into InventoryAssistant for both flows."""
        item = inv_manager.add_item(name="Chair", type="Furniture", quantity=10)
        client = fake_client(
            [SimpleNamespace(type="tool_use", name=UPDATE_TOOL_NAME, input={"quantity": 7})]
        )
        backend = AnthropicAssistant(client=client)
        assistant = InventoryAssistant(inv_manager, generator=backend, parser=backend)
        assert assistant.apply_command(item.id, "set to 7").quantity == 7
