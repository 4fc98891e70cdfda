"""CLI entry point for Stock Tracker."""

import os
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from .assistant import AssistantError, InventoryAssistant
from .config import ConfigManager
from .identity import encode_identity, render_identity_code, resolve_identity
from .inventory_manager import InventoryManager, ItemNotFoundError
from .item_store import BackendType, ItemStore, create_item_store
from .logging_setup import setup_logging
from .models import ItemStatus, ReportKind
from .notifications import compute_alerts, dashboard_stats, lowest_stocked
from .output_formatter import OutputFormatter

app = typer.Typer(
    name="stock",
    help="Inventory tracking with alerts, scannable codes and AI reports",
    no_args_is_help=True,
)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
item_store: ItemStore | None = None
inventory_manager: InventoryManager | None = None
assistant: InventoryAssistant | None = None


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_item_store() -> ItemStore:
    """Get or create the item store using config values."""
    global item_store
    if item_store is None:
        cfg = get_config()
        item_store = create_item_store(
            backend=BackendType(cfg.data.backend), data_dir=cfg.data.storage_dir
        )
    return item_store


def get_inventory_manager() -> InventoryManager:
    """Get or create InventoryManager instance."""
    global inventory_manager
    if inventory_manager is None:
        inventory_manager = InventoryManager(get_item_store())
    return inventory_manager


def get_assistant() -> InventoryAssistant:
    """Get or create the Anthropic-backed assistant."""
    global assistant
    if assistant is None:
        from .anthropic_assistant import AnthropicAssistant

        cfg = get_config()
        backend = AnthropicAssistant(
            api_key=os.environ.get(cfg.assistant.api_key_env),
            model=cfg.assistant.model,
            max_tokens=cfg.assistant.max_tokens,
        )
        assistant = InventoryAssistant(
            get_inventory_manager(), generator=backend, parser=backend
        )
    return assistant


def _parse_date(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date for {option}: {value} (use YYYY-MM-DD)")


def _fail(message: str, error_code: str | None = None) -> None:
    formatter.error(message, error_code=error_code)
    raise typer.Exit(code=1)


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path")] = None,
) -> None:
    """Stock Tracker CLI - track items, alerts and reports."""
    global formatter, config, item_store, inventory_manager, assistant

    formatter = OutputFormatter(json_mode=json_output)

    # Load config early
    config = ConfigManager()
    setup_logging(config.logging.level, config.logging.file)

    # CLI --data-dir overrides config, which overrides default
    effective_data_dir = data_dir if data_dir else config.data.storage_dir
    item_store = create_item_store(
        backend=BackendType(config.data.backend), data_dir=effective_data_dir
    )
    inventory_manager = InventoryManager(item_store)
    assistant = None


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Item name")],
    item_type: Annotated[str, typer.Option("--type", "-t", help="Item type")] = "General",
    quantity: Annotated[int, typer.Option("--quantity", "-q", help="Units in stock")] = 0,
    status: Annotated[
        ItemStatus, typer.Option("--status", help="Item status")
    ] = ItemStatus.AVAILABLE,
    threshold: Annotated[
        int | None, typer.Option("--threshold", help="Reorder threshold")
    ] = None,
    reorder_quantity: Annotated[
        int | None, typer.Option("--reorder-quantity", help="Units to reorder")
    ] = None,
    expires: Annotated[
        str | None, typer.Option("--expires", help="Expiry date (YYYY-MM-DD)")
    ] = None,
    maintenance: Annotated[
        str | None, typer.Option("--maintenance", help="Next maintenance date (YYYY-MM-DD)")
    ] = None,
    location: Annotated[str | None, typer.Option("--location", "-l", help="Location")] = None,
    supplier: Annotated[str | None, typer.Option("--supplier", "-s", help="Supplier")] = None,
) -> None:
    """Add an item to inventory."""
    try:
        mgr = get_inventory_manager()
        item = mgr.add_item(
            name=name,
            type=item_type,
            quantity=quantity,
            status=status,
            reorder_threshold=threshold,
            reorder_quantity=reorder_quantity,
            expiry_date=_parse_date(expires, "--expires"),
            next_maintenance_date=_parse_date(maintenance, "--maintenance"),
            location=location,
            supplier=supplier,
        )
        output_data = {
            "success": True,
            "message": f"Added {item.name} to inventory",
            "data": {"item": item.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except typer.BadParameter as e:
        _fail(str(e), "INVALID_INPUT")
    except ValidationError as e:
        _fail(str(e), "INVALID_INPUT")
    except Exception as e:
        _fail(str(e))


@app.command(name="list")
def list_items(
    status: Annotated[ItemStatus | None, typer.Option("--status", help="Filter by status")] = None,
    item_type: Annotated[str | None, typer.Option("--type", "-t", help="Filter by type")] = None,
) -> None:
    """View inventory."""
    try:
        items = get_inventory_manager().get_inventory(status=status, type=item_type)
        output_data = {
            "success": True,
            "data": {
                "inventory": [i.model_dump(mode="json") for i in items],
                "count": len(items),
            },
        }
        formatter.output(output_data, f"{len(items)} items in inventory")
    except Exception as e:
        _fail(str(e))


@app.command()
def show(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
) -> None:
    """Show one item."""
    try:
        item = get_inventory_manager().get_item(item_id)
        formatter.output({"success": True, "data": {"item": item.model_dump(mode="json")}})
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except Exception as e:
        _fail(str(e))


@app.command()
def update(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    item_type: Annotated[str | None, typer.Option("--type", "-t", help="New type")] = None,
    quantity: Annotated[int | None, typer.Option("--quantity", "-q", help="New quantity")] = None,
    status: Annotated[ItemStatus | None, typer.Option("--status", help="New status")] = None,
    threshold: Annotated[
        int | None, typer.Option("--threshold", help="New reorder threshold")
    ] = None,
    expires: Annotated[
        str | None, typer.Option("--expires", help="New expiry date (YYYY-MM-DD)")
    ] = None,
    maintenance: Annotated[
        str | None, typer.Option("--maintenance", help="New maintenance date (YYYY-MM-DD)")
    ] = None,
    location: Annotated[str | None, typer.Option("--location", "-l", help="New location")] = None,
    supplier: Annotated[str | None, typer.Option("--supplier", "-s", help="New supplier")] = None,
) -> None:
    """Update fields of an item."""
    try:
        item = get_inventory_manager().update_item(
            item_id,
            name=name,
            type=item_type,
            quantity=quantity,
            status=status,
            reorder_threshold=threshold,
            expiry_date=_parse_date(expires, "--expires"),
            next_maintenance_date=_parse_date(maintenance, "--maintenance"),
            location=location,
            supplier=supplier,
        )
        output_data = {
            "success": True,
            "message": f"Updated {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except (typer.BadParameter, ValidationError) as e:
        _fail(str(e), "INVALID_INPUT")
    except Exception as e:
        _fail(str(e))


@app.command()
def use(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    quantity: Annotated[
        int, typer.Option("--quantity", "-q", min=1, help="Units to take out")
    ] = 1,
) -> None:
    """Take units out of stock."""
    try:
        item = get_inventory_manager().adjust_quantity(item_id, -quantity)
        output_data = {
            "success": True,
            "message": f"Used {quantity} of {item.name} (remaining: {item.quantity})",
            "data": {"item": item.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except Exception as e:
        _fail(str(e))


@app.command()
def remove(
    item_id: Annotated[str, typer.Argument(help="Item ID to remove")],
) -> None:
    """Remove an item from inventory."""
    try:
        item = get_inventory_manager().remove_item(item_id)
        output_data = {
            "success": True,
            "message": f"Removed {item.name} from inventory",
            "data": {"item": item.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except Exception as e:
        _fail(str(e))


@app.command()
def alerts(
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Days to look ahead")
    ] = None,
) -> None:
    """View low-stock, expiry and maintenance alerts."""
    try:
        horizon = days if days is not None else get_config().alerts.horizon_days
        items = get_inventory_manager().get_inventory()
        found = compute_alerts(items, horizon_days=horizon)
        output_data = {
            "success": True,
            "data": {
                "alerts": [a.model_dump(mode="json") for a in found],
                "count": len(found),
                "days": horizon,
            },
        }
        formatter.output(output_data, f"{len(found)} alerts within {horizon} days")
    except ValueError as e:
        _fail(str(e), "INVALID_INPUT")
    except Exception as e:
        _fail(str(e))


@app.command()
def stats() -> None:
    """View dashboard figures."""
    try:
        items = get_inventory_manager().get_inventory()
        limit = get_config().alerts.lowest_stocked_limit
        output_data = {
            "success": True,
            "data": {
                "stats": dashboard_stats(items).model_dump(),
                "lowest_stocked": [
                    {"id": i.id, "name": i.name, "quantity": i.quantity}
                    for i in lowest_stocked(items, limit=limit)
                ],
            },
        }
        formatter.output(output_data)
    except Exception as e:
        _fail(str(e))


@app.command()
def scan(
    payload: Annotated[str, typer.Argument(help="Text decoded from a scanned code")],
) -> None:
    """Look up the item a scanned code refers to."""
    item = resolve_identity(payload, get_item_store())
    if item is None:
        _fail(
            "Item not found in inventory. Please scan a valid item code.",
            "ITEM_NOT_FOUND",
        )
    output_data = {
        "success": True,
        "message": f'Item "{item.name}" found',
        "data": {"item": item.model_dump(mode="json")},
    }
    formatter.output(output_data, output_data["message"])


@app.command()
def code(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write a PNG image here")
    ] = None,
) -> None:
    """Generate the scannable code for an item."""
    try:
        item = get_inventory_manager().get_item(item_id)
        rendered = render_identity_code(item, output)
        data: dict = {"payload": encode_identity(item)}
        if output is not None:
            data["path"] = str(output)
            message = f"Wrote code for {item.name} to {output}"
        else:
            data["code"] = rendered
            message = f"Code for {item.name}"
        formatter.output({"success": True, "data": data}, message)
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except Exception as e:
        _fail(str(e))


@app.command()
def report(
    kind: Annotated[ReportKind, typer.Argument(help="Report to generate")],
) -> None:
    """Generate an AI report over the current inventory."""
    try:
        text = get_assistant().generate_report(kind)
        formatter.output(
            {"success": True, "data": {"report": text, "kind": kind.value}},
            f"Generated {kind.value.replace('_', ' ')} report",
        )
    except AssistantError as e:
        _fail(str(e), "ASSISTANT_ERROR")
    except Exception as e:
        _fail(str(e))


@app.command()
def ask(
    question: Annotated[str, typer.Argument(help='Question, e.g. "which laptops are low?"')],
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Only items whose name contains this")
    ] = None,
    item_type: Annotated[
        str | None, typer.Option("--type", "-t", help="Only items of this type")
    ] = None,
) -> None:
    """Ask the AI investigator a question about the inventory."""
    try:
        text = get_assistant().investigate(question, name=name, type=item_type)
        formatter.output({"success": True, "data": {"answer": text, "question": question}})
    except AssistantError as e:
        _fail(str(e), "ASSISTANT_ERROR")
    except Exception as e:
        _fail(str(e))


@app.command()
def command(
    item_id: Annotated[str, typer.Argument(help="Item ID")],
    text: Annotated[str, typer.Argument(help='Command, e.g. "set quantity to 12"')],
) -> None:
    """Update an item from a free-text command."""
    try:
        item = get_assistant().apply_command(item_id, text)
        if item is None:
            formatter.warning("Command was not understood; nothing was changed")
            return
        output_data = {
            "success": True,
            "message": f"Updated {item.name}",
            "data": {"item": item.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        _fail(str(e), "ITEM_NOT_FOUND")
    except AssistantError as e:
        _fail(str(e), "ASSISTANT_ERROR")
    except Exception as e:
        _fail(str(e))


if __name__ == "__main__":
    app()
