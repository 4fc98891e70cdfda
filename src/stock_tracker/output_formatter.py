"""Output formatting for CLI and programmatic use."""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for output."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _short_date(value: Any) -> str:
    if not value:
        return "-"
    if isinstance(value, datetime):
        return value.date().isoformat()
    return str(value)[:10]


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode
        self.console = Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {escape(message)}")

        payload = data.get("data", {})
        if "item" in payload and isinstance(payload["item"], dict):
            self._render_item(payload["item"])
        elif "inventory" in payload:
            self._render_inventory(payload["inventory"])
        elif "alerts" in payload:
            self._render_alerts(payload)
        elif "stats" in payload:
            self._render_stats(payload)
        elif "report" in payload:
            self._render_report(payload)
        elif "answer" in payload:
            self.console.print(Markdown(payload["answer"]))
        elif "code" in payload:
            self.console.print(payload["code"], markup=False, highlight=False)

    def _render_item(self, item: dict) -> None:
        """Render a single item with Rich."""
        panel_content = f"""[bold]{escape(item["name"])}[/bold]

Id: {escape(item["id"])}
Type: {escape(item.get("type", "-"))}
Status: {escape(str(item.get("status", "Available")))}
Quantity: {item.get("quantity", 0)}"""

        if item.get("reorder_threshold") is not None:
            panel_content += f"\nReorder at: {item['reorder_threshold']}"
        if item.get("reorder_quantity") is not None:
            panel_content += f"\nReorder quantity: {item['reorder_quantity']}"
        if item.get("expiry_date"):
            panel_content += f"\nExpires: {_short_date(item['expiry_date'])}"
        if item.get("next_maintenance_date"):
            panel_content += f"\nNext maintenance: {_short_date(item['next_maintenance_date'])}"
        if item.get("location"):
            panel_content += f"\nLocation: {escape(item['location'])}"
        if item.get("supplier"):
            panel_content += f"\nSupplier: {escape(item['supplier'])}"

        panel = Panel(panel_content, title="Item Details", border_style="green")
        self.console.print(panel)

    def _render_inventory(self, items: list[dict]) -> None:
        """Render inventory list."""
        if not items:
            self.console.print("[dim]No items in inventory[/dim]")
            return

        table = Table(title="Inventory", show_header=True, header_style="bold cyan")
        table.add_column("Id", style="dim", no_wrap=True)
        table.add_column("Item", style="cyan")
        table.add_column("Type", style="yellow")
        table.add_column("Qty", justify="right")
        table.add_column("Status", style="green")
        table.add_column("Expires", style="red")

        for item in items:
            table.add_row(
                escape(item["id"][:8]),
                escape(item["name"]),
                escape(item.get("type", "-")),
                str(item.get("quantity", 0)),
                str(item.get("status", "")),
                _short_date(item.get("expiry_date")),
            )

        self.console.print(table)

    def _render_alerts(self, payload: dict) -> None:
        """Render alerts grouped by kind."""
        alerts = payload["alerts"]
        if not alerts:
            self.console.print("[dim]You have no new notifications.[/dim]")
            return

        titles = {
            "low_stock": "[bold red]Low Stock Alert[/bold red]",
            "expiring_soon": "[bold yellow]Expiry Alert[/bold yellow]",
            "maintenance_due": "[bold blue]Maintenance Alert[/bold blue]",
        }
        current_kind = None
        for alert in alerts:
            kind = alert["kind"]
            if kind != current_kind:
                self.console.print(f"\n{titles.get(kind, kind)}")
                current_kind = kind
            self.console.print(
                f"  • {escape(alert['detail'])} [dim]({escape(alert['item_id'])})[/dim]"
            )

    def _render_stats(self, payload: dict) -> None:
        """Render dashboard figures."""
        stats = payload["stats"]

        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Total Items", str(stats["total_items"]))
        table.add_row("Total Quantity", str(stats["total_quantity"]))
        table.add_row("Low Stock", f"[yellow]{stats['low_stock_items']}[/yellow]")
        table.add_row("Out of Stock", f"[red]{stats['out_of_stock_items']}[/red]")
        self.console.print(Panel(table, title="Dashboard", border_style="cyan"))

        lowest = payload.get("lowest_stocked", [])
        if lowest:
            self.console.print("\n[bold]Lowest Stocked Items[/bold]")
            for item in lowest:
                self.console.print(f"  {escape(item['name'])}: {item['quantity']}")

    def _render_report(self, payload: dict) -> None:
        """Render a generated markdown report."""
        self.console.print(Markdown(payload["report"]))

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {escape(message)}")

    def success(self, message: str, data: dict | None = None) -> None:
        """Output success message.

        Args:
            message: Success message
            data: Optional data to include
        """
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if data:
                output["data"] = data
            print(json.dumps(output, cls=JSONEncoder))
        else:
            self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")
