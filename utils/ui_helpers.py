import os
import json
from typing import Any, Dict, Iterable, List
from rich.console import Console
from rich.table import Table
from rich.markup import escape
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode
    # unknown values keep the current default

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def items_table(items: Iterable[Any], title: str = "📚 Catalog") -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", no_wrap=True, justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Status", style="white")
    for item in items:
        status = "[green]Available[/]" if item.available else f"[yellow]{escape(item.status())}[/]"
        table.add_row(str(item.id), item.kind.value, escape(item.title), escape(item.author), status)
    return table

def fines_table(fines: Iterable[Any]) -> Table:
    table = Table(title="💰 Fines", show_lines=True, header_style="bold cyan")
    table.add_column("Item", style="magenta", justify="right")
    table.add_column("Borrower", style="white")
    table.add_column("Days overdue", justify="right")
    table.add_column("Amount", justify="right", style="red")
    table.add_column("At", style="dim")
    for f in fines:
        table.add_row(str(f.item_id), f.borrower, str(f.days_overdue), f"{f.amount:.2f}",
                      f.timestamp.isoformat(timespec="seconds"))
    return table

def print_items_result(items: List[Any], empty_message: str = "No items in catalog.") -> None:
    """Print items in the current output mode.
    - plain: one describe() line per item
    - json: JSON array of item dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not items:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([i.to_dict() for i in items], ensure_ascii=False))
    elif mode == "rich":
        _console.print(items_table(items))
    else:
        for i in items:
            print(i.describe())

def print_fines_result(fines: List[Any]) -> None:
    mode = get_output_mode()

    if not fines:
        print("No fines recorded.")
        return

    if mode == "json":
        print(json.dumps([f.to_dict() for f in fines], ensure_ascii=False))
    elif mode == "rich":
        _console.print(fines_table(fines))
    else:
        for f in fines:
            print(str(f))

def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print desk statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
        return

    by_type = ", ".join(f"{k}: {v}" for k, v in stats.get("by_type", {}).items())
    lines = [
        f"Total Items: {stats.get('total_items', 0)}",
        f"Available: {stats.get('available_items', 0)}",
        f"Borrowed: {stats.get('borrowed_items', 0)}",
        f"By Type: {by_type}",
        f"Archived Magazines: {stats.get('archived_magazines', 0)}",
        f"Fines: {stats.get('total_fines', 0)} ({stats.get('fines_amount', 0.0):.2f})",
    ]
    if mode == "rich":
        content = "\n".join(f"[bold]{line.split(':', 1)[0]}:[/]{line.split(':', 1)[1]}" for line in lines)
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for line in lines:
            print(line)
