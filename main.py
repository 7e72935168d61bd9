import subprocess
import sys
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from config import configure_logging, settings
from errors import AlreadyAvailableError, ItemNotFoundError, WrongVariantError
from library import Library, create_library
from utils.ui_helpers import (
    fines_table,
    items_table,
    print_fines_result,
    print_items_result,
    print_stats_result,
    set_output_mode,
)
from utils.validators import BorrowValidator

APP_NAME = settings.app_name

console = Console()


class DeskManager:
    """Holds the single desk shared by every command in this process."""
    _instance: Optional[Library] = None

    @classmethod
    def get_instance(cls) -> Library:
        if cls._instance is None:
            cls._instance = create_library(settings.seed_file)
        return cls._instance

    @classmethod
    def reset(cls, desk: Optional[Library] = None) -> None:
        cls._instance = desk


# --- Typer CLI application ---
app = typer.Typer(help="LibraNet circulation desk CLI", invoke_without_command=True)

@app.callback()
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global options for the CLI (e.g. output mode)."""
    configure_logging()
    if output:
        set_output_mode(output)
    if ctx.invoked_subcommand is None:
        run_menu()

@app.command("list")
def cli_list():
    """List every item in the catalog."""
    print_items_result(DeskManager.get_instance().list_items())

@app.command("show")
def cli_show(item_id: int):
    """Show a single item by id."""
    outcome = DeskManager.get_instance().lookup(item_id)
    if not outcome.ok:
        print(str(outcome.error))
        return
    print_items_result([outcome.value])

@app.command("search")
def cli_search(keyword: str = typer.Argument(..., help="Type name or part of a title")):
    """Search items by type or title."""
    matches = list(DeskManager.get_instance().search(keyword))
    print_items_result(matches, empty_message=f"No items match '{keyword}'.")

@app.command("borrow")
def cli_borrow(
    item_id: int,
    borrower: str,
    days: int = typer.Option(settings.default_loan_days, "--days", "-d", help="Loan length in days"),
):
    """Borrow an item."""
    if not BorrowValidator.validate_borrower(borrower):
        print("Error: borrower name is required.")
        raise typer.Exit(code=1)
    if not BorrowValidator.validate_days(days):
        print(f"Error: days must be between 1 and {BorrowValidator.MAX_LOAN_DAYS}.")
        raise typer.Exit(code=1)

    outcome = DeskManager.get_instance().borrow(item_id, BorrowValidator.normalize_name(borrower), days)
    if outcome.ok:
        print(f"Borrowed: {outcome.value.describe()}")
    else:
        print(f"Error: {outcome.error}")

@app.command("return")
def cli_return(item_id: int):
    """Return a borrowed item, applying any overdue fine."""
    outcome = DeskManager.get_instance().return_item(item_id)
    if isinstance(outcome.error, AlreadyAvailableError):
        print(f"Item {item_id} is already available.")
    elif not outcome.ok:
        print(f"Error: {outcome.error}")
    else:
        print(f"Returned item {item_id}.")
        if outcome.value is not None:
            print(f"Fine applied: {outcome.value}")

@app.command("play")
def cli_play(item_id: int):
    """Play an audiobook."""
    outcome = DeskManager.get_instance().play(item_id)
    if isinstance(outcome.error, WrongVariantError):
        print(f"Item {item_id} is not an audiobook.")
    elif not outcome.ok:
        print(f"Error: {outcome.error}")
    else:
        print(outcome.value)

@app.command("archive")
def cli_archive(item_id: int):
    """Archive an e-magazine."""
    outcome = DeskManager.get_instance().archive(item_id)
    if isinstance(outcome.error, WrongVariantError):
        print(f"Item {item_id} is not an e-magazine.")
    elif not outcome.ok:
        print(f"Error: {outcome.error}")
    else:
        print(outcome.value)

@app.command("fines")
def cli_fines(borrower: Optional[str] = typer.Option(None, "--borrower", "-b", help="Only show fines for this borrower")):
    """Show recorded fines, optionally for one borrower."""
    print_fines_result(list(DeskManager.get_instance().list_fines(borrower=borrower)))

@app.command("stats")
def cli_stats():
    """Show desk statistics."""
    print_stats_result(DeskManager.get_instance().get_statistics())

@app.command("menu")
def cli_menu():
    """Start the interactive desk menu."""
    run_menu()

@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
):
    """Run the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [sys.executable, "-m", "uvicorn", "api:app", "--host", host, "--port", str(port)]
    try:
        subprocess.run(args)
    except FileNotFoundError:
        print("Error: `uvicorn` could not be started. Make sure it is installed.")
        raise typer.Exit(code=1)

# --- Interactive menu ---
def _ask_item_id(label: str) -> Optional[int]:
    raw = Prompt.ask(label)
    item_id = BorrowValidator.parse_item_id(raw)
    if item_id is None:
        console.print(f"[yellow]⚠️ '{escape(raw)}' is not a valid item id.[/]")
    return item_id

def list_all_items(desk: Library) -> None:
    items = desk.list_items()
    if not items:
        console.print("[yellow]No items in catalog.[/]")
        return
    console.print(items_table(items))
    console.print(f"[dim]📊 {len(items)} items[/]")

def borrow_item(desk: Library) -> None:
    item_id = _ask_item_id("🔍 Item ID to borrow")
    if item_id is None:
        return
    name = BorrowValidator.normalize_name(Prompt.ask("👤 Your name"))
    if not BorrowValidator.validate_borrower(name):
        console.print("[bold red]Error:[/] a borrower name is required.")
        return
    days = IntPrompt.ask("📅 Days to borrow", default=settings.default_loan_days)
    if not BorrowValidator.validate_days(days):
        console.print(f"[bold red]Error:[/] days must be between 1 and {BorrowValidator.MAX_LOAN_DAYS}.")
        return

    outcome = desk.borrow(item_id, name, days)
    if outcome.ok:
        console.print(Panel.fit(escape(outcome.value.describe()), title="✅ Borrowed", border_style="green"))
    else:
        console.print(f"[bold red]❌ Error:[/] {escape(str(outcome.error))}")

def return_item(desk: Library) -> None:
    item_id = _ask_item_id("🔍 Item ID to return")
    if item_id is None:
        return
    outcome = desk.return_item(item_id)
    if isinstance(outcome.error, AlreadyAvailableError):
        console.print("[blue]ℹ️ Item already available, no need to return.[/]")
    elif isinstance(outcome.error, ItemNotFoundError):
        console.print("[bold red]❌ Item not found![/]")
    elif outcome.value is not None:
        fine = outcome.value
        console.print(Panel.fit(
            f"[bold]Days overdue:[/] {fine.days_overdue}\n[bold]Amount:[/] {fine.amount:.2f}",
            title=f"💰 Fine for {escape(fine.borrower)}",
            border_style="red",
        ))
    else:
        console.print(f"[green]✅ Item {item_id} returned on time.[/]")

def play_audio(desk: Library) -> None:
    item_id = _ask_item_id("🎧 AudioBook ID")
    if item_id is None:
        return
    outcome = desk.play(item_id)
    if outcome.ok:
        console.print(f"🎧 {escape(outcome.value)}")
    elif isinstance(outcome.error, WrongVariantError):
        console.print("[bold red]❌ Not an audiobook![/]")
    else:
        console.print("[bold red]❌ Item not found![/]")

def archive_magazine(desk: Library) -> None:
    item_id = _ask_item_id("📚 E-Magazine ID")
    if item_id is None:
        return
    outcome = desk.archive(item_id)
    if outcome.ok:
        console.print(f"📚 {escape(outcome.value)}")
    elif isinstance(outcome.error, WrongVariantError):
        console.print("[bold red]❌ Not an e-magazine![/]")
    else:
        console.print("[bold red]❌ Item not found![/]")

def search_items(desk: Library) -> None:
    keyword = Prompt.ask("🔎 Keyword (type/title)").strip()
    matches = list(desk.search(keyword))
    if not matches:
        console.print(f"[yellow]🔍 No items match '{escape(keyword)}'.[/]")
        return
    console.print(items_table(matches, title=f"🔎 Results for '{escape(keyword)}'"))

def show_fines(desk: Library) -> None:
    fines = desk.list_fines()
    if not fines:
        console.print("[green]✅ No fines recorded.[/]")
        return
    console.print(fines_table(fines))

def run_menu(desk: Optional[Library] = None) -> None:
    """Simple interactive menu for the circulation desk."""
    desk = desk or DeskManager.get_instance()
    actions = {
        "1": list_all_items,
        "2": borrow_item,
        "3": return_item,
        "4": play_audio,
        "5": archive_magazine,
        "6": search_items,
        "7": show_fines,
    }
    menu_items = [
        ("1", "Show all items", "📚"),
        ("2", "Borrow item", "➕"),
        ("3", "Return item", "↩️"),
        ("4", "Play audiobook", "🎧"),
        ("5", "Archive e-magazine", "🗄️"),
        ("6", "Search by type/title", "🔎"),
        ("7", "Show all fines", "💰"),
        ("0", "Exit", "🚪"),
    ]

    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in menu_items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
    panel = Panel(table, title=APP_NAME, border_style="cyan", box=box.HEAVY, padding=(1, 2))

    while True:
        console.print(panel)
        choice = Prompt.ask("Choose option", choices=[key for key, _, _ in menu_items], default="1")
        if choice == "0":
            console.print("[green]🚪 Exiting... Bye![/]")
            break
        actions[choice](desk)
        console.print()

if __name__ == "__main__":
    app()
