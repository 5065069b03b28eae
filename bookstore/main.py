import logging
import subprocess
import sys
import webbrowser
from typing import Any, Dict, Optional

import typer
from rich.console import Console

from bookstore import contract
from bookstore.config import settings
from bookstore.exceptions import InvalidInput, OutOfStockError
from bookstore.inventory import Inventory
from bookstore.ui_helpers import print_book_result, print_list_result, print_stats_result, set_output_mode

APP_NAME = "Bookstore CLI"

console = Console()
logger = logging.getLogger(__name__)


class InventoryManager:
    """Holds the Inventory instance shared by CLI commands."""

    _instance: Optional[Inventory] = None

    @classmethod
    def get_instance(cls) -> Inventory:
        if cls._instance is None:
            cls._instance = Inventory()
            logger.debug(f"Inventory opened on {settings.database_file}")
        return cls._instance

    @classmethod
    def set_instance(cls, inventory: Optional[Inventory]) -> None:
        cls._instance = inventory


def _collect_fields(name: Optional[str], price: Optional[float], quantity: Optional[int],
                    supplier: Optional[str], phone: Optional[str]) -> Dict[str, Any]:
    """Only options the user actually passed become fields."""
    candidates = {
        contract.COLUMN_PRODUCT_NAME: name,
        contract.COLUMN_PRICE: price,
        contract.COLUMN_QUANTITY: quantity,
        contract.COLUMN_SUPPLIER_NAME: supplier,
        contract.COLUMN_SUPPLIER_PHONE_NUMBER: phone,
    }
    return {key: value for key, value in candidates.items() if value is not None}


# --- Typer CLI application ---
app = typer.Typer(help=APP_NAME)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages"),
):
    """Global options for the CLI (output mode, logging)."""
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level)
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list(
    sort_by: str = typer.Option(contract.COLUMN_ID, "--sort-by", help="id | product_name | price | quantity"),
    descending: bool = typer.Option(False, "--desc", help="Sort in descending order"),
):
    """List all books in stock."""
    try:
        books = InventoryManager.get_instance().list_books(sort_by=sort_by, descending=descending)
    except ValueError as e:
        print(f"Error: {e}")
        return
    print_list_result(books)


@app.command("show")
def cli_show(book_id: int):
    """Show the details of a single book."""
    book = InventoryManager.get_instance().find_book(book_id)
    if book is None:
        print(f"Book {book_id} not found.")
        return
    print_book_result(book)


@app.command("add")
def cli_add(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Product name"),
    price: Optional[float] = typer.Option(None, "--price", "-p", help="Unit price"),
    quantity: Optional[int] = typer.Option(None, "--quantity", "-q", help="Units in stock"),
    supplier: Optional[str] = typer.Option(None, "--supplier", help="Supplier name"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Supplier phone number"),
):
    """Add a new book."""
    inventory = InventoryManager.get_instance()
    values = _collect_fields(name, price, quantity, supplier, phone)
    try:
        uri = inventory.provider.insert(inventory.content_uri, values)
    except InvalidInput as e:
        print(f"Error: {e}")
        return
    if uri is None:
        print("Book not saved.")
        return
    print(f"Book saved: {uri}")


@app.command("edit")
def cli_edit(
    book_id: int,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Product name"),
    price: Optional[float] = typer.Option(None, "--price", "-p", help="Unit price"),
    quantity: Optional[int] = typer.Option(None, "--quantity", "-q", help="Units in stock"),
    supplier: Optional[str] = typer.Option(None, "--supplier", help="Supplier name"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Supplier phone number"),
):
    """Change some fields of a book; the rest are kept."""
    fields = _collect_fields(name, price, quantity, supplier, phone)
    if not fields:
        print("Nothing to update. Provide at least one field.")
        return
    try:
        book = InventoryManager.get_instance().update_book(book_id, **fields)
    except InvalidInput as e:
        print(f"Error: {e}")
        return
    if book is None:
        print(f"Book {book_id} not updated.")
        return
    print(f"Book updated: {book.product_name}")


@app.command("remove")
def cli_remove(book_id: int):
    """Delete a book."""
    if InventoryManager.get_instance().remove_book(book_id):
        print(f"Book {book_id} has been removed.")
    else:
        print(f"Book {book_id} not found.")


@app.command("sale")
def cli_sale(book_id: int):
    """Sell one copy of a book."""
    try:
        book = InventoryManager.get_instance().sell(book_id)
    except LookupError as e:
        print(str(e))
        return
    except OutOfStockError as e:
        print(f"Error: {e}")
        return
    print(f"Sold one copy of {book.product_name}, {book.quantity} left.")


@app.command("restock")
def cli_restock(book_id: int, amount: int = typer.Option(1, "--amount", "-a", help="Units received")):
    """Add copies of a book to stock."""
    try:
        book = InventoryManager.get_instance().restock(book_id, amount)
    except LookupError as e:
        print(str(e))
        return
    except ValueError as e:
        print(f"Error: {e}")
        return
    print(f"{book.product_name} now has {book.quantity} in stock.")


@app.command("seed")
def cli_seed():
    """Insert sample books."""
    ids = InventoryManager.get_instance().insert_dummy_data()
    print(f"Inserted {len(ids)} sample books.")


@app.command("clear")
def cli_clear(yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation")):
    """Delete every book."""
    if not yes and not typer.confirm("Delete all books?"):
        print("Aborted.")
        return
    count = InventoryManager.get_instance().delete_all()
    print(f"Deleted {count} books.")


@app.command("stats")
def cli_stats():
    """Show inventory statistics."""
    print_stats_result(InventoryManager.get_instance().get_statistics())


@app.command("serve")
def cli_serve(open_browser: bool = typer.Option(True, "--open/--no-open", help="Open the API docs in a browser")):
    """Start the HTTP API with uvicorn."""
    host = settings.api_host
    port = int(settings.api_port)
    url = f"http://{host}:{port}/docs"
    print(f"Starting API on {url}")
    if open_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open browser: {e}")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "bookstore.api:app",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args)
    except KeyboardInterrupt:
        console.print("[dim]Server stopped[/]")


if __name__ == "__main__":
    app()
