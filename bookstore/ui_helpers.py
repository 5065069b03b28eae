import json
import os
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Environment variable that controls CLI output mode.
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKSTORE_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _phone(book: Any) -> str:
    return getattr(book, "supplier_phone_number", None) or ""


def print_list_result(books: List[Any]) -> None:
    """Print the book list in the current output mode.
    - plain: 'ID - Name | price | quantity' lines, or 'No books in stock.'
    - json: JSON array of book dicts
    - rich: Rich table
    """
    if not books:
        print("No books in stock.")
        return

    mode = get_output_mode()
    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Product", style="white")
        table.add_column("Price", justify="right")
        table.add_column("Qty", justify="right")
        table.add_column("Supplier", style="white")
        table.add_column("Phone", style="dim")
        for b in books:
            qty_style = "red" if b.quantity == 0 else "green"
            table.add_row(
                str(b.id), b.product_name, f"{b.price:.2f}", f"[{qty_style}]{b.quantity}[/]",
                b.supplier_name or "", _phone(b),
            )
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.product_name} | {b.price:.2f} | qty {b.quantity}")


def print_book_result(book: Any) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
        return
    lines = [
        f"ID: {book.id}",
        f"Product: {book.product_name}",
        f"Price: {book.price:.2f}",
        f"Quantity: {book.quantity}",
        f"Supplier: {book.supplier_name or '-'}",
        f"Phone: {_phone(book) or '-'}",
    ]
    if mode == "rich":
        _console.print(Panel.fit("\n".join(lines), title="📖 Book", border_style="cyan"))
    else:
        print("Book Found")
        for line in lines:
            print(line)


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print inventory statistics in the current output mode."""
    if not stats:
        print("No statistics available.")
        return

    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Total Books:[/] {stats.get('total_books', 0)}\n"
            f"[bold]Units in Stock:[/] {stats.get('total_units', 0)}\n"
            f"[bold]Stock Value:[/] {stats.get('stock_value', 0):.2f}\n"
            f"[bold]Out of Stock:[/] {stats.get('out_of_stock', 0)}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {stats.get('total_books', 0)}")
        print(f"Units in Stock: {stats.get('total_units', 0)}")
        print(f"Stock Value: {stats.get('stock_value', 0):.2f}")
        print(f"Out of Stock: {stats.get('out_of_stock', 0)}")
