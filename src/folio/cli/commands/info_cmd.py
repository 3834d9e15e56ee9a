# ABOUTME: The `folio info` command for displaying one cataloged book.
# ABOUTME: Shows every stored field, including where the cover photo can be fetched.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option
from folio.cli.wiring import fail, open_catalog
from folio.errors import FolioError

console = Console()


@click.command("info")
@click.argument("book_id", type=int)
@db_option
def info(book_id: int, db_path: Path | None) -> None:
    """Show detailed metadata for a book by ID."""
    with open_catalog(db_path) as catalog:
        try:
            record = catalog.find_by_id(book_id)
        except FolioError as exc:
            fail(console, exc)

    if record is None:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Title", record.title)
    table.add_row("Author", record.author)
    table.add_row("ISBN", record.isbn)
    table.add_row("Genre", record.genre.value)
    table.add_row("Publisher", record.publisher.value)
    table.add_row("Synopsis", record.synopsis)
    if record.summary:
        table.add_row("Summary", record.summary)
    if record.has_photo:
        size = len(record.photo_bytes or b"")
        table.add_row("Photo", f"{record.photo_content_type}, {size} bytes")
    if record.photo_url:
        table.add_row("Photo URL", record.photo_url)
    table.add_row("Owner", record.owner_id)
    table.add_row("Added", record.created_at)
    if record.updated_at:
        table.add_row("Updated", record.updated_at)

    console.print(table)
