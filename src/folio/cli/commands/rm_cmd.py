# ABOUTME: The `folio rm` command for deleting a cataloged book.
# ABOUTME: Only the book's owner may delete it.

from pathlib import Path

import click
from rich.console import Console

from folio.cli.options import db_option, owner_option
from folio.cli.wiring import fail, ingestion_service
from folio.errors import FolioError

console = Console()


@click.command("rm")
@click.argument("book_id", type=int)
@owner_option
@db_option
def rm(book_id: int, owner_id: str, db_path: Path | None) -> None:
    """Delete book BOOK_ID from the catalog."""
    with ingestion_service(db_path) as service:
        try:
            removed = service.delete_book(book_id, owner_id)
        except FolioError as exc:
            fail(console, exc)

    if not removed:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)
    console.print(f"[green]Deleted[/green] book {book_id}.")
