# ABOUTME: The `folio ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table of all books, or only the caller's with --mine.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option, owner_option
from folio.cli.wiring import fail, open_catalog
from folio.errors import FolioError

console = Console()


@click.command("ls")
@click.option("--mine", is_flag=True, help="Only books owned by --owner, newest first.")
@owner_option
@db_option
def ls(mine: bool, owner_id: str, db_path: Path | None) -> None:
    """List books in the library catalog."""
    with open_catalog(db_path) as catalog:
        try:
            records = catalog.find_by_owner(owner_id) if mine else catalog.list_all()
        except FolioError as exc:
            fail(console, exc)

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Genre")
    table.add_column("Publisher")
    table.add_column("Photo", width=5)
    if not mine:
        table.add_column("Owner")

    for record in records:
        row = [
            str(record.id),
            record.title,
            record.author,
            record.isbn,
            record.genre.value,
            record.publisher.value,
            "yes" if record.has_photo else "",
        ]
        if not mine:
            row.append(record.owner_id)
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{len(records)} book(s)")
