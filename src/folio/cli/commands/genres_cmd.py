# ABOUTME: The `folio genres` command for showing how many books each genre holds.
# ABOUTME: Lists every genre, most populated first, including empty ones with --all.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option
from folio.cli.wiring import fail, open_catalog
from folio.errors import FolioError

console = Console()


@click.command("genres")
@click.option("--all", "show_all", is_flag=True, help="Include genres with no books.")
@db_option
def genres(show_all: bool, db_path: Path | None) -> None:
    """Show book counts per genre."""
    with open_catalog(db_path) as catalog:
        try:
            counts = catalog.count_by_genre()
            total = catalog.count_active()
        except FolioError as exc:
            fail(console, exc)

    table = Table()
    table.add_column("Genre", style="bold")
    table.add_column("Books", justify="right")
    for genre, count in counts:
        if count or show_all:
            table.add_row(genre.value, str(count))

    console.print(table)
    console.print(f"\n{total} book(s) in the catalog")
