# ABOUTME: The `folio add-isbn` and `folio lookup` commands backed by Open Library.
# ABOUTME: add-isbn catalogs a resolved book; lookup only previews what would be stored.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option, image_options, owner_option, timeout_option
from folio.cli.wiring import fail, ingestion_service
from folio.errors import FolioError
from folio.media.normalizer import ImageConstraints
from folio.metadata.classification import infer_genre, map_publisher

console = Console()


@click.command("add-isbn")
@click.argument("isbn")
@click.option(
    "--cover/--no-cover",
    default=True,
    show_default=True,
    help="Download and store the cover image when one is offered.",
)
@owner_option
@timeout_option
@image_options
@db_option
def add_isbn(
    isbn: str,
    cover: bool,
    owner_id: str,
    timeout: float,
    max_width: int,
    max_height: int,
    quality: int,
    db_path: Path | None,
) -> None:
    """Look up ISBN on Open Library and add the book to the catalog."""
    constraints = ImageConstraints(max_width=max_width, max_height=max_height, quality=quality)

    with ingestion_service(db_path, timeout=timeout, constraints=constraints) as service:
        try:
            record = service.create_from_identifier(owner_id, isbn, download_cover=cover)
        except FolioError as exc:
            fail(console, exc)

    console.print(
        f"[green]Added[/green] #{record.id} [bold]{record.title}[/bold] by {record.author}"
    )
    console.print(f"  Genre: {record.genre.value}  Publisher: {record.publisher.value}")
    if record.has_photo:
        console.print(f"  Cover stored as {record.photo_content_type}")
    elif record.cover_url:
        console.print(f"  [yellow]Cover not stored[/yellow] (remote: {record.cover_url})")


@click.command("lookup")
@click.argument("isbn")
@timeout_option
@db_option
def lookup(isbn: str, timeout: float, db_path: Path | None) -> None:
    """Show what Open Library knows about ISBN without cataloging it."""
    with ingestion_service(db_path, timeout=timeout) as service:
        try:
            metadata = service.lookup(isbn)
        except FolioError as exc:
            fail(console, exc)

    if metadata is None:
        console.print(f"[yellow]No book found for ISBN {isbn}.[/yellow]")
        raise SystemExit(1)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ISBN", metadata.isbn)
    table.add_row("Title", metadata.title)
    table.add_row("Author", metadata.author)
    publisher = map_publisher(metadata.publisher_name)
    table.add_row("Publisher", f"{metadata.publisher_name} ({publisher.value})")
    table.add_row("Genre", infer_genre(metadata.subjects).value)
    if metadata.subjects:
        table.add_row("Subjects", ", ".join(metadata.subjects[:8]))
    table.add_row("Synopsis", metadata.synopsis)
    if metadata.summary:
        table.add_row("Summary", metadata.summary)
    table.add_row("Cover", metadata.cover_url or "none")

    console.print(table)
