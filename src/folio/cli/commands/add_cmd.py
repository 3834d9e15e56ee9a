# ABOUTME: The `folio add` command for cataloging a book from hand-entered fields.
# ABOUTME: An attached --photo is normalized before storing; a bad photo aborts the add.

from pathlib import Path

import click
from rich.console import Console

from folio.cli.options import db_option, image_options, owner_option
from folio.cli.wiring import fail, ingestion_service, load_photo
from folio.db.mapping import BookFields
from folio.errors import FolioError
from folio.media.normalizer import ImageConstraints
from folio.metadata.classification import Genre, Publisher

console = Console()

GENRE_CHOICE = click.Choice([g.value for g in Genre], case_sensitive=False)
PUBLISHER_CHOICE = click.Choice([p.value for p in Publisher], case_sensitive=False)


@click.command("add")
@click.option("--title", required=True, help="Book title.")
@click.option("--isbn", required=True, help="ISBN-10 or ISBN-13; hyphens and spaces are ignored.")
@click.option("--author", required=True, help="Author name.")
@click.option("--synopsis", required=True, help="Short description of the book.")
@click.option("--genre", type=GENRE_CHOICE, default=Genre.OTHER.value, show_default=True)
@click.option(
    "--publisher", type=PUBLISHER_CHOICE, default=Publisher.OTHER.value, show_default=True
)
@click.option("--summary", default=None, help="Optional longer summary.")
@click.option(
    "--photo",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Cover photo file (jpg, jpeg, png, webp, gif, bmp).",
)
@owner_option
@image_options
@db_option
def add(
    title: str,
    isbn: str,
    author: str,
    synopsis: str,
    genre: str,
    publisher: str,
    summary: str | None,
    photo: Path | None,
    owner_id: str,
    max_width: int,
    max_height: int,
    quality: int,
    db_path: Path | None,
) -> None:
    """Add a book to the catalog by hand."""
    fields = BookFields(
        title=title,
        isbn=isbn,
        author=author,
        synopsis=synopsis,
        genre=Genre(genre),
        publisher=Publisher(publisher),
        summary=summary,
    )
    constraints = ImageConstraints(max_width=max_width, max_height=max_height, quality=quality)
    uploaded = load_photo(photo) if photo else None

    with ingestion_service(db_path, constraints=constraints) as service:
        try:
            record = service.create_book(owner_id, fields, uploaded)
        except FolioError as exc:
            fail(console, exc)

    photo_note = f", photo {record.photo_content_type}" if record.has_photo else ""
    console.print(
        f"[green]Added[/green] #{record.id} [bold]{record.title}[/bold] "
        f"(ISBN {record.isbn}{photo_note})"
    )
