# ABOUTME: The `folio update` command for editing a cataloged book.
# ABOUTME: Unspecified options keep their stored values; --photo replaces the stored photo.

from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console

from folio.cli.commands.add_cmd import GENRE_CHOICE, PUBLISHER_CHOICE
from folio.cli.options import db_option, image_options, owner_option
from folio.cli.wiring import fail, ingestion_service, load_photo
from folio.db.mapping import record_to_fields
from folio.errors import BookNotFoundError, FolioError
from folio.media.normalizer import ImageConstraints
from folio.metadata.classification import Genre, Publisher

console = Console()


@click.command("update")
@click.argument("book_id", type=int)
@click.option("--title", default=None)
@click.option("--isbn", default=None)
@click.option("--author", default=None)
@click.option("--synopsis", default=None)
@click.option("--genre", type=GENRE_CHOICE, default=None)
@click.option("--publisher", type=PUBLISHER_CHOICE, default=None)
@click.option("--summary", default=None)
@click.option(
    "--photo",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replacement cover photo file.",
)
@owner_option
@image_options
@db_option
def update(
    book_id: int,
    title: str | None,
    isbn: str | None,
    author: str | None,
    synopsis: str | None,
    genre: str | None,
    publisher: str | None,
    summary: str | None,
    photo: Path | None,
    owner_id: str,
    max_width: int,
    max_height: int,
    quality: int,
    db_path: Path | None,
) -> None:
    """Update the fields (and optionally the photo) of book BOOK_ID."""
    constraints = ImageConstraints(max_width=max_width, max_height=max_height, quality=quality)
    uploaded = load_photo(photo) if photo else None

    with ingestion_service(db_path, constraints=constraints) as service:
        try:
            existing = service.find_book(book_id)
            if existing is None:
                raise BookNotFoundError(f"Book {book_id} not found")

            changes: dict[str, object] = {
                key: value
                for key, value in (
                    ("title", title),
                    ("isbn", isbn),
                    ("author", author),
                    ("synopsis", synopsis),
                    ("summary", summary),
                )
                if value is not None
            }
            if genre is not None:
                changes["genre"] = Genre(genre)
            if publisher is not None:
                changes["publisher"] = Publisher(publisher)

            fields = replace(record_to_fields(existing), **changes)
            record = service.update_book(book_id, owner_id, fields, uploaded)
        except FolioError as exc:
            fail(console, exc)

    console.print(f"[green]Updated[/green] #{record.id} [bold]{record.title}[/bold]")
