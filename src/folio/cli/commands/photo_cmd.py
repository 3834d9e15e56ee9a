# ABOUTME: The `folio photo` command for exporting a book's stored photo.
# ABOUTME: --width/--height re-size the image for this export only; the stored bytes never change.

import sys
from pathlib import Path

import click
from rich.console import Console

from folio.cli.options import db_option
from folio.cli.wiring import fail, ingestion_service
from folio.errors import FolioError

console = Console(stderr=True)


@click.command("photo")
@click.argument("book_id", type=int)
@click.argument("output", type=click.Path(dir_okay=False, allow_dash=True, path_type=Path))
@click.option("--width", type=click.IntRange(min=1), default=None, help="Maximum width.")
@click.option("--height", type=click.IntRange(min=1), default=None, help="Maximum height.")
@db_option
def photo(
    book_id: int,
    output: Path,
    width: int | None,
    height: int | None,
    db_path: Path | None,
) -> None:
    """Write the photo of BOOK_ID to OUTPUT (use - for stdout)."""
    with ingestion_service(db_path) as service:
        try:
            asset = service.get_photo(book_id, width=width, height=height)
        except FolioError as exc:
            fail(console, exc)

    if str(output) == "-":
        sys.stdout.buffer.write(asset.data)
        sys.stdout.buffer.flush()
        return

    output.write_bytes(asset.data)
    console.print(f"Wrote {len(asset.data)} bytes ({asset.content_type}) to {output}")
