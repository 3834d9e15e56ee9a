# ABOUTME: Builds the catalog, ingestion service, and their collaborators for CLI commands.
# ABOUTME: Also loads photo files and renders Folio errors as a one-line message.

import mimetypes
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import NoReturn

from rich.console import Console

from folio.core.ingest import IngestionService, UploadedPhoto
from folio.db.catalog import LibraryCatalog
from folio.db.connection import DEFAULT_DB_PATH, open_library
from folio.db.writer import CatalogWriter
from folio.errors import FolioError
from folio.media.normalizer import ImageConstraints
from folio.metadata.http import DEFAULT_TIMEOUT, FolioHttpClient
from folio.metadata.openlibrary import OpenLibraryCoverSource, OpenLibraryResolver

# Older interpreters ship no WebP entry in their mimetypes table.
mimetypes.add_type("image/webp", ".webp")

console = Console()


@contextmanager
def open_catalog(db_path: Path | None) -> Iterator[LibraryCatalog]:
    """Yield a LibraryCatalog over the library database, closing it on exit.

    A database that cannot be opened ends the command through fail().
    """
    try:
        conn = open_library(db_path or DEFAULT_DB_PATH)
    except FolioError as exc:
        fail(console, exc)
    with closing(conn):
        yield LibraryCatalog(conn)


@contextmanager
def ingestion_service(
    db_path: Path | None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    constraints: ImageConstraints | None = None,
) -> Iterator[IngestionService]:
    """Open the catalog and an HTTP client, and yield a wired IngestionService.

    Both the database connection and the HTTP client are closed on exit.
    """
    with open_catalog(db_path) as catalog, FolioHttpClient(timeout=timeout) as http_client:
        yield IngestionService(
            resolver=OpenLibraryResolver(http_client),
            cover_source=OpenLibraryCoverSource(http_client),
            writer=CatalogWriter(catalog),
            constraints=constraints,
        )


def load_photo(path: Path) -> UploadedPhoto:
    """Read an image file into an UploadedPhoto, guessing its content type from the name."""
    content_type, _ = mimetypes.guess_type(path.name)
    return UploadedPhoto(
        filename=path.name,
        content_type=content_type or "",
        data=path.read_bytes(),
    )


def fail(console: Console, exc: FolioError) -> NoReturn:
    """Print a Folio error as `Kind: message` and exit with status 1."""
    console.print(f"[red]{exc.kind}:[/red] {exc.message}")
    raise SystemExit(1) from exc
