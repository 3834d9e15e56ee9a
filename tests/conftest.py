# ABOUTME: Shared pytest fixtures for Folio tests.
# ABOUTME: Provides a temporary catalog database, a writer over it, and sample book fields.

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from folio.db.catalog import LibraryCatalog
from folio.db.connection import open_library
from folio.db.mapping import BookFields
from folio.db.writer import CatalogWriter
from folio.metadata.classification import Genre, Publisher


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path to a fresh library database in a temp directory."""
    return tmp_path / "library.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """An open connection to the temp library database."""
    connection = open_library(db_path)
    yield connection
    connection.close()


@pytest.fixture
def catalog(conn: sqlite3.Connection) -> LibraryCatalog:
    return LibraryCatalog(conn)


@pytest.fixture
def writer(catalog: LibraryCatalog) -> CatalogWriter:
    return CatalogWriter(catalog)


@pytest.fixture
def sample_fields() -> BookFields:
    """Valid hand-entered fields for The Pragmatic Programmer."""
    return BookFields(
        title="The Pragmatic Programmer",
        isbn="978-0-13-595705-9",
        author="David Thomas",
        synopsis="From journeyman to master.",
        genre=Genre.TECHNOLOGY,
        publisher=Publisher.OTHER,
    )

