# ABOUTME: Public API for the Folio catalog database layer.
# ABOUTME: Exports connection management, the persistence boundary, the writer, and record types.

from folio.db.catalog import LibraryCatalog
from folio.db.connection import DEFAULT_DB_PATH, open_library
from folio.db.mapping import BookFields, BookRecord
from folio.db.writer import CatalogWriter, validate_fields

__all__ = [
    "DEFAULT_DB_PATH",
    "BookFields",
    "BookRecord",
    "CatalogWriter",
    "LibraryCatalog",
    "open_library",
    "validate_fields",
]
