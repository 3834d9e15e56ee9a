# ABOUTME: Persistence boundary for the Folio catalog: typed queries and writes on `books`.
# ABOUTME: Translates SQLite failures into the catalog's duplicate/persistence error types.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from folio.db.mapping import BookFields, BookRecord, fields_to_row, row_to_record
from folio.errors import DuplicateIdentifierError, PersistenceFailedError
from folio.metadata.classification import Genre

logger = logging.getLogger(__name__)

_UNIQUE_ISBN_VIOLATION = "UNIQUE constraint failed: books.isbn"
_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%SZ', 'now')"


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the books table.

    Writes commit immediately unless they run inside `transaction()`, in which
    case the outermost transaction commits or rolls back as a unit.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._tx_depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run a block under one write transaction (BEGIN IMMEDIATE).

        Taking the write lock up front means a check-then-insert inside the
        block cannot interleave with another writer's. Nested use joins the
        outer transaction.
        """
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        with self._guard():
            self._conn.execute("BEGIN IMMEDIATE")
        self._tx_depth = 1
        try:
            yield
            with self._guard():
                self._conn.commit()
        except BaseException:
            self._conn.rollback()
            raise
        finally:
            self._tx_depth = 0

    @contextmanager
    def _guard(self, isbn: str | None = None) -> Iterator[None]:
        """Map sqlite3 errors onto the catalog's error types."""
        try:
            yield
        except sqlite3.IntegrityError as exc:
            if _UNIQUE_ISBN_VIOLATION in str(exc):
                raise DuplicateIdentifierError(isbn or "?") from exc
            logger.error("Integrity error in catalog: %s", exc)
            raise PersistenceFailedError("The catalog rejected the change") from exc
        except sqlite3.Error as exc:
            logger.error("Catalog store failure: %s", exc)
            raise PersistenceFailedError("The catalog store is unavailable") from exc

    def _commit(self) -> None:
        if not self._tx_depth:
            self._conn.commit()

    def insert(
        self,
        fields: BookFields,
        owner_id: str,
        *,
        photo_bytes: bytes | None = None,
        photo_content_type: str | None = None,
        cover_url: str | None = None,
    ) -> int:
        """Insert a book and return its row ID.

        Raises:
            DuplicateIdentifierError: If the ISBN is already cataloged.
            PersistenceFailedError: On any other store failure.
        """
        row = fields_to_row(fields)
        row["owner_id"] = owner_id
        row["photo_bytes"] = photo_bytes
        row["photo_content_type"] = photo_content_type
        row["cover_url"] = cover_url

        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        with self._guard(fields.isbn):
            cursor = self._conn.execute(
                f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
            self._commit()

        return cursor.lastrowid  # type: ignore[return-value]

    def update(
        self,
        book_id: int,
        fields: BookFields,
        *,
        photo_bytes: bytes | None = None,
        photo_content_type: str | None = None,
    ) -> bool:
        """Replace a book's core fields and refresh updated_at.

        The photo is only replaced when new bytes are given; bytes and content
        type are always written together. Returns False if no row matched.

        Raises:
            DuplicateIdentifierError: If the new ISBN belongs to another book.
            PersistenceFailedError: On any other store failure.
        """
        values = fields_to_row(fields)
        if photo_bytes is not None:
            values["photo_bytes"] = photo_bytes
            values["photo_content_type"] = photo_content_type

        set_clause = ", ".join(f"{k} = ?" for k in values)
        set_clause += f", updated_at = {_NOW_SQL}"

        with self._guard(fields.isbn):
            cursor = self._conn.execute(
                f"UPDATE books SET {set_clause} WHERE id = ?",
                [*values.values(), book_id],
            )
            self._commit()

        return cursor.rowcount > 0

    def delete(self, book_id: int) -> bool:
        """Hard-delete a book. Returns False if no row matched."""
        with self._guard():
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            self._commit()
        return cursor.rowcount > 0

    def find_by_id(self, book_id: int) -> BookRecord | None:
        """Retrieve a book by its row ID."""
        with self._guard():
            row = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return row_to_record(row) if row else None

    def find_by_identifier(
        self, isbn: str, *, exclude_id: int | None = None
    ) -> BookRecord | None:
        """Retrieve the book holding a normalized ISBN, optionally ignoring one ID."""
        sql = "SELECT * FROM books WHERE isbn = ?"
        params: list[object] = [isbn]
        if exclude_id is not None:
            sql += " AND id != ?"
            params.append(exclude_id)
        with self._guard():
            row = self._conn.execute(sql, params).fetchone()
        return row_to_record(row) if row else None

    def find_by_owner(self, owner_id: str) -> list[BookRecord]:
        """Return an owner's books, newest first."""
        with self._guard():
            rows = self._conn.execute(
                "SELECT * FROM books WHERE owner_id = ? ORDER BY created_at DESC, id DESC",
                (owner_id,),
            ).fetchall()
        return [row_to_record(row) for row in rows]

    def list_all(self) -> list[BookRecord]:
        """Return all books in the catalog, ordered by title."""
        with self._guard():
            rows = self._conn.execute("SELECT * FROM books ORDER BY title, id").fetchall()
        return [row_to_record(row) for row in rows]

    def count_active(self) -> int:
        """Count cataloged books."""
        with self._guard():
            row = self._conn.execute("SELECT COUNT(*) FROM books").fetchone()
        return int(row[0])

    def count_by_genre(self) -> list[tuple[Genre, int]]:
        """Count books for every genre, most populated first.

        Genres with no books are included with a count of zero.
        """
        with self._guard():
            rows = self._conn.execute(
                "SELECT genre, COUNT(*) FROM books GROUP BY genre"
            ).fetchall()
        counts = {genre: 0 for genre in Genre}
        for value, count in rows:
            try:
                counts[Genre(value)] += count
            except ValueError:
                counts[Genre.OTHER] += count
        ordering = list(Genre)
        return sorted(counts.items(), key=lambda item: (-item[1], ordering.index(item[0])))
