# ABOUTME: Catalog writer enforcing ISBN uniqueness, ownership, and field rules.
# ABOUTME: All create/update/delete paths into the catalog go through CatalogWriter.

import logging
from dataclasses import replace

from folio.db.catalog import LibraryCatalog
from folio.db.mapping import BookFields, BookRecord
from folio.errors import (
    AccessDeniedError,
    BookNotFoundError,
    DuplicateIdentifierError,
    InvalidBookFieldsError,
    PersistenceFailedError,
)
from folio.media.normalizer import ImageAsset
from folio.metadata.isbn import clean_isbn, isbn_format_problem

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
SYNOPSIS_MAX_LENGTH = 5000


def validate_fields(fields: BookFields) -> BookFields:
    """Check caller-supplied fields and return a cleaned copy.

    Text fields are stripped and the ISBN is normalized (whitespace and
    hyphens removed, upper-cased) so uniqueness is checked on one canonical key.

    Raises:
        InvalidBookFieldsError: Listing every problem found.
    """
    title = (fields.title or "").strip()
    author = (fields.author or "").strip()
    synopsis = (fields.synopsis or "").strip()
    isbn = clean_isbn(fields.isbn)
    summary = fields.summary.strip() if fields.summary and fields.summary.strip() else None

    problems: list[str] = []
    if not title:
        problems.append("Title is required")
    elif len(title) > TITLE_MAX_LENGTH:
        problems.append(f"Title must be at most {TITLE_MAX_LENGTH} characters")

    if not isbn:
        problems.append("ISBN is required")
    else:
        isbn_problem = isbn_format_problem(isbn)
        if isbn_problem:
            problems.append(isbn_problem)

    if not author:
        problems.append("Author is required")
    elif len(author) > AUTHOR_MAX_LENGTH:
        problems.append(f"Author must be at most {AUTHOR_MAX_LENGTH} characters")

    if not synopsis:
        problems.append("Synopsis is required")
    elif len(synopsis) > SYNOPSIS_MAX_LENGTH:
        problems.append(f"Synopsis must be at most {SYNOPSIS_MAX_LENGTH} characters")

    if problems:
        raise InvalidBookFieldsError(problems)

    return replace(
        fields, title=title, isbn=isbn, author=author, synopsis=synopsis, summary=summary
    )


class CatalogWriter:
    """Applies catalog invariants on top of a LibraryCatalog.

    - At most one book per normalized ISBN (checked and written in one transaction).
    - Only a book's owner may update or delete it; the owner never changes.
    - Photo bytes and content type are stored together.
    """

    def __init__(self, catalog: LibraryCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> LibraryCatalog:
        return self._catalog

    def create(
        self,
        owner_id: str,
        fields: BookFields,
        image: ImageAsset | None = None,
        *,
        cover_url: str | None = None,
    ) -> BookRecord:
        """Create a book owned by owner_id.

        Raises:
            AccessDeniedError: If no owner is given.
            InvalidBookFieldsError: If fields fail validation.
            DuplicateIdentifierError: If the normalized ISBN is already cataloged.
            PersistenceFailedError: On store failure.
        """
        if not owner_id:
            raise AccessDeniedError("An owner is required to create a book")
        clean = validate_fields(fields)

        with self._catalog.transaction():
            if self._catalog.find_by_identifier(clean.isbn) is not None:
                logger.warning(
                    "Rejected duplicate ISBN %s for %r by %s", clean.isbn, clean.title, owner_id
                )
                raise DuplicateIdentifierError(clean.isbn)
            book_id = self._catalog.insert(
                clean,
                owner_id,
                photo_bytes=image.data if image else None,
                photo_content_type=image.content_type if image else None,
                cover_url=cover_url,
            )

        logger.info("Created book %d %r (ISBN %s) for %s", book_id, clean.title, clean.isbn, owner_id)
        return self._reload(book_id)

    def update(
        self,
        book_id: int,
        owner_id: str,
        fields: BookFields,
        image: ImageAsset | None = None,
    ) -> BookRecord:
        """Replace a book's core fields, and its photo when image is given.

        Raises:
            InvalidBookFieldsError: If fields fail validation.
            BookNotFoundError: If the book does not exist.
            AccessDeniedError: If owner_id is not the book's owner.
            DuplicateIdentifierError: If another book holds the new ISBN.
            PersistenceFailedError: On store failure.
        """
        clean = validate_fields(fields)

        with self._catalog.transaction():
            self._owned_record(book_id, owner_id)
            if self._catalog.find_by_identifier(clean.isbn, exclude_id=book_id) is not None:
                raise DuplicateIdentifierError(clean.isbn)
            self._catalog.update(
                book_id,
                clean,
                photo_bytes=image.data if image else None,
                photo_content_type=image.content_type if image else None,
            )

        logger.info("Updated book %d %r for %s", book_id, clean.title, owner_id)
        return self._reload(book_id)

    def delete(self, book_id: int, owner_id: str) -> bool:
        """Hard-delete a book.

        Returns:
            True if the book existed and was removed, False if it did not exist.

        Raises:
            AccessDeniedError: If owner_id is not the book's owner.
        """
        with self._catalog.transaction():
            record = self._catalog.find_by_id(book_id)
            if record is None:
                return False
            if record.owner_id != owner_id:
                raise AccessDeniedError(f"Book {book_id} belongs to another user")
            removed = self._catalog.delete(book_id)

        if removed:
            logger.info("Deleted book %d (ISBN %s) for %s", book_id, record.isbn, owner_id)
        return removed

    def _owned_record(self, book_id: int, owner_id: str) -> BookRecord:
        record = self._catalog.find_by_id(book_id)
        if record is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        if record.owner_id != owner_id:
            raise AccessDeniedError(f"Book {book_id} belongs to another user")
        return record

    def _reload(self, book_id: int) -> BookRecord:
        record = self._catalog.find_by_id(book_id)
        if record is None:
            raise PersistenceFailedError(f"Book {book_id} vanished after being written")
        return record
