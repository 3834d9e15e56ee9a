# ABOUTME: Book record types and conversion between them and SQLite rows.
# ABOUTME: Enum fields are stored by value; photo bytes and content type travel together.

from dataclasses import dataclass
from typing import Any

from folio.metadata.classification import Genre, Publisher


@dataclass
class BookFields:
    """Caller-editable core fields of a book, as accepted by create and update."""

    title: str
    isbn: str
    author: str
    synopsis: str
    genre: Genre = Genre.OTHER
    publisher: Publisher = Publisher.OTHER
    summary: str | None = None


@dataclass
class BookRecord:
    """A cataloged book: core fields plus store-assigned and ownership data."""

    id: int
    title: str
    isbn: str
    genre: Genre
    author: str
    publisher: Publisher
    synopsis: str
    owner_id: str
    created_at: str
    summary: str | None = None
    photo_bytes: bytes | None = None
    photo_content_type: str | None = None
    cover_url: str | None = None
    updated_at: str | None = None

    @property
    def has_photo(self) -> bool:
        """Whether stored photo bytes are present."""
        return self.photo_bytes is not None and len(self.photo_bytes) > 0

    @property
    def photo_url(self) -> str | None:
        """Where a client can get the cover: the local photo, else the remote cover URL."""
        if self.has_photo:
            return f"/books/{self.id}/photo"
        return self.cover_url


def fields_to_row(fields: BookFields) -> dict[str, Any]:
    """Convert BookFields to a dict of column values for INSERT or UPDATE."""
    return {
        "title": fields.title,
        "isbn": fields.isbn,
        "genre": fields.genre.value,
        "author": fields.author,
        "publisher": fields.publisher.value,
        "synopsis": fields.synopsis,
        "summary": fields.summary,
    }


def _enum_or_other(enum_type: Any, value: str | None) -> Any:
    """Decode a stored enum value, degrading unknown values to OTHER."""
    try:
        return enum_type(value)
    except ValueError:
        return enum_type.OTHER


def row_to_record(row: Any) -> BookRecord:
    """Convert a full database row (dict-like) to a BookRecord."""
    photo = row["photo_bytes"]
    return BookRecord(
        id=row["id"],
        title=row["title"],
        isbn=row["isbn"],
        genre=_enum_or_other(Genre, row["genre"]),
        author=row["author"],
        publisher=_enum_or_other(Publisher, row["publisher"]),
        synopsis=row["synopsis"],
        summary=row["summary"],
        photo_bytes=bytes(photo) if photo is not None else None,
        photo_content_type=row["photo_content_type"],
        cover_url=row["cover_url"],
        owner_id=row["owner_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def record_to_fields(record: BookRecord) -> BookFields:
    """Extract the editable fields from a stored record."""
    return BookFields(
        title=record.title,
        isbn=record.isbn,
        author=record.author,
        synopsis=record.synopsis,
        genre=record.genre,
        publisher=record.publisher,
        summary=record.summary,
    )
