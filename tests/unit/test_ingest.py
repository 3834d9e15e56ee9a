# ABOUTME: Unit tests for IngestionService orchestration.
# ABOUTME: Uses fake resolver and cover source to test both create flows and their error policies.

import logging
from dataclasses import replace

import pytest

from folio.core.ingest import IngestionService, UploadedPhoto
from folio.db.mapping import BookFields
from folio.db.writer import CatalogWriter
from folio.errors import (
    BookNotFoundError,
    DecodeFailedError,
    DuplicateIdentifierError,
    MetadataNotFoundError,
    ResolutionFailedError,
    UnsupportedImageError,
)
from folio.media.normalizer import ImageConstraints
from folio.metadata.classification import Genre, Publisher
from folio.metadata.http import MetadataFetchError
from folio.metadata.types import ResolvedMetadata
from tests.fixtures.images import decode, image_bytes

COVER_URL = "https://covers.openlibrary.org/b/id/42-M.jpg"


class FakeResolver:
    """Resolver returning a canned result, or raising a canned error."""

    def __init__(self, result: ResolvedMetadata | Exception | None = None) -> None:
        self._result = result
        self.calls: list[str] = []

    def resolve(self, identifier: str) -> ResolvedMetadata | None:
        self.calls.append(identifier)
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeCoverSource:
    """Cover source serving canned bytes per URL."""

    def __init__(self, blobs: dict[str, bytes | Exception] | None = None) -> None:
        self._blobs = blobs or {}
        self.calls: list[str] = []

    def download(self, url: str) -> bytes | None:
        self.calls.append(url)
        blob = self._blobs.get(url)
        if isinstance(blob, Exception):
            raise blob
        return blob


def _metadata(**overrides: object) -> ResolvedMetadata:
    meta = ResolvedMetadata(
        isbn="9780141354217",
        title="Charlie and the Chocolate Factory",
        author="Roald Dahl",
        publisher_name="Puffin Books",
        synopsis="192 pages",
        page_count=192,
        subjects=["Juvenile fiction", "Chocolate"],
        cover_url=COVER_URL,
        summary="A golden ticket.",
    )
    return replace(meta, **overrides)


def _service(
    writer: CatalogWriter,
    resolver: FakeResolver | None = None,
    covers: FakeCoverSource | None = None,
) -> IngestionService:
    return IngestionService(
        resolver=resolver or FakeResolver(_metadata()),
        cover_source=covers or FakeCoverSource(),
        writer=writer,
        constraints=ImageConstraints(),
    )


class TestCreateFromIdentifier:
    def test_creates_classified_book_with_cover(self, writer: CatalogWriter) -> None:
        covers = FakeCoverSource({COVER_URL: image_bytes(1600, 1200, fmt="JPEG")})
        record = _service(writer, covers=covers).create_from_identifier("alice", "9780141354217")

        assert record.title == "Charlie and the Chocolate Factory"
        assert record.genre == Genre.FICTION
        assert record.publisher == Publisher.PENGUIN_RANDOM_HOUSE
        assert record.summary == "A golden ticket."
        assert record.cover_url == COVER_URL
        assert record.photo_content_type == "image/jpeg"
        assert record.photo_bytes is not None
        assert decode(record.photo_bytes).size == (800, 600)

    def test_png_cover_url_stored_as_png(self, writer: CatalogWriter) -> None:
        url = "https://covers.openlibrary.org/b/id/42-L.png"
        resolver = FakeResolver(_metadata(cover_url=url))
        covers = FakeCoverSource({url: image_bytes(200, 300)})
        record = _service(writer, resolver, covers).create_from_identifier("alice", "x")
        assert record.photo_content_type == "image/png"

    def test_cover_timeout_still_creates_book(self, writer: CatalogWriter) -> None:
        covers = FakeCoverSource({COVER_URL: MetadataFetchError("timed out")})
        record = _service(writer, covers=covers).create_from_identifier("alice", "9780141354217")
        assert not record.has_photo
        assert record.cover_url == COVER_URL
        assert writer.catalog.count_active() == 1

    def test_undecodable_cover_still_creates_book(self, writer: CatalogWriter) -> None:
        covers = FakeCoverSource({COVER_URL: b"<html>not found</html>"})
        record = _service(writer, covers=covers).create_from_identifier("alice", "9780141354217")
        assert not record.has_photo

    def test_missing_cover_still_creates_book(self, writer: CatalogWriter) -> None:
        record = _service(writer).create_from_identifier("alice", "9780141354217")
        assert not record.has_photo

    def test_no_cover_download_when_disabled(self, writer: CatalogWriter) -> None:
        covers = FakeCoverSource({COVER_URL: image_bytes()})
        record = _service(writer, covers=covers).create_from_identifier(
            "alice", "9780141354217", download_cover=False
        )
        assert covers.calls == []
        assert not record.has_photo

    def test_not_found_upstream(self, writer: CatalogWriter) -> None:
        service = _service(writer, FakeResolver(None))
        with pytest.raises(MetadataNotFoundError) as exc_info:
            service.create_from_identifier("alice", "9780000000000")
        assert exc_info.value.kind == "NotFoundUpstream"
        assert writer.catalog.count_active() == 0

    def test_abort_is_logged_with_stage(
        self, writer: CatalogWriter, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="folio.core.ingest")
        with pytest.raises(MetadataNotFoundError):
            _service(writer, FakeResolver(None)).create_from_identifier("alice", "9780000000000")
        assert "aborted during resolve" in caplog.text

    def test_resolution_failure_propagates(self, writer: CatalogWriter) -> None:
        service = _service(writer, FakeResolver(ResolutionFailedError("timed out")))
        with pytest.raises(ResolutionFailedError):
            service.create_from_identifier("alice", "9780141354217")

    def test_duplicate_identifier(self, writer: CatalogWriter) -> None:
        service = _service(writer)
        service.create_from_identifier("alice", "9780141354217")
        with pytest.raises(DuplicateIdentifierError):
            service.create_from_identifier("bob", "978-0-14-135421-7")
        assert writer.catalog.count_active() == 1

    def test_long_fields_are_clipped(self, writer: CatalogWriter) -> None:
        resolver = FakeResolver(_metadata(title="T" * 300, synopsis="S" * 6000))
        record = _service(writer, resolver).create_from_identifier("alice", "9780141354217")
        assert len(record.title) == 200
        assert len(record.synopsis) == 5000

    def test_lookup_does_not_persist(self, writer: CatalogWriter) -> None:
        meta = _service(writer).lookup("9780141354217")
        assert meta is not None
        assert writer.catalog.count_active() == 0


class TestCreateBook:
    def test_with_photo(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        photo = UploadedPhoto("cover.png", "image/png", image_bytes(1000, 1000))
        record = _service(writer).create_book("alice", sample_fields, photo)
        assert record.photo_content_type == "image/png"
        assert record.photo_bytes is not None
        assert decode(record.photo_bytes).size == (600, 600)

    def test_without_photo(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        record = _service(writer).create_book("alice", sample_fields)
        assert not record.has_photo
        assert record.genre == Genre.TECHNOLOGY

    def test_unsupported_photo_is_fatal(
        self, writer: CatalogWriter, sample_fields: BookFields
    ) -> None:
        photo = UploadedPhoto("notes.txt", "text/plain", b"hello")
        with pytest.raises(UnsupportedImageError):
            _service(writer).create_book("alice", sample_fields, photo)
        assert writer.catalog.count_active() == 0

    def test_undecodable_photo_is_fatal(
        self, writer: CatalogWriter, sample_fields: BookFields
    ) -> None:
        photo = UploadedPhoto("cover.jpg", "image/jpeg", b"not really a jpeg")
        with pytest.raises(DecodeFailedError):
            _service(writer).create_book("alice", sample_fields, photo)
        assert writer.catalog.count_active() == 0


class TestUpdateAndDelete:
    def test_update_replaces_photo(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        service = _service(writer)
        record = service.create_book("alice", sample_fields)
        photo = UploadedPhoto("new.webp", "image/webp", image_bytes(100, 50))
        updated = service.update_book(record.id, "alice", sample_fields, photo)
        assert updated.photo_content_type == "image/webp"

    def test_update_bad_photo_leaves_record(
        self, writer: CatalogWriter, sample_fields: BookFields
    ) -> None:
        service = _service(writer)
        record = service.create_book("alice", sample_fields)
        photo = UploadedPhoto("x.gif", "image/gif", b"garbage")
        with pytest.raises(DecodeFailedError):
            service.update_book(record.id, "alice", replace(sample_fields, title="New"), photo)
        found = service.find_book(record.id)
        assert found is not None
        assert found.title == sample_fields.title

    def test_delete(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        service = _service(writer)
        record = service.create_book("alice", sample_fields)
        assert service.delete_book(record.id, "alice") is True
        assert service.find_book(record.id) is None


class TestGetPhoto:
    def test_returns_stored_bytes(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        service = _service(writer)
        photo = UploadedPhoto("c.jpg", "image/jpeg", image_bytes(400, 300, fmt="JPEG"))
        record = service.create_book("alice", sample_fields, photo)
        asset = service.get_photo(record.id)
        assert asset.data == record.photo_bytes
        assert asset.content_type == "image/jpeg"

    def test_resizes_for_read_only(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        service = _service(writer)
        photo = UploadedPhoto("c.jpg", "image/jpeg", image_bytes(400, 300, fmt="JPEG"))
        record = service.create_book("alice", sample_fields, photo)

        asset = service.get_photo(record.id, width=200)
        assert decode(asset.data).size == (200, 150)

        stored = service.find_book(record.id)
        assert stored is not None
        assert stored.photo_bytes == record.photo_bytes

    def test_undecodable_stored_photo_served_as_is(
        self, writer: CatalogWriter, sample_fields: BookFields
    ) -> None:
        book_id = writer.catalog.insert(
            replace(sample_fields, isbn="9780135957059"),
            "alice",
            photo_bytes=b"corrupt",
            photo_content_type="image/jpeg",
        )
        asset = _service(writer).get_photo(book_id, width=100)
        assert asset.data == b"corrupt"

    def test_book_without_photo(self, writer: CatalogWriter, sample_fields: BookFields) -> None:
        service = _service(writer)
        record = service.create_book("alice", sample_fields)
        with pytest.raises(BookNotFoundError, match="no photo"):
            service.get_photo(record.id)

    def test_missing_book(self, writer: CatalogWriter) -> None:
        with pytest.raises(BookNotFoundError):
            _service(writer).get_photo(999)

    def test_rejects_non_positive_size(self, writer: CatalogWriter) -> None:
        with pytest.raises(ValueError):
            _service(writer).get_photo(1, width=0)
