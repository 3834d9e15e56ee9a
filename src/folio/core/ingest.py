# ABOUTME: Ingestion orchestrator composing lookup, classification, image handling, and persistence.
# ABOUTME: Implements the direct-create and create-from-ISBN flows with their distinct error policies.

import logging
import posixpath
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from folio.db.mapping import BookFields, BookRecord
from folio.db.writer import (
    AUTHOR_MAX_LENGTH,
    SYNOPSIS_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    CatalogWriter,
)
from folio.errors import (
    BookNotFoundError,
    DecodeFailedError,
    FolioError,
    MetadataNotFoundError,
    UnsupportedImageError,
)
from folio.media.normalizer import (
    ALLOWED_UPLOAD_EXTENSIONS,
    ImageAsset,
    ImageConstraints,
    is_supported_upload,
    normalize,
    resize_for_display,
)
from folio.metadata.classification import infer_genre, map_publisher
from folio.metadata.http import MetadataFetchError
from folio.metadata.provider import CoverSource, MetadataResolver
from folio.metadata.types import ResolvedMetadata

logger = logging.getLogger(__name__)

_DEFAULT_COVER_NAME = "cover.jpg"


class IngestionStage(Enum):
    """Steps of one ingestion request. Request-scoped, never persisted."""

    START = "start"
    RESOLVE = "resolve"
    INFER = "infer"
    ACQUIRE_IMAGE = "acquire-image"
    PERSIST = "persist"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class UploadedPhoto:
    """An image attachment as received from a caller."""

    filename: str
    content_type: str
    data: bytes


class _StageTrace:
    """Tracks and logs the stage of a single ingestion request."""

    def __init__(self, flow: str) -> None:
        self.flow = flow
        self.stage = IngestionStage.START
        logger.debug("[%s] %s", flow, self.stage.value)

    def enter(self, stage: IngestionStage) -> None:
        logger.debug("[%s] %s -> %s", self.flow, self.stage.value, stage.value)
        self.stage = stage

    def abort(self, exc: FolioError) -> None:
        logger.info(
            "[%s] aborted during %s: %s: %s", self.flow, self.stage.value, exc.kind, exc.message
        )
        self.stage = IngestionStage.ABORTED


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def _cover_source_name(url: str) -> str:
    """Use the URL's file name so the cover keeps its extension-derived format."""
    name = posixpath.basename(urlparse(url).path)
    return name or _DEFAULT_COVER_NAME


class IngestionService:
    """Entry point for adding books to the catalog.

    Collaborators are injected explicitly. The service keeps no per-request
    state, so one instance can serve concurrent callers as long as each
    thread uses its own CatalogWriter connection.
    """

    def __init__(
        self,
        resolver: MetadataResolver,
        cover_source: CoverSource,
        writer: CatalogWriter,
        constraints: ImageConstraints | None = None,
    ) -> None:
        self._resolver = resolver
        self._covers = cover_source
        self._writer = writer
        self._constraints = constraints or ImageConstraints()

    def lookup(self, identifier: str) -> ResolvedMetadata | None:
        """Resolve an ISBN without cataloging anything.

        Raises:
            InvalidIdentifierError: If the identifier is empty.
            ResolutionFailedError: If the lookup technically failed.
        """
        return self._resolver.resolve(identifier)

    def create_from_identifier(
        self, owner_id: str, identifier: str, *, download_cover: bool = True
    ) -> BookRecord:
        """Create a book from an ISBN lookup.

        The cover download is best-effort: if it fails, or the bytes cannot be
        normalized, the book is still created without a photo.

        Raises:
            InvalidIdentifierError: If the identifier is empty.
            ResolutionFailedError: If the lookup technically failed.
            MetadataNotFoundError: If the lookup found no such book.
            DuplicateIdentifierError: If the ISBN is already cataloged.
        """
        trace = _StageTrace("create-from-identifier")
        try:
            trace.enter(IngestionStage.RESOLVE)
            metadata = self._resolver.resolve(identifier)
            if metadata is None:
                raise MetadataNotFoundError(f"No book found for ISBN {identifier.strip()}")

            trace.enter(IngestionStage.INFER)
            fields = BookFields(
                title=_clip(metadata.title, TITLE_MAX_LENGTH),
                isbn=metadata.isbn,
                author=_clip(metadata.author, AUTHOR_MAX_LENGTH),
                synopsis=_clip(metadata.synopsis, SYNOPSIS_MAX_LENGTH),
                genre=infer_genre(metadata.subjects),
                publisher=map_publisher(metadata.publisher_name),
                summary=metadata.summary,
            )
            logger.info(
                "Classified %s as %s / %s (publisher text %r)",
                metadata.isbn,
                fields.genre.value,
                fields.publisher.value,
                metadata.publisher_name,
            )

            image = None
            if download_cover and metadata.cover_url:
                trace.enter(IngestionStage.ACQUIRE_IMAGE)
                image = self._acquire_cover(metadata.cover_url)

            trace.enter(IngestionStage.PERSIST)
            record = self._writer.create(owner_id, fields, image, cover_url=metadata.cover_url)
        except FolioError as exc:
            trace.abort(exc)
            raise

        trace.enter(IngestionStage.DONE)
        return record

    def create_book(
        self, owner_id: str, fields: BookFields, photo: UploadedPhoto | None = None
    ) -> BookRecord:
        """Create a book from caller-supplied fields and an optional photo.

        Unlike the ISBN flow, a photo that cannot be processed aborts the
        whole creation.

        Raises:
            UnsupportedImageError: If the photo is not an accepted image type.
            DecodeFailedError: If the photo cannot be decoded.
            InvalidBookFieldsError: If fields fail validation.
            DuplicateIdentifierError: If the ISBN is already cataloged.
        """
        trace = _StageTrace("create")
        try:
            image = None
            if photo is not None:
                trace.enter(IngestionStage.ACQUIRE_IMAGE)
                image = self._prepare_upload(photo)

            trace.enter(IngestionStage.PERSIST)
            record = self._writer.create(owner_id, fields, image)
        except FolioError as exc:
            trace.abort(exc)
            raise

        trace.enter(IngestionStage.DONE)
        return record

    def update_book(
        self,
        book_id: int,
        owner_id: str,
        fields: BookFields,
        photo: UploadedPhoto | None = None,
    ) -> BookRecord:
        """Replace a book's fields, and its photo when one is attached.

        Photo failures are fatal, as in create_book.
        """
        trace = _StageTrace("update")
        try:
            image = None
            if photo is not None:
                trace.enter(IngestionStage.ACQUIRE_IMAGE)
                image = self._prepare_upload(photo)

            trace.enter(IngestionStage.PERSIST)
            record = self._writer.update(book_id, owner_id, fields, image)
        except FolioError as exc:
            trace.abort(exc)
            raise

        trace.enter(IngestionStage.DONE)
        return record

    def find_book(self, book_id: int) -> BookRecord | None:
        return self._writer.catalog.find_by_id(book_id)

    def delete_book(self, book_id: int, owner_id: str) -> bool:
        """Delete a book owned by owner_id. Returns False if it did not exist."""
        return self._writer.delete(book_id, owner_id)

    def get_photo(
        self, book_id: int, width: int | None = None, height: int | None = None
    ) -> ImageAsset:
        """Return a book's stored photo, optionally re-sized for this read only.

        Re-sizing is best-effort: if the stored bytes cannot be re-encoded,
        they are returned unchanged.

        Raises:
            BookNotFoundError: If the book does not exist or has no photo.
            ValueError: If a requested dimension is not positive.
        """
        for label, value in (("width", width), ("height", height)):
            if value is not None and value < 1:
                raise ValueError(f"{label} must be positive, got {value}")

        record = self._writer.catalog.find_by_id(book_id)
        if record is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        if not record.has_photo or record.photo_bytes is None:
            raise BookNotFoundError(f"Book {book_id} has no photo")

        content_type = record.photo_content_type or "image/jpeg"
        stored = ImageAsset(
            data=record.photo_bytes, content_type=content_type, source_name=f"book-{book_id}"
        )
        if width is None and height is None:
            return stored

        try:
            return resize_for_display(
                record.photo_bytes, content_type, width, height, self._constraints.quality
            )
        except DecodeFailedError as exc:
            logger.warning("Could not resize photo of book %d, serving original: %s", book_id, exc)
            return stored

    def _prepare_upload(self, photo: UploadedPhoto) -> ImageAsset:
        if not is_supported_upload(photo.filename, photo.content_type):
            allowed = ", ".join(sorted(ext.lstrip(".") for ext in ALLOWED_UPLOAD_EXTENSIONS))
            raise UnsupportedImageError(
                f"{photo.filename!r} ({photo.content_type or 'no content type'}) is not a "
                f"supported image; expected one of: {allowed}"
            )
        return normalize(photo.data, photo.filename, self._constraints)

    def _acquire_cover(self, url: str) -> ImageAsset | None:
        """Download and normalize a cover. Failures are logged and yield None."""
        try:
            data = self._covers.download(url)
            if data is None:
                return None
            return normalize(data, _cover_source_name(url), self._constraints)
        except (MetadataFetchError, DecodeFailedError, OSError) as exc:
            logger.warning("Skipping cover %s: %s", url, exc)
            return None
