# ABOUTME: Open Library implementations of the metadata resolver and cover source.
# ABOUTME: Looks books up by ISBN via the Books API and downloads cover art by URL.

import logging

from folio.errors import ResolutionFailedError
from folio.metadata.http import HttpClient, MetadataFetchError
from folio.metadata.isbn import normalize_isbn
from folio.metadata.openlibrary_parser import (
    MalformedPayloadError,
    parse_books_api_response,
    parse_works_key,
    parse_works_response,
)
from folio.metadata.types import ResolvedMetadata

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"


class OpenLibraryResolver:
    """Metadata resolver backed by the Open Library Books API.

    Uses dependency-injected HttpClient for testability. Holds no state
    between calls, so one instance can serve concurrent requests.
    """

    def __init__(self, http_client: HttpClient, *, fetch_summary: bool = True) -> None:
        self._http = http_client
        self._fetch_summary = fetch_summary

    def resolve(self, identifier: str) -> ResolvedMetadata | None:
        """Look up a book by ISBN.

        Returns:
            The resolved metadata, or None when Open Library has no such book
            (non-success status, empty body, or an empty result map).

        Raises:
            InvalidIdentifierError: If the identifier is empty after normalization.
            ResolutionFailedError: On transport failure or a malformed payload.
        """
        isbn = normalize_isbn(identifier)
        logger.info("Looking up ISBN %s on Open Library", isbn)

        try:
            data = self._http.get_json(
                f"{_OL_BASE}/api/books",
                params={"bibkeys": f"ISBN:{isbn}", "format": "json", "jscmd": "data"},
            )
        except MetadataFetchError as exc:
            logger.warning("ISBN lookup failed for %s: %s", isbn, exc)
            raise ResolutionFailedError(f"Lookup for ISBN {isbn} failed: {exc}") from exc

        if data is None:
            logger.info("No Open Library response for ISBN %s", isbn)
            return None

        try:
            metadata = parse_books_api_response(data, isbn)
        except MalformedPayloadError as exc:
            logger.warning("Malformed Open Library payload for %s: %s", isbn, exc)
            raise ResolutionFailedError(
                f"Lookup for ISBN {isbn} returned an unreadable response"
            ) from exc

        if metadata is None:
            logger.info("Open Library has no book for ISBN %s", isbn)
            return None

        if self._fetch_summary:
            metadata.summary = self.fetch_summary(isbn)

        logger.info("Resolved ISBN %s: %s by %s", isbn, metadata.title, metadata.author)
        return metadata

    def fetch_summary(self, isbn: str) -> str | None:
        """Fetch the work-level description for an ISBN.

        Goes edition -> works key -> works record. Best-effort: any failure
        is logged and yields None.
        """
        try:
            edition = self._http.get_json(f"{_OL_BASE}/isbn/{isbn}.json")
            works_key = parse_works_key(edition)
            if not works_key:
                logger.debug("No works key for ISBN %s", isbn)
                return None
            works = self._http.get_json(f"{_OL_BASE}{works_key}.json")
        except MetadataFetchError as exc:
            logger.warning("Summary lookup failed for %s: %s", isbn, exc)
            return None

        summary = parse_works_response(works)
        if summary:
            logger.debug("Found %d-character summary for %s", len(summary), isbn)
        return summary


class OpenLibraryCoverSource:
    """Cover source that downloads artwork bytes by URL."""

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    def download(self, url: str) -> bytes | None:
        """Download cover bytes.

        Returns None for a blank URL, a non-success status or an empty body.

        Raises:
            MetadataFetchError: On transport failure or timeout.
        """
        if not url or not url.strip():
            return None
        logger.info("Downloading cover image %s", url)
        data = self._http.get_bytes(url)
        if data is None:
            logger.warning("Cover not available at %s", url)
            return None
        logger.info("Downloaded cover %s (%d bytes)", url, len(data))
        return data
