# ABOUTME: HTTP client abstraction for metadata and cover downloads.
# ABOUTME: Provides timeouts, rate limiting, retry with backoff, and injectable transport for testing.

import json
import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

DEFAULT_TIMEOUT = 20.0


class MetadataFetchError(Exception):
    """Raised when a request fails at the transport level or returns unparseable JSON."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata and cover endpoints.

    Both methods return None when the server answered with a non-success
    status or an empty body, and raise MetadataFetchError when the request
    itself failed.
    """

    def get_json(self, url: str, params: dict[str, str] | None = None) -> Any | None: ...

    def get_bytes(self, url: str) -> bytes | None: ...


class FolioHttpClient:
    """HTTP client with timeouts, rate limiting and retry for catalog API calls.

    Wraps httpx.Client with configurable request intervals and retry logic
    for transient failures (429, 5xx). Retrying is this client's concern
    alone; callers never retry on their own.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        min_request_interval: float = 0.1,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "folio/0.1.0"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_request_time: float = 0.0

    def get_json(self, url: str, params: dict[str, str] | None = None) -> Any | None:
        """Send a GET request and parse the JSON body.

        Returns:
            The decoded JSON value, or None for a non-success status or an
            empty body.

        Raises:
            MetadataFetchError: On transport failure or a body that is not JSON.
        """
        response = self._send(url, params)
        if response is None:
            return None

        text = response.text
        if not text.strip():
            logger.warning("Empty response body from %s", url)
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise MetadataFetchError(f"Invalid JSON from {url}: {exc}") from exc

    def get_bytes(self, url: str) -> bytes | None:
        """Send a GET request and return the raw body.

        Returns:
            The body bytes, or None for a non-success status or an empty body.

        Raises:
            MetadataFetchError: On transport failure (including timeouts).
        """
        response = self._send(url, None)
        if response is None:
            return None
        content = response.content
        return content or None

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> "FolioHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, url: str, params: dict[str, str] | None) -> httpx.Response | None:
        """Issue the request with rate limiting and retry on transient statuses.

        Returns the response on success, or None once the server has answered
        with a non-success status that will not (or can no longer) be retried.
        """
        self._rate_limit()

        attempts = 1 + self._max_retries
        for attempt in range(attempts):
            try:
                response = self._client.get(url, params=params)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

            if response.is_success:
                return response

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                logger.warning("HTTP %d from %s", response.status_code, url)
                return None

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)
            else:
                logger.warning(
                    "HTTP %d from %s after %d attempts", response.status_code, url, attempts
                )

        return None

    def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._min_interval and self._last_request_time > 0:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()
