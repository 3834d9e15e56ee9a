# ABOUTME: Error taxonomy for the Folio ingestion pipeline.
# ABOUTME: Every error carries a stable `kind` so callers can report it without internals.


class FolioError(Exception):
    """Base class for all errors raised by the ingestion core.

    `kind` is a stable, user-presentable category; the message is a short
    human-readable explanation. Neither should expose internal exception detail.
    """

    kind = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidIdentifierError(FolioError):
    """Raised when an ISBN is empty after normalization."""

    kind = "InvalidIdentifier"


class ResolutionFailedError(FolioError):
    """Raised when the metadata lookup technically failed (transport or payload).

    Distinct from "nothing found", which is a successful empty result.
    Callers may retry.
    """

    kind = "ResolutionFailed"


class MetadataNotFoundError(FolioError):
    """Raised by the orchestrator when a lookup succeeded but found no book."""

    kind = "NotFoundUpstream"


class DecodeFailedError(FolioError):
    """Raised when image bytes are empty or cannot be decoded."""

    kind = "DecodeFailed"


class UnsupportedImageError(DecodeFailedError):
    """Raised when an upload's extension or content type is not an accepted image."""


class DuplicateIdentifierError(FolioError):
    """Raised when another book already uses the normalized ISBN."""

    kind = "DuplicateIdentifier"

    def __init__(self, isbn: str) -> None:
        super().__init__(f"ISBN {isbn} is already in use. Please use a different ISBN.")
        self.isbn = isbn


class BookNotFoundError(FolioError):
    """Raised when a book record (or its photo) does not exist."""

    kind = "NotFound"


class AccessDeniedError(FolioError):
    """Raised when a caller acts on a book owned by someone else."""

    kind = "AccessDenied"


class PersistenceFailedError(FolioError):
    """Raised when the catalog store fails for reasons other than uniqueness."""

    kind = "PersistenceFailed"


class InvalidBookFieldsError(FolioError):
    """Raised when caller-supplied book fields fail validation."""

    kind = "InvalidFields"

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems
