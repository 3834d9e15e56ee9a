# ABOUTME: ISBN normalization and format checks.
# ABOUTME: Strips whitespace and hyphens so lookups and uniqueness checks use one canonical key.

import re

from folio.errors import InvalidIdentifierError

_SEPARATOR_RE = re.compile(r"[\s-]")
_ISBN_CHARS_RE = re.compile(r"^[0-9X]+$")

ISBN_MIN_LENGTH = 10
ISBN_MAX_LENGTH = 13


def clean_isbn(identifier: str | None) -> str:
    """Remove whitespace and hyphens and upper-case the rest; may return ""."""
    return _SEPARATOR_RE.sub("", identifier or "").upper()


def normalize_isbn(identifier: str) -> str:
    """Remove whitespace and hyphens from an identifier.

    Raises:
        InvalidIdentifierError: If nothing is left after stripping.
    """
    clean = clean_isbn(identifier)
    if not clean:
        raise InvalidIdentifierError("ISBN must not be empty")
    return clean


def isbn_format_problem(isbn: str) -> str | None:
    """Describe why a normalized ISBN is malformed, or None if it looks valid.

    Only checks shape (length and characters), not the check digit.
    """
    if not ISBN_MIN_LENGTH <= len(isbn) <= ISBN_MAX_LENGTH:
        return f"ISBN must be between {ISBN_MIN_LENGTH} and {ISBN_MAX_LENGTH} characters"
    if not _ISBN_CHARS_RE.match(isbn):
        return "ISBN may only contain digits and X (hyphens and spaces are ignored)"
    return None
