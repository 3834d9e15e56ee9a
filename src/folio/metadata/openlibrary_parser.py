# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts the loosely-typed Books API payload into ResolvedMetadata instances.

from typing import Any

from folio.metadata.types import ResolvedMetadata

DEFAULT_TITLE = "Title not available"
DEFAULT_AUTHOR = "Unknown author"
DEFAULT_PUBLISHER = "Unknown publisher"
DEFAULT_SYNOPSIS = "Synopsis not available"

_SYNOPSIS_SUBJECT_LIMIT = 3

# Cover variants in order of preference.
_COVER_SIZES = ("medium", "large", "small")


class MalformedPayloadError(ValueError):
    """Raised when a non-empty response does not have the expected overall shape."""


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _first_name(entries: Any) -> str | None:
    """Return the first non-blank `name` from a list of {name: ...} objects."""
    for entry in _as_list(entries):
        name = entry.get("name") if isinstance(entry, dict) else entry
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


def _subject_names(entries: Any) -> list[str]:
    """Subjects arrive as {name, url} objects; bare strings are accepted too."""
    names: list[str] = []
    for entry in _as_list(entries):
        name = entry.get("name") if isinstance(entry, dict) else entry
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


def _cover_url(cover: Any) -> str | None:
    if not isinstance(cover, dict):
        return None
    for size in _COVER_SIZES:
        url = cover.get(size)
        if isinstance(url, str) and url:
            return url
    return None


def _page_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _first_sentence(excerpts: Any) -> str | None:
    for excerpt in _as_list(excerpts):
        if not isinstance(excerpt, dict) or excerpt.get("first_sentence") is not True:
            continue
        text = excerpt.get("text")
        if isinstance(text, str) and text.strip():
            return text.strip()
    return None


def build_synopsis(
    first_sentence: str | None,
    page_count: int | None,
    publish_date: str | None,
    subjects: list[str],
) -> str:
    """Assemble a synopsis from whatever descriptive fields the lookup returned.

    Parts are joined with ". "; when nothing is available a placeholder is used.
    """
    parts: list[str] = []
    if first_sentence:
        parts.append(first_sentence.rstrip("."))
    if page_count is not None:
        parts.append(f"{page_count} pages")
    if publish_date:
        parts.append(f"Published {publish_date}")
    if subjects:
        parts.append(f"Subjects: {', '.join(subjects[:_SYNOPSIS_SUBJECT_LIMIT])}")
    return ". ".join(parts) if parts else DEFAULT_SYNOPSIS


def parse_books_api_response(data: Any, isbn: str) -> ResolvedMetadata | None:
    """Parse an Open Library Books API (`jscmd=data`) response.

    The payload is a map keyed by an identifier-prefixed string such as
    "ISBN:9780134685991". The exact key is not relied on: the first entry is
    taken, whatever its key.

    Returns:
        ResolvedMetadata for the first entry, or None for an empty map.

    Raises:
        MalformedPayloadError: If the payload or its first entry is not an object.
    """
    if not isinstance(data, dict):
        raise MalformedPayloadError(f"expected a JSON object, got {type(data).__name__}")
    if not data:
        return None

    entry = next(iter(data.values()))
    if not isinstance(entry, dict):
        raise MalformedPayloadError(f"expected a book object, got {type(entry).__name__}")

    title = entry.get("title")
    if not isinstance(title, str) or not title.strip():
        title = DEFAULT_TITLE

    publish_date = entry.get("publish_date")
    if not isinstance(publish_date, str) or not publish_date.strip():
        publish_date = None

    page_count = _page_count(entry.get("number_of_pages"))
    subjects = _subject_names(entry.get("subjects"))

    return ResolvedMetadata(
        isbn=isbn,
        title=title.strip(),
        author=_first_name(entry.get("authors")) or DEFAULT_AUTHOR,
        publisher_name=_first_name(entry.get("publishers")) or DEFAULT_PUBLISHER,
        synopsis=build_synopsis(
            _first_sentence(entry.get("excerpts")), page_count, publish_date, subjects
        ),
        page_count=page_count,
        publish_date=publish_date,
        subjects=subjects,
        cover_url=_cover_url(entry.get("cover")),
    )


def parse_works_key(data: Any) -> str | None:
    """Extract the first works key from an Open Library ISBN (edition) response."""
    if not isinstance(data, dict):
        return None
    for work in _as_list(data.get("works")):
        if isinstance(work, dict):
            key = work.get("key")
            if isinstance(key, str) and key:
                return key
    return None


def parse_works_response(data: Any) -> str | None:
    """Extract the description from an Open Library Works response.

    Handles the OL quirk where description can be either a plain string
    or a dict with {"type": ..., "value": "actual text"}.
    """
    if not isinstance(data, dict):
        return None
    desc = data.get("description")
    if desc is None:
        return None
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict):
        value = desc.get("value")
        return value if isinstance(value, str) else None
    return None
