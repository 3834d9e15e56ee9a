# ABOUTME: Metadata package: ISBN lookup, payload parsing, and classification inference.
# ABOUTME: Exports ResolvedMetadata and the closed Genre/Publisher enums used throughout Folio.

from folio.metadata.classification import Genre, Publisher, infer_genre, map_publisher
from folio.metadata.isbn import normalize_isbn
from folio.metadata.provider import CoverSource, MetadataResolver
from folio.metadata.types import ResolvedMetadata

__all__ = [
    "CoverSource",
    "Genre",
    "MetadataResolver",
    "Publisher",
    "ResolvedMetadata",
    "infer_genre",
    "map_publisher",
    "normalize_isbn",
]
