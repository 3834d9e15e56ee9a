# ABOUTME: Transient metadata record produced by an external catalog lookup.
# ABOUTME: ResolvedMetadata lives only for one ingestion call, before classification.

from dataclasses import dataclass, field


@dataclass
class ResolvedMetadata:
    """Normalized bibliographic data for one ISBN.

    Publisher and subjects are kept as free text here; the classification
    step turns them into closed enums.
    """

    isbn: str
    title: str
    author: str
    publisher_name: str
    synopsis: str
    page_count: int | None = None
    publish_date: str | None = None
    subjects: list[str] = field(default_factory=list)
    cover_url: str | None = None
    summary: str | None = None

    @property
    def has_cover(self) -> bool:
        """Whether the lookup offered a cover image URL."""
        return bool(self.cover_url)
