# ABOUTME: Protocols for the external collaborators the ingestion core depends on.
# ABOUTME: MetadataResolver looks books up by ISBN; CoverSource fetches cover art bytes.

from typing import Protocol, runtime_checkable

from folio.metadata.types import ResolvedMetadata


@runtime_checkable
class MetadataResolver(Protocol):
    """Protocol for ISBN-keyed metadata lookup services.

    `resolve` returns None when the lookup succeeded but found nothing, and
    raises ResolutionFailedError when the lookup itself failed.
    """

    def resolve(self, identifier: str) -> ResolvedMetadata | None: ...


@runtime_checkable
class CoverSource(Protocol):
    """Protocol for plain byte fetches of cover artwork by URL."""

    def download(self, url: str) -> bytes | None: ...
