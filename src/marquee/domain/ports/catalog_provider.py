"""Port for catalog provider endpoints."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from marquee.domain.entities.catalog import CatalogItem, ContentKind
from marquee.domain.entities.playback import StreamCandidate


@runtime_checkable
class CatalogProviderPort(Protocol):
    """Async interface for one third-party catalog provider.

    Implementations raise ``ProviderUnavailable`` (or let transport errors
    escape); the aggregator treats any failure as an empty listing.
    """

    name: str
    serves_catalog: bool
    serves_streams: bool

    async def popular(self, kind: ContentKind) -> list[CatalogItem]:
        """Fetch the provider's popular listing for *kind*."""
        ...

    async def search(self, kind: ContentKind, query: str) -> list[CatalogItem]:
        """Search the provider's *kind* catalog for *query*."""
        ...

    async def streams(self, kind: ContentKind, item_id: str) -> list[StreamCandidate]:
        """List stream candidates for a catalog item."""
        ...
