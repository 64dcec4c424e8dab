"""Domain entities for catalog listings and search results.

Pure value objects with no framework dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ContentKind(str, Enum):
    """Closed set of content kinds a provider can list."""

    MOVIE = "movie"
    SERIES = "series"
    ANIME = "anime"


@dataclass(frozen=True)
class CatalogItem:
    """A single catalog entry as parsed from a provider listing.

    ``id`` is the provider-assigned identifier (e.g. ``"tt1234567"``) and is
    the only deduplication key within a kind.
    """

    id: str
    name: str
    kind: ContentKind
    poster_url: str | None = None
    year: int | None = None
    rating: float | None = None
    description: str | None = None
    genres: tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogListing:
    """Outcome of a prioritized popular-listing fetch.

    ``source`` names the provider whose listing was accepted, or ``None``
    when every configured provider failed or returned nothing.
    """

    kind: ContentKind
    items: tuple[CatalogItem, ...] = ()
    source: str | None = None

    @property
    def available(self) -> bool:
        return self.source is not None and bool(self.items)


@dataclass(frozen=True)
class SearchResult:
    """A catalog item scored against the current query."""

    item: CatalogItem
    relevance_score: int
    secondary_score: float
    original_index: int
    franchise_key: str | None = field(default=None, compare=False)

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def year(self) -> int | None:
        return self.item.year

    @property
    def kind(self) -> ContentKind:
        return self.item.kind
