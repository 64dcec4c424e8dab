"""Catalog aggregation use case: popular listings, search and stream listings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from marquee.application.fetch_policy import (
    CircuitBreaker,
    ProviderCall,
    aggregated_fetch,
    dedupe_by_id,
    prioritized_fetch,
)
from marquee.domain.entities.catalog import (
    CatalogItem,
    CatalogListing,
    ContentKind,
    SearchResult,
)
from marquee.domain.entities.playback import StreamCandidate
from marquee.domain.ports.catalog_provider import CatalogProviderPort

log = structlog.get_logger(__name__)

DEFAULT_SEARCH_KINDS: tuple[ContentKind, ...] = (ContentKind.MOVIE, ContentKind.SERIES)


class _Ranker(Protocol):
    def __call__(
        self, raw: list[CatalogItem], query: str, *, group_franchises: bool = True
    ) -> list[SearchResult]: ...


class _StreamSorter(Protocol):
    def sort(self, streams: list[StreamCandidate]) -> list[StreamCandidate]: ...


class CatalogAggregator:
    """Queries an ordered provider list, tolerating partial failure.

    Popular listings use the prioritized policy (first non-empty provider
    wins); search and stream listings use the aggregated policy (every
    provider, merged in priority order).
    """

    def __init__(
        self,
        providers: Sequence[CatalogProviderPort],
        *,
        ranker: _Ranker,
        stream_sorter: _StreamSorter,
        timeout_seconds: float = 10.0,
        search_max_results: int = 100,
        popular_max_results: int = 50,
        min_query_length: int = 2,
        max_concurrent_providers: int = 5,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self._providers = tuple(providers)
        self._ranker = ranker
        self._sorter = stream_sorter
        self._timeout = timeout_seconds
        self._search_max = search_max_results
        self._popular_max = popular_max_results
        self._min_query_length = min_query_length
        self._max_concurrent = max_concurrent_providers
        self._breaker = circuit_breaker

    @property
    def catalog_providers(self) -> tuple[CatalogProviderPort, ...]:
        return tuple(p for p in self._providers if p.serves_catalog)

    @property
    def stream_providers(self) -> tuple[CatalogProviderPort, ...]:
        return tuple(p for p in self._providers if p.serves_streams)

    async def fetch_popular(self, kind: ContentKind) -> CatalogListing:
        """Popular listing for *kind* from the highest-priority provider that has one.

        Returns a listing with ``source=None`` when no provider delivered.
        """
        items, source = await prioritized_fetch(
            self.catalog_providers,
            lambda p: p.popular(kind),
            timeout=self._timeout,
            operation=f"popular:{kind.value}",
            breaker=self._breaker,
        )
        if source is None:
            log.warning("popular_no_source_available", kind=kind.value)
            return CatalogListing(kind=kind)

        accepted = dedupe_by_id(items)[: self._popular_max]
        log.info(
            "popular_source_selected",
            kind=kind.value,
            source=source,
            count=len(accepted),
        )
        return CatalogListing(kind=kind, items=tuple(accepted), source=source)

    async def search(
        self,
        query: str,
        kinds: Sequence[ContentKind] = DEFAULT_SEARCH_KINDS,
    ) -> list[CatalogItem]:
        """Merged, de-duplicated, capped raw results (not yet ranked)."""
        query = query.strip()
        if len(query) < self._min_query_length:
            log.debug("search_query_too_short", query=query)
            return []

        responses = await aggregated_fetch(
            self.catalog_providers,
            [_search_call(kind, query) for kind in kinds],
            timeout=self._timeout,
            operation="search",
            max_concurrency=self._max_concurrent,
            breaker=self._breaker,
        )
        merged = dedupe_by_id([item for items in responses for item in items])
        capped = merged[: self._search_max]
        log.info(
            "search_completed",
            query=query,
            kinds=[k.value for k in kinds],
            responses=len(responses),
            count=len(capped),
        )
        return capped

    async def search_ranked(
        self,
        query: str,
        kinds: Sequence[ContentKind] = DEFAULT_SEARCH_KINDS,
        *,
        group_franchises: bool = True,
    ) -> list[SearchResult]:
        raw = await self.search(query, kinds)
        if not raw:
            return []
        return self._ranker(raw, query, group_franchises=group_franchises)

    async def fetch_streams(
        self, kind: ContentKind, item_id: str
    ) -> list[StreamCandidate]:
        """Stream candidates from every stream-serving provider, best first."""
        responses = await aggregated_fetch(
            self.stream_providers,
            [lambda p: p.streams(kind, item_id)],
            timeout=self._timeout,
            operation="streams",
            max_concurrency=self._max_concurrent,
            breaker=self._breaker,
        )
        streams = [s for candidates in responses for s in candidates]
        ranked = self._sorter.sort(streams)
        log.info("streams_fetched", item_id=item_id, kind=kind.value, count=len(ranked))
        return ranked


def _search_call(kind: ContentKind, query: str) -> ProviderCall[CatalogItem]:
    # Binds *kind* per call.
    return lambda p: p.search(kind, query)
