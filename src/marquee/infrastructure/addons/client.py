"""Addon-protocol catalog provider: async httpx implementation."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Callable, Sequence
from urllib.parse import quote

import httpx
import structlog

from marquee.domain.entities.catalog import CatalogItem, ContentKind
from marquee.domain.entities.errors import ProviderUnavailable
from marquee.domain.entities.playback import StreamCandidate
from marquee.infrastructure.addons.anime import is_anime
from marquee.infrastructure.addons.parsers import parse_metas, parse_streams

log = structlog.get_logger(__name__)

# Catalog types actually served by addons; anime is derived from both.
_CATALOG_TYPES: dict[ContentKind, tuple[str, ...]] = {
    ContentKind.MOVIE: ("movie",),
    ContentKind.SERIES: ("series",),
    ContentKind.ANIME: ("series", "movie"),
}


class HttpxAddonProvider:
    """One addon endpoint (Cinemeta, Torrentio, ...).

    Implements ``CatalogProviderPort``. Every failure surfaces as
    ``ProviderUnavailable``; callers decide whether it is fatal.
    """

    def __init__(
        self,
        *,
        name: str,
        base_url: str,
        http_client: httpx.AsyncClient,
        serves_catalog: bool = True,
        serves_streams: bool = True,
        trackers: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.serves_catalog = serves_catalog
        self.serves_streams = serves_streams
        self._base_url = base_url.rstrip("/")
        self._http = http_client
        self._trackers = tuple(trackers)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(url)
            if resp.status_code == 404:
                log.debug("addon_resource_not_found", provider=self.name, path=path)
                return {}
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                self.name, f"HTTP {exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(
                self.name, f"{type(exc).__name__} for {path}"
            ) from exc
        except ValueError as exc:
            raise ProviderUnavailable(self.name, f"invalid JSON for {path}") from exc

        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, f"unexpected document for {path}")
        return data

    async def _listing(
        self, kind: ContentKind, path_for: Callable[[str], str]
    ) -> list[CatalogItem]:
        """Fetch each catalog type backing *kind*; anime keeps detected entries only."""
        catalog_types = _CATALOG_TYPES[kind]
        results = await asyncio.gather(
            *(self._get(path_for(t)) for t in catalog_types),
            return_exceptions=True,
        )

        items: list[CatalogItem] = []
        errors: list[BaseException] = []
        for catalog_type, result in zip(catalog_types, results):
            if isinstance(result, BaseException):
                if not isinstance(result, ProviderUnavailable):
                    raise result
                errors.append(result)
                continue
            native = ContentKind(catalog_type)
            items.extend(parse_metas(result, native))

        if errors and len(errors) == len(catalog_types):
            raise errors[0]

        if kind == ContentKind.ANIME:
            return [_as_anime(i) for i in items if is_anime(i)]
        return items

    # ------------------------------------------------------------------
    # Public API (CatalogProviderPort)
    # ------------------------------------------------------------------

    async def popular(self, kind: ContentKind) -> list[CatalogItem]:
        items = await self._listing(kind, lambda t: f"/catalog/{t}/top.json")
        log.debug(
            "addon_popular_fetched",
            provider=self.name,
            kind=kind.value,
            count=len(items),
        )
        return items

    async def search(self, kind: ContentKind, query: str) -> list[CatalogItem]:
        encoded = quote(query, safe="")
        items = await self._listing(
            kind, lambda t: f"/catalog/{t}/top/search={encoded}.json"
        )
        # Search results from movie/series catalogs are re-tagged when they are anime.
        items = [_as_anime(i) if is_anime(i) else i for i in items]
        log.debug(
            "addon_search_fetched",
            provider=self.name,
            kind=kind.value,
            query=query,
            count=len(items),
        )
        return items

    async def streams(self, kind: ContentKind, item_id: str) -> list[StreamCandidate]:
        stream_type = _stream_type(kind, item_id)
        doc = await self._get(f"/stream/{stream_type}/{quote(item_id, safe=':')}.json")
        candidates = parse_streams(doc, source=self.name, trackers=self._trackers)
        log.debug(
            "addon_streams_fetched",
            provider=self.name,
            item_id=item_id,
            count=len(candidates),
        )
        return candidates


def _as_anime(item: CatalogItem) -> CatalogItem:
    if item.kind == ContentKind.ANIME:
        return item
    return replace(item, kind=ContentKind.ANIME)


def _stream_type(kind: ContentKind, item_id: str) -> str:
    # Episode ids look like "tt0388629:1:5".
    if kind == ContentKind.ANIME:
        return "series" if ":" in item_id else "movie"
    return kind.value
