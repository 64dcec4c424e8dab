"""Tests for HttpxAddonProvider (addon-protocol adapter)."""

from __future__ import annotations

import httpx
import pytest
import respx

from marquee.domain.entities import ContentKind, ProviderUnavailable, SwarmDescriptor
from marquee.infrastructure.addons.client import HttpxAddonProvider

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_BASE = "https://addon.example"
_HASH = "abcdef0123456789abcdef0123456789abcdef01"


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@pytest.fixture()
def provider(http_client: httpx.AsyncClient) -> HttpxAddonProvider:
    return HttpxAddonProvider(
        name="addon",
        base_url=f"{_BASE}/",
        http_client=http_client,
        trackers=["udp://tracker.example:80"],
    )


_MOVIES = {
    "metas": [
        {"id": "tt0245429", "name": "Spirited Away", "year": 2001},
        {"id": "tt0317219", "name": "Cars", "year": 2006, "genres": ["Animation"]},
    ]
}

_SERIES = {
    "metas": [
        {"id": "tt0388629", "name": "One Piece", "genres": ["Anime", "Action"]},
        {"id": "tt0944947", "name": "Game of Thrones"},
    ]
}


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class TestPopular:
    @respx.mock
    async def test_movie_listing(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(json=_MOVIES)

        items = await provider.popular(ContentKind.MOVIE)

        assert [i.name for i in items] == ["Spirited Away", "Cars"]
        assert all(i.kind == ContentKind.MOVIE for i in items)

    @respx.mock
    async def test_anime_is_derived_from_series_and_movies(
        self, provider: HttpxAddonProvider
    ) -> None:
        respx.get(f"{_BASE}/catalog/series/top.json").respond(json=_SERIES)
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(json=_MOVIES)

        items = await provider.popular(ContentKind.ANIME)

        assert [i.name for i in items] == ["One Piece", "Spirited Away"]
        assert all(i.kind == ContentKind.ANIME for i in items)

    @respx.mock
    async def test_anime_survives_one_failing_catalog(
        self, provider: HttpxAddonProvider
    ) -> None:
        respx.get(f"{_BASE}/catalog/series/top.json").respond(status_code=503)
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(json=_MOVIES)

        items = await provider.popular(ContentKind.ANIME)

        assert [i.name for i in items] == ["Spirited Away"]

    @respx.mock
    async def test_not_found_is_empty(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/series/top.json").respond(status_code=404)

        assert await provider.popular(ContentKind.SERIES) == []

    @respx.mock
    async def test_server_error_raises(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(status_code=500)

        with pytest.raises(ProviderUnavailable, match="HTTP 500"):
            await provider.popular(ContentKind.MOVIE)

    @respx.mock
    async def test_invalid_json_raises(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(text="<html>")

        with pytest.raises(ProviderUnavailable, match="invalid JSON"):
            await provider.popular(ContentKind.MOVIE)

    @respx.mock
    async def test_non_object_body_raises(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/movie/top.json").respond(json=[1, 2])

        with pytest.raises(ProviderUnavailable):
            await provider.popular(ContentKind.MOVIE)

    @respx.mock
    async def test_transport_error_raises(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/catalog/movie/top.json").mock(
            side_effect=httpx.ConnectError("refused")
        )

        with pytest.raises(ProviderUnavailable, match="ConnectError"):
            await provider.popular(ContentKind.MOVIE)


class TestSearch:
    @respx.mock
    async def test_query_is_encoded(self, provider: HttpxAddonProvider) -> None:
        route = respx.get(url__startswith=f"{_BASE}/catalog/movie/top/search=").respond(
            json=_MOVIES
        )

        await provider.search(ContentKind.MOVIE, "toy story/2")

        assert route.called
        raw_path = route.calls.last.request.url.raw_path
        assert raw_path == b"/catalog/movie/top/search=toy%20story%2F2.json"

    @respx.mock
    async def test_anime_results_are_retagged(
        self, provider: HttpxAddonProvider
    ) -> None:
        respx.get(url__startswith=f"{_BASE}/catalog/series/top/search=").respond(
            json=_SERIES
        )

        items = await provider.search(ContentKind.SERIES, "piece")

        kinds = {i.name: i.kind for i in items}
        assert kinds == {
            "One Piece": ContentKind.ANIME,
            "Game of Thrones": ContentKind.SERIES,
        }


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------


class TestStreams:
    @respx.mock
    async def test_movie_streams(self, provider: HttpxAddonProvider) -> None:
        respx.get(f"{_BASE}/stream/movie/tt0317219.json").respond(
            json={
                "streams": [
                    {"infoHash": _HASH, "fileIdx": 1, "title": "Cars 1080p\n👤 20"},
                    {"url": "https://cdn.example/cars.mp4", "title": "Direct"},
                ]
            }
        )

        streams = await provider.streams(ContentKind.MOVIE, "tt0317219")

        assert len(streams) == 2
        swarm = streams[0]
        assert isinstance(swarm.descriptor, SwarmDescriptor)
        assert swarm.descriptor.locator == (
            f"magnet:?xt=urn:btih:{_HASH}&tr=udp%3A%2F%2Ftracker.example%3A80&so=0"
        )
        assert swarm.seeders == 20
        assert swarm.source == "addon"

    @respx.mock
    async def test_anime_episode_uses_series_route(
        self, provider: HttpxAddonProvider
    ) -> None:
        route = respx.get(f"{_BASE}/stream/series/tt0388629:1:5.json").respond(
            json={"streams": []}
        )

        assert await provider.streams(ContentKind.ANIME, "tt0388629:1:5") == []
        assert route.called

    @respx.mock
    async def test_anime_movie_uses_movie_route(
        self, provider: HttpxAddonProvider
    ) -> None:
        route = respx.get(f"{_BASE}/stream/movie/tt0245429.json").respond(json={})

        await provider.streams(ContentKind.ANIME, "tt0245429")

        assert route.called
