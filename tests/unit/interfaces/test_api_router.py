"""Tests for the local HTTP API router and the app factory."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from marquee.application.use_cases import CatalogAggregator, PlaybackUseCase
from marquee.domain.entities import (
    CatalogItem,
    CatalogListing,
    ContentKind,
    DirectDescriptor,
    PlaybackOutcome,
    PlaybackState,
    ResolvedMedia,
    SearchResult,
    StreamCandidate,
    SwarmDescriptor,
)
from marquee.infrastructure.config import AppConfig
from marquee.interfaces.api.router import router
from marquee.interfaces.cli.cli import start
from marquee.interfaces.main import build_app

_CARS = CatalogItem(id="tt0317219", name="Cars", kind=ContentKind.MOVIE, year=2006)


def _make_app(
    *,
    catalog: MagicMock | None = None,
    playback: MagicMock | None = None,
) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    app.state.catalog = catalog or MagicMock()
    app.state.playback = playback or MagicMock()
    return app


def _outcome(**kwargs) -> PlaybackOutcome:
    kwargs.setdefault("session_id", "abc")
    kwargs.setdefault("state", PlaybackState.PLAYING)
    return PlaybackOutcome(**kwargs)


# ---------------------------------------------------------------------------
# Catalog endpoints
# ---------------------------------------------------------------------------


class TestCatalogEndpoints:
    def test_popular(self) -> None:
        catalog = MagicMock()
        catalog.fetch_popular = AsyncMock(
            return_value=CatalogListing(
                kind=ContentKind.MOVIE, items=(_CARS,), source="cinemeta"
            )
        )
        client = TestClient(_make_app(catalog=catalog))

        resp = client.get("/api/catalog/movie/popular")

        assert resp.status_code == 200
        body = resp.json()
        assert body["available"] is True
        assert body["source"] == "cinemeta"
        assert body["items"][0]["id"] == "tt0317219"
        catalog.fetch_popular.assert_awaited_once_with(ContentKind.MOVIE)

    def test_popular_unavailable(self) -> None:
        catalog = MagicMock()
        catalog.fetch_popular = AsyncMock(
            return_value=CatalogListing(kind=ContentKind.ANIME)
        )
        client = TestClient(_make_app(catalog=catalog))

        body = client.get("/api/catalog/anime/popular").json()

        assert body == {"kind": "anime", "source": None, "available": False, "items": []}

    def test_unknown_kind_is_rejected(self) -> None:
        client = TestClient(_make_app())
        assert client.get("/api/catalog/music/popular").status_code == 422

    def test_search(self) -> None:
        catalog = MagicMock()
        catalog.search_ranked = AsyncMock(
            return_value=[SearchResult(_CARS, 100, 27.5, 0, franchise_key="cars")]
        )
        client = TestClient(_make_app(catalog=catalog))

        resp = client.get(
            "/api/search", params={"q": "cars", "kind": ["movie"], "group": "false"}
        )

        assert resp.status_code == 200
        result = resp.json()["results"][0]
        assert result["relevance_score"] == 100
        assert result["franchise"] == "cars"
        catalog.search_ranked.assert_awaited_once_with(
            "cars", (ContentKind.MOVIE,), group_franchises=False
        )

    def test_search_default_kinds(self) -> None:
        catalog = MagicMock()
        catalog.search_ranked = AsyncMock(return_value=[])
        client = TestClient(_make_app(catalog=catalog))

        client.get("/api/search", params={"q": "cars"})

        args = catalog.search_ranked.await_args
        assert args.args == ("cars", (ContentKind.MOVIE, ContentKind.SERIES))
        assert args.kwargs == {"group_franchises": True}

    def test_streams(self) -> None:
        catalog = MagicMock()
        catalog.fetch_streams = AsyncMock(
            return_value=[
                StreamCandidate(
                    title="Cars 1080p",
                    descriptor=SwarmDescriptor(locator="magnet:?xt=urn:btih:abc"),
                    source="torrentio",
                    display_quality="1080p",
                    rank_score=55.0,
                )
            ]
        )
        client = TestClient(_make_app(catalog=catalog))

        body = client.get("/api/streams/series/tt0388629:1:5").json()

        assert body["item_id"] == "tt0388629:1:5"
        assert body["streams"][0]["descriptor"] == {
            "type": "swarm",
            "value": "magnet:?xt=urn:btih:abc",
        }
        catalog.fetch_streams.assert_awaited_once_with(
            ContentKind.SERIES, "tt0388629:1:5"
        )


# ---------------------------------------------------------------------------
# Playback endpoints
# ---------------------------------------------------------------------------


class TestPlaybackEndpoints:
    def _playback(self, outcome: PlaybackOutcome) -> MagicMock:
        playback = MagicMock()
        playback.resolve_and_play = AsyncMock(return_value=outcome)
        return playback

    def test_play_direct(self) -> None:
        media = ResolvedMedia.remote_endpoint("https://cdn.example/cars.mp4")
        playback = self._playback(_outcome(media=media, player="mpv", message="Playing"))
        client = TestClient(_make_app(playback=playback))

        resp = client.post(
            "/api/playback",
            json={
                "descriptor": {"type": "direct", "value": "https://cdn.example/cars.mp4"},
                "title": "Cars",
                "year": 2006,
            },
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["player"] == "mpv"
        assert body["media"]["kind"] == "remote_endpoint"
        descriptor, metadata = playback.resolve_and_play.await_args.args
        assert descriptor == DirectDescriptor(url="https://cdn.example/cars.mp4")
        assert metadata.display_title == "Cars (2006)"

    def test_degraded_is_flagged(self) -> None:
        media = ResolvedMedia.remote_endpoint("http://127.0.0.1:8888/", degraded=True)
        client = TestClient(_make_app(playback=self._playback(_outcome(media=media))))

        body = client.post(
            "/api/playback",
            json={
                "descriptor": {"type": "swarm", "value": "magnet:?xt=urn:btih:abc"},
                "title": "Cars",
            },
        ).json()

        assert body["degraded"] is True

    def test_error_status_mapping(self) -> None:
        cases = {
            "MALFORMED_DESCRIPTOR": 409,
            "SWARM_HELPER_UNAVAILABLE": 424,
            "PLAYER_UNAVAILABLE": 424,
            "RESOLUTION_CANCELLED": 200,
        }
        for code, status in cases.items():
            outcome = _outcome(state=PlaybackState.FAILED, error_code=code)
            client = TestClient(_make_app(playback=self._playback(outcome)))

            resp = client.post(
                "/api/playback",
                json={"descriptor": {"type": "swarm", "value": "x"}, "title": "Cars"},
            )

            assert resp.status_code == status, code
            assert resp.json()["error_code"] == code

    def test_invalid_body(self) -> None:
        client = TestClient(_make_app())
        resp = client.post(
            "/api/playback",
            json={"descriptor": {"type": "ftp", "value": "x"}, "title": "Cars"},
        )
        assert resp.status_code == 422

    def test_stop(self) -> None:
        playback = MagicMock()
        playback.stop = AsyncMock(return_value=True)
        client = TestClient(_make_app(playback=playback))

        assert client.post("/api/playback/stop").json() == {"stopped": True}

    def test_current_when_idle(self) -> None:
        playback = MagicMock()
        playback.snapshot = MagicMock(return_value=None)
        client = TestClient(_make_app(playback=playback))

        assert client.get("/api/playback").json() == {"state": "idle", "session_id": None}

    def test_current_session(self) -> None:
        playback = MagicMock()
        playback.snapshot = MagicMock(return_value=_outcome(player="vlc"))
        client = TestClient(_make_app(playback=playback))

        body = client.get("/api/playback").json()

        assert body["session_id"] == "abc"
        assert body["state"] == "playing"


# ---------------------------------------------------------------------------
# App factory and CLI
# ---------------------------------------------------------------------------


class TestBuildApp:
    def test_lifespan_wires_use_cases(self) -> None:
        app = build_app(AppConfig())

        with TestClient(app) as client:
            assert client.get("/healthz").json() == {"status": "ok"}
            assert isinstance(app.state.catalog, CatalogAggregator)
            assert isinstance(app.state.playback, PlaybackUseCase)
            assert [p.name for p in app.state.catalog.catalog_providers] == [
                "cinemeta",
                "torrentio",
                "thepiratebay-plus",
            ]
            assert [p.name for p in app.state.catalog.stream_providers] == [
                "torrentio",
                "thepiratebay-plus",
            ]

        assert app.state.http_client.is_closed


class TestCli:
    def test_start_serves_with_overrides(self) -> None:
        with (
            patch("marquee.interfaces.cli.cli.configure_logging", return_value={}) as cl,
            patch("marquee.interfaces.cli.cli.uvicorn.run") as run,
        ):
            start(["--port", "9999", "--log-level", "DEBUG"])

        config = cl.call_args.args[0]
        assert config.log_level == "DEBUG"
        assert run.call_args.kwargs["port"] == 9999
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["log_config"] == {}
