"""Shared test fixtures for the Marquee test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from marquee.domain.entities import (
    CatalogItem,
    ContentKind,
    PlaybackMetadata,
    PlayerCandidate,
    SwarmDescriptor,
)

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------

INFO_HASH = "abcdef0123456789abcdef0123456789abcdef01"


def make_item(
    item_id: str,
    name: str,
    *,
    kind: ContentKind = ContentKind.MOVIE,
    year: int | None = None,
    rating: float | None = None,
    genres: tuple[str, ...] = (),
    description: str | None = None,
) -> CatalogItem:
    return CatalogItem(
        id=item_id,
        name=name,
        kind=kind,
        year=year,
        rating=rating,
        genres=genres,
        description=description,
    )


@pytest.fixture()
def item_factory():
    return make_item


@pytest.fixture()
def catalog_item() -> CatalogItem:
    return make_item("tt0317219", "Cars", year=2006, rating=7.2)


@pytest.fixture()
def swarm_descriptor() -> SwarmDescriptor:
    return SwarmDescriptor(locator=f"magnet:?xt=urn:btih:{INFO_HASH.upper()}&dn=Cars")


@pytest.fixture()
def metadata() -> PlaybackMetadata:
    return PlaybackMetadata(title="Cars", kind=ContentKind.MOVIE, year=2006)


# ---------------------------------------------------------------------------
# Port fakes
# ---------------------------------------------------------------------------


def make_provider(
    name: str,
    *,
    popular: list[CatalogItem] | Exception | None = None,
    search: list[CatalogItem] | Exception | None = None,
    streams: list | Exception | None = None,
    serves_catalog: bool = True,
    serves_streams: bool = True,
) -> MagicMock:
    """CatalogProviderPort fake; an Exception value is raised by that call."""
    provider = MagicMock()
    provider.name = name
    provider.serves_catalog = serves_catalog
    provider.serves_streams = serves_streams

    def _async(value: object) -> AsyncMock:
        if isinstance(value, Exception):
            return AsyncMock(side_effect=value)
        return AsyncMock(return_value=value if value is not None else [])

    provider.popular = _async(popular)
    provider.search = _async(search)
    provider.streams = _async(streams)
    return provider


@pytest.fixture()
def provider_factory():
    return make_provider


@pytest.fixture()
def swarm_helper() -> MagicMock:
    """SwarmHelperPort fake that tracks a single running instance."""
    helper = MagicMock()
    helper.is_running = False
    helper.calls = []

    async def _start(locator: str, port: int) -> None:
        helper.calls.append(("start", locator))
        helper.is_running = True

    async def _stop() -> None:
        helper.calls.append(("stop", helper.is_running))
        helper.is_running = False

    helper.start = AsyncMock(side_effect=_start)
    helper.stop = AsyncMock(side_effect=_stop)
    helper.endpoint_url = MagicMock(side_effect=lambda port: f"http://127.0.0.1:{port}/")
    return helper


@pytest.fixture()
def video_locator() -> MagicMock:
    """VideoLocatorPort fake that never finds a file."""
    locator = MagicMock()
    locator.find = MagicMock(return_value=None)
    return locator


@pytest.fixture()
def found_video(tmp_path: Path) -> Path:
    path = tmp_path / "Cars.2006.1080p.mkv"
    path.write_bytes(b"\x00" * 16)
    return path


def _record_args(target: str, title: str, fullscreen: bool) -> list[str]:
    args = [f"--title={title}"]
    if fullscreen:
        args.append("--fs")
    return [*args, target]


@pytest.fixture()
def player_candidates() -> list[PlayerCandidate]:
    return [
        PlayerCandidate(name="first", binary=("first-player",), build_args=_record_args),
        PlayerCandidate(name="second", binary=("second-player",), build_args=_record_args),
        PlayerCandidate(name="third", binary=("third-player",), build_args=_record_args),
    ]
