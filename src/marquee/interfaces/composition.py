"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from marquee.application.use_cases import (
    CatalogAggregator,
    PlaybackLauncher,
    PlaybackUseCase,
    StreamResolver,
)
from marquee.infrastructure.addons.client import HttpxAddonProvider
from marquee.infrastructure.circuit_breaker import ProviderCircuitBreaker
from marquee.infrastructure.config.schema import AppConfig
from marquee.infrastructure.players.candidates import (
    default_candidates,
    remediation,
    select_candidates,
)
from marquee.infrastructure.players.spawner import SubprocessSpawner
from marquee.infrastructure.ranking.relevance import rank
from marquee.infrastructure.streams.stream_sorter import StreamSorter
from marquee.infrastructure.swarm.helper import PeerflixHelper
from marquee.infrastructure.swarm.locator import CacheDirectoryLocator
from marquee.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_catalog(
    config: AppConfig,
    http_client: httpx.AsyncClient,
    breaker: ProviderCircuitBreaker,
) -> CatalogAggregator:
    providers = [
        HttpxAddonProvider(
            name=p.name,
            base_url=p.base_url,
            http_client=http_client,
            serves_catalog=p.catalog,
            serves_streams=p.streams,
            trackers=config.swarm.trackers,
        )
        for p in config.catalog.providers
    ]
    return CatalogAggregator(
        providers,
        ranker=rank,
        stream_sorter=StreamSorter(),
        timeout_seconds=config.http_timeout_seconds,
        search_max_results=config.catalog.search_max_results,
        popular_max_results=config.catalog.popular_max_results,
        min_query_length=config.catalog.min_query_length,
        max_concurrent_providers=config.catalog.max_concurrent_providers,
        circuit_breaker=breaker,
    )


def build_playback(config: AppConfig, helper: PeerflixHelper) -> PlaybackUseCase:
    resolver = StreamResolver(
        helper,
        CacheDirectoryLocator(
            config.swarm.cache_root, extensions=config.swarm.video_extensions
        ),
        port=config.swarm.port,
        poll_interval_seconds=config.swarm.poll_interval_seconds,
        poll_max_attempts=config.swarm.poll_max_attempts,
    )
    launcher = PlaybackLauncher(
        SubprocessSpawner(),
        select_candidates(default_candidates(), config.player.enabled),
        fullscreen=config.player.fullscreen,
        remediation=remediation(),
    )
    return PlaybackUseCase(resolver, launcher)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared resources on startup and release them on shutdown.

    Order:
        1. HTTP client (shared by every provider)
        2. Circuit breaker + catalog aggregator
        3. Swarm helper + playback use case
    """
    state = cast(AppState, app.state)
    config = state.config

    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=True,
    )
    log.info(
        "http_client_initialized",
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )

    state.circuit_breaker = ProviderCircuitBreaker(
        failure_threshold=config.catalog.failure_threshold,
        cooldown_seconds=config.catalog.cooldown_seconds,
    )
    state.catalog = build_catalog(config, state.http_client, state.circuit_breaker)
    log.info(
        "catalog_initialized",
        providers=[p.name for p in config.catalog.providers],
    )

    state.swarm_helper = PeerflixHelper(
        commands=config.swarm.helper_commands,
        extra_args=config.swarm.helper_args,
        stop_timeout_seconds=config.swarm.stop_timeout_seconds,
    )
    state.playback = build_playback(config, state.swarm_helper)
    log.info("playback_initialized", swarm_port=config.swarm.port)

    log.info("app_startup_complete")
    try:
        yield
    finally:
        await state.swarm_helper.stop()
        log.info("swarm_helper_released")

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
