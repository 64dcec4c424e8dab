"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from marquee.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from marquee.application.use_cases import CatalogAggregator, PlaybackUseCase
    from marquee.infrastructure.circuit_breaker import ProviderCircuitBreaker
    from marquee.infrastructure.swarm.helper import PeerflixHelper


class AppState(State):
    """Typed view of ``app.state``, populated by composition.py::lifespan()."""

    config: AppConfig

    http_client: httpx.AsyncClient
    circuit_breaker: ProviderCircuitBreaker
    swarm_helper: PeerflixHelper

    catalog: CatalogAggregator
    playback: PlaybackUseCase
