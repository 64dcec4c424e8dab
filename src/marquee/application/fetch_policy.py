"""Provider fetch strategies.

Two explicit policies over an ordered, immutable provider list:

- ``prioritized_fetch``: walk providers in priority order and stop at the
  first one that returns a non-empty listing.
- ``aggregated_fetch``: query every provider concurrently and keep all
  successful responses, in provider order.

A single provider call never fails the whole fetch: errors and timeouts
are logged and count as an empty response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Sequence
from typing import Protocol, TypeVar

import structlog

from marquee.domain.entities.errors import ProviderUnavailable
from marquee.domain.ports.catalog_provider import CatalogProviderPort

log = structlog.get_logger(__name__)

T = TypeVar("T")
ProviderCall = Callable[[CatalogProviderPort], Awaitable[list[T]]]


class CircuitBreaker(Protocol):
    def allow(self, provider: str) -> bool: ...

    def record_success(self, provider: str) -> None: ...

    def record_failure(self, provider: str) -> None: ...


class _HasId(Protocol):
    @property
    def id(self) -> Hashable: ...


_ItemT = TypeVar("_ItemT", bound=_HasId)


async def call_provider(
    provider: CatalogProviderPort,
    call: ProviderCall[T],
    *,
    timeout: float,
    operation: str,
    breaker: CircuitBreaker | None = None,
) -> list[T] | None:
    """Run one provider call under *timeout*.

    Returns ``None`` when the call was skipped or failed.
    """
    name = provider.name
    if breaker is not None and not breaker.allow(name):
        log.info("provider_skipped_circuit_open", provider=name, operation=operation)
        return None

    try:
        result = await asyncio.wait_for(call(provider), timeout=timeout)
    except TimeoutError:
        log.warning(
            "provider_timeout", provider=name, operation=operation, timeout=timeout
        )
    except ProviderUnavailable as exc:
        log.warning(
            "provider_unavailable",
            provider=name,
            operation=operation,
            reason=exc.reason,
        )
    except Exception:
        log.warning(
            "provider_call_failed", provider=name, operation=operation, exc_info=True
        )
    else:
        if breaker is not None:
            breaker.record_success(name)
        return result

    if breaker is not None:
        breaker.record_failure(name)
    return None


async def prioritized_fetch(
    providers: Sequence[CatalogProviderPort],
    call: ProviderCall[T],
    *,
    timeout: float,
    operation: str,
    breaker: CircuitBreaker | None = None,
) -> tuple[list[T], str | None]:
    """Return the first non-empty listing and the name of its provider.

    ``([], None)`` when every provider failed or returned nothing.
    """
    for provider in providers:
        result = await call_provider(
            provider, call, timeout=timeout, operation=operation, breaker=breaker
        )
        if result:
            return result, provider.name
        log.debug("provider_empty", provider=provider.name, operation=operation)
    return [], None


async def aggregated_fetch(
    providers: Sequence[CatalogProviderPort],
    calls: Sequence[ProviderCall[T]],
    *,
    timeout: float,
    operation: str,
    max_concurrency: int,
    breaker: CircuitBreaker | None = None,
) -> list[list[T]]:
    """Fan out ``provider x call`` with bounded parallelism and fan back in.

    The returned lists are provider-major (all calls of the first provider,
    then the second, ...) so callers can rely on priority order when merging.
    Failed calls are left out.
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _one(
        provider: CatalogProviderPort, call: ProviderCall[T]
    ) -> list[T] | None:
        async with semaphore:
            return await call_provider(
                provider, call, timeout=timeout, operation=operation, breaker=breaker
            )

    tasks = [_one(p, c) for p in providers for c in calls]
    results = await asyncio.gather(*tasks)
    return [r for r in results if r is not None]


def dedupe_by_id(items: Sequence[_ItemT]) -> list[_ItemT]:
    """Keep the first item seen for each id, preserving order."""
    seen: set[Hashable] = set()
    out: list[_ItemT] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        out.append(item)
    return out
