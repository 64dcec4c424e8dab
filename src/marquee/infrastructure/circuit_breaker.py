"""Per-provider circuit breaker.

A provider that fails ``failure_threshold`` times in a row (error, bad
status, unparsable body or timeout) is skipped for ``cooldown_seconds``.
Once the cooldown has elapsed one probe call is let through; a successful
probe closes the breaker again, a failed one restarts the cooldown.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class _ProviderRecord:
    state: BreakerState = BreakerState.CLOSED
    failures: int = 0
    opened_at: float = 0.0


class ProviderCircuitBreaker:
    """Tracks consecutive failures per provider name.

    Not thread-safe; intended for use from a single event loop.
    """

    def __init__(
        self,
        *,
        failure_threshold: int = 5,
        cooldown_seconds: float = 60.0,
    ) -> None:
        self._threshold = failure_threshold
        self._cooldown = cooldown_seconds
        self._records: dict[str, _ProviderRecord] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def allow(self, provider: str) -> bool:
        """Return ``True`` if a call to *provider* may go out now."""
        record = self._records.get(provider)
        if record is None or record.state == BreakerState.CLOSED:
            return True
        if record.state == BreakerState.HALF_OPEN:
            return True

        if time.monotonic() - record.opened_at >= self._cooldown:
            record.state = BreakerState.HALF_OPEN
            return True
        return False

    def record_success(self, provider: str) -> None:
        self._records.pop(provider, None)

    def record_failure(self, provider: str) -> None:
        record = self._records.setdefault(provider, _ProviderRecord())

        if record.state == BreakerState.HALF_OPEN:
            self._open(record)
            return

        record.failures += 1
        if record.failures >= self._threshold:
            self._open(record)

    def state(self, provider: str) -> BreakerState:
        record = self._records.get(provider)
        return record.state if record is not None else BreakerState.CLOSED

    def reset(self, provider: str) -> None:
        self.record_success(provider)

    def snapshot(self) -> dict[str, dict[str, object]]:
        """Diagnostic view of every provider that has failed at least once."""
        return {
            name: {"state": rec.state.value, "failures": rec.failures}
            for name, rec in sorted(self._records.items())
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _open(record: _ProviderRecord) -> None:
        record.state = BreakerState.OPEN
        record.opened_at = time.monotonic()
