"""Port for the external swarm-download helper process."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SwarmHelperPort(Protocol):
    """Single-flight handle on the swarm helper process.

    At most one helper runs at a time; ``start()`` must not be called while
    a previous instance is alive (callers ``stop()`` first).
    """

    @property
    def is_running(self) -> bool: ...

    def endpoint_url(self, port: int) -> str:
        """Local URL the helper streams from while downloading."""
        ...

    async def start(self, locator: str, port: int) -> None:
        """Spawn the helper for *locator*, serving on *port*.

        Raises:
            SwarmHelperUnavailable: no configured helper command could be spawned.
        """
        ...

    async def stop(self) -> None:
        """Terminate the running helper, if any. Idempotent."""
        ...
