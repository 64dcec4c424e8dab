"""Port for fire-and-forget process spawning."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ProcessSpawnerPort(Protocol):
    def spawn(self, argv: Sequence[str]) -> int | None:
        """Start *argv* detached and return its pid without waiting.

        Raises:
            OSError: the binary is missing or the OS refused to start it.
        """
        ...
