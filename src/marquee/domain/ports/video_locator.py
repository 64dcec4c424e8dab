"""Port for locating downloaded video files on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class VideoLocatorPort(Protocol):
    def find(self, info_hash: str) -> Path | None:
        """Return the preferred video file under the hash directory, or None."""
        ...
