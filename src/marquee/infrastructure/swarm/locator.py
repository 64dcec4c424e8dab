"""Finds downloaded video files in the swarm helper's cache directory."""

from __future__ import annotations

import os
import stat
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

DEFAULT_VIDEO_EXTENSIONS = (".mp4", ".mkv", ".avi", ".webm", ".m4v")
_CACHE_DIR_NAME = "torrent-stream"


def default_cache_root(platform: str | None = None) -> Path:
    """Platform cache root: the user temp dir on Windows, ``/tmp`` elsewhere."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        temp = os.environ.get("TEMP") or tempfile.gettempdir()
        return Path(temp) / _CACHE_DIR_NAME
    return Path("/tmp") / _CACHE_DIR_NAME


class CacheDirectoryLocator:
    """Implements ``VideoLocatorPort`` over ``<cache_root>/<info_hash>/``.

    Extensions are checked in priority order; within one extension the
    largest file wins.
    """

    def __init__(
        self,
        cache_root: Path | None = None,
        *,
        extensions: Sequence[str] = DEFAULT_VIDEO_EXTENSIONS,
    ) -> None:
        self._root = cache_root if cache_root is not None else default_cache_root()
        self._extensions = tuple(e.lower() for e in extensions)

    @property
    def cache_root(self) -> Path:
        return self._root

    def find(self, info_hash: str) -> Path | None:
        directory = self._root / info_hash.lower()
        if not directory.is_dir():
            return None

        try:
            by_ext = self._scan(directory)
        except OSError as exc:
            log.debug("video_scan_failed", info_hash=info_hash, error=str(exc))
            return None

        for ext in self._extensions:
            matches = by_ext.get(ext)
            if matches:
                _, found = max(matches, key=lambda m: m[0])
                log.debug("video_file_found", info_hash=info_hash, path=str(found))
                return found
        return None

    def _scan(self, directory: Path) -> dict[str, list[tuple[int, Path]]]:
        by_ext: dict[str, list[tuple[int, Path]]] = {}
        for path in directory.rglob("*"):
            suffix = path.suffix.lower()
            if suffix not in self._extensions:
                continue
            try:
                st = path.stat()
            except OSError:
                # the helper may delete or rename pieces while we walk
                continue
            if stat.S_ISREG(st.st_mode):
                by_ext.setdefault(suffix, []).append((st.st_size, path))
        return by_ext
