"""Detached process spawning for external players."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence
from typing import Any

import structlog

log = structlog.get_logger(__name__)


class SubprocessSpawner:
    """Implements ``ProcessSpawnerPort`` with ``subprocess.Popen``.

    The child is detached from our session and never waited on.
    """

    def spawn(self, argv: Sequence[str]) -> int | None:
        kwargs: dict[str, Any] = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
        }
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.DETACHED_PROCESS
        else:
            kwargs["start_new_session"] = True

        proc = subprocess.Popen(list(argv), **kwargs)  # noqa: S603
        log.debug("process_spawned", argv=list(argv), pid=proc.pid)
        return proc.pid
