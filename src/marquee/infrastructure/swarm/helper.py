"""Swarm helper process adapter (peerflix-compatible CLI)."""

from __future__ import annotations

import asyncio
import contextlib
import sys
from collections.abc import Sequence

import structlog

from marquee.domain.entities.errors import SwarmHelperUnavailable

log = structlog.get_logger(__name__)

HELPER_REMEDIATION = (
    "Install the swarm helper with 'npm install -g peerflix' "
    "(requires Node.js) and make sure it is on PATH."
)


class PeerflixHelper:
    """Runs at most one helper process at a time.

    Implements ``SwarmHelperPort``. The helper is started as
    ``<command> <locator> --port <port> <extra args>``; its output is discarded.
    """

    def __init__(
        self,
        *,
        commands: Sequence[str] = ("peerflix", "peerflix.cmd"),
        extra_args: Sequence[str] = ("--not-on-top", "--quiet"),
        stop_timeout_seconds: float = 5.0,
    ) -> None:
        self._commands = tuple(commands)
        self._extra_args = tuple(extra_args)
        self._stop_timeout = stop_timeout_seconds
        self._proc: asyncio.subprocess.Process | None = None

    @property
    def is_running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    def endpoint_url(self, port: int) -> str:
        return f"http://127.0.0.1:{port}/"

    async def start(self, locator: str, port: int) -> None:
        if self.is_running:
            await self.stop()

        attempted: list[str] = []
        for command in self._commands:
            attempted.append(command)
            try:
                self._proc = await asyncio.create_subprocess_exec(
                    command,
                    locator,
                    "--port",
                    str(port),
                    *self._extra_args,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
            except OSError as exc:
                log.debug("swarm_helper_command_failed", command=command, error=str(exc))
                continue
            log.info(
                "swarm_helper_spawned",
                command=command,
                pid=self._proc.pid,
                port=port,
            )
            return

        log.error("swarm_helper_unavailable", attempted=attempted, platform=sys.platform)
        raise SwarmHelperUnavailable(attempted, HELPER_REMEDIATION)

    async def stop(self) -> None:
        proc, self._proc = self._proc, None
        if proc is None or proc.returncode is not None:
            return

        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._stop_timeout)
        except TimeoutError:
            log.warning("swarm_helper_kill", pid=proc.pid, timeout=self._stop_timeout)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
        log.info("swarm_helper_stopped", pid=proc.pid, returncode=proc.returncode)
