"""Playback launcher: ordered external-player fallback chain."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from marquee.domain.entities.errors import InvalidStateTransition, PlayerUnavailable
from marquee.domain.entities.playback import (
    LaunchResult,
    PlaybackSession,
    PlaybackState,
    PlayerCandidate,
)
from marquee.domain.ports.process_spawner import ProcessSpawnerPort

log = structlog.get_logger(__name__)


class PlaybackLauncher:
    """Spawns the first player candidate that starts.

    Candidates are tried strictly in order. A spawn failure moves on to the
    next candidate; the spawned process is never awaited.
    """

    def __init__(
        self,
        spawner: ProcessSpawnerPort,
        candidates: Sequence[PlayerCandidate],
        *,
        fullscreen: bool = True,
        remediation: str = "",
    ) -> None:
        self._spawner = spawner
        self._candidates = tuple(candidates)
        self._fullscreen = fullscreen
        self._remediation = remediation

    @property
    def candidates(self) -> tuple[PlayerCandidate, ...]:
        return self._candidates

    def launch(self, session: PlaybackSession) -> LaunchResult:
        """Launch a player for a READY or DEGRADED session.

        Raises:
            InvalidStateTransition: the session is not launchable.
            PlayerUnavailable: every candidate failed to spawn.
        """
        if session.media is None:
            raise InvalidStateTransition(
                f"session {session.session_id} has no resolved media"
            )
        session.transition(PlaybackState.LAUNCHING)
        target = session.media.location
        title = session.metadata.display_title

        attempted: list[str] = []
        for candidate in self._candidates:
            argv = candidate.argv(target, title, self._fullscreen)
            attempted.append(candidate.name)
            try:
                pid = self._spawner.spawn(argv)
            except OSError as exc:
                log.warning(
                    "player_spawn_failed",
                    session_id=session.session_id,
                    player=candidate.name,
                    error=str(exc),
                )
                continue

            session.player = candidate.name
            session.transition(PlaybackState.PLAYING)
            log.info(
                "player_launched",
                session_id=session.session_id,
                player=candidate.name,
                pid=pid,
                title=title,
                degraded=session.media.degraded,
            )
            return LaunchResult(player=candidate.name, argv=tuple(argv), pid=pid)

        error = PlayerUnavailable(attempted, self._remediation)
        session.fail(str(error))
        raise error
