"""Resolve-and-play use case: the caller-facing playback entry point."""

from __future__ import annotations

import structlog

from marquee.domain.entities.errors import MarqueeError
from marquee.domain.entities.playback import (
    PlaybackMetadata,
    PlaybackOutcome,
    PlaybackSession,
    PlaybackState,
    StreamDescriptor,
)

from .launch_player import PlaybackLauncher
from .resolve_stream import StreamResolver

log = structlog.get_logger(__name__)

_TERMINAL = (PlaybackState.PLAYING, PlaybackState.FAILED)


class PlaybackUseCase:
    """Runs resolve -> launch for one descriptor and reports the outcome.

    Fatal conditions never escape as exceptions; they come back as a
    FAILED ``PlaybackOutcome`` carrying the error code and message.
    """

    def __init__(self, resolver: StreamResolver, launcher: PlaybackLauncher) -> None:
        self._resolver = resolver
        self._launcher = launcher
        self._current: PlaybackSession | None = None

    @property
    def current(self) -> PlaybackSession | None:
        return self._current

    async def resolve_and_play(
        self, descriptor: StreamDescriptor, metadata: PlaybackMetadata
    ) -> PlaybackOutcome:
        session = PlaybackSession(descriptor=descriptor, metadata=metadata)
        self._current = session

        try:
            await self._resolver.resolve(descriptor, metadata, session=session)
            launched = self._launcher.launch(session)
        except MarqueeError as exc:
            session.fail(str(exc))
            log.error(
                "playback_failed",
                session_id=session.session_id,
                error_code=exc.code,
                error=str(exc),
            )
            return PlaybackOutcome(
                session_id=session.session_id,
                state=session.state,
                media=session.media,
                error_code=exc.code,
                message=str(exc),
            )
        except Exception:
            session.fail("unexpected error during playback")
            log.exception("playback_crashed", session_id=session.session_id)
            raise

        message = "Playing"
        if session.media is not None and session.media.degraded:
            message = "Playing from the helper stream; the file is still downloading"
        return PlaybackOutcome(
            session_id=session.session_id,
            state=session.state,
            media=session.media,
            player=launched.player,
            message=message,
        )

    async def stop(self) -> bool:
        """Cancel pending resolution and stop the swarm helper."""
        stopped = await self._resolver.cancel_active()
        session = self._current
        if session is not None and session.state not in _TERMINAL:
            session.fail("stopped by caller")
            stopped = True
        return stopped

    def snapshot(self) -> PlaybackOutcome | None:
        session = self._current
        if session is None:
            return None
        return PlaybackOutcome(
            session_id=session.session_id,
            state=session.state,
            media=session.media,
            player=session.player,
            message=session.error or "",
        )
