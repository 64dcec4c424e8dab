"""Stream resolution: turn a chosen descriptor into a playable target.

Direct descriptors resolve immediately. Swarm descriptors start the
single-flight swarm helper and poll its cache directory for a video file;
if none shows up in time, playback falls back to the helper's own
streaming endpoint (degraded mode).
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from marquee.domain.entities.errors import (
    MarqueeError,
    ResolutionCancelled,
    ResolutionTimeout,
)
from marquee.domain.entities.playback import (
    DirectDescriptor,
    PlaybackMetadata,
    PlaybackSession,
    PlaybackState,
    ResolvedMedia,
    StreamDescriptor,
    SwarmDescriptor,
)
from marquee.domain.ports.swarm_helper import SwarmHelperPort
from marquee.domain.ports.video_locator import VideoLocatorPort

log = structlog.get_logger(__name__)


class StreamResolver:
    """Resolves descriptors, owning the single swarm helper instance.

    Starting a resolution cancels any pending one and stops its helper
    before the new helper starts.
    """

    def __init__(
        self,
        helper: SwarmHelperPort,
        locator: VideoLocatorPort,
        *,
        port: int = 8888,
        poll_interval_seconds: float = 1.0,
        poll_max_attempts: int = 30,
    ) -> None:
        self._helper = helper
        self._locator = locator
        self._port = port
        self._interval = poll_interval_seconds
        self._max_attempts = poll_max_attempts
        self._lock = asyncio.Lock()
        self._cancel: asyncio.Event | None = None
        self._active_session: str | None = None

    @property
    def active_session(self) -> str | None:
        return self._active_session

    async def resolve(
        self,
        descriptor: StreamDescriptor,
        metadata: PlaybackMetadata,
        *,
        session: PlaybackSession | None = None,
    ) -> PlaybackSession:
        """Resolve *descriptor*; the returned session is READY or DEGRADED.

        Raises:
            MalformedDescriptor: the swarm locator carries no hash.
            SwarmHelperUnavailable: the helper could not be started.
            ResolutionCancelled: superseded by a newer resolution or a stop.
        """
        if session is None:
            session = PlaybackSession(descriptor=descriptor, metadata=metadata)
        session.transition(PlaybackState.RESOLVING)
        log.info(
            "resolution_started",
            session_id=session.session_id,
            title=metadata.display_title,
            swarm=session.is_swarm,
        )

        try:
            if isinstance(descriptor, DirectDescriptor):
                await self._supersede()
                session.media = ResolvedMedia.remote_endpoint(descriptor.url)
                session.transition(PlaybackState.READY)
                return session
            return await self._resolve_swarm(session, descriptor)
        except MarqueeError as exc:
            session.fail(str(exc))
            raise

    async def cancel_active(self) -> bool:
        """Cancel a pending poll and stop the helper. Returns True if one was active."""
        async with self._lock:
            was_active = self._active_session is not None or self._helper.is_running
            await self._supersede_locked()
        if was_active:
            log.info("resolution_stopped")
        return was_active

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _supersede(self) -> None:
        async with self._lock:
            await self._supersede_locked()

    async def _supersede_locked(self) -> None:
        if self._cancel is not None:
            self._cancel.set()
            log.debug("resolution_superseded", session_id=self._active_session)
        self._cancel = None
        self._active_session = None
        await self._helper.stop()

    async def _resolve_swarm(
        self, session: PlaybackSession, descriptor: SwarmDescriptor
    ) -> PlaybackSession:
        info_hash = descriptor.info_hash

        async with self._lock:
            await self._supersede_locked()
            cancel = asyncio.Event()
            await self._helper.start(descriptor.locator, self._port)
            self._cancel = cancel
            self._active_session = session.session_id
        log.info(
            "swarm_helper_started",
            session_id=session.session_id,
            info_hash=info_hash,
            port=self._port,
        )

        try:
            path = await self._poll(info_hash, cancel)
        except ResolutionTimeout:
            self._raise_if_cancelled(cancel, info_hash)
            endpoint = self._helper.endpoint_url(self._port)
            log.warning(
                "resolution_degraded",
                session_id=session.session_id,
                info_hash=info_hash,
                endpoint=endpoint,
                waited_seconds=self._interval * self._max_attempts,
            )
            session.media = ResolvedMedia.remote_endpoint(endpoint, degraded=True)
            session.transition(PlaybackState.DEGRADED)
            return session

        self._raise_if_cancelled(cancel, info_hash)
        log.info(
            "resolution_ready",
            session_id=session.session_id,
            info_hash=info_hash,
            path=str(path),
        )
        session.media = ResolvedMedia.local_file(str(path))
        session.transition(PlaybackState.READY)
        return session

    async def _poll(self, info_hash: str, cancel: asyncio.Event) -> Path:
        for attempt in range(1, self._max_attempts + 1):
            self._raise_if_cancelled(cancel, info_hash)
            path = await asyncio.to_thread(self._locator.find, info_hash)
            # superseding can happen while find() runs in its worker thread
            self._raise_if_cancelled(cancel, info_hash)
            if path is not None:
                return path
            log.debug("resolution_poll", info_hash=info_hash, attempt=attempt)

            try:
                await asyncio.wait_for(cancel.wait(), timeout=self._interval)
            except TimeoutError:
                continue
            raise ResolutionCancelled(f"resolution of {info_hash} was cancelled")

        raise ResolutionTimeout(
            f"no video file for {info_hash} after {self._max_attempts} checks"
        )

    @staticmethod
    def _raise_if_cancelled(cancel: asyncio.Event, info_hash: str) -> None:
        if cancel.is_set():
            raise ResolutionCancelled(f"resolution of {info_hash} was cancelled")
