"""Domain entities for stream resolution and playback.

Pure value objects plus the per-attempt ``PlaybackSession`` state machine.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from .catalog import ContentKind
from .errors import InvalidStateTransition, MalformedDescriptor

# Swarm locators reference content as ``...xt=urn:btih:<hash>&...``
HASH_MARKER = "urn:btih:"
_HASH_DELIMITERS = "&"


def extract_info_hash(locator: str) -> str:
    """Return the lowercase content hash embedded in a swarm locator.

    Reads from the hash marker up to the next delimiter (or end of string).

    Raises:
        MalformedDescriptor: if the marker is missing or the hash is empty.
    """
    start = locator.find(HASH_MARKER)
    if start < 0:
        raise MalformedDescriptor(
            f"swarm descriptor has no '{HASH_MARKER}' marker: {locator!r}"
        )
    rest = locator[start + len(HASH_MARKER) :]
    end = len(rest)
    for delim in _HASH_DELIMITERS:
        pos = rest.find(delim)
        if 0 <= pos < end:
            end = pos
    info_hash = rest[:end].strip().lower()
    if not info_hash:
        raise MalformedDescriptor(f"swarm descriptor has an empty hash: {locator!r}")
    return info_hash


@dataclass(frozen=True)
class DirectDescriptor:
    """Points straight at a playable media resource."""

    url: str


@dataclass(frozen=True)
class SwarmDescriptor:
    """Content-addressed peer-swarm locator (magnet-like)."""

    locator: str

    @property
    def info_hash(self) -> str:
        return extract_info_hash(self.locator)


StreamDescriptor = DirectDescriptor | SwarmDescriptor


@dataclass(frozen=True)
class StreamCandidate:
    """One playable option for a catalog item, as listed by a provider."""

    title: str
    descriptor: StreamDescriptor
    source: str
    name: str | None = None
    display_quality: str | None = None
    seeders: int | None = None
    leechers: int | None = None
    size: str | None = None
    rank_score: float = 0.0


@dataclass(frozen=True)
class PlaybackMetadata:
    """Display metadata supplied by the caller at play time."""

    title: str
    kind: ContentKind
    year: int | None = None

    @property
    def display_title(self) -> str:
        if self.year is not None:
            return f"{self.title} ({self.year})"
        return self.title


class MediaTargetKind(str, Enum):
    LOCAL_FILE = "local_file"
    REMOTE_ENDPOINT = "remote_endpoint"


@dataclass(frozen=True)
class ResolvedMedia:
    """A concrete, playable target.

    ``degraded`` means the swarm helper's own streaming endpoint is used
    because no file showed up on disk in time (partial-download risk).
    """

    kind: MediaTargetKind
    location: str
    degraded: bool = False

    @classmethod
    def local_file(cls, path: str) -> ResolvedMedia:
        return cls(kind=MediaTargetKind.LOCAL_FILE, location=path)

    @classmethod
    def remote_endpoint(cls, url: str, *, degraded: bool = False) -> ResolvedMedia:
        return cls(kind=MediaTargetKind.REMOTE_ENDPOINT, location=url, degraded=degraded)


class PlaybackState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    READY = "ready"
    DEGRADED = "degraded"
    LAUNCHING = "launching"
    PLAYING = "playing"
    FAILED = "failed"


_TRANSITIONS: dict[PlaybackState, frozenset[PlaybackState]] = {
    PlaybackState.IDLE: frozenset({PlaybackState.RESOLVING, PlaybackState.FAILED}),
    PlaybackState.RESOLVING: frozenset(
        {PlaybackState.READY, PlaybackState.DEGRADED, PlaybackState.FAILED}
    ),
    PlaybackState.READY: frozenset({PlaybackState.LAUNCHING, PlaybackState.FAILED}),
    PlaybackState.DEGRADED: frozenset({PlaybackState.LAUNCHING, PlaybackState.FAILED}),
    PlaybackState.LAUNCHING: frozenset({PlaybackState.PLAYING, PlaybackState.FAILED}),
    PlaybackState.PLAYING: frozenset(),
    PlaybackState.FAILED: frozenset(),
}


@dataclass
class PlaybackSession:
    """One playback attempt, created by the resolver and handed to the launcher.

    Idle -> Resolving -> Ready | Degraded -> Launching -> Playing | Failed
    """

    descriptor: StreamDescriptor
    metadata: PlaybackMetadata
    session_id: str = field(default_factory=lambda: uuid4().hex)
    state: PlaybackState = PlaybackState.IDLE
    media: ResolvedMedia | None = None
    player: str | None = None
    error: str | None = None

    def transition(self, target: PlaybackState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(
                f"session {self.session_id}: {self.state.value} -> {target.value}"
            )
        self.state = target

    def fail(self, reason: str) -> None:
        """Move to FAILED from any non-terminal state."""
        if self.state in (PlaybackState.PLAYING, PlaybackState.FAILED):
            return
        self.state = PlaybackState.FAILED
        self.error = reason

    @property
    def is_swarm(self) -> bool:
        return isinstance(self.descriptor, SwarmDescriptor)

    @property
    def is_launchable(self) -> bool:
        return self.state in (PlaybackState.READY, PlaybackState.DEGRADED)


ArgsBuilder = Callable[[str, str, bool], Sequence[str]]


@dataclass(frozen=True)
class PlayerCandidate:
    """One external player invocation in the fallback chain.

    ``build_args(target, display_title, fullscreen)`` returns the arguments
    that follow ``binary``; each engine has its own flag syntax.
    """

    name: str
    binary: tuple[str, ...]
    build_args: ArgsBuilder

    def argv(self, target: str, display_title: str, fullscreen: bool) -> list[str]:
        return [*self.binary, *self.build_args(target, display_title, fullscreen)]


@dataclass(frozen=True)
class LaunchResult:
    """Which player candidate was spawned, and how."""

    player: str
    argv: tuple[str, ...]
    pid: int | None = None


@dataclass(frozen=True)
class PlaybackOutcome:
    """What the caller gets back from a resolve-and-play request."""

    session_id: str
    state: PlaybackState
    media: ResolvedMedia | None = None
    player: str | None = None
    error_code: str | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def degraded(self) -> bool:
        return self.media is not None and self.media.degraded
