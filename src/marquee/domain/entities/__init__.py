from .catalog import CatalogItem, CatalogListing, ContentKind, SearchResult
from .errors import (
    InvalidStateTransition,
    MalformedDescriptor,
    MarqueeError,
    PlayerUnavailable,
    ProviderUnavailable,
    ResolutionCancelled,
    ResolutionTimeout,
    SwarmHelperUnavailable,
)
from .playback import (
    DirectDescriptor,
    LaunchResult,
    MediaTargetKind,
    PlaybackMetadata,
    PlaybackOutcome,
    PlaybackSession,
    PlaybackState,
    PlayerCandidate,
    ResolvedMedia,
    StreamCandidate,
    StreamDescriptor,
    SwarmDescriptor,
    extract_info_hash,
)

__all__ = [
    "CatalogItem",
    "CatalogListing",
    "ContentKind",
    "DirectDescriptor",
    "InvalidStateTransition",
    "LaunchResult",
    "MalformedDescriptor",
    "MarqueeError",
    "MediaTargetKind",
    "PlaybackMetadata",
    "PlaybackOutcome",
    "PlaybackSession",
    "PlaybackState",
    "PlayerCandidate",
    "PlayerUnavailable",
    "ProviderUnavailable",
    "ResolutionCancelled",
    "ResolutionTimeout",
    "ResolvedMedia",
    "SearchResult",
    "StreamCandidate",
    "StreamDescriptor",
    "SwarmDescriptor",
    "SwarmHelperUnavailable",
    "extract_info_hash",
]
