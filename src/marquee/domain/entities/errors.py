"""Error taxonomy for catalog, resolution and playback."""

from __future__ import annotations


class MarqueeError(Exception):
    """Base error for all marquee domain/use-case failures."""

    code = "MARQUEE_ERROR"


class ProviderUnavailable(MarqueeError):
    """A single provider call failed (network, HTTP status, parse, timeout)."""

    code = "PROVIDER_UNAVAILABLE"

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"provider {provider} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class MalformedDescriptor(MarqueeError):
    """A swarm descriptor does not carry a content hash."""

    code = "MALFORMED_DESCRIPTOR"


class ResolutionTimeout(MarqueeError):
    """No video file appeared in the swarm cache directory in time."""

    code = "RESOLUTION_TIMEOUT"


class ResolutionCancelled(MarqueeError):
    """A newer resolution or an explicit stop superseded this one."""

    code = "RESOLUTION_CANCELLED"


class InvalidStateTransition(MarqueeError):
    code = "INVALID_STATE"


class SwarmHelperUnavailable(MarqueeError):
    """None of the configured swarm helper commands could be started."""

    code = "SWARM_HELPER_UNAVAILABLE"

    def __init__(self, attempted: list[str], remediation: str) -> None:
        super().__init__(
            f"swarm helper not available (tried: {', '.join(attempted)}). "
            f"{remediation}"
        )
        self.attempted = attempted
        self.remediation = remediation


class PlayerUnavailable(MarqueeError):
    """Every configured player candidate failed to spawn."""

    code = "PLAYER_UNAVAILABLE"

    def __init__(self, attempted: list[str], remediation: str) -> None:
        super().__init__(
            f"no video player could be started (tried: {', '.join(attempted)}). "
            f"{remediation}"
        )
        self.attempted = attempted
        self.remediation = remediation
