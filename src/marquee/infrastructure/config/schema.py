"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

# Per-provider calls must never stall a request for longer than this.
MAX_PROVIDER_TIMEOUT_SECONDS = 10.0


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class ProviderConfig(BaseModel):
    """One catalog provider endpoint (Stremio addon protocol)."""

    name: str
    base_url: str
    catalog: bool = Field(
        default=True,
        description="Provider serves popular/search listings.",
    )
    streams: bool = Field(
        default=True,
        description="Provider serves stream listings.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be http(s): {v!r}")
        return v


def _default_providers() -> list[ProviderConfig]:
    # Priority order = trust/quality order.
    return [
        ProviderConfig(
            name="cinemeta",
            base_url="https://v3-cinemeta.strem.io",
            catalog=True,
            streams=False,
        ),
        ProviderConfig(
            name="torrentio",
            base_url="https://torrentio.strem.fun",
        ),
        ProviderConfig(
            name="thepiratebay-plus",
            base_url="https://thepiratebay-plus.strem.fun",
        ),
    ]


class CatalogConfig(BaseModel):
    """Provider list and aggregation limits."""

    providers: list[ProviderConfig] = Field(default_factory=_default_providers)

    search_max_results: int = Field(
        default=100,
        description="Cap on merged search results (after dedup, before ranking).",
    )
    popular_max_results: int = Field(
        default=50,
        description="Cap on the accepted popular listing.",
    )
    min_query_length: int = Field(
        default=2,
        description="Shorter queries return no results without network I/O.",
    )
    max_concurrent_providers: int = Field(
        default=5,
        description="Max parallel provider calls per aggregated fetch.",
    )
    failure_threshold: int = Field(
        default=5,
        description="Consecutive failures before a provider is skipped.",
    )
    cooldown_seconds: float = Field(
        default=60.0,
        description="How long a failing provider is skipped before a probe.",
    )

    @field_validator("providers")
    @classmethod
    def _unique_names(cls, v: list[ProviderConfig]) -> list[ProviderConfig]:
        names = [p.name for p in v]
        if len(names) != len(set(names)):
            raise ValueError("provider names must be unique")
        return v

    @field_validator(
        "search_max_results", "popular_max_results", "max_concurrent_providers"
    )
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v


class SwarmConfig(BaseModel):
    """Swarm helper process and cache-directory polling."""

    helper_commands: list[str] = Field(
        default=["peerflix", "peerflix.cmd"],
        description="Helper executables, tried in order.",
    )
    helper_args: list[str] = Field(
        default=["--not-on-top", "--quiet"],
        description="Extra helper arguments after the locator and port.",
    )
    port: int = Field(default=8888, description="Local port the helper serves on.")
    poll_interval_seconds: float = Field(
        default=1.0,
        description="Delay between cache-directory checks.",
    )
    poll_max_attempts: int = Field(
        default=30,
        description="Directory checks before falling back to the helper endpoint.",
    )
    video_extensions: list[str] = Field(
        default=[".mp4", ".mkv", ".avi", ".webm", ".m4v"],
        description="Recognised video containers, in priority order.",
    )
    cache_root: Optional[Path] = Field(
        default=None,
        description="Helper cache root. If unset, derived from the platform.",
    )
    trackers: list[str] = Field(
        default=[
            "udp://tracker.opentrackr.org:1337/announce",
            "udp://open.demonii.com:1337/announce",
        ],
        description="Tracker hints added to swarm locators built from info hashes.",
    )
    stop_timeout_seconds: float = Field(
        default=5.0,
        description="Grace period for the helper to exit before it is killed.",
    )

    @field_validator("cache_root", mode="before")
    @classmethod
    def _validate_cache_root(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    @field_validator("video_extensions")
    @classmethod
    def _dotted_lowercase(cls, v: list[str]) -> list[str]:
        out = []
        for ext in v:
            ext = ext.strip().lower()
            out.append(ext if ext.startswith(".") else f".{ext}")
        return out

    @field_validator("port")
    @classmethod
    def _validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be 1..65535")
        return v

    @field_validator("poll_interval_seconds")
    @classmethod
    def _validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("poll_interval_seconds must be > 0")
        return v


class PlayerConfig(BaseModel):
    """External player fallback chain."""

    fullscreen: bool = Field(default=True, description="Start players fullscreen.")
    enabled: Optional[list[str]] = Field(
        default=None,
        description="Restrict candidates to these names (fallback order is kept).",
    )


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/catalog/swarm/player).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="marquee", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout in seconds for each provider call.",
    )
    http_user_agent: str = Field(
        default="Marquee/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    swarm: SwarmConfig = Field(default_factory=SwarmConfig)
    player: PlayerConfig = Field(default_factory=PlayerConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        if v > MAX_PROVIDER_TIMEOUT_SECONDS:
            raise ValueError(
                f"http_timeout_seconds must be <= {MAX_PROVIDER_TIMEOUT_SECONDS}"
            )
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "catalog": self.catalog.model_dump(),
            "swarm": self.swarm.model_dump(mode="json"),
            "player": self.player.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read MARQUEE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - MARQUEE_HTTP_TIMEOUT_SECONDS
    - MARQUEE_LOG_LEVEL
    - MARQUEE_SWARM_PORT
    - MARQUEE_SWARM_CACHE_ROOT
    """

    model_config = SettingsConfigDict(
        env_prefix="MARQUEE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    search_max_results: Optional[int] = None
    swarm_port: Optional[int] = None
    swarm_cache_root: Optional[Path] = None
    player_fullscreen: Optional[bool] = None

    @field_validator("swarm_cache_root", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
