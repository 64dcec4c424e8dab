"""External player candidates, in fallback order, and install hints."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from marquee.domain.entities.playback import PlayerCandidate


def _mpv_args(target: str, title: str, fullscreen: bool) -> list[str]:
    args = [f"--force-media-title={title}"]
    if fullscreen:
        args.append("--fs")
    return [*args, target]


def _vlc_args(target: str, title: str, fullscreen: bool) -> list[str]:
    args = [f"--meta-title={title}", "--play-and-exit"]
    if fullscreen:
        args.append("--fullscreen")
    return [*args, target]


def _opener_args(target: str, title: str, fullscreen: bool) -> list[str]:
    # System opener: no title or fullscreen control.
    return [target]


MPV = PlayerCandidate(name="mpv", binary=("mpv",), build_args=_mpv_args)
VLC = PlayerCandidate(name="vlc", binary=("vlc",), build_args=_vlc_args)
FLATPAK_MPV = PlayerCandidate(
    name="flatpak-mpv",
    binary=("flatpak", "run", "io.mpv.Mpv"),
    build_args=_mpv_args,
)
FLATPAK_VLC = PlayerCandidate(
    name="flatpak-vlc",
    binary=("flatpak", "run", "org.videolan.VLC"),
    build_args=_vlc_args,
)
XDG_OPEN = PlayerCandidate(name="xdg-open", binary=("xdg-open",), build_args=_opener_args)
MACOS_OPEN = PlayerCandidate(name="open", binary=("open",), build_args=_opener_args)


def default_candidates(platform: str | None = None) -> list[PlayerCandidate]:
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return [MPV, VLC, FLATPAK_MPV, FLATPAK_VLC, XDG_OPEN]
    if platform == "darwin":
        return [MPV, VLC, MACOS_OPEN]
    return [MPV, VLC]


def select_candidates(
    candidates: Sequence[PlayerCandidate], enabled: Sequence[str] | None
) -> list[PlayerCandidate]:
    """Keep only *enabled* names; fallback order stays that of *candidates*."""
    if enabled is None:
        return list(candidates)
    wanted = {name.strip().lower() for name in enabled}
    return [c for c in candidates if c.name in wanted]


_REMEDIATION: dict[str, str] = {
    "linux": (
        "Install one with your package manager (e.g. 'sudo apt install mpv' "
        "or 'sudo apt install vlc'), or from Flathub "
        "('flatpak install flathub io.mpv.Mpv')."
    ),
    "darwin": "Install one with Homebrew: 'brew install mpv' or 'brew install --cask vlc'.",
    "win32": (
        "Install one with winget: 'winget install mpv' or "
        "'winget install VideoLAN.VLC', and make sure it is on PATH."
    ),
}


def remediation(platform: str | None = None) -> str:
    platform = platform or sys.platform
    key = "linux" if platform.startswith("linux") else platform
    hint = _REMEDIATION.get(key, "Install mpv or VLC and make sure it is on PATH.")
    return f"No video player found. Please install mpv or vlc. {hint}"
