"""Release title parsing: quality label, seeders and size.

Provider stream titles are multi-line: the first line is the release name,
later lines carry markers such as ``👤 12`` (seeders) and ``💾 2.1 GB``.
"""

from __future__ import annotations

import re
from typing import Any

from guessit import guessit

# --- Quality labels ---

UHD_4K = "4K"
FHD_BLURAY = "1080p BluRay"
FHD_REMUX = "1080p Remux"
FHD = "1080p"
HD_BLURAY = "720p BluRay"
HD = "720p"
BLURAY = "BluRay"
WEBDL = "WEB-DL"
WEBRIP = "WEBRip"
HDRIP = "HDRip"
BRRIP = "BRRip"
SD = "480p"
DVDRIP = "DVDRip"
H265 = "H265"
H264 = "H264"
CAM = "CAM"
TS = "TS"

_BLURAY_SOURCES = frozenset({"Blu-ray", "Ultra HD Blu-ray"})
_CAM_SOURCES = frozenset({"Camera", "HD Camera"})
_TS_SOURCES = frozenset({"Telesync", "HD Telesync"})

# Checked in order against the upper-cased, separator-normalised title.
_BADGES: tuple[tuple[str, str], ...] = (
    ("2160P", UHD_4K),
    ("4K", UHD_4K),
    ("UHD", UHD_4K),
    ("1080P BLURAY", FHD_BLURAY),
    ("1080P REMUX", FHD_REMUX),
    ("1080P", FHD),
    ("720P BLURAY", HD_BLURAY),
    ("720P", HD),
    ("BLURAY", BLURAY),
    ("WEB DL", WEBDL),
    ("WEBDL", WEBDL),
    ("WEBRIP", WEBRIP),
    ("HDRIP", HDRIP),
    ("BRRIP", BRRIP),
    ("480P", SD),
    ("DVDRIP", DVDRIP),
    ("HDCAM", CAM),
    ("CAMRIP", CAM),
    ("CAM", CAM),
    ("HDTS", TS),
    ("TELESYNC", TS),
    ("TS", TS),
    ("SCREENER", CAM),
)

_CODECS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("X265", "H265", "HEVC"), H265),
    (("X264", "H264", "AVC"), H264),
)

_SEPARATORS = re.compile(r"[._\-\[\]()]+")
_SEEDERS_MARKER = re.compile(r"👤\s*(\d+)")
_SIZE_MARKER = re.compile(r"💾\s*([0-9.]+\s*[KMGT]?B)", re.IGNORECASE)
_SIZE_VALUE = re.compile(r"^\s*([0-9.]+)\s*([KMGT]?B)?\s*$", re.IGNORECASE)

_UNIT_TO_GB = {
    "B": 1 / 1024**3,
    "KB": 1 / 1024**2,
    "MB": 1 / 1024,
    "GB": 1.0,
    "TB": 1024.0,
}


def _release_name(title: str) -> str:
    return title.splitlines()[0].strip() if title.strip() else ""


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _quality_from_guessit(release_name: str) -> str | None:
    guess = guessit(release_name)
    source = guess.get("source")
    other = _as_list(guess.get("other"))

    if source in _CAM_SOURCES:
        return CAM
    if source in _TS_SOURCES:
        return TS

    screen_size = guess.get("screen_size")
    if screen_size == "2160p":
        return UHD_4K
    if screen_size in ("1080p", "1080i"):
        if "Remux" in other:
            return FHD_REMUX
        return FHD_BLURAY if source in _BLURAY_SOURCES else FHD
    if screen_size == "720p":
        return HD_BLURAY if source in _BLURAY_SOURCES else HD
    if screen_size in ("480p", "576p"):
        return SD
    return None


def _quality_from_badges(title: str) -> str | None:
    normalized = f" {_SEPARATORS.sub(' ', title.upper())} "
    for badge, label in _BADGES:
        if f" {badge} " in normalized:
            return label
    for markers, label in _CODECS:
        if any(f" {m} " in normalized for m in markers):
            return label
    return None


# --- Public API ---


def parse_quality(title: str | None) -> str | None:
    """Best-effort quality label for a stream title.

    Priority: 1) guessit on the release name, 2) badge table on the full title.
    """
    if not title:
        return None
    release_name = _release_name(title)
    if release_name:
        quality = _quality_from_guessit(release_name)
        if quality is not None:
            return quality
    return _quality_from_badges(title)


def parse_seeders(title: str | None) -> int | None:
    if not title:
        return None
    m = _SEEDERS_MARKER.search(title)
    return int(m.group(1)) if m else None


def parse_size(title: str | None) -> str | None:
    """Extract a ``💾 5.09 GB`` style size marker, e.g. ``"5.09 GB"``."""
    if not title:
        return None
    m = _SIZE_MARKER.search(title)
    return m.group(1).strip() if m else None


def format_size(num_bytes: int) -> str:
    return f"{num_bytes / 1024**3:.2f} GB"


def size_to_gb(size: str | None) -> float | None:
    """Convert ``"1.5 GB"`` / ``"700 MB"`` / raw bytes to gigabytes."""
    if not size:
        return None
    m = _SIZE_VALUE.match(size)
    if m is None:
        return None
    try:
        value = float(m.group(1))
    except ValueError:
        return None
    unit = (m.group(2) or "B").upper()
    return value * _UNIT_TO_GB[unit]
