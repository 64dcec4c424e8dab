"""Parse addon-protocol JSON documents into domain entities.

Listing documents carry ``metas[]``, stream documents carry ``streams[]``.
Entries that lack the required fields are skipped, never fatal.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Sequence
from urllib.parse import quote

import structlog

from marquee.domain.entities.catalog import CatalogItem, ContentKind
from marquee.domain.entities.playback import (
    DirectDescriptor,
    StreamCandidate,
    SwarmDescriptor,
)
from marquee.infrastructure.streams import release_parser

log = structlog.get_logger(__name__)

_YEAR = re.compile(r"\d{4}")


# ------------------------------------------------------------------
# Catalog listings
# ------------------------------------------------------------------


def _parse_year(meta: dict[str, Any]) -> int | None:
    for key in ("year", "releaseInfo"):
        value = meta.get(key)
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            m = _YEAR.search(value)
            if m:
                return int(m.group(0))
    return None


def _parse_rating(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_genres(meta: dict[str, Any]) -> tuple[str, ...]:
    raw = meta.get("genres") or meta.get("genre") or []
    if isinstance(raw, str):
        raw = [raw]
    return tuple(g for g in raw if isinstance(g, str) and g)


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_meta(meta: dict[str, Any], kind: ContentKind) -> CatalogItem | None:
    item_id = meta.get("id")
    name = meta.get("name")
    if not isinstance(item_id, str) or not item_id:
        return None
    if not isinstance(name, str) or not name.strip():
        return None
    return CatalogItem(
        id=item_id,
        name=name.strip(),
        kind=kind,
        poster_url=_str_or_none(meta.get("poster")),
        year=_parse_year(meta),
        rating=_parse_rating(meta.get("imdbRating")),
        description=_str_or_none(meta.get("description")),
        genres=_parse_genres(meta),
    )


def parse_metas(doc: dict[str, Any], kind: ContentKind) -> list[CatalogItem]:
    metas = doc.get("metas")
    if not isinstance(metas, list):
        return []
    items: list[CatalogItem] = []
    for meta in metas:
        if not isinstance(meta, dict):
            continue
        item = parse_meta(meta, kind)
        if item is None:
            log.debug("meta_skipped", meta_id=meta.get("id"))
            continue
        items.append(item)
    return items


# ------------------------------------------------------------------
# Stream listings
# ------------------------------------------------------------------


def build_magnet(
    info_hash: str, *, file_idx: int | None = None, trackers: Sequence[str] = ()
) -> str:
    """Swarm locator for *info_hash*.

    Provider file indices are 1-based where 0 means "whole torrent";
    the helper's ``so`` selection is 0-based.
    """
    parts = [f"magnet:?xt=urn:btih:{info_hash.lower()}"]
    parts.extend(f"tr={quote(t, safe='')}" for t in trackers)
    if file_idx is not None and file_idx > 0:
        parts.append(f"so={file_idx - 1}")
    return "&".join(parts)


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _stream_size(stream: dict[str, Any], title: str) -> str | None:
    size = stream.get("size")
    if isinstance(size, str) and size:
        return size
    if isinstance(size, int) and size > 0:
        return release_parser.format_size(size)
    hints = stream.get("behaviorHints")
    if isinstance(hints, dict):
        video_size = _int_or_none(hints.get("videoSize"))
        if video_size:
            return release_parser.format_size(video_size)
    return release_parser.parse_size(title)


def parse_stream(
    stream: dict[str, Any], *, source: str, trackers: Sequence[str] = ()
) -> StreamCandidate | None:
    title = stream.get("title") or stream.get("description") or "Unknown Stream"
    if not isinstance(title, str):
        title = "Unknown Stream"

    url = stream.get("url")
    info_hash = stream.get("infoHash")
    if isinstance(url, str) and url:
        descriptor: DirectDescriptor | SwarmDescriptor = DirectDescriptor(url=url)
    elif isinstance(info_hash, str) and info_hash:
        descriptor = SwarmDescriptor(
            locator=build_magnet(
                info_hash,
                file_idx=_int_or_none(stream.get("fileIdx")),
                trackers=trackers,
            )
        )
    else:
        return None

    seeders = _int_or_none(stream.get("seeders"))
    if seeders is None:
        seeders = release_parser.parse_seeders(title)

    return StreamCandidate(
        title=title,
        descriptor=descriptor,
        source=source,
        name=_str_or_none(stream.get("name")),
        display_quality=release_parser.parse_quality(title),
        seeders=seeders,
        leechers=_int_or_none(stream.get("leechers")),
        size=_stream_size(stream, title),
    )


def parse_streams(
    doc: dict[str, Any], *, source: str, trackers: Sequence[str] = ()
) -> list[StreamCandidate]:
    """Parse ``streams[]``.

    When one hash is listed with several file indices, its ``fileIdx == 0``
    entry (the whole-torrent pseudo file) is dropped.
    """
    raw = doc.get("streams")
    if not isinstance(raw, list):
        return []
    entries = [s for s in raw if isinstance(s, dict)]

    files_per_hash = Counter(
        str(s["infoHash"]).lower()
        for s in entries
        if s.get("infoHash") and _int_or_none(s.get("fileIdx")) is not None
    )

    candidates: list[StreamCandidate] = []
    for entry in entries:
        info_hash = entry.get("infoHash")
        if (
            info_hash
            and _int_or_none(entry.get("fileIdx")) == 0
            and files_per_hash[str(info_hash).lower()] > 1
        ):
            continue
        candidate = parse_stream(entry, source=source, trackers=trackers)
        if candidate is None:
            log.debug("stream_skipped", source=source, keys=sorted(entry))
            continue
        candidates.append(candidate)
    return candidates
