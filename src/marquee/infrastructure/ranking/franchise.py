"""Franchise grouping: cluster results sharing a title prefix with the query."""

from __future__ import annotations

import re
from dataclasses import replace

from marquee.domain.entities.catalog import SearchResult

from .query import clean

_SEGMENT_SPLIT = re.compile(r"[:\-]")


def franchise_key(name: str, term: str) -> str | None:
    """Detect the franchise key of *name* relative to the normalised *term*.

    ``"Cars 2"`` / ``"cars"`` -> ``"cars"``;
    ``"Star Wars: A New Hope"`` / ``"wars"`` -> ``"star wars"``.
    """
    if not term:
        return None
    lowered = clean(name)
    if lowered.startswith(term):
        return term
    if term not in lowered or not _SEGMENT_SPLIT.search(lowered):
        return None
    head = _SEGMENT_SPLIT.split(lowered, maxsplit=1)[0].strip()
    return head if term in head else None


def _year_order(result: SearchResult) -> tuple[int, int]:
    year = result.year
    return (1, 0) if year is None else (0, year)


def group_franchises(results: list[SearchResult], term: str) -> list[SearchResult]:
    """Re-order already sorted *results* into franchise groups.

    Groups come first, by descending mean relevance (ties keep first
    appearance); members are ordered by year, unknown years last.
    Results without a key follow in their incoming order.
    """
    groups: dict[str, list[SearchResult]] = {}
    standalone: list[SearchResult] = []

    for result in results:
        key = franchise_key(result.name, term)
        if key is None:
            standalone.append(result)
            continue
        groups.setdefault(key, []).append(replace(result, franchise_key=key))

    def mean_relevance(members: list[SearchResult]) -> float:
        return sum(m.relevance_score for m in members) / len(members)

    ordered_groups = sorted(groups.values(), key=lambda g: -mean_relevance(g))

    out: list[SearchResult] = []
    for members in ordered_groups:
        out.extend(sorted(members, key=_year_order))
    out.extend(standalone)
    return out
