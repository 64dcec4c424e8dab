"""Relevance ranking of raw search results against a free-text query.

Pure and synchronous: no I/O, no caching across queries.

Pipeline:
1. normalise the query into match terms (original + normalised)
2. score each name per term (exact > prefix > word > substring)
3. add a franchise boost for sequel-like continuations
4. drop results scoring below ``MIN_RELEVANCE``
5. compute a secondary score from recency, rating and kind
6. sort by relevance, secondary score, input position
7. optionally cluster franchise groups
"""

from __future__ import annotations

import datetime as _dt
import re
from functools import lru_cache
from typing import Iterable

from marquee.domain.entities.catalog import CatalogItem, ContentKind, SearchResult

from . import franchise
from .query import clean, match_terms, normalize_query

MIN_RELEVANCE = 10
FRANCHISE_BOOST = 15

_KIND_WEIGHT: dict[ContentKind, float] = {
    ContentKind.MOVIE: 2.0,
    ContentKind.SERIES: 1.0,
    ContentKind.ANIME: 1.0,
}

_ROMAN = r"(?:x|ix|iv|v?i{1,3}|v)\b"


@lru_cache(maxsize=64)
def _boost_pattern(term: str) -> re.Pattern[str]:
    return re.compile(
        r"(?<![a-z0-9])"
        + re.escape(term)
        + rf"(?:\s*\d+|\s+{_ROMAN}|\s*:|\s*-|\s+(?:film|movie)\b)"
    )


def base_score(name: str, term: str) -> int:
    if name == term:
        return 100
    if name.startswith(term) or name.startswith(f"the {term}"):
        return 90
    if name.startswith(f"{term} "):
        return 85
    if f" {term} " in name:
        return 80
    if term in name:
        return 70
    return 0


def relevance(name: str, terms: Iterable[str]) -> int:
    """Best score of *name* over *terms*, including the franchise boost."""
    lowered = clean(name)
    best = 0
    for term in terms:
        score = base_score(lowered, term)
        if score and _boost_pattern(term).search(lowered):
            score += FRANCHISE_BOOST
        best = max(best, score)
    return best


def secondary_score(item: CatalogItem, current_year: int) -> float:
    score = 0.0
    if item.year is not None:
        score += max(0.0, 20.0 - 0.5 * (current_year - item.year))
    if item.rating is not None:
        score += item.rating
    return score + _KIND_WEIGHT[item.kind]


def rank(
    raw: list[CatalogItem],
    query: str,
    *,
    group_franchises: bool = True,
    current_year: int | None = None,
) -> list[SearchResult]:
    terms = match_terms(query)
    if not terms:
        return []
    year = current_year if current_year is not None else _dt.date.today().year

    scored: list[SearchResult] = []
    for index, item in enumerate(raw):
        score = relevance(item.name, terms)
        if score < MIN_RELEVANCE:
            continue
        scored.append(
            SearchResult(
                item=item,
                relevance_score=score,
                secondary_score=secondary_score(item, year),
                original_index=index,
            )
        )

    scored.sort(
        key=lambda r: (-r.relevance_score, -r.secondary_score, r.original_index)
    )
    if not group_franchises:
        return scored
    return franchise.group_franchises(scored, normalize_query(query))
