"""Query normalisation for relevance scoring."""

from __future__ import annotations

_ARTICLES = ("the ", "a ", "an ")

# Fixed lookup, no general stemming: "cars" must stay "cars".
_SINGULAR: dict[str, str] = {
    "movies": "movie",
    "films": "film",
    "shows": "show",
    "episodes": "episode",
    "seasons": "season",
    "stories": "story",
    "babies": "baby",
    "wolves": "wolf",
    "knives": "knife",
    "heroes": "hero",
    "women": "woman",
    "men": "man",
    "children": "child",
    "mice": "mouse",
    "geese": "goose",
}


def clean(text: str) -> str:
    return " ".join(text.lower().split())


def normalize_query(query: str) -> str:
    """Lowercase, trim, drop one leading article, singularise known plurals."""
    text = clean(query)
    for article in _ARTICLES:
        if text.startswith(article) and len(text) > len(article):
            text = text[len(article) :]
            break
    return " ".join(_SINGULAR.get(word, word) for word in text.split())


def match_terms(query: str) -> tuple[str, ...]:
    """Original and normalised query, de-duplicated, empty terms dropped."""
    terms: list[str] = []
    for term in (clean(query), normalize_query(query)):
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)
