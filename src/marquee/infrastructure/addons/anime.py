"""Keyword-based anime detection for movie/series catalog entries."""

from __future__ import annotations

from marquee.domain.entities.catalog import CatalogItem

_KEYWORDS = (
    "anime",
    "manga",
    "japanese animation",
    "studio ghibli",
    "miyazaki",
    "toei",
    "madhouse",
    "pierrot",
    "wit studio",
    "mappa",
    "a-1 pictures",
    "production i.g",
    "gainax",
    "kyoto animation",
)

_TITLES = (
    "one piece",
    "naruto",
    "bleach",
    "dragon ball",
    "pokemon",
    "detective conan",
    "attack on titan",
    "demon slayer",
    "death note",
    "fullmetal alchemist",
    "spirited away",
    "my neighbor totoro",
    "princess mononoke",
    "howl's moving castle",
    "sword art online",
    "tokyo ghoul",
    "jujutsu kaisen",
    "my hero academia",
    "hunter x hunter",
    "fairy tail",
    "black clover",
    "violet evergarden",
    "cowboy bebop",
    "neon genesis evangelion",
    "akira",
    "ghost in the shell",
)


def is_anime(item: CatalogItem) -> bool:
    name = item.name.lower()
    description = (item.description or "").lower()
    genres = {g.lower() for g in item.genres}

    if "anime" in genres:
        return True
    if any(k in name or k in description for k in _KEYWORDS):
        return True
    if any(t in name for t in _TITLES):
        return True
    animated = "animation" in genres or "animated" in description
    return animated and "japan" in description
