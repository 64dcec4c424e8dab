"""JSON rendering of domain entities for the local HTTP API."""

from __future__ import annotations

from typing import Any

from marquee.domain.entities import (
    CatalogItem,
    CatalogListing,
    DirectDescriptor,
    PlaybackOutcome,
    ResolvedMedia,
    SearchResult,
    StreamCandidate,
    StreamDescriptor,
)


def render_item(item: CatalogItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "kind": item.kind.value,
        "poster_url": item.poster_url,
        "year": item.year,
        "rating": item.rating,
        "description": item.description,
        "genres": list(item.genres),
    }


def render_listing(listing: CatalogListing) -> dict[str, Any]:
    return {
        "kind": listing.kind.value,
        "source": listing.source,
        "available": listing.available,
        "items": [render_item(i) for i in listing.items],
    }


def render_search_result(result: SearchResult) -> dict[str, Any]:
    return {
        **render_item(result.item),
        "relevance_score": result.relevance_score,
        "secondary_score": round(result.secondary_score, 2),
        "franchise": result.franchise_key,
    }


def render_descriptor(descriptor: StreamDescriptor) -> dict[str, str]:
    if isinstance(descriptor, DirectDescriptor):
        return {"type": "direct", "value": descriptor.url}
    return {"type": "swarm", "value": descriptor.locator}


def render_stream(stream: StreamCandidate) -> dict[str, Any]:
    return {
        "title": stream.title,
        "name": stream.name,
        "source": stream.source,
        "quality": stream.display_quality,
        "seeders": stream.seeders,
        "size": stream.size,
        "score": round(stream.rank_score, 2),
        "descriptor": render_descriptor(stream.descriptor),
    }


def _render_media(media: ResolvedMedia | None) -> dict[str, Any] | None:
    if media is None:
        return None
    return {
        "kind": media.kind.value,
        "location": media.location,
        "degraded": media.degraded,
    }


def render_outcome(outcome: PlaybackOutcome) -> dict[str, Any]:
    return {
        "session_id": outcome.session_id,
        "state": outcome.state.value,
        "ok": outcome.ok,
        "degraded": outcome.degraded,
        "player": outcome.player,
        "media": _render_media(outcome.media),
        "error_code": outcome.error_code,
        "message": outcome.message,
    }
