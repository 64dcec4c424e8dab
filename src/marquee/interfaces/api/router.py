"""Local HTTP API: catalog, search, streams and playback control."""

from __future__ import annotations

from typing import Literal, Optional, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from marquee.domain.entities import (
    ContentKind,
    DirectDescriptor,
    PlaybackMetadata,
    StreamDescriptor,
    SwarmDescriptor,
)
from marquee.interfaces.api.presenter import (
    render_listing,
    render_outcome,
    render_search_result,
    render_stream,
)
from marquee.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["marquee"])

_STATUS_BY_ERROR: dict[str, int] = {
    "MALFORMED_DESCRIPTOR": 409,
    "SWARM_HELPER_UNAVAILABLE": 424,
    "PLAYER_UNAVAILABLE": 424,
}


class DescriptorIn(BaseModel):
    type: Literal["direct", "swarm"]
    value: str = Field(min_length=1)

    def to_domain(self) -> StreamDescriptor:
        if self.type == "direct":
            return DirectDescriptor(url=self.value)
        return SwarmDescriptor(locator=self.value)


class PlaybackRequest(BaseModel):
    descriptor: DescriptorIn
    title: str = Field(min_length=1)
    kind: ContentKind = ContentKind.MOVIE
    year: Optional[int] = None


@router.get("/catalog/{kind}/popular")
async def popular(request: Request, kind: ContentKind) -> JSONResponse:
    state = cast(AppState, request.app.state)
    listing = await state.catalog.fetch_popular(kind)
    return JSONResponse(content=render_listing(listing))


@router.get("/search")
async def search(
    request: Request,
    q: str = Query(default=""),
    kind: Optional[list[ContentKind]] = Query(default=None),
    group: bool = Query(default=True),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    kinds = tuple(kind) if kind else (ContentKind.MOVIE, ContentKind.SERIES)
    results = await state.catalog.search_ranked(q, kinds, group_franchises=group)
    return JSONResponse(
        content={
            "query": q,
            "results": [render_search_result(r) for r in results],
        }
    )


@router.get("/streams/{kind}/{item_id}")
async def streams(request: Request, kind: ContentKind, item_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    candidates = await state.catalog.fetch_streams(kind, item_id)
    return JSONResponse(
        content={"item_id": item_id, "streams": [render_stream(s) for s in candidates]}
    )


@router.post("/playback")
async def play(request: Request, body: PlaybackRequest) -> JSONResponse:
    state = cast(AppState, request.app.state)
    metadata = PlaybackMetadata(title=body.title, kind=body.kind, year=body.year)
    outcome = await state.playback.resolve_and_play(body.descriptor.to_domain(), metadata)
    status_code = _STATUS_BY_ERROR.get(outcome.error_code or "", 200)
    return JSONResponse(content=render_outcome(outcome), status_code=status_code)


@router.post("/playback/stop")
async def stop(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    stopped = await state.playback.stop()
    return JSONResponse(content={"stopped": stopped})


@router.get("/playback")
async def current(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    outcome = state.playback.snapshot()
    if outcome is None:
        return JSONResponse(content={"state": "idle", "session_id": None})
    return JSONResponse(content=render_outcome(outcome))
