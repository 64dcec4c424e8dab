"""Stream ranking: quality first, then swarm health and file size."""

from __future__ import annotations

from dataclasses import replace

from marquee.domain.entities.playback import StreamCandidate
from marquee.infrastructure.streams import release_parser as rp

_QUALITY_SCORES: dict[str, float] = {
    rp.UHD_4K: 60.0,
    rp.FHD_BLURAY: 55.0,
    rp.FHD_REMUX: 55.0,
    rp.FHD: 45.0,
    rp.BLURAY: 42.0,
    rp.HD_BLURAY: 40.0,
    rp.HD: 35.0,
    rp.H265: 35.0,
    rp.WEBDL: 30.0,
    rp.H264: 30.0,
    rp.WEBRIP: 25.0,
    rp.HDRIP: 25.0,
    rp.BRRIP: 25.0,
    rp.SD: 15.0,
    rp.DVDRIP: 15.0,
    rp.CAM: 5.0,
    rp.TS: 5.0,
}
_UNKNOWN_QUALITY_SCORE = 20.0
_MAX_RATIO_BONUS = 10.0


class StreamSorter:
    """Score = quality + seeder/leecher ratio (capped) + size preference."""

    def rank(self, stream: StreamCandidate) -> float:
        score = 0.0
        if stream.display_quality:
            score += _QUALITY_SCORES.get(stream.display_quality, _UNKNOWN_QUALITY_SCORE)

        seeders, leechers = stream.seeders or 0, stream.leechers or 0
        if leechers > 0:
            score += min(seeders / leechers, _MAX_RATIO_BONUS)
        elif seeders > 0:
            score += _MAX_RATIO_BONUS

        size_gb = rp.size_to_gb(stream.size)
        if size_gb is not None:
            if 1.0 <= size_gb <= 8.0:
                score += 5.0
            elif 8.0 < size_gb <= 15.0:
                score += 2.0
            elif size_gb < 0.5:
                score -= 5.0
        return score

    def sort(self, streams: list[StreamCandidate]) -> list[StreamCandidate]:
        """Return a new list, best first, with ``rank_score`` filled in.

        Equal scores keep their input order.
        """
        scored = [replace(s, rank_score=self.rank(s)) for s in streams]
        scored.sort(key=lambda s: s.rank_score, reverse=True)
        return scored
