"""Radar Stats — pure summary of a blip/ADR snapshot for headless export and the API.

Invariants:
    - Counts cover every Quadrant and Ring member (zero when absent), in enum order
    - coverage is None when there are no blips (no division by zero)
    - recent is newest first by created date, ties broken by higher id
"""

from dataclasses import dataclass, field
from typing import Sequence

from adr_radar.core.domain_types import Quadrant, Ring
from adr_radar.core.records import AdrRecord, BlipRecord


RECENT_LIMIT = 5


@dataclass(frozen=True)
class RadarStats:
    total_blips: int
    total_adrs: int
    linked_blips: int
    coverage: float | None
    by_quadrant: dict[str, int] = field(default_factory=dict)
    by_ring: dict[str, int] = field(default_factory=dict)
    unclassified: int = 0
    recent: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_blips": self.total_blips,
            "total_adrs": self.total_adrs,
            "linked_blips": self.linked_blips,
            "coverage": self.coverage,
            "by_quadrant": dict(self.by_quadrant),
            "by_ring": dict(self.by_ring),
            "unclassified": self.unclassified,
            "recent": list(self.recent),
        }


def summarize(
    blips: Sequence[BlipRecord], adrs: Sequence[AdrRecord],
    recent_limit: int = RECENT_LIMIT,
) -> RadarStats:
    by_quadrant = {q.value: 0 for q in Quadrant}
    by_ring = {r.value: 0 for r in Ring}
    for blip in blips:
        if blip.quadrant is not None:
            by_quadrant[blip.quadrant.value] += 1
        if blip.ring is not None:
            by_ring[blip.ring.value] += 1

    coverage = None
    if blips:
        coverage = round(len(adrs) / len(blips) * 100.0, 1)

    newest = sorted(blips, key=lambda b: (b.created, b.id), reverse=True)
    return RadarStats(
        total_blips=len(blips),
        total_adrs=len(adrs),
        linked_blips=sum(1 for b in blips if b.has_adr),
        coverage=coverage,
        by_quadrant=by_quadrant,
        by_ring=by_ring,
        unclassified=sum(1 for b in blips if not b.is_classified),
        recent=tuple(b.name for b in newest[:recent_limit]),
    )
