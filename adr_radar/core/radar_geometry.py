"""Radar Geometry — pure mapping of classified blips onto the radar disk.

Invariants:
    - Sectors run clockwise from 12 o'clock in Quadrant declaration order
    - Ring bands: Adopt innermost, Hold outermost (distance from center = distance
      from adoption)
    - plot_blips() is deterministic: same blips in, same coordinates out
    - sweep_angle() depends on elapsed time only, never on the data
    - Blips without quadrant or ring are not plotted

Design Decisions:
    - Jitter from BLAKE2b of the name, not random(): tests assert exact positions
      and the chart does not flicker between frames
    - Unit-disk coordinates (y up) in the engine; to_canvas() flips to grid rows
"""

import hashlib
import math
from dataclasses import dataclass
from typing import Iterable

from adr_radar.core.domain_types import Quadrant, Ring
from adr_radar.core.records import BlipRecord


FULL_TURN = 2.0 * math.pi
SECTOR_SPAN = FULL_TURN / len(Quadrant)
DEFAULT_SWEEP_PERIOD_S = 4.0

# Fraction of a sector/band kept clear at each edge so points never sit on axes
ANGULAR_MARGIN = 0.12
RADIAL_MARGIN = 0.15

# (inner, outer) radius of each ring on the unit disk
RING_BANDS: dict[Ring, tuple[float, float]] = {
    Ring.ADOPT: (0.0, 0.25),
    Ring.TRIAL: (0.25, 0.5),
    Ring.ASSESS: (0.5, 0.75),
    Ring.HOLD: (0.75, 1.0),
}


@dataclass(frozen=True)
class RadarPoint:
    blip_id: int
    name: str
    quadrant: Quadrant
    ring: Ring
    angle: float    # radians, clockwise from 12 o'clock
    radius: float   # 0.0 (center) – 1.0 (edge)
    x: float        # unit disk, right positive
    y: float        # unit disk, up positive


def stable_jitter(name: str) -> tuple[float, float]:
    """Two independent fractions in [0, 1) derived from the name alone."""
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    a = int.from_bytes(digest[:4], "big") / 2**32
    b = int.from_bytes(digest[4:], "big") / 2**32
    return a, b


def sector_bounds(quadrant: Quadrant) -> tuple[float, float]:
    start = quadrant.index * SECTOR_SPAN
    return start, start + SECTOR_SPAN


def place(name: str, quadrant: Quadrant, ring: Ring) -> tuple[float, float]:
    """Polar position (angle, radius) of one blip inside its cell."""
    angular_jitter, radial_jitter = stable_jitter(name)
    start, _ = sector_bounds(quadrant)
    usable_span = SECTOR_SPAN * (1.0 - 2 * ANGULAR_MARGIN)
    angle = start + SECTOR_SPAN * ANGULAR_MARGIN + angular_jitter * usable_span

    inner, outer = RING_BANDS[ring]
    band = outer - inner
    usable_band = band * (1.0 - 2 * RADIAL_MARGIN)
    radius = inner + band * RADIAL_MARGIN + radial_jitter * usable_band
    return angle, radius


def polar_to_xy(angle: float, radius: float) -> tuple[float, float]:
    # Clockwise from north: x = r·sin θ, y = r·cos θ
    return radius * math.sin(angle), radius * math.cos(angle)


def plot_blips(blips: Iterable[BlipRecord]) -> list[RadarPoint]:
    """Place every classified blip. Output order follows input order."""
    points: list[RadarPoint] = []
    for blip in blips:
        if blip.quadrant is None or blip.ring is None:
            continue
        angle, radius = place(blip.name, blip.quadrant, blip.ring)
        x, y = polar_to_xy(angle, radius)
        points.append(RadarPoint(
            blip_id=blip.id, name=blip.name,
            quadrant=blip.quadrant, ring=blip.ring,
            angle=angle, radius=radius, x=x, y=y,
        ))
    return points


def sweep_angle(
    elapsed_s: float, period_s: float = DEFAULT_SWEEP_PERIOD_S,
) -> float:
    """Sweep-line angle in [0, 2π) for the given elapsed time."""
    if period_s <= 0:
        raise ValueError("period_s must be positive")
    phase = math.fmod(elapsed_s, period_s) / period_s
    if phase < 0:
        phase += 1.0
    return FULL_TURN * phase


def to_canvas(x: float, y: float, width: int, height: int) -> tuple[int, int]:
    """Unit-disk point to (column, row) on a width × height character grid."""
    half_w = (width - 1) / 2.0
    half_h = (height - 1) / 2.0
    col = round(half_w + x * half_w)
    row = round(half_h - y * half_h)
    return (
        min(max(col, 0), width - 1),
        min(max(row, 0), height - 1),
    )
