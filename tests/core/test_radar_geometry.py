"""Radar Geometry — placement, jitter and sweep are pure and deterministic.

Tests:
    - Same blip placed twice lands on the same coordinates
    - Every blip stays inside its quadrant sector and ring band
    - Sectors run clockwise from 12 o'clock
    - Unclassified blips are not plotted
    - Sweep angle is monotonic within a period and wraps at the period
    - to_canvas() maps the unit disk onto the grid and clamps
"""

import math

import pytest

from adr_radar.core.domain_types import BlipId, Quadrant, Ring
from adr_radar.core.radar_geometry import (
    FULL_TURN, RING_BANDS, SECTOR_SPAN, place, plot_blips, polar_to_xy,
    sector_bounds, stable_jitter, sweep_angle, to_canvas,
)
from adr_radar.core.records import BlipRecord


def _blip(id_: int, name: str, quadrant=Quadrant.TOOLS, ring=Ring.ADOPT) -> BlipRecord:
    return BlipRecord(
        id=BlipId(id_), name=name, ring=ring, quadrant=quadrant, tag=None,
        description=None, created="2026-03-01", has_adr=False, adr_id=None,
    )


def test_jitter_is_stable_and_in_unit_range():
    a1, b1 = stable_jitter("Rust")
    a2, b2 = stable_jitter("Rust")
    assert (a1, b1) == (a2, b2)
    assert 0.0 <= a1 < 1.0 and 0.0 <= b1 < 1.0


def test_jitter_differs_between_names():
    assert stable_jitter("Rust") != stable_jitter("Go")


def test_plot_is_idempotent():
    blips = [_blip(1, "Rust", Quadrant.LANGUAGES, Ring.TRIAL), _blip(2, "Kafka")]
    assert plot_blips(blips) == plot_blips(blips)


@pytest.mark.parametrize("quadrant", list(Quadrant))
@pytest.mark.parametrize("ring", list(Ring))
def test_point_stays_inside_its_cell(quadrant, ring):
    for name in ("Rust", "Kafka", "Terraform", "Event Storming", "x"):
        angle, radius = place(name, quadrant, ring)
        start, end = sector_bounds(quadrant)
        inner, outer = RING_BANDS[ring]
        assert start < angle < end
        assert inner < radius < outer


def test_sectors_run_clockwise_from_north():
    assert sector_bounds(Quadrant.PLATFORMS) == (0.0, SECTOR_SPAN)
    assert sector_bounds(Quadrant.TECHNIQUES)[1] == pytest.approx(FULL_TURN)
    # Platforms is the upper-right quarter, Techniques the upper-left
    [p] = plot_blips([_blip(1, "Docker", Quadrant.PLATFORMS)])
    [t] = plot_blips([_blip(2, "TDD", Quadrant.TECHNIQUES)])
    assert p.x > 0 and p.y > 0
    assert t.x < 0 and t.y > 0


def test_adopt_is_inside_hold():
    [adopt] = plot_blips([_blip(1, "Python", ring=Ring.ADOPT)])
    [hold] = plot_blips([_blip(2, "Python", ring=Ring.HOLD)])
    assert adopt.radius < hold.radius


def test_unclassified_blips_are_skipped():
    blips = [
        _blip(1, "Rust"),
        _blip(2, "Unsorted", quadrant=None),
        _blip(3, "Unringed", ring=None),
    ]
    assert [p.name for p in plot_blips(blips)] == ["Rust"]


def test_polar_to_xy_north_and_east():
    x, y = polar_to_xy(0.0, 1.0)
    assert x == pytest.approx(0.0) and y == pytest.approx(1.0)
    x, y = polar_to_xy(math.pi / 2, 0.5)
    assert x == pytest.approx(0.5) and y == pytest.approx(0.0, abs=1e-12)


def test_sweep_angle_is_monotonic_within_a_period():
    angles = [sweep_angle(t / 10, period_s=4.0) for t in range(40)]
    assert angles == sorted(angles)
    assert angles[0] == 0.0


def test_sweep_angle_wraps_at_period():
    assert sweep_angle(4.0, 4.0) == pytest.approx(0.0)
    assert sweep_angle(1.0, 4.0) == pytest.approx(math.pi / 2)
    assert sweep_angle(5.0, 4.0) == pytest.approx(sweep_angle(1.0, 4.0))


def test_sweep_angle_does_not_depend_on_blips():
    before = sweep_angle(2.5)
    plot_blips([_blip(1, "Rust")])
    assert sweep_angle(2.5) == before


def test_sweep_angle_rejects_non_positive_period():
    with pytest.raises(ValueError):
        sweep_angle(1.0, 0.0)


def test_to_canvas_maps_center_and_corners():
    assert to_canvas(0.0, 0.0, 21, 11) == (10, 5)
    assert to_canvas(1.0, 1.0, 21, 11) == (20, 0)
    assert to_canvas(-1.0, -1.0, 21, 11) == (0, 10)


def test_to_canvas_clamps_out_of_range():
    assert to_canvas(3.0, -3.0, 21, 11) == (20, 10)


def test_plot_keeps_blip_identity():
    [point] = plot_blips([_blip(42, "Rust")])
    assert point.blip_id == 42
    assert point.name == "Rust"
