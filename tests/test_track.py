"""Tests for track geometry and the Track model."""

import math

import numpy as np
import pytest

from derby_engine.core.condition import DRY, ICY
from derby_engine.core.errors import RaceLifecycleError
from derby_engine.core.geometry import (
    FigureEightGeometry,
    OvalGeometry,
    TrackShape,
    ZigzagGeometry,
    build_geometry,
)
from derby_engine.core.track import Track

_FRACTIONS = np.linspace(0.0, 1.0, 97, endpoint=False)


# ---------------------------------------------------------------------------
# Tests -- geometry
# ---------------------------------------------------------------------------


def test_builders_scale_with_length() -> None:
    oval = build_geometry(TrackShape.OVAL, 300.0)
    eight = build_geometry(TrackShape.FIGURE_EIGHT, 300.0)
    zigzag = build_geometry(TrackShape.ZIGZAG, 300.0)
    assert isinstance(oval, OvalGeometry) and oval.width == 100.0 and oval.height == 50.0
    assert isinstance(eight, FigureEightGeometry) and eight.width == 60.0
    assert isinstance(zigzag, ZigzagGeometry) and zigzag.segment_width == 25.0


def test_path_shapes() -> None:
    assert OvalGeometry.for_length(90.0).path().shape == (100, 2)
    assert FigureEightGeometry.for_length(90.0).path().shape == (200, 2)
    assert ZigzagGeometry.for_length(90.0).path().shape == (7, 2)


def test_curve_factors_in_unit_interval() -> None:
    for shape in TrackShape:
        geometry = build_geometry(shape, 120.0)
        for fraction in _FRACTIONS:
            value = geometry.curve_factor(float(fraction))
            assert 0.0 <= value <= 1.0, f"{shape} at {fraction}: {value}"


def test_oval_outer_lane_is_further_out() -> None:
    geometry = OvalGeometry.for_length(120.0)
    x0, y0 = geometry.position(0.0, 0)
    x2, y2 = geometry.position(0.0, 2)
    assert (x0, y0) == pytest.approx((40.0, 0.0))
    assert (x2, y2) == pytest.approx((60.0, 0.0))


def test_oval_curvature_extremes() -> None:
    geometry = OvalGeometry.for_length(120.0)
    assert geometry.curve_factor(0.0) == pytest.approx(0.5)
    assert geometry.curve_factor(0.25) == pytest.approx(1.0)


def test_figure_eight_lanes_are_parallel() -> None:
    """Every lane sits lane_spacing away from the centre line."""
    geometry = FigureEightGeometry.for_length(100.0)
    for fraction in (0.1, 0.3, 0.6):
        cx, cy = geometry.position(fraction, 0)
        lx, ly = geometry.position(fraction, 1)
        assert math.hypot(lx - cx, ly - cy) == pytest.approx(geometry.lane_spacing)


def test_figure_eight_crossing() -> None:
    geometry = FigureEightGeometry.for_length(100.0)
    assert geometry.is_at_crossing(0.0)
    assert geometry.is_at_crossing(0.5)
    assert not geometry.is_at_crossing(0.25)
    assert not geometry.is_at_crossing(0.125)


def test_zigzag_turns_are_sharp() -> None:
    geometry = ZigzagGeometry.for_length(120.0)
    boundary = 1.0 / geometry.segments
    assert geometry.curve_factor(0.0) == pytest.approx(0.2)
    assert geometry.curve_factor(boundary * 0.5) == pytest.approx(1.0)
    assert geometry.position(0.0, 0) == pytest.approx((0.0, 0.0))


# ---------------------------------------------------------------------------
# Tests -- Track
# ---------------------------------------------------------------------------


def test_track_validation() -> None:
    with pytest.raises(ValueError):
        Track("", 100.0, 4)
    with pytest.raises(ValueError):
        Track("Short", 0.0, 4)
    with pytest.raises(ValueError):
        Track("Narrow", 100.0, 0)


def test_lap_fraction_wraps() -> None:
    track = Track("Wrap", 200.0, 3)
    assert track.lap_fraction(50.0) == pytest.approx(0.25)
    assert track.lap_fraction(250.0) == pytest.approx(0.25)
    assert track.is_complete(200.0)
    assert not track.is_complete(199.9)


def test_crossing_only_on_figure_eight() -> None:
    oval = Track("Oval", 100.0, 3)
    eight = Track("Eight", 100.0, 3, shape=TrackShape.FIGURE_EIGHT)
    assert not oval.is_at_crossing(0.0)
    assert eight.is_at_crossing(0.0)
    assert eight.is_at_crossing(50.0)


def test_mutations_bump_revision_and_regenerate_geometry() -> None:
    track = Track("Mutable", 90.0, 3, condition=DRY)
    path_before = track.generate_path()

    track.length = 180.0
    track.lanes = 5
    track.condition = ICY

    assert track.revision == 3
    assert track.geometry.width == pytest.approx(60.0)
    assert not np.allclose(path_before, track.generate_path())
    assert track.condition is ICY
    with pytest.raises(ValueError):
        track.length = -1.0


def test_locked_track_refuses_mutation() -> None:
    track = Track("Locked", 90.0, 3, condition=DRY)
    track.lock()

    for attr, value in (("length", 120.0), ("lanes", 1), ("condition", ICY)):
        with pytest.raises(RaceLifecycleError):
            setattr(track, attr, value)
    assert track.revision == 0
    assert (track.length, track.lanes, track.condition) == (90.0, 3, DRY)

    track.unlock()
    track.condition = ICY
    assert track.revision == 1


def test_generate_path_returns_copy() -> None:
    track = Track("Copy", 90.0, 3)
    path = track.generate_path()
    path[:] = 0.0
    assert track.generate_path().any()


def test_position_matches_geometry() -> None:
    track = Track("Zig", 120.0, 3, shape=TrackShape.ZIGZAG)
    assert track.position_at(30.0, 1) == pytest.approx(
        track.geometry.position(0.25, 1)
    )
