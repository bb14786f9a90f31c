"""Parametric track geometry for the derby engine.

Every shape is a frozen parameter bundle tagged by :class:`TrackShape`.
All calculations take a *lap fraction* in ``[0, 1)`` rather than a raw
distance, so geometry never depends on how far a horse has run in
absolute units; :class:`~derby_engine.core.track.Track` performs the
distance-to-fraction conversion.

Shared interface (duck-typed) for all geometries:

    path()                      -> ndarray of shape (n, 2)
    position(fraction, lane)    -> (x, y)
    curve_factor(fraction)      -> float in [0, 1]; 1.0 = straight
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

import numpy as np

Point = tuple[float, float]


class TrackShape(Enum):
    """Supported track layouts."""

    OVAL = "oval"
    FIGURE_EIGHT = "figure_eight"
    ZIGZAG = "zigzag"


# ---------------------------------------------------------------------------
# Oval
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OvalGeometry:
    """Ellipse whose outer lanes use a larger radius.

    Attributes:
        width: Horizontal semi-axis of the innermost lane.
        height: Vertical semi-axis of the innermost lane.
        lane_spacing: Radius added per lane index.
        path_points: Number of sampled points in :meth:`path`.
    """

    width: float
    height: float
    lane_spacing: float = 10.0
    path_points: int = 100

    @classmethod
    def for_length(cls, length: float) -> OvalGeometry:
        return cls(width=length / 3.0, height=length / 6.0)

    def path(self) -> np.ndarray:
        angles = np.linspace(0.0, 2.0 * math.pi, self.path_points, endpoint=False)
        return np.column_stack((self.width * np.cos(angles), self.height * np.sin(angles)))

    def position(self, fraction: float, lane: int) -> Point:
        angle = 2.0 * math.pi * fraction
        offset = lane * self.lane_spacing
        return (
            (self.width + offset) * math.cos(angle),
            (self.height + offset) * math.sin(angle),
        )

    def curve_factor(self, fraction: float) -> float:
        # Sharpest at the ends of the major axis (angle 0, pi).
        angle = 2.0 * math.pi * fraction
        return 0.5 + 0.5 * abs(math.sin(angle))


# ---------------------------------------------------------------------------
# Figure-eight
# ---------------------------------------------------------------------------

_CROSSING_TOLERANCE: float = 0.1


@dataclass(frozen=True)
class FigureEightGeometry:
    """Lemniscate-like loop ``x = w sin(a)``, ``y = h sin(2a)``.

    Lanes are offset along the unit normal of the centre line, so they
    stay parallel through both loops.  The path crosses itself at the
    origin; :meth:`is_at_crossing` reports when a horse is there.
    """

    width: float
    height: float
    lane_spacing: float = 8.0
    path_points: int = 200

    @classmethod
    def for_length(cls, length: float) -> FigureEightGeometry:
        return cls(width=length / 5.0, height=length / 10.0)

    def path(self) -> np.ndarray:
        angles = np.linspace(0.0, 2.0 * math.pi, self.path_points, endpoint=False)
        return np.column_stack(
            (self.width * np.sin(angles), self.height * np.sin(2.0 * angles))
        )

    def position(self, fraction: float, lane: int) -> Point:
        angle = 2.0 * math.pi * fraction
        x = self.width * math.sin(angle)
        y = self.height * math.sin(2.0 * angle)

        # Tangent, then rotate 90 degrees for the lane normal.
        dx = self.width * math.cos(angle)
        dy = 2.0 * self.height * math.cos(2.0 * angle)
        norm = math.hypot(dx, dy)
        if norm > 0.0:
            dx /= norm
            dy /= norm

        offset = lane * self.lane_spacing
        return x - dy * offset, y + dx * offset

    def curve_factor(self, fraction: float) -> float:
        angle = 2.0 * math.pi * fraction
        crossing = abs(math.sin(angle))
        general = 0.5 + 0.3 * abs(math.cos(2.0 * angle))
        return max(0.3, min(1.0, 0.3 * crossing + 0.7 * general))

    def is_at_crossing(self, fraction: float) -> bool:
        """True when both parametric sine terms are near zero."""
        angle = 2.0 * math.pi * fraction
        return (
            abs(math.sin(angle)) < _CROSSING_TOLERANCE
            and abs(math.sin(2.0 * angle)) < _CROSSING_TOLERANCE
        )


# ---------------------------------------------------------------------------
# Zigzag
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ZigzagGeometry:
    """Fixed number of straight legs alternating up and down.

    The course is open: a lap fraction of 0 and 1 map to opposite ends,
    and distance wraps modulo the track length.  Turns are concentrated
    at leg boundaries, so curvature depends only on how far a horse is
    from the nearest boundary.
    """

    segment_width: float
    segment_height: float
    segments: int = 6
    lane_spacing: float = 8.0

    @classmethod
    def for_length(cls, length: float, segments: int = 6) -> ZigzagGeometry:
        return cls(
            segment_width=length / (2.0 * segments),
            segment_height=length / (4.0 * segments),
            segments=segments,
        )

    def path(self) -> np.ndarray:
        idx = np.arange(self.segments + 1)
        xs = idx * 2.0 * self.segment_width
        ys = np.where(idx % 2 == 0, 0.0, self.segment_height)
        return np.column_stack((xs, ys))

    def _segment(self, fraction: float) -> tuple[int, float]:
        scaled = fraction * self.segments
        segment = min(int(scaled), self.segments - 1)
        return segment, scaled - segment

    def position(self, fraction: float, lane: int) -> Point:
        segment, progress = self._segment(fraction)
        leg_dx = 2.0 * self.segment_width
        rising = segment % 2 == 0

        x = segment * leg_dx + leg_dx * progress
        y = self.segment_height * (progress if rising else 1.0 - progress)

        dy = self.segment_height if rising else -self.segment_height
        norm = math.hypot(leg_dx, dy)
        offset = lane * self.lane_spacing
        return x - (dy / norm) * offset, y + (leg_dx / norm) * offset

    def curve_factor(self, fraction: float) -> float:
        _, progress = self._segment(fraction)
        from_turn = min(progress, 1.0 - progress)
        return 0.2 + 0.8 * min(1.0, from_turn * 5.0)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

Geometry = Union[OvalGeometry, FigureEightGeometry, ZigzagGeometry]

GEOMETRY_BUILDERS: dict[TrackShape, Callable[[float], Geometry]] = {
    TrackShape.OVAL: OvalGeometry.for_length,
    TrackShape.FIGURE_EIGHT: FigureEightGeometry.for_length,
    TrackShape.ZIGZAG: ZigzagGeometry.for_length,
}


def build_geometry(shape: TrackShape, length: float) -> Geometry:
    """Return the geometry of *shape* scaled to a track of *length*."""
    return GEOMETRY_BUILDERS[shape](length)
