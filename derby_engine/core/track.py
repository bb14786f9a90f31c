"""Track model for the derby engine.

A track pairs a shape-specific geometry with a length, a lane count and
the current surface condition.  Geometry is regenerated whenever the
length changes; the condition may be swapped freely between races.
While a race runs, the race manager holds the track locked and every
setter raises :class:`RaceLifecycleError`.  Every mutation bumps
:attr:`Track.revision` so that dependent caches (e.g. the odds map)
can tell when they are stale.
"""

from __future__ import annotations

import numpy as np

from derby_engine.core.condition import DRY, TrackCondition
from derby_engine.core.errors import RaceLifecycleError
from derby_engine.core.geometry import (
    FigureEightGeometry,
    Geometry,
    Point,
    TrackShape,
    build_geometry,
)


class Track:
    """A race course of a given shape.

    Attributes:
        name: Track name.
        shape: Layout tag selecting the geometry.
        revision: Monotonic counter incremented on every mutation.
    """

    __slots__ = ("name", "shape", "revision", "_length", "_lanes", "_condition",
                 "_geometry", "_path", "_locked")

    def __init__(
        self,
        name: str,
        length: float,
        lanes: int,
        shape: TrackShape = TrackShape.OVAL,
        condition: TrackCondition = DRY,
    ) -> None:
        if not name:
            raise ValueError("Track name must not be empty.")
        if length <= 0:
            raise ValueError("length must be > 0.")
        if lanes < 1:
            raise ValueError("lanes must be >= 1.")
        self.name: str = name
        self.shape: TrackShape = shape
        self.revision: int = 0
        self._length: float = float(length)
        self._lanes: int = lanes
        self._condition: TrackCondition = condition
        self._geometry: Geometry = build_geometry(shape, self._length)
        self._path: np.ndarray = self._geometry.path()
        self._locked: bool = False

    # -- Race lock -----------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def _require_unlocked(self, attr: str) -> None:
        if self._locked:
            raise RaceLifecycleError(f"Cannot change {attr} of {self.name!r} during a race.")

    # -- Mutable properties --------------------------------------------------

    @property
    def length(self) -> float:
        return self._length

    @length.setter
    def length(self, value: float) -> None:
        self._require_unlocked("the length")
        if value <= 0:
            raise ValueError("length must be > 0.")
        self._length = float(value)
        self._geometry = build_geometry(self.shape, self._length)
        self._path = self._geometry.path()
        self.revision += 1

    @property
    def lanes(self) -> int:
        return self._lanes

    @lanes.setter
    def lanes(self, value: int) -> None:
        self._require_unlocked("the lanes")
        if value < 1:
            raise ValueError("lanes must be >= 1.")
        self._lanes = value
        self.revision += 1

    @property
    def condition(self) -> TrackCondition:
        return self._condition

    @condition.setter
    def condition(self, value: TrackCondition) -> None:
        self._require_unlocked("the condition")
        self._condition = value
        self.revision += 1

    @property
    def geometry(self) -> Geometry:
        return self._geometry

    # -- Geometry queries ----------------------------------------------------

    def generate_path(self) -> np.ndarray:
        """Ordered ``(n, 2)`` array of points describing the centre line."""
        return self._path.copy()

    def lap_fraction(self, distance: float) -> float:
        """Convert an absolute distance into a fraction of one lap."""
        return (distance % self._length) / self._length

    def position_at(self, distance: float, lane: int) -> Point:
        """2D coordinates of a horse in *lane* after *distance* units."""
        return self._geometry.position(self.lap_fraction(distance), lane)

    def curve_factor(self, distance: float) -> float:
        """Local sharpness at *distance*: 1.0 straight, lower is sharper."""
        return self._geometry.curve_factor(self.lap_fraction(distance))

    def is_at_crossing(self, distance: float) -> bool:
        """True on a figure-eight when *distance* is at the self-intersection."""
        if not isinstance(self._geometry, FigureEightGeometry):
            return False
        return self._geometry.is_at_crossing(self.lap_fraction(distance))

    def is_complete(self, distance: float) -> bool:
        return distance >= self._length

    def __repr__(self) -> str:
        return (
            f"Track(name={self.name!r}, shape={self.shape.value}, "
            f"length={self._length:g}, lanes={self._lanes}, condition={self._condition.name})"
        )
