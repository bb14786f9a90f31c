"""Track condition model for the derby engine.

A condition is an immutable, named set of environmental factors.  It
scales horse speed, divides fall risk through the grip factor and
supplies the base fall probability for every tick of a race.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Fall-probability bounds
# ---------------------------------------------------------------------------

MIN_FALL_PROBABILITY: float = 0.01
MAX_FALL_PROBABILITY: float = 0.50

_CONFIDENCE_RISK_WEIGHT: float = 0.1
_CURVE_RISK_WEIGHT: float = 0.2


@dataclass(frozen=True)
class TrackCondition:
    """Immutable description of a track surface / weather condition.

    Attributes:
        name: Human-readable label (e.g. "Dry").
        speed_factor: Multiplier applied to every movement increment.
            1.0 = normal, below 1.0 slows horses down.
        grip_factor: Divisor applied to the raw fall probability.
            1.0 = perfect grip, below 1.0 amplifies fall risk.
        fall_probability: Base per-tick probability of a fall.
    """

    name: str
    speed_factor: float
    grip_factor: float
    fall_probability: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Condition name must not be empty.")
        if self.speed_factor <= 0.0:
            raise ValueError("speed_factor must be > 0.0.")
        if self.grip_factor <= 0.0:
            raise ValueError("grip_factor must be > 0.0.")
        if not 0.0 <= self.fall_probability <= 1.0:
            raise ValueError("fall_probability must be between 0.0 and 1.0.")

    def calculate_fall_probability(
        self,
        confidence: float,
        curve_factor: float,
        turn_handling: float,
    ) -> float:
        """Per-tick probability that a horse falls.

        The model is::

            curve_penalty = (1 - curve_factor) * (1 - turn_handling)
            raw           = base + 0.1 * confidence + 0.2 * curve_penalty
            probability   = clamp(raw / grip_factor, 0.01, 0.50)

        Confident horses run faster but less steadily, so confidence adds
        risk.  Poor turn handling on a sharp curve compounds it, and a
        slippery surface amplifies everything through the grip divisor.

        Args:
            confidence: Horse confidence (0.0-1.0).
            curve_factor: Local track curvature (1.0 = straight).
            turn_handling: Horse turn-handling ability (0.0-1.0).

        Returns:
            Fall probability in ``[0.01, 0.50]``.
        """
        curve_penalty: float = (1.0 - curve_factor) * (1.0 - turn_handling)
        raw: float = (
            self.fall_probability
            + _CONFIDENCE_RISK_WEIGHT * confidence
            + _CURVE_RISK_WEIGHT * curve_penalty
        )
        return max(MIN_FALL_PROBABILITY, min(MAX_FALL_PROBABILITY, raw / self.grip_factor))

    def __str__(self) -> str:
        return self.name


# Pre-defined conditions -----------------------------------------------------

DRY = TrackCondition(name="Dry", speed_factor=1.0, grip_factor=1.0, fall_probability=0.05)
MUDDY = TrackCondition(name="Muddy", speed_factor=0.7, grip_factor=0.9, fall_probability=0.10)
ICY = TrackCondition(name="Icy", speed_factor=0.8, grip_factor=0.7, fall_probability=0.15)
WET = TrackCondition(name="Wet", speed_factor=0.85, grip_factor=0.95, fall_probability=0.08)
WINDY = TrackCondition(name="Windy", speed_factor=0.9, grip_factor=1.0, fall_probability=0.07)

ALL_CONDITIONS: tuple[TrackCondition, ...] = (DRY, MUDDY, ICY, WET, WINDY)


def condition_by_name(
    name: str, conditions: Sequence[TrackCondition] = ALL_CONDITIONS
) -> TrackCondition:
    """Return the entry of *conditions* whose name matches *name* (case-insensitive).

    *conditions* defaults to the built-in presets; pass the list from
    :func:`derby_engine.config.load_conditions` to look up configured ones.

    Raises:
        ValueError: If no entry carries that name.
    """
    for condition in conditions:
        if condition.name.lower() == name.lower():
            return condition
    raise ValueError(f"Unknown track condition: {name!r}")
