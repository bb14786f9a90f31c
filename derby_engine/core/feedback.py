"""Post-race confidence feedback for the derby engine.

Confidence is the only attribute that persists and evolves across
races.  After each completed race the outcome nudges it multiplicatively:

* the winner gains 10 %,
* every fallen horse loses 5 % (a winner declared by distance included),
* a non-winner that stayed up and covered more than 80 % of the track
  gains 2 %.

Every result is re-clamped to ``[0.0, 1.0]`` by the horse's setter.
"""

from __future__ import annotations

from collections.abc import Iterable

from derby_engine.core.horse import Horse

WINNER_BOOST: float = 1.10
FALL_PENALTY: float = 0.95
NEAR_FINISH_BOOST: float = 1.02
NEAR_FINISH_THRESHOLD: float = 0.8


def apply_confidence_feedback(
    horses: Iterable[Horse],
    winner: Horse | None,
    track_length: float,
) -> dict[str, float]:
    """Update each horse's confidence from the race outcome.

    Args:
        horses: All horses that took part.
        winner: The declared winner, or ``None``.
        track_length: Length of the track raced on (> 0).

    Returns:
        Mapping from horse name to its confidence after the update.
    """
    updated: dict[str, float] = {}
    for horse in horses:
        if horse is winner:
            horse.confidence = horse.confidence * WINNER_BOOST
        if horse.fallen:
            horse.confidence = horse.confidence * FALL_PENALTY
        elif horse is not winner and horse.distance / track_length > NEAR_FINISH_THRESHOLD:
            horse.confidence = horse.confidence * NEAR_FINISH_BOOST
        updated[horse.name] = horse.confidence
    return updated
