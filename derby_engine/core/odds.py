"""Odds calculator for the derby engine.

Each horse gets a strength score from its attributes and how well its
breed and kit suit the track::

    score = base_speed * confidence * turn_handling_effect
            * condition_effect * stamina * breed_advantage
            * equipment_advantage

Scores are normalised into win probabilities and inverted into decimal
odds with a small uniform jitter, rounded to one decimal place and
clamped to the market range ``[MIN_ODDS, MAX_ODDS]``.  Stake
concentration then shortens the odds of popular horses.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

import numpy as np
from numpy.random import Generator

from derby_engine.core.equipment import Accessory, Equipment, Horseshoes, Saddle
from derby_engine.core.geometry import TrackShape
from derby_engine.core.horse import Horse
from derby_engine.core.track import Track

# ---------------------------------------------------------------------------
# Market constants
# ---------------------------------------------------------------------------

MIN_ODDS: float = 1.1
MAX_ODDS: float = 50.0
BETTING_PATTERN_WEIGHT: float = 0.3
JITTER_LOW: float = 0.9
JITTER_HIGH: float = 1.1

# Representative curve factor per layout, used instead of the local value.
SHAPE_CURVE_FACTOR: dict[TrackShape, float] = {
    TrackShape.OVAL: 0.8,
    TrackShape.FIGURE_EIGHT: 0.6,
    TrackShape.ZIGZAG: 0.4,
}

BREED_ADVANTAGE: dict[str, float] = {
    "Thoroughbred": 1.2,
    "Quarter Horse": 1.15,
    "Arabian": 1.1,
    "Standardbred": 1.05,
}

# (condition name, breed name) -> additive bonus on the condition effect
BREED_CONDITION_BONUS: dict[tuple[str, str], float] = {
    ("Muddy", "Arabian"): 0.10,
    ("Icy", "Clydesdale"): 0.15,
    ("Windy", "Thoroughbred"): 0.05,
}

CONDITION_SHOE_BONUS: dict[tuple[str, Horseshoes], float] = {
    ("Muddy", Horseshoes.TRACTION): 0.10,
}

CONDITION_ACCESSORY_BONUS: dict[tuple[str, Accessory], float] = {
    ("Windy", Accessory.BLINDERS): 0.05,
}


def _round_odds(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10.0 + 0.5) / 10.0


class OddsCalculator:
    """Turns a roster and a track into a decimal-odds market.

    Attributes:
        min_odds: Lower clamp for every price.
        max_odds: Upper clamp for every price.
        pattern_weight: Strength of the stake-concentration adjustment.
    """

    def __init__(
        self,
        rng: Generator | None = None,
        min_odds: float = MIN_ODDS,
        max_odds: float = MAX_ODDS,
        pattern_weight: float = BETTING_PATTERN_WEIGHT,
    ) -> None:
        if not 1.0 <= min_odds <= max_odds:
            raise ValueError("Odds range must satisfy 1.0 <= min_odds <= max_odds.")
        if not 0.0 <= pattern_weight < 1.0:
            raise ValueError("pattern_weight must be in [0.0, 1.0).")
        self._rng: Generator = rng if rng is not None else np.random.default_rng()
        self.min_odds: float = min_odds
        self.max_odds: float = max_odds
        self.pattern_weight: float = pattern_weight

    def _clamp(self, value: float) -> float:
        return max(self.min_odds, min(self.max_odds, value))

    # -- Scoring ---------------------------------------------------------------

    @staticmethod
    def condition_effect(horse: Horse, track: Track) -> float:
        condition = track.condition.name
        effect = track.condition.speed_factor
        effect += BREED_CONDITION_BONUS.get((condition, horse.breed.name), 0.0)
        effect += CONDITION_SHOE_BONUS.get((condition, horse.equipment.horseshoes), 0.0)
        effect += CONDITION_ACCESSORY_BONUS.get((condition, horse.equipment.accessory), 0.0)
        return effect

    @staticmethod
    def equipment_advantage(equipment: Equipment, shape: TrackShape) -> float:
        advantage = 1.0

        if equipment.saddle is Saddle.RACING:
            advantage *= 1.1
        elif equipment.saddle is Saddle.WESTERN and shape is TrackShape.ZIGZAG:
            advantage *= 1.05

        if equipment.horseshoes is Horseshoes.LIGHTWEIGHT:
            advantage *= 1.08
        elif equipment.horseshoes is Horseshoes.TRACTION and shape in (
            TrackShape.FIGURE_EIGHT,
            TrackShape.ZIGZAG,
        ):
            advantage *= 1.05

        if equipment.accessory is Accessory.BLINDERS:
            advantage *= 1.03
        elif equipment.accessory is Accessory.LUCKY_CHARM:
            advantage *= 1.01

        return advantage

    def score(self, horse: Horse, track: Track) -> float:
        """Non-negative strength score of *horse* on *track*."""
        curve = SHAPE_CURVE_FACTOR[track.shape]
        turn_effect = 1.0 - (1.0 - curve) * (1.0 - horse.turn_handling)
        return (
            horse.base_speed
            * horse.confidence
            * turn_effect
            * self.condition_effect(horse, track)
            * horse.stamina
            * BREED_ADVANTAGE.get(horse.breed.name, 1.0)
            * self.equipment_advantage(horse.equipment, track.shape)
        )

    def win_probabilities(self, horses: Sequence[Horse], track: Track) -> dict[Horse, float]:
        """Normalised scores; uniform when every score is zero."""
        if not horses:
            return {}
        scores = {horse: self.score(horse, track) for horse in horses}
        total = sum(scores.values())
        if total <= 0.0:
            return {horse: 1.0 / len(horses) for horse in horses}
        return {horse: s / total for horse, s in scores.items()}

    # -- Odds ------------------------------------------------------------------

    def base_odds(self, horses: Sequence[Horse], track: Track) -> dict[Horse, float]:
        """Jittered inverse-probability odds, one jitter draw per horse in roster order."""
        odds: dict[Horse, float] = {}
        for horse, probability in self.win_probabilities(horses, track).items():
            jitter = float(self._rng.uniform(JITTER_LOW, JITTER_HIGH))
            raw = self.max_odds if probability <= 0.0 else (1.0 / probability) * jitter
            odds[horse] = self._clamp(_round_odds(raw))
        return odds

    def adjust_for_betting_patterns(
        self,
        base_odds: Mapping[Horse, float],
        stakes: Mapping[Horse, float],
    ) -> dict[Horse, float]:
        """Shorten odds in proportion to each horse's share of total stake.

        Returns a copy of *base_odds* unchanged when nothing is staked.
        """
        total = sum(stakes.get(horse, 0.0) for horse in base_odds)
        if total <= 0.0:
            return dict(base_odds)
        adjusted: dict[Horse, float] = {}
        for horse, price in base_odds.items():
            share = stakes.get(horse, 0.0) / total
            factor = 1.0 - share * self.pattern_weight
            adjusted[horse] = self._clamp(_round_odds(price * factor))
        return adjusted

    def calculate_odds(
        self,
        horses: Sequence[Horse],
        track: Track,
        stakes: Mapping[Horse, float] | None = None,
    ) -> dict[Horse, float]:
        """Full market: base odds followed by the stake adjustment."""
        odds = self.base_odds(horses, track)
        if stakes:
            odds = self.adjust_for_betting_patterns(odds, stakes)
        return odds
