"""Explicit wiring of the engine's collaborators.

A :class:`RacingContext` is built once and handed to whatever needs the
race manager, the betting service or the shared generator.  Tests build
a fresh context each time.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.random import Generator

from derby_engine.config import SimulationSettings, load_conditions
from derby_engine.core.bet import BettingHistory
from derby_engine.core.betting import BettingService
from derby_engine.core.breed import THOROUGHBRED, CoatColor, HorseBreed
from derby_engine.core.condition import TrackCondition, condition_by_name
from derby_engine.core.equipment import Equipment
from derby_engine.core.horse import Horse
from derby_engine.core.odds import OddsCalculator
from derby_engine.core.race import RaceManager
from derby_engine.core.statistics import InMemoryStatisticsSink
from derby_engine.core.track import Track
from derby_engine.core.wallet import VirtualWallet

DEFAULT_TRACK_NAME: str = "Derby Downs"
DEFAULT_TRACK_LENGTH: float = 100.0
DEFAULT_TRACK_LANES: int = 6


@dataclass
class RacingContext:
    """Everything one racing session shares.

    Attributes:
        settings: Settings the context was built from.
        rng: The single generator feeding horse creation, the race loop
            and odds jitter.
        race: Race manager.
        betting: Betting service bound to *race*.
        statistics: Sink receiving a record per completed race.
        conditions: Track-condition presets available to the session.
    """

    settings: SimulationSettings
    rng: Generator
    race: RaceManager
    betting: BettingService
    statistics: InMemoryStatisticsSink
    conditions: list[TrackCondition]

    def condition(self, name: str) -> TrackCondition:
        """Look up one of the session's condition presets by name."""
        return condition_by_name(name, self.conditions)

    def create_horse(
        self,
        name: str,
        symbol: str,
        confidence: float,
        breed: HorseBreed = THOROUGHBRED,
        coat: CoatColor = CoatColor.BAY,
        equipment: Equipment | None = None,
    ) -> Horse:
        """Create a horse whose aptitude rolls come from the context generator."""
        return Horse(
            name,
            symbol,
            confidence,
            breed=breed,
            coat=coat,
            equipment=equipment,
            rng=self.rng,
        )


def build_context(
    settings: SimulationSettings | None = None,
    track: Track | None = None,
    conditions: list[TrackCondition] | None = None,
) -> RacingContext:
    """Construct a fully wired :class:`RacingContext`.

    Args:
        settings: Settings to use; defaults to :class:`SimulationSettings`().
        track: Initial track; defaults to a dry oval.
        conditions: Condition presets; defaults to the bundled
            ``conditions.yaml``.
    """
    settings = settings or SimulationSettings()
    if conditions is None:
        conditions = load_conditions()
    rng = np.random.default_rng(settings.seed)
    if track is None:
        track = Track(DEFAULT_TRACK_NAME, DEFAULT_TRACK_LENGTH, DEFAULT_TRACK_LANES)

    statistics = InMemoryStatisticsSink()
    race = RaceManager(
        track,
        rng=rng,
        tick_interval=settings.tick_interval,
        max_rounds=settings.max_rounds,
        tie_break=settings.tie_break,
    )
    race.add_statistics_sink(statistics)

    betting = BettingService(
        race,
        wallet=VirtualWallet(settings.initial_balance),
        calculator=OddsCalculator(
            rng,
            min_odds=settings.min_odds,
            max_odds=settings.max_odds,
            pattern_weight=settings.betting_pattern_weight,
        ),
        history=BettingHistory(),
    )
    return RacingContext(
        settings=settings,
        rng=rng,
        race=race,
        betting=betting,
        statistics=statistics,
        conditions=list(conditions),
    )
