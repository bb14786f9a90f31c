"""Monte Carlo race analytics for the derby engine.

Runs many seeded, silent replications of a race over cloned rosters and
aggregates the outcomes into per-horse win probabilities, fall rates and
mean distances.  The horses passed in are never mutated.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

import numpy as np

from derby_engine.core.horse import Horse
from derby_engine.core.race import MAX_RACE_ROUNDS, RaceManager, TieBreak
from derby_engine.core.track import Track

logger = logging.getLogger(__name__)


def simulate_race_monte_carlo(
    track: Track,
    horses: Sequence[Horse],
    simulations: int,
    base_seed: int = 42,
    max_rounds: int = MAX_RACE_ROUNDS,
    tie_break: TieBreak = TieBreak.ROSTER,
) -> dict[str, Any]:
    """Run a Monte Carlo ensemble of race simulations.

    Each replication uses ``seed = base_seed + i`` so that:
      - Results are fully reproducible given the same ``base_seed``.
      - No global random state is modified.

    Replications run without tick pauses and without confidence
    feedback, so every race starts from the same roster state.  Horses
    occupy lanes in roster order.

    Args:
        track: Track to race on.  Must have at least ``len(horses)`` lanes.
        horses: Roster to clone for every replication.
        simulations: Number of Monte Carlo replications (>= 1).
        base_seed: Starting seed value.  Replication *i* uses
            ``base_seed + i``.
        max_rounds: Round cap per replication.
        tie_break: Tie-break policy for every replication.

    Returns:
        Dictionary with keys:
            winner_probabilities  -- ``{horse_name: float}``
            fall_rates            -- ``{horse_name: float}``
            mean_distance         -- ``{horse_name: float}``
            finish_rates          -- ``{horse_name: float}``
            mean_rounds           -- ``float``

    Raises:
        ValueError: If simulations < 1, the roster is empty or the track
            has fewer lanes than horses.
    """
    if simulations < 1:
        raise ValueError("simulations must be >= 1.")
    if not horses:
        raise ValueError("horses must not be empty.")
    if len(horses) > track.lanes:
        raise ValueError(
            f"{len(horses)} horses do not fit on a {track.lanes}-lane track."
        )

    names: list[str] = [h.name for h in horses]

    # Accumulators
    win_counts: dict[str, int] = defaultdict(int)
    fall_counts: dict[str, int] = defaultdict(int)
    finish_counts: dict[str, int] = defaultdict(int)
    distance_sums: dict[str, float] = defaultdict(float)
    rounds_total: int = 0

    for i in range(simulations):
        seed: int = base_seed + i
        manager = RaceManager(
            track,
            rng=np.random.default_rng(seed),
            tick_interval=0.0,
            max_rounds=max_rounds,
            tie_break=tie_break,
            apply_feedback=False,
        )
        for lane, horse in enumerate(horses):
            manager.add_horse(horse.clone(), lane)

        result = manager.run()
        rounds_total += result.rounds
        if result.winner is not None:
            win_counts[result.winner.name] += 1
        for runner in manager.horses:
            distance_sums[runner.name] += runner.distance
            if runner.fallen:
                fall_counts[runner.name] += 1
            if track.is_complete(runner.distance):
                finish_counts[runner.name] += 1

    # -- Normalise to probabilities -------------------------------------------
    inv: float = 1.0 / simulations

    logger.info(
        "Monte Carlo: %d replications on %s (seeds %d..%d)",
        simulations,
        track.name,
        base_seed,
        base_seed + simulations - 1,
    )
    return {
        "winner_probabilities": {name: win_counts[name] * inv for name in names},
        "fall_rates": {name: fall_counts[name] * inv for name in names},
        "mean_distance": {name: distance_sums[name] * inv for name in names},
        "finish_rates": {name: finish_counts[name] * inv for name in names},
        "mean_rounds": rounds_total * inv,
    }
