"""CLI entrypoint for the derby simulation engine."""

from __future__ import annotations

import logging
import sys

from derby_engine import __version__
from derby_engine.config import load_conditions, load_settings
from derby_engine.context import build_context
from derby_engine.core.breed import ARABIAN, CLYDESDALE, THOROUGHBRED, CoatColor
from derby_engine.core.condition import condition_by_name
from derby_engine.core.equipment import Accessory, Equipment, Horseshoes
from derby_engine.core.geometry import TrackShape
from derby_engine.core.track import Track


def main() -> None:
    """Run one race with a wager and print the outcome."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print(f"Derby Simulation Engine v{__version__}")
    print("=" * 56)

    settings = load_settings()
    conditions = load_conditions()
    track = Track(
        "Riverside Eights",
        120.0,
        4,
        shape=TrackShape.FIGURE_EIGHT,
        condition=condition_by_name("Muddy", conditions),
    )
    ctx = build_context(settings, track=track, conditions=conditions)

    # -- Roster ---------------------------------------------------------------
    roster = [
        ctx.create_horse("Thunder", "T", 0.7, breed=THOROUGHBRED),
        ctx.create_horse(
            "Sandstorm",
            "S",
            0.6,
            breed=ARABIAN,
            coat=CoatColor.PALOMINO,
            equipment=Equipment(horseshoes=Horseshoes.TRACTION),
        ),
        ctx.create_horse(
            "Boulder",
            "B",
            0.5,
            breed=CLYDESDALE,
            coat=CoatColor.BLACK,
            equipment=Equipment(accessory=Accessory.BLINDERS),
        ),
    ]
    for lane, horse in enumerate(roster):
        ctx.race.add_horse(horse, lane)

    print(f"\nTrack : {track}")
    print("-" * 56)

    # -- Market ---------------------------------------------------------------
    odds = ctx.betting.open_market()
    print(f"\n  {'Horse':<10}  {'Breed':<14}  {'Odds':>5}")
    print(f"  {'-----':<10}  {'-----':<14}  {'----':>5}")
    for horse, price in odds.items():
        print(f"  {horse.name:<10}  {horse.breed.name:<14}  {price:5.1f}")

    bet = ctx.betting.place_bet(roster[1], 100.0)
    print(f"\nWager : {bet}")
    print(f"Wallet: {ctx.betting.wallet.balance:.2f}")

    # -- Race -----------------------------------------------------------------
    result = ctx.race.run()
    payout = ctx.betting.settle_race()

    print(f"\nWinner: {result.winner.name if result.winner else 'none'} "
          f"after {result.rounds} ticks")
    print(f"Payout: {payout:.2f}")
    print(f"Wallet: {ctx.betting.wallet.balance:.2f}")

    if result.record is not None:
        print()
        print(result.record.to_frame().to_string(index=False))

    print("\nRace complete.")


if __name__ == "__main__":
    sys.exit(main() or 0)
