"""Listener interfaces for race and betting notifications.

Both interfaces are plain base classes with no-op methods, so observers
override only what they need.  Delivery is synchronous: race events
fire from inside the tick loop (on the race worker thread) and betting
events fire from whichever thread called the betting service.
Listeners must not call back into ``RaceManager.start`` / ``stop`` and
should treat the objects they receive as read-only snapshots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from derby_engine.core.bet import Bet
    from derby_engine.core.horse import Horse


class RaceListener:
    """Receives race lifecycle events in order::

        on_start, (on_fallen | on_winner | on_tick)*, on_end
    """

    def on_start(self) -> None:
        pass

    def on_fallen(self, horse: Horse) -> None:
        pass

    def on_winner(self, horse: Horse) -> None:
        pass

    def on_tick(self) -> None:
        pass

    def on_end(self, winner: Horse | None) -> None:
        pass


class BettingListener:
    """Receives betting market events."""

    def on_odds_changed(self, odds: dict[Horse, float]) -> None:
        pass

    def on_wager_placed(self, bet: Bet) -> None:
        pass

    def on_race_settled(self, winner: Horse, total_payout: float) -> None:
        pass

    def on_race_ended(self) -> None:
        pass

    def on_reset(self) -> None:
        pass
