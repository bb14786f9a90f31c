"""Betting and settlement service.

The service keeps one odds market per race.  Typical flow::

    service.open_market()            # race PENDING, odds computed
    service.place_bet(horse, 100.0)  # debit wallet, freeze odds, reprice
    race.run()                       # or start() + join()
    service.settle_race()            # pay winners, close the market

Wagers are validated before anything is mutated; a rejected wager
leaves the wallet, the history and the odds untouched.  Odds are
recomputed after every accepted wager and whenever the race roster or
track has changed since they were last priced.
"""

from __future__ import annotations

import logging
import math
import threading

from derby_engine.core.bet import Bet, BettingHistory
from derby_engine.core.errors import BettingValidationError, RaceLifecycleError
from derby_engine.core.events import BettingListener
from derby_engine.core.horse import Horse
from derby_engine.core.odds import OddsCalculator
from derby_engine.core.race import RaceManager, RaceStatus
from derby_engine.core.wallet import VirtualWallet

logger = logging.getLogger(__name__)


class BettingService:
    """Owns the odds market, the wager ledger and the wallet for one race manager."""

    def __init__(
        self,
        race: RaceManager,
        wallet: VirtualWallet | None = None,
        calculator: OddsCalculator | None = None,
        history: BettingHistory | None = None,
    ) -> None:
        self.race: RaceManager = race
        self.wallet: VirtualWallet = wallet if wallet is not None else VirtualWallet()
        self.calculator: OddsCalculator = calculator if calculator is not None else OddsCalculator()
        self.history: BettingHistory = history if history is not None else BettingHistory()
        self._listeners: list[BettingListener] = []
        self._odds: dict[Horse, float] = {}
        self._priced_at: tuple[int, int] | None = None
        self._market_open: bool = False
        self._lock = threading.RLock()

    # -- Listeners -------------------------------------------------------------

    def add_listener(self, listener: BettingListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: BettingListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, *args: object) -> None:
        for listener in list(self._listeners):
            getattr(listener, event)(*args)

    # -- Market ----------------------------------------------------------------

    @property
    def market_open(self) -> bool:
        return self._market_open

    @property
    def odds(self) -> dict[Horse, float]:
        """Snapshot of the current odds map."""
        return dict(self._odds)

    def odds_for(self, horse: Horse) -> float:
        """Current odds on *horse*, or 0.0 if it is not priced."""
        return self._odds.get(horse, 0.0)

    def potential_payout(self, horse: Horse, amount: float) -> float:
        return amount * self.odds_for(horse)

    def _revision(self) -> tuple[int, int]:
        return (self.race.revision, self.race.track.revision)

    def open_market(self) -> dict[Horse, float]:
        """Price the current roster and start accepting wagers.

        Raises:
            RaceLifecycleError: If the market is already open, the race
                is not PENDING or nobody is entered.
        """
        with self._lock:
            if self._market_open:
                raise RaceLifecycleError("The betting market is already open.")
            if self.race.status is not RaceStatus.PENDING:
                raise RaceLifecycleError("Markets can only open on a pending race.")
            if not self.race.horses:
                raise RaceLifecycleError("Cannot open a market without horses.")
            self._market_open = True
            self.recalculate_odds()
        logger.info(
            "Market opened on %s: %s",
            self.race.track.name,
            ", ".join(f"{h.name} {o:.1f}" for h, o in self._odds.items()),
        )
        return self.odds

    def recalculate_odds(self) -> dict[Horse, float]:
        """Reprice the roster, weighting by stakes on still-open wagers."""
        with self._lock:
            stakes = self.history.stakes_by_horse(unsettled_only=True)
            self._odds = self.calculator.calculate_odds(
                self.race.horses, self.race.track, stakes
            )
            self._priced_at = self._revision()
            snapshot = dict(self._odds)
        self._emit("on_odds_changed", snapshot)
        return snapshot

    def place_bet(self, horse: Horse, amount: float) -> Bet:
        """Stake *amount* on *horse* at the current odds.

        Raises:
            BettingValidationError: Market closed, race not PENDING,
                horse not priced, or a stake that is not a finite
                positive number.
            InsufficientFundsError: Stake exceeds the wallet balance.
        """
        with self._lock:
            if not self._market_open:
                raise BettingValidationError("The betting market is not open.")
            if self.race.status is not RaceStatus.PENDING:
                raise BettingValidationError(
                    f"Cannot bet while the race is {self.race.status.value}."
                )
            if self._priced_at != self._revision():
                logger.debug("Roster or track changed; repricing before the wager")
                self.recalculate_odds()
            if horse not in self._odds:
                raise BettingValidationError(f"{horse.name} is not running in this race.")
            if not math.isfinite(amount) or amount <= 0:
                raise BettingValidationError(
                    f"Bet amount must be a positive number, got {amount!r}."
                )

            self.wallet.withdraw(amount)
            bet = Bet(horse=horse, amount=amount, odds=self._odds[horse])
            self.history.add_bet(bet)
            logger.info("Bet placed: %s", bet)
            self.recalculate_odds()
        self._emit("on_wager_placed", bet)
        return bet

    # -- Settlement ------------------------------------------------------------

    def settle_bet(self, bet: Bet, winner: Horse | None) -> float:
        """Settle a single wager, crediting the wallet on its first settlement only."""
        with self._lock:
            if bet.settled:
                return bet.payout
            payout = bet.settle(winner)
            if payout > 0.0:
                self.wallet.add_funds(payout)
            return payout

    def settle_race(self, winner: Horse | None = None) -> float:
        """Settle every open wager and close the market.

        Args:
            winner: Winning horse; defaults to the race manager's winner.

        Returns:
            Total paid out.

        Raises:
            RaceLifecycleError: If no market is open or no winner is known.
        """
        with self._lock:
            if not self._market_open:
                raise RaceLifecycleError("No open market to settle.")
            if winner is None:
                winner = self.race.winner
            if winner is None:
                raise RaceLifecycleError("Cannot settle before a winner is known.")

            total = 0.0
            for bet in self.history.unsettled_bets:
                total += bet.settle(winner)
            if total > 0.0:
                self.wallet.add_funds(total)
            self._market_open = False
        logger.info("Race settled: winner %s, total payout %.2f", winner.name, total)
        self._emit("on_race_settled", winner, total)
        return total

    def end_market(self) -> None:
        """Close the market without settling; no-op if it is not open."""
        with self._lock:
            if not self._market_open:
                return
            self._market_open = False
        logger.info("Market on %s closed", self.race.track.name)
        self._emit("on_race_ended")

    def reset(self) -> None:
        """Clear history and odds, restore the wallet and close the market."""
        with self._lock:
            self.history.clear()
            self.wallet.reset()
            self._odds.clear()
            self._priced_at = None
            self._market_open = False
        logger.info("Betting service reset; balance %.2f", self.wallet.balance)
        self._emit("on_reset")
