"""Wagers and the wager ledger."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from derby_engine.core.horse import Horse


class BetStatus(Enum):
    OPEN = "open"
    WON = "won"
    LOST = "lost"


@dataclass(eq=False)
class Bet:
    """A stake on one horse at odds frozen when the bet was placed.

    Attributes:
        horse: Horse backed.
        amount: Stake (> 0).
        odds: Decimal odds at placement time (>= 1.0).
        placed_at: UTC timestamp of placement.
        status: Settlement state.
        payout: Amount returned on settlement (0 until settled / if lost).
    """

    horse: Horse
    amount: float
    odds: float
    placed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: BetStatus = BetStatus.OPEN
    payout: float = 0.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.amount) or self.amount <= 0:
            raise ValueError("Bet amount must be finite and > 0.")
        if not math.isfinite(self.odds) or self.odds < 1.0:
            raise ValueError("Bet odds must be >= 1.0.")

    @property
    def settled(self) -> bool:
        return self.status is not BetStatus.OPEN

    @property
    def won(self) -> bool:
        return self.status is BetStatus.WON

    @property
    def potential_payout(self) -> float:
        return self.amount * self.odds

    def settle(self, winner: Horse | None) -> float:
        """Resolve the bet against *winner* and return the payout.

        Settling again returns the stored payout without re-evaluating.
        """
        if self.settled:
            return self.payout
        if winner is not None and winner is self.horse:
            self.status = BetStatus.WON
            self.payout = self.amount * self.odds
        else:
            self.status = BetStatus.LOST
            self.payout = 0.0
        return self.payout

    def __str__(self) -> str:
        state = self.status.value.upper()
        return f"{self.amount:.2f} on {self.horse.name} @ {self.odds:.1f} ({state})"


class BettingHistory:
    """Append-only ledger of wagers with summary queries."""

    __slots__ = ("_bets",)

    def __init__(self) -> None:
        self._bets: list[Bet] = []

    def add_bet(self, bet: Bet) -> None:
        self._bets.append(bet)

    def __len__(self) -> int:
        return len(self._bets)

    def __iter__(self) -> Iterator[Bet]:
        return iter(list(self._bets))

    @property
    def bets(self) -> list[Bet]:
        return list(self._bets)

    @property
    def settled_bets(self) -> list[Bet]:
        return [b for b in self._bets if b.settled]

    @property
    def unsettled_bets(self) -> list[Bet]:
        return [b for b in self._bets if not b.settled]

    @property
    def winning_bets(self) -> list[Bet]:
        return [b for b in self._bets if b.status is BetStatus.WON]

    @property
    def losing_bets(self) -> list[Bet]:
        return [b for b in self._bets if b.status is BetStatus.LOST]

    # -- Aggregates ------------------------------------------------------------

    def total_staked(self) -> float:
        return sum(b.amount for b in self._bets)

    def stake_on(self, horse: Horse) -> float:
        return sum(b.amount for b in self._bets if b.horse is horse)

    def stakes_by_horse(self, unsettled_only: bool = False) -> dict[Horse, float]:
        """Total stake per horse, optionally over open wagers only."""
        bets = self.unsettled_bets if unsettled_only else self._bets
        stakes: dict[Horse, float] = {}
        for bet in bets:
            stakes[bet.horse] = stakes.get(bet.horse, 0.0) + bet.amount
        return stakes

    def bet_count_by_horse(self) -> Counter[Horse]:
        return Counter(b.horse for b in self._bets)

    def win_count_by_horse(self) -> Counter[Horse]:
        return Counter(b.horse for b in self.winning_bets)

    def loss_count_by_horse(self) -> Counter[Horse]:
        return Counter(b.horse for b in self.losing_bets)

    def total_winnings(self) -> float:
        return sum(b.payout for b in self.winning_bets)

    def overall_win_rate(self) -> float:
        """Fraction of settled bets that won; 0.0 with nothing settled."""
        settled = self.settled_bets
        if not settled:
            return 0.0
        return len(self.winning_bets) / len(settled)

    def win_rate_for(self, horse: Horse) -> float:
        """Fraction of settled bets on *horse* that won."""
        settled = [b for b in self.settled_bets if b.horse is horse]
        if not settled:
            return 0.0
        return sum(1 for b in settled if b.won) / len(settled)

    def clear(self) -> None:
        self._bets.clear()
