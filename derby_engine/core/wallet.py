"""Virtual wallet: the balance ledger stakes are debited from."""

from __future__ import annotations

import math
import threading

from derby_engine.core.errors import InsufficientFundsError

DEFAULT_BALANCE: float = 1000.0


class VirtualWallet:
    """A play-money balance.

    Debits are atomic: a failed withdrawal leaves the balance untouched.
    """

    __slots__ = ("initial_balance", "_balance", "_lock")

    def __init__(self, initial_balance: float = DEFAULT_BALANCE) -> None:
        if not math.isfinite(initial_balance) or initial_balance < 0:
            raise ValueError("initial_balance must be a finite amount >= 0.")
        self.initial_balance: float = float(initial_balance)
        self._balance: float = self.initial_balance
        self._lock = threading.Lock()

    @property
    def balance(self) -> float:
        return self._balance

    def add_funds(self, amount: float) -> float:
        """Credit *amount* and return the new balance."""
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"Cannot add {amount!r}; amount must be finite and >= 0.")
        with self._lock:
            self._balance += amount
            return self._balance

    def withdraw(self, amount: float) -> float:
        """Debit *amount* and return the new balance.

        Raises:
            ValueError: If *amount* is negative or not finite.
            InsufficientFundsError: If *amount* exceeds the balance.
        """
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"Cannot withdraw {amount!r}; amount must be finite and >= 0.")
        with self._lock:
            if amount > self._balance:
                raise InsufficientFundsError(amount, self._balance)
            self._balance -= amount
            return self._balance

    def has_sufficient_funds(self, amount: float) -> bool:
        return self._balance >= amount

    def reset(self) -> float:
        with self._lock:
            self._balance = self.initial_balance
            return self._balance

    def __repr__(self) -> str:
        return f"VirtualWallet(balance={self._balance:.2f})"
