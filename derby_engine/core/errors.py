"""Exception hierarchy for the derby engine.

Validation errors are raised before any state is touched, resource
errors leave the wallet unchanged, and lifecycle errors signal a
programming mistake in the caller (e.g. starting a race twice).
"""


class DerbyError(Exception):
    """Base class for all engine-specific errors."""


class BettingValidationError(DerbyError, ValueError):
    """Invalid stake, unknown horse, or betting in the wrong race phase."""


class InsufficientFundsError(DerbyError):
    """A wallet debit would take the balance below zero."""

    def __init__(self, requested: float, available: float) -> None:
        super().__init__(
            f"Insufficient funds: requested {requested:.2f}, available {available:.2f}"
        )
        self.requested = requested
        self.available = available


class RaceLifecycleError(DerbyError, RuntimeError):
    """An operation was attempted in a race or market state that forbids it."""
