"""Tests for the virtual wallet."""

import pytest

from derby_engine.core.errors import DerbyError, InsufficientFundsError
from derby_engine.core.wallet import DEFAULT_BALANCE, VirtualWallet


def test_default_balance() -> None:
    assert VirtualWallet().balance == DEFAULT_BALANCE == 1000.0


def test_add_and_withdraw() -> None:
    wallet = VirtualWallet(100.0)
    assert wallet.add_funds(50.0) == pytest.approx(150.0)
    assert wallet.withdraw(30.0) == pytest.approx(120.0)
    assert wallet.has_sufficient_funds(120.0)
    assert not wallet.has_sufficient_funds(120.01)


def test_overdraw_leaves_balance_untouched() -> None:
    """A debit above the balance must raise and change nothing."""
    wallet = VirtualWallet(100.0)
    with pytest.raises(InsufficientFundsError) as excinfo:
        wallet.withdraw(100.01)
    assert wallet.balance == 100.0
    assert excinfo.value.requested == pytest.approx(100.01)
    assert excinfo.value.available == pytest.approx(100.0)
    assert isinstance(excinfo.value, DerbyError)


def test_withdraw_entire_balance() -> None:
    wallet = VirtualWallet(40.0)
    assert wallet.withdraw(40.0) == 0.0


def test_negative_amounts_rejected() -> None:
    wallet = VirtualWallet()
    with pytest.raises(ValueError):
        wallet.add_funds(-1.0)
    with pytest.raises(ValueError):
        wallet.withdraw(-1.0)
    with pytest.raises(ValueError):
        VirtualWallet(-10.0)
    assert wallet.balance == 1000.0


def test_reset_restores_starting_balance() -> None:
    wallet = VirtualWallet(250.0)
    wallet.withdraw(200.0)
    assert wallet.reset() == 250.0


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_amounts_rejected(amount: float) -> None:
    wallet = VirtualWallet(100.0)
    with pytest.raises(ValueError):
        wallet.withdraw(amount)
    with pytest.raises(ValueError):
        wallet.add_funds(amount)
    with pytest.raises(ValueError):
        VirtualWallet(amount)
    assert wallet.balance == 100.0
