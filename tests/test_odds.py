"""Tests for the odds calculator."""

import numpy as np
import pytest

from derby_engine.core.breed import ARABIAN, CLYDESDALE, MUSTANG, THOROUGHBRED
from derby_engine.core.condition import ALL_CONDITIONS, DRY, ICY, MUDDY, WINDY
from derby_engine.core.equipment import Accessory, Equipment, Horseshoes, Saddle
from derby_engine.core.geometry import TrackShape
from derby_engine.core.horse import AptitudeRolls, Horse
from derby_engine.core.odds import MAX_ODDS, MIN_ODDS, OddsCalculator
from derby_engine.core.track import Track

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_ROLLS = AptitudeRolls(turn=0.5, stamina=0.5, luck=0.5)


def _make_horse(name: str, confidence: float = 0.7, **kwargs: object) -> Horse:
    return Horse(name, name[0], confidence, rolls=_ROLLS, **kwargs)


def _sample_roster(rng: np.random.Generator) -> list[Horse]:
    return [
        Horse(f"Horse_{i}", str(i), float(c), rng=rng)
        for i, c in enumerate(rng.uniform(0.05, 1.0, size=6))
    ]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_odds_within_market_bounds() -> None:
    """Every price must lie in [1.1, 50.0] for any shape and condition."""
    rng = np.random.default_rng(11)
    calc = OddsCalculator(rng)
    roster = _sample_roster(rng)
    roster.append(_make_horse("Longshot", confidence=0.01))
    for shape in TrackShape:
        for condition in ALL_CONDITIONS:
            track = Track("Bounds", 100.0, 8, shape=shape, condition=condition)
            for price in calc.calculate_odds(roster, track).values():
                assert MIN_ODDS <= price <= MAX_ODDS, f"{shape} {condition}: {price}"


def test_probabilities_sum_to_one() -> None:
    rng = np.random.default_rng(3)
    calc = OddsCalculator(rng)
    probs = calc.win_probabilities(_sample_roster(rng), Track("Sum", 80.0, 6))
    assert sum(probs.values()) == pytest.approx(1.0)


def test_uniform_probabilities_when_scores_are_zero() -> None:
    calc = OddsCalculator(np.random.default_rng(0))
    roster = [_make_horse(n, confidence=0.0) for n in ("Alpha", "Bravo", "Charlie", "Delta")]
    probs = calc.win_probabilities(roster, Track("Zero", 80.0, 4))
    assert all(p == pytest.approx(0.25) for p in probs.values())


def test_base_odds_apply_jitter_and_rounding() -> None:
    """Two identical horses have p=0.5, so odds land in [1.8, 2.2] at 1 dp."""
    calc = OddsCalculator(np.random.default_rng(9))
    roster = [_make_horse("Alpha"), _make_horse("Bravo")]
    for price in calc.base_odds(roster, Track("Jitter", 80.0, 4)).values():
        assert 1.8 <= price <= 2.2
        assert price == round(price, 1)


def test_betting_pattern_shortens_backed_horse() -> None:
    """Stake on the first horse shortens its odds and leaves the other's alone."""
    calc = OddsCalculator(np.random.default_rng(0))
    a, b = _make_horse("Alpha"), _make_horse("Bravo")

    adjusted = calc.adjust_for_betting_patterns({a: 3.0, b: 5.0}, {a: 100.0})

    assert adjusted[a] < 3.0
    assert adjusted[a] >= MIN_ODDS
    assert adjusted[a] == pytest.approx(2.1)
    assert adjusted[b] == pytest.approx(5.0)


def test_no_stakes_leave_odds_unchanged() -> None:
    calc = OddsCalculator(np.random.default_rng(0))
    a = _make_horse("Alpha")
    assert calc.adjust_for_betting_patterns({a: 4.2}, {}) == {a: 4.2}


def test_adjusted_odds_respect_floor() -> None:
    calc = OddsCalculator(np.random.default_rng(0))
    a = _make_horse("Alpha")
    assert calc.adjust_for_betting_patterns({a: 1.2}, {a: 50.0})[a] == pytest.approx(MIN_ODDS)


def test_condition_synergies() -> None:
    muddy = Track("Mud", 100.0, 4, condition=MUDDY)
    icy = Track("Ice", 100.0, 4, condition=ICY)
    windy = Track("Wind", 100.0, 4, condition=WINDY)

    arabian = _make_horse("Arab", breed=ARABIAN)
    arabian_traction = _make_horse(
        "Grip", breed=ARABIAN, equipment=Equipment(horseshoes=Horseshoes.TRACTION)
    )
    clydesdale = _make_horse("Clyde", breed=CLYDESDALE)
    blinkered = _make_horse(
        "Blink", breed=THOROUGHBRED, equipment=Equipment(accessory=Accessory.BLINDERS)
    )

    assert OddsCalculator.condition_effect(arabian, muddy) == pytest.approx(0.8)
    assert OddsCalculator.condition_effect(arabian_traction, muddy) == pytest.approx(0.9)
    assert OddsCalculator.condition_effect(clydesdale, icy) == pytest.approx(0.95)
    assert OddsCalculator.condition_effect(blinkered, windy) == pytest.approx(1.0)
    assert OddsCalculator.condition_effect(arabian, Track("Dry", 100.0, 4, condition=DRY)) == 1.0


def test_equipment_advantage_by_shape() -> None:
    default = Equipment()
    western_traction = Equipment(saddle=Saddle.WESTERN, horseshoes=Horseshoes.TRACTION)

    assert OddsCalculator.equipment_advantage(default, TrackShape.OVAL) == pytest.approx(1.1)
    assert OddsCalculator.equipment_advantage(western_traction, TrackShape.OVAL) == 1.0
    assert OddsCalculator.equipment_advantage(
        western_traction, TrackShape.ZIGZAG
    ) == pytest.approx(1.05 * 1.05)


def test_stronger_horse_gets_shorter_odds() -> None:
    calc = OddsCalculator(np.random.default_rng(1))
    strong = _make_horse("Strong", confidence=0.95)
    weak = _make_horse("Weak", confidence=0.2, breed=MUSTANG)
    probs = calc.win_probabilities([strong, weak], Track("Gap", 100.0, 4))
    assert probs[strong] > probs[weak]


def test_invalid_market_range_rejected() -> None:
    with pytest.raises(ValueError):
        OddsCalculator(min_odds=5.0, max_odds=2.0)
    with pytest.raises(ValueError):
        OddsCalculator(pattern_weight=1.5)
