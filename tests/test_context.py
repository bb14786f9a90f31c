"""Tests for context wiring and the end-to-end race/betting flow."""

import pytest

from derby_engine.config import SimulationSettings, load_conditions
from derby_engine.context import build_context
from derby_engine.core.condition import DRY, ICY, TrackCondition
from derby_engine.core.race import RaceStatus, TieBreak


def _settings(seed: int = 17) -> SimulationSettings:
    return SimulationSettings(seed=seed, tick_interval=0.0, tie_break=TieBreak.LANE)


def test_context_wires_settings() -> None:
    ctx = build_context(_settings())
    assert ctx.race.tick_interval == 0.0
    assert ctx.race.tie_break is TieBreak.LANE
    assert ctx.betting.race is ctx.race
    assert ctx.betting.wallet.balance == 1000.0
    assert ctx.race.status is RaceStatus.PENDING


def test_contexts_are_independent() -> None:
    a = build_context(_settings())
    b = build_context(_settings())
    a.race.add_horse(a.create_horse("Alpha", "A", 0.7), 0)
    assert b.race.horses == []


def test_same_seed_reproduces_full_session() -> None:
    """Horse creation, odds jitter and the race all draw from the context seed."""
    sessions = []
    for _ in range(2):
        ctx = build_context(_settings(seed=99))
        horses = [ctx.create_horse(n, n[0], 0.7) for n in ("Alpha", "Bravo", "Charlie")]
        for lane, horse in enumerate(horses):
            ctx.race.add_horse(horse, lane)
        odds = ctx.betting.open_market()
        ctx.betting.place_bet(horses[0], 100.0)
        result = ctx.race.run()
        payout = ctx.betting.settle_race()
        sessions.append(
            (
                [odds[h] for h in horses],
                result.winner.name,
                result.rounds,
                payout,
                ctx.betting.wallet.balance,
            )
        )
    assert sessions[0] == sessions[1]


def test_completed_race_reaches_statistics_sink() -> None:
    ctx = build_context(_settings())
    horse = ctx.create_horse("Solo", "S", 0.9)
    ctx.race.add_horse(horse, 0)
    result = ctx.race.run()
    assert ctx.statistics.records == [result.record]
    assert ctx.statistics.to_frame()["horse_name"].tolist() == ["Solo"]
    assert result.record.performances[0].confidence_after == pytest.approx(horse.confidence)


def test_context_serves_configured_conditions() -> None:
    ctx = build_context(_settings())
    assert ctx.conditions == load_conditions()
    assert ctx.condition("icy") == ICY

    sandstorm = TrackCondition("Sandstorm", 0.6, 0.8, 0.2)
    custom = build_context(_settings(), conditions=[DRY, sandstorm])
    assert custom.condition("Sandstorm") is sandstorm
    with pytest.raises(ValueError):
        custom.condition("Icy")
