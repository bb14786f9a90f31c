"""Statistics sink contract for the derby engine.

After every completed race the engine emits one :class:`RaceRecord`
holding a :class:`PerformanceRecord` per horse.  Aggregation, export and
reporting belong to whatever consumes the records; the engine only
produces them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Protocol

import pandas as pd


@dataclass(frozen=True)
class PerformanceRecord:
    """One horse's result in one race.

    Attributes:
        horse_name: Name of the horse.
        finish_time: Tick on which the horse crossed the finish line,
            or 0 if it did not finish.
        distance: Distance travelled when the race ended.
        fell: Whether the horse fell.
        confidence_before: Confidence snapshot taken at race start.
        confidence_after: Confidence after post-race feedback.
    """

    horse_name: str
    finish_time: int
    distance: float
    fell: bool
    confidence_before: float
    confidence_after: float

    @property
    def finished(self) -> bool:
        return self.finish_time > 0


@dataclass
class RaceRecord:
    """Summary of a completed race.

    Attributes:
        track_name: Track the race was run on.
        condition: Name of the track condition.
        track_length: Track length.
        duration: Number of ticks the race lasted.
        winner: Winner name, or ``None``.
        performances: One record per horse, in roster order.
    """

    track_name: str
    condition: str
    track_length: float
    duration: int
    winner: str | None
    performances: list[PerformanceRecord] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """Per-horse performances as a DataFrame, one row per horse."""
        rows = [asdict(p) for p in self.performances]
        frame = pd.DataFrame(
            rows,
            columns=[
                "horse_name",
                "finish_time",
                "distance",
                "fell",
                "confidence_before",
                "confidence_after",
            ],
        )
        frame["won"] = frame["horse_name"] == self.winner
        return frame


class StatisticsSink(Protocol):
    """Anything that accepts completed race records."""

    def record_race(self, record: RaceRecord) -> None: ...


class InMemoryStatisticsSink:
    """Collects race records in a list, in completion order."""

    __slots__ = ("records",)

    def __init__(self) -> None:
        self.records: list[RaceRecord] = []

    def record_race(self, record: RaceRecord) -> None:
        self.records.append(record)

    def to_frame(self) -> pd.DataFrame:
        """All performances across all recorded races, tagged by race index."""
        if not self.records:
            return pd.DataFrame()
        frames = []
        for idx, record in enumerate(self.records):
            frame = record.to_frame()
            frame.insert(0, "race", idx)
            frame.insert(1, "track_name", record.track_name)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)
