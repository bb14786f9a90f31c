"""Tests for race statistics records and the in-memory sink."""

from derby_engine.core.statistics import InMemoryStatisticsSink, PerformanceRecord, RaceRecord


def _sample_record(winner: str = "Alpha") -> RaceRecord:
    return RaceRecord(
        track_name="Test Oval",
        condition="Dry",
        track_length=50.0,
        duration=42,
        winner=winner,
        performances=[
            PerformanceRecord("Alpha", 42, 50.6, False, 0.5, 0.55),
            PerformanceRecord("Bravo", 0, 12.0, True, 0.5, 0.475),
        ],
    )


def test_performance_finished_flag() -> None:
    record = _sample_record()
    assert record.performances[0].finished
    assert not record.performances[1].finished


def test_record_to_frame() -> None:
    frame = _sample_record().to_frame()
    assert list(frame["horse_name"]) == ["Alpha", "Bravo"]
    assert list(frame["won"]) == [True, False]
    assert list(frame["fell"]) == [False, True]
    assert frame["finish_time"].tolist() == [42, 0]


def test_sink_collects_and_concatenates() -> None:
    sink = InMemoryStatisticsSink()
    assert sink.to_frame().empty

    sink.record_race(_sample_record("Alpha"))
    sink.record_race(_sample_record("Bravo"))

    frame = sink.to_frame()
    assert len(sink.records) == 2
    assert len(frame) == 4
    assert frame["race"].tolist() == [0, 0, 1, 1]
    assert frame["won"].sum() == 2
    assert set(frame["track_name"]) == {"Test Oval"}
