"""Tick-based race simulator for the derby engine.

A :class:`RaceManager` owns one track, a roster of horses in lanes and
the race lifecycle::

    PENDING --start()--> IN_PROGRESS --(finish / cap / stop)--> COMPLETED
    COMPLETED --reset()--> PENDING

Per tick, for every horse that is still standing (in tie-break order):

    1. Read the local curve factor at the horse's distance.
    2. Draw against the fall probability; on a hit the horse falls for
       the rest of the race.
    3. Otherwise draw against the horse's confidence; on a hit the horse
       advances and its 2D position is recomputed, else it holds.
    4. The first horse whose distance reaches the track length becomes
       the winner.  Same-tick ties go to whichever horse the
       :class:`TieBreak` policy visits first.

The race ends when a winner exists, every horse has fallen, the round
cap is reached or a stop is requested.  Without a winner (cap / all
fallen / aborted tick) the horse with the greatest distance is declared
winner, again resolving ties by tie-break order.

All randomness comes from a single injected ``numpy.random.Generator``
so a seeded race is fully reproducible.  ``start()`` runs the loop on a
background worker and ``run()`` runs it on the calling thread; both
share the same code path.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.random import Generator

from derby_engine.core.errors import RaceLifecycleError
from derby_engine.core.events import RaceListener
from derby_engine.core.feedback import apply_confidence_feedback
from derby_engine.core.horse import Horse
from derby_engine.core.statistics import PerformanceRecord, RaceRecord, StatisticsSink
from derby_engine.core.track import Track

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_RACE_ROUNDS: int = 1000
DEFAULT_TICK_INTERVAL: float = 0.05  # seconds between ticks
CROSSING_SPEED_FACTOR: float = 0.7  # figure-eight crossing, one tick only


class RaceStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TieBreak(Enum):
    """Order in which horses are visited each tick.

    Whoever is visited first wins a same-tick finish, and wins a
    distance tie when the winner is decided post hoc.
    """

    ROSTER = "roster"  # order horses were entered
    LANE = "lane"  # ascending lane index

    def order(self, entries: list[RaceEntry]) -> list[RaceEntry]:
        if self is TieBreak.LANE:
            return sorted(entries, key=lambda e: e.lane)
        return list(entries)


@dataclass(frozen=True)
class RaceEntry:
    """A horse entered in a specific lane."""

    horse: Horse
    lane: int


@dataclass
class RaceResult:
    """Outcome of one race.

    Attributes:
        winner: Declared winner, or ``None`` if the race was stopped
            before anyone crossed the line.
        rounds: Number of ticks executed.
        decided_by_distance: True if the winner was chosen post hoc by
            greatest distance rather than by crossing the line.
        cancelled: True if the race ended because of a stop request.
        error: Exception that aborted the tick loop, if any.
        record: Statistics record; ``None`` for cancelled races.
    """

    winner: Horse | None
    rounds: int
    decided_by_distance: bool = False
    cancelled: bool = False
    error: Exception | None = None
    record: RaceRecord | None = None


# ---------------------------------------------------------------------------
# Race manager
# ---------------------------------------------------------------------------


class RaceManager:
    """Runs races of a roster over a track.

    The tick loop is the sole mutator of per-race horse state while the
    race is IN_PROGRESS.  Roster and track edits are only accepted while
    PENDING.  :attr:`revision` increases on every roster / track swap so
    the odds calculator can tell when its numbers are stale.
    """

    def __init__(
        self,
        track: Track,
        rng: Generator | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        max_rounds: int = MAX_RACE_ROUNDS,
        tie_break: TieBreak = TieBreak.ROSTER,
        apply_feedback: bool = True,
    ) -> None:
        """Initialise a manager in the PENDING state.

        Args:
            track: Track to race on.
            rng: Generator for every fall / advance draw.  ``None`` uses
                OS entropy.
            tick_interval: Pause between ticks in seconds; 0 disables it.
            max_rounds: Hard cap on ticks per race (>= 1).
            tie_break: Iteration-order policy for same-tick ties.
            apply_feedback: Whether to update confidences after a race.

        Raises:
            ValueError: If *tick_interval* < 0 or *max_rounds* < 1.
        """
        if tick_interval < 0.0:
            raise ValueError("tick_interval must be >= 0.")
        if max_rounds < 1:
            raise ValueError("max_rounds must be >= 1.")
        self._track: Track = track
        self._rng: Generator = rng if rng is not None else np.random.default_rng()
        self.tick_interval: float = tick_interval
        self.max_rounds: int = max_rounds
        self.tie_break: TieBreak = tie_break
        self.apply_feedback: bool = apply_feedback
        self.revision: int = 0

        self._entries: list[RaceEntry] = []
        self._listeners: list[RaceListener] = []
        self._sinks: list[StatisticsSink] = []

        self._status: RaceStatus = RaceStatus.PENDING
        self._status_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future[RaceResult] | None = None

        self._winner: Horse | None = None
        self._finish_ticks: dict[str, int] = {}
        self._confidence_before: dict[str, float] = {}
        self._last_result: RaceResult | None = None

    # -- Roster ---------------------------------------------------------------

    def _require_pending(self, action: str) -> None:
        if self._status is not RaceStatus.PENDING:
            raise RaceLifecycleError(
                f"Cannot {action} while the race is {self._status.value}."
            )

    def add_horse(self, horse: Horse, lane: int) -> None:
        """Enter *horse* in *lane*.

        Raises:
            RaceLifecycleError: If the race is not PENDING.
            ValueError: If the lane does not exist or is taken, or the
                horse is already entered.
        """
        self._require_pending("change the roster")
        if not 0 <= lane < self._track.lanes:
            raise ValueError(
                f"Lane {lane} does not exist on a {self._track.lanes}-lane track."
            )
        for entry in self._entries:
            if entry.lane == lane:
                raise ValueError(f"Lane {lane} is already occupied by {entry.horse.name}.")
            if entry.horse is horse or entry.horse.name == horse.name:
                raise ValueError(f"Horse {horse.name!r} is already entered.")
        self._entries.append(RaceEntry(horse=horse, lane=lane))
        self.revision += 1

    def remove_horse(self, horse: Horse) -> bool:
        """Withdraw *horse*; returns whether it was entered."""
        self._require_pending("change the roster")
        for idx, entry in enumerate(self._entries):
            if entry.horse is horse:
                del self._entries[idx]
                self.revision += 1
                return True
        return False

    @property
    def horses(self) -> list[Horse]:
        """Entered horses in roster order."""
        return [e.horse for e in self._entries]

    @property
    def entries(self) -> list[RaceEntry]:
        return list(self._entries)

    def lane_of(self, horse: Horse) -> int:
        """Lane of *horse*, or -1 if it is not entered."""
        for entry in self._entries:
            if entry.horse is horse:
                return entry.lane
        return -1

    @property
    def track(self) -> Track:
        return self._track

    @track.setter
    def track(self, track: Track) -> None:
        self._require_pending("change the track")
        for entry in self._entries:
            if entry.lane >= track.lanes:
                raise ValueError(
                    f"{entry.horse.name} is in lane {entry.lane}, which "
                    f"{track.name!r} does not have."
                )
        self._track = track
        self.revision += 1

    # -- Listeners & sinks -----------------------------------------------------

    def add_listener(self, listener: RaceListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: RaceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_statistics_sink(self, sink: StatisticsSink) -> None:
        self._sinks.append(sink)

    # -- State -----------------------------------------------------------------

    @property
    def status(self) -> RaceStatus:
        return self._status

    @property
    def winner(self) -> Horse | None:
        return self._winner

    @property
    def confidence_before(self) -> dict[str, float]:
        """Confidence snapshot taken when the current race started."""
        return dict(self._confidence_before)

    @property
    def last_result(self) -> RaceResult | None:
        return self._last_result

    # -- Lifecycle ---------------------------------------------------------------

    def start(self) -> Future[RaceResult]:
        """Start the race on a background worker.

        Returns:
            A future resolving to the :class:`RaceResult`; see also
            :meth:`join`.

        Raises:
            RaceLifecycleError: If the race is not PENDING or the
                roster is empty.
        """
        self._begin()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="race")
        self._future = self._executor.submit(self._run_loop)
        return self._future

    def run(self) -> RaceResult:
        """Run a whole race on the calling thread and return its result."""
        self._begin()
        self._future = None
        return self._run_loop()

    def stop(self) -> bool:
        """Request cooperative cancellation.

        The loop polls the request at tick boundaries, so one more tick
        may still execute.  Returns False if no race is running.
        """
        if self._status is not RaceStatus.IN_PROGRESS:
            return False
        logger.info("Stop requested for race on %s", self._track.name)
        self._stop_event.set()
        return True

    def join(self, timeout: float | None = None) -> RaceResult | None:
        """Wait for the background race (if any) and return the last result."""
        if self._future is not None:
            return self._future.result(timeout=timeout)
        return self._last_result

    def reset(self) -> None:
        """Return a COMPLETED race to PENDING so it can be run again.

        Raises:
            RaceLifecycleError: If a race is in progress.
        """
        with self._status_lock:
            if self._status is RaceStatus.IN_PROGRESS:
                raise RaceLifecycleError("Cannot reset while a race is in progress.")
            self._status = RaceStatus.PENDING
        self._winner = None
        self._finish_ticks.clear()
        self._stop_event.clear()

    def close(self) -> None:
        """Stop any running race and release the worker thread."""
        self.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> RaceManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Internals -------------------------------------------------------------------

    def _emit(self, event: str, *args: object) -> None:
        for listener in list(self._listeners):
            getattr(listener, event)(*args)

    def _begin(self) -> None:
        with self._status_lock:
            if self._status is RaceStatus.IN_PROGRESS:
                raise RaceLifecycleError("A race is already in progress.")
            if self._status is RaceStatus.COMPLETED:
                raise RaceLifecycleError("Race already completed; call reset() first.")
            if not self._entries:
                raise RaceLifecycleError("Cannot start a race without horses.")
            for entry in self._entries:
                if entry.lane >= self._track.lanes:
                    raise RaceLifecycleError(
                        f"{entry.horse.name} is in lane {entry.lane}, but "
                        f"{self._track.name!r} now has {self._track.lanes} lanes."
                    )
            self._status = RaceStatus.IN_PROGRESS
            self._track.lock()

        self._stop_event.clear()
        self._winner = None
        self._finish_ticks = {}
        self._confidence_before = {e.horse.name: e.horse.confidence for e in self._entries}
        for entry in self._entries:
            entry.horse.reset_for_race()

        logger.info(
            "Race started on %s (%s, %s) with %d horses",
            self._track.name,
            self._track.shape.value,
            self._track.condition.name,
            len(self._entries),
        )
        self._emit("on_start")

    def _run_loop(self) -> RaceResult:
        order = self.tie_break.order(self._entries)
        rounds = 0
        cancelled = False
        error: Exception | None = None

        try:
            while rounds < self.max_rounds:
                if self._stop_event.is_set():
                    cancelled = True
                    break
                rounds += 1
                self._tick(order, rounds)
                if self._winner is not None or all(e.horse.fallen for e in order):
                    break
                if self.tick_interval > 0.0:
                    self._stop_event.wait(self.tick_interval)
        except Exception as exc:
            logger.exception("Race on %s aborted on tick %d", self._track.name, rounds)
            error = exc

        try:
            return self._finish(order, rounds, cancelled, error)
        except BaseException:
            if self._status is RaceStatus.IN_PROGRESS:
                self._complete()
            raise

    def _complete(self) -> None:
        with self._status_lock:
            self._status = RaceStatus.COMPLETED
        self._track.unlock()

    def _tick(self, order: list[RaceEntry], tick: int) -> None:
        track = self._track
        condition = track.condition

        for entry in order:
            horse = entry.horse
            if horse.fallen:
                continue

            curve: float = track.curve_factor(horse.distance)
            fall_prob: float = condition.calculate_fall_probability(
                horse.confidence, curve, horse.turn_handling
            )
            if self._rng.random() < fall_prob:
                horse.fall()
                logger.debug("%s fell at %.1f on tick %d", horse.name, horse.distance, tick)
                self._emit("on_fallen", horse)
                continue

            if self._rng.random() < horse.confidence:
                modifier = CROSSING_SPEED_FACTOR if track.is_at_crossing(horse.distance) else 1.0
                progress = min(1.0, horse.distance / track.length)
                horse.advance(condition.speed_factor, curve, progress, modifier)
                horse.set_position(*track.position_at(horse.distance, entry.lane))

            if track.is_complete(horse.distance):
                self._finish_ticks.setdefault(horse.name, tick)
                if self._winner is None:
                    self._winner = horse
                    logger.debug("%s crossed the line on tick %d", horse.name, tick)
                    self._emit("on_winner", horse)

        self._emit("on_tick")

    def _finish(
        self,
        order: list[RaceEntry],
        rounds: int,
        cancelled: bool,
        error: Exception | None,
    ) -> RaceResult:
        decided_by_distance = False
        if self._winner is None and not cancelled:
            if rounds >= self.max_rounds:
                logger.warning(
                    "Race on %s hit the %d-round cap without a finisher",
                    self._track.name,
                    self.max_rounds,
                )
            self._winner = _furthest(order)
            decided_by_distance = True
            if self._winner is not None:
                self._emit("on_winner", self._winner)

        winner = self._winner
        record: RaceRecord | None = None
        if not cancelled:
            if self.apply_feedback:
                apply_confidence_feedback(self.horses, winner, self._track.length)
            record = self._build_record(rounds)
            for sink in self._sinks:
                sink.record_race(record)

        result = RaceResult(
            winner=winner,
            rounds=rounds,
            decided_by_distance=decided_by_distance,
            cancelled=cancelled,
            error=error,
            record=record,
        )
        self._last_result = result
        # reset() and start() stay refused until the result is stored
        self._complete()

        logger.info(
            "Race on %s finished after %d ticks; winner: %s",
            self._track.name,
            rounds,
            winner.name if winner is not None else "none",
        )
        self._emit("on_end", winner)
        return result

    def _build_record(self, rounds: int) -> RaceRecord:
        performances = [
            PerformanceRecord(
                horse_name=horse.name,
                finish_time=self._finish_ticks.get(horse.name, 0),
                distance=horse.distance,
                fell=horse.fallen,
                confidence_before=self._confidence_before.get(horse.name, horse.confidence),
                confidence_after=horse.confidence,
            )
            for horse in self.horses
        ]
        return RaceRecord(
            track_name=self._track.name,
            condition=self._track.condition.name,
            track_length=self._track.length,
            duration=rounds,
            winner=self._winner.name if self._winner is not None else None,
            performances=performances,
        )


def _furthest(order: list[RaceEntry]) -> Horse | None:
    """Horse with the strictly greatest distance; earlier entries win ties."""
    best: Horse | None = None
    for entry in order:
        if best is None or entry.horse.distance > best.distance:
            best = entry.horse
    return best
