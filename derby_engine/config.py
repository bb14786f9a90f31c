"""Configuration loader for the derby engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from derby_engine.core.condition import TrackCondition
from derby_engine.core.odds import BETTING_PATTERN_WEIGHT, MAX_ODDS, MIN_ODDS
from derby_engine.core.race import DEFAULT_TICK_INTERVAL, MAX_RACE_ROUNDS, TieBreak
from derby_engine.core.wallet import DEFAULT_BALANCE

logger = logging.getLogger(__name__)

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
SETTINGS_PATH: Path = DATA_DIR / "settings.yaml"
CONDITIONS_PATH: Path = DATA_DIR / "conditions.yaml"

_CONDITION_FIELDS: tuple[str, ...] = (
    "name",
    "speed_factor",
    "grip_factor",
    "fall_probability",
)


@dataclass(frozen=True)
class SimulationSettings:
    """Tunable knobs for one racing context.

    Attributes:
        seed: Seed for ``numpy.random.default_rng``; ``None`` draws OS
            entropy.
        tick_interval: Seconds between race ticks (0 disables pauses).
        max_rounds: Round cap per race.
        initial_balance: Starting wallet balance.
        min_odds: Market lower bound.
        max_odds: Market upper bound.
        betting_pattern_weight: Stake-concentration coefficient.
        tie_break: Same-tick tie-break policy.
    """

    seed: int | None = None
    tick_interval: float = DEFAULT_TICK_INTERVAL
    max_rounds: int = MAX_RACE_ROUNDS
    initial_balance: float = DEFAULT_BALANCE
    min_odds: float = MIN_ODDS
    max_odds: float = MAX_ODDS
    betting_pattern_weight: float = BETTING_PATTERN_WEIGHT
    tie_break: TieBreak = TieBreak.ROSTER

    def __post_init__(self) -> None:
        if self.tick_interval < 0.0:
            raise ValueError("tick_interval must be >= 0.")
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be >= 1.")
        if self.initial_balance < 0.0:
            raise ValueError("initial_balance must be >= 0.")
        if not 1.0 <= self.min_odds <= self.max_odds:
            raise ValueError("Odds range must satisfy 1.0 <= min_odds <= max_odds.")
        if not 0.0 <= self.betting_pattern_weight < 1.0:
            raise ValueError("betting_pattern_weight must be in [0, 1).")


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data or {}


def load_settings(path: Path | None = None) -> SimulationSettings:
    """Load simulation settings from a YAML file.

    Keys absent from the file keep their defaults.

    Args:
        path: Optional override for the settings file path.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a key is unknown or a value has the wrong type
            or is out of range.
    """
    settings_path = path or SETTINGS_PATH
    raw: dict = _read_yaml(settings_path).get("simulation", {})

    known = set(SimulationSettings.__dataclass_fields__)
    for key in raw:
        if key not in known:
            raise ValueError(f"Unknown simulation setting '{key}'")

    kwargs: dict = {}
    for key, val in raw.items():
        if key == "seed":
            if val is not None and (isinstance(val, bool) or not isinstance(val, int)):
                raise ValueError(f"'seed' must be an integer or null, got {val!r}")
            kwargs[key] = val
        elif key == "tie_break":
            try:
                kwargs[key] = TieBreak(str(val).lower())
            except ValueError:
                raise ValueError(
                    f"'tie_break' must be one of "
                    f"{[t.value for t in TieBreak]}, got {val!r}"
                ) from None
        elif key == "max_rounds":
            if isinstance(val, bool) or not isinstance(val, int):
                raise ValueError(f"'max_rounds' must be an integer, got {val!r}")
            kwargs[key] = val
        else:
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"'{key}' must be numeric, got {type(val).__name__}"
                )
            kwargs[key] = float(val)

    settings = SimulationSettings(**kwargs)
    logger.debug("Loaded settings from %s: %s", settings_path, settings)
    return settings


def load_conditions(path: Path | None = None) -> list[TrackCondition]:
    """Load the track-condition presets from a YAML file.

    Each entry is validated and converted into a :class:`TrackCondition`.

    Args:
        path: Optional override for the conditions file path.

    Returns:
        List of :class:`TrackCondition` objects in file order.

    Raises:
        FileNotFoundError: If the conditions file does not exist.
        ValueError: If any entry is missing fields or has out-of-range
            values.
    """
    conditions_path = path or CONDITIONS_PATH
    entries: list[dict] = _read_yaml(conditions_path).get("conditions", [])
    conditions: list[TrackCondition] = []

    for idx, entry in enumerate(entries):
        # --- Validate required fields ---
        for field in _CONDITION_FIELDS:
            if field not in entry:
                raise ValueError(
                    f"Condition entry {idx} ({entry.get('name', '<unknown>')}) "
                    f"is missing required field '{field}'"
                )

        for field in _CONDITION_FIELDS[1:]:
            val = entry[field]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Condition entry {idx} ({entry['name']}): "
                    f"'{field}' must be numeric, got {type(val).__name__}"
                )

        # --- Validate ranges ---
        for field in ("speed_factor", "grip_factor"):
            if not 0.0 < float(entry[field]) <= 2.0:
                raise ValueError(
                    f"Condition entry {idx} ({entry['name']}): "
                    f"'{field}' must be in (0, 2], got {entry[field]}"
                )
        if not 0.0 <= float(entry["fall_probability"]) <= 1.0:
            raise ValueError(
                f"Condition entry {idx} ({entry['name']}): "
                f"'fall_probability' must be in [0, 1], got {entry['fall_probability']}"
            )

        conditions.append(
            TrackCondition(
                name=str(entry["name"]),
                speed_factor=float(entry["speed_factor"]),
                grip_factor=float(entry["grip_factor"]),
                fall_probability=float(entry["fall_probability"]),
            )
        )

    return conditions
