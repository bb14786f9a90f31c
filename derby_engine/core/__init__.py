"""Core simulation modules for the derby engine."""

from derby_engine.core.bet import Bet, BettingHistory, BetStatus
from derby_engine.core.betting import BettingService
from derby_engine.core.breed import (
    ALL_BREEDS,
    APPALOOSA,
    ARABIAN,
    CLYDESDALE,
    MUSTANG,
    QUARTER_HORSE,
    STANDARDBRED,
    THOROUGHBRED,
    CoatColor,
    HorseBreed,
    breed_by_name,
)
from derby_engine.core.condition import (
    ALL_CONDITIONS,
    DRY,
    ICY,
    MUDDY,
    WET,
    WINDY,
    TrackCondition,
    condition_by_name,
)
from derby_engine.core.equipment import Accessory, Equipment, Horseshoes, Saddle
from derby_engine.core.errors import (
    BettingValidationError,
    DerbyError,
    InsufficientFundsError,
    RaceLifecycleError,
)
from derby_engine.core.events import BettingListener, RaceListener
from derby_engine.core.feedback import apply_confidence_feedback
from derby_engine.core.geometry import TrackShape
from derby_engine.core.horse import AptitudeRolls, Horse
from derby_engine.core.monte_carlo import simulate_race_monte_carlo
from derby_engine.core.odds import MAX_ODDS, MIN_ODDS, OddsCalculator
from derby_engine.core.race import RaceManager, RaceResult, RaceStatus, TieBreak
from derby_engine.core.statistics import (
    InMemoryStatisticsSink,
    PerformanceRecord,
    RaceRecord,
    StatisticsSink,
)
from derby_engine.core.track import Track
from derby_engine.core.wallet import VirtualWallet

__all__ = [
    "ALL_BREEDS",
    "ALL_CONDITIONS",
    "APPALOOSA",
    "ARABIAN",
    "Accessory",
    "AptitudeRolls",
    "Bet",
    "BetStatus",
    "BettingHistory",
    "BettingListener",
    "BettingService",
    "BettingValidationError",
    "CLYDESDALE",
    "CoatColor",
    "DRY",
    "DerbyError",
    "Equipment",
    "Horse",
    "HorseBreed",
    "Horseshoes",
    "ICY",
    "InMemoryStatisticsSink",
    "InsufficientFundsError",
    "MAX_ODDS",
    "MIN_ODDS",
    "MUDDY",
    "MUSTANG",
    "OddsCalculator",
    "PerformanceRecord",
    "QUARTER_HORSE",
    "RaceLifecycleError",
    "RaceListener",
    "RaceManager",
    "RaceRecord",
    "RaceResult",
    "RaceStatus",
    "STANDARDBRED",
    "Saddle",
    "StatisticsSink",
    "THOROUGHBRED",
    "TieBreak",
    "Track",
    "TrackCondition",
    "TrackShape",
    "VirtualWallet",
    "WET",
    "WINDY",
    "apply_confidence_feedback",
    "breed_by_name",
    "condition_by_name",
    "simulate_race_monte_carlo",
]
