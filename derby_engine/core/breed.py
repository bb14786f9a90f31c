"""Breed and coat-colour presets for the derby engine.

Breeds scale the attributes a horse derives at creation time.  Coat
colour is purely cosmetic and is carried through for renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Breed model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HorseBreed:
    """Immutable description of a horse breed.

    Attributes:
        name: Breed label (e.g. "Arabian").
        description: One-line flavour text.
        speed_factor: Multiplier on derived base speed.
        stamina_factor: Multiplier on derived stamina.
        agility_factor: Multiplier on derived turn handling.
    """

    name: str
    description: str
    speed_factor: float
    stamina_factor: float
    agility_factor: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Breed name must not be empty.")
        for label in ("speed_factor", "stamina_factor", "agility_factor"):
            if getattr(self, label) <= 0.0:
                raise ValueError(f"{label} must be > 0.0.")

    def __str__(self) -> str:
        return self.name


# Pre-defined breeds ---------------------------------------------------------

THOROUGHBRED = HorseBreed(
    "Thoroughbred", "Bred for racing; fast and agile.", 1.2, 0.8, 0.9
)
ARABIAN = HorseBreed(
    "Arabian", "Endurance and stamina with high spirit.", 1.0, 1.1, 1.2
)
QUARTER_HORSE = HorseBreed(
    "Quarter Horse", "Explosive sprinter over short distances.", 1.3, 0.7, 0.8
)
STANDARDBRED = HorseBreed(
    "Standardbred", "Versatile trotter with a steady temperament.", 0.9, 1.0, 1.0
)
APPALOOSA = HorseBreed(
    "Appaloosa", "Versatile all-rounder with a spotted coat.", 0.95, 0.95, 1.1
)
MUSTANG = HorseBreed(
    "Mustang", "Hardy and wild with natural survival instincts.", 1.0, 1.2, 0.9
)
CLYDESDALE = HorseBreed(
    "Clydesdale", "Large, powerful draft horse; slow but steady.", 0.7, 1.3, 0.8
)

ALL_BREEDS: tuple[HorseBreed, ...] = (
    THOROUGHBRED,
    ARABIAN,
    QUARTER_HORSE,
    STANDARDBRED,
    APPALOOSA,
    MUSTANG,
    CLYDESDALE,
)


def breed_by_name(name: str) -> HorseBreed:
    """Case-insensitive breed lookup; unknown names fall back to Thoroughbred."""
    for breed in ALL_BREEDS:
        if breed.name.lower() == name.lower():
            return breed
    return THOROUGHBRED


# ---------------------------------------------------------------------------
# Coat colours
# ---------------------------------------------------------------------------


class CoatColor(Enum):
    """Cosmetic coat colours with a display RGB triple."""

    BAY = ("Bay", (153, 76, 0))
    BLACK = ("Black", (25, 25, 25))
    CHESTNUT = ("Chestnut", (205, 92, 0))
    GRAY = ("Gray", (180, 180, 180))
    WHITE = ("White", (250, 250, 250))
    PALOMINO = ("Palomino", (255, 215, 115))
    PINTO = ("Pinto", (200, 150, 100))
    BUCKSKIN = ("Buckskin", (222, 184, 135))
    DAPPLE_GRAY = ("Dapple Gray", (169, 169, 169))

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.value[1]
