"""Horse (agent) model for the derby engine.

A horse combines a persistent identity and attribute bundle with a
small amount of per-race state (distance, position, fallen flag) that
is reset at the start of every race.

Attributes are derived from breed and equipment once, at creation or
re-customization time.  The random component of that derivation is
drawn a single time from the injected ``numpy.random.Generator`` and
kept as :class:`AptitudeRolls`, so changing breed or equipment later
re-derives deterministically without new draws.

Per-tick movement::

    stamina_effect = 1 - (1 - stamina) * progress
    turn_effect    = 1 - (1 - curve_factor) * (1 - turn_handling)
    luck_factor    = 0.95 + 0.10 * luck
    increment      = speed * speed_factor * turn_effect * stamina_effect * luck_factor
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.random import Generator

from derby_engine.core.breed import THOROUGHBRED, CoatColor, HorseBreed
from derby_engine.core.equipment import Equipment


def clamp_unit(value: float) -> float:
    """Clamp *value* into ``[0.0, 1.0]``."""
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class AptitudeRolls:
    """Uniform draws in ``[0, 1)`` fixed at horse creation.

    Attributes:
        turn: Roll feeding turn handling.
        stamina: Roll feeding stamina.
        luck: Roll feeding luck.
    """

    turn: float
    stamina: float
    luck: float

    @classmethod
    def draw(cls, rng: Generator) -> AptitudeRolls:
        turn, stamina, luck = rng.random(3)
        return cls(turn=float(turn), stamina=float(stamina), luck=float(luck))


class Horse:
    """A racing horse.

    Attributes:
        name: Unique display name.
        symbol: Short display symbol used by renderers.
        breed: Breed preset scaling speed, stamina and agility.
        coat: Cosmetic coat colour.
        equipment: Saddle / horseshoes / accessory set.
        base_speed: Derived top speed (not confined to [0, 1]).
        speed: Current speed; reset to ``base_speed`` every race.
        distance: Distance travelled in the current race (>= 0).
        x, y: Last computed 2D position on the track.
        fallen: Terminal per-race flag; a fallen horse never moves again.
    """

    __slots__ = (
        "name",
        "symbol",
        "breed",
        "coat",
        "equipment",
        "base_speed",
        "speed",
        "distance",
        "x",
        "y",
        "fallen",
        "_confidence",
        "_turn_handling",
        "_stamina",
        "_luck",
        "_rolls",
    )

    def __init__(
        self,
        name: str,
        symbol: str,
        confidence: float,
        breed: HorseBreed = THOROUGHBRED,
        coat: CoatColor = CoatColor.BAY,
        equipment: Equipment | None = None,
        rng: Generator | None = None,
        rolls: AptitudeRolls | None = None,
    ) -> None:
        """Create a horse and derive its attributes.

        Args:
            name: Horse name.  Must not be empty.
            symbol: Display symbol.  Must not be empty.
            confidence: Starting confidence, clamped into [0, 1].
            breed: Breed preset.
            coat: Coat colour.
            equipment: Equipment set; defaults to :class:`Equipment`().
            rng: Generator used to draw aptitude rolls.  Ignored when
                *rolls* is supplied.  ``None`` uses OS entropy.
            rolls: Pre-drawn aptitude rolls for fully deterministic
                construction.

        Raises:
            ValueError: If *name* or *symbol* is empty.
        """
        if not name:
            raise ValueError("name must not be empty.")
        if not symbol:
            raise ValueError("symbol must not be empty.")
        if rolls is None:
            rolls = AptitudeRolls.draw(rng if rng is not None else np.random.default_rng())

        self.name: str = name
        self.symbol: str = symbol
        self.breed: HorseBreed = breed
        self.coat: CoatColor = coat
        self.equipment: Equipment = equipment if equipment is not None else Equipment()
        self._confidence: float = clamp_unit(confidence)
        self._rolls: AptitudeRolls = rolls

        self.base_speed: float = 0.0
        self._turn_handling: float = 0.0
        self._stamina: float = 0.0
        self._luck: float = 0.0
        self._derive_attributes()

        self.speed: float = self.base_speed
        self.distance: float = 0.0
        self.x: float = 0.0
        self.y: float = 0.0
        self.fallen: bool = False

    # -- Attribute derivation ------------------------------------------------

    def _derive_attributes(self) -> None:
        breed, kit, rolls = self.breed, self.equipment, self._rolls
        self.base_speed = (
            (0.5 + 0.5 * self._confidence) * breed.speed_factor * kit.speed_factor
        )
        self._turn_handling = clamp_unit(
            (0.5 + 0.3 * rolls.turn) * breed.agility_factor * kit.stability_factor
        )
        self._stamina = clamp_unit(
            (0.6 + 0.3 * rolls.stamina) * breed.stamina_factor * kit.endurance_factor
        )
        self._luck = clamp_unit(rolls.luck * kit.luck_factor)

    def customize(
        self,
        breed: HorseBreed | None = None,
        coat: CoatColor | None = None,
        equipment: Equipment | None = None,
    ) -> None:
        """Swap breed, coat and/or equipment and re-derive attributes."""
        if breed is not None:
            self.breed = breed
        if coat is not None:
            self.coat = coat
        if equipment is not None:
            self.equipment = equipment
        self._derive_attributes()
        self.speed = self.base_speed

    # -- Bounded attributes --------------------------------------------------

    @property
    def confidence(self) -> float:
        return self._confidence

    @confidence.setter
    def confidence(self, value: float) -> None:
        self._confidence = clamp_unit(value)

    @property
    def turn_handling(self) -> float:
        return self._turn_handling

    @turn_handling.setter
    def turn_handling(self, value: float) -> None:
        self._turn_handling = clamp_unit(value)

    @property
    def stamina(self) -> float:
        return self._stamina

    @stamina.setter
    def stamina(self, value: float) -> None:
        self._stamina = clamp_unit(value)

    @property
    def luck(self) -> float:
        return self._luck

    @luck.setter
    def luck(self, value: float) -> None:
        self._luck = clamp_unit(value)

    # -- Race state ----------------------------------------------------------

    def reset_for_race(self) -> None:
        """Return to the start line; confidence is left untouched."""
        self.distance = 0.0
        self.x = 0.0
        self.y = 0.0
        self.fallen = False
        self.speed = self.base_speed

    def fall(self) -> None:
        self.fallen = True

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def advance(
        self,
        speed_factor: float,
        curve_factor: float,
        progress: float,
        speed_modifier: float = 1.0,
    ) -> float:
        """Move forward for one tick.

        Args:
            speed_factor: Track-condition speed multiplier.
            curve_factor: Local curvature at the current distance.
            progress: Fraction of the race completed, in [0, 1].
            speed_modifier: Transient multiplier for this tick only
                (e.g. the figure-eight crossing penalty).

        Returns:
            The distance gained.  Always 0.0 for a fallen horse.
        """
        if self.fallen:
            return 0.0
        stamina_effect: float = 1.0 - (1.0 - self._stamina) * progress
        turn_effect: float = 1.0 - (1.0 - curve_factor) * (1.0 - self._turn_handling)
        luck_factor: float = 0.95 + self._luck * 0.10

        increment: float = (
            self.speed * speed_modifier * speed_factor
            * turn_effect * stamina_effect * luck_factor
        )
        increment = max(0.0, increment)
        self.distance += increment
        return increment

    def clone(self) -> Horse:
        """Independent copy sharing identity, attributes and aptitude rolls."""
        twin = Horse(
            self.name,
            self.symbol,
            self._confidence,
            breed=self.breed,
            coat=self.coat,
            equipment=self.equipment,
            rolls=self._rolls,
        )
        twin.base_speed = self.base_speed
        twin._turn_handling = self._turn_handling
        twin._stamina = self._stamina
        twin._luck = self._luck
        twin.speed = self.speed
        return twin

    def __repr__(self) -> str:
        return (
            f"Horse(name={self.name!r}, breed={self.breed.name}, "
            f"confidence={self._confidence:.2f}, base_speed={self.base_speed:.2f})"
        )
