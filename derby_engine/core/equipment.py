"""Equipment model for the derby engine.

A horse carries one saddle, one set of horseshoes and one accessory.
Each piece contributes multiplicative (or, for accessories, additive)
modifiers that are folded into the horse's attributes when it is
created or re-equipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Saddle(Enum):
    """Saddle types as ``(label, speed_factor, stability_factor)``."""

    RACING = ("Racing Saddle", 1.1, 0.95)
    ENGLISH = ("English Saddle", 1.0, 1.0)
    WESTERN = ("Western Saddle", 0.9, 1.1)
    BAREBACK = ("Bareback", 1.15, 0.85)
    DRESSAGE = ("Dressage Saddle", 0.95, 1.05)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def speed_factor(self) -> float:
        return self.value[1]

    @property
    def stability_factor(self) -> float:
        return self.value[2]


class Horseshoes(Enum):
    """Horseshoe types as ``(label, speed, grip, endurance)``."""

    STANDARD = ("Standard Horseshoes", 1.0, 1.0, 1.0)
    LIGHTWEIGHT = ("Lightweight Horseshoes", 1.1, 0.9, 0.95)
    TRACTION = ("Traction Horseshoes", 0.95, 1.15, 1.1)
    THERAPEUTIC = ("Therapeutic Horseshoes", 0.9, 1.05, 1.2)
    NONE = ("No Horseshoes", 1.05, 0.95, 0.9)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def speed_factor(self) -> float:
        return self.value[1]

    @property
    def grip_factor(self) -> float:
        return self.value[2]

    @property
    def endurance_factor(self) -> float:
        return self.value[3]


class Accessory(Enum):
    """Accessories as ``(label, speed_boost, luck_boost)``."""

    NONE = ("No Accessories", 0.0, 0.0)
    BLINDERS = ("Blinders", 0.05, 0.0)
    BLANKET = ("Racing Blanket", 0.03, 0.0)
    PLUME = ("Decorative Plume", 0.0, 0.0)
    LUCKY_CHARM = ("Lucky Charm", 0.0, 0.05)
    PERFORMANCE_BRIDLE = ("Performance Bridle", 0.0, 0.03)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def speed_boost(self) -> float:
        return self.value[1]

    @property
    def luck_boost(self) -> float:
        return self.value[2]


@dataclass(frozen=True)
class Equipment:
    """The full equipment set worn by a horse.

    Attributes:
        saddle: Saddle type (default racing).
        horseshoes: Horseshoe type (default standard).
        accessory: Accessory (default none).
    """

    saddle: Saddle = Saddle.RACING
    horseshoes: Horseshoes = Horseshoes.STANDARD
    accessory: Accessory = Accessory.NONE

    @property
    def speed_factor(self) -> float:
        return self.saddle.speed_factor * self.horseshoes.speed_factor + self.accessory.speed_boost

    @property
    def stability_factor(self) -> float:
        return self.saddle.stability_factor * self.horseshoes.grip_factor

    @property
    def endurance_factor(self) -> float:
        return self.horseshoes.endurance_factor

    @property
    def luck_factor(self) -> float:
        return 1.0 + self.accessory.luck_boost

    def __str__(self) -> str:
        return (
            f"Saddle: {self.saddle.label}, Horseshoes: {self.horseshoes.label}, "
            f"Accessory: {self.accessory.label}"
        )
