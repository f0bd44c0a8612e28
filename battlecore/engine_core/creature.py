"""
Creatures - Battle-ready creature instances and their effects.

A Creature is an immutable snapshot. Every change (damage, a new
effect, a tick) produces a new Creature via with_changes(); the
derived stats are recomputed through stats.refresh_stats, the single
recomputation path.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Rarity(Enum):
    """Creature and item rarities."""
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"

    @classmethod
    def parse(cls, value: str | Rarity) -> Rarity:
        if isinstance(value, Rarity):
            return value
        for rarity in cls:
            if rarity.value.lower() == str(value).strip().lower():
                return rarity
        raise ValueError(f"Unknown rarity: {value}")


class Attribute(Enum):
    """The five base attributes."""
    ENERGY = "energy"
    STRENGTH = "strength"
    MAGIC = "magic"
    STAMINA = "stamina"
    SPEED = "speed"


@dataclass(frozen=True)
class BaseAttributes:
    """The five named base stats of a creature."""
    energy: int = 5
    strength: int = 5
    magic: int = 5
    stamina: int = 5
    speed: int = 5

    def get(self, attribute: Attribute) -> int:
        return getattr(self, attribute.value)

    @property
    def total(self) -> int:
        return self.energy + self.strength + self.magic + self.stamina + self.speed

    def to_dict(self) -> dict[str, int]:
        return {attr.value: self.get(attr) for attr in Attribute}


# Derived stat names in display order
STAT_NAMES = (
    "physical_attack",
    "magical_attack",
    "physical_defense",
    "magical_defense",
    "max_health",
    "initiative",
    "critical_chance",
    "dodge_chance",
    "energy_cost",
)


@dataclass(frozen=True)
class DerivedStats:
    """Combat statistics computed from base attributes and modifiers."""
    physical_attack: int
    magical_attack: int
    physical_defense: int
    magical_defense: int
    max_health: int
    initiative: int
    critical_chance: float
    dodge_chance: float
    energy_cost: int

    def get(self, name: str) -> float:
        return getattr(self, name)

    def to_dict(self) -> dict[str, float]:
        return {name: self.get(name) for name in STAT_NAMES}


class EffectKind(Enum):
    """Kinds of active effect."""
    BUFF = "buff"
    DEBUFF = "debuff"
    DOT = "dot"
    HOT = "hot"
    CHARGE = "charge"


@dataclass(frozen=True)
class ChargeState:
    """Progress of a Charge effect towards its one-time attack bonus."""
    per_turn_bonus: int
    final_burst: int
    max_turns: int
    progress: int = 0
    accumulated: int = 0


@dataclass(frozen=True)
class ActiveEffect:
    """
    A timed modifier attached to a creature.

    stat_delta maps derived stat names to signed integers; it is folded
    into the stat overlay on every recomputation while the effect lives.
    Stance effects (from defending) are not decremented by the tick.
    """
    effect_id: str
    name: str
    kind: EffectKind
    remaining_duration: int
    stat_delta: dict[str, int] = field(default_factory=dict)
    health_delta_per_tick: int = 0
    source_power_level: str = "normal"
    charge: ChargeState | None = None
    is_stance: bool = False

    @staticmethod
    def classify(
        stat_delta: dict[str, int],
        health_delta_per_tick: int = 0,
        charge: ChargeState | None = None,
    ) -> EffectKind:
        """Pick the kind that best describes an effect's payload."""
        if charge is not None:
            return EffectKind.CHARGE
        net = sum(stat_delta.values())
        if net < 0:
            return EffectKind.DEBUFF
        if net == 0 and health_delta_per_tick < 0:
            return EffectKind.DOT
        if net == 0 and health_delta_per_tick > 0:
            return EffectKind.HOT
        return EffectKind.BUFF

    def with_changes(self, **kwargs: Any) -> ActiveEffect:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class Creature:
    """
    A battle-ready creature instance.

    Construct with Creature.battle_ready(...) so that derived stats and
    health are initialized; the raw constructor is used by with_changes.
    """
    creature_id: str
    species_name: str
    rarity: Rarity
    form: int
    base: BaseAttributes
    specialty_stats: tuple[Attribute, ...] = ()
    combination_level: int = 0
    permanent_modifications: dict[str, int] = field(default_factory=dict)
    derived: DerivedStats | None = None
    current_health: int = 0
    is_defending: bool = False
    active_effects: tuple[ActiveEffect, ...] = ()
    next_attack_bonus: int = 0
    energy_cost_override: int | None = None
    effects_applied: int = 0

    @classmethod
    def battle_ready(
        cls,
        creature_id: str,
        species_name: str,
        rarity: Rarity | str,
        form: int,
        base: BaseAttributes,
        specialty_stats: tuple[Attribute, ...] | list[Attribute] = (),
        combination_level: int = 0,
        energy_cost_override: int | None = None,
    ) -> Creature:
        """Build a creature at full health with freshly derived stats."""
        from .stats import refresh_stats

        creature = cls(
            creature_id=creature_id,
            species_name=species_name,
            rarity=Rarity.parse(rarity),
            form=max(0, min(3, form)),
            base=base,
            specialty_stats=tuple(specialty_stats)[:2],
            combination_level=max(0, combination_level),
            energy_cost_override=energy_cost_override,
        )
        creature = refresh_stats(creature)
        return creature.with_changes(current_health=creature.stats.max_health)

    @property
    def stats(self) -> DerivedStats:
        """Derived stats (always present on battle-ready creatures)."""
        if self.derived is None:
            raise ValueError(f"Creature {self.creature_id} has no derived stats")
        return self.derived

    @property
    def is_defeated(self) -> bool:
        return self.current_health <= 0

    @property
    def health_ratio(self) -> float:
        if self.derived is None or self.derived.max_health <= 0:
            return 0.0
        return self.current_health / self.derived.max_health

    @property
    def attack_power(self) -> int:
        return max(self.stats.physical_attack, self.stats.magical_attack)

    @property
    def stat_total(self) -> int:
        return self.base.total

    @property
    def deploy_cost(self) -> int:
        """Energy needed to put this creature on the field."""
        if self.energy_cost_override is not None:
            return self.energy_cost_override
        return self.stats.energy_cost

    def has_specialty(self, attribute: Attribute) -> bool:
        return attribute in self.specialty_stats

    def next_effect_id(self) -> str:
        return f"{self.creature_id}-fx{self.effects_applied + 1}"

    def with_changes(self, **kwargs: Any) -> Creature:
        """Return a copy with some fields replaced."""
        return replace(self, **kwargs)
