"""
Items - Tools and spells, and the effect tables they resolve to.

An item has a type (one of the five attributes) and an effect name
(Surge, Shield, Echo, Drain, Charge). The pair selects an entry from a
closed table; the entry is then scaled by the effect power:

    power = tier factor x item rarity factor [x caster attribute factor]

Tools are free to use and target one creature on the user's field.
Spells cost energy and have a caster and an optional target.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .creature import Attribute, BaseAttributes, ChargeState, Rarity
from .difficulty import DifficultyProfile
from .stats import round_half_up


class ItemCategory(Enum):
    TOOL = "tool"
    SPELL = "spell"


class EffectName(Enum):
    """Closed set of item effects."""
    SURGE = "Surge"
    SHIELD = "Shield"
    ECHO = "Echo"
    DRAIN = "Drain"
    CHARGE = "Charge"

    @classmethod
    def parse(cls, value: str | EffectName) -> EffectName:
        if isinstance(value, EffectName):
            return value
        for effect in cls:
            if effect.value.lower() == str(value).strip().lower():
                return effect
        raise ValueError(f"Unknown item effect: {value}")


@dataclass(frozen=True)
class Item:
    """A consumable tool or spell."""
    item_id: str
    name: str
    category: ItemCategory
    item_type: Attribute
    effect: EffectName
    rarity: Rarity = Rarity.COMMON

    @property
    def is_spell(self) -> bool:
        return self.category == ItemCategory.SPELL

    @classmethod
    def tool(cls, item_id: str, name: str, item_type: Attribute | str,
             effect: EffectName | str, rarity: Rarity | str = Rarity.COMMON) -> Item:
        return cls(
            item_id=item_id,
            name=name,
            category=ItemCategory.TOOL,
            item_type=Attribute(item_type) if isinstance(item_type, str) else item_type,
            effect=EffectName.parse(effect),
            rarity=Rarity.parse(rarity),
        )

    @classmethod
    def spell(cls, item_id: str, name: str, item_type: Attribute | str,
              effect: EffectName | str, rarity: Rarity | str = Rarity.COMMON) -> Item:
        return cls(
            item_id=item_id,
            name=name,
            category=ItemCategory.SPELL,
            item_type=Attribute(item_type) if isinstance(item_type, str) else item_type,
            effect=EffectName.parse(effect),
            rarity=Rarity.parse(rarity),
        )


@dataclass(frozen=True)
class ItemEffect:
    """
    A fully scaled item effect, ready to be resolved.

    stat_changes and health_over_time become an active effect lasting
    duration turns; the remaining fields are one-shot.
    """
    stat_changes: dict[str, int] = field(default_factory=dict)
    duration: int = 0
    health_change: int = 0
    health_over_time: int = 0
    energy_gain: int = 0
    damage: int = 0
    healing: int = 0
    self_heal: int = 0
    armor_piercing: bool = False
    stat_drain: dict[str, int] = field(default_factory=dict)
    stat_gain: dict[str, int] = field(default_factory=dict)
    charge: ChargeState | None = None
    power: float = 1.0
    power_level: str = "normal"


ITEM_RARITY_FACTORS = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.1,
    Rarity.EPIC: 1.3,
    Rarity.LEGENDARY: 1.5,
}

TOOL_ENERGY_GAIN = 3
SPELL_ENERGY_GAIN = 8


def effect_power(
    item: Item,
    profile: DifficultyProfile,
    caster: BaseAttributes | None = None,
) -> float:
    """Multiplier applied to every magnitude of an item effect."""
    power = profile.effect_power
    if item.is_spell and caster is not None:
        power *= 1 + (caster.get(item.item_type) - 5) * 0.1
    power *= ITEM_RARITY_FACTORS.get(item.rarity, 1.0)
    return power


def power_level(power: float) -> str:
    if power >= 1.4:
        return "maximum"
    if power >= 1.2:
        return "strong"
    if power >= 1.0:
        return "normal"
    return "weak"


def _scale(stats: dict[str, float], factor: float) -> dict[str, int]:
    return {name: round_half_up(value * factor) for name, value in stats.items()}


# =============================================================================
# Tool table
# =============================================================================

TOOL_BASE = {
    Attribute.ENERGY: {"stats": {"energy_cost": -2}, "health": 0},
    Attribute.STRENGTH: {"stats": {"physical_attack": 8}, "health": 0},
    Attribute.MAGIC: {"stats": {"magical_attack": 8}, "health": 0},
    Attribute.STAMINA: {"stats": {"physical_defense": 8}, "health": 15},
    Attribute.SPEED: {"stats": {"initiative": 8, "dodge_chance": 5}, "health": 0},
}

TOOL_DURATION = 4


def tool_effect(item: Item, profile: DifficultyProfile) -> ItemEffect:
    """Resolve a tool into a scaled effect."""
    base = TOOL_BASE[item.item_type]
    stats: dict[str, float] = dict(base["stats"])
    health = base["health"]
    health_over_time = 0
    duration = TOOL_DURATION
    charge = None

    if item.effect == EffectName.SURGE:
        stats = {name: value * 3 for name, value in stats.items()}
        health = health * 2
        duration = 2
    elif item.effect == EffectName.SHIELD:
        stats = {"physical_defense": 15, "magical_defense": 15, "max_health": 20}
        health = 10
    elif item.effect == EffectName.ECHO:
        stats = {name: round_half_up(value * 0.8) for name, value in stats.items()}
        health_over_time = round_half_up(health * 0.3)
        health = 0
        duration = 6
    elif item.effect == EffectName.DRAIN:
        stats = {
            "physical_attack": 12,
            "magical_attack": 12,
            "physical_defense": -4,
            "magical_defense": -4,
        }
        health = 8
    elif item.effect == EffectName.CHARGE:
        stats = {}
        health = 0
        charge = (5, 20, 4)

    power = effect_power(item, profile)
    return ItemEffect(
        stat_changes=_scale(stats, power),
        duration=duration,
        health_change=round_half_up(health * power),
        health_over_time=health_over_time,
        energy_gain=(
            round_half_up(TOOL_ENERGY_GAIN * power)
            if item.item_type == Attribute.ENERGY else 0
        ),
        charge=(
            ChargeState(
                per_turn_bonus=round_half_up(charge[0] * power),
                final_burst=round_half_up(charge[1] * power),
                max_turns=charge[2],
            ) if charge else None
        ),
        power=power,
        power_level=power_level(power),
    )


# =============================================================================
# Spell table
# =============================================================================

SPELL_DURATION = 3


def _spell_base(item_type: Attribute, magic_power: float) -> dict:
    if item_type == Attribute.ENERGY:
        return {"stats": {"energy_cost": -3}}
    if item_type == Attribute.STRENGTH:
        return {"damage": 30 * magic_power, "stats": {"physical_attack": 10}}
    if item_type == Attribute.MAGIC:
        return {"damage": 28 * magic_power, "stats": {"magical_attack": 10, "magical_defense": 5}}
    if item_type == Attribute.STAMINA:
        return {"healing": 35 * magic_power, "stats": {"physical_defense": 8}}
    return {"stats": {"initiative": 12, "dodge_chance": 8, "critical_chance": 8}}


def spell_effect(item: Item, caster: BaseAttributes, profile: DifficultyProfile) -> ItemEffect:
    """Resolve a spell cast by a creature with the given base attributes."""
    magic_power = 1 + caster.magic * 0.25
    base = _spell_base(item.item_type, magic_power)

    stats: dict[str, float] = dict(base.get("stats", {}))
    damage = base.get("damage", 0.0)
    healing = base.get("healing", 0.0)
    self_heal = 0.0
    health_over_time = 0
    duration = SPELL_DURATION
    armor_piercing = False
    stat_drain: dict[str, int] = {}
    stat_gain: dict[str, int] = {}
    charge = None

    if item.effect == EffectName.SURGE:
        damage = (damage or 20) * 3.5
        healing = 0.0
        stats = {}
        armor_piercing = True
        duration = 0
    elif item.effect == EffectName.SHIELD:
        stats = {"physical_defense": 18, "magical_defense": 18, "max_health": 25}
        damage = 0.0
        healing = 20 * magic_power
        duration = 4
    elif item.effect == EffectName.ECHO:
        if healing:
            health_over_time = round_half_up(healing / 2 * magic_power)
        elif damage:
            health_over_time = -round_half_up(damage / 2 * magic_power)
        stats = {name: round_half_up(value * 0.4) for name, value in stats.items()}
        damage = 0.0
        healing = 0.0
        duration = 4
    elif item.effect == EffectName.DRAIN:
        damage = 25 * magic_power
        healing = 0.0
        self_heal = 15 * magic_power
        stats = {}
        stat_drain = {"physical_attack": -5, "magical_attack": -5}
        stat_gain = {"physical_attack": 3, "magical_attack": 3}
        duration = 2
    elif item.effect == EffectName.CHARGE:
        stats = {}
        damage = 0.0
        healing = 0.0
        duration = 1
        charge = (10 * magic_power, 50 * magic_power, 1)

    power = effect_power(item, profile, caster)
    return ItemEffect(
        stat_changes=_scale(stats, power),
        duration=duration,
        health_over_time=health_over_time,
        energy_gain=(
            round_half_up(SPELL_ENERGY_GAIN * power)
            if item.item_type == Attribute.ENERGY else 0
        ),
        damage=round_half_up(damage * power),
        healing=round_half_up(healing * power),
        self_heal=round_half_up(self_heal * power),
        armor_piercing=armor_piercing or power >= 1.3,
        stat_drain=stat_drain,
        stat_gain=stat_gain,
        charge=(
            ChargeState(
                per_turn_bonus=round_half_up(charge[0] * power),
                final_burst=round_half_up(charge[1] * power),
                max_turns=charge[2],
            ) if charge else None
        ),
        power=power,
        power_level=power_level(power),
    )
