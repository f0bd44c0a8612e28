"""
Stat Derivation - Pure mapping from base attributes to combat stats.

Pipeline:
1. Each derived stat is a weighted sum of one or two base attributes
   plus a flat floor.
2. Specialty attributes are multiplied before they feed the sum.
3. The sum is scaled by form, combination level and (for most stats)
   rarity.
4. Permanent modifications and active effect deltas are added as an
   overlay, then floors and caps are re-applied.

refresh_stats() is the only place derived stats are recomputed. It is
called after any base-attribute change, permanent modification, effect
attach and ledger tick.
"""

from __future__ import annotations
import math

from .creature import (
    Attribute,
    BaseAttributes,
    Creature,
    DerivedStats,
    Rarity,
    STAT_NAMES,
)


RARITY_MULTIPLIERS = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.2,
    Rarity.EPIC: 1.4,
    Rarity.LEGENDARY: 1.6,
}

FORM_STEP = 0.35
COMBINATION_STEP = 0.15
SINGLE_SPECIALTY_MULTIPLIER = 2.5
DUAL_SPECIALTY_MULTIPLIER = 1.8

CRITICAL_CAP = 40.0
DODGE_CAP = 25.0

# Used by creature_power
RARITY_VALUES = {
    Rarity.COMMON: 1,
    Rarity.RARE: 2,
    Rarity.EPIC: 3,
    Rarity.LEGENDARY: 4,
}

# Cyclic advantage: each attribute beats the next one
ADVANTAGE_CYCLE = (
    (Attribute.STRENGTH, Attribute.STAMINA),
    (Attribute.STAMINA, Attribute.SPEED),
    (Attribute.SPEED, Attribute.MAGIC),
    (Attribute.MAGIC, Attribute.ENERGY),
    (Attribute.ENERGY, Attribute.STRENGTH),
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def rarity_multiplier(rarity: Rarity) -> float:
    return RARITY_MULTIPLIERS.get(rarity, 1.0)


def form_multiplier(form: int) -> float:
    return 1 + form * FORM_STEP


def combination_bonus(level: int) -> float:
    return 1 + level * COMBINATION_STEP


def specialty_multipliers(specialties: tuple[Attribute, ...]) -> dict[Attribute, float]:
    """Per-attribute multipliers: one specialty gets a large boost, two get a smaller one each."""
    multipliers = {attr: 1.0 for attr in Attribute}
    if len(specialties) == 1:
        multipliers[specialties[0]] = SINGLE_SPECIALTY_MULTIPLIER
    elif len(specialties) >= 2:
        for attr in specialties:
            multipliers[attr] = DUAL_SPECIALTY_MULTIPLIER
    return multipliers


def derive_base_stats(
    base: BaseAttributes,
    rarity: Rarity,
    form: int = 0,
    specialties: tuple[Attribute, ...] = (),
    combination_level: int = 0,
) -> DerivedStats:
    """Derived stats before any overlay. Pure and idempotent."""
    m = specialty_multipliers(specialties)
    eng = base.energy
    strn = base.strength
    mag = base.magic
    sta = base.stamina
    spd = base.speed

    r = rarity_multiplier(rarity)
    f = form_multiplier(form)
    c = combination_bonus(combination_level)

    return DerivedStats(
        physical_attack=round_half_up(
            (15 + strn * 3 * m[Attribute.STRENGTH] + spd * 0.8) * f * c * r
        ),
        magical_attack=round_half_up(
            (15 + mag * 3 * m[Attribute.MAGIC] + eng * 0.8) * f * c * r
        ),
        physical_defense=round_half_up(
            (8 + sta * 2.5 * m[Attribute.STAMINA] + strn * 0.8) * f * c * r
        ),
        magical_defense=round_half_up(
            (8 + eng * 2.5 * m[Attribute.ENERGY] + mag * 0.8) * f * c * r
        ),
        max_health=round_half_up(
            (80 + sta * 5 * m[Attribute.STAMINA] + eng * 2) * r * f * c
        ),
        initiative=round_half_up(
            (12 + spd * 3 * m[Attribute.SPEED] + eng * 0.5) * f * c
        ),
        critical_chance=min(8 + spd * 0.8 * m[Attribute.SPEED] + mag * 0.3, CRITICAL_CAP),
        dodge_chance=min(5 + spd * 0.5 * m[Attribute.SPEED] + sta * 0.2, DODGE_CAP),
        energy_cost=max(1, round_half_up(12 - eng * 0.3 * m[Attribute.ENERGY])),
    )


def stat_overlay(creature: Creature) -> dict[str, int]:
    """Sum of permanent modifications and every active effect's stat delta."""
    overlay = {name: 0 for name in STAT_NAMES}
    for name, delta in creature.permanent_modifications.items():
        if name in overlay:
            overlay[name] += delta
    for effect in creature.active_effects:
        for name, delta in effect.stat_delta.items():
            if name in overlay:
                overlay[name] += delta
    return overlay


def apply_overlay(stats: DerivedStats, overlay: dict[str, int]) -> DerivedStats:
    """Add an overlay to derived stats and re-apply floors and caps."""
    def plus(name: str) -> float:
        return stats.get(name) + overlay.get(name, 0)

    return DerivedStats(
        physical_attack=max(1, int(plus("physical_attack"))),
        magical_attack=max(1, int(plus("magical_attack"))),
        physical_defense=max(1, int(plus("physical_defense"))),
        magical_defense=max(1, int(plus("magical_defense"))),
        max_health=max(10, int(plus("max_health"))),
        initiative=max(0, int(plus("initiative"))),
        critical_chance=min(CRITICAL_CAP, max(0.0, plus("critical_chance"))),
        dodge_chance=min(DODGE_CAP, max(0.0, plus("dodge_chance"))),
        energy_cost=max(1, int(plus("energy_cost"))),
    )


def derive_stats(creature: Creature) -> DerivedStats:
    """Full derivation for a creature, overlay included."""
    base_stats = derive_base_stats(
        creature.base,
        creature.rarity,
        creature.form,
        creature.specialty_stats,
        creature.combination_level,
    )
    return apply_overlay(base_stats, stat_overlay(creature))


def refresh_stats(creature: Creature) -> Creature:
    """Recompute derived stats and re-clamp health into [0, max_health]."""
    derived = derive_stats(creature)
    health = max(0, min(derived.max_health, creature.current_health))
    return creature.with_changes(derived=derived, current_health=health)


# =============================================================================
# Projections
# =============================================================================

def creature_power(creature: Creature) -> int:
    """Single-number power rating used by previews and planners."""
    if creature.derived is None:
        return 0
    s = creature.derived
    attack_power = max(s.physical_attack, s.magical_attack)
    defense_power = max(s.physical_defense, s.magical_defense)
    utility_power = s.initiative + s.critical_chance + s.dodge_chance
    return round_half_up(
        attack_power * 2
        + defense_power
        + s.max_health * 0.1
        + utility_power * 0.5
        + creature.form * 5
        + RARITY_VALUES.get(creature.rarity, 1) * 10
    )


def type_advantage(attacker: BaseAttributes, defender: BaseAttributes) -> float:
    """1.4x for the first cyclic pair where the attacker clearly out-stats the counter, capped at 2.0."""
    advantage = 1.0
    for strong, weak in ADVANTAGE_CYCLE:
        if attacker.get(strong) > defender.get(weak) + 2:
            advantage *= 1.4
            break
    return min(2.0, advantage)


def battle_odds(attacker: Creature, defender: Creature) -> float:
    """Estimated probability that attacker beats defender, clamped to [0.1, 0.9]."""
    attacker_power = creature_power(attacker)
    defender_power = creature_power(defender)
    advantage = type_advantage(attacker.base, defender.base)
    ratio = (attacker_power * advantage) / max(defender_power, 1)
    return max(0.1, min(0.9, ratio / (ratio + 1)))
