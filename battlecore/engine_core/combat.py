"""
Combat Resolution - Attacks, tools, spells and defending.

All functions are pure: they take creatures and a random source and
return new creatures plus a description of what happened. Randomness
is always injected, so a seeded or scripted random.Random makes every
result reproducible.

Damage pipeline for an attack:
1. Pick the channel (physical if physical_attack >= magical_attack)
2. Dodge roll against the defender's dodge chance
3. Effectiveness from the cyclic attribute relation
4. Critical roll against the attacker's critical chance
5. raw = attack x effectiveness x variance x critical
6. Percentage mitigation: reduction = min(cap, def / (def + atk x f))
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from enum import Enum

from .creature import BaseAttributes, Creature, Rarity
from .difficulty import DifficultyProfile
from .effects import STANCE_NAME, attach, make_effect
from .items import Item, ItemEffect, spell_effect, tool_effect
from .stats import round_half_up

logger = logging.getLogger(__name__)


CRITICAL_MULTIPLIER = 2.0
REDUCTION_CAP = 0.85
ATTACK_FACTOR = 1.5
DAMAGE_FLOOR = 2
OVERWHELMING_MULTIPLIER = 1.3
INVALID_ATTACK_DAMAGE = 3
VARIANCE_LOW = 0.8
VARIANCE_SPAN = 0.4

SPELL_CRITICAL_MULTIPLIER = 1.8
SPELL_CRITICAL_CAP = 25
ARMOR_PIERCING_BONUS = 0.3

DEFEND_RARITY_BONUS = {
    Rarity.COMMON: 1,
    Rarity.RARE: 2,
    Rarity.EPIC: 3,
    Rarity.LEGENDARY: 5,
}


class AttackChannel(Enum):
    PHYSICAL = "physical"
    MAGICAL = "magical"


def roll(rng: random.Random, chance: float) -> bool:
    """A percentage roll succeeds when rng.random() x 100 < chance."""
    return rng.random() * 100 < chance


# =============================================================================
# Effectiveness
# =============================================================================

def effectiveness(
    channel: AttackChannel,
    attacker: BaseAttributes,
    defender: BaseAttributes,
) -> float:
    """Effectiveness multiplier in [0.4, 2.5]."""
    value = 1.0
    if channel == AttackChannel.PHYSICAL:
        if attacker.strength > 7 and defender.stamina > defender.magic:
            value = 1.8
        elif defender.magic > 7 and defender.magic > defender.stamina:
            value = 0.6
        elif attacker.strength > defender.stamina + 2:
            value = 1.3
        if attacker.speed > defender.speed + 3:
            value *= 1.2
    else:
        if attacker.magic > 7 and defender.speed > defender.energy:
            value = 1.8
        elif defender.energy > 7 and defender.energy > defender.speed:
            value = 0.6
        elif attacker.magic > defender.energy + 2:
            value = 1.3
        if attacker.energy > defender.magic + 3:
            value *= 1.2
    return max(0.4, min(2.5, value))


def effectiveness_label(multiplier: float) -> str:
    if multiplier >= 2.0:
        return "devastatingly effective"
    if multiplier >= 1.8:
        return "extremely effective"
    if multiplier >= 1.5:
        return "super effective"
    if multiplier >= 1.3:
        return "very effective"
    if multiplier >= 1.1:
        return "effective"
    if multiplier <= 0.4:
        return "barely effective"
    if multiplier <= 0.6:
        return "not very effective"
    if multiplier <= 0.8:
        return "somewhat effective"
    return "normal"


def choose_channel(creature: Creature) -> AttackChannel:
    stats = creature.stats
    if stats.physical_attack >= stats.magical_attack:
        return AttackChannel.PHYSICAL
    return AttackChannel.MAGICAL


# =============================================================================
# Damage
# =============================================================================

@dataclass(frozen=True)
class DamageResult:
    damage: int
    was_critical: bool = False
    was_dodged: bool = False
    multiplier: float = 1.0
    effectiveness: str = "normal"
    channel: AttackChannel = AttackChannel.PHYSICAL


def mitigate(raw: float, attack_value: float, defense_value: float) -> int:
    """Apply percentage defense mitigation and the damage floor."""
    reduction = min(REDUCTION_CAP, defense_value / (defense_value + attack_value * ATTACK_FACTOR))
    damage = max(DAMAGE_FLOOR, round_half_up(raw * (1 - reduction)))
    if attack_value > defense_value * 2:
        damage = round_half_up(damage * OVERWHELMING_MULTIPLIER)
    return damage


def calculate_damage(
    attacker: Creature,
    defender: Creature,
    rng: random.Random,
    channel: AttackChannel | None = None,
    attack_bonus: int = 0,
) -> DamageResult:
    """
    Compute the damage of one attack. Never raises.

    Creatures without derived stats resolve as a minimal-damage attack.
    """
    if attacker.derived is None or defender.derived is None:
        logger.error(
            "Invalid attack between %s and %s: missing stats",
            attacker.creature_id, defender.creature_id,
        )
        return DamageResult(damage=INVALID_ATTACK_DAMAGE)

    channel = channel or choose_channel(attacker)
    if channel == AttackChannel.PHYSICAL:
        attack_value = attacker.derived.physical_attack + attack_bonus
        defense_value = defender.derived.physical_defense
    else:
        attack_value = attacker.derived.magical_attack + attack_bonus
        defense_value = defender.derived.magical_defense

    if roll(rng, defender.derived.dodge_chance):
        return DamageResult(damage=0, was_dodged=True, channel=channel)

    multiplier = effectiveness(channel, attacker.base, defender.base)
    critical = roll(rng, attacker.derived.critical_chance)
    variance = VARIANCE_LOW + rng.random() * VARIANCE_SPAN

    raw = attack_value * multiplier * variance * (CRITICAL_MULTIPLIER if critical else 1.0)
    damage = mitigate(raw, attack_value, defense_value)
    logger.debug(
        "%s -> %s: %s attack %d vs defense %d, raw %.1f, final %d",
        attacker.species_name, defender.species_name, channel.value,
        attack_value, defense_value, raw, damage,
    )
    return DamageResult(
        damage=damage,
        was_critical=critical,
        multiplier=multiplier,
        effectiveness=effectiveness_label(multiplier),
        channel=channel,
    )


def expected_damage(attacker: Creature, defender: Creature) -> int:
    """Deterministic damage estimate: no dodge, no critical, variance 1.0."""
    if attacker.derived is None or defender.derived is None:
        return INVALID_ATTACK_DAMAGE
    channel = choose_channel(attacker)
    if channel == AttackChannel.PHYSICAL:
        attack_value = attacker.derived.physical_attack + attacker.next_attack_bonus
        defense_value = defender.derived.physical_defense
    else:
        attack_value = attacker.derived.magical_attack + attacker.next_attack_bonus
        defense_value = defender.derived.magical_defense
    raw = attack_value * effectiveness(channel, attacker.base, defender.base)
    return mitigate(raw, attack_value, defense_value)


# =============================================================================
# Attack
# =============================================================================

@dataclass(frozen=True)
class AttackOutcome:
    attacker: Creature
    defender: Creature
    damage: int
    was_critical: bool
    was_dodged: bool
    effectiveness: str
    channel: AttackChannel
    message: str


def _health_note(creature: Creature) -> str:
    if creature.is_defeated:
        if creature.rarity == Rarity.LEGENDARY:
            return f" {creature.species_name} falls in legendary fashion!"
        if creature.rarity == Rarity.EPIC:
            return f" {creature.species_name} has been epically defeated!"
        return f" {creature.species_name} was defeated!"
    ratio = creature.health_ratio
    if ratio < 0.2:
        return f" {creature.species_name} is critically wounded!"
    if ratio < 0.5:
        return f" {creature.species_name} is badly hurt!"
    return ""


def resolve_attack(
    attacker: Creature,
    defender: Creature,
    rng: random.Random,
    channel: AttackChannel | None = None,
) -> AttackOutcome:
    """Resolve one attack, consuming any charged attack bonus."""
    if attacker.derived is None or defender.derived is None:
        result = calculate_damage(attacker, defender, rng)
        health = max(0, defender.current_health - result.damage)
        return AttackOutcome(
            attacker=attacker,
            defender=defender.with_changes(current_health=health),
            damage=result.damage,
            was_critical=False,
            was_dodged=False,
            effectiveness="normal",
            channel=result.channel,
            message=f"{attacker.species_name}'s attack misfired for {result.damage} damage.",
        )

    channel = channel or choose_channel(attacker)
    bonus = attacker.next_attack_bonus
    if bonus:
        attacker = attacker.with_changes(next_attack_bonus=0)

    result = calculate_damage(attacker, defender, rng, channel, attack_bonus=bonus)
    a_name = attacker.species_name
    d_name = defender.species_name

    if result.was_dodged:
        return AttackOutcome(
            attacker=attacker,
            defender=defender,
            damage=0,
            was_critical=False,
            was_dodged=True,
            effectiveness=result.effectiveness,
            channel=channel,
            message=f"{a_name}'s {channel.value} attack was dodged by {d_name}!",
        )

    defender = defender.with_changes(
        current_health=max(0, defender.current_health - result.damage)
    )

    if result.was_critical and rng.random() < 0.3:
        defender = attach(defender, make_effect(
            "Critical Strike Trauma", 2,
            {"physical_defense": -3, "magical_defense": -3},
        ))
    if result.effectiveness in ("super effective", "extremely effective") and rng.random() < 0.4:
        defender = attach(defender, make_effect(
            "Elemental Weakness", 3,
            {"physical_defense": -2, "magical_defense": -2},
        ))

    message = f"{a_name} used a {channel.value} attack on {d_name}"
    if bonus:
        message = f"{a_name} unleashed a charged {channel.value} attack on {d_name}"
    if result.was_critical:
        message += " (Critical Hit!)"
    if result.effectiveness != "normal":
        message += f" - {result.effectiveness}!"
    message += f" dealing {result.damage} damage."
    message += _health_note(defender)

    return AttackOutcome(
        attacker=attacker,
        defender=defender,
        damage=result.damage,
        was_critical=result.was_critical,
        was_dodged=False,
        effectiveness=result.effectiveness,
        channel=channel,
        message=message,
    )


# =============================================================================
# Tools, spells, defend
# =============================================================================

@dataclass(frozen=True)
class ToolOutcome:
    creature: Creature
    effect: ItemEffect
    energy_gain: int
    message: str


def apply_tool(creature: Creature, item: Item, profile: DifficultyProfile) -> ToolOutcome:
    """Apply a tool to a creature."""
    effect = tool_effect(item, profile)
    if effect.stat_changes or effect.health_over_time or effect.charge:
        creature = attach(creature, make_effect(
            f"{item.name} Effect",
            effect.duration,
            effect.stat_changes,
            health_delta_per_tick=effect.health_over_time,
            source_power_level=effect.power_level,
            charge=effect.charge,
        ))

    message = f"Used {item.name} on {creature.species_name} ({effect.power_level} {item.effect.value})."
    if effect.health_change > 0:
        before = creature.current_health
        health = min(creature.stats.max_health, before + effect.health_change)
        creature = creature.with_changes(current_health=health)
        if health > before:
            message += f" Restored {health - before} health."
    if effect.energy_gain:
        message += f" Gained {effect.energy_gain} energy."

    return ToolOutcome(creature=creature, effect=effect, energy_gain=effect.energy_gain, message=message)


@dataclass(frozen=True)
class SpellOutcome:
    caster: Creature
    target: Creature
    effect: ItemEffect
    damage: int
    was_critical: bool
    energy_gain: int
    message: str


def _heal(creature: Creature, amount: int) -> tuple[Creature, int]:
    health = min(creature.stats.max_health, creature.current_health + amount)
    return creature.with_changes(current_health=health), health - creature.current_health


def apply_spell(
    caster: Creature,
    target: Creature,
    item: Item,
    profile: DifficultyProfile,
    rng: random.Random,
    same_side: bool = True,
) -> SpellOutcome:
    """
    Cast a spell from caster onto target.

    Offensive parts (damage, damage over time, stat drain) only land on
    an enemy target. Supportive parts (stat changes, healing over time,
    charge) go to the target when it is an ally, otherwise back to the
    caster. Direct healing only applies to a self-cast; Drain's
    self-heal only applies when the target is someone else.
    """
    effect = spell_effect(item, caster.base, profile)
    self_cast = caster.creature_id == target.creature_id
    enemy = not same_side and not self_cast
    parts = [f"{caster.species_name} cast {item.name}"]
    if not self_cast:
        parts[0] += f" on {target.species_name}"
    parts[0] += "."

    damage = 0
    critical = False
    if effect.damage and enemy:
        damage = effect.damage
        chance = min(5 + caster.base.magic // 2, SPELL_CRITICAL_CAP)
        critical = roll(rng, chance)
        if critical:
            damage = round_half_up(damage * SPELL_CRITICAL_MULTIPLIER)
            parts.append("Critical spell!")
        if effect.armor_piercing:
            damage += round_half_up(damage * ARMOR_PIERCING_BONUS)
        target = target.with_changes(current_health=max(0, target.current_health - damage))
        parts.append(f"It dealt {damage} damage.")

    if effect.healing and self_cast:
        target, healed = _heal(target, effect.healing)
        if healed:
            parts.append(f"{target.species_name} recovered {healed} health.")

    if effect.self_heal and not self_cast:
        caster, healed = _heal(caster, effect.self_heal)
        if healed:
            parts.append(f"{caster.species_name} drained {healed} health.")

    effect_name = f"{item.name} Effect"
    if effect.health_over_time < 0 and enemy:
        target = attach(target, make_effect(
            effect_name, effect.duration,
            health_delta_per_tick=effect.health_over_time,
            source_power_level=effect.power_level,
        ))

    support_hot = max(0, effect.health_over_time)
    if effect.stat_changes or support_hot or effect.charge:
        support = make_effect(
            effect_name, effect.duration, effect.stat_changes,
            health_delta_per_tick=support_hot,
            source_power_level=effect.power_level,
            charge=effect.charge,
        )
        if enemy:
            caster = attach(caster, support)
        else:
            target = attach(target, support)
            if self_cast:
                caster = target

    if effect.stat_drain and enemy:
        target = attach(target, make_effect(
            "Stat Drain", effect.duration, effect.stat_drain,
            source_power_level=effect.power_level,
        ))
    if effect.stat_gain and enemy:
        caster = attach(caster, make_effect(
            "Stolen Power", effect.duration, effect.stat_gain,
            source_power_level=effect.power_level,
        ))

    if self_cast:
        caster = target
    if effect.energy_gain:
        parts.append(f"Gained {effect.energy_gain} energy.")
    if damage:
        parts.append(_health_note(target).strip())

    return SpellOutcome(
        caster=caster,
        target=target,
        effect=effect,
        damage=damage,
        was_critical=critical,
        energy_gain=effect.energy_gain,
        message=" ".join(p for p in parts if p),
    )


def defend_creature(creature: Creature, profile: DifficultyProfile) -> Creature:
    """Put a creature in a defensive stance until its side's next turn."""
    bonus = DEFEND_RARITY_BONUS.get(creature.rarity, 1)
    physical = round_half_up(creature.stats.physical_defense * profile.defend_multiplier) + bonus
    magical = round_half_up(creature.stats.magical_defense * profile.defend_multiplier) + bonus
    stance = make_effect(
        STANCE_NAME, 1,
        {"physical_defense": physical, "magical_defense": magical},
        is_stance=True,
    )
    return attach(creature.with_changes(is_defending=True), stance)
