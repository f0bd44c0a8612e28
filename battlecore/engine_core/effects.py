"""
Effect Ledger - Timed modifiers attached to creatures.

Operations:
- attach: add an effect and recompute stats
- tick: run once per creature at its owning side's end of turn
- clear_defending: drop the defensive stance at the owner's turn start
- remove_defeated / apply_death_effects: one-shot effects at removal

Effects stack additively and never merge. Every operation returns a
new Creature; nothing is mutated in place.
"""

from __future__ import annotations

from .creature import ActiveEffect, Attribute, ChargeState, Creature, EffectKind, Rarity
from .difficulty import DifficultyProfile
from .stats import refresh_stats, round_half_up


STANCE_NAME = "Defensive Stance"

TICK_RARITY_FACTORS = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.1,
    Rarity.EPIC: 1.2,
    Rarity.LEGENDARY: 1.3,
}


def make_effect(
    name: str,
    duration: int,
    stat_delta: dict[str, int] | None = None,
    health_delta_per_tick: int = 0,
    source_power_level: str = "normal",
    charge: ChargeState | None = None,
    kind: EffectKind | None = None,
    is_stance: bool = False,
) -> ActiveEffect:
    """Build an unattached effect; attach() assigns its id."""
    stat_delta = {k: v for k, v in (stat_delta or {}).items() if v != 0}
    return ActiveEffect(
        effect_id="",
        name=name,
        kind=kind or ActiveEffect.classify(stat_delta, health_delta_per_tick, charge),
        remaining_duration=max(1, duration),
        stat_delta=stat_delta,
        health_delta_per_tick=health_delta_per_tick,
        source_power_level=source_power_level,
        charge=charge,
        is_stance=is_stance,
    )


def attach(creature: Creature, effect: ActiveEffect) -> Creature:
    """Attach an effect. Charge effects do not touch stats on attach."""
    if not effect.effect_id:
        effect = effect.with_changes(effect_id=creature.next_effect_id())
    creature = creature.with_changes(
        active_effects=creature.active_effects + (effect,),
        effects_applied=creature.effects_applied + 1,
    )
    return refresh_stats(creature)


def scaled_tick_health(delta: int, creature: Creature, profile: DifficultyProfile) -> int:
    """Per-tick health delta after tier and rarity scaling."""
    scaled = round_half_up(delta * profile.health_effect_multiplier)
    return round_half_up(scaled * TICK_RARITY_FACTORS.get(creature.rarity, 1.0))


def tick(creature: Creature, profile: DifficultyProfile) -> tuple[Creature, list[str]]:
    """
    Advance every effect on a creature by one turn.

    Health deltas are applied and clamped, charges progress, durations
    drop by one and expired effects are removed. Stance effects only
    gain the tier's defending bonus; clear_defending removes them.
    """
    messages: list[str] = []
    name = creature.species_name
    health = creature.current_health
    max_health = creature.stats.max_health
    bonus = creature.next_attack_bonus
    kept: list[ActiveEffect] = []

    for effect in creature.active_effects:
        if effect.is_stance:
            if profile.defending_tick_bonus:
                delta = dict(effect.stat_delta)
                for stat in ("physical_defense", "magical_defense"):
                    delta[stat] = delta.get(stat, 0) + profile.defending_tick_bonus
                effect = effect.with_changes(stat_delta=delta)
            kept.append(effect)
            continue

        if effect.health_delta_per_tick:
            change = scaled_tick_health(effect.health_delta_per_tick, creature, profile)
            before = health
            health = max(0, min(max_health, health + change))
            actual = health - before
            if actual > 0:
                messages.append(f"{name} recovered {actual} health from {effect.name}.")
            elif actual < 0:
                messages.append(f"{name} took {-actual} damage from {effect.name}.")

        if effect.charge is not None:
            charge = effect.charge
            progress = charge.progress + 1
            accumulated = charge.accumulated + charge.per_turn_bonus
            if progress >= charge.max_turns:
                released = accumulated + charge.final_burst
                bonus += released
                messages.append(
                    f"{name}'s {effect.name} is fully charged! Next attack gains {released} damage."
                )
                continue
            kept.append(effect.with_changes(
                charge=ChargeState(
                    per_turn_bonus=charge.per_turn_bonus,
                    final_burst=charge.final_burst,
                    max_turns=charge.max_turns,
                    progress=progress,
                    accumulated=accumulated,
                ),
                remaining_duration=max(1, charge.max_turns - progress),
            ))
            continue

        remaining = effect.remaining_duration - 1
        if remaining <= 0:
            messages.append(f"{effect.name} on {name} wore off.")
            continue
        kept.append(effect.with_changes(remaining_duration=remaining))

    updated = creature.with_changes(
        current_health=health,
        active_effects=tuple(kept),
        next_attack_bonus=bonus,
    )
    return refresh_stats(updated), messages


def clear_defending(creature: Creature) -> Creature:
    """Remove the defensive stance, if any."""
    if not creature.is_defending and not any(e.is_stance for e in creature.active_effects):
        return creature
    updated = creature.with_changes(
        is_defending=False,
        active_effects=tuple(e for e in creature.active_effects if not e.is_stance),
    )
    return refresh_stats(updated)


def apply_death_effects(
    fallen: Creature,
    survivors: list[Creature],
) -> tuple[list[Creature], list[str]]:
    """Apply the first matching death effect of a fallen creature to its surviving allies."""
    if not survivors:
        return survivors, []

    if fallen.rarity == Rarity.LEGENDARY:
        gift = f"{fallen.species_name}'s Final Gift"
        updated = []
        for ally in survivors:
            mods = dict(ally.permanent_modifications)
            mods["physical_attack"] = mods.get("physical_attack", 0) + 3
            mods["magical_attack"] = mods.get("magical_attack", 0) + 3
            updated.append(refresh_stats(ally.with_changes(permanent_modifications=mods)))
        return updated, [f"{fallen.species_name} falls! {gift} empowers its allies."]

    if fallen.has_specialty(Attribute.ENERGY):
        effect = make_effect("Energy Release", 3, {"energy_cost": -1})
        return (
            [attach(ally, effect) for ally in survivors],
            [f"{fallen.species_name} releases its stored energy to its allies!"],
        )

    if fallen.rarity == Rarity.EPIC:
        effect = make_effect("Epic Essence", 5, {
            "physical_attack": 1,
            "magical_attack": 1,
            "physical_defense": 1,
            "magical_defense": 1,
        })
        return (
            [attach(ally, effect) for ally in survivors],
            [f"{fallen.species_name}'s essence lingers with its allies."],
        )

    return survivors, []


def remove_defeated(field: tuple[Creature, ...]) -> tuple[tuple[Creature, ...], list[Creature], list[str]]:
    """
    Drop defeated creatures from a field.

    Returns (survivors, fallen, messages). Each fallen creature's death
    effect applies to every survivor of the same field.
    """
    survivors = [c for c in field if not c.is_defeated]
    fallen = [c for c in field if c.is_defeated]
    messages: list[str] = []
    for creature in fallen:
        messages.append(f"{creature.species_name} was defeated!")
        survivors, death_messages = apply_death_effects(creature, survivors)
        messages.extend(death_messages)
    return tuple(survivors), fallen, messages
