"""
Resource Economy - Per-side energy pools.

maxEnergy grows with field size; regeneration grows with the energy
attribute of creatures on the field. spend() rejects rather than going
negative.
"""

from __future__ import annotations
import math
from typing import Iterable

from .creature import Attribute, Creature, Rarity
from .difficulty import DifficultyProfile
from .errors import ActionRejected, RejectCode
from .stats import round_half_up


REGEN_RARITY_FACTORS = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.1,
    Rarity.EPIC: 1.3,
    Rarity.LEGENDARY: 1.5,
}


def max_energy(field: Iterable[Creature], profile: DifficultyProfile) -> int:
    return profile.base_max_energy + math.floor(len(list(field)) * 0.5)


def regen_amount(
    field: Iterable[Creature],
    profile: DifficultyProfile,
    is_opponent: bool = False,
) -> int:
    """Energy regenerated at the start of a side's turn."""
    creatures = list(field)
    contribution = 0.0
    specialists = 0
    for creature in creatures:
        share = creature.base.energy * 0.3
        share *= REGEN_RARITY_FACTORS.get(creature.rarity, 1.0)
        share *= 1 + creature.form * 0.1
        contribution += share
        if creature.has_specialty(Attribute.ENERGY):
            specialists += 1
    amount = round_half_up(profile.base_energy_regen + contribution + specialists)
    if is_opponent:
        amount += profile.opponent_regen_bonus
    return amount


def clamp_energy(energy: int, field: Iterable[Creature], profile: DifficultyProfile) -> int:
    return max(0, min(max_energy(field, profile), energy))


def regenerate(
    energy: int,
    field: Iterable[Creature],
    profile: DifficultyProfile,
    is_opponent: bool = False,
) -> tuple[int, int]:
    """Return (new_energy, amount_gained) after regeneration."""
    creatures = list(field)
    new_energy = clamp_energy(energy + regen_amount(creatures, profile, is_opponent), creatures, profile)
    return new_energy, max(0, new_energy - energy)


def can_afford(energy: int, amount: int) -> bool:
    return energy >= amount


def spend(energy: int, amount: int) -> int:
    """Deduct amount from energy, or raise ActionRejected if it cannot be paid."""
    if energy < amount:
        raise ActionRejected(
            f"Not enough energy (need {amount}, have {energy})",
            RejectCode.NOT_ENOUGH_ENERGY,
        )
    return max(0, energy - amount)
