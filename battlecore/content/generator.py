"""
Content Generator - Builds opponent decks and starter collections.

This module handles:
- Rarity-weighted creature generation per difficulty tier
- The tier's stat bonus on opponent creatures
- Opponent deploy costs (cheap first cards so the opponent can open)
- Tool and spell allotment per tier
- A starter collection for the player (CLI demo, tests)

All randomness comes from a seeded random.Random for determinism.
"""

from __future__ import annotations
import random
from dataclasses import dataclass

from ..engine_core.creature import BaseAttributes, Creature, Rarity
from ..engine_core.difficulty import Difficulty, DifficultyProfile, get_profile
from ..engine_core.items import Item
from ..engine_core.state import OpponentConfig
from ..engine_core.stats import round_half_up
from .species import SPECIES, SPELL_TEMPLATES, TOOL_TEMPLATES, ItemTemplate, Species


# Extra deploy cost per rarity for opponent creatures
RARITY_DEPLOY_COST = {
    Rarity.COMMON: 0.0,
    Rarity.RARE: 1.5,
    Rarity.EPIC: 3.0,
    Rarity.LEGENDARY: 4.5,
}

MAX_DEPLOY_COST = 12

# The opponent's first two cards stay cheap enough to play early
OPENING_COST_CAPS = (6, 8)

# Evolution forms each rarity can roll
FORM_RANGE = {
    Rarity.COMMON: (0, 1),
    Rarity.RARE: (0, 2),
    Rarity.EPIC: (1, 2),
    Rarity.LEGENDARY: (2, 3),
}

MAX_ATTRIBUTE = 10


@dataclass(frozen=True)
class PlayerCollection:
    """A ready-to-play player loadout."""
    deck: tuple[Creature, ...]
    hand: tuple[Creature, ...]
    tools: tuple[Item, ...] = ()
    spells: tuple[Item, ...] = ()


def roll_rarity(rng: random.Random, weights: dict[str, float]) -> Rarity:
    """Pick a rarity from a {name: weight} table (zero weights never roll)."""
    table = [(Rarity.parse(name), weight) for name, weight in weights.items() if weight > 0]
    if not table:
        return Rarity.COMMON
    roll = rng.random() * sum(weight for _, weight in table)
    cumulative = 0.0
    for rarity, weight in table:
        cumulative += weight
        if roll < cumulative:
            return rarity
    return table[-1][0]


def opponent_deploy_cost(form: int, rarity: Rarity, position: int) -> int:
    """
    Deploy cost of a generated opponent creature.

    min(12, round(4 + form*1.5 + rarityCost)); the first card is capped
    at 6 and the second at 8.
    """
    cost = min(MAX_DEPLOY_COST, round_half_up(4 + form * 1.5 + RARITY_DEPLOY_COST[rarity]))
    if position < len(OPENING_COST_CAPS):
        cost = min(cost, OPENING_COST_CAPS[position])
    return max(1, cost)


def boosted(base: BaseAttributes, bonus: int) -> BaseAttributes:
    """Add a flat bonus to every attribute, capped at 10."""
    if not bonus:
        return base
    values = {name: min(MAX_ATTRIBUTE, value + bonus) for name, value in base.to_dict().items()}
    return BaseAttributes(**values)


def build_creature(
    species: Species,
    creature_id: str,
    rarity: Rarity | str = Rarity.COMMON,
    form: int = 0,
    stat_bonus: int = 0,
    energy_cost_override: int | None = None,
    combination_level: int = 0,
) -> Creature:
    """Battle-ready creature from a species template."""
    return Creature.battle_ready(
        creature_id=creature_id,
        species_name=species.name,
        rarity=rarity,
        form=form,
        base=boosted(species.base, stat_bonus),
        specialty_stats=species.specialty_stats,
        combination_level=combination_level,
        energy_cost_override=energy_cost_override,
    )


def build_item(template: ItemTemplate, item_id: str, rarity: Rarity | str, spell: bool) -> Item:
    factory = Item.spell if spell else Item.tool
    return factory(item_id, template.name, template.item_type, template.effect, rarity)


def _roll_items(
    rng: random.Random,
    templates: tuple[ItemTemplate, ...],
    count: int,
    prefix: str,
    profile: DifficultyProfile,
    spell: bool,
) -> tuple[Item, ...]:
    return tuple(
        build_item(
            rng.choice(templates),
            f"{prefix}-{i + 1}",
            roll_rarity(rng, profile.rarity_weights),
            spell,
        )
        for i in range(count)
    )


def generate_opponent(
    difficulty: str | Difficulty = Difficulty.MEDIUM,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> OpponentConfig:
    """
    Generate the opponent's deck and items for a tier.

    Args:
        difficulty: Tier name or Difficulty
        rng: Random source (takes precedence over seed)
        seed: Seed for a fresh random source

    Returns:
        OpponentConfig ready for start_battle
    """
    profile = get_profile(difficulty)
    rng = rng or random.Random(seed)
    species_pool = list(SPECIES.values())

    deck = []
    for position in range(profile.opponent_deck_size):
        species = rng.choice(species_pool)
        rarity = roll_rarity(rng, profile.rarity_weights)
        low, high = FORM_RANGE[rarity]
        form = rng.randint(low, high)
        deck.append(build_creature(
            species,
            creature_id=f"opp-{position + 1}",
            rarity=rarity,
            form=form,
            stat_bonus=profile.opponent_stat_bonus,
            energy_cost_override=opponent_deploy_cost(form, rarity, position),
        ))

    return OpponentConfig(
        deck=tuple(deck),
        tools=_roll_items(rng, TOOL_TEMPLATES, profile.opponent_tools, "opp-tool", profile, spell=False),
        spells=_roll_items(rng, SPELL_TEMPLATES, profile.opponent_spells, "opp-spell", profile, spell=True),
        difficulty=profile.name,
    )


def generate_player_collection(
    seed: int | None = None,
    size: int = 8,
    hand_size: int = 4,
    tools: int = 2,
    spells: int = 2,
) -> PlayerCollection:
    """
    A starter collection: mostly Common/Rare creatures at low forms.

    The first hand_size creatures form the opening hand.
    """
    rng = random.Random(seed)
    species_pool = list(SPECIES.values())
    starter_weights = {"Common": 0.6, "Rare": 0.3, "Epic": 0.1}

    creatures = []
    for i in range(size):
        rarity = roll_rarity(rng, starter_weights)
        creatures.append(build_creature(
            rng.choice(species_pool),
            creature_id=f"p-{i + 1}",
            rarity=rarity,
            form=rng.randint(0, 1),
        ))

    profile = get_profile(Difficulty.MEDIUM)
    return PlayerCollection(
        deck=tuple(creatures[hand_size:]),
        hand=tuple(creatures[:hand_size]),
        tools=_roll_items(rng, TOOL_TEMPLATES, tools, "p-tool", profile, spell=False),
        spells=_roll_items(rng, SPELL_TEMPLATES, spells, "p-spell", profile, spell=True),
    )
