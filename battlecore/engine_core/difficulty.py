"""
Difficulty Profiles - Per-tier tuning for the whole battle.

A DifficultyProfile is the single configuration record for a tier.
It is stored on the BattleState and handed explicitly to every
component that needs tuning:
- Field and hand caps
- Energy pool size and regeneration
- Defend, effect and tick scaling
- Opponent generation (deck size, rarity weights, stat bonus)
- Planner behaviour (aggression, multi-action chance, lethal margin)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Difficulty(Enum):
    """Difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: str | Difficulty) -> Difficulty:
        """Parse a tier name (case-insensitive)."""
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown difficulty: {value}") from None


@dataclass(frozen=True)
class DifficultyProfile:
    """
    Immutable tuning record for one difficulty tier.

    Engine rules read the caps, costs and multipliers.
    Content generation reads the opponent_* fields.
    The planner reads aggression, multi_action_chance,
    lethal_margin and lookahead_turns.
    """
    difficulty: Difficulty

    # Board caps
    max_field_size: int = 4
    max_hand_size: int = 5

    # Energy economy
    starting_energy: int = 12
    base_max_energy: int = 20
    base_energy_regen: int = 4
    opponent_regen_bonus: int = 0

    # Action costs (deploy reads the creature's own energy cost)
    attack_cost: int = 2
    defend_cost: int = 1
    spell_cost: int = 4
    tool_cost: int = 0

    # Effect scaling
    defend_multiplier: float = 0.6
    effect_power: float = 1.0
    health_effect_multiplier: float = 1.0
    defending_tick_bonus: int = 0

    # Opponent generation
    opponent_deck_size: int = 7
    opponent_initial_hand: int = 3
    opponent_stat_bonus: int = 0
    opponent_tools: int = 1
    opponent_spells: int = 1
    rarity_weights: dict[str, float] = field(default_factory=dict)

    # Planner
    multi_action_chance: float = 0.5
    aggression: float = 0.75
    lethal_margin: float = 1.0
    lookahead_turns: int = 0

    @property
    def name(self) -> str:
        return self.difficulty.value

    @property
    def label(self) -> str:
        return self.difficulty.value.capitalize()


EASY_PROFILE = DifficultyProfile(
    difficulty=Difficulty.EASY,
    max_field_size=3,
    max_hand_size=6,
    base_max_energy=18,
    base_energy_regen=3,
    opponent_regen_bonus=0,
    defend_multiplier=0.5,
    effect_power=0.9,
    health_effect_multiplier=1.0,
    defending_tick_bonus=0,
    opponent_deck_size=6,
    opponent_initial_hand=3,
    opponent_stat_bonus=0,
    opponent_tools=1,
    opponent_spells=0,
    rarity_weights={"Common": 0.6, "Rare": 0.3, "Epic": 0.1, "Legendary": 0.0},
    multi_action_chance=0.3,
    aggression=0.6,
    lethal_margin=1.0,
    lookahead_turns=0,
)


MEDIUM_PROFILE = DifficultyProfile(
    difficulty=Difficulty.MEDIUM,
    max_field_size=4,
    max_hand_size=5,
    base_max_energy=20,
    base_energy_regen=4,
    opponent_regen_bonus=1,
    defend_multiplier=0.6,
    effect_power=1.0,
    health_effect_multiplier=1.0,
    defending_tick_bonus=0,
    opponent_deck_size=7,
    opponent_initial_hand=3,
    opponent_stat_bonus=1,
    opponent_tools=1,
    opponent_spells=1,
    rarity_weights={"Common": 0.4, "Rare": 0.35, "Epic": 0.2, "Legendary": 0.05},
    multi_action_chance=0.5,
    aggression=0.75,
    lethal_margin=1.0,
    lookahead_turns=0,
)


HARD_PROFILE = DifficultyProfile(
    difficulty=Difficulty.HARD,
    max_field_size=5,
    max_hand_size=4,
    base_max_energy=22,
    base_energy_regen=5,
    opponent_regen_bonus=2,
    defend_multiplier=0.7,
    effect_power=1.2,
    health_effect_multiplier=1.3,
    defending_tick_bonus=2,
    opponent_deck_size=8,
    opponent_initial_hand=4,
    opponent_stat_bonus=2,
    opponent_tools=2,
    opponent_spells=1,
    rarity_weights={"Common": 0.2, "Rare": 0.35, "Epic": 0.3, "Legendary": 0.15},
    multi_action_chance=0.7,
    aggression=0.85,
    lethal_margin=0.9,
    lookahead_turns=0,
)


EXPERT_PROFILE = DifficultyProfile(
    difficulty=Difficulty.EXPERT,
    max_field_size=6,
    max_hand_size=4,
    base_max_energy=25,
    base_energy_regen=6,
    opponent_regen_bonus=3,
    defend_multiplier=0.8,
    effect_power=1.4,
    health_effect_multiplier=1.5,
    defending_tick_bonus=2,
    opponent_deck_size=9,
    opponent_initial_hand=4,
    opponent_stat_bonus=3,
    opponent_tools=2,
    opponent_spells=2,
    rarity_weights={"Common": 0.1, "Rare": 0.3, "Epic": 0.35, "Legendary": 0.25},
    multi_action_chance=0.9,
    aggression=0.95,
    lethal_margin=0.85,
    lookahead_turns=3,
)


PROFILES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: EASY_PROFILE,
    Difficulty.MEDIUM: MEDIUM_PROFILE,
    Difficulty.HARD: HARD_PROFILE,
    Difficulty.EXPERT: EXPERT_PROFILE,
}


def get_profile(difficulty: str | Difficulty) -> DifficultyProfile:
    """Get the profile for a tier (accepts the enum or its name)."""
    return PROFILES[Difficulty.parse(difficulty)]
