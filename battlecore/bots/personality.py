"""
Bot Personalities - Per-tier play styles for the opponent planner.

Personalities adjust:
- Evaluation weights (what the planner values in a board)
- Attack scoring weights (damage, eliminations, finishing, threat)
- Thresholds (emergency defense, minimum board presence)
- Randomness (for unpredictability at low tiers)

The difficulty profile decides how often the planner acts several
times per turn; the personality decides what it does with each action.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any

from ..engine_core.difficulty import Difficulty
from .evaluator import EvaluationWeights


@dataclass
class Personality:
    """
    A planner personality that defines play style.

    Personalities can be:
    - Predefined (one per difficulty tier)
    - Derived (strategy variants explored by the lookahead)
    """
    name: str
    description: str = ""

    # Evaluation weights
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)

    # Behavioral parameters
    risk_tolerance: float = 0.5  # 0 = avoid risk, 1 = embrace risk
    randomness: float = 0.1  # Probability of a random target

    # Attack pair scoring
    damage_weight: float = 2.0
    elimination_bonus: float = 50.0
    finish_weight: float = 30.0
    threat_weight: float = 0.0
    attack_power_weight: float = 0.5
    max_focus_attacks: int = 3

    # Deployment scoring
    deploy_attack_weight: float = 2.0
    deploy_health_weight: float = 0.1
    deploy_counter_bonus: float = 0.0
    deploy_form_weight: float = 5.0
    min_field_presence: int = 2

    # Defense thresholds (fractions of max health)
    emergency_health_ratio: float = 0.3
    cleanup_defend_ratio: float = 0.4

    # Items
    uses_items: bool = False

    def variant(self, name: str, **changes: Any) -> Personality:
        """Derive a named variant with some parameters changed."""
        return replace(self, name=name, **changes)


# ============================================================================
# Tier Personalities
# ============================================================================

EASY = Personality(
    name="Easy",
    description="Hits the most vulnerable target with its strongest creature",
    weights=EvaluationWeights(),
    risk_tolerance=0.7,
    randomness=0.25,
    damage_weight=1.0,
    elimination_bonus=20.0,
    finish_weight=10.0,
    threat_weight=0.0,
    attack_power_weight=1.0,
    max_focus_attacks=2,
    deploy_attack_weight=1.0,
    deploy_health_weight=0.1,
    deploy_counter_bonus=0.0,
    deploy_form_weight=0.0,
    min_field_presence=2,
    emergency_health_ratio=0.3,
    cleanup_defend_ratio=0.3,
    uses_items=False,
)


MEDIUM = Personality(
    name="Medium",
    description="Weighs damage against finishing off wounded creatures",
    weights=EvaluationWeights(),
    risk_tolerance=0.5,
    randomness=0.1,
    damage_weight=2.0,
    elimination_bonus=50.0,
    finish_weight=30.0,
    threat_weight=0.0,
    attack_power_weight=0.5,
    max_focus_attacks=3,
    deploy_attack_weight=2.0,
    deploy_health_weight=0.1,
    deploy_counter_bonus=0.0,
    deploy_form_weight=5.0,
    min_field_presence=2,
    emergency_health_ratio=0.4,
    cleanup_defend_ratio=0.4,
    uses_items=False,
)


HARD = Personality(
    name="Hard",
    description="Eliminates threats first and deploys counters",
    weights=EvaluationWeights(creature_power=0.7),
    risk_tolerance=0.4,
    randomness=0.05,
    damage_weight=3.0,
    elimination_bonus=100.0,
    finish_weight=50.0,
    threat_weight=0.5,
    attack_power_weight=0.0,
    max_focus_attacks=3,
    deploy_attack_weight=3.0,
    deploy_health_weight=0.2,
    deploy_counter_bonus=25.0,
    deploy_form_weight=8.0,
    min_field_presence=3,
    emergency_health_ratio=0.3,
    cleanup_defend_ratio=0.6,
    uses_items=True,
)


EXPERT = Personality(
    name="Expert",
    description="Hard-tier heuristics plus a short lookahead over strategies",
    weights=EvaluationWeights(creature_power=0.8, energy=1.5),
    risk_tolerance=0.3,
    randomness=0.0,
    damage_weight=3.0,
    elimination_bonus=120.0,
    finish_weight=50.0,
    threat_weight=0.7,
    attack_power_weight=0.0,
    max_focus_attacks=4,
    deploy_attack_weight=3.0,
    deploy_health_weight=0.2,
    deploy_counter_bonus=25.0,
    deploy_form_weight=8.0,
    min_field_presence=3,
    emergency_health_ratio=0.35,
    cleanup_defend_ratio=0.6,
    uses_items=True,
)


# All predefined personalities
PERSONALITIES: dict[str, Personality] = {
    "easy": EASY,
    "medium": MEDIUM,
    "hard": HARD,
    "expert": EXPERT,
}


def personality_for(difficulty: str | Difficulty) -> Personality:
    """Get the personality that plays a difficulty tier."""
    return PERSONALITIES[Difficulty.parse(difficulty).value]


def strategy_variants(base: Personality) -> list[Personality]:
    """
    Strategy variants explored by the lookahead.

    The base personality is always first; it is the fallback plan.
    """
    return [
        base,
        base.variant(
            "Aggressive",
            max_focus_attacks=6,
            emergency_health_ratio=0.15,
            cleanup_defend_ratio=0.0,
        ),
        base.variant(
            "Buildup",
            min_field_presence=6,
            deploy_attack_weight=4.0,
            max_focus_attacks=1,
        ),
        base.variant(
            "Fortify",
            emergency_health_ratio=0.5,
            cleanup_defend_ratio=0.8,
            max_focus_attacks=2,
        ),
    ]
