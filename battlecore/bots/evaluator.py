"""
Heuristic Evaluator - Scores battle states and candidate moves.

The evaluator assigns a numeric score to battle states based on:
- Board features (creature count, power, remaining health)
- Resource features (energy, hand, deck, items)
- Threat features (the other side's board)

It also hosts the scoring helpers the planner's candidate generators
share: threat level, attack pair score, deployment score and defense
priority. Weights can be adjusted to create different personalities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..engine_core.creature import Creature, Rarity
from ..engine_core.stats import ADVANTAGE_CYCLE, creature_power

if TYPE_CHECKING:
    from ..engine_core.state import BattleState, Side, SideId


@dataclass
class EvaluationWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance.
    Can be adjusted to create different play styles.
    """
    # Board-related
    creature_count: float = 15.0
    creature_power: float = 0.5
    field_health: float = 0.3

    # Resource-related
    energy: float = 1.0
    hand_size: float = 4.0
    deck_size: float = 2.0
    item_count: float = 3.0

    # Opponent-related
    opponent_penalty: float = -1.0  # Multiply the other side's score by this


@dataclass
class StateEvaluation:
    """
    Result of evaluating a battle state.
    """
    total_score: float
    side_scores: dict[str, float] = field(default_factory=dict)
    feature_breakdown: dict[str, float] = field(default_factory=dict)


@dataclass
class BoardAnalysis:
    """Summary of both boards from one side's perspective."""
    own_power: int
    enemy_power: int
    own_health: int
    enemy_health: int
    own_count: int
    enemy_count: int
    low_health_enemies: int

    @property
    def power_ratio(self) -> float:
        return self.own_power / max(self.enemy_power, 1)

    @property
    def power_deficit(self) -> int:
        return self.enemy_power - self.own_power


def analyze_board(own: Side, enemy: Side) -> BoardAnalysis:
    return BoardAnalysis(
        own_power=sum(creature_power(c) for c in own.field),
        enemy_power=sum(creature_power(c) for c in enemy.field),
        own_health=own.field_health,
        enemy_health=enemy.field_health,
        own_count=len(own.field),
        enemy_count=len(enemy.field),
        low_health_enemies=sum(1 for c in enemy.field if c.health_ratio < 0.3),
    )


# =============================================================================
# Scoring helpers
# =============================================================================

THREAT_RARITY = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.5,
    Rarity.EPIC: 2.0,
    Rarity.LEGENDARY: 3.0,
}

VALUE_RARITY = {
    Rarity.COMMON: 5,
    Rarity.RARE: 10,
    Rarity.EPIC: 20,
    Rarity.LEGENDARY: 30,
}

DEFENSE_RARITY = {
    Rarity.COMMON: 5,
    Rarity.RARE: 15,
    Rarity.EPIC: 30,
    Rarity.LEGENDARY: 50,
}


def threat_level(creature: Creature) -> float:
    """How dangerous a creature is to leave alive."""
    base = creature.attack_power * 2 + creature.stats.max_health * 0.1
    return base * THREAT_RARITY.get(creature.rarity, 1.0) * (1 + creature.form * 0.2)


def would_counter(attacker: Creature, defender: Creature) -> bool:
    """True if attacker's attributes beat defender's under the cyclic relation."""
    for strong, weak in ADVANTAGE_CYCLE:
        if attacker.base.get(strong) > 7 and defender.base.get(weak) > 6:
            return True
    return False


def attack_score(
    attacker: Creature,
    target: Creature,
    damage: int,
    damage_weight: float,
    elimination_bonus: float,
    finish_weight: float,
    threat_weight: float,
    attack_power_weight: float = 0.0,
) -> float:
    """
    Score one attacker/target pair.

    score = damage x w1 + elimination bonus + (1 - health ratio) x w2
            + threat x w3 + attack power x w4
    """
    score = damage * damage_weight
    if damage >= target.current_health:
        score += elimination_bonus
    score += (1 - target.health_ratio) * finish_weight
    score += threat_level(target) * threat_weight
    score += attacker.attack_power * attack_power_weight
    return score


def deployment_score(
    creature: Creature,
    enemy_field: tuple[Creature, ...],
    attack_weight: float,
    health_weight: float,
    counter_bonus: float,
    form_weight: float,
) -> float:
    """Value per energy of putting a hand creature on the field."""
    score = creature.stat_total
    score += creature.attack_power * attack_weight
    score += creature.stats.max_health * health_weight
    score += sum(counter_bonus for enemy in enemy_field if would_counter(creature, enemy))
    score += VALUE_RARITY.get(creature.rarity, 5)
    score += creature.form * form_weight
    return score / max(creature.deploy_cost, 1)


def defense_priority(creature: Creature) -> float:
    """How much a creature deserves protecting: rarity, form, missing health."""
    return (
        (1 - creature.health_ratio) * 100
        + DEFENSE_RARITY.get(creature.rarity, 5)
        + creature.form * 10
        + creature.attack_power * 0.5
    )


# =============================================================================
# State evaluation
# =============================================================================

class HeuristicEvaluator:
    """
    Evaluates battle states using weighted heuristics.

    Used by the planner's lookahead:
    1. Roll a candidate plan forward a few turns
    2. Evaluate the resulting states
    3. Keep the plan leading to the best state
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(self, state: BattleState, for_side: SideId) -> StateEvaluation:
        """
        Evaluate a battle state from one side's perspective.

        Returns positive score if state is good for that side,
        negative if bad.
        """
        own = state.side(for_side)
        enemy = state.side(for_side.other)

        own_score = self._evaluate_side(own)
        enemy_score = self._evaluate_side(enemy)
        relative_score = own_score + self.weights.opponent_penalty * enemy_score

        features = {
            "own_side": own_score,
            "other_side": enemy_score,
            "relative_score": relative_score,
        }

        winner = state.winner
        if winner == for_side:
            relative_score += 1000
        elif winner is not None:
            relative_score -= 1000

        return StateEvaluation(
            total_score=relative_score,
            side_scores={own.side_id.value: own_score, enemy.side_id.value: enemy_score},
            feature_breakdown=features,
        )

    def _evaluate_side(self, side: Side) -> float:
        w = self.weights
        score = 0.0
        score += len(side.field) * w.creature_count
        score += sum(creature_power(c) for c in side.field) * w.creature_power
        score += side.field_health * w.field_health
        score += side.energy * w.energy
        score += len(side.hand) * w.hand_size
        score += len(side.deck) * w.deck_size
        score += (len(side.tools) + len(side.spells)) * w.item_count
        return score
