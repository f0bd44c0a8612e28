"""
Candidate Generators - The planner's priority ladder as small functions.

Each generator looks at a PlanningContext and returns the best
Candidate it can find, or None. The planner walks the generators in
order and takes the first candidate; tiers differ only through the
Personality and DifficultyProfile the context carries.

Ladder:
1. emergency_defense   - protect a creature about to fall
2. aggressive_attack   - focus fire by attack score (gated once a turn)
3. strategic_deployment - add presence when behind on board
4. item_support        - tools and spells (tiers that use items)
5. cleanup_attack      - hit enemies nobody has targeted yet
6. cleanup_defense     - protect valuable, wounded creatures

Lethal search runs before the ladder and supersedes it.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field
from typing import Callable

from ..engine_core.action import Action, ActionType
from ..engine_core.combat import expected_damage
from ..engine_core.creature import Attribute, Creature
from ..engine_core.difficulty import DifficultyProfile
from ..engine_core.items import EffectName, Item, spell_effect
from ..engine_core.state import BattleState, Side, SideId
from .evaluator import (
    BoardAnalysis,
    analyze_board,
    attack_score,
    defense_priority,
    deployment_score,
    threat_level,
)
from .personality import Personality

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """A scored action proposed by one generator."""
    action: Action
    score: float
    reason: str
    source: str = ""


@dataclass
class PlanningContext:
    """
    Everything a generator may read, plus per-turn bookkeeping.

    state is the planner's simulated state; it advances as the plan
    grows so later generators see earlier actions' expected results.
    """
    state: BattleState
    side_id: SideId
    personality: Personality
    rng: random.Random
    targeted: set[str] = field(default_factory=set)
    attacks_made: int = 0
    attack_gate: bool | None = None

    @property
    def profile(self) -> DifficultyProfile:
        return self.state.profile

    @property
    def own(self) -> Side:
        return self.state.side(self.side_id)

    @property
    def enemy(self) -> Side:
        return self.state.side(self.side_id.other)

    @property
    def energy(self) -> int:
        return self.own.energy

    def analysis(self) -> BoardAnalysis:
        return analyze_board(self.own, self.enemy)

    def advance(self, state: BattleState, action: Action) -> None:
        """Record an accepted action and move to its resulting state."""
        if action.action_type == ActionType.ATTACK and action.payload.target_id:
            self.targeted.add(action.payload.target_id)
            self.attacks_made += 1
        self.state = state


GeneratorFn = Callable[[PlanningContext], "Candidate | None"]


# =============================================================================
# Shared helpers
# =============================================================================

def _ready_attackers(ctx: PlanningContext) -> list[Creature]:
    """Creatures free to attack; the ones put in a stance this turn stay back."""
    ready = [c for c in ctx.own.field if not c.is_defending]
    return ready or list(ctx.own.field)


def best_attack(
    ctx: PlanningContext,
    targets: list[Creature] | None = None,
    source: str = "",
) -> Candidate | None:
    """Highest-scoring attacker/target pair, or a random pair for erratic personalities."""
    if ctx.energy < ctx.profile.attack_cost:
        return None
    attackers = _ready_attackers(ctx)
    targets = list(ctx.enemy.field) if targets is None else targets
    if not attackers or not targets:
        return None

    p = ctx.personality
    if p.randomness and ctx.rng.random() < p.randomness:
        attacker = max(attackers, key=lambda c: c.attack_power)
        target = ctx.rng.choice(targets)
        return Candidate(
            action=Action.attack(attacker.creature_id, target.creature_id, ctx.side_id),
            score=0.0,
            reason=f"{attacker.species_name} lashes out at {target.species_name}",
            source=source,
        )

    best: Candidate | None = None
    for attacker in attackers:
        for target in targets:
            damage = expected_damage(attacker, target)
            score = attack_score(
                attacker, target, damage,
                damage_weight=p.damage_weight,
                elimination_bonus=p.elimination_bonus,
                finish_weight=p.finish_weight,
                threat_weight=p.threat_weight,
                attack_power_weight=p.attack_power_weight,
            )
            if best is None or score > best.score:
                best = Candidate(
                    action=Action.attack(attacker.creature_id, target.creature_id, ctx.side_id),
                    score=score,
                    reason=f"{attacker.species_name} -> {target.species_name} (~{damage} dmg)",
                    source=source,
                )
    return best


ATTACK_CHANCE_BY_RATIO = (
    (1.2, 0.95),
    (1.0, 0.85),
    (0.8, 0.7),
)


def should_attack(ctx: PlanningContext) -> bool:
    """Roll once per turn whether the board favors an attack sequence."""
    analysis = ctx.analysis()
    if analysis.enemy_count == 0:
        return False
    if analysis.low_health_enemies:
        return True
    chance = 0.5
    for ratio, ratio_chance in ATTACK_CHANCE_BY_RATIO:
        if analysis.power_ratio >= ratio:
            chance = ratio_chance
            break
    chance = max(chance, ctx.profile.aggression)
    return ctx.rng.random() < chance


# =============================================================================
# Lethal search
# =============================================================================

def find_lethal(ctx: PlanningContext) -> list[Action] | None:
    """
    Attack sequence expected to clear the enemy field this turn.

    Greedy: weakest targets first, each hit by the attacker with the
    highest expected damage against it, until the target's health
    times the tier's margin is covered. Returns None when the energy
    budget cannot cover every target.
    """
    enemies = sorted(ctx.enemy.field, key=lambda c: c.current_health)
    attackers = list(ctx.own.field)
    if not enemies or not attackers:
        return None

    budget = ctx.energy // ctx.profile.attack_cost
    margin = ctx.profile.lethal_margin
    charged = {c.creature_id for c in attackers if c.next_attack_bonus}
    plan: list[Action] = []

    for target in enemies:
        required = target.current_health * margin
        dealt = 0
        while dealt < required:
            if len(plan) >= budget:
                return None
            attacker, damage = max(
                (
                    (a, expected_damage(
                        a if a.creature_id in charged else a.with_changes(next_attack_bonus=0),
                        target,
                    ))
                    for a in attackers
                ),
                key=lambda pair: pair[1],
            )
            charged.discard(attacker.creature_id)
            plan.append(Action.attack(attacker.creature_id, target.creature_id, ctx.side_id))
            dealt += damage

    logger.debug("Lethal found for %s: %d attacks", ctx.side_id.value, len(plan))
    return plan


# =============================================================================
# Ladder
# =============================================================================

def emergency_defense(ctx: PlanningContext) -> Candidate | None:
    """Defend the most valuable creature below the emergency threshold."""
    if ctx.energy < ctx.profile.defend_cost or not ctx.enemy.field:
        return None
    threshold = ctx.personality.emergency_health_ratio
    endangered = [
        c for c in ctx.own.field
        if not c.is_defending and c.health_ratio < threshold
    ]
    if not endangered:
        return None
    creature = max(endangered, key=defense_priority)
    return Candidate(
        action=Action.defend(creature.creature_id, ctx.side_id),
        score=defense_priority(creature),
        reason=f"{creature.species_name} is at {creature.health_ratio:.0%} health",
        source="emergency_defense",
    )


def aggressive_attack(ctx: PlanningContext) -> Candidate | None:
    """Focus attacks while the board favors it, up to the personality's cap."""
    if ctx.attacks_made >= ctx.personality.max_focus_attacks:
        return None
    if ctx.energy < ctx.profile.attack_cost or not ctx.enemy.field:
        return None
    if ctx.attack_gate is None:
        ctx.attack_gate = should_attack(ctx)
    if not ctx.attack_gate:
        return None
    return best_attack(ctx, source="aggressive_attack")


def strategic_deployment(ctx: PlanningContext) -> Candidate | None:
    """Deploy the best value-per-energy creature when behind on board presence."""
    own, enemy = ctx.own, ctx.enemy
    if len(own.field) >= ctx.profile.max_field_size:
        return None
    behind = len(own.field) < len(enemy.field)
    thin = len(own.field) < ctx.personality.min_field_presence
    if not (behind or thin):
        return None
    affordable = [c for c in own.hand if c.deploy_cost <= ctx.energy]
    if not affordable:
        return None

    p = ctx.personality
    losing = ctx.analysis().power_deficit > 0

    def score(creature: Creature) -> float:
        return deployment_score(
            creature, enemy.field,
            attack_weight=p.deploy_attack_weight if losing else max(1.0, p.deploy_attack_weight / 3),
            health_weight=p.deploy_health_weight,
            counter_bonus=p.deploy_counter_bonus,
            form_weight=p.deploy_form_weight,
        )

    creature = max(affordable, key=score)
    return Candidate(
        action=Action.deploy(creature.creature_id, ctx.side_id),
        score=score(creature),
        reason=f"deploy {creature.species_name} ({creature.deploy_cost} energy)",
        source="strategic_deployment",
    )


def _tool_candidate(ctx: PlanningContext, tool: Item) -> Candidate | None:
    field_ = list(ctx.own.field)
    if not field_:
        return None
    if tool.effect == EffectName.SHIELD or tool.item_type == Attribute.STAMINA:
        wounded = [c for c in field_ if c.health_ratio < 0.6]
        if not wounded:
            return None
        target = min(wounded, key=lambda c: c.health_ratio)
        score = (1 - target.health_ratio) * 100
    elif tool.item_type == Attribute.ENERGY:
        if ctx.energy >= ctx.profile.attack_cost * 2:
            return None
        target = max(field_, key=lambda c: c.attack_power)
        score = 40.0
    else:
        if not ctx.enemy.field:
            return None
        target = max(field_, key=lambda c: c.attack_power)
        score = 30.0 + target.attack_power * 0.5
    return Candidate(
        action=Action.use_tool(tool.item_id, target.creature_id, ctx.side_id),
        score=score,
        reason=f"{tool.name} on {target.species_name}",
        source="item_support",
    )


def _spell_candidate(ctx: PlanningContext, spell: Item) -> Candidate | None:
    field_ = list(ctx.own.field)
    if not field_ or ctx.energy < ctx.profile.spell_cost:
        return None
    caster = max(field_, key=lambda c: c.base.get(spell.item_type))
    effect = spell_effect(spell, caster.base, ctx.profile)

    if effect.damage:
        if not ctx.enemy.field:
            return None
        target = max(
            ctx.enemy.field,
            key=lambda c: (effect.damage >= c.current_health, threat_level(c)),
        )
        return Candidate(
            action=Action.use_spell(spell.item_id, caster.creature_id, target.creature_id, ctx.side_id),
            score=effect.damage * 2.0,
            reason=f"{spell.name} on {target.species_name} (~{effect.damage} dmg)",
            source="item_support",
        )

    if effect.healing:
        wounded = [c for c in field_ if c.health_ratio < 0.5]
        if not wounded:
            return None
        target = min(wounded, key=lambda c: c.health_ratio)
        return Candidate(
            action=Action.use_spell(spell.item_id, target.creature_id, None, ctx.side_id),
            score=effect.healing * 1.5,
            reason=f"{target.species_name} heals with {spell.name}",
            source="item_support",
        )

    if not ctx.enemy.field:
        return None
    target = max(field_, key=lambda c: c.attack_power)
    return Candidate(
        action=Action.use_spell(spell.item_id, target.creature_id, None, ctx.side_id),
        score=20.0,
        reason=f"{target.species_name} empowered by {spell.name}",
        source="item_support",
    )


def item_support(ctx: PlanningContext) -> Candidate | None:
    """Best tool or spell use, for personalities that use items."""
    if not ctx.personality.uses_items:
        return None
    candidates = [_tool_candidate(ctx, tool) for tool in ctx.own.tools]
    candidates += [_spell_candidate(ctx, spell) for spell in ctx.own.spells]
    candidates = [c for c in candidates if c is not None]
    if not candidates:
        return None
    return max(candidates, key=lambda c: c.score)


def cleanup_attack(ctx: PlanningContext) -> Candidate | None:
    """Spend leftover energy on enemies not attacked yet this turn."""
    untargeted = [c for c in ctx.enemy.field if c.creature_id not in ctx.targeted]
    if not untargeted:
        return None
    return best_attack(ctx, targets=untargeted, source="cleanup_attack")


def cleanup_defense(ctx: PlanningContext) -> Candidate | None:
    """Defend the most valuable wounded creature with leftover energy."""
    if ctx.energy < ctx.profile.defend_cost or not ctx.enemy.field:
        return None
    threshold = ctx.personality.cleanup_defend_ratio
    vulnerable = [
        c for c in ctx.own.field
        if not c.is_defending and c.health_ratio < threshold
    ]
    if not vulnerable:
        return None
    creature = max(vulnerable, key=defense_priority)
    return Candidate(
        action=Action.defend(creature.creature_id, ctx.side_id),
        score=defense_priority(creature),
        reason=f"protect {creature.species_name}",
        source="cleanup_defense",
    )


CANDIDATE_GENERATORS: tuple[tuple[str, GeneratorFn], ...] = (
    ("emergency_defense", emergency_defense),
    ("aggressive_attack", aggressive_attack),
    ("strategic_deployment", strategic_deployment),
    ("item_support", item_support),
    ("cleanup_attack", cleanup_attack),
    ("cleanup_defense", cleanup_defense),
)


def next_candidate(ctx: PlanningContext) -> Candidate | None:
    """First candidate produced by walking the ladder in order."""
    for name, generator in CANDIDATE_GENERATORS:
        candidate = generator(ctx)
        if candidate is not None:
            logger.debug("%s proposes %s (%.1f): %s", name, candidate.action.describe(),
                         candidate.score, candidate.reason)
            return candidate
    return None
