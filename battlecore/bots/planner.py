"""
Opponent Planner - Tiered computer opponent.

The planner reads a battle snapshot and produces the ordered action
list for one opponent turn. It:
- Looks for a lethal attack sequence first
- Walks the candidate ladder (see candidates.py) one action at a time
- Simulates each chosen action with expected outcomes before picking
  the next, so the plan stays within the energy budget
- At expert tier, rolls strategy variants forward a few turns and keeps
  the one the evaluator likes best

The planner never peeks at real rolls: simulations use ExpectedRandom.
It is total: whatever happens, the plan ends with END_TURN.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..engine_core.action import Action, ActionType
from ..engine_core.reducer import apply_action
from .candidates import PlanningContext, find_lethal, next_candidate
from .evaluator import HeuristicEvaluator
from .personality import Personality, personality_for, strategy_variants
from .policy import BotDecision, BotPolicy, ExpectedRandom

if TYPE_CHECKING:
    from ..engine_core.state import BattleState, SideId

logger = logging.getLogger(__name__)


# Minimum energy for a turn to be considered for several actions
MULTI_ACTION_MIN_ENERGY = 4


@dataclass
class OpponentPlanner(BotPolicy):
    """
    Tiered opponent planner.

    Usage:
        planner = OpponentPlanner(seed=7)
        actions = planner.plan_turn(state)  # ends with END_TURN

    The personality defaults to the one for the battle's difficulty tier.
    """
    personality: Personality | None = None
    seed: int | None = None
    max_actions: int = 12
    rng: random.Random = None  # type: ignore

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random(self.seed)

    def plan_turn(self, state: BattleState, side: SideId | None = None) -> list[Action]:
        """
        Plan a whole turn for a side (the active side by default).

        Always returns at least [END_TURN]; planning errors are logged
        and degrade to ending the turn.
        """
        side = side or state.active_side
        if state.is_terminal:
            return [Action.end_turn(side)]
        try:
            plan = self._plan(state, side)
        except Exception:
            logger.warning("Planner failed for %s; ending turn", side.value, exc_info=True)
            return [Action.end_turn(side)]
        return plan + [Action.end_turn(side)]

    def select_action(
        self,
        state: BattleState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """First action of the planned turn."""
        plan = self.plan_turn(state)
        return BotDecision(
            action=plan[0],
            explanation=f"Planned {len(plan)} action(s) ({self._personality_for(state).name})",
            evaluated_actions=len(legal_actions),
            evaluation_details={"plan": [a.describe() for a in plan]},
        )

    def get_name(self) -> str:
        name = self.personality.name if self.personality else "auto"
        return f"OpponentPlanner({name})"

    # =========================================================================
    # Planning
    # =========================================================================

    def _personality_for(self, state: BattleState) -> Personality:
        return self.personality or personality_for(state.profile.difficulty)

    def _plan(self, state: BattleState, side: SideId) -> list[Action]:
        personality = self._personality_for(state)

        lethal = find_lethal(self._context(state, side, personality))
        if lethal:
            logger.debug("Lethal sequence for %s: %s", side.value,
                         [a.describe() for a in lethal])
            return lethal

        if state.profile.lookahead_turns > 0:
            return self._plan_with_lookahead(state, side, personality)
        return self._plan_heuristic(state, side, personality)

    def _context(self, state: BattleState, side: SideId, personality: Personality) -> PlanningContext:
        return PlanningContext(state=state, side_id=side, personality=personality, rng=self.rng)

    def _plan_heuristic(
        self,
        state: BattleState,
        side: SideId,
        personality: Personality,
        rng: random.Random | None = None,
    ) -> list[Action]:
        """
        Ladder-driven plan: one action, or several when the tier's
        multi-action roll succeeds and energy allows.
        """
        ctx = PlanningContext(state=state, side_id=side, personality=personality,
                              rng=rng or self.rng)
        multi = (
            ctx.energy >= MULTI_ACTION_MIN_ENERGY
            and ctx.rng.random() < state.profile.multi_action_chance
        )
        limit = self.max_actions if multi else 1

        plan: list[Action] = []
        while len(plan) < limit and not ctx.state.is_terminal:
            if plan:
                lethal = find_lethal(ctx)
                if lethal:
                    return plan + lethal
            candidate = next_candidate(ctx)
            if candidate is None:
                break
            result = apply_action(ctx.state, candidate.action, rng=ExpectedRandom())
            if not result.success:
                logger.warning("Planner proposed a rejected action %s: %s",
                               candidate.action.describe(), result.error)
                break
            plan.append(candidate.action)
            ctx.advance(result.new_state, candidate.action)
        return plan

    # =========================================================================
    # Lookahead
    # =========================================================================

    def _plan_with_lookahead(
        self,
        state: BattleState,
        side: SideId,
        personality: Personality,
    ) -> list[Action]:
        """
        Compare strategy variants by rolling them forward.

        The base personality's plan is the fallback; a variant replaces
        it only when its rollout beats the base by a clear margin.
        """
        evaluator = HeuristicEvaluator(weights=personality.weights)
        turns = state.profile.lookahead_turns
        margin = 10.0 * (1.0 - personality.risk_tolerance)

        scored: list[tuple[float, Personality, list[Action]]] = []
        for variant in strategy_variants(personality):
            plan = self._plan_heuristic(state, side, variant, rng=ExpectedRandom())
            final = self._rollout(state, side, variant, plan, turns)
            score = evaluator.evaluate(final, side).total_score
            scored.append((score, variant, plan))
            logger.debug("Lookahead %s: %.1f over %d actions", variant.name, score, len(plan))

        base_score, _, base_plan = scored[0]
        best_score, best_variant, best_plan = max(scored, key=lambda entry: entry[0])
        if best_score - base_score > margin:
            logger.debug("Lookahead picked %s (%.1f vs %.1f)", best_variant.name,
                         best_score, base_score)
            return best_plan
        # No clear winner: play the turn like the hard tier does
        return self._plan_heuristic(state, side, personality)

    def _rollout(
        self,
        state: BattleState,
        side: SideId,
        personality: Personality,
        first_plan: list[Action],
        turns: int,
    ) -> BattleState:
        """
        Play first_plan, then alternate whole turns for `turns` turns.

        Both sides play with expected outcomes; the other side is
        modelled with its own tier personality.
        """
        expected = ExpectedRandom()
        state = self._play(state, first_plan + [Action.end_turn(side)])
        for _ in range(turns - 1):
            if state.is_terminal:
                break
            acting = state.active_side
            acting_personality = (
                personality if acting == side else personality_for(state.profile.difficulty)
            )
            plan = find_lethal(PlanningContext(state, acting, acting_personality, expected))
            if not plan:
                plan = self._plan_heuristic(state, acting, acting_personality, rng=expected)
            state = self._play(state, plan + [Action.end_turn(acting)])
        return state

    @staticmethod
    def _play(state: BattleState, actions: list[Action]) -> BattleState:
        expected = ExpectedRandom()
        for action in actions:
            if state.is_terminal:
                break
            result = apply_action(state, action, rng=expected)
            if result.success:
                state = result.new_state
        return state


def plan_opponent_turn(state: BattleState, seed: int | None = None) -> list[Action]:
    """Convenience function: plan the active side's turn with its tier personality."""
    return OpponentPlanner(seed=seed).plan_turn(state)
