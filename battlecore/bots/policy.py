"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a battle state and returns a decision. Policies can
also plan a whole turn: the default plan_turn asks select_action
repeatedly against a simulated state until the policy ends its turn.
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions as generate_legal_actions
from ..engine_core.reducer import apply_action

if TYPE_CHECKING:
    from ..engine_core.state import BattleState, SideId


class ExpectedRandom(random.Random):
    """
    Random source that always returns 0.5.

    Makes combat resolve to its expected outcome: no dodge, no critical
    hit and a variance of exactly 1.0. Planners simulate with it so
    they never peek at the real roll.
    """

    def random(self) -> float:
        return 0.5


@dataclass
class BotDecision:
    """
    One chosen action plus the reasoning behind it.

    The planner records its whole turn in evaluation_details;
    baselines leave it empty.
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0

    # Scoring trace
    evaluated_actions: int = 0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Something that can play one side of a battle.

    Subclasses pick single actions; plan_turn chains those picks into
    a full turn. OpponentPlanner overrides both.
    """

    max_actions_per_turn: int = 20

    @abstractmethod
    def select_action(
        self,
        state: BattleState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current battle state
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    def plan_turn(self, state: BattleState, side: SideId | None = None) -> list[Action]:
        """
        Plan every action of one turn; the list always ends with END_TURN.
        """
        side = side or state.active_side
        plan: list[Action] = []
        simulated = state
        while len(plan) < self.max_actions_per_turn and not simulated.is_terminal:
            legal = generate_legal_actions(simulated)
            if not legal:
                break
            action = self.select_action(simulated, legal).action
            if action.action_type == ActionType.END_TURN:
                break
            result = apply_action(simulated, action, rng=ExpectedRandom())
            if not result.success:
                break
            plan.append(action)
            simulated = result.new_state
        plan.append(Action.end_turn(side))
        return plan

    def get_name(self) -> str:
        """Name shown in logs and the CLI."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """Uniform choice over the legal actions, seeded for replays."""

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: BattleState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions to choose from")

        return BotDecision(
            action=self.rng.choice(legal_actions),
            explanation=f"Random pick of {len(legal_actions)}",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    Plays the first action the generator lists.

    Deploys come first in generator order, so this policy fills its
    field before it ever attacks. Handy as a predictable sparring side.
    """

    def select_action(
        self,
        state: BattleState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions to choose from")

        return BotDecision(
            action=legal_actions[0],
            explanation=legal_actions[0].describe(),
            evaluated_actions=1,
        )
