"""
Game Loop - Drives a battle between a player and the planner.

The loop:
1. Player submits an action
2. The reducer validates and applies it
3. If the player ended the turn, the planner plans the opponent turn
4. Each planned action is validated and applied in order; an action
   made invalid by an earlier one is skipped, not retried
5. Control returns to the player with every resolved log line

The whole opponent turn is computed eagerly; callers that want to
animate it replay the returned log.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..bots import BotPolicy, OpponentPlanner
from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.errors import RejectCode
from ..engine_core.reducer import RNG_STRIDE, apply_action
from ..engine_core.state import BattleState, SideId

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_PLAYER_ACTION = "waiting_player_action"
    RUNNING_OPPONENT = "running_opponent"
    GAME_OVER = "game_over"


@dataclass
class OpponentTurn:
    """Everything the opponent did in one turn."""
    state: BattleState
    log: list[str] = field(default_factory=list)
    actions_taken: list[Action] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class TurnResult:
    """
    Result of submitting one player action.

    Contains the new state, the log lines it produced and, when the
    player ended the turn, the opponent's whole turn.
    """
    success: bool
    loop_state: LoopState
    state: BattleState

    # Log lines from the player's action
    log: list[str] = field(default_factory=list)

    # Opponent turn, already resolved
    opponent_actions: list[str] = field(default_factory=list)
    opponent_log: list[str] = field(default_factory=list)

    # Rejection info
    error: str | None = None
    error_code: str | None = None

    # Game over info
    winner: str | None = None


def run_opponent_turn(
    state: BattleState,
    policy: BotPolicy | None = None,
    side: SideId = SideId.OPPONENT,
) -> OpponentTurn:
    """
    Plan and apply a full turn for the computer side.

    Rejected actions are skipped. If the plan somehow leaves the turn
    open, END_TURN is applied so control always returns to the player.
    """
    # Fresh planner stream per turn
    policy = policy or OpponentPlanner(seed=state.seed * RNG_STRIDE + state.turn_number)
    turn = OpponentTurn(state=state)
    if state.is_terminal or state.active_side != side:
        return turn

    for action in policy.plan_turn(state, side):
        if turn.state.is_terminal:
            break
        result = apply_action(turn.state, action)
        if not result.success:
            logger.warning("Skipping planned %s: %s", action.describe(), result.error)
            turn.skipped.append(action.describe())
            continue
        turn.state = result.new_state
        turn.actions_taken.append(action)
        turn.log.extend(result.log)
        if action.action_type == ActionType.END_TURN:
            break

    if not turn.state.is_terminal and turn.state.active_side == side:
        result = apply_action(turn.state, Action.end_turn(side))
        turn.state = result.new_state
        turn.actions_taken.append(Action.end_turn(side))
        turn.log.extend(result.log)
    return turn


class GameLoop:
    """
    The battle loop driver.

    Usage:
        loop = GameLoop(session)
        result = loop.submit_action(Action.attack("p1", "o1"))
        if result.opponent_log:
            show(result.opponent_log)
    """

    def __init__(self, session: Session):
        self.session = session
        self.state = LoopState.WAITING_PLAYER_ACTION
        self._sync()

    def submit_action(self, action: Action) -> TurnResult:
        """
        Apply a player action; run the opponent turn after END_TURN.

        Never raises for game reasons: rejections come back with
        success=False and the rejection logged in the battle.
        """
        session = self.session
        battle = session.battle
        session.touch()

        if action.payload.side is None:
            action = Action(action.action_type, _with_side(action.payload, SideId.PLAYER))
        elif action.payload.side != SideId.PLAYER and not battle.is_terminal:
            error = "Only the player's actions can be submitted"
            return TurnResult(
                success=False,
                loop_state=self.state,
                state=battle,
                error=error,
                error_code=RejectCode.NOT_YOUR_TURN.value,
            )

        result = apply_action(battle, action)
        session.battle = result.new_state
        turn_result = TurnResult(
            success=result.success,
            loop_state=self.state,
            state=session.battle,
            log=list(result.log),
            error=result.error,
            error_code=result.error_code,
        )

        if result.success and action.action_type == ActionType.END_TURN:
            self._run_opponent(turn_result)

        self._sync()
        turn_result.loop_state = self.state
        turn_result.state = session.battle
        if session.battle.winner is not None:
            turn_result.winner = session.battle.winner.value
        return turn_result

    def _run_opponent(self, turn_result: TurnResult) -> None:
        if self.session.battle.is_terminal:
            return
        if self.session.battle.active_side != SideId.OPPONENT:
            return
        self.state = LoopState.RUNNING_OPPONENT
        self.session.sync_state()
        opponent = run_opponent_turn(self.session.battle, self.session.planner)
        self.session.battle = opponent.state
        turn_result.opponent_actions = [a.describe() for a in opponent.actions_taken]
        turn_result.opponent_log = opponent.log
        logger.debug("Opponent turn: %s", turn_result.opponent_actions)

    def _sync(self) -> None:
        self.session.sync_state()
        if self.session.battle.is_terminal:
            self.state = LoopState.GAME_OVER
        else:
            self.state = LoopState.WAITING_PLAYER_ACTION


def _with_side(payload: ActionPayload, side: SideId) -> ActionPayload:
    return ActionPayload(
        side=side,
        creature_id=payload.creature_id,
        target_id=payload.target_id,
        item_id=payload.item_id,
    )
