"""
Action System - Actions, payloads, and results.

Actions are the tagged union a side submits while it holds the turn:
Deploy, Attack, UseTool, UseSpell, Defend and EndTurn.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import SideId


class ActionType(Enum):
    """Types of actions in the system."""
    DEPLOY = "deploy"
    ATTACK = "attack"
    USE_TOOL = "use_tool"
    USE_SPELL = "use_spell"
    DEFEND = "defend"
    END_TURN = "end_turn"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types read different fields; validation happens
    in the reducer.
    """
    # Acting side; None means "whoever holds the turn"
    side: SideId | None = None

    # Deploy/Defend creature, Attack attacker, UseSpell caster
    creature_id: str | None = None

    # Attack defender, UseTool/UseSpell target
    target_id: str | None = None

    # UseTool/UseSpell item
    item_id: str | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the battle state.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def deploy(cls, creature_id: str, side: SideId | None = None) -> Action:
        """Factory for deploy action."""
        return cls(ActionType.DEPLOY, ActionPayload(side=side, creature_id=creature_id))

    @classmethod
    def attack(cls, attacker_id: str, defender_id: str, side: SideId | None = None) -> Action:
        """Factory for attack action."""
        return cls(
            ActionType.ATTACK,
            ActionPayload(side=side, creature_id=attacker_id, target_id=defender_id),
        )

    @classmethod
    def use_tool(cls, tool_id: str, target_id: str, side: SideId | None = None) -> Action:
        """Factory for tool action."""
        return cls(
            ActionType.USE_TOOL,
            ActionPayload(side=side, item_id=tool_id, target_id=target_id),
        )

    @classmethod
    def use_spell(
        cls,
        spell_id: str,
        caster_id: str,
        target_id: str | None = None,
        side: SideId | None = None,
    ) -> Action:
        """Factory for spell action. The target defaults to the caster."""
        return cls(
            ActionType.USE_SPELL,
            ActionPayload(side=side, item_id=spell_id, creature_id=caster_id, target_id=target_id),
        )

    @classmethod
    def defend(cls, creature_id: str, side: SideId | None = None) -> Action:
        """Factory for defend action."""
        return cls(ActionType.DEFEND, ActionPayload(side=side, creature_id=creature_id))

    @classmethod
    def end_turn(cls, side: SideId | None = None) -> Action:
        """Factory for end turn action."""
        return cls(ActionType.END_TURN, ActionPayload(side=side))

    def describe(self) -> str:
        p = self.payload
        if self.action_type == ActionType.DEPLOY:
            return f"deploy {p.creature_id}"
        if self.action_type == ActionType.ATTACK:
            return f"attack {p.creature_id} -> {p.target_id}"
        if self.action_type == ActionType.USE_TOOL:
            return f"tool {p.item_id} -> {p.target_id}"
        if self.action_type == ActionType.USE_SPELL:
            return f"spell {p.item_id} by {p.creature_id} -> {p.target_id or p.creature_id}"
        if self.action_type == ActionType.DEFEND:
            return f"defend {p.creature_id}"
        return "end turn"


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (always present; a rejection carries the input state
      plus one log entry explaining why nothing happened)
    - Error message and code (if rejected)
    - Log lines produced by the action
    """
    success: bool
    new_state: Any | None = None  # BattleState
    error: str | None = None
    error_code: str | None = None
    log: list[str] = field(default_factory=list)

    @classmethod
    def rejected(cls, state: Any, error: str, error_code: str) -> ActionResult:
        """Create a rejection that records the reason in the battle log."""
        return cls(
            success=False,
            new_state=state.append_log(error, state.active_side),
            error=error,
            error_code=error_code,
            log=[error],
        )

    @classmethod
    def success_with_state(cls, state: Any, log: list[str] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, log=log or [])
