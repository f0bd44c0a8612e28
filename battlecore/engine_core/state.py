"""
Battle State - Immutable snapshot of a battle.

Design principles:
- Immutable: every transition returns a new BattleState
- Serializable: plain dataclasses, enums and tuples
- Single writer: only the reducer produces new states
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .creature import Creature
from .difficulty import DifficultyProfile, MEDIUM_PROFILE
from .items import Item


class BattlePhase(Enum):
    """High-level battle phases."""
    SETUP = "setup"
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class SideId(Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> SideId:
        return SideId.OPPONENT if self == SideId.PLAYER else SideId.PLAYER


@dataclass(frozen=True)
class LogEntry:
    """One line of the battle log."""
    turn: int
    message: str
    side: SideId | None = None


@dataclass(frozen=True)
class Side:
    """Everything one side owns: field, hand, deck, energy and items."""
    side_id: SideId
    field: tuple[Creature, ...] = ()
    hand: tuple[Creature, ...] = ()
    deck: tuple[Creature, ...] = ()
    energy: int = 0
    tools: tuple[Item, ...] = ()
    spells: tuple[Item, ...] = ()

    @property
    def is_exhausted(self) -> bool:
        """A side with nothing left on field, in hand or in deck has lost."""
        return not self.field and not self.hand and not self.deck

    @property
    def field_health(self) -> int:
        return sum(c.current_health for c in self.field)

    def find_on_field(self, creature_id: str) -> Creature | None:
        for creature in self.field:
            if creature.creature_id == creature_id:
                return creature
        return None

    def find_in_hand(self, creature_id: str) -> Creature | None:
        for creature in self.hand:
            if creature.creature_id == creature_id:
                return creature
        return None

    def find_tool(self, item_id: str) -> Item | None:
        return next((t for t in self.tools if t.item_id == item_id), None)

    def find_spell(self, item_id: str) -> Item | None:
        return next((s for s in self.spells if s.item_id == item_id), None)

    def with_creature(self, creature: Creature) -> Side:
        """Return new side with a field creature replaced by id."""
        return self.with_changes(field=tuple(
            creature if c.creature_id == creature.creature_id else c
            for c in self.field
        ))

    def with_changes(self, **kwargs: Any) -> Side:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class OpponentConfig:
    """What the opponent-content generator hands to start_battle."""
    deck: tuple[Creature, ...]
    tools: tuple[Item, ...] = ()
    spells: tuple[Item, ...] = ()
    difficulty: str = "medium"


@dataclass(frozen=True)
class BattleState:
    """
    Complete battle state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    battle_id: str = "battle"
    phase: BattlePhase = BattlePhase.SETUP
    turn_number: int = 1
    active_side: SideId = SideId.PLAYER
    player: Side = field(default_factory=lambda: Side(side_id=SideId.PLAYER))
    opponent: Side = field(default_factory=lambda: Side(side_id=SideId.OPPONENT))
    profile: DifficultyProfile = MEDIUM_PROFILE
    log: tuple[LogEntry, ...] = ()

    # Deterministic randomness: per-action streams derive from these
    seed: int = 0
    action_count: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.phase in (BattlePhase.WON, BattlePhase.LOST)

    @property
    def winner(self) -> SideId | None:
        if self.phase == BattlePhase.WON:
            return SideId.PLAYER
        if self.phase == BattlePhase.LOST:
            return SideId.OPPONENT
        return None

    @property
    def active(self) -> Side:
        return self.side(self.active_side)

    def side(self, side_id: SideId) -> Side:
        return self.player if side_id == SideId.PLAYER else self.opponent

    def with_side(self, side: Side) -> BattleState:
        """Return new state with one side replaced."""
        if side.side_id == SideId.PLAYER:
            return self._copy_with(player=side)
        return self._copy_with(opponent=side)

    def find_creature(self, creature_id: str) -> tuple[SideId, Creature] | None:
        """Locate a creature on either field."""
        for side in (self.player, self.opponent):
            creature = side.find_on_field(creature_id)
            if creature is not None:
                return side.side_id, creature
        return None

    def append_log(self, message: str, side: SideId | None = None) -> BattleState:
        entry = LogEntry(turn=self.turn_number, message=message, side=side)
        return self._copy_with(log=self.log + (entry,))

    def extend_log(self, messages: list[str], side: SideId | None = None) -> BattleState:
        state = self
        for message in messages:
            state = state.append_log(message, side)
        return state

    def _copy_with(self, **kwargs: Any) -> BattleState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
