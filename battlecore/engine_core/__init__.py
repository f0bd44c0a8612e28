"""
Engine Core - Deterministic battle state management and combat resolution.

The engine is the runtime that:
1. Derives creature stats
2. Tracks timed effects
3. Resolves attacks, tools and spells
4. Enforces the energy economy
5. Applies actions via the reducer (the turn state machine)
"""

from .difficulty import Difficulty, DifficultyProfile, get_profile
from .creature import Attribute, BaseAttributes, Creature, Rarity
from .items import EffectName, Item
from .state import BattlePhase, BattleState, OpponentConfig, Side, SideId
from .action import Action, ActionType, ActionPayload, ActionResult
from .errors import ActionRejected, BattleError, RejectCode
from .reducer import Reducer, apply_action, start_battle
from .action_generator import ActionGenerator, legal_actions

__all__ = [
    "Difficulty",
    "DifficultyProfile",
    "get_profile",
    "Attribute",
    "BaseAttributes",
    "Creature",
    "Rarity",
    "EffectName",
    "Item",
    "BattlePhase",
    "BattleState",
    "OpponentConfig",
    "Side",
    "SideId",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ActionRejected",
    "BattleError",
    "RejectCode",
    "Reducer",
    "apply_action",
    "start_battle",
    "ActionGenerator",
    "legal_actions",
]
