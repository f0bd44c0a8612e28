"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between battle clients and the
engine. All responses include explicit types for OpenAPI schema
generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_ACTION: Request could not be turned into a battle action
- BATTLE_OVER: The battle already has a winner
- VALIDATION_ERROR: Request body is inconsistent (e.g. duplicate ids)
- INTERNAL_ERROR: Unexpected server error

Rejected game actions are not errors: they come back with HTTP 200 and
success=false, because a rejection is part of the battle log.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    PLAYER_TURN = "player_turn"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class DifficultyLevel(str, Enum):
    """Opponent difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class RarityName(str, Enum):
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class AttributeName(str, Enum):
    ENERGY = "energy"
    STRENGTH = "strength"
    MAGIC = "magic"
    STAMINA = "stamina"
    SPEED = "speed"


class ItemEffectName(str, Enum):
    SURGE = "Surge"
    SHIELD = "Shield"
    ECHO = "Echo"
    DRAIN = "Drain"
    CHARGE = "Charge"


class ActionKind(str, Enum):
    """Actions a player can submit."""
    DEPLOY = "deploy"
    ATTACK = "attack"
    USE_TOOL = "use_tool"
    USE_SPELL = "use_spell"
    DEFEND = "defend"
    END_TURN = "end_turn"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    BATTLE_OVER = "BATTLE_OVER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class BaseStatsInfo(BaseModel):
    """The five base attributes."""
    energy: int = Field(5, ge=0, le=20)
    strength: int = Field(5, ge=0, le=20)
    magic: int = Field(5, ge=0, le=20)
    stamina: int = Field(5, ge=0, le=20)
    speed: int = Field(5, ge=0, le=20)


class DerivedStatsInfo(BaseModel):
    """Combat stats after rarity, form, specialty and effect modifiers."""
    physical_attack: int
    magical_attack: int
    physical_defense: int
    magical_defense: int
    max_health: int
    initiative: int
    critical_chance: float
    dodge_chance: float
    energy_cost: int


class EffectInfo(BaseModel):
    """A timed effect attached to a creature."""
    effect_id: str
    name: str
    kind: str = Field(description="buff, debuff, dot, hot, charge")
    remaining_duration: int
    stat_delta: dict[str, int] = Field(default_factory=dict)
    health_delta_per_tick: int = 0
    power_level: str = "normal"
    is_stance: bool = False


class CreatureInfo(BaseModel):
    """Creature information for display."""
    creature_id: str
    species_name: str
    rarity: RarityName
    form: int
    base_stats: BaseStatsInfo
    specialty_stats: list[AttributeName] = Field(default_factory=list)
    stats: DerivedStatsInfo
    current_health: int
    max_health: int
    is_defending: bool = False
    deploy_cost: int
    next_attack_bonus: int = 0
    effects: list[EffectInfo] = Field(default_factory=list)


class ItemInfo(BaseModel):
    """Tool or spell information."""
    item_id: str
    name: str
    category: str = Field(description="tool or spell")
    item_type: AttributeName
    effect: ItemEffectName
    rarity: RarityName


class SideInfo(BaseModel):
    """One side of the battle; the opponent's hand is shown as a count."""
    side: str
    energy: int
    max_energy: int
    field: list[CreatureInfo] = Field(default_factory=list)
    hand: list[CreatureInfo] = Field(default_factory=list)
    hand_count: int = 0
    deck_count: int = 0
    tools: list[ItemInfo] = Field(default_factory=list)
    spells: list[ItemInfo] = Field(default_factory=list)


class LogEntryInfo(BaseModel):
    """A battle log line."""
    turn: int
    message: str
    side: Optional[str] = None


class LegalActionInfo(BaseModel):
    """An action the player could submit right now."""
    action_type: ActionKind
    creature_id: Optional[str] = None
    target_id: Optional[str] = None
    item_id: Optional[str] = None
    description: str


# =============================================================================
# Request Models
# =============================================================================

class CreatureSpec(BaseModel):
    """A creature supplied by the caller's deck builder."""
    creature_id: str = Field(..., min_length=1, description="Unique within the battle")
    species_name: str = Field(..., min_length=1)
    rarity: RarityName = RarityName.COMMON
    form: int = Field(0, ge=0, le=3, description="Evolution form 0-3")
    base_stats: BaseStatsInfo = Field(default_factory=BaseStatsInfo)
    specialty_stats: list[AttributeName] = Field(default_factory=list, max_length=2)
    combination_level: int = Field(0, ge=0)


class ItemSpec(BaseModel):
    """A tool or spell supplied by the caller."""
    item_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    item_type: AttributeName
    effect: ItemEffectName
    rarity: RarityName = RarityName.COMMON


class StartBattleRequest(BaseModel):
    """
    Request to start a battle.

    Without a deck and hand the player gets a generated starter
    collection; the opponent is always generated for the tier.
    """
    difficulty: DifficultyLevel = Field(DifficultyLevel.MEDIUM, description="Opponent tier")
    seed: Optional[int] = Field(None, description="Seed for reproducible battles")
    player_deck: Optional[list[CreatureSpec]] = None
    player_hand: Optional[list[CreatureSpec]] = None
    player_tools: list[ItemSpec] = Field(default_factory=list)
    player_spells: list[ItemSpec] = Field(default_factory=list)


class ActionRequest(BaseModel):
    """A player action."""
    action_type: ActionKind
    creature_id: Optional[str] = Field(
        None, description="Deploy/defend creature, attacker, or spell caster"
    )
    target_id: Optional[str] = Field(None, description="Attack defender or item target")
    item_id: Optional[str] = Field(None, description="Tool or spell to use")


class StatPreviewRequest(BaseModel):
    """Preview derived stats, optionally against an opponent."""
    creature: CreatureSpec
    opponent: Optional[CreatureSpec] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class BattleStateResponse(BaseModel):
    """Complete battle state for display."""
    session_id: str
    battle_id: str
    status: SessionStatus
    phase: str = Field(description="setup, active, won, lost")
    difficulty: DifficultyLevel
    turn_number: int
    active_side: str
    player: SideInfo
    opponent: SideInfo
    log: list[LogEntryInfo] = Field(default_factory=list)
    winner: Optional[str] = None
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """
    Result of submitting an action.

    When the action ended the player's turn, the opponent's whole turn
    is already resolved and listed in opponent_actions/opponent_log.
    """
    session_id: str
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    log: list[str] = Field(default_factory=list)
    opponent_actions: list[str] = Field(default_factory=list)
    opponent_log: list[str] = Field(default_factory=list)
    state: BattleStateResponse
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Actions the player could submit right now."""
    session_id: str
    actions: list[LegalActionInfo]
    count: int


class StatPreviewResponse(BaseModel):
    """Derived stats and matchup projections."""
    creature_id: str
    stats: DerivedStatsInfo
    power: int
    opponent_id: Optional[str] = None
    type_advantage: Optional[float] = None
    battle_odds: Optional[float] = Field(None, ge=0.0, le=1.0)
    expected_damage: Optional[int] = None


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
