"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and their game loops
3. Formats battle state for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Unknown sessions raise SessionNotFound; inconsistent requests raise
ValueError. Rejected battle actions are returned, never raised.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    StartBattleRequest,
    ActionRequest,
    StatPreviewRequest,
    CreatureSpec,
    ItemSpec,
    # Responses
    BattleStateResponse,
    ActionResponse,
    LegalActionsResponse,
    StatPreviewResponse,
    # Shared
    BaseStatsInfo,
    DerivedStatsInfo,
    EffectInfo,
    CreatureInfo,
    ItemInfo,
    SideInfo,
    LogEntryInfo,
    LegalActionInfo,
    # Enums
    SessionStatus,
    ActionKind,
)
from ..content import generate_opponent, generate_player_collection
from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.combat import expected_damage
from ..engine_core.creature import Attribute, BaseAttributes, Creature
from ..engine_core.energy import max_energy
from ..engine_core.items import Item
from ..engine_core.reducer import start_battle
from ..engine_core.state import BattleState, Side, SideId
from ..engine_core.stats import battle_odds, creature_power, type_advantage
from ..session import GameLoop, Session, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service for battle clients.

    Usage:
        service = APIService()

        # Start a battle
        state = service.start_battle(StartBattleRequest(difficulty="hard"))

        # Play
        result = service.submit_action(state.session_id, ActionRequest(action_type="end_turn"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def start_battle(self, request: StartBattleRequest) -> BattleStateResponse:
        """
        Start a battle against a generated opponent.

        Without player_deck/player_hand the player gets a starter collection.
        """
        self.session_manager.cleanup_stale_sessions()
        for session_id in list(self._game_loops):
            if self.session_manager.get_session(session_id) is None:
                self._game_loops.pop(session_id)

        seed = request.seed if request.seed is not None else random.randrange(2**31)
        opponent = generate_opponent(request.difficulty.value, seed=seed)

        if request.player_deck is None and request.player_hand is None:
            collection = generate_player_collection(seed=seed)
            deck, hand = collection.deck, collection.hand
            tools, spells = collection.tools, collection.spells
        else:
            deck = tuple(creature_from_spec(c) for c in request.player_deck or [])
            hand = tuple(creature_from_spec(c) for c in request.player_hand or [])
            tools = tuple(item_from_spec(i, spell=False) for i in request.player_tools)
            spells = tuple(item_from_spec(i, spell=True) for i in request.player_spells)

        ids = [c.creature_id for c in deck + hand + opponent.deck]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate creature ids: {', '.join(duplicates)}")
        item_ids = [i.item_id for i in tools + spells]
        if len(item_ids) != len(set(item_ids)):
            raise ValueError("Duplicate item ids")

        battle = start_battle(
            player_deck=deck,
            player_hand=hand,
            opponent=opponent,
            player_tools=tools,
            player_spells=spells,
            seed=seed,
        )
        session = self.session_manager.create_session(
            battle, metadata={"difficulty": request.difficulty.value}
        )
        session.battle = battle._copy_with(battle_id=session.session_id)
        self._game_loops[session.session_id] = GameLoop(session)
        return battle_to_response(session)

    def get_state(self, session_id: str) -> BattleStateResponse:
        """Current battle state (SessionNotFound if unknown)."""
        session = self.session_manager.require_session(session_id)
        return battle_to_response(session)

    def submit_action(self, session_id: str, request: ActionRequest) -> ActionResponse:
        """
        Submit a player action.

        END_TURN also runs the opponent's whole turn before returning.
        """
        session = self.session_manager.require_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if game_loop is None:
            game_loop = GameLoop(session)
            self._game_loops[session_id] = game_loop

        action = action_from_request(request)
        result = game_loop.submit_action(action)
        return ActionResponse(
            session_id=session_id,
            success=result.success,
            error=result.error,
            error_code=result.error_code,
            log=result.log,
            opponent_actions=result.opponent_actions,
            opponent_log=result.opponent_log,
            state=battle_to_response(session),
        )

    def legal_actions(self, session_id: str) -> LegalActionsResponse:
        """Actions the player could submit now (empty unless it is the player's turn)."""
        session = self.session_manager.require_session(session_id)
        actions = legal_actions(session.battle) if session.is_player_turn() else []
        infos = [
            LegalActionInfo(
                action_type=ActionKind(a.action_type.value),
                creature_id=a.payload.creature_id,
                target_id=a.payload.target_id,
                item_id=a.payload.item_id,
                description=a.describe(),
            )
            for a in actions
        ]
        return LegalActionsResponse(session_id=session_id, actions=infos, count=len(infos))

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session. Returns False if it did not exist."""
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason) is not None

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def preview_stats(self, request: StatPreviewRequest) -> StatPreviewResponse:
        """Derived stats for a creature, with matchup projections if an opponent is given."""
        creature = creature_from_spec(request.creature)
        response = StatPreviewResponse(
            creature_id=creature.creature_id,
            stats=DerivedStatsInfo(**creature.stats.to_dict()),
            power=creature_power(creature),
        )
        if request.opponent is not None:
            opponent = creature_from_spec(request.opponent)
            response.opponent_id = opponent.creature_id
            response.type_advantage = type_advantage(creature.base, opponent.base)
            response.battle_odds = battle_odds(creature, opponent)
            response.expected_damage = expected_damage(creature, opponent)
        return response


# =============================================================================
# Conversions
# =============================================================================

def creature_from_spec(spec: CreatureSpec) -> Creature:
    return Creature.battle_ready(
        creature_id=spec.creature_id,
        species_name=spec.species_name,
        rarity=spec.rarity.value,
        form=spec.form,
        base=BaseAttributes(**spec.base_stats.model_dump()),
        specialty_stats=tuple(Attribute(a.value) for a in spec.specialty_stats),
        combination_level=spec.combination_level,
    )


def item_from_spec(spec: ItemSpec, spell: bool) -> Item:
    factory = Item.spell if spell else Item.tool
    return factory(spec.item_id, spec.name, spec.item_type.value, spec.effect.value, spec.rarity.value)


def action_from_request(request: ActionRequest) -> Action:
    """Build a player action; missing ids are left for the reducer to reject."""
    return Action(
        ActionType(request.action_type.value),
        ActionPayload(
            side=SideId.PLAYER,
            creature_id=request.creature_id,
            target_id=request.target_id,
            item_id=request.item_id,
        ),
    )


def creature_to_info(creature: Creature) -> CreatureInfo:
    return CreatureInfo(
        creature_id=creature.creature_id,
        species_name=creature.species_name,
        rarity=creature.rarity.value,
        form=creature.form,
        base_stats=BaseStatsInfo(**creature.base.to_dict()),
        specialty_stats=[a.value for a in creature.specialty_stats],
        stats=DerivedStatsInfo(**creature.stats.to_dict()),
        current_health=creature.current_health,
        max_health=creature.stats.max_health,
        is_defending=creature.is_defending,
        deploy_cost=creature.deploy_cost,
        next_attack_bonus=creature.next_attack_bonus,
        effects=[
            EffectInfo(
                effect_id=e.effect_id,
                name=e.name,
                kind=e.kind.value,
                remaining_duration=e.remaining_duration,
                stat_delta=dict(e.stat_delta),
                health_delta_per_tick=e.health_delta_per_tick,
                power_level=e.source_power_level,
                is_stance=e.is_stance,
            )
            for e in creature.active_effects
        ],
    )


def item_to_info(item: Item) -> ItemInfo:
    return ItemInfo(
        item_id=item.item_id,
        name=item.name,
        category=item.category.value,
        item_type=item.item_type.value,
        effect=item.effect.value,
        rarity=item.rarity.value,
    )


def side_to_info(side: Side, state: BattleState, show_hand: bool) -> SideInfo:
    return SideInfo(
        side=side.side_id.value,
        energy=side.energy,
        max_energy=max_energy(side.field, state.profile),
        field=[creature_to_info(c) for c in side.field],
        hand=[creature_to_info(c) for c in side.hand] if show_hand else [],
        hand_count=len(side.hand),
        deck_count=len(side.deck),
        tools=[item_to_info(i) for i in side.tools],
        spells=[item_to_info(i) for i in side.spells],
    )


def battle_to_response(session: Session) -> BattleStateResponse:
    state = session.battle
    return BattleStateResponse(
        session_id=session.session_id,
        battle_id=state.battle_id,
        status=SessionStatus(session.state.value),
        phase=state.phase.value,
        difficulty=state.profile.name,
        turn_number=state.turn_number,
        active_side=state.active_side.value,
        player=side_to_info(state.player, state, show_hand=True),
        opponent=side_to_info(state.opponent, state, show_hand=False),
        log=[
            LogEntryInfo(
                turn=entry.turn,
                message=entry.message,
                side=entry.side.value if entry.side else None,
            )
            for entry in state.log
        ],
        winner=state.winner.value if state.winner else None,
    )
