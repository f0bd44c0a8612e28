"""
Reducer - The turn state machine.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; handlers raise ActionRejected
- Rejections never raise: they return the input state plus a log entry
- Delegates resolution to combat, effects and energy

Turn flow for EndTurn by side S (O is the other side):
1. Tick every effect on S's field
2. Remove defeated creatures (death effects), check terminal state
3. Hand the turn to O (turn number grows when it returns to the player)
4. O's turn start: clear stances, draw one card, regenerate energy
5. Check terminal state
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Iterable

from .action import Action, ActionResult, ActionType
from .combat import apply_spell, apply_tool, defend_creature, resolve_attack
from .creature import Creature
from .difficulty import get_profile
from .effects import clear_defending, remove_defeated, tick
from .energy import clamp_energy, regenerate, spend
from .errors import ActionRejected, RejectCode
from .items import Item
from .state import BattlePhase, BattleState, OpponentConfig, Side, SideId
from .stats import refresh_stats

logger = logging.getLogger(__name__)


RNG_STRIDE = 1_000_003


@dataclass
class Reducer:
    """
    Reducer applies actions to battle state.

    Stateless - all state is in BattleState. An injected rng replaces
    the per-action stream derived from (seed, action_count).
    """
    rng: random.Random | None = None

    def apply(self, state: BattleState, action: Action) -> ActionResult:
        """
        Apply an action to the battle state.

        Returns ActionResult with the new state, or a rejection whose
        state is the input plus one log entry.
        """
        try:
            self._validate_action(state, action)
            handler = self._get_handler(action.action_type)
            if handler is None:
                raise ActionRejected(
                    f"No handler for action type: {action.action_type}",
                    RejectCode.INVALID_ACTION,
                )
            new_state, messages = handler(state, action)
        except ActionRejected as e:
            logger.debug("Rejected %s: %s", action.describe(), e.message)
            return ActionResult.rejected(state, e.message, e.code.value)
        except Exception as e:
            logger.exception("Handler error while applying %s", action.describe())
            return ActionResult.rejected(
                state, f"Action failed: {e}", RejectCode.HANDLER_ERROR.value
            )

        new_state = new_state._copy_with(action_count=state.action_count + 1)
        return ActionResult.success_with_state(new_state, messages)

    def _validate_action(self, state: BattleState, action: Action) -> None:
        """Raise ActionRejected if the action cannot be taken now."""
        if state.is_terminal:
            raise ActionRejected("The battle is over", RejectCode.BATTLE_OVER)
        if state.phase != BattlePhase.ACTIVE:
            raise ActionRejected("The battle has not started", RejectCode.INVALID_ACTION)
        side = action.payload.side
        if side is not None and side != state.active_side:
            raise ActionRejected(f"It is not the {side.value}'s turn", RejectCode.NOT_YOUR_TURN)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.DEPLOY: self._handle_deploy,
            ActionType.ATTACK: self._handle_attack,
            ActionType.USE_TOOL: self._handle_use_tool,
            ActionType.USE_SPELL: self._handle_use_spell,
            ActionType.DEFEND: self._handle_defend,
            ActionType.END_TURN: self._handle_end_turn,
        }
        return handlers.get(action_type)

    def _rng_for(self, state: BattleState) -> random.Random:
        if self.rng is not None:
            return self.rng
        return random.Random(state.seed * RNG_STRIDE + state.action_count)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_deploy(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        side = state.active
        creature = side.find_in_hand(action.payload.creature_id or "")
        if creature is None:
            raise ActionRejected(
                f"Creature {action.payload.creature_id} is not in hand",
                RejectCode.UNKNOWN_REFERENCE,
            )
        if len(side.field) >= state.profile.max_field_size:
            raise ActionRejected("Your field is full", RejectCode.FIELD_FULL)

        energy = spend(side.energy, creature.deploy_cost)
        side = side.with_changes(
            field=side.field + (creature,),
            hand=tuple(c for c in side.hand if c.creature_id != creature.creature_id),
            energy=energy,
        )
        message = f"{creature.species_name} was deployed ({creature.deploy_cost} energy)."
        state = state.with_side(side).append_log(message, side.side_id)
        return state, [message]

    def _handle_attack(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        side = state.active
        enemy = state.side(state.active_side.other)
        attacker = self._own_creature(side, action.payload.creature_id)
        defender = enemy.find_on_field(action.payload.target_id or "")
        if defender is None:
            if side.find_on_field(action.payload.target_id or "") is not None:
                raise ActionRejected("Cannot attack your own creature", RejectCode.INVALID_TARGET)
            raise ActionRejected(
                f"Target {action.payload.target_id} is not on the enemy field",
                RejectCode.UNKNOWN_REFERENCE,
            )

        energy = spend(side.energy, state.profile.attack_cost)
        outcome = resolve_attack(attacker, defender, self._rng_for(state))
        side = side.with_creature(outcome.attacker).with_changes(energy=energy)
        enemy = enemy.with_creature(outcome.defender)
        state = state.with_side(side).with_side(enemy).append_log(outcome.message, side.side_id)
        return self._settle(state, [outcome.message])

    def _handle_use_tool(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        side = state.active
        tool = side.find_tool(action.payload.item_id or "")
        if tool is None:
            raise ActionRejected(
                f"Tool {action.payload.item_id} is not available",
                RejectCode.UNKNOWN_REFERENCE,
            )
        target = side.find_on_field(action.payload.target_id or "")
        if target is None:
            if state.find_creature(action.payload.target_id or "") is not None:
                raise ActionRejected("Tools can only target your own creatures", RejectCode.INVALID_TARGET)
            raise ActionRejected(
                f"Target {action.payload.target_id} is not on the field",
                RejectCode.UNKNOWN_REFERENCE,
            )

        energy = spend(side.energy, state.profile.tool_cost)
        outcome = apply_tool(target, tool, state.profile)
        side = side.with_creature(outcome.creature).with_changes(
            tools=_without_item(side.tools, tool),
            energy=energy + outcome.energy_gain,
        )
        state = state.with_side(side).append_log(outcome.message, side.side_id)
        return self._settle(state, [outcome.message])

    def _handle_use_spell(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        side = state.active
        spell = side.find_spell(action.payload.item_id or "")
        if spell is None:
            raise ActionRejected(
                f"Spell {action.payload.item_id} is not available",
                RejectCode.UNKNOWN_REFERENCE,
            )
        caster = self._own_creature(side, action.payload.creature_id)
        target_id = action.payload.target_id or caster.creature_id
        located = state.find_creature(target_id)
        if located is None:
            raise ActionRejected(f"Target {target_id} is not on the field", RejectCode.UNKNOWN_REFERENCE)
        target_side_id, target = located

        energy = spend(side.energy, state.profile.spell_cost)
        same_side = target_side_id == side.side_id
        outcome = apply_spell(caster, target, spell, state.profile, self._rng_for(state), same_side)

        side = side.with_creature(outcome.caster).with_changes(
            spells=_without_item(side.spells, spell),
            energy=energy + outcome.energy_gain,
        )
        state = state.with_side(side)
        if same_side:
            state = state.with_side(state.active.with_creature(outcome.target))
        else:
            state = state.with_side(state.side(target_side_id).with_creature(outcome.target))
        state = state.append_log(outcome.message, side.side_id)
        return self._settle(state, [outcome.message])

    def _handle_defend(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        side = state.active
        creature = self._own_creature(side, action.payload.creature_id)
        if creature.is_defending:
            raise ActionRejected(
                f"{creature.species_name} is already defending",
                RejectCode.ALREADY_DEFENDING,
            )
        energy = spend(side.energy, state.profile.defend_cost)
        defended = defend_creature(creature, state.profile)
        side = side.with_creature(defended).with_changes(energy=energy)
        message = f"{creature.species_name} takes a defensive stance."
        return state.with_side(side).append_log(message, side.side_id), [message]

    def _handle_end_turn(self, state: BattleState, action: Action) -> tuple[BattleState, list[str]]:
        ending = state.active_side
        messages: list[str] = []

        # 1. Tick the ending side's field
        side = state.side(ending)
        ticked = []
        for creature in side.field:
            creature, tick_messages = tick(creature, state.profile)
            ticked.append(creature)
            messages.extend(tick_messages)
        side = side.with_changes(field=tuple(ticked))

        # 2. Remove defeated creatures
        field, _, removal_messages = remove_defeated(side.field)
        messages.extend(removal_messages)
        side = side.with_changes(field=field, energy=clamp_energy(side.energy, field, state.profile))
        state = state.with_side(side).extend_log(messages, ending)

        state, terminal_messages = self._check_terminal(state)
        messages.extend(terminal_messages)
        if state.is_terminal:
            return state, messages

        # 3. Hand over the turn
        starting = ending.other
        turn_number = state.turn_number + 1 if starting == SideId.PLAYER else state.turn_number
        state = state._copy_with(active_side=starting, turn_number=turn_number)

        # 4. Turn start for the new side
        state, start_messages = self._start_turn(state, starting)
        messages.extend(start_messages)

        state, terminal_messages = self._check_terminal(state)
        messages.extend(terminal_messages)
        return state, messages

    # =========================================================================
    # Helpers
    # =========================================================================

    def _own_creature(self, side: Side, creature_id: str | None) -> Creature:
        creature = side.find_on_field(creature_id or "")
        if creature is None:
            raise ActionRejected(
                f"Creature {creature_id} is not on your field",
                RejectCode.UNKNOWN_REFERENCE,
            )
        return creature

    def _start_turn(self, state: BattleState, side_id: SideId) -> tuple[BattleState, list[str]]:
        profile = state.profile
        side = state.side(side_id)
        label = "Your" if side_id == SideId.PLAYER else "Opponent's"
        messages = [f"Turn {state.turn_number}: {label} turn."]

        side = side.with_changes(field=tuple(clear_defending(c) for c in side.field))

        if len(side.hand) < profile.max_hand_size and side.deck:
            drawn = side.deck[0]
            side = side.with_changes(hand=side.hand + (drawn,), deck=side.deck[1:])
            if side_id == SideId.PLAYER:
                messages.append(f"You drew {drawn.species_name}.")
            else:
                messages.append("Opponent drew a card.")

        energy, gained = regenerate(
            side.energy, side.field, profile, is_opponent=side_id == SideId.OPPONENT
        )
        side = side.with_changes(energy=energy)
        if gained:
            messages.append(f"{label} side regenerated {gained} energy.")

        return state.with_side(side).extend_log(messages, side_id), messages

    def _settle(self, state: BattleState, messages: list[str]) -> tuple[BattleState, list[str]]:
        """Remove the defeated on both fields, re-clamp everything, then check for a winner."""
        messages = list(messages)
        for side_id in (SideId.PLAYER, SideId.OPPONENT):
            side = state.side(side_id)
            field, _, removal_messages = remove_defeated(side.field)
            field = tuple(refresh_stats(c) for c in field)
            side = side.with_changes(
                field=field,
                energy=clamp_energy(side.energy, field, state.profile),
            )
            state = state.with_side(side).extend_log(removal_messages, side_id)
            messages.extend(removal_messages)

        state, terminal_messages = self._check_terminal(state)
        messages.extend(terminal_messages)
        return state, messages

    def _check_terminal(self, state: BattleState) -> tuple[BattleState, list[str]]:
        """A side with empty field, hand and deck loses. If both are empty the player wins."""
        if state.is_terminal:
            return state, []
        if state.opponent.is_exhausted:
            message = "Victory! The opponent has no creatures left."
            logger.info("Battle %s won by the player on turn %d", state.battle_id, state.turn_number)
            return state._copy_with(phase=BattlePhase.WON).append_log(message), [message]
        if state.player.is_exhausted:
            message = "Defeat! You have no creatures left."
            logger.info("Battle %s won by the opponent on turn %d", state.battle_id, state.turn_number)
            return state._copy_with(phase=BattlePhase.LOST).append_log(message), [message]
        return state, []


def _without_item(items: tuple[Item, ...], item: Item) -> tuple[Item, ...]:
    """Remove exactly one copy of an item."""
    result = list(items)
    result.remove(item)
    return tuple(result)


def start_battle(
    player_deck: Iterable[Creature],
    player_hand: Iterable[Creature],
    opponent: OpponentConfig,
    player_tools: Iterable[Item] = (),
    player_spells: Iterable[Item] = (),
    seed: int = 0,
    battle_id: str = "battle",
) -> BattleState:
    """
    Create an active battle from decks, hands and items.

    The player's hand is capped at the tier's hand size (extra cards go
    back on top of the deck); the opponent's hand is the first cards of
    its deck. Both sides start with the starting energy.
    """
    profile = get_profile(opponent.difficulty)
    hand = tuple(player_hand)
    deck = tuple(player_deck)
    if len(hand) > profile.max_hand_size:
        deck = hand[profile.max_hand_size:] + deck
        hand = hand[:profile.max_hand_size]

    opponent_deck = tuple(opponent.deck)
    split = profile.opponent_initial_hand
    state = BattleState(
        battle_id=battle_id,
        phase=BattlePhase.ACTIVE,
        turn_number=1,
        active_side=SideId.PLAYER,
        player=Side(
            side_id=SideId.PLAYER,
            hand=hand,
            deck=deck,
            energy=profile.starting_energy,
            tools=tuple(player_tools),
            spells=tuple(player_spells),
        ),
        opponent=Side(
            side_id=SideId.OPPONENT,
            hand=opponent_deck[:split],
            deck=opponent_deck[split:],
            energy=profile.starting_energy,
            tools=tuple(opponent.tools),
            spells=tuple(opponent.spells),
        ),
        profile=profile,
        seed=seed,
    )
    logger.info("Battle %s started at %s difficulty", battle_id, profile.name)
    state = state.append_log(f"Battle started! Difficulty: {profile.label}")
    state, _ = Reducer()._check_terminal(state)
    return state


def apply_action(state: BattleState, action: Action, rng: random.Random | None = None) -> ActionResult:
    """Convenience function to apply an action."""
    return Reducer(rng=rng).apply(state, action)
