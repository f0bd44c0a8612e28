"""
Action Generator - Generates all legal actions from a battle state.

The action generator is used by:
1. Bots to enumerate possible moves
2. The lookahead to expand rollouts
3. The API to show available actions

Design: Generates Action objects, not just action types.
Every generated action passes the reducer's validation.
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action
from .state import BattleState, Side


@dataclass
class ActionGenerator:
    """Generates legal actions for the side that holds the turn."""
    include_spell_self_target: bool = True

    def generate(self, state: BattleState) -> list[Action]:
        """
        Generate all legal actions for the active side.

        End turn is always last, and always present unless the battle
        is over.
        """
        if state.is_terminal:
            return []

        side = state.active
        enemy = state.side(state.active_side.other)

        actions: list[Action] = []
        actions.extend(self._generate_deploy_actions(state, side))
        actions.extend(self._generate_attack_actions(state, side, enemy))
        actions.extend(self._generate_tool_actions(state, side))
        actions.extend(self._generate_spell_actions(state, side, enemy))
        actions.extend(self._generate_defend_actions(state, side))
        actions.append(Action.end_turn(side.side_id))
        return actions

    def _generate_deploy_actions(self, state: BattleState, side: Side) -> list[Action]:
        if len(side.field) >= state.profile.max_field_size:
            return []
        return [
            Action.deploy(creature.creature_id, side.side_id)
            for creature in side.hand
            if creature.deploy_cost <= side.energy
        ]

    def _generate_attack_actions(self, state: BattleState, side: Side, enemy: Side) -> list[Action]:
        if side.energy < state.profile.attack_cost:
            return []
        return [
            Action.attack(attacker.creature_id, defender.creature_id, side.side_id)
            for attacker in side.field
            for defender in enemy.field
        ]

    def _generate_tool_actions(self, state: BattleState, side: Side) -> list[Action]:
        if side.energy < state.profile.tool_cost:
            return []
        actions = []
        seen = set()
        for tool in side.tools:
            if tool.item_id in seen:
                continue
            seen.add(tool.item_id)
            for creature in side.field:
                actions.append(Action.use_tool(tool.item_id, creature.creature_id, side.side_id))
        return actions

    def _generate_spell_actions(self, state: BattleState, side: Side, enemy: Side) -> list[Action]:
        if side.energy < state.profile.spell_cost:
            return []
        actions = []
        seen = set()
        for spell in side.spells:
            if spell.item_id in seen:
                continue
            seen.add(spell.item_id)
            for caster in side.field:
                if self.include_spell_self_target:
                    actions.append(Action.use_spell(spell.item_id, caster.creature_id, None, side.side_id))
                for target in enemy.field:
                    actions.append(Action.use_spell(
                        spell.item_id, caster.creature_id, target.creature_id, side.side_id
                    ))
        return actions

    def _generate_defend_actions(self, state: BattleState, side: Side) -> list[Action]:
        if side.energy < state.profile.defend_cost:
            return []
        return [
            Action.defend(creature.creature_id, side.side_id)
            for creature in side.field
            if not creature.is_defending
        ]


def legal_actions(state: BattleState) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    return ActionGenerator().generate(state)


def is_legal(state: BattleState, action: Action) -> bool:
    """Check if a specific action is legal."""
    return action in legal_actions(state)
