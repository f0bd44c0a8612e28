"""
Tests for legal action enumeration.
"""

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator, is_legal, legal_actions
from ..engine_core.reducer import apply_action
from ..engine_core.state import BattlePhase
from .conftest import FixedRandom, make_battle, make_creature


class TestLegalActions:
    """Tests for ActionGenerator."""

    def test_end_turn_always_last(self, skirmish):
        actions = legal_actions(skirmish)
        assert actions[-1].action_type == ActionType.END_TURN

    def test_no_actions_when_battle_over(self, knight):
        state = make_battle(player_field=[knight])._copy_with(phase=BattlePhase.WON)
        assert legal_actions(state) == []

    def test_attack_pairs(self, knight):
        state = make_battle(
            player_field=[knight, make_creature("squire")],
            opponent_field=[make_creature("golem"), make_creature("imp")],
        )
        attacks = [a for a in legal_actions(state) if a.action_type == ActionType.ATTACK]
        assert len(attacks) == 4

    def test_energy_filters(self, skirmish):
        state = skirmish.with_side(skirmish.player.with_changes(energy=1))
        kinds = {a.action_type for a in legal_actions(state)}
        assert kinds == {ActionType.DEFEND, ActionType.END_TURN}

    def test_defending_creatures_cannot_defend_again(self, skirmish):
        state = apply_action(skirmish, Action.defend("knight")).new_state
        defends = [a for a in legal_actions(state) if a.action_type == ActionType.DEFEND]
        assert defends == []

    def test_spell_targets(self, skirmish, fire_lance):
        state = skirmish.with_side(skirmish.player.with_changes(spells=(fire_lance,)))
        spells = [a for a in legal_actions(state) if a.action_type == ActionType.USE_SPELL]
        assert {a.payload.target_id for a in spells} == {None, "golem"}

        no_self = ActionGenerator(include_spell_self_target=False).generate(state)
        spells = [a for a in no_self if a.action_type == ActionType.USE_SPELL]
        assert [a.payload.target_id for a in spells] == ["golem"]

    def test_every_legal_action_is_accepted(self, skirmish, shield_tool, fire_lance):
        state = skirmish.with_side(skirmish.player.with_changes(
            tools=(shield_tool,), spells=(fire_lance,),
        ))
        for action in legal_actions(state):
            result = apply_action(state, action, rng=FixedRandom(0.5))
            assert result.success, action.describe()
            assert is_legal(state, action)
