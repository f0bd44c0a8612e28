"""
Tests for bot action selection and the opponent planner.

Tests:
- Baseline policies select legal actions
- Personalities and the evaluator
- Lethal search and the candidate ladder
- Planned turns are accepted by the reducer
- The multi-action roll and the expert lookahead
"""

import random
from dataclasses import replace
from types import SimpleNamespace

import pytest

from ..bots import (
    CANDIDATE_GENERATORS,
    FirstLegalPolicy,
    HeuristicEvaluator,
    OpponentPlanner,
    PERSONALITIES,
    PlanningContext,
    RandomPolicy,
    find_lethal,
    personality_for,
    plan_opponent_turn,
)
from ..bots import planner as planner_module
from ..bots.candidates import should_attack
from ..bots.evaluator import attack_score
from ..content import generate_opponent, generate_player_collection
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.difficulty import get_profile
from ..engine_core.reducer import apply_action, start_battle
from ..engine_core.state import BattlePhase, SideId
from .conftest import FixedRandom, make_battle, make_creature


def opponent_to_move(player_health=115, opponent_energy=12, difficulty="medium", **kwargs):
    """Opponent's turn: its golem faces the player's knight."""
    params = dict(
        player_field=[make_creature("knight", "Knight").with_changes(current_health=player_health)],
        player_deck=[make_creature("page", "Page")],
        opponent_field=[make_creature("golem", "Golem")],
        opponent_hand=[make_creature("imp", "Imp", deploy_cost=3)],
        opponent_energy=opponent_energy,
        active_side=SideId.OPPONENT,
        difficulty=difficulty,
    )
    params.update(kwargs)
    return make_battle(**params)


def context(state, side=SideId.OPPONENT, seed=0):
    return PlanningContext(
        state=state,
        side_id=side,
        personality=personality_for(state.profile.difficulty),
        rng=random.Random(seed),
    )


class TestBaselinePolicies:
    """Tests for RandomPolicy and FirstLegalPolicy."""

    def test_random_policy_selects_legal(self, skirmish):
        policy = RandomPolicy(seed=42)
        legal = legal_actions(skirmish)
        for _ in range(10):
            assert policy.select_action(skirmish, legal).action in legal

    def test_first_legal_policy(self, skirmish):
        legal = legal_actions(skirmish)
        decision = FirstLegalPolicy().select_action(skirmish, legal)
        assert decision.action == legal[0]

    def test_default_plan_turn_ends_turn(self, skirmish):
        plan = FirstLegalPolicy().plan_turn(skirmish)
        assert plan[0] == Action.deploy("squire", SideId.PLAYER)
        assert plan[-1].action_type == ActionType.END_TURN

    def test_policies_reject_empty_legal_list(self, skirmish):
        with pytest.raises(ValueError):
            RandomPolicy(seed=1).select_action(skirmish, [])


class TestPersonalities:
    """Tests for tier personalities."""

    def test_one_personality_per_tier(self):
        assert set(PERSONALITIES) == {"easy", "medium", "hard", "expert"}

    def test_lookup_is_case_insensitive(self):
        assert personality_for("EXPERT").name == "Expert"

    def test_unknown_tier(self):
        with pytest.raises(ValueError):
            personality_for("nightmare")

    def test_aggression_rises_with_tier(self):
        tiers = ["easy", "medium", "hard", "expert"]
        aggression = [get_profile(t).aggression for t in tiers]
        assert aggression == sorted(aggression)

    def test_only_upper_tiers_use_items(self):
        assert not PERSONALITIES["medium"].uses_items
        assert PERSONALITIES["hard"].uses_items


class TestEvaluator:
    """Tests for HeuristicEvaluator and scoring helpers."""

    def test_mirror_board_scores_zero(self, knight, golem):
        state = make_battle(player_field=[knight], opponent_field=[golem])
        assert HeuristicEvaluator().evaluate(state, SideId.PLAYER).total_score == pytest.approx(0.0)

    def test_winner_dominates(self, knight, golem):
        state = make_battle(player_field=[knight], opponent_field=[golem])
        won = state._copy_with(phase=BattlePhase.WON)
        evaluator = HeuristicEvaluator()
        assert evaluator.evaluate(won, SideId.PLAYER).total_score > 900
        assert evaluator.evaluate(won, SideId.OPPONENT).total_score < -900

    def test_elimination_bonus(self, knight, golem):
        wounded = golem.with_changes(current_health=10)
        finishing = attack_score(knight, wounded, 23, 2.0, 50.0, 0.0, 0.0)
        chipping = attack_score(knight, golem, 23, 2.0, 50.0, 0.0, 0.0)
        assert finishing - chipping == pytest.approx(50.0)


class TestLethalSearch:
    """Tests for find_lethal."""

    def test_single_lethal_attack(self):
        state = opponent_to_move(player_health=10)
        assert find_lethal(context(state)) == [
            Action.attack("golem", "knight", SideId.OPPONENT)
        ]

    def test_lethal_needs_two_attacks(self):
        state = opponent_to_move(player_health=40)
        assert len(find_lethal(context(state))) == 2

    def test_margin_follows_tier(self):
        """25 health: medium wants 25 damage, hard settles for 22.5."""
        assert len(find_lethal(context(opponent_to_move(player_health=25)))) == 2
        hard = opponent_to_move(player_health=25, difficulty="hard")
        assert len(find_lethal(context(hard))) == 1

    def test_not_enough_energy(self):
        state = opponent_to_move(player_health=10, opponent_energy=1)
        assert find_lethal(context(state)) is None

    def test_no_attackers(self):
        state = opponent_to_move(player_health=10, opponent_field=[])
        assert find_lethal(context(state)) is None


class TestCandidateLadder:
    """Tests for the candidate generators."""

    def test_ladder_order(self):
        names = [name for name, _ in CANDIDATE_GENERATORS]
        assert names == [
            "emergency_defense",
            "aggressive_attack",
            "strategic_deployment",
            "item_support",
            "cleanup_attack",
            "cleanup_defense",
        ]

    def test_should_attack_needs_enemies(self):
        state = opponent_to_move(player_field=[])
        assert not should_attack(context(state))

    def test_wounded_enemy_invites_attack(self):
        state = opponent_to_move(player_health=20)
        assert should_attack(context(state))

    def test_profile_aggression_sets_the_floor(self):
        """Even boards attack on a roll under 0.85; aggression 0.95 lifts that floor."""
        state = opponent_to_move()

        def roll(profile_state):
            ctx = PlanningContext(
                state=profile_state,
                side_id=SideId.OPPONENT,
                personality=personality_for("medium"),
                rng=FixedRandom(0.9),
            )
            return should_attack(ctx)

        assert not roll(state)
        eager = state._copy_with(profile=replace(state.profile, aggression=0.95))
        assert roll(eager)


class TestOpponentPlanner:
    """Tests for OpponentPlanner."""

    def test_lethal_attack_comes_first(self):
        """Field health 10 and a 23-damage attacker: attack, not deploy or defend."""
        state = opponent_to_move(player_health=10)
        plan = OpponentPlanner(seed=1).plan_turn(state)

        assert plan == [
            Action.attack("golem", "knight", SideId.OPPONENT),
            Action.end_turn(SideId.OPPONENT),
        ]

    def test_emergency_defense(self):
        state = opponent_to_move(opponent_energy=3)
        golem = state.opponent.field[0].with_changes(current_health=10)
        state = state.with_side(state.opponent.with_creature(golem))

        plan = OpponentPlanner(seed=1).plan_turn(state)
        assert plan == [
            Action.defend("golem", SideId.OPPONENT),
            Action.end_turn(SideId.OPPONENT),
        ]

    def test_deploys_onto_empty_field(self):
        state = opponent_to_move(opponent_field=[])
        plan = OpponentPlanner(seed=1).plan_turn(state)
        assert plan[0] == Action.deploy("imp", SideId.OPPONENT)
        assert plan[-1] == Action.end_turn(SideId.OPPONENT)

    def test_terminal_state_only_ends_turn(self):
        state = opponent_to_move()._copy_with(phase=BattlePhase.LOST)
        assert OpponentPlanner(seed=1).plan_turn(state) == [Action.end_turn(SideId.OPPONENT)]

    def test_planning_errors_end_the_turn(self, monkeypatch):
        planner = OpponentPlanner(seed=1)

        def boom(state, side):
            raise RuntimeError("boom")

        monkeypatch.setattr(planner, "_plan", boom)
        assert planner.plan_turn(opponent_to_move()) == [Action.end_turn(SideId.OPPONENT)]

    def test_same_seed_same_plan(self):
        state = opponent_to_move()
        assert OpponentPlanner(seed=9).plan_turn(state) == OpponentPlanner(seed=9).plan_turn(state)

    def test_select_action_is_first_planned(self):
        state = opponent_to_move(player_health=10)
        decision = OpponentPlanner(seed=1).select_action(state, legal_actions(state))
        assert decision.action == Action.attack("golem", "knight", SideId.OPPONENT)

    def test_convenience_function(self):
        plan = plan_opponent_turn(opponent_to_move(player_health=10), seed=1)
        assert plan[0].action_type == ActionType.ATTACK

    @pytest.mark.parametrize("difficulty", ["easy", "medium", "hard", "expert"])
    def test_planned_turns_are_accepted(self, difficulty):
        """Replayed with expected rolls, every planned action is legal."""
        opponent = generate_opponent(difficulty, seed=5)
        collection = generate_player_collection(seed=5)
        state = start_battle(
            player_deck=collection.deck,
            player_hand=collection.hand,
            opponent=opponent,
            player_tools=collection.tools,
            player_spells=collection.spells,
            seed=5,
        )
        planners = {
            SideId.PLAYER: OpponentPlanner(personality=personality_for("medium"), seed=1),
            SideId.OPPONENT: OpponentPlanner(seed=2),
        }
        rng = FixedRandom(0.5)

        for _ in range(8):
            if state.is_terminal:
                break
            side = state.active_side
            plan = planners[side].plan_turn(state)
            assert plan[-1] == Action.end_turn(side)
            for action in plan:
                if state.is_terminal:
                    break
                result = apply_action(state, action, rng=rng)
                assert result.success, f"{action.describe()}: {result.error}"
                state = result.new_state
            assert state.is_terminal or state.active_side != side


class TestMultiActionRoll:
    """Tests for the tier's multi-action roll."""

    def test_roll_above_chance_plays_one_action(self):
        state = opponent_to_move()
        planner = OpponentPlanner(seed=1)
        plan = planner._plan_heuristic(
            state, SideId.OPPONENT, personality_for("medium"), rng=FixedRandom(0.99)
        )
        assert len(plan) == 1

    def test_roll_below_chance_plays_several(self):
        state = opponent_to_move()
        planner = OpponentPlanner(seed=1)
        plan = planner._plan_heuristic(
            state, SideId.OPPONENT, personality_for("medium"), rng=FixedRandom(0.0)
        )
        assert len(plan) > 1

    def test_low_energy_never_rolls(self):
        """Below 4 energy the turn is a single action whatever the roll."""
        state = opponent_to_move(opponent_energy=3)
        planner = OpponentPlanner(seed=1)
        plan = planner._plan_heuristic(
            state, SideId.OPPONENT, personality_for("medium"), rng=FixedRandom(0.0)
        )
        assert len(plan) == 1


class TestLookahead:
    """Tests for the expert tier's strategy lookahead."""

    PLANS = {
        "Expert": [Action.defend("golem", SideId.OPPONENT)],
        "Aggressive": [Action.attack("golem", "knight", SideId.OPPONENT)],
        "Buildup": [Action.deploy("imp", SideId.OPPONENT)],
        "Fortify": [Action.defend("golem", SideId.OPPONENT)],
    }

    def planner_with_scores(self, monkeypatch, scores):
        """Planner whose rollouts end in the variant's name, scored from a table."""
        planner = OpponentPlanner(seed=1)

        def plan_heuristic(state, side, personality, rng=None):
            return list(self.PLANS[personality.name])

        def rollout(state, side, personality, first_plan, turns):
            return personality.name

        class TableEvaluator:
            def __init__(self, weights=None):
                pass

            def evaluate(self, final, side):
                return SimpleNamespace(total_score=scores[final])

        monkeypatch.setattr(planner, "_plan_heuristic", plan_heuristic)
        monkeypatch.setattr(planner, "_rollout", rollout)
        monkeypatch.setattr(planner_module, "HeuristicEvaluator", TableEvaluator)
        return planner

    def test_only_expert_looks_ahead(self):
        assert get_profile("expert").lookahead_turns > 0
        assert get_profile("hard").lookahead_turns == 0

    def test_variant_beating_margin_is_played(self, monkeypatch):
        """Expert margin is 7 points; Aggressive wins by 20."""
        scores = {"Expert": 0.0, "Aggressive": 20.0, "Buildup": 5.0, "Fortify": -3.0}
        planner = self.planner_with_scores(monkeypatch, scores)

        plan = planner._plan_with_lookahead(
            opponent_to_move(difficulty="expert"), SideId.OPPONENT, personality_for("expert")
        )
        assert plan == self.PLANS["Aggressive"]

    def test_narrow_lead_falls_back_to_base(self, monkeypatch):
        scores = {"Expert": 0.0, "Aggressive": 6.0, "Buildup": 5.0, "Fortify": -3.0}
        planner = self.planner_with_scores(monkeypatch, scores)

        plan = planner._plan_with_lookahead(
            opponent_to_move(difficulty="expert"), SideId.OPPONENT, personality_for("expert")
        )
        assert plan == self.PLANS["Expert"]

    def test_expert_turn_goes_through_lookahead(self, monkeypatch):
        planner = OpponentPlanner(seed=1)
        calls = []

        def lookahead(state, side, personality):
            calls.append(personality.name)
            return [Action.defend("golem", side)]

        monkeypatch.setattr(planner, "_plan_with_lookahead", lookahead)
        plan = planner.plan_turn(opponent_to_move(difficulty="expert"))

        assert calls == ["Expert"]
        assert plan == [Action.defend("golem", SideId.OPPONENT), Action.end_turn(SideId.OPPONENT)]
