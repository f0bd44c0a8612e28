"""
Pytest fixtures for battlecore tests.
"""

import random

import pytest

from ..engine_core.creature import BaseAttributes, Creature
from ..engine_core.difficulty import get_profile
from ..engine_core.items import Item
from ..engine_core.state import BattlePhase, BattleState, Side, SideId


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float = 0.5):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class ScriptedRandom(random.Random):
    """Random source that replays a list of values, then repeats the last one."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        index = min(self.calls, len(self.values) - 1)
        self.calls += 1
        return self.values[index]


def make_creature(
    creature_id,
    species_name=None,
    rarity="Common",
    form=0,
    base=None,
    specialty_stats=(),
    deploy_cost=None,
):
    """Battle-ready creature; all attributes default to 5."""
    return Creature.battle_ready(
        creature_id=creature_id,
        species_name=species_name or creature_id.capitalize(),
        rarity=rarity,
        form=form,
        base=base or BaseAttributes(),
        specialty_stats=specialty_stats,
        energy_cost_override=deploy_cost,
    )


def make_battle(
    player_field=(),
    player_hand=(),
    player_deck=(),
    opponent_field=(),
    opponent_hand=(),
    opponent_deck=(),
    player_energy=12,
    opponent_energy=12,
    player_tools=(),
    player_spells=(),
    opponent_tools=(),
    opponent_spells=(),
    active_side=SideId.PLAYER,
    difficulty="medium",
    seed=0,
):
    """An active battle built directly from its parts."""
    return BattleState(
        battle_id="test-battle",
        phase=BattlePhase.ACTIVE,
        turn_number=1,
        active_side=active_side,
        player=Side(
            side_id=SideId.PLAYER,
            field=tuple(player_field),
            hand=tuple(player_hand),
            deck=tuple(player_deck),
            energy=player_energy,
            tools=tuple(player_tools),
            spells=tuple(player_spells),
        ),
        opponent=Side(
            side_id=SideId.OPPONENT,
            field=tuple(opponent_field),
            hand=tuple(opponent_hand),
            deck=tuple(opponent_deck),
            energy=opponent_energy,
            tools=tuple(opponent_tools),
            spells=tuple(opponent_spells),
        ),
        profile=get_profile(difficulty),
        seed=seed,
    )


@pytest.fixture
def medium_profile():
    """The medium tier profile."""
    return get_profile("medium")


@pytest.fixture
def expected_rng():
    """No dodge, no critical hit, variance exactly 1.0."""
    return FixedRandom(0.5)


@pytest.fixture
def knight():
    """A plain Common creature with every attribute at 5."""
    return make_creature("knight", "Knight")


@pytest.fixture
def golem():
    """A second plain Common creature."""
    return make_creature("golem", "Golem")


@pytest.fixture
def shield_tool():
    return Item.tool("bark-1", "Bark Plate", "stamina", "Shield")


@pytest.fixture
def fire_lance():
    return Item.spell("lance-1", "Fire Lance", "strength", "Surge")


@pytest.fixture
def skirmish(knight, golem):
    """
    Player's turn: one creature a side, the player also holds a cheap
    creature in hand and each side keeps a card in its deck.
    """
    return make_battle(
        player_field=[knight],
        player_hand=[make_creature("squire", "Squire", deploy_cost=3)],
        player_deck=[make_creature("page", "Page", deploy_cost=3)],
        opponent_field=[golem],
        opponent_deck=[make_creature("imp", "Imp", deploy_cost=3)],
    )
