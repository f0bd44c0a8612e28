"""
Tests for the species catalogue and content generation.
"""

import random

import pytest

from ..content import (
    SPECIES,
    build_creature,
    generate_opponent,
    generate_player_collection,
    get_species,
    opponent_deploy_cost,
)
from ..content.generator import boosted, roll_rarity
from ..engine_core.creature import BaseAttributes, Rarity
from ..engine_core.items import ItemCategory


class TestSpecies:
    """Tests for the catalogue."""

    def test_lookup(self):
        assert get_species("emberfang").name == SPECIES["emberfang"].name

    def test_unknown_species(self):
        with pytest.raises(KeyError):
            get_species("unicorn")

    def test_build_creature(self):
        creature = build_creature(get_species("ironhorn"), "h-1", rarity="Rare", form=1)
        assert creature.creature_id == "h-1"
        assert creature.rarity == Rarity.RARE
        assert creature.current_health == creature.stats.max_health


class TestGeneratorHelpers:
    """Tests for rarity rolls, deploy costs and stat bonuses."""

    def test_roll_rarity(self):
        rng = random.Random(3)
        assert all(roll_rarity(rng, {"Common": 1.0}) == Rarity.COMMON for _ in range(20))
        assert roll_rarity(rng, {}) == Rarity.COMMON
        assert roll_rarity(rng, {"Legendary": 0.0, "Epic": 1.0}) == Rarity.EPIC

    def test_deploy_cost(self):
        assert opponent_deploy_cost(0, Rarity.COMMON, 5) == 4
        assert opponent_deploy_cost(2, Rarity.EPIC, 5) == 10
        # 4 + 3*1.5 + 4.5 = 13, capped at 12
        assert opponent_deploy_cost(3, Rarity.LEGENDARY, 5) == 12

    def test_opening_cards_stay_cheap(self):
        assert opponent_deploy_cost(3, Rarity.LEGENDARY, 0) == 6
        assert opponent_deploy_cost(3, Rarity.LEGENDARY, 1) == 8

    def test_boosted_caps_at_ten(self):
        base = BaseAttributes(energy=9, strength=3)
        assert boosted(base, 2) == BaseAttributes(energy=10, strength=5, magic=7, stamina=7, speed=7)
        assert boosted(base, 0) is base


class TestGenerateOpponent:
    """Tests for generate_opponent."""

    @pytest.mark.parametrize("difficulty,deck_size,tools,spells", [
        ("easy", 6, 1, 0),
        ("medium", 7, 1, 1),
        ("hard", 8, 2, 1),
        ("expert", 9, 2, 2),
    ])
    def test_sizes_follow_tier(self, difficulty, deck_size, tools, spells):
        opponent = generate_opponent(difficulty, seed=1)

        assert len(opponent.deck) == deck_size
        assert len(opponent.tools) == tools
        assert len(opponent.spells) == spells
        assert opponent.difficulty == difficulty

    def test_ids_and_costs(self):
        opponent = generate_opponent("expert", seed=4)

        assert [c.creature_id for c in opponent.deck] == [f"opp-{i}" for i in range(1, 10)]
        costs = [c.deploy_cost for c in opponent.deck]
        assert costs[0] <= 6
        assert costs[1] <= 8
        assert all(1 <= cost <= 12 for cost in costs)
        assert all(t.category == ItemCategory.TOOL for t in opponent.tools)
        assert all(s.category == ItemCategory.SPELL for s in opponent.spells)

    def test_seeded_generation_is_reproducible(self):
        assert generate_opponent("hard", seed=8) == generate_opponent("hard", seed=8)

    def test_easy_never_rolls_legendary(self):
        for seed in range(20):
            deck = generate_opponent("easy", seed=seed).deck
            assert all(c.rarity != Rarity.LEGENDARY for c in deck)

    def test_stat_bonus_applied(self):
        by_name = {s.name: s for s in SPECIES.values()}
        for creature in generate_opponent("expert", seed=2).deck:
            species = by_name[creature.species_name]
            assert creature.base.total > species.base.total or species.base.total == 50


class TestPlayerCollection:
    """Tests for generate_player_collection."""

    def test_sizes(self):
        collection = generate_player_collection(seed=1)
        assert len(collection.hand) == 4
        assert len(collection.deck) == 4
        assert len(collection.tools) == 2
        assert len(collection.spells) == 2

    def test_ids_do_not_clash_with_opponent(self):
        collection = generate_player_collection(seed=1)
        opponent = generate_opponent("medium", seed=1)
        player_ids = {c.creature_id for c in collection.hand + collection.deck}
        opponent_ids = {c.creature_id for c in opponent.deck}
        assert not player_ids & opponent_ids
