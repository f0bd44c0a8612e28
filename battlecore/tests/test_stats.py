"""
Tests for stat derivation and projections.

Tests:
- Base derivation for a neutral creature
- Rarity, form and specialty scaling
- Caps, floors and the overlay
- Power rating, type advantage and battle odds
"""

import pytest

from ..engine_core.creature import Attribute, BaseAttributes, Rarity
from ..engine_core.stats import (
    battle_odds,
    creature_power,
    derive_base_stats,
    refresh_stats,
    round_half_up,
    type_advantage,
)
from .conftest import make_creature


class TestDerivation:
    """Tests for derive_base_stats."""

    def test_neutral_creature(self):
        """All attributes at 5, Common, form 0."""
        stats = derive_base_stats(BaseAttributes(), Rarity.COMMON)

        assert stats.physical_attack == 34
        assert stats.magical_attack == 34
        assert stats.physical_defense == 25
        assert stats.magical_defense == 25
        assert stats.max_health == 115
        assert stats.initiative == 30
        assert stats.critical_chance == pytest.approx(13.5)
        assert stats.dodge_chance == pytest.approx(8.5)
        assert stats.energy_cost == 11

    def test_derivation_is_idempotent(self):
        base = BaseAttributes(energy=3, strength=8, magic=2, stamina=6, speed=7)
        first = derive_base_stats(base, Rarity.EPIC, form=2, specialties=(Attribute.STRENGTH,))
        second = derive_base_stats(base, Rarity.EPIC, form=2, specialties=(Attribute.STRENGTH,))
        assert first == second

    def test_rarity_and_form_scale_up(self):
        common = derive_base_stats(BaseAttributes(), Rarity.COMMON)
        legendary = derive_base_stats(BaseAttributes(), Rarity.LEGENDARY)
        evolved = derive_base_stats(BaseAttributes(), Rarity.COMMON, form=3)

        assert legendary.physical_attack > common.physical_attack
        assert legendary.max_health > common.max_health
        assert evolved.physical_attack > common.physical_attack
        # Initiative ignores rarity
        assert legendary.initiative == common.initiative

    def test_single_specialty(self):
        """One specialty multiplies its attribute by 2.5."""
        stats = derive_base_stats(BaseAttributes(), Rarity.COMMON, specialties=(Attribute.STRENGTH,))
        # 15 + 5*3*2.5 + 5*0.8
        assert stats.physical_attack == 57
        assert stats.magical_attack == 34

    def test_dual_specialty_is_smaller_each(self):
        stats = derive_base_stats(
            BaseAttributes(), Rarity.COMMON,
            specialties=(Attribute.STRENGTH, Attribute.STAMINA),
        )
        # 15 + 5*3*1.8 + 5*0.8
        assert stats.physical_attack == 46

    def test_chance_caps(self):
        fast = BaseAttributes(speed=20, magic=20, stamina=20)
        stats = derive_base_stats(fast, Rarity.COMMON, specialties=(Attribute.SPEED,))
        assert stats.critical_chance == 40.0
        assert stats.dodge_chance == 25.0

    def test_energy_cost_floor(self):
        stats = derive_base_stats(
            BaseAttributes(energy=20), Rarity.COMMON, specialties=(Attribute.ENERGY,)
        )
        assert stats.energy_cost == 1


class TestOverlay:
    """Tests for permanent modifications and refresh_stats."""

    def test_overlay_floors(self):
        creature = make_creature("weak")
        creature = refresh_stats(creature.with_changes(
            permanent_modifications={"physical_attack": -100, "max_health": -500}
        ))
        assert creature.stats.physical_attack == 1
        assert creature.stats.max_health == 10

    def test_refresh_clamps_health(self):
        creature = make_creature("tank")
        assert creature.current_health == 115

        creature = refresh_stats(creature.with_changes(permanent_modifications={"max_health": -50}))
        assert creature.stats.max_health == 65
        assert creature.current_health == 65

    def test_battle_ready_starts_at_full_health(self):
        creature = make_creature("fresh", rarity="Rare", form=1)
        assert creature.current_health == creature.stats.max_health


class TestProjections:
    """Tests for power, type advantage and odds."""

    def test_round_half_up(self):
        assert round_half_up(10.5) == 11
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2

    def test_creature_power(self):
        assert creature_power(make_creature("plain")) == 141

    def test_type_advantage(self):
        assert type_advantage(BaseAttributes(), BaseAttributes()) == 1.0
        # strength 9 beats stamina 5 by more than 2
        assert type_advantage(BaseAttributes(strength=9), BaseAttributes()) == pytest.approx(1.4)

    def test_even_odds(self):
        assert battle_odds(make_creature("a"), make_creature("b")) == pytest.approx(0.5)

    def test_odds_stay_in_range(self):
        strong = make_creature(
            "titan", rarity="Legendary", form=3,
            base=BaseAttributes(energy=10, strength=10, magic=10, stamina=10, speed=10),
        )
        weak = make_creature("mite", base=BaseAttributes(1, 1, 1, 1, 1))

        assert battle_odds(strong, weak) == pytest.approx(0.9)
        assert 0.1 <= battle_odds(weak, strong) < 0.2
