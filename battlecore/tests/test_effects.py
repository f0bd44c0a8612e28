"""
Tests for the effect ledger.

Tests:
- Attaching effects and stat recomputation
- Ticks: health deltas, durations, charges, stances
- Clearing the defensive stance
- Death effects
"""

from ..engine_core.combat import defend_creature
from ..engine_core.creature import Attribute, ChargeState, EffectKind
from ..engine_core.difficulty import get_profile
from ..engine_core.effects import (
    apply_death_effects,
    attach,
    clear_defending,
    make_effect,
    remove_defeated,
    scaled_tick_health,
    tick,
)
from .conftest import make_creature


class TestAttach:
    """Tests for attach and make_effect."""

    def test_attach_recomputes_stats(self, knight):
        buffed = attach(knight, make_effect("Rage", 2, {"physical_attack": 6}))

        assert buffed.stats.physical_attack == knight.stats.physical_attack + 6
        assert buffed.active_effects[0].effect_id == "knight-fx1"
        assert buffed.active_effects[0].kind == EffectKind.BUFF

    def test_effects_stack_without_merging(self, knight):
        buffed = attach(knight, make_effect("Rage", 2, {"physical_attack": 6}))
        buffed = attach(buffed, make_effect("Rage", 2, {"physical_attack": 6}))

        assert len(buffed.active_effects) == 2
        assert buffed.stats.physical_attack == knight.stats.physical_attack + 12

    def test_classification(self):
        assert make_effect("Curse", 2, {"physical_defense": -3}).kind == EffectKind.DEBUFF
        assert make_effect("Burn", 2, health_delta_per_tick=-4).kind == EffectKind.DOT
        assert make_effect("Bloom", 2, health_delta_per_tick=4).kind == EffectKind.HOT


class TestTick:
    """Tests for the end-of-turn tick."""

    def test_damage_over_time_expires(self, knight, medium_profile):
        """A -5 tick with one turn left: health drops by 5 and the effect is gone."""
        poisoned = attach(knight, make_effect("Poison", 1, health_delta_per_tick=-5))
        ticked, messages = tick(poisoned, medium_profile)

        assert ticked.current_health == knight.current_health - 5
        assert ticked.active_effects == ()
        assert "Knight took 5 damage from Poison." in messages

    def test_health_clamped_at_zero(self, knight, medium_profile):
        poisoned = attach(knight.with_changes(current_health=3),
                          make_effect("Poison", 2, health_delta_per_tick=-5))
        ticked, _ = tick(poisoned, medium_profile)
        assert ticked.current_health == 0
        assert ticked.is_defeated

    def test_healing_clamped_at_max(self, knight, medium_profile):
        blooming = attach(knight, make_effect("Bloom", 2, health_delta_per_tick=8))
        ticked, messages = tick(blooming, medium_profile)
        assert ticked.current_health == ticked.stats.max_health
        assert messages == []

    def test_duration_decrements(self, knight, medium_profile):
        buffed = attach(knight, make_effect("Rage", 3, {"physical_attack": 6}))
        ticked, _ = tick(buffed, medium_profile)

        assert ticked.active_effects[0].remaining_duration == 2
        assert ticked.stats.physical_attack == knight.stats.physical_attack + 6

    def test_tier_and_rarity_scaling(self):
        hard = get_profile("hard")
        assert scaled_tick_health(-5, make_creature("c"), hard) == -6
        assert scaled_tick_health(-5, make_creature("l", rarity="Legendary"), hard) == -8

    def test_charge_releases_bonus(self, knight, medium_profile):
        charge = ChargeState(per_turn_bonus=5, final_burst=20, max_turns=2)
        charging = attach(knight, make_effect("Storm Coil Effect", 2, charge=charge))

        first, _ = tick(charging, medium_profile)
        assert first.next_attack_bonus == 0
        assert first.active_effects[0].charge.progress == 1

        second, messages = tick(first, medium_profile)
        assert second.next_attack_bonus == 30
        assert second.active_effects == ()
        assert any("fully charged" in m for m in messages)

    def test_stance_survives_tick(self, knight, medium_profile):
        defended = defend_creature(knight, medium_profile)
        ticked, _ = tick(defended, medium_profile)

        assert ticked.is_defending
        assert ticked.active_effects[0].remaining_duration == 1
        assert ticked.stats.physical_defense == defended.stats.physical_defense

    def test_hard_tier_reinforces_stance(self, knight):
        hard = get_profile("hard")
        defended = defend_creature(knight, hard)
        ticked, _ = tick(defended, hard)
        assert ticked.stats.physical_defense == defended.stats.physical_defense + 2

    def test_clear_defending(self, knight, medium_profile):
        defended = defend_creature(knight, medium_profile)
        cleared = clear_defending(defended)

        assert not cleared.is_defending
        assert cleared.active_effects == ()
        assert cleared.stats == knight.stats


class TestDeathEffects:
    """Tests for one-shot effects when a creature falls."""

    def test_legendary_final_gift(self, knight):
        fallen = make_creature("dragon", "Dragon", rarity="Legendary")
        survivors, messages = apply_death_effects(fallen, [knight])

        assert survivors[0].stats.physical_attack == knight.stats.physical_attack + 3
        assert survivors[0].permanent_modifications["magical_attack"] == 3
        assert "Final Gift" in messages[0]

    def test_energy_specialist_release(self, knight):
        fallen = make_creature("spark", specialty_stats=(Attribute.ENERGY,))
        survivors, _ = apply_death_effects(fallen, [knight])

        assert survivors[0].active_effects[0].name == "Energy Release"
        assert survivors[0].stats.energy_cost == knight.stats.energy_cost - 1

    def test_epic_essence(self, knight):
        fallen = make_creature("wyrm", rarity="Epic")
        survivors, _ = apply_death_effects(fallen, [knight])
        assert survivors[0].active_effects[0].name == "Epic Essence"

    def test_common_has_no_death_effect(self, knight):
        survivors, messages = apply_death_effects(make_creature("rat"), [knight])
        assert survivors == [knight]
        assert messages == []

    def test_remove_defeated(self, knight, golem):
        dead = golem.with_changes(current_health=0)
        survivors, fallen, messages = remove_defeated((knight, dead))

        assert survivors == (knight,)
        assert fallen == [dead]
        assert messages == ["Golem was defeated!"]
