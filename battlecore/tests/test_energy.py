"""
Tests for the per-side energy economy.
"""

import pytest

from ..engine_core.creature import Attribute
from ..engine_core.energy import max_energy, regen_amount, regenerate, spend
from ..engine_core.errors import ActionRejected, RejectCode
from .conftest import make_creature


class TestEnergy:
    """Tests for pool size, regeneration and spending."""

    def test_max_energy_grows_with_field(self, medium_profile):
        assert max_energy([], medium_profile) == 20
        field = [make_creature(f"c{i}") for i in range(3)]
        assert max_energy(field, medium_profile) == 21

    def test_base_regen(self, medium_profile):
        assert regen_amount([], medium_profile) == 4
        assert regen_amount([], medium_profile, is_opponent=True) == 5

    def test_regen_from_field(self, medium_profile):
        # 4 + 5 * 0.3 = 5.5, rounded half up
        assert regen_amount([make_creature("c")], medium_profile) == 6

    def test_energy_specialists_add_one(self, medium_profile):
        specialist = make_creature("s", specialty_stats=(Attribute.ENERGY,))
        assert regen_amount([specialist], medium_profile) == 7

    def test_regenerate_clamps_to_max(self, medium_profile):
        energy, gained = regenerate(19, [], medium_profile)
        assert energy == 20
        assert gained == 1

    def test_spend(self):
        assert spend(5, 2) == 3
        assert spend(2, 2) == 0

    def test_spend_rejects_overdraft(self):
        with pytest.raises(ActionRejected) as exc_info:
            spend(1, 2)
        assert exc_info.value.code == RejectCode.NOT_ENOUGH_ENERGY
        assert "Not enough energy" in exc_info.value.message
