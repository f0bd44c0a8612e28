"""
Content Module - Sample opponent-content generator.

Provides a species catalogue plus generators for opponent decks (per
difficulty tier) and player starter collections.
"""

from .species import SPECIES, Species, ItemTemplate, get_species
from .generator import (
    PlayerCollection,
    build_creature,
    generate_opponent,
    generate_player_collection,
    opponent_deploy_cost,
)

__all__ = [
    "SPECIES",
    "Species",
    "ItemTemplate",
    "get_species",
    "PlayerCollection",
    "build_creature",
    "generate_opponent",
    "generate_player_collection",
    "opponent_deploy_cost",
]
