"""
Species Catalogue - Creature and item templates for generated content.

This module contains a small catalogue used by the content generator,
the CLI demo and tests. Real decks come from the deck-construction
service; these templates only need to satisfy the Creature model.

Species structure:
- Base attributes (energy, strength, magic, stamina, speed)
- Specialty stats (0-2 attributes that get the specialty multiplier)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.creature import Attribute, BaseAttributes
from ..engine_core.items import EffectName


@dataclass(frozen=True)
class Species:
    """
    Template for a creature species.

    Generated creatures start from these attributes; the tier stat
    bonus is added on top.
    """
    species_id: str
    name: str
    base: BaseAttributes
    specialty_stats: tuple[Attribute, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class ItemTemplate:
    """Template for a tool or spell."""
    template_id: str
    name: str
    item_type: Attribute
    effect: EffectName
    keywords: tuple[str, ...] = field(default_factory=tuple)


# ============================================================================
# Species
# ============================================================================

EMBERFANG = Species(
    species_id="emberfang",
    name="Emberfang",
    base=BaseAttributes(energy=4, strength=9, magic=3, stamina=6, speed=6),
    specialty_stats=(Attribute.STRENGTH,),
    description="A fire wolf that hits hard and early",
)

TIDEWARDEN = Species(
    species_id="tidewarden",
    name="Tidewarden",
    base=BaseAttributes(energy=5, strength=4, magic=6, stamina=9, speed=3),
    specialty_stats=(Attribute.STAMINA,),
    description="A shelled guardian that soaks up punishment",
)

STORMWISP = Species(
    species_id="stormwisp",
    name="Stormwisp",
    base=BaseAttributes(energy=7, strength=2, magic=9, stamina=3, speed=7),
    specialty_stats=(Attribute.MAGIC,),
    description="A crackling spirit of raw magic",
)

THORNBACK = Species(
    species_id="thornback",
    name="Thornback",
    base=BaseAttributes(energy=3, strength=7, magic=2, stamina=8, speed=4),
    specialty_stats=(Attribute.STRENGTH, Attribute.STAMINA),
    description="Armored brute covered in spines",
)

GLIMMERMOTH = Species(
    species_id="glimmermoth",
    name="Glimmermoth",
    base=BaseAttributes(energy=8, strength=2, magic=6, stamina=4, speed=8),
    specialty_stats=(Attribute.ENERGY,),
    description="Feeds its allies with stored light",
)

DUSKSTALKER = Species(
    species_id="duskstalker",
    name="Duskstalker",
    base=BaseAttributes(energy=4, strength=7, magic=4, stamina=4, speed=9),
    specialty_stats=(Attribute.SPEED,),
    description="Strikes first and rarely gets hit",
)

RUNEGOLEM = Species(
    species_id="runegolem",
    name="Runegolem",
    base=BaseAttributes(energy=6, strength=6, magic=7, stamina=7, speed=2),
    specialty_stats=(Attribute.MAGIC, Attribute.STAMINA),
    description="Slow construct etched with warding runes",
)

SPARKLING = Species(
    species_id="sparkling",
    name="Sparkling",
    base=BaseAttributes(energy=6, strength=4, magic=5, stamina=4, speed=6),
    specialty_stats=(),
    description="A small, cheap all-rounder",
)

VOIDSERPENT = Species(
    species_id="voidserpent",
    name="Voidserpent",
    base=BaseAttributes(energy=7, strength=5, magic=8, stamina=5, speed=5),
    specialty_stats=(Attribute.ENERGY, Attribute.MAGIC),
    description="Coils around its prey and drains its power",
)

IRONHORN = Species(
    species_id="ironhorn",
    name="Ironhorn",
    base=BaseAttributes(energy=3, strength=8, magic=3, stamina=7, speed=5),
    specialty_stats=(),
    description="Charges straight through defensive lines",
)


# All species, in catalogue order
SPECIES: dict[str, Species] = {
    s.species_id: s for s in (
        EMBERFANG,
        TIDEWARDEN,
        STORMWISP,
        THORNBACK,
        GLIMMERMOTH,
        DUSKSTALKER,
        RUNEGOLEM,
        SPARKLING,
        VOIDSERPENT,
        IRONHORN,
    )
}


# ============================================================================
# Items
# ============================================================================

TOOL_TEMPLATES: tuple[ItemTemplate, ...] = (
    ItemTemplate("iron-claws", "Iron Claws", Attribute.STRENGTH, EffectName.SURGE),
    ItemTemplate("bark-plate", "Bark Plate", Attribute.STAMINA, EffectName.SHIELD),
    ItemTemplate("echo-charm", "Echo Charm", Attribute.MAGIC, EffectName.ECHO),
    ItemTemplate("leech-fang", "Leech Fang", Attribute.SPEED, EffectName.DRAIN),
    ItemTemplate("storm-coil", "Storm Coil", Attribute.MAGIC, EffectName.CHARGE),
    ItemTemplate("sun-crystal", "Sun Crystal", Attribute.ENERGY, EffectName.SURGE),
)

SPELL_TEMPLATES: tuple[ItemTemplate, ...] = (
    ItemTemplate("fire-lance", "Fire Lance", Attribute.STRENGTH, EffectName.SURGE, ("damage",)),
    ItemTemplate("mending-light", "Mending Light", Attribute.STAMINA, EffectName.SHIELD, ("healing",)),
    ItemTemplate("soul-siphon", "Soul Siphon", Attribute.MAGIC, EffectName.DRAIN, ("damage",)),
    ItemTemplate("rising-tide", "Rising Tide", Attribute.STAMINA, EffectName.ECHO),
    ItemTemplate("gathering-storm", "Gathering Storm", Attribute.MAGIC, EffectName.CHARGE),
    ItemTemplate("mana-well", "Mana Well", Attribute.ENERGY, EffectName.ECHO),
)


def get_species(species_id: str) -> Species:
    """Get a species by ID (KeyError if unknown)."""
    return SPECIES[species_id]
