"""
Battlecore - Creature Battle Simulation Engine

A deterministic, turn-based engine for creature card battles against a
computer opponent. The engine provides:
- Stat derivation from base attributes, rarity, form and specialties
- An effect ledger for timed buffs, debuffs and charges
- Combat, tool and spell resolution
- A per-side energy economy
- A turn state machine with win/loss detection
- A tiered opponent planner (easy, medium, hard, expert)
"""

__version__ = "0.1.0"
