"""
Tribe Simulation: the rules and AI core of a turn-based hex strategy game.

Subpackages:
- hex_grid: axial coordinates, distances and searches
- units: unit stats, rarity, stacking, movement and zone of control
- combat: unit and settlement combat, healing and promotions
- diplomacy: stances, reputation and war weariness
- game_state: actions, the action engine and end-of-turn processing
- ai: personality-driven turn planning
"""

__version__ = "0.1.0"
