"""
Builds a fresh game snapshot from a generated map and start positions.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from tribesim.data_models import (
    CampId,
    GameState,
    HexCoord,
    HexMap,
    Lootbox,
    LootboxId,
    Player,
    TribeId,
    UnitId,
)
from tribesim.diplomacy import create_initial_diplomacy
from tribesim.game_state.barbarians import create_barbarian_camp
from tribesim.rng import RngFn
from tribesim.units import add_unit, create_unit

logger = logging.getLogger(__name__)

STARTING_UNITS = ("settler", "warrior", "scout")


def create_initial_state(
    hex_map: HexMap,
    start_positions: dict[TribeId, HexCoord],
    human_tribe: Optional[TribeId] = None,
    rng: Optional[RngFn] = None,
    starting_gold: int = 0,
    lootbox_positions: tuple[HexCoord, ...] = (),
    camp_positions: tuple[HexCoord, ...] = (),
) -> GameState:
    """
    Create turn 1 of a new game.

    Players take turns in the order of ``start_positions``. Each tribe starts
    with a settler, a warrior and a scout on its start hex; rarity is rolled
    with ``rng`` when given. All diplomatic relations start neutral.
    """
    tribe_ids = list(start_positions)
    if not tribe_ids:
        raise ValueError("At least one tribe is required")

    players = tuple(
        Player(
            tribe_id=tribe_id,
            tribe_name=str(tribe_id),
            is_human=tribe_id == human_tribe,
            treasury=starting_gold,
        )
        for tribe_id in tribe_ids
    )
    state = GameState(
        turn=1,
        current_player=tribe_ids[0],
        players=players,
        map=hex_map,
        diplomacy=create_initial_diplomacy(tribe_ids),
    )

    for tribe_id, position in start_positions.items():
        for unit_type in STARTING_UNITS:
            unit_id, state = state.allocate_id("unit")
            state = add_unit(
                state, create_unit(unit_type, tribe_id, position, rng=rng, unit_id=UnitId(unit_id))
            )

    lootboxes = []
    for position in lootbox_positions:
        lootbox_id, state = state.allocate_id("lootbox")
        lootboxes.append(Lootbox(id=LootboxId(lootbox_id), position=position))

    camps = []
    for position in camp_positions:
        camp_id, state = state.allocate_id("camp")
        camps.append(create_barbarian_camp(CampId(camp_id), position))

    logger.info(f"New game: {len(players)} tribes on a {hex_map.width}x{hex_map.height} map")
    return replace(state, lootboxes=tuple(lootboxes), barbarian_camps=tuple(camps))
