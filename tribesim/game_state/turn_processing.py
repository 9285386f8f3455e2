"""
End-of-turn processing.

Ending a turn heals and refreshes the current player's units, ticks that
player's buffs, gives that player a chance at any great person it has
qualified for and hands control to the next living player. When play wraps
back around, the round ends: the turn counter advances, diplomacy ticks,
barbarian camps spawn and then every barbarian unit takes its turn.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tribesim.combat import calculate_healing, heal_unit
from tribesim.data_models import BARBARIAN_TRIBE, GameState, TribeId
from tribesim.diplomacy import process_diplomacy_turn
from tribesim.game_state.barbarians import process_barbarian_ai, process_barbarian_spawning
from tribesim.game_state.great_people import check_great_people, tick_buffs
from tribesim.observability.run_log import get_run_log
from tribesim.rng import RngFn
from tribesim.units import reset_unit_movement

logger = logging.getLogger(__name__)


def refresh_units(state: GameState, tribe_id: TribeId) -> GameState:
    """Heal (based on this turn's activity) then reset movement and has_acted."""
    units = dict(state.units)
    for unit_id, unit in state.units.items():
        if unit.owner != tribe_id:
            continue
        healed = heal_unit(unit, calculate_healing(state, unit))
        units[unit_id] = reset_unit_movement(healed)
    return replace(state, units=units)


def _next_player(state: GameState) -> tuple[TribeId, bool]:
    """Next living player after the current one, and whether the round wrapped."""
    order = [p.tribe_id for p in state.players]
    living = set(state.living_tribes())
    if state.current_player not in order or not living:
        return state.current_player, False

    start = order.index(state.current_player)
    for step in range(1, len(order) + 1):
        index = (start + step) % len(order)
        if order[index] in living:
            return order[index], index <= start
    return state.current_player, True


def end_round(state: GameState, rng: RngFn) -> GameState:
    new_state = replace(state, turn=state.turn + 1)
    new_state = process_diplomacy_turn(new_state)
    new_state = process_barbarian_spawning(new_state, rng)
    new_state = refresh_units(new_state, BARBARIAN_TRIBE)
    new_state = process_barbarian_ai(new_state, rng)
    logger.info(f"Turn {new_state.turn} begins")
    return new_state


def end_turn(state: GameState, rng: RngFn) -> GameState:
    tribe_id = state.current_player
    new_state = refresh_units(state, tribe_id)

    player = new_state.get_player(tribe_id)
    if player is not None:
        new_state = new_state.with_player(replace(player, active_buffs=tick_buffs(player.active_buffs)))
        new_state = check_great_people(new_state, tribe_id, rng)

    next_player, wrapped = _next_player(new_state)
    new_state = replace(new_state, current_player=next_player)
    get_run_log().log_transition(tribe_id, next_player, "end_turn", turn=state.turn)

    if wrapped:
        new_state = end_round(new_state, rng)
    return new_state
