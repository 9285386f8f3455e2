"""
AI turn synthesis and the driver loop that plays it.

generate_ai_actions builds the whole turn up front from one snapshot:

1. diplomacy (peace, war, alliance per other tribe)
2. research
3. culture
4. wonders
5. units (settlers, military, scouts, builders, great people)
6. trade routes
7. EndTurn, always last and always exactly once

Later stages do not see the effects of earlier ones. execute_ai_turn then
applies the list in order, skipping actions the engine rejects.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from tribesim.ai.diplomacy_ai import generate_diplomacy_actions
from tribesim.ai.military_strength import MilitaryStrengthCache
from tribesim.ai.planning_ai import (
    generate_culture_action,
    generate_research_action,
    generate_wonder_action,
)
from tribesim.ai.subsystem_queries import NullSubsystemQueries, SubsystemQueries
from tribesim.ai.trade_ai import generate_trade_action
from tribesim.ai.unit_ai import generate_unit_actions
from tribesim.content_loader import get_tribe_profile
from tribesim.data_models import GameState, TribeId
from tribesim.game_state.actions import Action, EndTurn
from tribesim.rng import RngFn

logger = logging.getLogger(__name__)


class AppliedAction(Protocol):
    success: bool
    state: GameState


ApplyFn = Callable[[GameState, Action], AppliedAction]


def generate_ai_actions(
    state: GameState,
    tribe_id: TribeId,
    rng: RngFn,
    queries: Optional[SubsystemQueries] = None,
    strength: Optional[MilitaryStrengthCache] = None,
) -> list[Action]:
    """
    Plan one full turn for ``tribe_id``.

    ``strength`` may be shared across tribes of the same turn; a fresh
    cache is used otherwise.
    """
    queries = queries or NullSubsystemQueries()
    strength = strength or MilitaryStrengthCache()
    profile = get_tribe_profile(tribe_id)
    personality = profile.personality

    actions: list[Action] = []
    actions.extend(generate_diplomacy_actions(state, tribe_id, personality, strength, rng))

    for planned in (
        generate_research_action(state, tribe_id, profile, queries),
        generate_culture_action(state, tribe_id, profile, queries),
        generate_wonder_action(state, tribe_id, profile, queries),
    ):
        if planned is not None:
            actions.append(planned)

    actions.extend(generate_unit_actions(state, tribe_id, personality))

    trade = generate_trade_action(state, tribe_id, profile, queries, rng)
    if trade is not None:
        actions.append(trade)

    actions.append(EndTurn(tribe_id=tribe_id))
    logger.debug(f"AI {tribe_id} planned {len(actions)} actions for turn {state.turn}")
    return actions


def execute_ai_turn(
    state: GameState,
    apply: ApplyFn,
    rng: RngFn,
    queries: Optional[SubsystemQueries] = None,
    strength: Optional[MilitaryStrengthCache] = None,
) -> GameState:
    """
    Plan and play the current player's turn.

    Human players are left alone. Rejected actions are skipped; the loop
    stops after EndTurn.
    """
    player = state.get_player(state.current_player)
    if player is None or player.is_human:
        return state

    actions = generate_ai_actions(state, state.current_player, rng, queries, strength)
    current = state
    skipped = 0
    for action in actions:
        result = apply(current, action)
        if result.success:
            current = result.state
        else:
            skipped += 1
        if isinstance(action, EndTurn):
            break

    if skipped:
        logger.debug(f"AI {player.tribe_id} skipped {skipped} rejected actions")
    return current
