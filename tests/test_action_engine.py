"""
Tests for GameEngine action dispatch, turn flow and the initial state.
"""

from dataclasses import replace

import pytest

from tribesim.data_models import (
    BARBARIAN_TRIBE,
    CampId,
    HexCoord,
    Lootbox,
    LootboxId,
    Stance,
    TribeId,
)
from tribesim.diplomacy import get_stance, get_war_weariness
from tribesim.game_state import (
    ACTION_TYPES,
    SPAWN_COOLDOWN,
    CreateTradeRoute,
    DeclareWar,
    EndTurn,
    FoundSettlement,
    MoveUnit,
    ProposePeace,
    SelectPromotion,
    StartProduction,
    StartResearch,
    create_barbarian_camp,
    create_initial_state,
)
from tribesim.observability.run_log import get_run_log

from tests.helpers import make_map, make_state, place_settlement, place_unit, set_stance, set_tile

MONKES = TribeId("monkes")
DEGODS = TribeId("degods")
GECKOS = TribeId("geckos")


# =============================================================================
# DISPATCH
# =============================================================================


class TestDispatch:
    """Unknown actions raise; failures leave the snapshot alone."""

    def test_unknown_action_raises(self, engine, two_tribe_state):
        with pytest.raises(TypeError):
            engine.apply_action(two_tribe_state, "jump")

    def test_every_action_type_has_a_handler(self, engine):
        assert set(ACTION_TYPES) <= set(engine._handlers)

    def test_failure_returns_same_state(self, engine, two_tribe_state):
        result = engine.apply_action(two_tribe_state, MoveUnit(unit_id="ghost", target=HexCoord(1, 1)))
        assert not result.success
        assert result.error == "Unit not found"
        assert result.state is two_tribe_state

    def test_cannot_command_other_tribes_units(self, engine, two_tribe_state):
        state, unit = place_unit(two_tribe_state, "warrior", "degods", 4, 4)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(5, 4)))
        assert result.error == "Not your unit"

    def test_tribe_actions_need_current_player(self, engine, two_tribe_state):
        result = engine.apply_action(two_tribe_state, DeclareWar(tribe_id=DEGODS, target=MONKES))
        assert result.error == "Not your turn"

    def test_actions_are_logged(self, engine, two_tribe_state):
        engine.apply_action(two_tribe_state, DeclareWar(tribe_id=MONKES, target=DEGODS))
        actions = get_run_log().get_actions()
        assert actions[-1].action_type == "DeclareWar"
        assert actions[-1].success


# =============================================================================
# UNIT ACTIONS
# =============================================================================


class TestMoveAction:
    """Movement through the engine."""

    def test_simple_move(self, engine, two_tribe_state):
        state, unit = place_unit(two_tribe_state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(2, 0)))
        moved = result.state.units[unit.id]
        assert result.success
        assert moved.position == HexCoord(2, 0)
        assert moved.has_acted

    def test_hostile_territory_closed(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.HOSTILE)
        state = set_tile(state, 1, 0, owner=DEGODS)
        state, unit = place_unit(state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(1, 0)))
        assert result.error == "Cannot enter hostile territory"

    def test_neutral_territory_costs_extra(self, engine, two_tribe_state):
        state = set_tile(two_tribe_state, 1, 0, owner=DEGODS)
        state, unit = place_unit(state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(1, 0)))
        assert result.state.units[unit.id].movement_remaining == 0

    def test_out_of_reach(self, engine, two_tribe_state):
        state, unit = place_unit(two_tribe_state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(5, 0)))
        assert result.error == "No path to target"

    def test_lootbox_claimed_on_entry(self, engine, two_tribe_state):
        """The engine rng draws 0.0, so the box pays its minimum."""
        state = replace(two_tribe_state, lootboxes=(Lootbox(id=LootboxId("lb"), position=HexCoord(2, 0)),))
        state, scout = place_unit(state, "scout", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=scout.id, target=HexCoord(2, 0)))
        assert result.state.get_player(MONKES).treasury == 25
        assert result.state.lootboxes[0].claimed

    def test_empty_camp_cleared_on_entry(self, engine, two_tribe_state):
        camp = create_barbarian_camp(CampId("camp"), HexCoord(1, 0))
        state = replace(two_tribe_state, barbarian_camps=(camp,))
        state, unit = place_unit(state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, MoveUnit(unit_id=unit.id, target=HexCoord(1, 0)))
        assert result.state.barbarian_camps[0].destroyed
        assert result.state.get_player(MONKES).treasury == 25
        assert result.state.get_player(MONKES).great_people_progress.gold == 25


class TestSettlementActions:
    """Founding and production."""

    def test_first_settlement_is_capital(self, engine, two_tribe_state):
        state, settler = place_unit(two_tribe_state, "settler", "monkes", 4, 4)
        result = engine.apply_action(state, FoundSettlement(settler_id=settler.id))
        (settlement,) = result.state.settlements.values()
        assert settlement.is_capital
        assert settlement.position == HexCoord(4, 4)
        assert settler.id not in result.state.units
        owned = [t for t in result.state.map.tiles.values() if t.owner == MONKES]
        assert len(owned) == 7

    def test_too_close_to_existing(self, engine, two_tribe_state):
        state, _ = place_settlement(two_tribe_state, "degods", 4, 4)
        state, settler = place_unit(state, "settler", "monkes", 5, 4)
        result = engine.apply_action(state, FoundSettlement(settler_id=settler.id))
        assert result.error == "Cannot found settlement here"

    def test_production_only_in_own_settlement(self, engine, two_tribe_state):
        state, theirs = place_settlement(two_tribe_state, "degods", 4, 4)
        action = StartProduction(settlement_id=theirs.id, kind="unit", item_id="warrior", cost=40)
        assert engine.apply_action(state, action).error == "Not your settlement"

    def test_promotion_needs_xp(self, engine, two_tribe_state):
        state, unit = place_unit(two_tribe_state, "warrior", "monkes", 0, 0)
        result = engine.apply_action(state, SelectPromotion(unit_id=unit.id, promotion_id="battlecry"))
        assert result.error == "Promotion not available"


class TestPlayerActions:
    """Research, trade and diplomacy through the engine."""

    def test_start_research(self, engine, two_tribe_state):
        result = engine.apply_action(two_tribe_state, StartResearch(tribe_id=MONKES, tech_id="mining"))
        assert result.state.get_player(MONKES).current_research == "mining"

    def test_allied_route_earns_bonus(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.ALLIED)
        state, home = place_settlement(state, "monkes", 1, 1)
        state, away = place_settlement(state, "degods", 7, 7)
        action = CreateTradeRoute(origin=home.id, destination=away.id, gold_per_turn=10)
        result = engine.apply_action(state, action)
        assert result.state.trade_routes[0].gold_per_turn == 11

    def test_no_trade_with_enemies(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.WAR)
        state, home = place_settlement(state, "monkes", 1, 1)
        state, away = place_settlement(state, "degods", 7, 7)
        result = engine.apply_action(state, CreateTradeRoute(origin=home.id, destination=away.id))
        assert result.error == "Cannot trade with an enemy"

    def test_duplicate_route_rejected(self, engine, two_tribe_state):
        state, home = place_settlement(two_tribe_state, "monkes", 1, 1)
        state, away = place_settlement(state, "degods", 7, 7)
        action = CreateTradeRoute(origin=home.id, destination=away.id, gold_per_turn=4)
        first = engine.apply_action(state, action).state
        assert engine.apply_action(first, action).error == "Route already exists"

    def test_rejected_peace_starts_cooldown(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.WAR, turns=6)
        result = engine.apply_action(state, ProposePeace(tribe_id=MONKES, target=DEGODS, accepted=False))
        assert result.success
        assert get_stance(result.state, MONKES, DEGODS) == Stance.WAR
        retry = engine.apply_action(result.state, ProposePeace(tribe_id=MONKES, target=DEGODS))
        assert retry.error == "Peace was recently rejected (wait 3 turns)"

    def test_accepted_peace(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.WAR, turns=6)
        result = engine.apply_action(state, ProposePeace(tribe_id=MONKES, target=DEGODS))
        assert get_stance(result.state, MONKES, DEGODS) == Stance.HOSTILE


# =============================================================================
# TURN FLOW
# =============================================================================


class TestEndTurn:
    """Handing over play and closing rounds."""

    def test_passes_to_next_player(self, engine, two_tribe_state):
        result = engine.apply_action(two_tribe_state, EndTurn(tribe_id=MONKES))
        assert result.state.current_player == DEGODS
        assert result.state.turn == 1

    def test_round_wrap_advances_turn(self, engine, two_tribe_state):
        state = set_stance(two_tribe_state, "monkes", "degods", Stance.WAR)
        state = engine.apply_action(state, EndTurn(tribe_id=MONKES)).state
        state = engine.apply_action(state, EndTurn(tribe_id=DEGODS)).state
        assert state.current_player == MONKES
        assert state.turn == 2
        assert get_war_weariness(state, MONKES) == 5

    def test_heals_and_refreshes_own_units(self, engine, two_tribe_state):
        state, rested = place_unit(two_tribe_state, "warrior", "monkes", 0, 0, health=50)
        state, busy = place_unit(state, "warrior", "monkes", 5, 5, health=50, has_acted=True, movement_remaining=0)
        after = engine.apply_action(state, EndTurn(tribe_id=MONKES)).state
        assert after.units[rested.id].health == 60
        assert after.units[busy.id].health == 50
        assert after.units[busy.id].movement_remaining == 2
        assert not after.units[busy.id].has_acted

    def test_skips_eliminated_players(self, engine):
        state = make_state(("monkes", "degods", "geckos"))
        state = state.with_player(replace(state.get_player(DEGODS), eliminated=True))
        after = engine.apply_action(state, EndTurn(tribe_id=MONKES)).state
        assert after.current_player == GECKOS

    def test_round_end_spawns_barbarians(self, engine, two_tribe_state):
        camp = replace(create_barbarian_camp(CampId("camp"), HexCoord(8, 8)), spawn_cooldown=1)
        state = replace(two_tribe_state, barbarian_camps=(camp,))
        state = engine.apply_action(state, EndTurn(tribe_id=MONKES)).state
        state = engine.apply_action(state, EndTurn(tribe_id=DEGODS)).state
        barbarians = [u for u in state.units.values() if u.owner == BARBARIAN_TRIBE]
        assert len(barbarians) == 1
        assert state.barbarian_camps[0].spawn_cooldown == SPAWN_COOLDOWN


# =============================================================================
# INITIAL STATE
# =============================================================================


class TestCreateInitialState:
    """New game setup."""

    def test_starting_units_and_order(self, seeded_rng):
        starts = {MONKES: HexCoord(1, 1), DEGODS: HexCoord(8, 8)}
        state = create_initial_state(make_map(), starts, human_tribe=MONKES, rng=seeded_rng)
        assert state.turn == 1
        assert state.current_player == MONKES
        assert state.get_player(MONKES).is_human
        assert sorted(u.type for u in state.units.values() if u.owner == DEGODS) == [
            "scout", "settler", "warrior",
        ]
        assert get_stance(state, MONKES, DEGODS) == Stance.NEUTRAL

    def test_ids_are_deterministic(self):
        starts = {MONKES: HexCoord(1, 1), DEGODS: HexCoord(8, 8)}
        first = create_initial_state(make_map(), starts, lootbox_positions=(HexCoord(4, 4),))
        second = create_initial_state(make_map(), starts, lootbox_positions=(HexCoord(4, 4),))
        assert set(first.units) == set(second.units)
        assert first.lootboxes == second.lootboxes

    def test_requires_a_tribe(self):
        with pytest.raises(ValueError):
            create_initial_state(make_map(), {})
