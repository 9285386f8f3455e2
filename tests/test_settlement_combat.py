"""
Tests for settlement siege and capture.
"""

import pytest

from tribesim.combat import (
    SETTLEMENT_DEFENSE_STRENGTH,
    apply_settlement_combat_result,
    can_attack_settlement,
    can_capture_settlement,
    capture_settlement,
    get_attackable_settlements,
    get_settlement_combat_preview,
    resolve_settlement_combat,
)
from tribesim.data_models import HexCoord, Stance, TribeId

from tests.helpers import place_settlement, place_unit, set_stance, set_tile


@pytest.fixture
def siege_state(two_tribe_state):
    """A monkes warrior next to a degods settlement, tribes at war."""
    state = set_stance(two_tribe_state, "monkes", "degods", Stance.WAR)
    state, _ = place_settlement(state, "degods", 5, 5, settlement_id="ds", is_capital=True)
    state, _ = place_unit(state, "warrior", "monkes", 4, 5, unit_id="mw")
    return state


# =============================================================================
# SIEGE
# =============================================================================


class TestCanAttackSettlement:
    """Siege legality."""

    def test_adjacent_warrior_at_war(self, siege_state):
        assert can_attack_settlement(siege_state, siege_state.units["mw"], siege_state.settlements["ds"])

    def test_defenders_must_fall_first(self, siege_state):
        state, _ = place_unit(siege_state, "warrior", "degods", 5, 5)
        check = can_attack_settlement(state, state.units["mw"], state.settlements["ds"])
        assert check.reason == "Must defeat defending units first"

    def test_requires_war(self, siege_state):
        state = set_stance(siege_state, "monkes", "degods", Stance.NEUTRAL)
        check = can_attack_settlement(state, state.units["mw"], state.settlements["ds"])
        assert check.reason == "Not at war with this tribe"

    def test_own_settlement(self, siege_state):
        state, own = place_settlement(siege_state, "monkes", 3, 5)
        check = can_attack_settlement(state, state.units["mw"], own)
        assert check.reason == "Cannot attack your own settlement"

    def test_melee_must_be_adjacent(self, siege_state):
        state, far = place_unit(siege_state, "warrior", "monkes", 1, 5)
        check = can_attack_settlement(state, far, state.settlements["ds"])
        assert check.reason == "Must be adjacent to attack settlement"

    def test_attackable_list(self, siege_state):
        targets = get_attackable_settlements(siege_state, siege_state.units["mw"])
        assert [s.id for s in targets] == ["ds"]


class TestResolveSiege:
    """Damage to walls uses settlement strength against a fixed defense."""

    def test_warrior_deals_thirty(self, siege_state):
        result = resolve_settlement_combat(siege_state, "mw", "ds")
        assert result.damage_dealt == 30
        assert result.settlement.health == 70
        assert not result.walls_breached
        assert result.attacker.has_acted

    def test_damage_scales_with_settlement_strength(self, siege_state):
        state, _ = place_unit(siege_state, "warrior", "monkes", 4, 5, unit_id="mw", settlement_strength=40)
        result = resolve_settlement_combat(state, "mw", "ds")
        assert result.damage_dealt == 60

    def test_breach_does_not_change_owner(self, siege_state):
        state, _ = place_settlement(siege_state, "degods", 5, 5, settlement_id="ds", health=20)
        result = resolve_settlement_combat(state, "mw", "ds")
        assert result.walls_breached
        after = apply_settlement_combat_result(state, result)
        assert after.settlements["ds"].health == 0
        assert after.settlements["ds"].owner == TribeId("degods")

    def test_illegal_returns_none(self, siege_state):
        state = set_stance(siege_state, "monkes", "degods", Stance.NEUTRAL)
        assert resolve_settlement_combat(state, "mw", "ds") is None
        assert resolve_settlement_combat(siege_state, "mw", "nowhere") is None

    def test_preview(self, siege_state):
        preview = get_settlement_combat_preview(
            siege_state, siege_state.units["mw"], siege_state.settlements["ds"]
        )
        assert preview.settlement_defense == SETTLEMENT_DEFENSE_STRENGTH
        assert preview.estimated_damage == 30
        assert preview.turns_to_conquer == 4
        assert not preview.is_siege


# =============================================================================
# CAPTURE
# =============================================================================


class TestCapture:
    """Taking a breached settlement."""

    @pytest.fixture
    def breached_state(self, siege_state):
        state, _ = place_settlement(siege_state, "degods", 5, 5, settlement_id="ds", health=0, is_capital=True)
        state = set_tile(state, 5, 5, owner=TribeId("degods"))
        state = set_tile(state, 6, 5, owner=TribeId("degods"))
        state = set_tile(state, 8, 5, owner=TribeId("degods"))
        return state

    def test_cannot_capture_standing_walls(self, siege_state):
        check = can_capture_settlement(siege_state, siege_state.units["mw"], siege_state.settlements["ds"])
        assert check.reason == "Settlement defenses still standing"

    def test_ranged_units_cannot_capture(self, breached_state):
        state, archer = place_unit(breached_state, "archer", "monkes", 5, 4)
        check = can_capture_settlement(state, archer, state.settlements["ds"])
        assert check.reason == "Only melee units can capture"

    def test_capture_transfers_ownership(self, breached_state):
        after = capture_settlement(breached_state, "mw", "ds")
        captured = after.settlements["ds"]
        assert captured.owner == TribeId("monkes")
        assert not captured.is_capital
        assert captured.health == captured.max_health // 2
        assert captured.production_queue == ()

    def test_capturer_moves_in(self, breached_state):
        after = capture_settlement(breached_state, "mw", "ds")
        unit = after.units["mw"]
        assert unit.position == HexCoord(5, 5)
        assert unit.has_acted
        assert unit.movement_remaining == 0

    def test_only_nearby_tiles_change_hands(self, breached_state):
        after = capture_settlement(breached_state, "mw", "ds")
        assert after.map.get_tile(HexCoord(5, 5)).owner == TribeId("monkes")
        assert after.map.get_tile(HexCoord(6, 5)).owner == TribeId("monkes")
        assert after.map.get_tile(HexCoord(8, 5)).owner == TribeId("degods")

    def test_illegal_capture_returns_none(self, siege_state):
        assert capture_settlement(siege_state, "mw", "ds") is None
