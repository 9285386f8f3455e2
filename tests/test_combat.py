"""
Tests for combat strength, attack legality and damage exchange.
"""

import pytest

from tribesim.combat import (
    BASE_COMBAT_DAMAGE,
    XP_PER_COMBAT,
    XP_PER_KILL,
    apply_combat_result,
    calculate_combat_strength,
    can_attack,
    get_combat_preview,
    get_valid_targets,
    is_river_crossing,
    resolve_combat,
)
from tribesim.data_models import HexCoord, Stance, TerrainFeature, TerrainType, TribeId
from tribesim.observability.run_log import get_run_log

from tests.helpers import place_unit, set_stance, set_tile


@pytest.fixture
def war_state(warriors_state):
    """The two adjacent warriors, with their tribes at war."""
    return set_stance(warriors_state, "monkes", "degods", Stance.WAR)


# =============================================================================
# STRENGTH
# =============================================================================


class TestCombatStrength:
    """Additive modifiers on top of base strength."""

    def test_plain_attacker_has_base_strength(self, war_state):
        attacker = war_state.units["mw"]
        breakdown = calculate_combat_strength(war_state, attacker, False, HexCoord(3, 2))
        assert breakdown.total == 20
        assert breakdown.river_crossing_penalty == 0

    def test_terrain_bonus_on_hills(self, war_state):
        """Base 20 on +30% terrain defends at floor(20 * 1.3) = 26."""
        state = set_tile(war_state, 3, 2, terrain=TerrainType.HILLS)
        breakdown = calculate_combat_strength(state, state.units["dw"], True)
        assert breakdown.terrain_bonus == 6
        assert breakdown.total == 26

    def test_terrain_bonus_only_for_defender(self, war_state):
        state = set_tile(war_state, 2, 2, terrain=TerrainType.HILLS)
        breakdown = calculate_combat_strength(state, state.units["mw"], False, HexCoord(3, 2))
        assert breakdown.terrain_bonus == 0

    def test_fortification_when_defender_has_not_acted(self, war_state):
        state, fresh = place_unit(war_state, "warrior", "degods", 7, 7)
        breakdown = calculate_combat_strength(state, fresh, True)
        assert breakdown.fortification_bonus == 2
        assert breakdown.total == 22

    def test_stacking_bonus_for_two_defenders(self, war_state):
        state, _ = place_unit(war_state, "warrior", "degods", 3, 2, has_acted=True)
        breakdown = calculate_combat_strength(state, state.units["dw"], True)
        assert breakdown.stacking_bonus == 2

    def test_adjacency_bonus_capped(self, two_tribe_state):
        """Each adjacent friendly military unit adds 5%, capped at 15%."""
        state, unit = place_unit(two_tribe_state, "warrior", "monkes", 4, 4)
        for q, r in [(5, 4), (3, 4), (4, 5), (4, 3)]:
            state, _ = place_unit(state, "warrior", "monkes", q, r)
        breakdown = calculate_combat_strength(state, unit, False)
        assert breakdown.adjacency_bonus == 3

    def test_civilians_do_not_count_for_adjacency(self, two_tribe_state):
        state, unit = place_unit(two_tribe_state, "warrior", "monkes", 4, 4)
        state, _ = place_unit(state, "settler", "monkes", 5, 4)
        assert calculate_combat_strength(state, unit, False).adjacency_bonus == 0

    def test_health_penalty(self, war_state):
        state, hurt = place_unit(war_state, "warrior", "monkes", 7, 7, health=50)
        breakdown = calculate_combat_strength(state, hurt, False)
        assert breakdown.health_penalty == 5
        assert breakdown.total == 15

    def test_promotion_bonus_by_role(self, war_state):
        state, unit = place_unit(
            war_state, "warrior", "monkes", 7, 7, promotions=("battlecry", "defender"), has_acted=True
        )
        assert calculate_combat_strength(state, unit, False).promotion_bonus == 2
        assert calculate_combat_strength(state, unit, True).promotion_bonus == 2

    def test_ranged_unit_attacks_with_ranged_strength(self, war_state):
        state, archer = place_unit(war_state, "archer", "monkes", 1, 2)
        assert calculate_combat_strength(state, archer, False).base == 25
        assert calculate_combat_strength(state, archer, True).base == 10

    def test_strength_never_below_one(self, war_state):
        state = set_tile(war_state, 7, 7, terrain=TerrainType.MARSH)
        state, weak = place_unit(state, "warrior", "monkes", 7, 7, combat_strength=1, health=1, has_acted=True)
        assert calculate_combat_strength(state, weak, True).total == 1


class TestRiverCrossing:
    """Attacking onto a river hex from dry ground."""

    def test_penalty_when_defender_on_river(self, war_state):
        state = set_tile(war_state, 3, 2, feature=TerrainFeature.RIVER)
        assert is_river_crossing(state, HexCoord(2, 2), HexCoord(3, 2))
        breakdown = calculate_combat_strength(state, state.units["mw"], False, HexCoord(3, 2))
        assert breakdown.river_crossing_penalty == -5
        assert breakdown.total == 15

    def test_no_penalty_when_both_on_river(self, war_state):
        state = set_tile(war_state, 3, 2, feature=TerrainFeature.RIVER)
        state = set_tile(state, 2, 2, feature=TerrainFeature.RIVER)
        assert not is_river_crossing(state, HexCoord(2, 2), HexCoord(3, 2))
        breakdown = calculate_combat_strength(state, state.units["mw"], False, HexCoord(3, 2))
        assert breakdown.river_crossing_penalty == 0

    def test_no_penalty_when_only_attacker_on_river(self, war_state):
        state = set_tile(war_state, 2, 2, feature=TerrainFeature.RIVER)
        assert not is_river_crossing(state, HexCoord(2, 2), HexCoord(3, 2))


# =============================================================================
# LEGALITY
# =============================================================================


class TestCanAttack:
    """Attack legality returns reasons rather than raising."""

    def test_adjacent_enemy_at_war(self, war_state):
        assert can_attack(war_state, war_state.units["mw"], war_state.units["dw"])

    def test_not_at_war(self, warriors_state):
        check = can_attack(warriors_state, warriors_state.units["mw"], warriors_state.units["dw"])
        assert not check
        assert check.reason == "Not at war with this tribe"

    def test_already_acted(self, war_state):
        state, attacker = place_unit(war_state, "warrior", "monkes", 4, 2, has_acted=True)
        check = can_attack(state, attacker, state.units["dw"])
        assert check.reason == "Unit has already acted this turn"

    def test_civilian_cannot_attack(self, war_state):
        state, settler = place_unit(war_state, "settler", "monkes", 4, 2)
        check = can_attack(state, settler, state.units["dw"])
        assert check.reason == "This unit cannot attack"

    def test_own_unit(self, war_state):
        state, other = place_unit(war_state, "warrior", "monkes", 1, 2)
        check = can_attack(state, state.units["mw"], other)
        assert check.reason == "Cannot attack friendly units"

    def test_melee_must_be_adjacent(self, war_state):
        state, far = place_unit(war_state, "warrior", "degods", 6, 2)
        assert can_attack(state, state.units["mw"], far).reason == "Must be adjacent to attack"

    def test_ranged_reach(self, war_state):
        state, archer = place_unit(war_state, "archer", "monkes", 1, 2)
        assert can_attack(state, archer, state.units["dw"])
        state, far = place_unit(state, "warrior", "degods", 5, 2)
        assert can_attack(state, archer, far).reason == "Target out of range"

    def test_barbarians_always_attackable(self, two_tribe_state):
        state, attacker = place_unit(two_tribe_state, "warrior", "monkes", 2, 2)
        state, barbarian = place_unit(state, "warrior", "barbarians", 3, 2)
        assert can_attack(state, attacker, barbarian)

    def test_valid_targets(self, war_state):
        targets = get_valid_targets(war_state, war_state.units["mw"])
        assert [t.id for t in targets] == ["dw"]


# =============================================================================
# RESOLUTION
# =============================================================================


class TestResolveCombat:
    """Damage exchange and aftermath."""

    def test_equal_warriors_trade_thirty(self, war_state):
        """Two strength-20 warriors deal floor(30 * 1) = 30 to each other."""
        result = resolve_combat(war_state, "mw", "dw")
        assert result.attacker_damage == BASE_COMBAT_DAMAGE
        assert result.defender_damage == BASE_COMBAT_DAMAGE
        assert result.attacker.health == 70
        assert result.defender.health == 70
        assert not result.attacker_killed
        assert not result.defender_killed

    def test_hills_defender_takes_23(self, war_state):
        """20 attacking 26 deals floor(30 * 20 / 26) = 23."""
        state = set_tile(war_state, 3, 2, terrain=TerrainType.HILLS)
        result = resolve_combat(state, "mw", "dw")
        assert result.defender_damage == 23
        assert result.attacker_damage > result.defender_damage

    def test_attacker_spent_after_combat(self, war_state):
        result = resolve_combat(war_state, "mw", "dw")
        assert result.attacker.has_acted
        assert result.attacker.movement_remaining == 0

    def test_ranged_attacker_takes_no_damage(self, war_state):
        state, archer = place_unit(war_state, "archer", "monkes", 3, 0)
        result = resolve_combat(state, archer.id, "dw")
        assert result.attacker_damage == 0
        assert result.defender_damage == 37

    def test_kill_awards_xp_and_removes_unit(self, war_state):
        state, _ = place_unit(war_state, "warrior", "degods", 3, 2, unit_id="dw", health=10, has_acted=True)
        result = resolve_combat(state, "mw", "dw")
        assert result.defender_killed
        assert result.attacker_xp_gained == XP_PER_COMBAT + XP_PER_KILL
        assert result.defender_xp_gained == XP_PER_COMBAT

        after = apply_combat_result(state, result)
        assert "dw" not in after.units
        assert after.units["mw"].experience == XP_PER_COMBAT + XP_PER_KILL
        assert after.get_player(TribeId("monkes")).kill_count == 1

    def test_illegal_or_missing_returns_none(self, warriors_state, war_state):
        assert resolve_combat(warriors_state, "mw", "dw") is None
        assert resolve_combat(war_state, "mw", "ghost") is None

    def test_combat_is_logged(self, war_state):
        resolve_combat(war_state, "mw", "dw")
        combats = get_run_log().get_combats()
        assert len(combats) == 1
        assert combats[0].attacker_id == "mw"

    def test_original_snapshot_untouched(self, war_state):
        result = resolve_combat(war_state, "mw", "dw")
        apply_combat_result(war_state, result)
        assert war_state.units["mw"].health == 100
        assert war_state.units["dw"].health == 100


class TestCombatPreview:
    """Preview matches resolution without side effects."""

    def test_preview_matches_resolution(self, war_state):
        preview = get_combat_preview(war_state, war_state.units["mw"], war_state.units["dw"])
        result = resolve_combat(war_state, "mw", "dw")
        assert preview.estimated_attacker_damage == result.attacker_damage
        assert preview.estimated_defender_damage == result.defender_damage
        assert preview.attacker_survives and preview.defender_survives

    def test_preview_does_not_log(self, war_state):
        get_combat_preview(war_state, war_state.units["mw"], war_state.units["dw"])
        assert get_run_log().get_combats() == []
