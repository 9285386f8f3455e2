"""
Tests for great people: one per game, spawned at the capital, consumed on use.
"""

from dataclasses import replace

import pytest

from tribesim.content_loader import (
    GreatPersonDefinition,
    GreatPersonThreshold,
    InstantGold,
    YieldBuff,
    get_great_person_definition,
)
from tribesim.data_models import ActiveBuff, GreatPeopleProgress, HexCoord, Rarity, Resource, TribeId
from tribesim.game_state import (
    CreateTradeRoute,
    EndTurn,
    GameEngine,
    StartProduction,
    add_great_people_points,
    apply_great_person_effect,
    can_earn_great_person,
    check_great_people,
    meets_threshold,
    spawn_great_person,
    tick_buffs,
    use_great_person,
)

from tests.helpers import SequenceRng, place_settlement, set_tile

MONKES = TribeId("monkes")
DEGODS = TribeId("degods")


@pytest.fixture
def capital_state(two_tribe_state):
    state, _ = place_settlement(two_tribe_state, "monkes", 4, 4, is_capital=True)
    state, _ = place_settlement(state, "degods", 8, 1, is_capital=True)
    return state


def great_person_unit(state, tribe_id):
    return next(u for u in state.units.values() if u.owner == tribe_id and u.type == "great_person")


def with_progress(state, tribe_id, **totals):
    player = state.get_player(tribe_id)
    return state.with_player(replace(player, great_people_progress=GreatPeopleProgress(**totals)))


class TestEarning:
    """Each great person appears once per game."""

    def test_spawns_legendary_unit_at_capital(self, capital_state):
        state = spawn_great_person(capital_state, MONKES, "big_brain")
        unit = great_person_unit(state, MONKES)
        assert unit.position == HexCoord(4, 4)
        assert unit.rarity == Rarity.LEGENDARY
        assert unit.great_person_id == "big_brain"
        assert state.great_people_earned["big_brain"] == MONKES

    def test_second_tribe_cannot_earn_same(self, capital_state):
        state = spawn_great_person(capital_state, MONKES, "big_brain")
        check = can_earn_great_person(state, DEGODS, "big_brain")
        assert check.reason == "Great person already earned"
        assert spawn_great_person(state, DEGODS, "big_brain") is None

    def test_needs_capital_and_known_id(self, two_tribe_state, capital_state):
        assert can_earn_great_person(two_tribe_state, MONKES, "big_brain").reason == "No capital to spawn at"
        assert can_earn_great_person(capital_state, MONKES, "nobody").reason == "Unknown great person"


class TestEarningThroughPlay:
    """Thresholds met during play turn into a great person at end of turn."""

    def test_four_trade_routes_earn_watch_king(self, capital_state):
        capital = capital_state.settlements["monkes_city_1"]
        state = capital_state
        partners = [capital_state.settlements["degods_city_2"]]
        for q, r in ((1, 8), (8, 8), (0, 0)):
            state, partner = place_settlement(state, "degods", q, r)
            partners.append(partner)

        engine = GameEngine(rng=SequenceRng([0.0]))
        for partner in partners:
            result = engine.apply_action(state, CreateTradeRoute(origin=capital.id, destination=partner.id))
            assert result.success
            state = result.state
        state = engine.apply_action(state, EndTurn(tribe_id=MONKES)).state

        assert state.great_people_earned == {"watch_king": MONKES}
        assert great_person_unit(state, MONKES).position == capital.position

    def test_three_routes_are_not_enough(self, capital_state):
        rng = SequenceRng([0.0])
        state = capital_state
        for q, r in ((1, 8), (8, 8), (0, 0)):
            state, partner = place_settlement(state, "degods", q, r)
            route = CreateTradeRoute(origin=state.settlements["monkes_city_1"].id, destination=partner.id)
            state = GameEngine(rng=rng).apply_action(state, route).state
        state = GameEngine(rng=rng).apply_action(state, EndTurn(tribe_id=MONKES)).state
        assert state.great_people_earned == {}
        assert rng.calls == 0

    def test_wonders_count_when_queued(self, capital_state):
        engine = GameEngine(rng=SequenceRng([0.0]))
        capital = capital_state.settlements["monkes_city_1"]
        state = engine.apply_action(capital_state, StartProduction(capital.id, "wonder", "big_ben")).state
        state = engine.apply_action(state, StartProduction(capital.id, "unit", "warrior")).state
        assert state.get_player(MONKES).great_people_progress.wonders_built == 1

    def test_at_most_one_per_turn(self, capital_state):
        rng = SequenceRng([0.0])
        state = check_great_people(with_progress(capital_state, MONKES, gold=1000), MONKES, rng)
        assert list(state.great_people_earned) == ["big_brain"]
        assert rng.calls == 1

    def test_failed_roll_moves_to_next_candidate(self, capital_state):
        rng = SequenceRng([0.9, 0.1])
        state = check_great_people(with_progress(capital_state, MONKES, gold=1000), MONKES, rng)
        assert list(state.great_people_earned) == ["dingaling"]
        assert rng.calls == 2

    def test_losing_every_roll_spawns_nothing(self, capital_state, high_rng):
        state = with_progress(capital_state, MONKES, gold=200)
        assert check_great_people(state, MONKES, high_rng) is state
        assert high_rng.calls == 1

    def test_no_roll_without_capital(self, two_tribe_state, low_rng):
        state = with_progress(two_tribe_state, MONKES, gold=200)
        assert check_great_people(state, MONKES, low_rng) is state
        assert low_rng.calls == 0

    def test_earned_people_are_not_rolled_again(self, capital_state, low_rng):
        state = spawn_great_person(capital_state, DEGODS, "big_brain")
        state = check_great_people(with_progress(state, MONKES, gold=200), MONKES, low_rng)
        assert state.great_people_earned == {"big_brain": DEGODS}
        assert low_rng.calls == 0


class TestProgress:
    def test_points_accumulate(self, two_tribe_state):
        state = add_great_people_points(two_tribe_state, MONKES, "vibes", 30)
        state = add_great_people_points(state, MONKES, "vibes", 50)
        assert state.get_player(MONKES).great_people_progress == GreatPeopleProgress(vibes=80)
        assert meets_threshold(state, MONKES, get_great_person_definition("scum"))
        assert not meets_threshold(state, MONKES, get_great_person_definition("monoliff"))

    def test_counted_stats_cannot_be_added(self, two_tribe_state):
        with pytest.raises(ValueError):
            add_great_people_points(two_tribe_state, MONKES, "kills", 1)

    def test_kills_read_from_player(self, two_tribe_state):
        veteran = GreatPersonDefinition(
            id="veteran",
            name="Veteran",
            category="military",
            action_name="Rally",
            effect=InstantGold(1),
            threshold=GreatPersonThreshold("kills", 3),
        )
        state = two_tribe_state.with_player(replace(two_tribe_state.get_player(MONKES), kill_count=3))
        assert meets_threshold(state, MONKES, veteran)
        assert not meets_threshold(state, DEGODS, veteran)

    def test_no_threshold_is_never_met(self, two_tribe_state):
        gift = GreatPersonDefinition(
            id="gift", name="Gift", category="gold", action_name="Give", effect=InstantGold(1)
        )
        assert not meets_threshold(two_tribe_state, MONKES, gift)


class TestUsing:
    """Effects apply once and the unit is consumed."""

    def test_instant_gold(self, capital_state):
        state = spawn_great_person(capital_state, MONKES, "big_brain")
        unit = great_person_unit(state, MONKES)
        after = use_great_person(state, unit.id)
        assert after.get_player(MONKES).treasury == 100
        assert unit.id not in after.units

    def test_yield_buff(self, capital_state):
        state = spawn_great_person(capital_state, MONKES, "toly")
        after = use_great_person(state, great_person_unit(state, MONKES).id)
        (buff,) = after.get_player(MONKES).active_buffs
        assert buff.yield_type == "alpha"
        assert buff.percent == 10
        assert buff.turns_remaining == 5

    def test_border_expansion_grows_from_owned_land(self, capital_state):
        state = set_tile(capital_state, 4, 4, owner=MONKES)
        state = set_tile(state, 7, 7, resource=Resource("iron", "strategic"))
        state = spawn_great_person(state, MONKES, "scum")
        after = use_great_person(state, great_person_unit(state, MONKES).id)
        owned = {c for c, t in after.map.tiles.items() if t.owner == MONKES}
        assert owned == {HexCoord(4, 4), HexCoord(3, 4), HexCoord(3, 5), HexCoord(4, 3)}

    def test_expansion_takes_adjacent_resource_first(self, capital_state):
        state = set_tile(capital_state, 4, 4, owner=MONKES)
        state = set_tile(state, 5, 4, resource=Resource("iron", "strategic"))
        state = spawn_great_person(state, MONKES, "scum")
        after = use_great_person(state, great_person_unit(state, MONKES).id)
        assert after.map.get_tile(HexCoord(5, 4)).owner == MONKES

    def test_only_great_people_can_be_used(self, capital_state):
        assert use_great_person(capital_state, "missing") is None

    def test_unknown_effect_type_raises(self, capital_state):
        with pytest.raises(TypeError):
            apply_great_person_effect(capital_state, MONKES, HexCoord(4, 4), object(), "x")

    def test_direct_effects(self, capital_state):
        rich = apply_great_person_effect(capital_state, MONKES, HexCoord(4, 4), InstantGold(50), "x")
        assert rich.get_player(MONKES).treasury == 50
        buffed = apply_great_person_effect(capital_state, MONKES, HexCoord(4, 4), YieldBuff("gold", 15, 2), "x")
        assert len(buffed.get_player(MONKES).active_buffs) == 1


class TestBuffs:
    def test_tick_counts_down_and_expires(self):
        buffs = (
            ActiveBuff(source="a", yield_type="gold", percent=10, turns_remaining=2),
            ActiveBuff(source="b", yield_type="alpha", percent=10, turns_remaining=1),
        )
        ticked = tick_buffs(buffs)
        assert [(b.source, b.turns_remaining) for b in ticked] == [("a", 1)]
