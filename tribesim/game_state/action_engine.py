"""
Action application.

GameEngine turns one action into one new snapshot. Every action is atomic:
on success the result carries a complete new GameState, on failure it
carries the caller's state unchanged and a reason.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Optional

from tribesim.combat import (
    apply_combat_result,
    apply_promotion,
    apply_settlement_combat_result,
    capture_settlement,
    resolve_combat,
    resolve_settlement_combat,
)
from tribesim.data_models import (
    GameState,
    TradeRoute,
    TradeRouteId,
    TribeId,
    Unit,
)
from tribesim.diplomacy import (
    ALLIED_TRADE_BONUS,
    are_allied,
    are_at_war,
    break_alliance,
    can_enter_territory,
    can_propose_peace,
    declare_war,
    form_alliance,
    make_peace,
    record_peace_rejection,
    send_gift,
)
from tribesim.game_state.actions import (
    Action,
    Attack,
    AttackSettlement,
    BreakAlliance,
    BuildImprovement,
    CancelTradeRoute,
    CaptureSettlement,
    CreateTradeRoute,
    DeclareWar,
    EndTurn,
    FoundSettlement,
    MoveUnit,
    ProposeAlliance,
    ProposePeace,
    SelectPromotion,
    SendGift,
    StartCulture,
    StartProduction,
    StartResearch,
    UseGreatPerson,
)
from tribesim.game_state.barbarians import destroy_camp_if_cleared
from tribesim.game_state.great_people import add_great_people_points, use_great_person
from tribesim.game_state.improvements import build_improvement
from tribesim.game_state.lootboxes import claim_lootbox
from tribesim.game_state.settlements import enqueue_production, found_settlement
from tribesim.game_state.turn_processing import end_turn
from tribesim.observability.run_log import get_run_log
from tribesim.rng import RngFn
from tribesim.units import find_unit_path, get_path_cost, move_unit, update_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    success: bool
    state: GameState
    error: Optional[str] = None


class GameEngine:
    """
    Applies actions to game state snapshots.

    The engine owns the injected rng used by actions with random outcomes
    (lootbox rewards, barbarian spawns at round end).
    """

    def __init__(self, rng: RngFn):
        self.rng = rng
        self._handlers: dict[type, Callable[[GameState, Action], ActionResult]] = {
            MoveUnit: self._move_unit,
            Attack: self._attack,
            AttackSettlement: self._attack_settlement,
            CaptureSettlement: self._capture_settlement,
            FoundSettlement: self._found_settlement,
            BuildImprovement: self._build_improvement,
            SelectPromotion: self._select_promotion,
            UseGreatPerson: self._use_great_person,
            StartProduction: self._start_production,
            StartResearch: self._start_research,
            StartCulture: self._start_culture,
            CreateTradeRoute: self._create_trade_route,
            CancelTradeRoute: self._cancel_trade_route,
            DeclareWar: self._declare_war,
            ProposePeace: self._propose_peace,
            ProposeAlliance: self._propose_alliance,
            BreakAlliance: self._break_alliance,
            SendGift: self._send_gift,
            EndTurn: self._end_turn,
        }

    def apply_action(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply ``action`` to ``state``.

        Raises:
            TypeError: If ``action`` is not one of the known action types
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unknown action type: {type(action).__name__}")

        result = handler(state, action)
        action_name = type(action).__name__
        if not result.success:
            logger.debug(f"{action_name} by {state.current_player} failed: {result.error}")
        get_run_log().log_action(
            action_name, state.current_player, result.success, result.error, turn=state.turn
        )
        return result

    # ----- helpers -----

    @staticmethod
    def _fail(state: GameState, error: str) -> ActionResult:
        return ActionResult(success=False, state=state, error=error)

    @staticmethod
    def _ok(state: GameState) -> ActionResult:
        return ActionResult(success=True, state=state)

    @staticmethod
    def _own_unit(state: GameState, unit_id) -> tuple[Optional[Unit], Optional[str]]:
        unit = state.units.get(unit_id)
        if unit is None:
            return None, "Unit not found"
        if unit.owner != state.current_player:
            return None, "Not your unit"
        return unit, None

    @staticmethod
    def _is_current(state: GameState, tribe_id: TribeId) -> bool:
        return tribe_id == state.current_player

    # ----- unit actions -----

    def _move_unit(self, state: GameState, action: MoveUnit) -> ActionResult:
        unit, error = self._own_unit(state, action.unit_id)
        if unit is None:
            return self._fail(state, error)
        if unit.movement_remaining <= 0:
            return self._fail(state, "No movement remaining")

        tile = state.map.get_tile(action.target)
        extra_cost = 0
        if tile is not None and tile.owner is not None:
            access = can_enter_territory(state, unit.owner, tile.owner)
            if not access.can_enter:
                return self._fail(state, "Cannot enter hostile territory")
            extra_cost = access.extra_cost

        path = find_unit_path(state, unit, action.target)
        if path is None or len(path) < 2:
            return self._fail(state, "No path to target")
        cost = get_path_cost(state, unit, path)
        if cost == math.inf:
            return self._fail(state, "No path to target")

        new_state = update_unit(state, move_unit(unit, path, cost + extra_cost))
        claim = claim_lootbox(new_state, action.target, unit.owner, self.rng)
        if claim is not None:
            new_state = claim.state
        new_state = destroy_camp_if_cleared(new_state, action.target, unit.owner)
        return self._ok(new_state)

    def _attack(self, state: GameState, action: Attack) -> ActionResult:
        _, error = self._own_unit(state, action.attacker_id)
        if error:
            return self._fail(state, error)
        result = resolve_combat(state, action.attacker_id, action.defender_id)
        if result is None:
            return self._fail(state, "Attack not possible")
        return self._ok(apply_combat_result(state, result))

    def _attack_settlement(self, state: GameState, action: AttackSettlement) -> ActionResult:
        _, error = self._own_unit(state, action.attacker_id)
        if error:
            return self._fail(state, error)
        result = resolve_settlement_combat(state, action.attacker_id, action.settlement_id)
        if result is None:
            return self._fail(state, "Settlement attack not possible")
        return self._ok(apply_settlement_combat_result(state, result))

    def _capture_settlement(self, state: GameState, action: CaptureSettlement) -> ActionResult:
        _, error = self._own_unit(state, action.unit_id)
        if error:
            return self._fail(state, error)
        new_state = capture_settlement(state, action.unit_id, action.settlement_id)
        if new_state is None:
            return self._fail(state, "Cannot capture settlement")
        return self._ok(new_state)

    def _found_settlement(self, state: GameState, action: FoundSettlement) -> ActionResult:
        _, error = self._own_unit(state, action.settler_id)
        if error:
            return self._fail(state, error)
        new_state = found_settlement(state, action.settler_id, action.name)
        if new_state is None:
            return self._fail(state, "Cannot found settlement here")
        return self._ok(new_state)

    def _build_improvement(self, state: GameState, action: BuildImprovement) -> ActionResult:
        _, error = self._own_unit(state, action.builder_id)
        if error:
            return self._fail(state, error)
        new_state = build_improvement(state, action.builder_id, action.improvement_type)
        if new_state is None:
            return self._fail(state, f"Cannot build {action.improvement_type}")
        return self._ok(new_state)

    def _select_promotion(self, state: GameState, action: SelectPromotion) -> ActionResult:
        unit, error = self._own_unit(state, action.unit_id)
        if unit is None:
            return self._fail(state, error)
        promoted = apply_promotion(unit, action.promotion_id)
        if promoted is None:
            return self._fail(state, "Promotion not available")
        return self._ok(update_unit(state, promoted))

    def _use_great_person(self, state: GameState, action: UseGreatPerson) -> ActionResult:
        _, error = self._own_unit(state, action.unit_id)
        if error:
            return self._fail(state, error)
        new_state = use_great_person(state, action.unit_id)
        if new_state is None:
            return self._fail(state, "Not a great person")
        return self._ok(new_state)

    # ----- settlement and player actions -----

    def _start_production(self, state: GameState, action: StartProduction) -> ActionResult:
        settlement = state.settlements.get(action.settlement_id)
        if settlement is None:
            return self._fail(state, "Settlement not found")
        if settlement.owner != state.current_player:
            return self._fail(state, "Not your settlement")
        new_state = enqueue_production(
            state, action.settlement_id, action.kind, action.item_id, action.cost
        )
        if new_state is None:
            return self._fail(state, "Production queue is full")
        if action.kind == "wonder":
            new_state = add_great_people_points(new_state, settlement.owner, "wonders_built", 1)
        return self._ok(new_state)

    def _start_research(self, state: GameState, action: StartResearch) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        player = state.get_player(action.tribe_id)
        if player is None:
            return self._fail(state, "Player not found")
        if action.tech_id in player.researched_techs:
            return self._fail(state, "Already researched")
        return self._ok(
            state.with_player(replace(player, current_research=action.tech_id, research_progress=0))
        )

    def _start_culture(self, state: GameState, action: StartCulture) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        player = state.get_player(action.tribe_id)
        if player is None:
            return self._fail(state, "Player not found")
        if action.culture_id in player.unlocked_cultures:
            return self._fail(state, "Already unlocked")
        return self._ok(state.with_player(replace(player, current_culture=action.culture_id)))

    def _create_trade_route(self, state: GameState, action: CreateTradeRoute) -> ActionResult:
        origin = state.settlements.get(action.origin)
        destination = state.settlements.get(action.destination)
        if origin is None or destination is None:
            return self._fail(state, "Settlement not found")
        if origin.owner != state.current_player:
            return self._fail(state, "Not your settlement")
        if origin.id == destination.id:
            return self._fail(state, "Route needs two settlements")
        if are_at_war(state, origin.owner, destination.owner):
            return self._fail(state, "Cannot trade with an enemy")
        for route in state.trade_routes:
            if route.active and {route.origin, route.destination} == {origin.id, destination.id}:
                return self._fail(state, "Route already exists")

        gold = action.gold_per_turn
        if are_allied(state, origin.owner, destination.owner):
            gold += gold * ALLIED_TRADE_BONUS // 100

        route_id, new_state = state.allocate_id("route")
        route = TradeRoute(
            id=TradeRouteId(route_id),
            origin=origin.id,
            destination=destination.id,
            gold_per_turn=gold,
        )
        return self._ok(replace(new_state, trade_routes=new_state.trade_routes + (route,)))

    def _cancel_trade_route(self, state: GameState, action: CancelTradeRoute) -> ActionResult:
        for route in state.trade_routes:
            if route.id != action.route_id:
                continue
            origin = state.settlements.get(route.origin)
            if origin is None or origin.owner != state.current_player:
                return self._fail(state, "Not your trade route")
            routes = tuple(r for r in state.trade_routes if r.id != route.id)
            return self._ok(replace(state, trade_routes=routes))
        return self._fail(state, "Trade route not found")

    # ----- diplomacy -----

    def _declare_war(self, state: GameState, action: DeclareWar) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        new_state = declare_war(state, action.tribe_id, action.target)
        if new_state is None:
            return self._fail(state, "Cannot declare war")
        return self._ok(new_state)

    def _propose_peace(self, state: GameState, action: ProposePeace) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        check = can_propose_peace(state, action.tribe_id, action.target)
        if not check:
            return self._fail(state, check.reason)
        if not action.accepted:
            return self._ok(record_peace_rejection(state, action.tribe_id, action.target))
        return self._ok(make_peace(state, action.tribe_id, action.target))

    def _propose_alliance(self, state: GameState, action: ProposeAlliance) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        new_state = form_alliance(state, action.tribe_id, action.target)
        if new_state is None:
            return self._fail(state, "Alliance not possible")
        return self._ok(new_state)

    def _break_alliance(self, state: GameState, action: BreakAlliance) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        new_state = break_alliance(state, action.tribe_id, action.target)
        if new_state is None:
            return self._fail(state, "Not allied")
        return self._ok(new_state)

    def _send_gift(self, state: GameState, action: SendGift) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        new_state = send_gift(state, action.tribe_id, action.target, action.gold)
        if new_state is None:
            return self._fail(state, "Gift not possible")
        return self._ok(new_state)

    def _end_turn(self, state: GameState, action: EndTurn) -> ActionResult:
        if not self._is_current(state, action.tribe_id):
            return self._fail(state, "Not your turn")
        return self._ok(end_turn(state, self.rng))
