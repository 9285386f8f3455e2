"""
Game state operations: actions, the action engine, end-of-turn processing
and world helpers (settlements, improvements, lootboxes, barbarians, great
people).
"""

from tribesim.game_state.action_engine import ActionResult, GameEngine
from tribesim.game_state.actions import (
    ACTION_TYPES,
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
from tribesim.game_state.barbarians import (
    SPAWN_COOLDOWN,
    create_barbarian_camp,
    destroy_camp_if_cleared,
    get_active_camps,
    get_camp_at,
    process_barbarian_ai,
    process_barbarian_spawning,
)
from tribesim.game_state.great_people import (
    add_great_people_points,
    apply_great_person_effect,
    can_earn_great_person,
    check_great_people,
    count_trade_routes,
    get_great_people_stat,
    meets_threshold,
    spawn_great_person,
    tick_buffs,
    use_great_person,
)
from tribesim.game_state.improvements import (
    IMPROVEMENT_DEFINITIONS,
    ImprovementDefinition,
    build_improvement,
    can_build_improvement,
    get_best_improvement_for_resource,
    get_valid_improvements,
)
from tribesim.game_state.lootboxes import (
    ClaimResult,
    claim_lootbox,
    get_lootbox_at,
    get_unclaimed_lootboxes,
    roll_lootbox_reward,
)
from tribesim.game_state.settlements import (
    can_found_settlement,
    claim_territory,
    enqueue_production,
    found_settlement,
    get_capital,
    get_player_settlements,
    get_settlement_at,
    has_queued_wonder,
    update_settlement,
)
from tribesim.game_state.state_factory import create_initial_state
from tribesim.game_state.turn_processing import end_round, end_turn, refresh_units

__all__ = [
    "ActionResult",
    "GameEngine",
    "ACTION_TYPES",
    "Action",
    "Attack",
    "AttackSettlement",
    "BreakAlliance",
    "BuildImprovement",
    "CancelTradeRoute",
    "CaptureSettlement",
    "CreateTradeRoute",
    "DeclareWar",
    "EndTurn",
    "FoundSettlement",
    "MoveUnit",
    "ProposeAlliance",
    "ProposePeace",
    "SelectPromotion",
    "SendGift",
    "StartCulture",
    "StartProduction",
    "StartResearch",
    "UseGreatPerson",
    "SPAWN_COOLDOWN",
    "create_barbarian_camp",
    "destroy_camp_if_cleared",
    "get_active_camps",
    "get_camp_at",
    "process_barbarian_ai",
    "process_barbarian_spawning",
    "add_great_people_points",
    "apply_great_person_effect",
    "can_earn_great_person",
    "check_great_people",
    "count_trade_routes",
    "get_great_people_stat",
    "meets_threshold",
    "spawn_great_person",
    "tick_buffs",
    "use_great_person",
    "IMPROVEMENT_DEFINITIONS",
    "ImprovementDefinition",
    "build_improvement",
    "can_build_improvement",
    "get_best_improvement_for_resource",
    "get_valid_improvements",
    "ClaimResult",
    "claim_lootbox",
    "get_lootbox_at",
    "get_unclaimed_lootboxes",
    "roll_lootbox_reward",
    "can_found_settlement",
    "claim_territory",
    "enqueue_production",
    "found_settlement",
    "get_capital",
    "get_player_settlements",
    "get_settlement_at",
    "has_queued_wonder",
    "update_settlement",
    "create_initial_state",
    "end_round",
    "end_turn",
    "refresh_units",
]
