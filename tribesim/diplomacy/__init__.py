"""
Diplomacy: stance automaton, reputation ledger, war weariness and alliances.
"""

from tribesim.data_models import (
    DiplomacyState,
    DiplomaticRelation,
    ReputationEvent,
    ReputationEventKind,
    Stance,
)
from tribesim.diplomacy.diplomacy_engine import (
    ALLIED_TRADE_BONUS,
    DEFAULT_RULES,
    DiplomacyRules,
    RelationSummary,
    TerritoryAccess,
    apply_allied_vision,
    are_allied,
    are_at_war,
    are_friendly_or_better,
    break_alliance,
    can_attack_diplomatically,
    can_declare_war,
    can_enter_territory,
    can_propose_alliance,
    can_propose_peace,
    can_send_gift,
    count_by_stance,
    create_initial_diplomacy,
    declare_war,
    form_alliance,
    get_allied_vision_hexes,
    get_allies,
    get_diplomatic_summary,
    get_enemies,
    get_friendly_tribes,
    get_relation,
    get_reputation,
    get_reputation_events,
    get_stance,
    get_war_weariness,
    improve_to_friendly,
    make_peace,
    process_diplomacy_turn,
    record_peace_rejection,
    relation_key,
    send_gift,
)

__all__ = [
    "DiplomacyState",
    "DiplomaticRelation",
    "ReputationEvent",
    "ReputationEventKind",
    "Stance",
    "ALLIED_TRADE_BONUS",
    "DEFAULT_RULES",
    "DiplomacyRules",
    "RelationSummary",
    "TerritoryAccess",
    "apply_allied_vision",
    "are_allied",
    "are_at_war",
    "are_friendly_or_better",
    "break_alliance",
    "can_attack_diplomatically",
    "can_declare_war",
    "can_enter_territory",
    "can_propose_alliance",
    "can_propose_peace",
    "can_send_gift",
    "count_by_stance",
    "create_initial_diplomacy",
    "declare_war",
    "form_alliance",
    "get_allied_vision_hexes",
    "get_allies",
    "get_diplomatic_summary",
    "get_enemies",
    "get_friendly_tribes",
    "get_relation",
    "get_reputation",
    "get_reputation_events",
    "get_stance",
    "get_war_weariness",
    "improve_to_friendly",
    "make_peace",
    "process_diplomacy_turn",
    "record_peace_rejection",
    "relation_key",
    "send_gift",
]
