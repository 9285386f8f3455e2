"""
Diplomatic relationship automaton.

Five stances per unordered tribe pair (war, hostile, neutral, friendly,
allied), a reputation ledger, war weariness and alliance cascades.

Transitions:
- neutral -> friendly    gift or manual improvement, reputation >= threshold
- friendly -> allied     both sides eligible to propose
- any (!= war) -> war    declare war; penalties scale with prior stance and
                         the target's allies are pulled in
- war -> hostile         peace after the minimum war length, outside the
                         rejection cooldown
- hostile -> neutral     automatic end-of-turn tick
- allied -> friendly     break alliance

Every transition returns a new GameState, or None when the guard fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from tribesim.data_models import (
    BARBARIAN_TRIBE,
    CheckResult,
    DiplomacyState,
    DiplomaticRelation,
    GameState,
    HexCoord,
    ReputationEvent,
    ReputationEventKind,
    Stance,
    TribeId,
)
from tribesim.hex_grid import hex_range
from tribesim.observability.run_log import get_run_log

logger = logging.getLogger(__name__)


# =============================================================================
# RULES
# =============================================================================


@dataclass(frozen=True)
class DiplomacyRules:
    """Tunable diplomacy constants."""
    hostile_to_neutral_turns: int = 5
    war_weariness_per_turn: int = 5
    min_war_turns_for_peace: int = 5
    peace_rejection_cooldown: int = 3
    peace_weariness_relief: int = 20
    friendly_threshold: int = 20
    friendly_war_penalty: int = -20
    alliance_break_penalty: int = -30
    betrayal_witness_penalty: int = -10
    alliance_honor_bonus: int = 10
    alliance_formed_bonus: int = 20
    break_alliance_penalty: int = -15
    gift_gold_per_reputation: int = 10
    allied_vision_radius: int = 2


DEFAULT_RULES = DiplomacyRules()

# Trade yield bonus (percent) for routes between allies
ALLIED_TRADE_BONUS = 10


# =============================================================================
# RELATION QUERIES
# =============================================================================


def relation_key(tribe_a: TribeId, tribe_b: TribeId) -> tuple[TribeId, TribeId]:
    """Order-independent key: the two ids sorted."""
    return (tribe_a, tribe_b) if tribe_a <= tribe_b else (tribe_b, tribe_a)


def get_relation(
    state: GameState, tribe_a: TribeId, tribe_b: TribeId
) -> Optional[DiplomaticRelation]:
    return state.diplomacy.relations.get(relation_key(tribe_a, tribe_b))


def get_stance(state: GameState, tribe_a: TribeId, tribe_b: TribeId) -> Stance:
    """Current stance. Barbarians are at war with everyone; unknown pairs are neutral."""
    if tribe_a == tribe_b:
        return Stance.ALLIED
    if BARBARIAN_TRIBE in (tribe_a, tribe_b):
        return Stance.WAR
    relation = get_relation(state, tribe_a, tribe_b)
    return relation.stance if relation else Stance.NEUTRAL


def are_at_war(state: GameState, tribe_a: TribeId, tribe_b: TribeId) -> bool:
    return tribe_a != tribe_b and get_stance(state, tribe_a, tribe_b) == Stance.WAR


def are_allied(state: GameState, tribe_a: TribeId, tribe_b: TribeId) -> bool:
    return tribe_a != tribe_b and get_stance(state, tribe_a, tribe_b) == Stance.ALLIED


def are_friendly_or_better(state: GameState, tribe_a: TribeId, tribe_b: TribeId) -> bool:
    return get_stance(state, tribe_a, tribe_b) in (Stance.FRIENDLY, Stance.ALLIED)


def _tribes_with_stance(state: GameState, tribe_id: TribeId, stance: Stance) -> list[TribeId]:
    result: list[TribeId] = []
    for (a, b), relation in state.diplomacy.relations.items():
        if relation.stance != stance:
            continue
        if a == tribe_id:
            result.append(b)
        elif b == tribe_id:
            result.append(a)
    return sorted(result)


def get_enemies(state: GameState, tribe_id: TribeId) -> list[TribeId]:
    """Tribes at war with ``tribe_id`` (barbarians are not listed)."""
    return _tribes_with_stance(state, tribe_id, Stance.WAR)


def get_allies(state: GameState, tribe_id: TribeId) -> list[TribeId]:
    return _tribes_with_stance(state, tribe_id, Stance.ALLIED)


def get_friendly_tribes(state: GameState, tribe_id: TribeId) -> list[TribeId]:
    """Tribes friendly (but not allied) with ``tribe_id``."""
    return _tribes_with_stance(state, tribe_id, Stance.FRIENDLY)


def get_reputation(state: GameState, tribe_a: TribeId, tribe_b: TribeId) -> int:
    relation = get_relation(state, tribe_a, tribe_b)
    return relation.reputation if relation else 0


def get_war_weariness(state: GameState, tribe_id: TribeId) -> int:
    return state.diplomacy.war_weariness.get(tribe_id, 0)


def get_reputation_events(state: GameState, tribe_id: TribeId) -> tuple[ReputationEvent, ...]:
    return state.diplomacy.reputation_log.get(tribe_id, ())


# =============================================================================
# LEGALITY CHECKS
# =============================================================================


def can_declare_war(state: GameState, aggressor: TribeId, target: TribeId) -> CheckResult:
    if aggressor == target:
        return CheckResult.deny("Cannot declare war on yourself")
    if get_stance(state, aggressor, target) == Stance.WAR:
        return CheckResult.deny("Already at war")
    return CheckResult.ok()


def can_propose_peace(
    state: GameState,
    proposer: TribeId,
    target: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> CheckResult:
    if BARBARIAN_TRIBE in (proposer, target):
        return CheckResult.deny("Barbarians do not negotiate")
    if get_stance(state, proposer, target) != Stance.WAR:
        return CheckResult.deny("Not at war")

    relation = get_relation(state, proposer, target)
    if relation is not None and relation.turns_at_current_stance < rules.min_war_turns_for_peace:
        return CheckResult.deny(
            f"War too recent (minimum {rules.min_war_turns_for_peace} turns)"
        )

    last_rejection = state.diplomacy.peace_rejections.get((proposer, target))
    if last_rejection is not None and state.turn - last_rejection < rules.peace_rejection_cooldown:
        return CheckResult.deny(
            f"Peace was recently rejected (wait {rules.peace_rejection_cooldown} turns)"
        )

    return CheckResult.ok()


def can_propose_alliance(state: GameState, proposer: TribeId, target: TribeId) -> CheckResult:
    if proposer == target:
        return CheckResult.deny("Cannot ally with yourself")
    if get_stance(state, proposer, target) != Stance.FRIENDLY:
        return CheckResult.deny("Must be friendly to propose alliance")
    return CheckResult.ok()


def can_send_gift(state: GameState, sender: TribeId, receiver: TribeId, gold: int) -> CheckResult:
    if sender == receiver:
        return CheckResult.deny("Cannot gift yourself")
    if gold <= 0:
        return CheckResult.deny("Gift must be positive")
    player = state.get_player(sender)
    if player is None or player.treasury < gold:
        return CheckResult.deny("Not enough gold")
    if state.get_player(receiver) is None:
        return CheckResult.deny("Unknown receiver")
    if are_at_war(state, sender, receiver):
        return CheckResult.deny("Cannot gift an enemy")
    return CheckResult.ok()


# =============================================================================
# LEDGER HELPERS
# =============================================================================


def _update_relation(
    diplomacy: DiplomacyState,
    tribe_a: TribeId,
    tribe_b: TribeId,
    **changes,
) -> DiplomacyState:
    key = relation_key(tribe_a, tribe_b)
    current = diplomacy.relations.get(key, DiplomaticRelation())
    return replace(diplomacy, relations={**diplomacy.relations, key: replace(current, **changes)})


def _set_stance(
    diplomacy: DiplomacyState,
    tribe_a: TribeId,
    tribe_b: TribeId,
    stance: Stance,
    trigger: str,
    turn: int,
) -> DiplomacyState:
    key = relation_key(tribe_a, tribe_b)
    previous = diplomacy.relations.get(key, DiplomaticRelation()).stance
    logger.info(f"Stance {tribe_a}/{tribe_b}: {previous.value} -> {stance.value} ({trigger})")
    get_run_log().log_transition(
        previous.value,
        stance.value,
        trigger,
        turn=turn,
        context={"tribes": list(key)},
    )
    return _update_relation(diplomacy, tribe_a, tribe_b, stance=stance, turns_at_current_stance=0)


def _adjust_reputation(
    diplomacy: DiplomacyState, tribe_a: TribeId, tribe_b: TribeId, delta: int
) -> DiplomacyState:
    current = diplomacy.relations.get(relation_key(tribe_a, tribe_b), DiplomaticRelation())
    return _update_relation(diplomacy, tribe_a, tribe_b, reputation=current.reputation + delta)


def _add_event(
    diplomacy: DiplomacyState,
    tribe_id: TribeId,
    kind: ReputationEventKind,
    turn: int,
    amount: int,
) -> DiplomacyState:
    existing = diplomacy.reputation_log.get(tribe_id, ())
    event = ReputationEvent(kind=kind, turn=turn, amount=amount)
    return replace(
        diplomacy,
        reputation_log={**diplomacy.reputation_log, tribe_id: existing + (event,)},
    )


# =============================================================================
# WAR
# =============================================================================


def declare_war(
    state: GameState,
    aggressor: TribeId,
    target: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    """
    Declare war.

    - friendly: penalty with the target and with every other friend of the
      target, one ledger event each
    - allied: betrayal penalty with the target and a smaller penalty with
      every other living tribe
    - allies of the target join the war against the aggressor and gain
      reputation with the target
    - trade routes between the two sides are deactivated
    """
    if not can_declare_war(state, aggressor, target):
        return None

    turn = state.turn
    previous = get_stance(state, aggressor, target)
    diplomacy = _set_stance(state.diplomacy, aggressor, target, Stance.WAR, "declare_war", turn)
    working = replace(state, diplomacy=diplomacy)

    if previous == Stance.FRIENDLY:
        penalty = rules.friendly_war_penalty
        diplomacy = _adjust_reputation(diplomacy, aggressor, target, penalty)
        diplomacy = _add_event(diplomacy, aggressor, ReputationEventKind.WAR_DECLARATION, turn, penalty)
        for friend in get_friendly_tribes(working, target):
            if friend == aggressor:
                continue
            diplomacy = _adjust_reputation(diplomacy, aggressor, friend, penalty)
            diplomacy = _add_event(
                diplomacy, aggressor, ReputationEventKind.WAR_DECLARATION, turn, penalty
            )

    elif previous == Stance.ALLIED:
        diplomacy = _adjust_reputation(diplomacy, aggressor, target, rules.alliance_break_penalty)
        diplomacy = _add_event(
            diplomacy, aggressor, ReputationEventKind.BETRAYAL, turn, rules.alliance_break_penalty
        )
        for other in state.living_tribes():
            if other in (aggressor, target):
                continue
            diplomacy = _adjust_reputation(diplomacy, aggressor, other, rules.betrayal_witness_penalty)

    # Alliance obligations
    joined: list[TribeId] = []
    for ally in get_allies(replace(state, diplomacy=diplomacy), target):
        if ally == aggressor or get_stance(replace(state, diplomacy=diplomacy), aggressor, ally) == Stance.WAR:
            continue
        diplomacy = _set_stance(diplomacy, aggressor, ally, Stance.WAR, "alliance_obligation", turn)
        diplomacy = _adjust_reputation(diplomacy, ally, target, rules.alliance_honor_bonus)
        diplomacy = _add_event(
            diplomacy, ally, ReputationEventKind.ALLIANCE, turn, rules.alliance_honor_bonus
        )
        joined.append(ally)

    defenders = {target, *joined}
    trade_routes = tuple(
        replace(route, active=False) if _crosses_front(state, route, aggressor, defenders) else route
        for route in state.trade_routes
    )

    return replace(state, diplomacy=diplomacy, trade_routes=trade_routes)


def _crosses_front(state: GameState, route, aggressor: TribeId, defenders: set[TribeId]) -> bool:
    if not route.active:
        return False
    origin = state.settlements.get(route.origin)
    destination = state.settlements.get(route.destination)
    if origin is None or destination is None:
        return False
    owners = {origin.owner, destination.owner}
    return aggressor in owners and bool(owners & defenders)


# =============================================================================
# PEACE
# =============================================================================


def make_peace(
    state: GameState,
    proposer: TribeId,
    target: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    """War -> hostile. Weariness drops for both sides without resetting."""
    if not can_propose_peace(state, proposer, target, rules):
        return None

    diplomacy = _set_stance(state.diplomacy, proposer, target, Stance.HOSTILE, "make_peace", state.turn)
    weariness = dict(diplomacy.war_weariness)
    for tribe in (proposer, target):
        weariness[tribe] = max(0, weariness.get(tribe, 0) - rules.peace_weariness_relief)

    return replace(state, diplomacy=replace(diplomacy, war_weariness=weariness))


def record_peace_rejection(state: GameState, proposer: TribeId, target: TribeId) -> GameState:
    """Remember that ``target`` turned down peace from ``proposer`` this turn."""
    rejections = {**state.diplomacy.peace_rejections, (proposer, target): state.turn}
    logger.info(f"{target} rejected peace from {proposer} on turn {state.turn}")
    return replace(state, diplomacy=replace(state.diplomacy, peace_rejections=rejections))


# =============================================================================
# ALLIANCES AND FRIENDSHIP
# =============================================================================


def form_alliance(
    state: GameState,
    tribe_a: TribeId,
    tribe_b: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    if not can_propose_alliance(state, tribe_a, tribe_b):
        return None
    if not can_propose_alliance(state, tribe_b, tribe_a):
        return None

    turn = state.turn
    bonus = rules.alliance_formed_bonus
    diplomacy = _set_stance(state.diplomacy, tribe_a, tribe_b, Stance.ALLIED, "form_alliance", turn)
    diplomacy = _adjust_reputation(diplomacy, tribe_a, tribe_b, bonus)
    diplomacy = _add_event(diplomacy, tribe_a, ReputationEventKind.ALLIANCE, turn, bonus)
    diplomacy = _add_event(diplomacy, tribe_b, ReputationEventKind.ALLIANCE, turn, bonus)
    return replace(state, diplomacy=diplomacy)


def break_alliance(
    state: GameState,
    breaker: TribeId,
    other: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    if not are_allied(state, breaker, other):
        return None

    turn = state.turn
    penalty = rules.break_alliance_penalty
    diplomacy = _set_stance(state.diplomacy, breaker, other, Stance.FRIENDLY, "break_alliance", turn)
    diplomacy = _adjust_reputation(diplomacy, breaker, other, penalty)
    diplomacy = _add_event(diplomacy, breaker, ReputationEventKind.BETRAYAL, turn, penalty)
    return replace(state, diplomacy=diplomacy)


def improve_to_friendly(
    state: GameState,
    tribe_a: TribeId,
    tribe_b: TribeId,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    """Neutral -> friendly once reputation clears the threshold."""
    if tribe_a == tribe_b or get_stance(state, tribe_a, tribe_b) != Stance.NEUTRAL:
        return None
    if get_reputation(state, tribe_a, tribe_b) < rules.friendly_threshold:
        return None
    diplomacy = _set_stance(state.diplomacy, tribe_a, tribe_b, Stance.FRIENDLY, "improve", state.turn)
    return replace(state, diplomacy=diplomacy)


def send_gift(
    state: GameState,
    sender: TribeId,
    receiver: TribeId,
    gold: int,
    rules: DiplomacyRules = DEFAULT_RULES,
) -> Optional[GameState]:
    """Transfer gold for reputation; may lift a neutral pair to friendly."""
    if not can_send_gift(state, sender, receiver, gold):
        return None

    sender_player = state.get_player(sender)
    receiver_player = state.get_player(receiver)
    working = state.with_player(replace(sender_player, treasury=sender_player.treasury - gold))
    working = working.with_player(replace(receiver_player, treasury=receiver_player.treasury + gold))

    bonus = gold // rules.gift_gold_per_reputation
    diplomacy = _adjust_reputation(working.diplomacy, sender, receiver, bonus)
    diplomacy = _add_event(diplomacy, sender, ReputationEventKind.GIFT, state.turn, bonus)
    working = replace(working, diplomacy=diplomacy)

    promoted = improve_to_friendly(working, sender, receiver, rules)
    return promoted if promoted is not None else working


# =============================================================================
# SHARED VISION
# =============================================================================


def get_allied_vision_hexes(
    state: GameState, tribe_id: TribeId, rules: DiplomacyRules = DEFAULT_RULES
) -> set[HexCoord]:
    """Hexes around every ally's capital."""
    visible: set[HexCoord] = set()
    for ally in get_allies(state, tribe_id):
        for settlement in state.settlements.values():
            if settlement.owner == ally and settlement.is_capital:
                visible.update(hex_range(settlement.position, rules.allied_vision_radius))
                break
    return visible


def apply_allied_vision(
    state: GameState, tribe_id: TribeId, rules: DiplomacyRules = DEFAULT_RULES
) -> GameState:
    allied_hexes = get_allied_vision_hexes(state, tribe_id, rules)
    if not allied_hexes:
        return state
    current = state.fog.get(tribe_id, frozenset())
    return replace(state, fog={**state.fog, tribe_id: current | frozenset(allied_hexes)})


# =============================================================================
# TURN PROCESSING
# =============================================================================


def process_diplomacy_turn(state: GameState, rules: DiplomacyRules = DEFAULT_RULES) -> GameState:
    """
    End-of-round diplomacy tick.

    - every relation ages by one turn
    - hostile relations old enough fall back to neutral
    - every tribe at war with anyone accrues war weariness once
    - allied vision is refreshed
    """
    relations: dict[tuple[TribeId, TribeId], DiplomaticRelation] = {}
    at_war: set[TribeId] = set()

    for key, relation in state.diplomacy.relations.items():
        if (
            relation.stance == Stance.HOSTILE
            and relation.turns_at_current_stance >= rules.hostile_to_neutral_turns
        ):
            logger.info(f"Stance {key[0]}/{key[1]}: hostile -> neutral (cooldown)")
            get_run_log().log_transition(
                Stance.HOSTILE.value,
                Stance.NEUTRAL.value,
                "hostility_expired",
                turn=state.turn,
                context={"tribes": list(key)},
            )
            relations[key] = replace(relation, stance=Stance.NEUTRAL, turns_at_current_stance=0)
        else:
            relations[key] = replace(
                relation, turns_at_current_stance=relation.turns_at_current_stance + 1
            )
        if relation.stance == Stance.WAR:
            at_war.update(key)

    weariness = dict(state.diplomacy.war_weariness)
    for tribe in sorted(at_war):
        weariness[tribe] = weariness.get(tribe, 0) + rules.war_weariness_per_turn

    new_state = replace(
        state,
        diplomacy=replace(state.diplomacy, relations=relations, war_weariness=weariness),
    )
    for player in state.players:
        new_state = apply_allied_vision(new_state, player.tribe_id, rules)
    return new_state


# =============================================================================
# TERRITORY AND SUMMARY
# =============================================================================


@dataclass(frozen=True)
class TerritoryAccess:
    can_enter: bool
    extra_cost: int = 0


def can_enter_territory(state: GameState, moving_tribe: TribeId, owner: TribeId) -> TerritoryAccess:
    """Hostile borders are closed; neutral borders cost one extra movement."""
    if moving_tribe == owner:
        return TerritoryAccess(True)
    stance = get_stance(state, moving_tribe, owner)
    if stance == Stance.HOSTILE:
        return TerritoryAccess(False)
    if stance == Stance.NEUTRAL:
        return TerritoryAccess(True, extra_cost=1)
    return TerritoryAccess(True)


def can_attack_diplomatically(state: GameState, attacker: TribeId, defender: TribeId) -> bool:
    return are_at_war(state, attacker, defender)


@dataclass(frozen=True)
class RelationSummary:
    stance: Stance
    reputation: int
    turns: int


def get_diplomatic_summary(state: GameState, tribe_id: TribeId) -> dict[TribeId, RelationSummary]:
    summary: dict[TribeId, RelationSummary] = {}
    for player in state.players:
        if player.tribe_id == tribe_id:
            continue
        relation = get_relation(state, tribe_id, player.tribe_id) or DiplomaticRelation()
        summary[player.tribe_id] = RelationSummary(
            stance=relation.stance,
            reputation=relation.reputation,
            turns=relation.turns_at_current_stance,
        )
    return summary


def count_by_stance(state: GameState, tribe_id: TribeId) -> dict[Stance, int]:
    counts = {stance: 0 for stance in Stance}
    for player in state.players:
        if player.tribe_id != tribe_id:
            counts[get_stance(state, tribe_id, player.tribe_id)] += 1
    return counts


def create_initial_diplomacy(tribe_ids: list[TribeId]) -> DiplomacyState:
    """All pairs start neutral."""
    relations: dict[tuple[TribeId, TribeId], DiplomaticRelation] = {}
    for i, tribe_a in enumerate(tribe_ids):
        for tribe_b in tribe_ids[i + 1:]:
            relations[relation_key(tribe_a, tribe_b)] = DiplomaticRelation()
    return DiplomacyState(relations=relations)
