"""
Test helpers for the tribesim test suite.

Provides:
- SequenceRng, a scripted rng for tests that need exact draws
- make_map / make_state builders for small hand-laid boards
- place_unit / place_settlement / set_stance shortcuts
"""

from dataclasses import replace
from typing import Iterable, Optional

from tribesim.data_models import (
    DiplomaticRelation,
    GameState,
    HexCoord,
    HexMap,
    Player,
    Rarity,
    Settlement,
    SettlementId,
    Stance,
    TerrainFeature,
    TerrainType,
    Tile,
    TribeId,
    Unit,
    UnitId,
)
from tribesim.diplomacy import create_initial_diplomacy, relation_key
from tribesim.units import add_unit, create_unit


# =============================================================================
# RNG
# =============================================================================


class SequenceRng:
    """
    Callable rng that replays a fixed list of values, cycling when exhausted.

    Usage:
        rng = SequenceRng([0.1, 0.9])
        rng()  # 0.1
        rng()  # 0.9
        rng()  # 0.1
    """

    def __init__(self, values: Iterable[float]):
        self._values = list(values) or [0.0]
        self._index = 0
        self.calls = 0

    def __call__(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        self.calls += 1
        return value


# =============================================================================
# BOARD BUILDERS
# =============================================================================


def make_map(
    width: int = 10,
    height: int = 10,
    terrain: TerrainType = TerrainType.GRASSLAND,
    tiles: Optional[dict[HexCoord, dict]] = None,
) -> HexMap:
    """Uniform map with per-tile overrides given as Tile field dicts."""
    overrides = tiles or {}
    result: dict[HexCoord, Tile] = {}
    for q in range(width):
        for r in range(height):
            coord = HexCoord(q, r)
            fields = {"terrain": terrain, **overrides.get(coord, {})}
            result[coord] = Tile(coord=coord, **fields)
    return HexMap(width=width, height=height, tiles=result)


def make_state(
    tribes: tuple[str, ...] = ("monkes", "degods"),
    hex_map: Optional[HexMap] = None,
    turn: int = 1,
    human: Optional[str] = None,
    treasury: int = 0,
) -> GameState:
    tribe_ids = [TribeId(t) for t in tribes]
    return GameState(
        turn=turn,
        current_player=tribe_ids[0],
        players=tuple(
            Player(tribe_id=t, tribe_name=str(t), is_human=t == human, treasury=treasury)
            for t in tribe_ids
        ),
        map=hex_map or make_map(),
        diplomacy=create_initial_diplomacy(tribe_ids),
    )


def place_unit(
    state: GameState,
    unit_type: str,
    owner: str,
    q: int,
    r: int,
    unit_id: Optional[str] = None,
    **changes,
) -> tuple[GameState, Unit]:
    """Add a common unit of ``unit_type``; extra kwargs replace Unit fields."""
    new_id = unit_id or f"{owner}_{unit_type}_{len(state.units) + 1}"
    unit = create_unit(
        unit_type, TribeId(owner), HexCoord(q, r), rarity=Rarity.COMMON, unit_id=UnitId(new_id)
    )
    if changes:
        unit = replace(unit, **changes)
    return add_unit(state, unit), unit


def place_settlement(
    state: GameState,
    owner: str,
    q: int,
    r: int,
    settlement_id: Optional[str] = None,
    **changes,
) -> tuple[GameState, Settlement]:
    new_id = settlement_id or f"{owner}_city_{len(state.settlements) + 1}"
    settlement = Settlement(
        id=SettlementId(new_id),
        name=new_id,
        owner=TribeId(owner),
        position=HexCoord(q, r),
        **changes,
    )
    return replace(state, settlements={**state.settlements, settlement.id: settlement}), settlement


def set_stance(
    state: GameState,
    tribe_a: str,
    tribe_b: str,
    stance: Stance,
    turns: int = 0,
    reputation: int = 0,
) -> GameState:
    key = relation_key(TribeId(tribe_a), TribeId(tribe_b))
    relation = DiplomaticRelation(stance=stance, turns_at_current_stance=turns, reputation=reputation)
    diplomacy = replace(state.diplomacy, relations={**state.diplomacy.relations, key: relation})
    return replace(state, diplomacy=diplomacy)


def set_tile(state: GameState, q: int, r: int, **changes) -> GameState:
    tile = state.map.get_tile(HexCoord(q, r))
    return replace(state, map=state.map.with_tile(replace(tile, **changes)))


RIVER = {"feature": TerrainFeature.RIVER}
