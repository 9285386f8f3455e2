"""
Shared data structures for the tribesim engine.

Every record here is frozen. Operations never mutate a snapshot; they build
a new one with dataclasses.replace so a caller holding the previous state
keeps seeing exactly what it saw before the operation ran.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NewType, Optional


# =============================================================================
# IDENTIFIERS
# =============================================================================

TribeId = NewType("TribeId", str)
UnitId = NewType("UnitId", str)
SettlementId = NewType("SettlementId", str)
TradeRouteId = NewType("TradeRouteId", str)
LootboxId = NewType("LootboxId", str)
CampId = NewType("CampId", str)

BARBARIAN_TRIBE = TribeId("barbarians")


# =============================================================================
# ENUMS
# =============================================================================


class TerrainType(str, Enum):
    """Terrain classes of a map tile."""
    GRASSLAND = "grassland"
    PLAINS = "plains"
    FOREST = "forest"
    HILLS = "hills"
    MOUNTAIN = "mountain"
    WATER = "water"
    DESERT = "desert"
    JUNGLE = "jungle"
    MARSH = "marsh"


class TerrainFeature(str, Enum):
    """Overlay features on a tile."""
    RIVER = "river"
    OASIS = "oasis"
    NONE = "none"


class Rarity(str, Enum):
    """Unit rarity tiers, ordered from most to least common."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Stance(str, Enum):
    """Diplomatic stance between two tribes."""
    WAR = "war"
    HOSTILE = "hostile"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    ALLIED = "allied"


class ReputationEventKind(str, Enum):
    """Kinds of entries in the reputation ledger."""
    WAR_DECLARATION = "war_declaration"
    BETRAYAL = "betrayal"
    ALLIANCE = "alliance"
    GIFT = "gift"


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a legality check. Falsy when the action is not allowed."""
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "CheckResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "CheckResult":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


# =============================================================================
# MAP
# =============================================================================


@dataclass(frozen=True)
class HexCoord:
    """Axial hex coordinate. The implied cube coordinate is s = -q - r."""
    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __add__(self, other: "HexCoord") -> "HexCoord":
        return HexCoord(self.q + other.q, self.r + other.r)

    def __str__(self) -> str:
        return f"{self.q},{self.r}"


@dataclass(frozen=True)
class Resource:
    """A resource deposit on a tile."""
    type: str
    category: str = "bonus"  # "strategic", "luxury", "bonus"
    revealed: bool = True
    improved: bool = False


@dataclass(frozen=True)
class Tile:
    """A single map hex."""
    coord: HexCoord
    terrain: TerrainType
    feature: TerrainFeature = TerrainFeature.NONE
    resource: Optional[Resource] = None
    owner: Optional[TribeId] = None
    improvement: Optional[str] = None

    @property
    def has_river(self) -> bool:
        return self.feature == TerrainFeature.RIVER


@dataclass(frozen=True)
class HexMap:
    """Rectangular axial map. Tiles are keyed by coordinate."""
    width: int
    height: int
    tiles: dict[HexCoord, Tile] = field(default_factory=dict)

    def in_bounds(self, coord: HexCoord) -> bool:
        return 0 <= coord.q < self.width and 0 <= coord.r < self.height

    def get_tile(self, coord: HexCoord) -> Optional[Tile]:
        return self.tiles.get(coord)

    def with_tile(self, tile: Tile) -> "HexMap":
        return replace(self, tiles={**self.tiles, tile.coord: tile})


# =============================================================================
# UNITS AND SETTLEMENTS
# =============================================================================


@dataclass(frozen=True)
class RarityBonuses:
    """Flat stat bonuses granted by a rarity tier."""
    combat: int = 0
    movement: int = 0
    vision: int = 0


@dataclass(frozen=True)
class Unit:
    """
    A unit on the map.

    Invariants: 0 <= health <= max_health, 0 <= movement_remaining <=
    max_movement, all strengths non-negative.
    """
    id: UnitId
    type: str
    owner: TribeId
    position: HexCoord
    health: int
    max_health: int
    movement_remaining: int
    max_movement: int
    combat_strength: int
    ranged_strength: int = 0
    settlement_strength: int = 0
    experience: int = 0
    level: int = 1
    promotions: tuple[str, ...] = ()
    rarity: Rarity = Rarity.COMMON
    rarity_bonuses: RarityBonuses = field(default_factory=RarityBonuses)
    has_acted: bool = False
    build_charges: int = 0
    great_person_id: Optional[str] = None


@dataclass(frozen=True)
class ProductionItem:
    """An entry in a settlement's production queue."""
    kind: str  # "unit", "building", "wonder"
    item_id: str
    progress: int = 0
    cost: int = 0


@dataclass(frozen=True)
class Settlement:
    """A founded settlement."""
    id: SettlementId
    name: str
    owner: TribeId
    position: HexCoord
    health: int = 100
    max_health: int = 100
    is_capital: bool = False
    population: int = 1
    production_queue: tuple[ProductionItem, ...] = ()


@dataclass(frozen=True)
class TradeRoute:
    """A trade route between two settlements."""
    id: TradeRouteId
    origin: SettlementId
    destination: SettlementId
    gold_per_turn: int = 0
    active: bool = True


class LootboxReward(str, Enum):
    AIRDROP = "airdrop"  # gold
    ALPHA_LEAK = "alpha_leak"  # current research completes
    OG_HOLDER = "og_holder"  # free warrior
    COMMUNITY_GROWTH = "community_growth"  # population
    SCOUT = "scout"  # fog reveal


@dataclass(frozen=True)
class Lootbox:
    """A one-time reward cache placed on the map."""
    id: LootboxId
    position: HexCoord
    claimed: bool = False
    reward: Optional[LootboxReward] = None


@dataclass(frozen=True)
class BarbarianCamp:
    """A barbarian camp. The spawn cooldown is part of the saved state."""
    id: CampId
    position: HexCoord
    spawn_cooldown: int = 3
    destroyed: bool = False


# =============================================================================
# PLAYERS
# =============================================================================


@dataclass(frozen=True)
class ActiveBuff:
    """A temporary percentage yield buff."""
    source: str
    yield_type: str
    percent: int
    turns_remaining: int


@dataclass(frozen=True)
class GreatPeopleProgress:
    """Running totals that unlock great people."""
    alpha: int = 0
    gold: int = 0
    vibes: int = 0
    wonders_built: int = 0


@dataclass(frozen=True)
class Player:
    """Per-tribe player record."""
    tribe_id: TribeId
    tribe_name: str
    is_human: bool = False
    treasury: int = 0
    kill_count: int = 0
    researched_techs: frozenset[str] = frozenset()
    unlocked_cultures: frozenset[str] = frozenset()
    current_research: Optional[str] = None
    current_culture: Optional[str] = None
    research_progress: int = 0
    active_buffs: tuple[ActiveBuff, ...] = ()
    great_people_progress: GreatPeopleProgress = field(default_factory=GreatPeopleProgress)
    eliminated: bool = False


# =============================================================================
# DIPLOMACY
# =============================================================================


@dataclass(frozen=True)
class DiplomaticRelation:
    """Relationship between one unordered pair of tribes."""
    stance: Stance = Stance.NEUTRAL
    turns_at_current_stance: int = 0
    reputation: int = 0


@dataclass(frozen=True)
class ReputationEvent:
    """Append-only ledger entry. Current reputation lives on the relation."""
    kind: ReputationEventKind
    turn: int
    amount: int


@dataclass(frozen=True)
class DiplomacyState:
    """All diplomatic state. Relation keys are sorted tribe-id pairs."""
    relations: dict[tuple[TribeId, TribeId], DiplomaticRelation] = field(default_factory=dict)
    war_weariness: dict[TribeId, int] = field(default_factory=dict)
    reputation_log: dict[TribeId, tuple[ReputationEvent, ...]] = field(default_factory=dict)
    peace_rejections: dict[tuple[TribeId, TribeId], int] = field(default_factory=dict)


# =============================================================================
# GAME STATE
# =============================================================================


@dataclass(frozen=True)
class GameState:
    """The full immutable snapshot of a game."""
    turn: int
    current_player: TribeId
    players: tuple[Player, ...]
    map: HexMap
    units: dict[UnitId, Unit] = field(default_factory=dict)
    settlements: dict[SettlementId, Settlement] = field(default_factory=dict)
    diplomacy: DiplomacyState = field(default_factory=DiplomacyState)
    fog: dict[TribeId, frozenset[HexCoord]] = field(default_factory=dict)
    trade_routes: tuple[TradeRoute, ...] = ()
    lootboxes: tuple[Lootbox, ...] = ()
    barbarian_camps: tuple[BarbarianCamp, ...] = ()
    # One-per-game unlocks: great person id -> tribe that earned it
    great_people_earned: dict[str, TribeId] = field(default_factory=dict)
    next_id: int = 1

    def get_player(self, tribe_id: TribeId) -> Optional[Player]:
        for player in self.players:
            if player.tribe_id == tribe_id:
                return player
        return None

    def with_player(self, player: Player) -> "GameState":
        """Return a snapshot with the matching player record replaced."""
        players = tuple(
            player if p.tribe_id == player.tribe_id else p for p in self.players
        )
        return replace(self, players=players)

    def living_tribes(self) -> list[TribeId]:
        return [p.tribe_id for p in self.players if not p.eliminated]

    def allocate_id(self, prefix: str) -> tuple[str, "GameState"]:
        """Hand out a deterministic id and the snapshot with the counter advanced."""
        new_id = f"{prefix}_{self.next_id}"
        return new_id, replace(self, next_id=self.next_id + 1)
