"""
Loader for tribe profiles and great-person definitions.

Reads JSON from ``tribesim/data`` (or a caller-supplied directory) into the
frozen records of ``tribesim.content_loader.models``. A missing or malformed
file never raises: the loader records the problem on its LoadResult, logs a
warning and falls back to built-in defaults.

tribe_profiles.json:
{
    "schema_version": 1,
    "default": { "personality": {...}, "trade_priority": 1.0 },
    "tribes": [
        {
            "tribe_id": "monkes",
            "primary_strength": "vibes",
            "secondary_strength": "economy",
            "personality": {...},
            "wonder_priorities": {...},
            "tech_weights": {...},
            "culture_weights": {...},
            "trade_priority": 1.5
        }
    ]
}

great_people.json:
{
    "schema_version": 1,
    "great_people": [
        {"id": "...", "name": "...", "category": "...", "action_name": "...",
         "effect": {"type": "instant_gold", "amount": 100},
         "threshold": {"stat": "gold", "amount": 200}}
    ]
}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from tribesim.content_loader.models import (
    ACCUMULATED_STATS,
    COUNTED_STATS,
    BorderExpansion,
    GreatPersonDefinition,
    GreatPersonEffect,
    GreatPersonThreshold,
    InstantGold,
    TargetPriority,
    TribePersonality,
    TribeProfile,
    YieldBuff,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
PROFILES_FILE = "tribe_profiles.json"
GREAT_PEOPLE_FILE = "great_people.json"

DEFAULT_PROFILE_ID = "default"


@dataclass
class LoadResult:
    """Result of loading one content file."""
    success: bool
    loaded_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# PARSING HELPERS
# =============================================================================


def _parse_weights(data: Any) -> dict[str, float]:
    if not isinstance(data, dict):
        return {}
    return {str(k): float(v) for k, v in data.items()}


def _parse_personality(data: Any, base: TribePersonality) -> TribePersonality:
    if not isinstance(data, dict):
        return base
    return TribePersonality(
        aggression=float(data.get("aggression", base.aggression)),
        peacefulness=float(data.get("peacefulness", base.peacefulness)),
        alliance=float(data.get("alliance", base.alliance)),
        war_ratio_mod=float(data.get("war_ratio_mod", base.war_ratio_mod)),
        peace_ratio_mod=float(data.get("peace_ratio_mod", base.peace_ratio_mod)),
        target_priority=TargetPriority(data.get("target_priority", base.target_priority.value)),
        war_weariness_tolerance=float(
            data.get("war_weariness_tolerance", base.war_weariness_tolerance)
        ),
    )


def _parse_profile(data: dict[str, Any], default: TribeProfile) -> TribeProfile:
    tribe_id = str(data.get("tribe_id") or "").strip()
    if not tribe_id:
        raise ValueError("Missing required field: tribe_id")
    return TribeProfile(
        tribe_id=tribe_id,
        personality=_parse_personality(data.get("personality"), default.personality),
        primary_strength=str(data.get("primary_strength", "")),
        secondary_strength=str(data.get("secondary_strength", "")),
        wonder_priorities=_parse_weights(data.get("wonder_priorities")),
        tech_weights=_parse_weights(data.get("tech_weights")),
        culture_weights=_parse_weights(data.get("culture_weights")),
        trade_priority=float(data.get("trade_priority", default.trade_priority)),
    )


def _parse_effect(data: Any) -> GreatPersonEffect:
    if not isinstance(data, dict):
        raise ValueError("effect must be an object")
    effect_type = data.get("type")
    if effect_type == "instant_gold":
        return InstantGold(amount=int(data["amount"]))
    if effect_type == "yield_buff":
        return YieldBuff(
            yield_type=str(data["yield"]),
            percent=int(data["percent"]),
            turns=int(data["turns"]),
        )
    if effect_type == "border_expansion":
        return BorderExpansion(tiles=int(data["tiles"]))
    raise ValueError(f"Unknown effect type: {effect_type}")


def _parse_threshold(data: Any) -> Optional[GreatPersonThreshold]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("threshold must be an object")
    stat = str(data.get("stat", ""))
    if stat not in ACCUMULATED_STATS + COUNTED_STATS:
        raise ValueError(f"Unknown threshold stat: {stat}")
    return GreatPersonThreshold(stat=stat, amount=int(data["amount"]))


def _parse_great_person(data: dict[str, Any]) -> GreatPersonDefinition:
    gp_id = str(data.get("id") or "").strip()
    name = str(data.get("name") or "").strip()
    if not gp_id or not name:
        raise ValueError("Missing required fields: id/name")
    return GreatPersonDefinition(
        id=gp_id,
        name=name,
        category=str(data.get("category", "")),
        action_name=str(data.get("action_name", "")),
        effect=_parse_effect(data.get("effect")),
        threshold=_parse_threshold(data.get("threshold")),
    )


def _read_json(path: Path, result: LoadResult) -> Optional[dict[str, Any]]:
    if not path.exists():
        result.success = False
        result.errors.append(f"File not found: {path}")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        result.success = False
        result.errors.append(f"JSON parse error: {e}")
        return None
    if not isinstance(data, dict):
        result.success = False
        result.errors.append("Top-level value is not an object")
        return None
    schema_version = data.get("schema_version", 1)
    if schema_version != 1:
        result.warnings.append(f"Unknown schema_version: {schema_version}")
    return data


# =============================================================================
# LOADERS
# =============================================================================


class TribeProfileLoader:
    """Loads tribe profiles; unknown tribes resolve to the default profile."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self.default_profile = TribeProfile(tribe_id=DEFAULT_PROFILE_ID)
        self._profiles: dict[str, TribeProfile] = {}
        self._load_result: Optional[LoadResult] = None

    @property
    def load_result(self) -> Optional[LoadResult]:
        return self._load_result

    def load(self) -> LoadResult:
        result = LoadResult(success=True)
        self._profiles = {}

        data = _read_json(self.data_dir / PROFILES_FILE, result)
        if data is not None:
            default_data = data.get("default")
            if isinstance(default_data, dict):
                try:
                    self.default_profile = _parse_profile(
                        {"tribe_id": DEFAULT_PROFILE_ID, **default_data},
                        TribeProfile(tribe_id=DEFAULT_PROFILE_ID),
                    )
                except (ValueError, TypeError) as e:
                    result.warnings.append(f"Bad default profile, using built-in: {e}")

            for item in data.get("tribes", []):
                if not isinstance(item, dict):
                    result.warnings.append("Skipping non-object tribe entry")
                    continue
                try:
                    profile = _parse_profile(item, self.default_profile)
                except (ValueError, TypeError, KeyError) as e:
                    result.warnings.append(f"Skipping tribe profile: {e}")
                    continue
                self._profiles[profile.tribe_id] = profile
            result.loaded_count = len(self._profiles)

        for message in result.errors + result.warnings:
            logger.warning(f"Tribe profiles: {message}")
        self._load_result = result
        return result

    def get(self, tribe_id: str) -> TribeProfile:
        profile = self._profiles.get(tribe_id)
        if profile is None:
            return TribeProfile(
                tribe_id=tribe_id,
                personality=self.default_profile.personality,
                trade_priority=self.default_profile.trade_priority,
            )
        return profile

    def all_profiles(self) -> dict[str, TribeProfile]:
        return dict(self._profiles)


class GreatPeopleLoader:
    """Loads great-person definitions keyed by id."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self._definitions: dict[str, GreatPersonDefinition] = {}
        self._load_result: Optional[LoadResult] = None

    @property
    def load_result(self) -> Optional[LoadResult]:
        return self._load_result

    def load(self) -> LoadResult:
        result = LoadResult(success=True)
        self._definitions = {}

        data = _read_json(self.data_dir / GREAT_PEOPLE_FILE, result)
        if data is not None:
            for item in data.get("great_people", []):
                if not isinstance(item, dict):
                    result.warnings.append("Skipping non-object great person entry")
                    continue
                try:
                    definition = _parse_great_person(item)
                except (ValueError, TypeError, KeyError) as e:
                    result.warnings.append(f"Skipping great person: {e}")
                    continue
                self._definitions[definition.id] = definition
            result.loaded_count = len(self._definitions)

        for message in result.errors + result.warnings:
            logger.warning(f"Great people: {message}")
        self._load_result = result
        return result

    def get(self, gp_id: str) -> Optional[GreatPersonDefinition]:
        return self._definitions.get(gp_id)

    def all_definitions(self) -> dict[str, GreatPersonDefinition]:
        return dict(self._definitions)


# =============================================================================
# SHARED INSTANCES
# =============================================================================

_profile_loader: Optional[TribeProfileLoader] = None
_great_people_loader: Optional[GreatPeopleLoader] = None


def get_profile_loader() -> TribeProfileLoader:
    """Shared profile loader, loaded on first use."""
    global _profile_loader
    if _profile_loader is None:
        _profile_loader = TribeProfileLoader()
        _profile_loader.load()
    return _profile_loader


def get_tribe_profile(tribe_id: str) -> TribeProfile:
    return get_profile_loader().get(tribe_id)


def get_great_people_loader() -> GreatPeopleLoader:
    global _great_people_loader
    if _great_people_loader is None:
        _great_people_loader = GreatPeopleLoader()
        _great_people_loader.load()
    return _great_people_loader


def get_great_person_definition(gp_id: str) -> Optional[GreatPersonDefinition]:
    return get_great_people_loader().get(gp_id)


def reset_loaders() -> None:
    """Drop the shared loaders so the next access reloads from disk."""
    global _profile_loader, _great_people_loader
    _profile_loader = None
    _great_people_loader = None
