"""Content loading: tribe profiles and great-person definitions."""

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
from tribesim.content_loader.profile_loader import (
    DATA_DIR,
    GreatPeopleLoader,
    LoadResult,
    TribeProfileLoader,
    get_great_people_loader,
    get_great_person_definition,
    get_profile_loader,
    get_tribe_profile,
    reset_loaders,
)

__all__ = [
    "ACCUMULATED_STATS",
    "COUNTED_STATS",
    "BorderExpansion",
    "GreatPersonDefinition",
    "GreatPersonEffect",
    "GreatPersonThreshold",
    "InstantGold",
    "TargetPriority",
    "TribePersonality",
    "TribeProfile",
    "YieldBuff",
    "DATA_DIR",
    "GreatPeopleLoader",
    "LoadResult",
    "TribeProfileLoader",
    "get_great_people_loader",
    "get_great_person_definition",
    "get_profile_loader",
    "get_tribe_profile",
    "reset_loaders",
]
