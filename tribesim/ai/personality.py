"""
Personality lookup and the shared thresholds the AI scales by it.
"""

from __future__ import annotations

from tribesim.content_loader import TribePersonality, get_tribe_profile
from tribesim.data_models import TribeId

# War weariness at which a tribe with tolerance 1.0 wants out
HIGH_WAR_WEARINESS = 30
# Strength ratio the AI wants over a target before declaring war
WAR_STRENGTH_RATIO = 1.5
# Strength ratio of an enemy over the AI that makes it sue for peace
PEACE_STRENGTH_RATIO = 1.3

HIGH_TRAIT = 1.3


def get_tribe_personality(tribe_id: TribeId) -> TribePersonality:
    return get_tribe_profile(tribe_id).personality


def max_concurrent_wars(personality: TribePersonality) -> int:
    return 3 if personality.aggression >= HIGH_TRAIT else 2


def max_allies(personality: TribePersonality) -> int:
    return 3 if personality.alliance >= HIGH_TRAIT else 2
