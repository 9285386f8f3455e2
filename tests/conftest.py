"""
Pytest fixtures for the tribesim test suite.

Provides seeded and scripted rng sources, small maps, sample game states and
a fresh run log and content cache for every test.
"""

import pytest

from tribesim.content_loader import reset_loaders
from tribesim.data_models import TerrainType
from tribesim.game_state import GameEngine
from tribesim.observability.run_log import reset_run_log
from tribesim.rng import SeededRng

from tests.helpers import SequenceRng, make_map, make_state, place_unit


# =============================================================================
# GLOBAL RESET
# =============================================================================


@pytest.fixture(autouse=True)
def clean_globals():
    """Start every test with an empty run log and freshly loaded content."""
    reset_run_log()
    reset_loaders()
    yield
    reset_run_log()
    reset_loaders()


# =============================================================================
# RNG FIXTURES
# =============================================================================


@pytest.fixture
def seeded_rng():
    """Seeded rng for reproducible tests."""
    return SeededRng(seed=42, log_draws=False)


@pytest.fixture
def low_rng():
    """Rng that always draws 0.0, passing every probabilistic gate."""
    return SequenceRng([0.0])


@pytest.fixture
def high_rng():
    """Rng that always draws just under 1.0, failing every probabilistic gate."""
    return SequenceRng([0.999])


# =============================================================================
# MAP AND STATE FIXTURES
# =============================================================================


@pytest.fixture
def grass_map():
    """10x10 all-grassland map."""
    return make_map()


@pytest.fixture
def two_tribe_state(grass_map):
    """monkes (to move) and degods on an empty grassland map, neutral."""
    return make_state(("monkes", "degods"), hex_map=grass_map)


@pytest.fixture
def warriors_state(two_tribe_state):
    """A monkes warrior at (2,2) next to a degods warrior at (3,2)."""
    state, _ = place_unit(two_tribe_state, "warrior", "monkes", 2, 2, unit_id="mw")
    state, _ = place_unit(state, "warrior", "degods", 3, 2, unit_id="dw", has_acted=True)
    return state


@pytest.fixture
def hills_map():
    return make_map(terrain=TerrainType.HILLS)


@pytest.fixture
def engine(low_rng):
    """GameEngine with a deterministic rng."""
    return GameEngine(rng=low_rng)
