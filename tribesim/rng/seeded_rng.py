"""
Deterministic rng source for the engine.

The engine never touches the module-level random generator. Every call that
needs randomness takes an ``rng`` callable returning a float in [0, 1).
SeededRng is the standard implementation: it owns a private random.Random,
so the same seed replays the same turn, and it records each draw in the run
log for auditing.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from tribesim.observability.run_log import RunLog

logger = logging.getLogger(__name__)

RngFn = Callable[[], float]


class SeededRng:
    """
    Callable rng backed by a private ``random.Random``.

    Usage:
        rng = SeededRng(seed=42, reason_prefix="AI")
        rarity = roll_rarity(rng)

    Args:
        seed: Seed for the private generator
        reason_prefix: Prefix used when logging draws
        run_log: Optional RunLog. If None the global run log is used.
        log_draws: Set False to skip run log entries (bulk simulations)
    """

    def __init__(
        self,
        seed: int,
        reason_prefix: str = "Engine",
        run_log: Optional["RunLog"] = None,
        log_draws: bool = True,
    ):
        self._seed = seed
        self._random = random.Random(seed)
        self._reason_prefix = reason_prefix
        self._run_log = run_log
        self._log_draws = log_draws
        self._roll_count = 0

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def roll_count(self) -> int:
        """Number of draws made so far."""
        return self._roll_count

    def _get_run_log(self) -> "RunLog":
        if self._run_log is not None:
            return self._run_log
        from tribesim.observability.run_log import get_run_log
        return get_run_log()

    def __call__(self) -> float:
        return self.roll()

    def roll(self, reason: str = "") -> float:
        """Draw a float in [0, 1)."""
        self._roll_count += 1
        value = self._random.random()
        if self._log_draws:
            label = f"{self._reason_prefix}: {reason or 'draw'} (roll #{self._roll_count})"
            self._get_run_log().log_roll(value, label)
        return value

    def randint(self, a: int, b: int, reason: str = "") -> int:
        """Return an integer in [a, b] derived from a single draw."""
        if b < a:
            raise ValueError(f"Empty range for randint({a}, {b})")
        return a + int(self.roll(reason or f"range({a}-{b})") * (b - a + 1))

    def choice(self, seq: Sequence[Any], reason: str = "") -> Any:
        """Choose an element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.roll(reason or f"choice({len(seq)})") * len(seq))]

    def reset(self) -> None:
        """Restart the sequence from the original seed."""
        self._random = random.Random(self._seed)
        self._roll_count = 0
        logger.debug(f"SeededRng reset to seed {self._seed}")
