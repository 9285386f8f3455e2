"""
Run log for the engine.

Every rng draw, diplomatic stance change, applied action and resolved combat
is appended here with a sequence number, so a game can be audited or
compared against a replay from the same seed. Use get_run_log() for the
shared instance; tests call reset_run_log() between cases.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ROLL = "roll"
    TRANSITION = "transition"
    ACTION = "action"
    COMBAT = "combat"
    CUSTOM = "custom"


@dataclass
class LogEvent:
    """
    One entry in the run log.

    ``sequence_number`` and (when not given) ``game_turn`` are stamped by
    the RunLog when the event is recorded.
    """

    event_type: ClassVar[EventType] = EventType.CUSTOM

    sequence_number: int = 0
    game_turn: Optional[int] = None
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["event_type"] = self.event_type.value
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def describe(self) -> str:
        return f"{self.event_type.value.upper()} {self.context}"

    def __str__(self) -> str:
        return f"[{self.sequence_number}] {self.describe()}"


@dataclass
class RollEvent(LogEvent):
    event_type: ClassVar[EventType] = EventType.ROLL

    value: float = 0.0
    reason: str = ""

    def describe(self) -> str:
        return f"ROLL {self.value:.6f} ({self.reason})"


@dataclass
class TransitionEvent(LogEvent):
    """A stance change between two tribes, or a hand-off between players."""

    event_type: ClassVar[EventType] = EventType.TRANSITION

    from_state: str = ""
    to_state: str = ""
    trigger: str = ""

    def describe(self) -> str:
        return f"TRANSITION {self.from_state} -> {self.to_state} ({self.trigger})"


@dataclass
class ActionEvent(LogEvent):
    event_type: ClassVar[EventType] = EventType.ACTION

    action_type: str = ""
    tribe_id: str = ""
    success: bool = True
    error: Optional[str] = None

    def describe(self) -> str:
        outcome = "ok" if self.success else f"failed: {self.error}"
        return f"ACTION {self.tribe_id} {self.action_type} ({outcome})"


@dataclass
class CombatEvent(LogEvent):
    """Unit-vs-unit or unit-vs-settlement; settlements use their id as defender."""

    event_type: ClassVar[EventType] = EventType.COMBAT

    attacker_id: str = ""
    defender_id: str = ""
    attacker_damage: int = 0
    defender_damage: int = 0
    attacker_killed: bool = False
    defender_killed: bool = False

    def describe(self) -> str:
        return (
            f"COMBAT {self.attacker_id} -> {self.defender_id}: "
            f"dealt {self.defender_damage}, took {self.attacker_damage}"
        )


Subscriber = Callable[[LogEvent], None]


class RunLog:
    """Ordered, append-only record of engine events."""

    def __init__(self):
        self._events: list[LogEvent] = []
        self._sequence = 0
        self._seed: Optional[int] = None
        self._started_at = datetime.now()
        self._turn_provider: Optional[Callable[[], int]] = None
        self._subscribers: list[Subscriber] = []
        self._paused = False

    def reset(self) -> None:
        """Forget all events and the turn provider; subscribers stay attached."""
        self._events = []
        self._sequence = 0
        self._started_at = datetime.now()
        self._turn_provider = None
        self._paused = False
        logger.debug("Run log reset")

    # ----- session metadata -----

    def set_seed(self, seed: int) -> None:
        self._seed = seed
        logger.info(f"Run log seed: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def set_turn_provider(self, provider: Callable[[], int]) -> None:
        """Callback used to stamp events that were logged without a turn."""
        self._turn_provider = provider

    # ----- recording control -----

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _current_turn(self) -> Optional[int]:
        if self._turn_provider is None:
            return None
        try:
            return self._turn_provider()
        except Exception as e:
            logger.warning(f"Turn provider failed: {e}")
            return None

    def _record(self, event: LogEvent) -> LogEvent:
        if self._paused:
            return event
        self._sequence += 1
        event.sequence_number = self._sequence
        if event.game_turn is None:
            event.game_turn = self._current_turn()
        self._events.append(event)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Run log subscriber failed on #{event.sequence_number}: {e}")
        return event

    # ----- event constructors -----

    def log_roll(self, value: float, reason: str = "", context: Optional[dict[str, Any]] = None) -> RollEvent:
        return self._record(RollEvent(value=value, reason=reason, context=context or {}))

    def log_transition(
        self,
        from_state: str,
        to_state: str,
        trigger: str,
        turn: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> TransitionEvent:
        return self._record(
            TransitionEvent(
                from_state=from_state,
                to_state=to_state,
                trigger=trigger,
                game_turn=turn,
                context=context or {},
            )
        )

    def log_action(
        self,
        action_type: str,
        tribe_id: str,
        success: bool,
        error: Optional[str] = None,
        turn: Optional[int] = None,
    ) -> ActionEvent:
        return self._record(
            ActionEvent(
                action_type=action_type,
                tribe_id=tribe_id,
                success=success,
                error=error,
                game_turn=turn,
            )
        )

    def log_combat(
        self,
        attacker_id: str,
        defender_id: str,
        attacker_damage: int,
        defender_damage: int,
        attacker_killed: bool = False,
        defender_killed: bool = False,
        turn: Optional[int] = None,
    ) -> CombatEvent:
        return self._record(
            CombatEvent(
                attacker_id=attacker_id,
                defender_id=defender_id,
                attacker_damage=attacker_damage,
                defender_damage=defender_damage,
                attacker_killed=attacker_killed,
                defender_killed=defender_killed,
                game_turn=turn,
            )
        )

    def log_custom(self, event_name: str, details: dict[str, Any]) -> LogEvent:
        return self._record(LogEvent(context={"event_name": event_name, **details}))

    # ----- queries -----

    def get_events(self, event_type: Optional[EventType] = None, since_sequence: int = 0) -> list[LogEvent]:
        """Events after ``since_sequence``, optionally of one type, in order."""
        return [
            e
            for e in self._events
            if e.sequence_number > since_sequence and (event_type is None or e.event_type == event_type)
        ]

    def _of_class(self, cls: type) -> list:
        return [e for e in self._events if isinstance(e, cls)]

    def get_rolls(self) -> list[RollEvent]:
        return self._of_class(RollEvent)

    def get_transitions(self) -> list[TransitionEvent]:
        return self._of_class(TransitionEvent)

    def get_actions(self) -> list[ActionEvent]:
        return self._of_class(ActionEvent)

    def get_combats(self) -> list[CombatEvent]:
        return self._of_class(CombatEvent)

    def get_event_count(self) -> int:
        return len(self._events)

    def get_summary(self) -> dict[str, Any]:
        counts = Counter(e.event_type for e in self._events)
        return {
            "session_start": self._started_at.isoformat(),
            "seed": self._seed,
            "total_events": len(self._events),
            "rolls": counts[EventType.ROLL],
            "transitions": counts[EventType.TRANSITION],
            "actions": counts[EventType.ACTION],
            "combats": counts[EventType.COMBAT],
            "last_sequence": self._sequence,
        }

    # ----- export -----

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_start": self._started_at.isoformat(),
            "seed": self._seed,
            "sequence": self._sequence,
            "events": [e.to_dict() for e in self._events],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def save(self, filepath: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        logger.info(f"Run log written to {filepath}")

    def format_log(
        self,
        event_types: Optional[Iterable[EventType]] = None,
        max_events: Optional[int] = None,
    ) -> str:
        """Plain-text dump, oldest first; ``max_events`` keeps the newest."""
        wanted = set(event_types) if event_types else None
        events = [e for e in self._events if wanted is None or e.event_type in wanted]
        if max_events:
            events = events[-max_events:]
        header = [
            f"Run log started {self._started_at.isoformat()}",
            f"seed={self._seed if self._seed is not None else '-'} events={len(self._events)}",
            "",
        ]
        return "\n".join(header + [str(e) for e in events])


_run_log: Optional[RunLog] = None


def get_run_log() -> RunLog:
    global _run_log
    if _run_log is None:
        _run_log = RunLog()
    return _run_log


def reset_run_log() -> RunLog:
    log = get_run_log()
    log.reset()
    return log
