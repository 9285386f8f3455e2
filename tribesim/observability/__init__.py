"""
Observability for the tribesim engine.

Provides an auditable log of rng draws, stance transitions, applied actions
and combat outcomes.
"""

from tribesim.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    RollEvent,
    TransitionEvent,
    ActionEvent,
    CombatEvent,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "RollEvent",
    "TransitionEvent",
    "ActionEvent",
    "CombatEvent",
    "get_run_log",
    "reset_run_log",
]
