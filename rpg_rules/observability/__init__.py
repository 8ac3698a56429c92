"""Observability: run log of rolls, wizard transitions and snapshot transforms."""

from rpg_rules.observability.run_log import (
    EventType,
    LogEvent,
    RollEvent,
    TransitionEvent,
    TransformEvent,
    RunLog,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "EventType",
    "LogEvent",
    "RollEvent",
    "TransitionEvent",
    "TransformEvent",
    "RunLog",
    "get_run_log",
    "reset_run_log",
]
