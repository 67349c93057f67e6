"""Timer package."""

from .engine import (
    TimerEngine,
    TimerState,
    Mode,
    DEFAULT_DURATIONS,
    MIN_DURATION,
    LONG_BREAK_EVERY,
    CHAIN_DELAY_MS,
    format_time,
)

__all__ = [
    "TimerEngine",
    "TimerState",
    "Mode",
    "DEFAULT_DURATIONS",
    "MIN_DURATION",
    "LONG_BREAK_EVERY",
    "CHAIN_DELAY_MS",
    "format_time",
]
