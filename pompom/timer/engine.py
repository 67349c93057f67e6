"""Timer state machine for PomPom.

States
------
IDLE      Not counting down. Mode is loaded and ready to start.
RUNNING   Tick source armed, remaining time drops by one each second.
PAUSED    Tick source cancelled mid-interval; start() resumes.

Transitions
-----------
IDLE | PAUSED → RUNNING          (start)
RUNNING → PAUSED                 (pause)
RUNNING → IDLE                   (timer reaches 0)
Any → IDLE                       (switch_mode / reset)

When auto-switch is on, reaching 0 switches to the next mode and starts it
again after ``CHAIN_DELAY_MS``.  Every FOCUS completion whose new count is
a multiple of ``LONG_BREAK_EVERY`` routes to LONG_BREAK instead of
SHORT_BREAK.

The engine owns exactly two timer handles: the 1 s tick source and the
single-shot chain start.  Any pause / switch / reset stops both before
touching state, so at most one tick source is ever live.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import DEFAULT_DURATIONS as _DEFAULT_MINUTES
from ..settings import PersistedSettings, SettingsStore

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class Mode(Enum):
    FOCUS = "FOCUS"
    SHORT_BREAK = "SHORT_BREAK"
    LONG_BREAK = "LONG_BREAK"

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def successor(self) -> "Mode":
        """Nominal next mode for auto-switch (ignores the long-break rule)."""
        return _MODE_SUCCESSORS[self]

    @property
    def color(self) -> str:
        return _MODE_COLORS[self]


_MODE_LABELS: dict[Mode, str] = {
    Mode.FOCUS: "FOCUS",
    Mode.SHORT_BREAK: "SHORT BREAK",
    Mode.LONG_BREAK: "LONG BREAK",
}

_MODE_SUCCESSORS: dict[Mode, Mode] = {
    Mode.FOCUS: Mode.SHORT_BREAK,
    Mode.SHORT_BREAK: Mode.FOCUS,
    Mode.LONG_BREAK: Mode.FOCUS,
}

_MODE_COLORS: dict[Mode, str] = {
    Mode.FOCUS: "green",
    Mode.SHORT_BREAK: "blue",
    Mode.LONG_BREAK: "magenta",
}


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_DURATIONS: dict[Mode, int] = {
    mode: _DEFAULT_MINUTES[mode.value] for mode in Mode
}  # minutes

MIN_DURATION = 1  # minutes
LONG_BREAK_EVERY = 4
TICK_INTERVAL_MS = 1000
CHAIN_DELAY_MS = 1000  # lets the UI show "Ready" before auto-start


def format_time(seconds: int) -> str:
    """``1500`` → ``"25:00"``."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based Pomodoro timer with mode switching, auto-chaining and
    write-through persistence.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted every second while running.
    state_changed(new_state: TimerState)
        Emitted on every IDLE / RUNNING / PAUSED transition.
    mode_changed(mode: Mode)
        Emitted by ``switch_mode``.
    status_changed(message: str)
        Human-readable status line, emitted on every state change.
    session_completed(mode: Mode)
        Emitted when an interval expires, before any auto-switch.
    settings_changed()
        Durations, auto-switch or the completed count changed.
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    mode_changed = pyqtSignal(object)
    status_changed = pyqtSignal(str)
    session_completed = pyqtSignal(object)
    settings_changed = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: PersistedSettings | None = None,
        store: SettingsStore | None = None,
        notify: Callable[[], None] | None = None,
        chain_delay_ms: int = CHAIN_DELAY_MS,
    ) -> None:
        super().__init__(parent)
        settings = settings or PersistedSettings()

        # ── collaborators ─────────────────────────────────────────────
        self._store = store
        self._notify = notify

        # ── configuration ─────────────────────────────────────────────
        self._durations: dict[Mode, int] = {
            mode: max(MIN_DURATION, settings.durations.get(mode.value, DEFAULT_DURATIONS[mode]))
            for mode in Mode
        }
        self._auto_switch: bool = settings.auto_switch
        self._completed_focus: int = settings.completed_focus

        # ── timer state ───────────────────────────────────────────────
        self._state: TimerState = TimerState.IDLE
        self._mode: Mode = Mode.FOCUS
        self._remaining: int = self._durations[Mode.FOCUS] * 60
        self._status: str = f"{self._mode.label} - Ready"

        # ── Qt timers ─────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

        self._chain_timer = QTimer(self)
        self._chain_timer.setSingleShot(True)
        self._chain_timer.setInterval(chain_delay_ms)
        self._chain_timer.timeout.connect(self._on_chain_timeout)
        self._chain_mode: Mode | None = None

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def formatted_remaining(self) -> str:
        return format_time(self._remaining)

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def completed_focus(self) -> int:
        return self._completed_focus

    @property
    def auto_switch(self) -> bool:
        return self._auto_switch

    @property
    def status(self) -> str:
        """Last status line emitted."""
        return self._status

    @property
    def chain_pending(self) -> bool:
        """True while a deferred auto-chain start is waiting to fire."""
        return self._chain_timer.isActive()

    @property
    def durations(self) -> dict[Mode, int]:
        return dict(self._durations)

    def duration_for(self, mode: Mode) -> int:
        """Configured duration in minutes."""
        return self._durations[mode]

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Arm the tick source.  No-op if already running."""
        self._cancel_chain()
        if self._state == TimerState.RUNNING:
            return
        if self._remaining <= 0:
            # expired interval left on screen (auto-switch off)
            self._remaining = self._durations[self._mode] * 60
            self.tick.emit(self._remaining)
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()
        self._set_status(f"{self._mode.label} - Running")

    def pause(self) -> None:
        """Freeze the countdown.

        Also cancels a pending auto-chain start: a pause during the chain
        window leaves the new interval PAUSED instead of letting the
        deferred start override it.
        """
        chain_cancelled = self._cancel_chain()
        if self._state != TimerState.RUNNING and not chain_cancelled:
            return
        self._qt_timer.stop()
        self._set_state(TimerState.PAUSED)
        self._set_status(f"{self._mode.label} - Paused")

    def toggle(self) -> None:
        """Start/pause, the way the space bar does it."""
        if self.is_running:
            self.pause()
        else:
            self.start()

    def switch_mode(self, mode: Mode, reset_timer: bool = True) -> None:
        """Stop everything and load ``mode``.

        ``reset_timer=False`` keeps the current remaining seconds; every
        user-facing switch resets.
        """
        self._stop_timers()
        self._set_state(TimerState.IDLE)
        self._mode = mode
        if reset_timer:
            self._remaining = self._durations[mode] * 60
        self.mode_changed.emit(mode)
        self.tick.emit(self._remaining)
        self._set_status(f"{mode.label} - Ready")
        self._persist()

    def reset(self) -> None:
        """Restart the current mode from its full duration (not persisted)."""
        self._stop_timers()
        self._remaining = self._durations[self._mode] * 60
        self._set_state(TimerState.IDLE)
        self.tick.emit(self._remaining)
        self._set_status(f"{self._mode.label} - Reset")

    def reset_to_default(self) -> None:
        """Restore the current mode's built-in duration."""
        minutes = DEFAULT_DURATIONS[self._mode]
        self._durations[self._mode] = minutes
        self._remaining = minutes * 60
        self.tick.emit(self._remaining)
        self._set_status(
            f"{self._mode.label} reset to default duration ({minutes} minutes)"
        )
        self._persist()

    def change_duration(self, delta: int) -> None:
        """Add ``delta`` minutes to the current mode (floored at 1 min).

        Remaining time jumps to the full new duration, even while running.
        """
        minutes = max(MIN_DURATION, self._durations[self._mode] + delta)
        self._durations[self._mode] = minutes
        self._remaining = minutes * 60
        self.tick.emit(self._remaining)
        self._set_status(f"{self._mode.label} duration changed to {minutes} minutes")
        self._persist()

    def toggle_auto_switch(self) -> None:
        self._auto_switch = not self._auto_switch
        self._set_status(
            f"Auto-switch {'enabled' if self._auto_switch else 'disabled'}"
        )
        self._persist()

    def clear_stats(self) -> None:
        """Zero the completed-focus count.  Mode and clock are untouched."""
        self._completed_focus = 0
        self._set_status("Statistics cleared")
        self._persist()

    def shutdown(self) -> None:
        """Stop both timers and write the final state (quit path)."""
        self._stop_timers()
        if self._state == TimerState.RUNNING:
            self._set_state(TimerState.PAUSED)
        self._persist()

    def snapshot(self) -> PersistedSettings:
        """The durable part of the engine state."""
        return PersistedSettings(
            durations={mode.value: minutes for mode, minutes in self._durations.items()},
            auto_switch=self._auto_switch,
            completed_focus=self._completed_focus,
        )

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        self._remaining = max(0, self._remaining - 1)
        self.tick.emit(self._remaining)
        if self._remaining <= 0:
            self._finish_session()

    def _finish_session(self) -> None:
        self._qt_timer.stop()
        self._signal_completion()
        completed_mode = self._mode
        self._set_state(TimerState.IDLE)

        if completed_mode == Mode.FOCUS:
            self._completed_focus += 1
            self._persist()

        self._set_status(
            f"{completed_mode.label} completed! "
            f"Focus sessions: {self._completed_focus}"
        )
        logger.info(
            "%s completed (focus sessions: %d)",
            completed_mode.label,
            self._completed_focus,
        )
        self.session_completed.emit(completed_mode)

        if self._auto_switch:
            self.switch_mode(self._next_mode(completed_mode))
            self._chain_mode = self._mode
            self._chain_timer.start()

    def _next_mode(self, completed_mode: Mode) -> Mode:
        if (
            completed_mode == Mode.FOCUS
            and self._completed_focus > 0
            and self._completed_focus % LONG_BREAK_EVERY == 0
        ):
            return Mode.LONG_BREAK
        return completed_mode.successor

    def _on_chain_timeout(self) -> None:
        chain_mode, self._chain_mode = self._chain_mode, None
        # Stale if the user moved the engine since the chain was armed.
        if self._state != TimerState.IDLE or self._mode != chain_mode:
            logger.debug("Dropping stale auto-start for %s", chain_mode)
            return
        self.start()

    def _cancel_chain(self) -> bool:
        """Stop a pending chain start.  Returns True if one was pending."""
        pending = self._chain_timer.isActive()
        self._chain_timer.stop()
        self._chain_mode = None
        return pending

    def _stop_timers(self) -> None:
        self._qt_timer.stop()
        self._cancel_chain()

    def _signal_completion(self) -> None:
        if self._notify is None:
            return
        try:
            self._notify()
        except Exception:
            logger.exception("Completion notification failed")

    def _set_state(self, new_state: TimerState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        self.state_changed.emit(new_state)

    def _set_status(self, message: str) -> None:
        self._status = message
        self.status_changed.emit(message)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: persistence
    # ══════════════════════════════════════════════════════════════════

    def _persist(self) -> None:
        self.settings_changed.emit()
        if self._store is None:
            return
        if not self._store.save(self.snapshot()):
            logger.warning("Settings not saved; keeping in-memory state")
