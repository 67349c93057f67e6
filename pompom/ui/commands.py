"""Key bindings and command dispatch.

Each key maps to one ``Command``; Cyrillic aliases cover users on a
Russian layout who would otherwise have to switch keyboards to quit.
"""

from __future__ import annotations

from enum import Enum

from ..timer.engine import Mode, TimerEngine


class Command(Enum):
    TOGGLE = "toggle"
    RESET = "reset"
    RESET_DEFAULT = "reset_default"
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    INCREASE = "increase"
    DECREASE = "decrease"
    TOGGLE_AUTO = "toggle_auto"
    CLEAR_STATS = "clear_stats"
    HELP = "help"
    QUIT = "quit"


KEY_BINDINGS: dict[str, Command] = {
    " ": Command.TOGGLE,
    "r": Command.RESET,
    "к": Command.RESET,
    "d": Command.RESET_DEFAULT,
    "в": Command.RESET_DEFAULT,
    "1": Command.FOCUS,
    "2": Command.SHORT_BREAK,
    "3": Command.LONG_BREAK,
    "+": Command.INCREASE,
    "=": Command.INCREASE,
    "-": Command.DECREASE,
    "_": Command.DECREASE,
    "a": Command.TOGGLE_AUTO,
    "ф": Command.TOGGLE_AUTO,
    "c": Command.CLEAR_STATS,
    "с": Command.CLEAR_STATS,
    "?": Command.HELP,
    "/": Command.HELP,
    "q": Command.QUIT,
    "й": Command.QUIT,
}

# (keys, description) rows for the help overlay
HELP_ROWS: tuple[tuple[str, str], ...] = (
    ("Space", "Start/Pause timer"),
    ("r", "Reset current timer"),
    ("d", "Reset to default duration"),
    ("1", "Switch to FOCUS mode"),
    ("2", "Switch to SHORT BREAK mode"),
    ("3", "Switch to LONG BREAK mode"),
    ("+/-", "Increase/decrease current duration"),
    ("a", "Toggle auto-switch"),
    ("c", "Clear statistics"),
    ("?", "Show this help"),
    ("q", "Quit PomPom"),
)

_MODE_COMMANDS: dict[Command, Mode] = {
    Command.FOCUS: Mode.FOCUS,
    Command.SHORT_BREAK: Mode.SHORT_BREAK,
    Command.LONG_BREAK: Mode.LONG_BREAK,
}


def command_for_key(key: str) -> Command | None:
    return KEY_BINDINGS.get(key)


def dispatch(engine: TimerEngine, command: Command) -> bool:
    """Run an engine command.  Returns False for commands the engine
    doesn't own (HELP, QUIT), which the app handles itself."""
    if command in _MODE_COMMANDS:
        engine.switch_mode(_MODE_COMMANDS[command])
    elif command == Command.TOGGLE:
        engine.toggle()
    elif command == Command.RESET:
        engine.reset()
    elif command == Command.RESET_DEFAULT:
        engine.reset_to_default()
    elif command == Command.INCREASE:
        engine.change_duration(1)
    elif command == Command.DECREASE:
        engine.change_duration(-1)
    elif command == Command.TOGGLE_AUTO:
        engine.toggle_auto_switch()
    elif command == Command.CLEAR_STATS:
        engine.clear_stats()
    else:
        return False
    return True
