"""Full-screen terminal presentation for PomPom.

Layout (top → bottom):
    - Menu bar: per-mode durations and their switch keys
    - Timer card: large figlet MM:SS in the mode colour, mode label,
      focus count
    - Status bar: last engine status line + help hint

The view only reads engine state; keys arrive through ``KeyReader`` and
are dispatched by the app.
"""

from __future__ import annotations

import codecs
import logging
import os
import sys
import termios
import tty

import pyfiglet

from PyQt6.QtCore import QObject, QSocketNotifier, pyqtSignal
from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..timer.engine import Mode, TimerEngine, TimerState
from .commands import HELP_ROWS

logger = logging.getLogger(__name__)

MENU_STYLE = "white on #CC6766"

ESC = "\x1b"
CSI_FINAL_MIN = "\x40"
CSI_FINAL_MAX = "\x7e"
MAX_ESCAPE_LEN = 32

CLOCK_FONT = "standard"


def big_clock(text: str, style: str = "") -> Text:
    """Render ``text`` as multi-line figlet art."""
    art = pyfiglet.figlet_format(text, font=CLOCK_FONT)
    lines = art.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return Text("\n".join(lines), style=style, no_wrap=True)


class KeyReader(QObject):
    """Reads single keypresses from stdin without blocking the Qt loop.

    The terminal is put into cbreak mode for the reader's lifetime;
    ``stop()`` restores the saved attributes.  Escape sequences (arrow
    and function keys, Alt-modified keys) are consumed whole and never
    emitted, even when they are split across reads.
    """

    key_pressed = pyqtSignal(str)

    def __init__(self, parent: QObject | None = None, *, stream=None) -> None:
        super().__init__(parent)
        self._stream = stream or sys.stdin
        self._fd = self._stream.fileno()
        self._old_settings = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        # text of an unfinished escape sequence after ESC, None outside one
        self._escape: str | None = None
        try:
            self._old_settings = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        except termios.error as exc:
            # not a tty (piped input); keys still arrive line-buffered
            logger.warning("Could not enter cbreak mode: %s", exc)

        self._notifier = QSocketNotifier(self._fd, QSocketNotifier.Type.Read, self)
        self._notifier.activated.connect(self._on_ready)

    def _on_ready(self) -> None:
        # raw read so multi-byte keys (Cyrillic aliases) arrive whole
        data = os.read(self._fd, 64)
        if not data:
            # EOF: stop polling a closed stream
            self._notifier.setEnabled(False)
            return
        for key in self._decoder.decode(data):
            if self._accept(key):
                self.key_pressed.emit(key)

    def _accept(self, char: str) -> bool:
        """Feed one character through the escape filter."""
        if self._escape is None:
            if char == ESC:
                self._escape = ""
                return False
            return True

        seq = self._escape + char
        if seq in ("[", "O"):
            # CSI / SS3 introducer
            self._escape = seq
        elif seq[0] == "[" and CSI_FINAL_MIN <= char <= CSI_FINAL_MAX:
            self._escape = None
        elif seq[0] == "[" and len(seq) < MAX_ESCAPE_LEN:
            # parameter / intermediate bytes
            self._escape = seq
        else:
            # SS3 final byte, ESC + key (Alt), or a runaway sequence
            self._escape = None
        return False

    def stop(self) -> None:
        self._notifier.setEnabled(False)
        if self._old_settings is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None


class TerminalView:
    """Renders engine state with rich and re-renders on every signal."""

    def __init__(self, engine: TimerEngine, console: Console | None = None) -> None:
        self._engine = engine
        self.console = console or Console()
        self.help_visible = False
        self._live: Live | None = None

        engine.tick.connect(self.refresh)
        engine.state_changed.connect(self.refresh)
        engine.mode_changed.connect(self.refresh)
        engine.status_changed.connect(self.refresh)
        engine.settings_changed.connect(self.refresh)

    # ── lifecycle ─────────────────────────────────────────────────────

    def start(self) -> None:
        self._live = Live(
            self.build(),
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self._live.start(refresh=True)

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def refresh(self, *_args) -> None:
        if self._live is not None:
            self._live.update(self.build(), refresh=True)

    def show_help(self) -> None:
        self.help_visible = True
        self.refresh()

    def hide_help(self) -> None:
        self.help_visible = False
        self.refresh()

    # ── rendering ─────────────────────────────────────────────────────

    def build(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(self.menu_bar(), name="menu", size=1),
            Layout(name="body"),
            Layout(self.status_bar(), name="status", size=1),
        )
        body = self.help_panel() if self.help_visible else self.timer_panel()
        layout["body"].update(Align.center(body, vertical="middle"))
        return layout

    def menu_bar(self) -> Text:
        engine = self._engine
        entries = [
            f"{key} - {mode.label} - {engine.duration_for(mode)}m"
            for key, mode in (("1", Mode.FOCUS), ("2", Mode.SHORT_BREAK), ("3", Mode.LONG_BREAK))
        ]
        auto = "ON" if engine.auto_switch else "OFF"
        return Text(
            "    ".join(entries) + f"    auto-switch {auto}",
            style=MENU_STYLE,
            justify="center",
        )

    def timer_panel(self) -> Panel:
        engine = self._engine
        color = engine.mode.color
        style = f"bold {color}"
        if engine.state == TimerState.PAUSED:
            style += " dim"
        clock = big_clock(engine.formatted_remaining, style=style)
        count = engine.completed_focus
        plural = "" if count == 1 else "s"
        body = Group(
            Align.center(clock),
            Text(""),
            Text(engine.mode.label, style=color, justify="center"),
            Text(""),
            Text(f"{count} focus session{plural} completed", style="dim", justify="center"),
        )
        return Panel(body, border_style=color, width=64, padding=(1, 2))

    def help_panel(self) -> Panel:
        engine = self._engine
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold", justify="right")
        table.add_column()
        for keys, description in HELP_ROWS:
            if keys in ("1", "2", "3"):
                mode = (Mode.FOCUS, Mode.SHORT_BREAK, Mode.LONG_BREAK)[int(keys) - 1]
                description = f"{description} - {engine.duration_for(mode)}m"
            elif keys == "a":
                description = f"{description} (currently {'ON' if engine.auto_switch else 'OFF'})"
            table.add_row(Text(f"[{keys}]"), description)
        footer = Text("Press any key to close this help", style="dim", justify="center")
        return Panel(
            Group(table, Text(""), footer),
            title="PomPom - Keyboard Shortcuts",
            width=64,
        )

    def status_bar(self) -> Table:
        bar = Table.grid(expand=True)
        bar.add_column(ratio=1)
        bar.add_column(justify="right")
        bar.add_row(Text(f" PomPom - {self._engine.status}"), Text("Help - ? "))
        return bar
