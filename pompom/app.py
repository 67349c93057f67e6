"""Application wiring for PomPom."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QCoreApplication, QObject
from rich.console import Console

from .audio.sounds import SoundManager
from .settings import SettingsStore
from .timer.engine import TimerEngine
from .ui.commands import Command, command_for_key, dispatch
from .ui.terminal import KeyReader, TerminalView

logger = logging.getLogger(__name__)


class PomPomApp(QObject):
    """Owns the engine, the store, the sound sink and the terminal.

    Settings flow: ``SettingsStore.load()`` once here, then the engine
    writes through the store after every durable change.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store: SettingsStore | None = None,
        console: Console | None = None,
    ) -> None:
        super().__init__(parent)

        # ── settings ──────────────────────────────────────────────────
        self._store = store or SettingsStore()
        self._store.ensure_dir()
        settings = self._store.load()

        # ── view + sound sink ─────────────────────────────────────────
        self._console = console or Console()
        self._sounds = SoundManager(self, bell=self._console.bell)

        # ── engine ────────────────────────────────────────────────────
        self._engine = TimerEngine(
            self,
            settings=settings,
            store=self._store,
            notify=self._sounds,
        )
        self._view = TerminalView(self._engine, console=self._console)
        self._keys: KeyReader | None = None
        self._quitting = False

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    def run(self) -> None:
        """Take over the terminal.  The Qt loop is started by the caller."""
        self._view.start()
        self._keys = KeyReader(self)
        self._keys.key_pressed.connect(self.handle_key)
        logger.info("PomPom started (settings at %s)", self._store.path)

    def handle_key(self, key: str) -> None:
        if self._view.help_visible:
            # any key closes the overlay
            self._view.hide_help()
            return

        command = command_for_key(key)
        if command is None:
            return
        if command == Command.HELP:
            self._view.show_help()
        elif command == Command.QUIT:
            self.quit()
        else:
            dispatch(self._engine, command)

    def quit(self) -> None:
        """Persist, restore the terminal and leave the Qt loop with 0."""
        if self._quitting:
            return
        self._quitting = True
        self._engine.shutdown()
        if self._keys is not None:
            self._keys.stop()
        self._view.stop()
        logger.info("PomPom stopped")
        QCoreApplication.exit(0)
