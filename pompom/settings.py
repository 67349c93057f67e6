"""User preferences with JSON persistence.

Settings are stored at:
    ~/.pompom/settings.json        (override the directory with $POMPOM_HOME)

On-disk shape::

    {
      "durations": {"FOCUS": 25, "SHORT_BREAK": 5, "LONG_BREAK": 15},
      "autoSwitch": true,
      "completedFocus": 0,
      "lastUsed": "2026-01-01T09:00:00.000Z"
    }

Usage::

    store = SettingsStore()
    record = store.load()
    record.auto_switch = False
    store.save(record)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _config_dir() -> Path:
    env_dir = os.getenv("POMPOM_HOME")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".pompom"


CONFIG_DIR = _config_dir()
SETTINGS_PATH = CONFIG_DIR / "settings.json"

# Minutes per mode, keyed by the mode's persisted name.
DEFAULT_DURATIONS: dict[str, int] = {
    "FOCUS": 25,
    "SHORT_BREAK": 5,
    "LONG_BREAK": 15,
}


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a count
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class PersistedSettings:
    """The durable preferences record."""

    durations: dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_DURATIONS)
    )
    auto_switch: bool = True
    completed_focus: int = 0
    last_used: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "durations": dict(self.durations),
            "autoSwitch": self.auto_switch,
            "completedFocus": self.completed_focus,
            "lastUsed": self.last_used,
        }

    @classmethod
    def from_json(cls, data: Any) -> "PersistedSettings":
        """Build a record from parsed JSON.

        Unknown keys are ignored and each malformed field falls back to
        its default, so one bad value doesn't cost the rest.
        """
        record = cls()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        durations = data.get("durations")
        if isinstance(durations, dict):
            for name in DEFAULT_DURATIONS:
                minutes = durations.get(name)
                if _is_int(minutes) and minutes >= 1:
                    record.durations[name] = minutes
                elif minutes is not None:
                    logger.warning("Ignoring invalid duration for %s: %r", name, minutes)

        auto_switch = data.get("autoSwitch")
        if isinstance(auto_switch, bool):
            record.auto_switch = auto_switch

        completed = data.get("completedFocus")
        if _is_int(completed) and completed >= 0:
            record.completed_focus = completed

        last_used = data.get("lastUsed")
        if isinstance(last_used, str):
            record.last_used = last_used

        return record


class SettingsStore:
    """Owns the on-disk settings file.

    ``load()`` and ``save()`` never raise: read problems are masked with
    defaults and write problems are reported through the return value.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path) if path is not None else SETTINGS_PATH

    @property
    def path(self) -> Path:
        return self._path

    def ensure_dir(self) -> bool:
        """Create the settings directory.  Returns False if it can't be."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create %s: %s", self._path.parent, exc)
            return False
        return True

    def load(self) -> PersistedSettings:
        """Load settings from disk, falling back to defaults."""
        try:
            if not self._path.exists():
                logger.info("No settings at %s, using defaults", self._path)
                return PersistedSettings()
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return PersistedSettings.from_json(data)
        except (OSError, ValueError, RecursionError) as exc:
            # RecursionError: pathologically nested JSON
            logger.warning("Could not read settings from %s: %s", self._path, exc)
        return PersistedSettings()

    def save(self, record: PersistedSettings) -> bool:
        """Stamp ``last_used`` and write the record to disk.

        The JSON is written to a sibling temp file and renamed into place
        so a crash mid-write never leaves a truncated settings file.
        """
        record.last_used = _utc_timestamp()
        if not self.ensure_dir():
            return False
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_text(
                json.dumps(record.to_json(), indent=2) + "\n",
                encoding="utf-8",
            )
            tmp_path.replace(self._path)
        except OSError as exc:
            logger.error("Could not save settings to %s: %s", self._path, exc)
            return False
        logger.debug("Settings saved to %s", self._path)
        return True
