"""Shared pytest fixtures for PomPom tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from pompom.settings import PersistedSettings
from pompom.timer.engine import TimerEngine

from helpers import RecordingStore


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.pompom."""
    home = tmp_path / "pompom-home"
    monkeypatch.setattr("pompom.settings.CONFIG_DIR", home)
    monkeypatch.setattr("pompom.settings.SETTINGS_PATH", home / "settings.json")
    monkeypatch.setattr("pompom.audio.sounds.SOUNDS_DIR", home / "sounds")
    monkeypatch.setattr("pompom.audio.sounds.USER_SOUND_PATH", home / "sound.wav")
    yield home


@pytest.fixture
def store(tmp_path):
    """A real on-disk store that also counts its saves."""
    return RecordingStore(tmp_path / "settings.json")


@pytest.fixture
def engine(qapp, store):
    """Fresh TimerEngine with default settings, auto-switch OFF."""
    eng = TimerEngine(
        parent=None,
        settings=PersistedSettings(auto_switch=False),
        store=store,
    )
    yield eng
    eng.shutdown()


@pytest.fixture
def engine_auto(qapp, store):
    """Fresh TimerEngine with auto-switch ON."""
    eng = TimerEngine(parent=None, settings=PersistedSettings(), store=store)
    yield eng
    eng.shutdown()


@pytest.fixture
def engine_no_store(qapp):
    """Fresh TimerEngine with no persistence (pure state-machine tests)."""
    eng = TimerEngine(parent=None, settings=PersistedSettings(auto_switch=False))
    yield eng
    eng.shutdown()
