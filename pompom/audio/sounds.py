"""Completion sound: numpy synthesis + QSoundEffect playback.

The bundled chime is generated programmatically as a WAV file using
sine-wave synthesis with an ADSR envelope, then cached to disk so later
launches skip the synthesis.

Lookup order on completion
--------------------------
1. ``~/.pompom/sound.wav``          user-supplied override
2. ``~/.pompom/sounds/complete.wav`` cached synthesized chime
3. terminal bell (``\\a``)          when neither plays
"""

from __future__ import annotations

import io
import logging
import sys
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import CONFIG_DIR

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = CONFIG_DIR / "sounds"
USER_SOUND_PATH = CONFIG_DIR / "sound.wav"
COMPLETE_SOUND_NAME = "complete.wav"

SAMPLE_RATE = 44100
VOLUME = 0.7  # 0.0-1.0


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


def generate_completion_chime() -> bytes:
    """Interval complete: two-bar arpeggio (C5→E5→G5→C6) with a held top note."""
    notes = [523.25, 659.25, 783.99, 1046.50]
    gap = 0.03
    parts: list[np.ndarray] = []
    for repeat in range(2):
        for i, freq in enumerate(notes):
            last = repeat == 1 and i == len(notes) - 1
            tone = _sine(freq, 0.6 if last else 0.11) * 0.5
            if last:
                overtone = _sine(freq * 2, 0.6) * 0.08
                tone = tone + overtone
                env = _make_envelope(len(tone), attack=80, decay=400, sustain_level=0.5, release=900)
            else:
                env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
            parts.append(tone * env)
            parts.append(np.zeros(int(SAMPLE_RATE * gap)))
        parts.append(np.zeros(int(SAMPLE_RATE * 0.12)))
    return _to_wav_bytes(np.concatenate(parts))


def terminal_bell() -> None:
    sys.stdout.write("\a")
    sys.stdout.flush()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """The engine's completion notification sink.

    Usage::

        sounds = SoundManager(parent=self)
        engine = TimerEngine(notify=sounds)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        user_sound: Path | None = None,
        bell: Callable[[], None] = terminal_bell,
    ) -> None:
        super().__init__(parent)
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._user_sound = user_sound or USER_SOUND_PATH
        self._bell = bell
        self._effect: QSoundEffect | None = None
        self._effect_source: Path | None = None

        self._ensure_wav_file()

    # ── public API ────────────────────────────────────────────────────

    def __call__(self) -> None:
        self.play_completion()

    def resolve_sound(self) -> Path | None:
        """The file to play, or None when only the bell is left."""
        if self._user_sound.exists():
            return self._user_sound
        cached = self._sounds_dir / COMPLETE_SOUND_NAME
        if cached.exists():
            return cached
        return None

    def play_completion(self) -> None:
        """Signal one expired interval.  Never raises."""
        path = self.resolve_sound()
        if path is None:
            logger.info("No completion sound available, ringing bell")
            self._bell()
            return
        try:
            self._play_file(path)
        except Exception:
            logger.exception("Could not play %s", path)
            self._bell()

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_file(self) -> None:
        """Generate the chime into the cache directory if missing."""
        path = self._sounds_dir / COMPLETE_SOUND_NAME
        if path.exists():
            return
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(generate_completion_chime())
        except OSError as exc:
            logger.warning("Could not cache completion chime at %s: %s", path, exc)

    def _play_file(self, path: Path) -> None:
        if self._effect is None or self._effect_source != path:
            effect = QSoundEffect(self)
            effect.setVolume(VOLUME)
            self._effect = effect
            self._effect_source = path
            effect.statusChanged.connect(self._on_effect_status)
            effect.setSource(QUrl.fromLocalFile(str(path)))
        elif self._effect.status() == QSoundEffect.Status.Error:
            logger.warning("Sound effect for %s is unusable, ringing bell", path)
            self._bell()
            return
        self._effect.play()

    def _on_effect_status(self) -> None:
        effect = self._effect
        if effect is not None and effect.status() == QSoundEffect.Status.Error:
            logger.error("Sound effect failed to load %s", self._effect_source)
            self._bell()
