"""Completion sound synthesis and playback."""

from .sounds import SoundManager, generate_completion_chime, terminal_bell

__all__ = ["SoundManager", "generate_completion_chime", "terminal_bell"]
