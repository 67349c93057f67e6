"""Terminal presentation and key dispatch."""

from .commands import Command, KEY_BINDINGS, command_for_key, dispatch

__all__ = ["Command", "KEY_BINDINGS", "command_for_key", "dispatch"]
