"""Helpers for group chat bots: reminder timers, MIDI quizzes, group management and web lookups."""

__version__ = "0.1.0"