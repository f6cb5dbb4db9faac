"""Exceptions raised by the scoring engine.

Only configuration problems and quiz-flow misuse raise.  Data-quality
conditions (missing weight rows, neutral or empty answers) are reported as
per-item diagnostics instead, and the type resolver never raises.
"""
from __future__ import annotations


class ConfigError(RuntimeError):
    """Scoring cannot proceed with the current configuration."""


class UnknownModeError(ConfigError):
    def __init__(self, mode: str):
        super().__init__(f"Unknown mode: {mode}")
        self.mode = mode


class PayloadUnavailableError(ConfigError):
    def __init__(self, reason: str = "weights payload not available"):
        super().__init__(reason)


class ModeNotInitializedError(ConfigError):
    def __init__(self, mode: str):
        super().__init__(f"Mode {mode!r} not initialized; call init() first")
        self.mode = mode


class SessionError(RuntimeError):
    """Quiz session used out of order (finish before complete, bad branch...)."""


__all__ = [
    "ConfigError",
    "UnknownModeError",
    "PayloadUnavailableError",
    "ModeNotInitializedError",
    "SessionError",
]
