"""Custom exception hierarchy for guessmap."""

from __future__ import annotations


class GuessMapError(Exception):
    """Base class for all custom errors raised by guessmap."""


class EngineStateError(GuessMapError):
    """Raised when an engine operation is invoked outside its lifecycle."""


class ConfigurationError(GuessMapError):
    """Base class for host configuration problems."""


class OptionsParseError(ConfigurationError):
    """Raised when a serialized option payload cannot be decoded."""


class TileLoadingError(GuessMapError):
    """Raised when a downloaded tile image cannot be decoded."""


__all__ = [
    "ConfigurationError",
    "EngineStateError",
    "GuessMapError",
    "OptionsParseError",
    "TileLoadingError",
]
