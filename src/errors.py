"""Exception hierarchy for cuebuild."""

from __future__ import annotations


class CueBuildError(Exception):
    """Base class for errors raised by cuebuild."""


class ConfigError(CueBuildError):
    """Raised when config file exists but cannot be parsed."""


class CueParseError(CueBuildError):
    """Raised when a CUE source file header cannot be read."""


class BuildFileError(CueBuildError):
    """Raised when an existing build file cannot be parsed."""


class RemoteLookupError(CueBuildError):
    """Raised when no repository root is known for an import path."""


__all__ = [
    "BuildFileError",
    "ConfigError",
    "CueBuildError",
    "CueParseError",
    "RemoteLookupError",
]
