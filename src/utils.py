"""Shared utilities for cuebuild."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[\s\-.]+")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_DIGIT_BOUNDARY = re.compile(r"(?<=[A-Za-z])(?=[0-9])|(?<=[0-9])(?=[A-Za-z])")
_UNDERSCORE_RUN = re.compile(r"_+")


def to_snake(value: str) -> str:
    """Convert an identifier-ish string to lower snake case.

    Examples:
        >>> to_snake("myConfig")
        'my_config'
        >>> to_snake("HTTPServer-values")
        'http_server_values'
        >>> to_snake("values2")
        'values_2'
    """
    value = _SEPARATORS.sub("_", value)
    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", value)
    value = _WORD_BOUNDARY.sub(r"\1_\2", value)
    value = _DIGIT_BOUNDARY.sub("_", value)
    return _UNDERSCORE_RUN.sub("_", value).strip("_").lower()


def export_name(filename: str) -> str:
    """Rule name stem for a standalone file.

    Every dotted part except the extension is kept and joined with ``_``.

    Examples:
        >>> export_name("myConfig.values.cue")
        'my_config_values'
        >>> export_name("deploy.cue")
        'deploy'
    """
    parts = filename.split(".")
    stem = "_".join(parts[:-1]) if len(parts) > 1 else filename
    return to_snake(stem)


__all__ = ["export_name", "to_snake"]
