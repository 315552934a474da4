"""Per-directory configuration driven by build file directives."""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "json"

_FALSE_VALUES = frozenset({"false", "off", "no", "0"})


class DirectoryConfig(BaseModel):
    """Configuration in effect for one directory.

    Each directory starts from a copy of its parent's configuration and then
    applies its own directives.
    """

    prefix: str = Field(default="", description="Base import path")
    prefix_rel: str = Field(
        default="",
        description="Directory (relative to the repository root) owning prefix",
    )
    golden_suffix: str = Field(
        default="",
        description="Filename suffix that marks golden files",
    )
    golden_filename: str = Field(
        default="",
        description="Exact golden filename used by generated tests",
    )
    gen_exported_instance: bool = Field(
        default=False,
        description="Generate cue_exported_instance rules for instances",
    )
    gen_exported_files: bool = Field(
        default=False,
        description="Generate cue_exported_files rules",
    )
    output_format: str = Field(
        default=DEFAULT_OUTPUT_FORMAT,
        description="Export output format (json, yaml, text)",
    )


def check_prefix(prefix: str) -> str | None:
    """Return an error message when ``prefix`` cannot be used as a prefix.

    Absolute and local (``./``, ``../``) import paths are forbidden. The empty
    string is allowed.
    """
    if prefix.startswith("/") or _is_local_import(prefix):
        return f"invalid prefix: {prefix!r}"
    return None


def _is_local_import(path: str) -> bool:
    return path in {".", ".."} or path.startswith(("./", "../"))


def _parse_flag(value: str) -> bool:
    return value.strip().lower() not in _FALSE_VALUES


def configure(
    parent: DirectoryConfig | None,
    rel: str,
    directives: Iterable[tuple[str, str]] = (),
) -> DirectoryConfig:
    """Derive the configuration of directory ``rel`` from its parent.

    Args:
        parent: Configuration of the parent directory (None at the root).
        rel: Slash-separated path from the repository root ("" for the root).
        directives: ``(key, value)`` pairs in file order.

    Returns:
        A new DirectoryConfig; ``parent`` is never mutated.
    """
    conf = parent.model_copy() if parent is not None else DirectoryConfig()

    # Vendored trees restart import paths the way Go vendoring does.
    if rel and posixpath.basename(rel) == "vendor":
        conf.prefix = ""
        conf.prefix_rel = rel

    for key, value in directives:
        if key == "prefix":
            error = check_prefix(value)
            if error is not None:
                logger.warning("%s: %s", rel or ".", error)
                continue
            conf.prefix = value
            conf.prefix_rel = rel
        elif key == "cue_test_golden_suffix":
            conf.golden_suffix = value
            conf.gen_exported_instance = True
        elif key == "cue_test_golden_filename":
            conf.golden_filename = value
            conf.golden_suffix = posixpath.splitext(value)[1].lstrip(".")
            conf.gen_exported_instance = True
        elif key == "cue_gen_exported_instance":
            conf.gen_exported_instance = _parse_flag(value)
        elif key == "cue_gen_exported_files":
            conf.gen_exported_files = _parse_flag(value)
        elif key == "cue_output_format":
            conf.output_format = value.strip() or DEFAULT_OUTPUT_FORMAT

    return conf


def compute_import_path(config: DirectoryConfig, rel: str) -> str:
    """Import path of directory ``rel`` under the configured prefix.

    Examples:
        >>> conf = DirectoryConfig(prefix="example.com/x", prefix_rel="src")
        >>> compute_import_path(conf, "src")
        'example.com/x'
        >>> compute_import_path(conf, "src/a/b")
        'example.com/x/a/b'
    """
    if rel == config.prefix_rel:
        return config.prefix
    if config.prefix_rel and not rel.startswith(config.prefix_rel + "/"):
        return rel
    suffix = rel[len(config.prefix_rel) :].lstrip("/") if config.prefix_rel else rel
    if not config.prefix:
        return suffix
    return posixpath.join(config.prefix, suffix)


__all__ = [
    "DEFAULT_OUTPUT_FORMAT",
    "DirectoryConfig",
    "check_prefix",
    "compute_import_path",
    "configure",
]
