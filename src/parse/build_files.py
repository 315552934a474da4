"""Reading existing Starlark build files.

Build files are close enough to Python syntax that the ``ast`` module can
read the top-level rule calls. Only literal attribute values are kept.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from errors import BuildFileError
from graph.rule import Rule

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

_DIRECTIVE = re.compile(r"^\s*#\s*gazelle:(?P<key>[\w.-]+)(?:\s+(?P<value>.*?))?\s*$")


@dataclass
class BuildFile:
    """An existing build file: its package, rules and directives."""

    pkg: str
    path: str = ""
    rules: list[Rule] = field(default_factory=list)
    directives: list[tuple[str, str]] = field(default_factory=list)


def _call_to_rule(call: ast.Call) -> Rule | None:
    if not isinstance(call.func, ast.Name):
        return None
    attrs: dict[str, object] = {}
    name: str | None = None
    for keyword in call.keywords:
        if keyword.arg is None:
            continue
        try:
            value = ast.literal_eval(keyword.value)
        except (TypeError, ValueError):
            # select() and glob() values are not needed here.
            continue
        if keyword.arg == "name":
            name = value if isinstance(value, str) else None
        else:
            attrs[keyword.arg] = value
    if name is None:
        return None
    rule = Rule(call.func.id, name)
    for key, value in attrs.items():
        rule.set_attr(key, value)
    return rule


def parse_build_source(source: str, pkg: str, filename: str = "<build>") -> BuildFile:
    """Parse build file text into rules and directives.

    Raises:
        BuildFileError: If the text is not parseable.
    """
    try:
        tree = ast.parse(source, filename)
    except SyntaxError as exc:
        msg = f"{filename}: {exc}"
        raise BuildFileError(msg) from exc

    build_file = BuildFile(pkg=pkg, path=filename)
    for node in tree.body:
        if isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
            rule = _call_to_rule(node.value)
            if rule is not None:
                build_file.rules.append(rule)

    for line in source.splitlines():
        match = _DIRECTIVE.match(line)
        if match:
            build_file.directives.append(
                (match.group("key"), match.group("value") or "")
            )
    return build_file


def find_build_file(directory: Path, names: Sequence[str]) -> Path | None:
    """Return the first existing build file in ``directory``."""
    for name in names:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_build_file(path: Path, pkg: str) -> BuildFile:
    """Load and parse the build file at ``path``.

    Raises:
        BuildFileError: If the file cannot be read or parsed.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"{path}: {exc}"
        raise BuildFileError(msg) from exc
    return parse_build_source(source, pkg, str(path))


__all__ = ["BuildFile", "find_build_file", "load_build_file", "parse_build_source"]
