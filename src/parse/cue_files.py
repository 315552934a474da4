"""Package clause and import extraction for CUE source files.

Only the file header is read: optional file attributes, the ``package``
clause and the import declarations that follow it. Everything after the
first other declaration is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from errors import CueParseError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@dataclass(frozen=True)
class SourceFile:
    """Header information of one CUE source file."""

    path: str
    rel: str
    name: str
    package: str
    imports: tuple[str, ...]

    @property
    def is_standalone(self) -> bool:
        return not self.package


_TOKEN = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<comment>//[^\n]*)
    | (?P<attribute>@[A-Za-z_$][\w$]*)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    | (?P<ident>[A-Za-z_$#][\w$#]*)
    | (?P<punct>[(),])
    | (?P<other>.)
    """,
    re.VERBOSE,
)

_QUOTES = frozenset({'"', "'"})


def _attribute_args_end(text: str, start: int) -> int:
    """Index just past the balanced ``( ... )`` opening at ``start``.

    Parentheses inside quoted strings do not count. Returns -1 when the
    argument list is never closed.
    """
    depth = 0
    quote = ""
    pos = start
    while pos < len(text):
        char = text[pos]
        if quote:
            if char == "\\":
                pos += 1
            elif char == quote:
                quote = ""
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos + 1
        pos += 1
    return -1


def _tokens(text: str, filename: str) -> Iterator[tuple[str, str, int]]:
    pos = 0
    while True:
        match = _TOKEN.match(text, pos)
        if match is None:
            return
        kind = match.lastgroup or "other"
        start, pos = match.start(), match.end()
        line = text.count("\n", 0, start) + 1
        if kind == "attribute" and text.startswith("(", pos):
            pos = _attribute_args_end(text, pos)
            if pos < 0:
                msg = f"{filename}:{line}: unterminated attribute {match.group()}"
                raise CueParseError(msg)
        if kind in {"space", "comment"}:
            continue
        yield kind, text[start:pos], line


class _HeaderReader:
    def __init__(self, text: str, filename: str) -> None:
        self._tokens = _tokens(text, filename)
        self._filename = filename
        self._buffer: list[tuple[str, str, int]] = []

    def peek(self, offset: int = 0) -> tuple[str, str, int]:
        while len(self._buffer) <= offset:
            self._buffer.append(next(self._tokens, ("eof", "", 0)))
        return self._buffer[offset]

    def take(self) -> tuple[str, str, int]:
        token = self.peek()
        self._buffer.pop(0)
        return token

    def at_keyword(self, keyword: str) -> bool:
        """True when the next token is ``keyword`` used as a keyword.

        ``package: 1`` and ``import: 2`` are plain fields, not clauses.
        """
        kind, value, _line = self.peek()
        if kind != "ident" or value != keyword:
            return False
        return self.peek(1)[1] not in {":", "?", "!"}

    def error(self, line: int, message: str) -> CueParseError:
        return CueParseError(f"{self._filename}:{line}: {message}")

    def import_spec(self) -> str:
        kind, value, line = self.take()
        if kind == "ident":
            kind, value, line = self.take()
        if kind != "string":
            raise self.error(line, f"expected import path, found {value!r}")
        return value[1:-1]


def parse_cue_source(text: str, filename: str = "<string>") -> tuple[str, list[str]]:
    """Read the package name and import paths from CUE source text.

    Returns:
        ``(package, imports)``; the package is ``""`` for files without a
        package clause. Imports keep declaration order, duplicates included.

    Raises:
        CueParseError: On a malformed package clause or import declaration.
    """
    reader = _HeaderReader(text, filename)
    package = ""
    imports: list[str] = []

    while reader.peek()[0] == "attribute":
        reader.take()

    if reader.at_keyword("package"):
        reader.take()
        kind, value, line = reader.take()
        if kind != "ident":
            raise reader.error(line, f"expected package name, found {value!r}")
        package = value

    while reader.at_keyword("import"):
        reader.take()
        kind, value, line = reader.peek()
        if (kind, value) != ("punct", "("):
            imports.append(reader.import_spec())
            continue
        reader.take()
        while True:
            kind, value, line = reader.peek()
            if kind == "eof":
                raise reader.error(line, "unterminated import group")
            if (kind, value) == ("punct", ")"):
                reader.take()
                break
            if (kind, value) == ("punct", ","):
                reader.take()
                continue
            imports.append(reader.import_spec())

    return package, imports


def parse_cue_file(path: Path, rel: str) -> SourceFile:
    """Parse the header of the CUE file at ``path``.

    Raises:
        CueParseError: If the file cannot be read or its header is malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"{path}: {exc}"
        raise CueParseError(msg) from exc

    package, imports = parse_cue_source(text, str(path))
    return SourceFile(
        path=str(path),
        rel=rel,
        name=path.name,
        package=package,
        imports=tuple(imports),
    )


__all__ = ["SourceFile", "parse_cue_file", "parse_cue_source"]
