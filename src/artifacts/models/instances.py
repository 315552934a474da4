"""In-memory descriptors built while aggregating one directory.

These live for a single directory pass; they are turned into rules by the
emitter and then discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass
class Instance:
    """All files of one package within one directory."""

    name: str
    package_name: str
    rel: str
    module: str = ""
    srcs: list[str] = field(default_factory=list)
    imports: set[str] = field(default_factory=set)

    def add_file(self, filename: str, imports: Iterable[str]) -> None:
        if filename not in self.srcs:
            self.srcs.append(filename)
        self.imports.update(imports)

    def sorted_srcs(self) -> list[str]:
        return sorted(self.srcs)


@dataclass
class ExportedInstance:
    """Export of an instance (or of standalone files) to ``output_format``."""

    name: str
    instance: str
    output_format: str
    imports: set[str] = field(default_factory=set)
    src: str = ""


@dataclass
class ConsolidatedInstance:
    """Single-file CUE consolidation of an instance."""

    name: str
    instance: str
    package_name: str
    imports: set[str] = field(default_factory=set)
    src: str = ""


@dataclass
class ExportedFiles:
    """Export of raw source files rather than a compiled instance."""

    name: str
    module: str
    output_format: str
    srcs: list[str] = field(default_factory=list)
    imports: set[str] = field(default_factory=set)

    def add_file(self, filename: str, imports: Iterable[str]) -> None:
        # A standalone file named after a package joins that package's export.
        if filename not in self.srcs:
            self.srcs.append(filename)
        self.imports.update(imports)


@dataclass(frozen=True)
class GoldenFile:
    """Expected export output checked in next to the sources."""

    path: str
    rel: str
    name: str

    @property
    def extension(self) -> str:
        _, dot, ext = self.name.rpartition(".")
        return ext if dot else ""


@dataclass(frozen=True)
class TestDescriptor:
    """Comparison of one exported artifact against one golden file."""

    __test__ = False

    name: str
    golden_file: str
    generated_output_file: str


__all__ = [
    "ConsolidatedInstance",
    "ExportedFiles",
    "ExportedInstance",
    "GoldenFile",
    "Instance",
    "TestDescriptor",
]
