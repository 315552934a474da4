"""Per-directory rule generation."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from artifacts.aggregate import AggregationContext, aggregate, derive_exports
from artifacts.emit import emit_rules
from artifacts.golden import list_golden_files
from artifacts.reconcile import reconcile
from config.directives import configure
from contract.kinds import CUE_EXTENSION, IMPORTS_KEY, MODULE_DIR_NAME
from contract.labels import format_target
from errors import BuildFileError, CueParseError
from parse.build_files import find_build_file, load_build_file
from parse.cue_files import parse_cue_file

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from config.directives import DirectoryConfig
    from config.settings import CueBuildConfig
    from graph.rule import Rule
    from parse.build_files import BuildFile
    from parse.cue_files import SourceFile
    from resolve.module_index import ModuleIndex

logger = logging.getLogger(__name__)


@dataclass
class GenerateArgs:
    """Inputs of one directory pass."""

    config: DirectoryConfig
    directory: Path
    rel: str
    regular_files: list[str] = field(default_factory=list)
    gen_files: list[str] = field(default_factory=list)
    build_file: BuildFile | None = None
    module_index: ModuleIndex | None = None


@dataclass
class GenerateResult:
    """Rules to write, rules to delete and the import list of each written rule."""

    gen: list[Rule] = field(default_factory=list)
    empty: list[Rule] = field(default_factory=list)
    imports: list[Any] = field(default_factory=list)


class DirectoryConfigs:
    """Per-directory configuration computed lazily from the parent chain.

    The walk is post-order, so a directory is usually configured before its
    parent has been visited; parents are configured on demand and cached.
    """

    def __init__(self, root: Path, config: CueBuildConfig) -> None:
        self._root = root
        self._config = config
        self._build_files: dict[str, BuildFile | None] = {}
        self._configs: dict[str, DirectoryConfig] = {}

    def build_file(self, rel: str) -> BuildFile | None:
        if rel not in self._build_files:
            self._build_files[rel] = self._load(rel)
        return self._build_files[rel]

    def _load(self, rel: str) -> BuildFile | None:
        path = find_build_file(self._root / rel, self._config.build_file_names)
        if path is None:
            return None
        try:
            return load_build_file(path, rel)
        except BuildFileError as exc:
            logger.warning("Ignoring unreadable build file: %s", exc)
            return None

    def config(self, rel: str) -> DirectoryConfig:
        cached = self._configs.get(rel)
        if cached is not None:
            return cached

        if rel:
            parent = self.config(posixpath.dirname(rel))
            directives: list[tuple[str, str]] = []
        else:
            parent = None
            directives = list(self._config.directives.items())

        build_file = self.build_file(rel)
        if build_file is not None:
            directives.extend(build_file.directives)

        conf = configure(parent, rel, directives)
        self._configs[rel] = conf
        return conf


def find_nearest_module(directory: Path, rel: str) -> str:
    """Label of the ``cue_module`` rule of the closest enclosing module root.

    Returns ``""`` when no ancestor directory (up to the repository root)
    holds a ``cue.mod`` directory.
    """
    current_dir = directory
    current_rel = rel
    while True:
        if (current_dir / MODULE_DIR_NAME).is_dir():
            module_pkg = posixpath.join(current_rel, MODULE_DIR_NAME)
            return format_target("", module_pkg, MODULE_DIR_NAME)
        if not current_rel:
            return ""
        current_dir = current_dir.parent
        current_rel = posixpath.dirname(current_rel)


def parse_sources(
    directory: Path,
    rel: str,
    filenames: list[str],
    parser: Callable[[Path, str], SourceFile] = parse_cue_file,
) -> list[SourceFile]:
    """Parse every ``.cue`` file of a directory, in sorted filename order.

    Unparsable files are logged and left out.
    """
    sources: list[SourceFile] = []
    for filename in sorted(set(filenames)):
        if not filename.endswith(CUE_EXTENSION):
            continue
        try:
            sources.append(parser(directory / filename, rel))
        except CueParseError as exc:
            logger.warning("Skipping unparsable CUE file: %s", exc)
    return sources


def generate_directory(args: GenerateArgs) -> GenerateResult:
    """Generate the rules of one directory and the stale rules to delete."""
    existing = args.build_file.rules if args.build_file is not None else []
    is_module_dir = args.directory.name == MODULE_DIR_NAME

    sources = parse_sources(
        args.directory, args.rel, args.regular_files + args.gen_files
    )
    if not sources and not is_module_dir:
        return GenerateResult(empty=reconcile(existing, []))

    ctx = AggregationContext(
        config=args.config,
        rel=args.rel,
        module_label=find_nearest_module(args.directory, args.rel),
        is_module_dir=is_module_dir,
    )
    discovered = list_golden_files(
        args.directory, args.rel, args.regular_files, args.config.golden_suffix
    )
    aggregate(ctx, sources, discovered)
    derive_exports(ctx)

    if is_module_dir and args.module_index is not None:
        args.module_index.register_module(
            format_target("", args.rel, MODULE_DIR_NAME), args.directory
        )

    gen = emit_rules(ctx)
    return GenerateResult(
        gen=gen,
        empty=reconcile(existing, gen),
        imports=[rule.private_attr(IMPORTS_KEY) for rule in gen],
    )


__all__ = [
    "DirectoryConfigs",
    "GenerateArgs",
    "GenerateResult",
    "find_nearest_module",
    "generate_directory",
    "parse_sources",
]
