"""Directory scanning for cuebuild."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class DirectoryListing:
    """One directory visited by the walk."""

    path: Path
    rel: str
    regular_files: list[str] = field(default_factory=list)
    subdirs: list[str] = field(default_factory=list)


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path
        for path in gitignore_paths
        if path.is_file() and not path.is_symlink() and _is_within_root(path, root)
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def _should_skip_dir(
    path: Path,
    rel: str,
    *,
    output_dir: str,
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    if path.is_symlink() or path.name.startswith("."):
        return True
    if output_dir and rel.split("/", 1)[0] == output_dir:
        return True
    if gitignore_matches is not None and gitignore_matches(str(path)):
        return True
    if not exclude_patterns:
        return False
    return any(fnmatch(rel, pat) for pat in exclude_patterns)


def _list_directory(
    path: Path,
    rel: str,
    *,
    output_dir: str,
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: list[str] | None,
) -> DirectoryListing:
    listing = DirectoryListing(path=path, rel=rel)
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Cannot list %s: %s", path, exc)
        return listing

    for entry in entries:
        child = path / entry.name
        child_rel = f"{rel}/{entry.name}" if rel else entry.name
        if entry.is_dir(follow_symlinks=False):
            if not _should_skip_dir(
                child,
                child_rel,
                output_dir=output_dir,
                gitignore_matches=gitignore_matches,
                exclude_patterns=exclude_patterns,
            ):
                listing.subdirs.append(entry.name)
        elif entry.is_file(follow_symlinks=False):
            if gitignore_matches is not None and gitignore_matches(str(child)):
                continue
            listing.regular_files.append(entry.name)
    return listing


def walk_directories(
    root: Path,
    *,
    output_dir: str = ".cuebuild",
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[DirectoryListing]:
    """Walk the repository depth-first in post-order, respecting .gitignore.

    Args:
        root: Repository root
        output_dir: Top-level directory name to skip (default ".cuebuild")
        exclude_patterns: Optional fnmatch patterns matched against
            directory paths relative to root; matching directories are
            skipped with their whole subtree
        nested_gitignore: Compose every .gitignore under root

    Yields:
        One DirectoryListing per directory, children (sorted by name)
        before their parent; the root comes last with ``rel == ""``.
    """
    gitignore_matches = _build_gitignore_matcher(
        root,
        nested_gitignore=nested_gitignore,
    )

    def visit(path: Path, rel: str) -> Iterator[DirectoryListing]:
        listing = _list_directory(
            path,
            rel,
            output_dir=output_dir,
            gitignore_matches=gitignore_matches,
            exclude_patterns=exclude_patterns,
        )
        for name in listing.subdirs:
            yield from visit(path / name, f"{rel}/{name}" if rel else name)
        yield listing

    yield from visit(root, "")


__all__ = ["DirectoryListing", "walk_directories"]
