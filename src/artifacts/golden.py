"""Golden file discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.instances import GoldenFile

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


def list_golden_files(
    directory: Path,
    rel: str,
    filenames: Iterable[str],
    golden_suffix: str,
) -> dict[str, GoldenFile]:
    """Find the golden file of a directory.

    Only one golden file per directory is supported: the result is keyed by
    the directory's relative path and the last matching filename (in sorted
    order) wins. Discovery is off when ``golden_suffix`` is empty.
    """
    result: dict[str, GoldenFile] = {}
    if not golden_suffix:
        return result

    for filename in sorted(filenames):
        if not filename.endswith(golden_suffix):
            continue
        result[rel] = GoldenFile(path=str(directory / filename), rel=rel, name=filename)

    return result


__all__ = ["list_golden_files"]
