"""Process-wide index of CUE module roots.

Each registered ``cue.mod`` directory has its well-known subdirectories
walked once; every package found there becomes reachable under several
import string shapes so that imports written in any common convention
resolve to the same instance target.

The index is shared by every directory processed during a run and is read
concurrently while dependencies are resolved, so all access goes through a
single reader/writer lock.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from config.settings import DEFAULT_DOMAIN_PREFIXES, ConflictPolicy
from contract.kinds import CUE_EXTENSION
from contract.labels import Label, format_target, instance_name
from errors import CueParseError
from parse.cue_files import SourceFile, parse_cue_file

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

# Subdirectories of a cue.mod directory that hold importable packages.
KNOWN_SUBDIRS = ("gen", "usr", "pkg")
FileParser = Callable[[Path, str], SourceFile]


@dataclass(frozen=True)
class ModuleRecord:
    """A registered module root."""

    label: str
    directory: Path

    def target(self, subdir: str, import_path: str, package: str) -> str:
        """Target of a package found under ``subdir`` of this module."""
        module = Label.parse(self.label)
        path = "/".join(part for part in (module.pkg, subdir, import_path) if part)
        return format_target(module.repo, path, instance_name(package))


@dataclass(frozen=True)
class IndexConflict:
    """Two packages claimed the same import string within one module."""

    module: str
    key: str
    kept: str
    discarded: str


class ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers go first."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def colon_variants(import_path: str, package: str) -> list[str]:
    """``seg1:pkg``, ``seg1/seg2:pkg`` ... up to the full path.

    Examples:
        >>> colon_variants("a/b", "pkg")
        ['a:pkg', 'a/b:pkg']
    """
    parts = import_path.split("/")
    return [f"{'/'.join(parts[: depth + 1])}:{package}" for depth in range(len(parts))]


def domain_variants(
    import_path: str,
    package: str,
    domain_prefixes: Sequence[str],
) -> list[str]:
    """Normalized domain-qualified entries for hosted import paths.

    The host segment is lowercased and empty segments dropped. Paths need at
    least ``host/org/name`` to qualify.
    """
    lowered = import_path.lower()
    for prefix in domain_prefixes:
        if not lowered.startswith(prefix.lower().rstrip("/") + "/"):
            continue
        parts = [part for part in import_path.split("/") if part]
        if len(parts) < 3:
            return []
        parts[0] = parts[0].lower()
        domain_import = "/".join(parts)
        return [domain_import, f"{domain_import}:{package}"]
    return []


def reference_keys(
    import_path: str,
    package: str,
    domain_prefixes: Sequence[str] = DEFAULT_DOMAIN_PREFIXES,
) -> list[str]:
    """All import strings under which a package is indexed, in insert order."""
    keys = [import_path, package]
    keys.extend(colon_variants(import_path, package))
    keys.extend(domain_variants(import_path, package, domain_prefixes))
    return keys


class ModuleIndex:
    """Registry of module roots and their import string to target indexes."""

    def __init__(
        self,
        *,
        conflict_policy: ConflictPolicy = "last",
        domain_prefixes: Iterable[str] = DEFAULT_DOMAIN_PREFIXES,
        subdirs: Sequence[str] = KNOWN_SUBDIRS,
        parser: FileParser = parse_cue_file,
    ) -> None:
        self._lock = ReadWriteLock()
        self._records: dict[str, ModuleRecord] = {}
        self._indexes: dict[str, dict[str, str]] = {}
        self._conflicts: list[IndexConflict] = []
        self._conflict_policy = conflict_policy
        self._domain_prefixes = tuple(domain_prefixes)
        self._subdirs = tuple(subdirs)
        self._parser = parser

    def register_module(self, label: str, directory: Path) -> ModuleRecord:
        """Register a module root, indexing it on first registration.

        Registering an already known label returns the existing record and
        leaves its index untouched.
        """
        with self._lock.write_locked():
            existing = self._records.get(label)
            if existing is not None:
                return existing
            record = ModuleRecord(label=label, directory=Path(directory))
            self._records[label] = record
            self._indexes[label] = {}
            for subdir in self._subdirs:
                subdir_path = record.directory / subdir
                if subdir_path.is_dir():
                    self._index_subdir(record, subdir, subdir_path)
            logger.debug(
                "registered module %s with %d index entries",
                label,
                len(self._indexes[label]),
            )
            return record

    def _index_subdir(self, record: ModuleRecord, subdir: str, root: Path) -> None:
        def on_error(exc: OSError) -> None:
            logger.warning("Error walking %s/%s: %s", record.label, subdir, exc)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames.sort()
            directory = Path(dirpath)
            import_path = directory.relative_to(root).as_posix()
            if import_path == ".":
                # Files directly under the subdirectory have no import path.
                continue
            for filename in sorted(filenames):
                if not filename.endswith(CUE_EXTENSION):
                    continue
                try:
                    source = self._parser(directory / filename, import_path)
                except CueParseError as exc:
                    logger.warning("Skipping unparsable CUE file: %s", exc)
                    continue
                if not source.package:
                    continue
                target = record.target(subdir, import_path, source.package)
                for key in reference_keys(
                    import_path, source.package, self._domain_prefixes
                ):
                    self._insert(record.label, key, target)

    def _insert(self, module: str, key: str, target: str) -> None:
        index = self._indexes[module]
        current = index.get(key)
        if current is None or current == target:
            index[key] = target
            return
        if self._conflict_policy == "first":
            kept, discarded = current, target
        else:
            kept, discarded = target, current
        index[key] = kept
        self._conflicts.append(
            IndexConflict(module=module, key=key, kept=kept, discarded=discarded)
        )
        logger.warning(
            "Module %s: import %r maps to both %s and %s; keeping %s",
            module,
            key,
            current,
            target,
            kept,
        )

    def lookup(self, import_path: str, module_label: str) -> str | None:
        """Look ``import_path`` up in one module's index only."""
        with self._lock.read_locked():
            index = self._indexes.get(module_label)
            if index is None:
                return None
            return index.get(import_path)

    def lookup_any(self, import_path: str) -> str | None:
        """Look ``import_path`` up in every module, in registration order.

        The first module holding the key wins; two modules indexing the same
        import differently are not disambiguated.
        """
        with self._lock.read_locked():
            for index in self._indexes.values():
                target = index.get(import_path)
                if target is not None:
                    return target
        return None

    def is_registered(self, label: str) -> bool:
        with self._lock.read_locked():
            return label in self._records

    def modules(self) -> list[ModuleRecord]:
        with self._lock.read_locked():
            return list(self._records.values())

    def entries(self, label: str) -> dict[str, str]:
        """Copy of one module's index (empty for unknown modules)."""
        with self._lock.read_locked():
            return dict(self._indexes.get(label, {}))

    @property
    def conflicts(self) -> list[IndexConflict]:
        with self._lock.read_locked():
            return list(self._conflicts)


__all__ = [
    "KNOWN_SUBDIRS",
    "IndexConflict",
    "ModuleIndex",
    "ModuleRecord",
    "ReadWriteLock",
    "colon_variants",
    "domain_variants",
    "reference_keys",
]
