"""Reverse import index over generated rules."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from contract.labels import Label


@dataclass(frozen=True)
class ImportSpec:
    """An import string under which a rule can be found, tagged by language."""

    lang: str
    imp: str


@dataclass(frozen=True)
class FindResult:
    label: Label


class RuleIndex:
    """Maps ``ImportSpec`` values to the labels of rules that provide them.

    Results come back in indexing order, which follows the directory walk
    and is therefore deterministic.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_spec: dict[ImportSpec, list[Label]] = {}

    def add(self, label: Label, specs: Iterable[ImportSpec]) -> None:
        with self._lock:
            for spec in specs:
                labels = self._by_spec.setdefault(spec, [])
                if label not in labels:
                    labels.append(label)

    def find_rules_by_import(self, spec: ImportSpec, lang: str) -> list[FindResult]:
        """Return every rule indexed under ``spec`` for language ``lang``."""
        if spec.lang != lang:
            return []
        with self._lock:
            labels = list(self._by_spec.get(spec, ()))
        return [FindResult(label=label) for label in labels]

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_spec)


__all__ = ["FindResult", "ImportSpec", "RuleIndex"]
