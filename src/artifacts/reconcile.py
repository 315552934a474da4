"""Computation of stale rules to delete from an existing build file."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contract.kinds import DEPRECATED_KINDS, MANAGED_KINDS
from graph.rule import Rule

if TYPE_CHECKING:
    from collections.abc import Iterable


def reconcile(
    existing: Iterable[Rule],
    computed: Iterable[Rule],
    *,
    managed: frozenset[str] = MANAGED_KINDS,
    deprecated: frozenset[str] = DEPRECATED_KINDS,
) -> list[Rule]:
    """Return the existing rules that should be deleted.

    Deprecated kinds are always deleted. Managed kinds are deleted when no
    computed rule has the same kind and name. Anything else is left alone.
    The result follows the order of ``existing``.

    Examples:
        >>> existing = [Rule("x", "A"), Rule("x", "B"), Rule("y", "C")]
        >>> [r.name for r in reconcile(existing, [Rule("x", "A")], managed=frozenset({"x"}))]
        ['B']
        >>> [r.name for r in reconcile(existing, [Rule("x", "A")], deprecated=frozenset({"x"}))]
        ['A', 'B']
    """
    keep = {(rule.kind, rule.name) for rule in computed}
    empty: list[Rule] = []
    for rule in existing:
        if rule.kind in deprecated:
            empty.append(Rule(rule.kind, rule.name))
        elif rule.kind in managed and (rule.kind, rule.name) not in keep:
            empty.append(Rule(rule.kind, rule.name))
    return empty


__all__ = ["reconcile"]
