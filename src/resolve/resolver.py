"""Import resolution: import strings to dependency targets.

Resolution tries a fixed chain of strategies per import string and stops at
the first one that matches:

1. the module index (``cue.mod`` packages),
2. the rule index (rules generated elsewhere in this repository),
3. a path heuristic backed by the remote cache.

An import nothing matches is dropped without producing an edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from contract.kinds import (
    CUE_EXPORTED_FILES,
    CUE_INSTANCE,
    IMPORTS_KEY,
    INSTANCE_KINDS,
    LANGUAGE,
)
from contract.labels import Label, format_target, instance_name
from errors import RemoteLookupError
from graph.remote import has_path_prefix, trim_path_prefix
from graph.rule_index import ImportSpec
from resolve.stdlib import is_stdlib

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from graph.remote import RemoteCache
    from graph.rule import Rule
    from graph.rule_index import RuleIndex
    from resolve.module_index import ModuleIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveRequest:
    """One import string of one rule awaiting resolution."""

    imp: str
    from_label: Label
    rule_kind: str = CUE_INSTANCE
    module_hint: str = ""


@dataclass(frozen=True)
class Match:
    """Targets produced by the strategy that recognised an import."""

    strategy: str
    targets: frozenset[str] = field(default_factory=frozenset)


class ResolveStrategy(Protocol):
    name: str

    def resolve(self, request: ResolveRequest) -> Match | None: ...


class ModuleIndexStrategy:
    """Stage 1: packages indexed under registered ``cue.mod`` directories.

    With a module hint only that module is consulted; without one every
    module is scanned in registration order.
    """

    name = "module_index"

    def __init__(self, module_index: ModuleIndex) -> None:
        self._module_index = module_index

    def resolve(self, request: ResolveRequest) -> Match | None:
        if request.module_hint:
            target = self._module_index.lookup(request.imp, request.module_hint)
        else:
            target = self._module_index.lookup_any(request.imp)
        if target is None:
            return None
        return Match(self.name, frozenset({target}))


class RuleIndexStrategy:
    """Stage 2: rules indexed from directories generated during this run."""

    name = "rule_index"

    def __init__(self, rule_index: RuleIndex) -> None:
        self._rule_index = rule_index

    def resolve(self, request: ResolveRequest) -> Match | None:
        results = self._rule_index.find_rules_by_import(
            ImportSpec(lang=LANGUAGE, imp=request.imp), LANGUAGE
        )
        if not results:
            return None
        origin = request.from_label
        targets = frozenset(
            str(result.label.rel(origin.repo, origin.pkg)) for result in results
        )
        return Match(self.name, targets)


class PathHeuristicStrategy:
    """Stage 3: synthesize an instance target from the import path itself.

    ``host/path/pkg`` becomes ``<repo>//path/pkg:pkg_instance`` and
    ``host/path:name`` becomes ``<repo>//path:name_instance``, where the
    repository and the stripped root come from the remote cache.
    """

    name = "path_heuristic"

    def __init__(
        self,
        remote_cache: RemoteCache,
        instance_kinds: Iterable[str] = INSTANCE_KINDS,
    ) -> None:
        self._remote_cache = remote_cache
        self._instance_kinds = frozenset(instance_kinds)

    def resolve(self, request: ResolveRequest) -> Match | None:
        if request.rule_kind not in self._instance_kinds:
            return None

        path_part, sep, package = request.imp.rpartition(":")
        if not sep:
            path_part, package = request.imp, ""

        try:
            prefix, repo = self._remote_cache.root(path_part)
        except RemoteLookupError as exc:
            logger.warning("Error resolving import %r: %s", path_part, exc)
            return None

        under_root = has_path_prefix(path_part, prefix)
        if package:
            remainder = trim_path_prefix(path_part, prefix) if under_root else path_part
            name = instance_name(package)
        else:
            remainder = trim_path_prefix(path_part, prefix) if under_root else ""
            if not remainder:
                return None
            name = instance_name(remainder.rsplit("/", 1)[-1])
        return Match(self.name, frozenset({format_target(repo, remainder, name)}))


class ImportResolver:
    """Runs the strategy chain for every import of a rule."""

    def __init__(self, strategies: Sequence[ResolveStrategy]) -> None:
        self._strategies = tuple(strategies)

    @classmethod
    def default(
        cls,
        module_index: ModuleIndex,
        rule_index: RuleIndex,
        remote_cache: RemoteCache,
    ) -> ImportResolver:
        return cls(
            [
                ModuleIndexStrategy(module_index),
                RuleIndexStrategy(rule_index),
                PathHeuristicStrategy(remote_cache),
            ]
        )

    def resolve(self, request: ResolveRequest) -> frozenset[str]:
        """Targets for one import; empty when every strategy misses."""
        for strategy in self._strategies:
            match = strategy.resolve(request)
            if match is not None:
                logger.debug(
                    "%s: %r resolved by %s to %s",
                    request.from_label,
                    request.imp,
                    match.strategy,
                    sorted(match.targets),
                )
                return match.targets
        logger.debug("%s: no dependency for %r", request.from_label, request.imp)
        return frozenset()

    def resolve_imports(
        self,
        imports: Iterable[str],
        from_label: Label,
        *,
        rule_kind: str = CUE_INSTANCE,
        module_hint: str = "",
    ) -> list[str]:
        """Resolve an import list into a sorted, deduplicated dependency list.

        Standard-library imports are skipped.
        """
        deps: set[str] = set()
        for imp in dict.fromkeys(imports):
            if is_stdlib(imp):
                continue
            deps.update(
                self.resolve(
                    ResolveRequest(
                        imp=imp,
                        from_label=from_label,
                        rule_kind=rule_kind,
                        module_hint=module_hint,
                    )
                )
            )
        return sorted(deps)

    def resolve_rule(self, rule: Rule, from_label: Label) -> None:
        """Set ``deps`` on a generated rule from its private import list.

        The owning module is read from ``ancestor`` on instances and from
        ``module`` on exported-files rules. Rules without an import list are
        left alone.
        """
        imports = rule.private_attr(IMPORTS_KEY)
        if imports is None:
            return
        rule.del_attr("deps")

        module_hint = ""
        if rule.kind == CUE_INSTANCE:
            module_hint = rule.attr_string("ancestor")
        elif rule.kind == CUE_EXPORTED_FILES:
            module_hint = rule.attr_string("module")

        deps = self.resolve_imports(
            imports,
            from_label,
            rule_kind=rule.kind,
            module_hint=module_hint,
        )
        if deps:
            rule.set_attr("deps", deps)


__all__ = [
    "ImportResolver",
    "Match",
    "ModuleIndexStrategy",
    "PathHeuristicStrategy",
    "ResolveRequest",
    "ResolveStrategy",
    "RuleIndexStrategy",
]
