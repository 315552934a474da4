"""Ancestor resolution for nested CUE instances.

An instance whose parent directories hold a same-named instance inherits
that instance as its ``ancestor`` instead of the owning ``cue.mod`` module.
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from contract.kinds import CUE_INSTANCE, LANGUAGE, MODULE_DIR_NAME
from graph.rule_index import ImportSpec

if TYPE_CHECKING:
    from config.directives import DirectoryConfig
    from contract.labels import Label
    from graph.rule import Rule
    from graph.rule_index import RuleIndex

logger = logging.getLogger(__name__)


def _dir(path: str) -> str:
    return posixpath.dirname(path) or "."


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return posixpath.normpath(joined) if joined else ""


def label_pkg_to_import_path(config: DirectoryConfig, pkg: str) -> str:
    """Import path searched for ancestors of rules in package ``pkg``.

    Returns ``""`` inside a ``cue.mod`` tree, which ends the upward walk.

    Examples:
        >>> from config.directives import DirectoryConfig
        >>> conf = DirectoryConfig(prefix="example.com", prefix_rel="test/gazelle")
        >>> label_pkg_to_import_path(conf, "test/gazelle")
        'example.com/gazelle'
        >>> label_pkg_to_import_path(conf, "test/gazelle/sub/leaf")
        'example.com/sub'
        >>> label_pkg_to_import_path(DirectoryConfig(), "a/b/c")
        'a/b'
    """
    if MODULE_DIR_NAME in pkg:
        return ""

    if pkg == config.prefix_rel:
        return _join(config.prefix, posixpath.basename(pkg))

    # The repository root (empty prefix_rel) contains every package.
    if not config.prefix_rel or pkg.startswith(config.prefix_rel + "/"):
        rel_path = pkg[len(config.prefix_rel) :].lstrip("/")
        return _join(config.prefix, _dir(rel_path))

    return _dir(pkg)


def resolve_ancestor(
    config: DirectoryConfig,
    rule: Rule,
    rule_index: RuleIndex,
    from_label: Label,
) -> bool:
    """Point a ``cue_instance`` rule's ``ancestor`` at the nearest enclosing
    same-named instance.

    Returns:
        True when an ancestor was found and set. Otherwise the rule keeps its
        current ``ancestor`` (the owning module, if any).
    """
    if rule.kind != CUE_INSTANCE:
        return False

    current = from_label
    while True:
        import_path = label_pkg_to_import_path(config, current.pkg)
        if not import_path:
            break

        results = rule_index.find_rules_by_import(
            ImportSpec(lang=LANGUAGE, imp=import_path), LANGUAGE
        )
        for result in results:
            if result.label.name == current.name:
                ancestor = result.label.rel(from_label.repo, "")
                rule.set_attr("ancestor", str(ancestor))
                logger.debug("%s: ancestor %s", from_label, ancestor)
                return True

        if not current.pkg:
            break
        current = current.parent()

    return False


__all__ = ["label_pkg_to_import_path", "resolve_ancestor"]
