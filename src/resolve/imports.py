"""Import specs under which generated rules become findable."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from contract.kinds import CUE_INSTANCE, CUE_MODULE, LANGUAGE
from contract.labels import format_target
from graph.rule_index import ImportSpec

if TYPE_CHECKING:
    from pathlib import Path

    from config.directives import DirectoryConfig
    from graph.rule import Rule
    from resolve.module_index import ModuleIndex


def instance_import_path(config: DirectoryConfig, pkg: str, package_name: str) -> str:
    """Import path of the instance for ``package_name`` in package ``pkg``.

    The package name is appended after a colon unless it matches the last
    path segment.

    Examples:
        >>> from config.directives import DirectoryConfig
        >>> instance_import_path(DirectoryConfig(), "a/p", "p")
        'a/p'
        >>> instance_import_path(DirectoryConfig(), "a/p", "q")
        'a/p:q'
        >>> conf = DirectoryConfig(prefix="example.com", prefix_rel="src")
        >>> instance_import_path(conf, "src/a/p", "p")
        'example.com/a/p'
    """
    relative_path = pkg
    if config.prefix:
        if pkg.startswith(config.prefix_rel):
            relative_path = pkg[len(config.prefix_rel) :].lstrip("/")
        base_path = posixpath.join(config.prefix, relative_path).rstrip("/")
    else:
        base_path = pkg

    if package_name == posixpath.basename(relative_path):
        return base_path
    return f"{base_path}:{package_name}"


def import_specs(
    config: DirectoryConfig,
    rule: Rule,
    pkg: str,
    *,
    repo_root: Path,
    module_index: ModuleIndex,
) -> list[ImportSpec] | None:
    """Return the specs to index ``rule`` under, or None to not index it.

    ``cue_module`` rules are registered with the module index here so that
    modules found by indexing existing build files are known as well.
    """
    if rule.kind == CUE_INSTANCE:
        package_name = rule.attr_string("package_name")
        if not package_name:
            return None
        import_path = instance_import_path(config, pkg, package_name)
        specs = [ImportSpec(lang=LANGUAGE, imp=import_path)]
        if ":" in import_path:
            specs.append(ImportSpec(lang=LANGUAGE, imp=import_path.rsplit(":", 1)[0]))
        return specs

    if rule.kind == CUE_MODULE and pkg:
        module_index.register_module(format_target("", pkg, rule.name), repo_root / pkg)

    return None


__all__ = ["import_specs", "instance_import_path"]
