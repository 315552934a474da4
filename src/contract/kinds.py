"""Rule kinds generated and managed by cuebuild."""

from __future__ import annotations

from dataclasses import dataclass, field

LANGUAGE = "cue"

CUE_INSTANCE = "cue_instance"
CUE_EXPORTED_INSTANCE = "cue_exported_instance"
CUE_EXPORTED_STANDALONE_FILES = "cue_exported_standalone_files"
CUE_CONSOLIDATED_INSTANCE = "cue_consolidated_instance"
CUE_CONSOLIDATED_STANDALONE_FILES = "cue_consolidated_standalone_files"
CUE_EXPORTED_FILES = "cue_exported_files"
CUE_MODULE = "cue_module"
CUE_TEST = "cue_test"
CUE_GEN_GOLDEN = "cue_gen_golden"

# Superseded by cue_instance and friends; always scheduled for deletion.
CUE_LIBRARY = "cue_library"
CUE_EXPORT = "cue_export"

MODULE_DIR_NAME = "cue.mod"
MODULE_RULE_NAME = "cue.mod"

CUE_EXTENSION = ".cue"

# Name of the private rule attribute holding the unresolved import list.
IMPORTS_KEY = "_gazelle_imports"

RULES_CUE_BZL = "@rules_cue//cue:cue.bzl"


@dataclass(frozen=True)
class KindInfo:
    """How the host build graph matches and merges rules of one kind."""

    match_any: bool = False
    match_attrs: tuple[str, ...] = ()
    non_empty_attrs: frozenset[str] = field(default_factory=frozenset)
    mergeable_attrs: frozenset[str] = field(default_factory=frozenset)
    resolve_attrs: frozenset[str] = field(default_factory=frozenset)


KINDS: dict[str, KindInfo] = {
    CUE_INSTANCE: KindInfo(
        non_empty_attrs=frozenset({"srcs"}),
        mergeable_attrs=frozenset({"srcs", "package_name", "ancestor"}),
        resolve_attrs=frozenset({"deps", "ancestor"}),
    ),
    CUE_EXPORTED_INSTANCE: KindInfo(
        non_empty_attrs=frozenset({"instance"}),
        mergeable_attrs=frozenset({"instance", "output_format"}),
    ),
    CUE_EXPORTED_STANDALONE_FILES: KindInfo(
        non_empty_attrs=frozenset({"srcs"}),
        mergeable_attrs=frozenset({"srcs", "output_format"}),
    ),
    CUE_CONSOLIDATED_INSTANCE: KindInfo(
        non_empty_attrs=frozenset({"instance"}),
        mergeable_attrs=frozenset({"instance", "output_format"}),
    ),
    CUE_CONSOLIDATED_STANDALONE_FILES: KindInfo(
        non_empty_attrs=frozenset({"srcs"}),
        mergeable_attrs=frozenset({"srcs", "output_format"}),
    ),
    CUE_EXPORTED_FILES: KindInfo(
        non_empty_attrs=frozenset({"srcs"}),
        mergeable_attrs=frozenset({"srcs", "module", "output_format"}),
        resolve_attrs=frozenset({"deps"}),
    ),
    CUE_MODULE: KindInfo(match_any=True),
    CUE_TEST: KindInfo(
        mergeable_attrs=frozenset({"golden_file", "generated_output_file"}),
    ),
    CUE_GEN_GOLDEN: KindInfo(
        non_empty_attrs=frozenset({"srcs"}),
        mergeable_attrs=frozenset({"srcs"}),
    ),
    CUE_LIBRARY: KindInfo(
        match_attrs=("importpath",),
        non_empty_attrs=frozenset({"deps", "srcs"}),
        mergeable_attrs=frozenset({"srcs", "importpath"}),
        resolve_attrs=frozenset({"deps"}),
    ),
    CUE_EXPORT: KindInfo(
        match_any=True,
        non_empty_attrs=frozenset({"deps", "src"}),
        mergeable_attrs=frozenset({"escape", "output_format", "src"}),
        resolve_attrs=frozenset({"deps"}),
    ),
}

DEPRECATED_KINDS = frozenset({CUE_LIBRARY, CUE_EXPORT})

# Kinds whose stale rules are deleted on regeneration.
MANAGED_KINDS = frozenset(KINDS) - DEPRECATED_KINDS

# Kinds that take instance-shaped dependencies from the path heuristic.
INSTANCE_KINDS = frozenset(
    {
        CUE_EXPORTED_FILES,
        CUE_INSTANCE,
        CUE_EXPORTED_INSTANCE,
        CUE_EXPORTED_STANDALONE_FILES,
        CUE_CONSOLIDATED_INSTANCE,
    }
)

LOADS: dict[str, tuple[str, ...]] = {
    RULES_CUE_BZL: tuple(sorted(MANAGED_KINDS)),
}


__all__ = [
    "CUE_CONSOLIDATED_INSTANCE",
    "CUE_CONSOLIDATED_STANDALONE_FILES",
    "CUE_EXPORT",
    "CUE_EXPORTED_FILES",
    "CUE_EXPORTED_INSTANCE",
    "CUE_EXPORTED_STANDALONE_FILES",
    "CUE_EXTENSION",
    "CUE_GEN_GOLDEN",
    "CUE_INSTANCE",
    "CUE_LIBRARY",
    "CUE_MODULE",
    "CUE_TEST",
    "DEPRECATED_KINDS",
    "IMPORTS_KEY",
    "INSTANCE_KINDS",
    "KINDS",
    "KindInfo",
    "LANGUAGE",
    "LOADS",
    "MANAGED_KINDS",
    "MODULE_DIR_NAME",
    "MODULE_RULE_NAME",
    "RULES_CUE_BZL",
]
