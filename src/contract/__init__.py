"""Stable contract surface for cuebuild.

Rule kinds, label synthesis and artifact filenames shared by the generator,
the resolver and anything consuming the written artifacts.
"""

from contract.artifacts import (
    ARTIFACT_FILES,
    ARTIFACT_SCHEMA_VERSION,
    RULES_JSONL,
    SUMMARY_JSON,
    ArtifactFile,
)
from contract.kinds import (
    DEPRECATED_KINDS,
    IMPORTS_KEY,
    KINDS,
    LANGUAGE,
    MANAGED_KINDS,
    KindInfo,
)
from contract.labels import Label, format_target, instance_name

__all__ = [
    "ARTIFACT_FILES",
    "ARTIFACT_SCHEMA_VERSION",
    "DEPRECATED_KINDS",
    "IMPORTS_KEY",
    "KINDS",
    "LANGUAGE",
    "MANAGED_KINDS",
    "RULES_JSONL",
    "SUMMARY_JSON",
    "ArtifactFile",
    "KindInfo",
    "Label",
    "format_target",
    "instance_name",
]
