"""Generated artifact contract definitions.

This module defines the stable filenames and formats written by a
``cuebuild generate`` run.
"""

from __future__ import annotations

from dataclasses import dataclass

# Artifact schema version for generated artifacts.
ARTIFACT_SCHEMA_VERSION = 1

# Artifact filename constants (stable contract identifiers).
RULES_JSONL = "rules.jsonl"
SUMMARY_JSON = "summary.json"


@dataclass(frozen=True)
class ArtifactFile:
    """Filename and format of one generated artifact."""

    filename: str
    format: str
    required_fields_note: str


ARTIFACT_FILES: dict[str, ArtifactFile] = {
    "rules": ArtifactFile(
        filename=RULES_JSONL,
        format="jsonl",
        required_fields_note="DirectoryRecord fields, one record per directory.",
    ),
    "summary": ArtifactFile(
        filename=SUMMARY_JSON,
        format="json",
        required_fields_note="GenerationSummary fields.",
    ),
}

__all__ = [
    "ARTIFACT_FILES",
    "ARTIFACT_SCHEMA_VERSION",
    "RULES_JSONL",
    "SUMMARY_JSON",
    "ArtifactFile",
]
