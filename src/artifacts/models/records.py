"""Schemas of the records written to the generated artifacts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION


class RuleRecord(BaseModel):
    """A generated rule."""

    kind: str
    name: str
    attrs: dict[str, Any] = Field(default_factory=dict)


class EmptyRecord(BaseModel):
    """A previously declared rule scheduled for deletion."""

    kind: str
    name: str


class DirectoryRecord(BaseModel):
    """Schema for rules.jsonl records: the outcome of one directory pass."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    rel: str
    gen: list[RuleRecord] = Field(default_factory=list)
    empty: list[EmptyRecord] = Field(default_factory=list)


class ModuleSummary(BaseModel):
    label: str
    entry_count: int


class ConflictRecord(BaseModel):
    module: str
    key: str
    kept: str
    discarded: str


class GenerationSummary(BaseModel):
    """Schema for summary.json."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    directory_count: int
    rule_count: int
    empty_count: int
    dependency_count: int
    modules: list[ModuleSummary] = Field(default_factory=list)
    conflicts: list[ConflictRecord] = Field(default_factory=list)


__all__ = [
    "ConflictRecord",
    "DirectoryRecord",
    "EmptyRecord",
    "GenerationSummary",
    "ModuleSummary",
    "RuleRecord",
]
