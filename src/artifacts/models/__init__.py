"""Model namespace for cuebuild aggregation state and artifact schemas."""

from artifacts.models.instances import (
    ConsolidatedInstance,
    ExportedFiles,
    ExportedInstance,
    GoldenFile,
    Instance,
    TestDescriptor,
)
from artifacts.models.records import (
    ConflictRecord,
    DirectoryRecord,
    EmptyRecord,
    GenerationSummary,
    ModuleSummary,
    RuleRecord,
)

__all__ = [
    "ConflictRecord",
    "ConsolidatedInstance",
    "DirectoryRecord",
    "EmptyRecord",
    "ExportedFiles",
    "ExportedInstance",
    "GenerationSummary",
    "GoldenFile",
    "Instance",
    "ModuleSummary",
    "RuleRecord",
    "TestDescriptor",
]
