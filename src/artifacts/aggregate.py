"""Aggregation of a directory's CUE files into instances and derived artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from artifacts.models.instances import (
    ConsolidatedInstance,
    ExportedFiles,
    ExportedInstance,
    GoldenFile,
    Instance,
    TestDescriptor,
)
from contract.labels import instance_name
from utils import export_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from config.directives import DirectoryConfig
    from parse.cue_files import SourceFile

logger = logging.getLogger(__name__)


@dataclass
class AggregationContext:
    """State of one directory pass, keyed by generated rule name."""

    config: DirectoryConfig
    rel: str = ""
    module_label: str = ""
    is_module_dir: bool = False
    instances: dict[str, Instance] = field(default_factory=dict)
    exported_instances: dict[str, ExportedInstance] = field(default_factory=dict)
    exported_files: dict[str, ExportedFiles] = field(default_factory=dict)
    consolidated_instances: dict[str, ConsolidatedInstance] = field(
        default_factory=dict
    )
    golden_files: dict[str, GoldenFile] = field(default_factory=dict)
    tests: dict[str, TestDescriptor] = field(default_factory=dict)
    gen_consolidated_instances: bool = True

    @property
    def gen_exported_instances(self) -> bool:
        return self.config.gen_exported_instance

    @property
    def gen_exported_files(self) -> bool:
        return self.config.gen_exported_files


def process_standalone_file(
    ctx: AggregationContext,
    filename: str,
    imports: Iterable[str],
) -> None:
    """Register a file without a package clause as its own export unit."""
    if not ctx.gen_exported_files:
        return
    name = f"{export_name(filename)}_exported_files"
    exported = ctx.exported_files.get(name)
    if exported is None:
        exported = ExportedFiles(
            name=name,
            module=ctx.module_label,
            output_format=ctx.config.output_format,
        )
        ctx.exported_files[name] = exported
    exported.add_file(filename, imports)


def process_package_file(
    ctx: AggregationContext,
    rel: str,
    filename: str,
    package: str,
    imports: Iterable[str],
) -> Instance:
    """Merge a package file into its instance and the derived artifacts."""
    imports = tuple(imports)
    name = instance_name(package)
    instance = ctx.instances.get(name)
    if instance is None:
        instance = Instance(
            name=name,
            package_name=package,
            rel=rel,
            module=ctx.module_label,
        )
        ctx.instances[name] = instance
    instance.add_file(filename, imports)

    if ctx.gen_exported_files:
        exported_name = f"{package}_exported_files"
        exported = ctx.exported_files.get(exported_name)
        if exported is None:
            exported = ExportedFiles(
                name=exported_name,
                module=ctx.module_label,
                output_format=ctx.config.output_format,
            )
            ctx.exported_files[exported_name] = exported
        exported.add_file(filename, imports)

    if ctx.gen_consolidated_instances:
        consolidated_name = f"{package}_def"
        consolidated = ctx.consolidated_instances.get(consolidated_name)
        if consolidated is None:
            consolidated = ConsolidatedInstance(
                name=consolidated_name,
                instance=name,
                package_name=package,
            )
            ctx.consolidated_instances[consolidated_name] = consolidated
        consolidated.imports.update(imports)

    return instance


def aggregate(
    ctx: AggregationContext,
    sources: Iterable[SourceFile],
    discovered_golden: Mapping[str, GoldenFile] | None = None,
) -> None:
    """Classify and merge every source file of the directory.

    ``discovered_golden`` is keyed by directory as returned by
    ``list_golden_files``; a match is attached to the context under its
    filename once a source file of that directory is seen.
    """
    discovered_golden = discovered_golden or {}
    for source in sources:
        if ctx.config.golden_suffix:
            golden = discovered_golden.get(source.rel)
            if golden is not None:
                ctx.golden_files[golden.name] = golden
        if source.is_standalone:
            process_standalone_file(ctx, source.name, source.imports)
        else:
            process_package_file(
                ctx, source.rel, source.name, source.package, source.imports
            )


def _golden_filename(ctx: AggregationContext) -> str:
    if ctx.config.golden_filename:
        return ctx.config.golden_filename
    names = sorted(ctx.golden_files)
    return names[0] if names else ""


def add_test(ctx: AggregationContext, instance: str, exported: str) -> None:
    """Pair the directory's golden file with an exported instance.

    Nothing is added when no golden file is known or when its extension does
    not match the configured output format.
    """
    name = f"{instance}_cue"
    if name in ctx.tests:
        return
    golden = _golden_filename(ctx)
    if not golden:
        return
    output_format = ctx.config.output_format
    if not golden.endswith("." + output_format):
        logger.debug(
            "golden file %s does not match output format %s", golden, output_format
        )
        return
    ctx.tests[name] = TestDescriptor(
        name=name,
        golden_file=":" + golden,
        generated_output_file=f":{exported}.{output_format}",
    )


def derive_exports(ctx: AggregationContext) -> None:
    """Create exported instances and their tests once all files are merged."""
    if not ctx.gen_exported_instances or not ctx.golden_files:
        return
    discovery = bool(ctx.config.golden_suffix or ctx.config.golden_filename)
    for name in sorted(ctx.instances):
        instance = ctx.instances[name]
        exported_name = f"{name}_exported"
        if exported_name in ctx.exported_instances:
            continue
        ctx.exported_instances[exported_name] = ExportedInstance(
            name=exported_name,
            instance=name,
            output_format=ctx.config.output_format,
            imports=set(instance.imports),
        )
        if discovery:
            add_test(ctx, name, exported_name)


__all__ = [
    "AggregationContext",
    "add_test",
    "aggregate",
    "derive_exports",
    "process_package_file",
    "process_standalone_file",
]
