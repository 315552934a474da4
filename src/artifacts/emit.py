"""Conversion of aggregated descriptors into build rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contract.kinds import (
    CUE_CONSOLIDATED_INSTANCE,
    CUE_CONSOLIDATED_STANDALONE_FILES,
    CUE_EXPORTED_FILES,
    CUE_EXPORTED_INSTANCE,
    CUE_EXPORTED_STANDALONE_FILES,
    CUE_GEN_GOLDEN,
    CUE_INSTANCE,
    CUE_MODULE,
    CUE_TEST,
    IMPORTS_KEY,
    MODULE_RULE_NAME,
)
from graph.rule import Rule

if TYPE_CHECKING:
    from artifacts.aggregate import AggregationContext
    from artifacts.models.instances import (
        ConsolidatedInstance,
        ExportedFiles,
        ExportedInstance,
        GoldenFile,
        Instance,
        TestDescriptor,
    )

PUBLIC_VISIBILITY = ["//visibility:public"]
CONSOLIDATED_OUTPUT_FORMAT = "cue"
GOLDEN_RULE_PREFIX = "golden_"


def instance_rule(instance: Instance) -> Rule:
    rule = Rule(CUE_INSTANCE, instance.name)
    rule.set_attr("srcs", instance.sorted_srcs())
    rule.set_attr("package_name", instance.package_name)
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    # Replaced by the nearest enclosing instance during resolution.
    if instance.module:
        rule.set_attr("ancestor", instance.module)
    rule.set_private_attr(IMPORTS_KEY, sorted(instance.imports))
    return rule


def exported_instance_rule(exported: ExportedInstance) -> Rule:
    if exported.instance:
        rule = Rule(CUE_EXPORTED_INSTANCE, exported.name)
        rule.set_attr("instance", ":" + exported.instance)
    else:
        rule = Rule(CUE_EXPORTED_STANDALONE_FILES, exported.name)
        rule.set_attr("srcs", [exported.src])
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    if exported.output_format:
        rule.set_attr("output_format", exported.output_format)
    return rule


def exported_files_rule(exported: ExportedFiles) -> Rule:
    rule = Rule(CUE_EXPORTED_FILES, exported.name)
    rule.set_attr("module", exported.module)
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    rule.set_attr("srcs", sorted(exported.srcs))
    if exported.output_format:
        rule.set_attr("output_format", exported.output_format)
    rule.set_private_attr(IMPORTS_KEY, sorted(exported.imports))
    return rule


def consolidated_rule(consolidated: ConsolidatedInstance) -> Rule:
    if consolidated.instance:
        rule = Rule(CUE_CONSOLIDATED_INSTANCE, consolidated.name)
        rule.set_attr("instance", ":" + consolidated.instance)
    else:
        rule = Rule(CUE_CONSOLIDATED_STANDALONE_FILES, consolidated.name)
        rule.set_attr("srcs", [consolidated.src])
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    rule.set_attr("output_format", CONSOLIDATED_OUTPUT_FORMAT)
    return rule


def cue_test_rule(test: TestDescriptor) -> Rule:
    rule = Rule(CUE_TEST, test.name)
    rule.set_attr("generated_output_file", test.generated_output_file)
    rule.set_attr("golden_file", test.golden_file)
    return rule


def golden_rule(golden: GoldenFile) -> Rule:
    rule = Rule(CUE_GEN_GOLDEN, GOLDEN_RULE_PREFIX + golden.name)
    rule.set_attr("srcs", [golden.name])
    return rule


def module_rule() -> Rule:
    rule = Rule(CUE_MODULE, MODULE_RULE_NAME)
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    return rule


def emit_rules(ctx: AggregationContext) -> list[Rule]:
    """Return the directory's rules.

    Order is fixed: the module rule, then instances, exported instances,
    exported files, consolidated instances, tests and golden files, each
    group sorted by name.
    """
    rules: list[Rule] = []
    if ctx.is_module_dir:
        rules.append(module_rule())

    rules.extend(instance_rule(ctx.instances[k]) for k in sorted(ctx.instances))
    rules.extend(
        exported_instance_rule(ctx.exported_instances[k])
        for k in sorted(ctx.exported_instances)
    )
    rules.extend(
        exported_files_rule(ctx.exported_files[k]) for k in sorted(ctx.exported_files)
    )
    rules.extend(
        consolidated_rule(ctx.consolidated_instances[k])
        for k in sorted(ctx.consolidated_instances)
    )
    rules.extend(cue_test_rule(ctx.tests[k]) for k in sorted(ctx.tests))
    rules.extend(golden_rule(ctx.golden_files[k]) for k in sorted(ctx.golden_files))
    return rules


__all__ = [
    "emit_rules",
    "golden_rule",
    "instance_rule",
    "module_rule",
]
