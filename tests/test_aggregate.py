from __future__ import annotations

import itertools

import pytest

from artifacts.aggregate import AggregationContext, aggregate, derive_exports
from artifacts.emit import emit_rules
from artifacts.models.instances import GoldenFile
from config.directives import DirectoryConfig
from contract.kinds import (
    CUE_CONSOLIDATED_INSTANCE,
    CUE_EXPORTED_FILES,
    CUE_INSTANCE,
    IMPORTS_KEY,
)
from parse.cue_files import SourceFile

MODULE = "//cue.mod:cue.mod"


def _source(name: str, package: str, *imports: str, rel: str = "x") -> SourceFile:
    return SourceFile(
        path=f"/repo/{rel}/{name}",
        rel=rel,
        name=name,
        package=package,
        imports=imports,
    )


def _ctx(**overrides: object) -> AggregationContext:
    return AggregationContext(
        config=DirectoryConfig(**overrides),
        rel="x",
        module_label=MODULE,
    )


def _snapshot(ctx: AggregationContext) -> list[tuple[object, ...]]:
    return [
        (rule.kind, rule.name, rule.to_dict()["attrs"], rule.private_attr(IMPORTS_KEY))
        for rule in emit_rules(ctx)
    ]


def test_files_of_one_package_merge_into_one_instance() -> None:
    ctx = _ctx()
    aggregate(
        ctx,
        [
            _source("a.cue", "x", "strings"),
            _source("b.cue", "x", "list", "strings"),
        ],
    )

    instance = ctx.instances["x_instance"]
    assert instance.sorted_srcs() == ["a.cue", "b.cue"]
    assert instance.imports == {"list", "strings"}
    assert instance.module == MODULE
    assert set(ctx.consolidated_instances) == {"x_def"}
    assert ctx.exported_instances == {}
    assert ctx.exported_files == {}


def test_output_does_not_depend_on_file_order() -> None:
    sources = [
        _source("a.cue", "x", "strings"),
        _source("b.cue", "x", "list"),
        _source("c.cue", "y", "encoding/json"),
        _source("d.cue", "", "strings"),
    ]
    snapshots = []
    for order in itertools.permutations(sources):
        ctx = _ctx(gen_exported_files=True)
        aggregate(ctx, order)
        derive_exports(ctx)
        snapshots.append(_snapshot(ctx))

    assert all(snapshot == snapshots[0] for snapshot in snapshots)


def test_two_packages_in_one_directory() -> None:
    ctx = _ctx()
    aggregate(ctx, [_source("a.cue", "x"), _source("b.cue", "y")])

    rules = emit_rules(ctx)

    assert [(rule.kind, rule.name) for rule in rules] == [
        (CUE_INSTANCE, "x_instance"),
        (CUE_INSTANCE, "y_instance"),
        (CUE_CONSOLIDATED_INSTANCE, "x_def"),
        (CUE_CONSOLIDATED_INSTANCE, "y_def"),
    ]


def test_standalone_files_export_only_when_enabled() -> None:
    ctx = _ctx()
    aggregate(ctx, [_source("deploy.cue", "")])
    assert emit_rules(ctx) == []

    ctx = _ctx(gen_exported_files=True)
    aggregate(ctx, [_source("deploy.cue", "", "strings")])
    rules = emit_rules(ctx)

    assert [(rule.kind, rule.name) for rule in rules] == [
        (CUE_EXPORTED_FILES, "deploy_exported_files"),
    ]
    assert rules[0].attr("srcs") == ["deploy.cue"]
    assert rules[0].attr("module") == MODULE
    assert rules[0].attr("output_format") == "json"
    assert rules[0].private_attr(IMPORTS_KEY) == ["strings"]


def test_standalone_export_names_are_snake_case() -> None:
    ctx = _ctx(gen_exported_files=True)
    aggregate(
        ctx,
        [
            _source("my-service.cue", ""),
            _source("cluster.prod.cue", ""),
        ],
    )

    assert sorted(ctx.exported_files) == [
        "cluster_prod_exported_files",
        "my_service_exported_files",
    ]


def test_package_exported_files_follow_instance_sources() -> None:
    ctx = _ctx(gen_exported_files=True)
    aggregate(ctx, [_source("b.cue", "x", "list"), _source("a.cue", "x", "strings")])

    exported = ctx.exported_files["x_exported_files"]
    assert sorted(exported.srcs) == ["a.cue", "b.cue"]
    assert exported.imports == {"list", "strings"}


def test_consolidated_instances_can_be_switched_off() -> None:
    ctx = _ctx()
    ctx.gen_consolidated_instances = False
    aggregate(ctx, [_source("a.cue", "x")])

    assert ctx.consolidated_instances == {}


def test_exported_instances_need_golden_files() -> None:
    ctx = _ctx(gen_exported_instance=True)
    aggregate(ctx, [_source("a.cue", "x")])
    derive_exports(ctx)
    assert ctx.exported_instances == {}

    ctx = _ctx(gen_exported_instance=True, golden_suffix="_golden.json")
    golden = GoldenFile(path="/repo/x/x_golden.json", rel="x", name="x_golden.json")
    aggregate(ctx, [_source("a.cue", "x", "strings")], {"x": golden})
    derive_exports(ctx)

    exported = ctx.exported_instances["x_instance_exported"]
    assert exported.instance == "x_instance"
    assert exported.output_format == "json"
    assert exported.imports == {"strings"}


@pytest.mark.parametrize(
    "order",
    [("a.cue", "p.cue"), ("p.cue", "a.cue")],
)
def test_standalone_file_named_after_package(order: tuple[str, str]) -> None:
    sources = {
        "a.cue": _source("a.cue", "p", "strings"),
        "p.cue": _source("p.cue", "", "list"),
    }
    ctx = _ctx(gen_exported_files=True)

    aggregate(ctx, [sources[name] for name in order])

    assert ctx.instances["p_instance"].sorted_srcs() == ["a.cue"]
    assert ctx.instances["p_instance"].imports == {"strings"}
    exported = ctx.exported_files["p_exported_files"]
    assert sorted(exported.srcs) == ["a.cue", "p.cue"]
    assert exported.imports == {"list", "strings"}
