from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from artifacts.generate import (
    DirectoryConfigs,
    GenerateArgs,
    find_nearest_module,
    generate_directory,
)
from config.directives import DirectoryConfig
from config.settings import CueBuildConfig, RepositoryDef
from contract.kinds import (
    CUE_CONSOLIDATED_INSTANCE,
    CUE_INSTANCE,
    CUE_MODULE,
    IMPORTS_KEY,
)
from contract.labels import Label
from graph.remote import RemoteCache
from graph.rule_index import RuleIndex
from parse.build_files import parse_build_source
from resolve.module_index import ModuleIndex
from resolve.resolver import ImportResolver

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _write_package(directory: Path) -> None:
    _write(
        directory / "a.cue",
        'package p\n\nimport (\n\t"strings"\n\t"example.com/x"\n)\n',
    )
    _write(directory / "b.cue", 'package p\n\nimport "example.com/y"\n')


def test_two_files_of_one_package(tmp_path: Path) -> None:
    directory = tmp_path / "p"
    _write_package(directory)

    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(),
            directory=directory,
            rel="p",
            regular_files=["b.cue", "a.cue", "README.md"],
        )
    )

    assert [(rule.kind, rule.name) for rule in result.gen] == [
        (CUE_INSTANCE, "p_instance"),
        (CUE_CONSOLIDATED_INSTANCE, "p_def"),
    ]
    instance = result.gen[0]
    assert instance.attr("srcs") == ["a.cue", "b.cue"]
    assert instance.attr("package_name") == "p"
    assert instance.attr("ancestor") is None
    assert instance.private_attr(IMPORTS_KEY) == [
        "example.com/x",
        "example.com/y",
        "strings",
    ]
    assert result.gen[1].attr("instance") == ":p_instance"
    assert result.gen[1].attr("output_format") == "cue"
    assert result.empty == []


def test_resolved_dependencies_of_two_files(tmp_path: Path) -> None:
    directory = tmp_path / "p"
    _write_package(directory)
    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(),
            directory=directory,
            rel="p",
            regular_files=["a.cue", "b.cue"],
        )
    )
    resolver = ImportResolver.default(
        ModuleIndex(), RuleIndex(), RemoteCache([("example.com", "R")])
    )

    instance = result.gen[0]
    resolver.resolve_rule(instance, Label(pkg="p", name=instance.name))

    assert instance.attr("deps") == ["R//x:x_instance", "R//y:y_instance"]


def test_instances_point_at_enclosing_module(tmp_path: Path) -> None:
    (tmp_path / "cue.mod").mkdir()
    directory = tmp_path / "svc" / "api"
    _write(directory / "api.cue", "package api\n")

    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(),
            directory=directory,
            rel="svc/api",
            regular_files=["api.cue"],
        )
    )

    assert result.gen[0].attr("ancestor") == "//cue.mod:cue.mod"
    assert find_nearest_module(directory, "svc/api") == "//cue.mod:cue.mod"
    assert find_nearest_module(tmp_path / "svc", "svc") == "//cue.mod:cue.mod"


def test_nearest_module_prefers_innermost(tmp_path: Path) -> None:
    (tmp_path / "cue.mod").mkdir()
    (tmp_path / "svc" / "cue.mod").mkdir(parents=True)
    (tmp_path / "svc" / "api").mkdir()

    assert find_nearest_module(tmp_path / "svc" / "api", "svc/api") == (
        "//svc/cue.mod:cue.mod"
    )
    assert find_nearest_module(tmp_path / "other", "other") == "//cue.mod:cue.mod"


def test_no_module_anywhere(tmp_path: Path) -> None:
    assert find_nearest_module(tmp_path / "a", "a") == ""


def test_module_directory_emits_module_rule(tmp_path: Path) -> None:
    module_dir = tmp_path / "cue.mod"
    _write(module_dir / "module.cue", 'module: "example.com/repo"\n')
    _write(module_dir / "gen" / "x" / "x.cue", "package x\n")
    module_index = ModuleIndex()

    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(),
            directory=module_dir,
            rel="cue.mod",
            regular_files=["module.cue"],
            module_index=module_index,
        )
    )

    assert [(rule.kind, rule.name) for rule in result.gen] == [
        (CUE_MODULE, "cue.mod")
    ]
    assert result.gen[0].attr("visibility") == ["//visibility:public"]
    assert module_index.lookup("x", "//cue.mod:cue.mod") == "//cue.mod/gen/x:x_instance"


def test_empty_module_directory_still_emits_module_rule(tmp_path: Path) -> None:
    module_dir = tmp_path / "cue.mod"
    module_dir.mkdir()

    result = generate_directory(
        GenerateArgs(config=DirectoryConfig(), directory=module_dir, rel="cue.mod")
    )

    assert [rule.kind for rule in result.gen] == [CUE_MODULE]


def test_unparsable_file_is_skipped(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    directory = tmp_path / "p"
    _write(directory / "good.cue", "package p\n")
    _write(directory / "bad.cue", 'package p\nimport (\n "strings"\n')

    with caplog.at_level(logging.WARNING, logger="artifacts.generate"):
        result = generate_directory(
            GenerateArgs(
                config=DirectoryConfig(),
                directory=directory,
                rel="p",
                regular_files=["bad.cue", "good.cue"],
            )
        )

    assert result.gen[0].attr("srcs") == ["good.cue"]
    assert "bad.cue" in caplog.text


def test_directory_without_sources_deletes_stale_rules(tmp_path: Path) -> None:
    directory = tmp_path / "p"
    directory.mkdir()
    build_file = parse_build_source(
        'cue_instance(name = "p_instance", srcs = ["p.cue"])\n'
        'go_library(name = "p")\n',
        "p",
    )

    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(),
            directory=directory,
            rel="p",
            build_file=build_file,
        )
    )

    assert result.gen == []
    assert [(rule.kind, rule.name) for rule in result.empty] == [
        (CUE_INSTANCE, "p_instance")
    ]


def test_directory_configs_inherit_from_parents(tmp_path: Path) -> None:
    _write(tmp_path / "BUILD.bazel", "# gazelle:prefix example.com/repo\n")
    _write(
        tmp_path / "a" / "BUILD",
        "# gazelle:cue_output_format yaml\n",
    )
    config = CueBuildConfig(
        directives={"cue_gen_exported_files": True},
        repositories=[RepositoryDef(prefix="example.com", name="R")],
    )

    configs = DirectoryConfigs(tmp_path, config)
    leaf = configs.config("a/b")

    assert leaf.prefix == "example.com/repo"
    assert leaf.prefix_rel == ""
    assert leaf.output_format == "yaml"
    assert leaf.gen_exported_files is True
    assert configs.config("").output_format == "json"
    assert configs.build_file("a/b") is None


def test_standalone_file_stays_out_of_package_instance(tmp_path: Path) -> None:
    directory = tmp_path / "p"
    _write(directory / "a.cue", "package p\n")
    _write(directory / "p.cue", "x: 1\n")

    result = generate_directory(
        GenerateArgs(
            config=DirectoryConfig(gen_exported_files=True),
            directory=directory,
            rel="p",
            regular_files=["a.cue", "p.cue"],
        )
    )

    rules = {rule.name: rule for rule in result.gen}
    assert rules["p_instance"].attr("srcs") == ["a.cue"]
    assert rules["p_exported_files"].attr("srcs") == ["a.cue", "p.cue"]
