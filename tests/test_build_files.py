from __future__ import annotations

from pathlib import Path

import pytest

from errors import BuildFileError
from parse.build_files import find_build_file, load_build_file, parse_build_source

_BUILD = """
load("@rules_cue//cue:cue.bzl", "cue_instance")

# gazelle:prefix example.com/repo
# gazelle:cue_gen_exported_instance

cue_instance(
    name = "config_instance",
    srcs = ["a.cue", "b.cue"],
    package_name = "config",
    visibility = ["//visibility:public"],
)

filegroup(
    name = "everything",
    srcs = glob(["**"]),
)

exports_files(["README.md"])
"""


def test_rules_and_directives() -> None:
    build_file = parse_build_source(_BUILD, "conf")

    assert build_file.pkg == "conf"
    assert [(r.kind, r.name) for r in build_file.rules] == [
        ("cue_instance", "config_instance"),
        ("filegroup", "everything"),
    ]
    instance = build_file.rules[0]
    assert instance.attr("srcs") == ["a.cue", "b.cue"]
    assert instance.attr_string("package_name") == "config"
    # Non-literal values are dropped.
    assert build_file.rules[1].attr("srcs") is None
    assert build_file.directives == [
        ("prefix", "example.com/repo"),
        ("cue_gen_exported_instance", ""),
    ]


def test_syntax_error_raises_build_file_error() -> None:
    with pytest.raises(BuildFileError, match="BUILD.bazel"):
        parse_build_source("cue_instance(name = ", "", "BUILD.bazel")


def test_find_build_file_prefers_first_name(tmp_path: Path) -> None:
    (tmp_path / "BUILD").write_text("", encoding="utf-8")
    (tmp_path / "BUILD.bazel").write_text("", encoding="utf-8")

    assert find_build_file(tmp_path, ["BUILD.bazel", "BUILD"]) == tmp_path / "BUILD.bazel"
    assert find_build_file(tmp_path, ["BUILD"]) == tmp_path / "BUILD"
    assert find_build_file(tmp_path, ["BUCK"]) is None


def test_load_build_file(tmp_path: Path) -> None:
    path = tmp_path / "BUILD.bazel"
    path.write_text(_BUILD, encoding="utf-8")

    build_file = load_build_file(path, "")

    assert build_file.path == str(path)
    assert len(build_file.rules) == 2
