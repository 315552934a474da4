from __future__ import annotations

import logging

import pytest

from config.directives import (
    DirectoryConfig,
    check_prefix,
    compute_import_path,
    configure,
)


def test_root_defaults() -> None:
    conf = configure(None, "")

    assert conf == DirectoryConfig()
    assert conf.output_format == "json"
    assert conf.gen_exported_instance is False


def test_prefix_directive_records_owning_directory() -> None:
    conf = configure(None, "src", [("prefix", "example.com/repo")])

    assert conf.prefix == "example.com/repo"
    assert conf.prefix_rel == "src"


def test_child_inherits_without_mutating_parent() -> None:
    parent = configure(None, "", [("prefix", "example.com/repo")])
    child = configure(parent, "a", [("cue_output_format", "yaml")])

    assert child.prefix == "example.com/repo"
    assert child.output_format == "yaml"
    assert parent.output_format == "json"


@pytest.mark.parametrize("value", ["/abs", "./local", "../up", ".", ".."])
def test_invalid_prefix_is_logged_and_ignored(
    value: str, caplog: pytest.LogCaptureFixture
) -> None:
    parent = configure(None, "", [("prefix", "example.com/repo")])

    with caplog.at_level(logging.WARNING, logger="config.directives"):
        conf = configure(parent, "a", [("prefix", value)])

    assert conf.prefix == "example.com/repo"
    assert conf.prefix_rel == ""
    assert "invalid prefix" in caplog.text


def test_check_prefix_allows_empty_and_hosted_paths() -> None:
    assert check_prefix("") is None
    assert check_prefix("example.com/repo") is None
    assert check_prefix("../repo") is not None


def test_vendor_directory_resets_prefix() -> None:
    parent = configure(None, "", [("prefix", "example.com/repo")])

    conf = configure(parent, "third_party/vendor", [])

    assert conf.prefix == ""
    assert conf.prefix_rel == "third_party/vendor"


def test_golden_suffix_enables_exported_instances() -> None:
    conf = configure(None, "", [("cue_test_golden_suffix", "_golden.json")])

    assert conf.golden_suffix == "_golden.json"
    assert conf.gen_exported_instance is True


def test_golden_filename_derives_suffix_from_extension() -> None:
    conf = configure(None, "", [("cue_test_golden_filename", "expected.yaml")])

    assert conf.golden_filename == "expected.yaml"
    assert conf.golden_suffix == "yaml"
    assert conf.gen_exported_instance is True


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", True), ("true", True), ("false", False), ("off", False), ("No", False)],
)
def test_generation_flags(value: str, expected: bool) -> None:
    conf = configure(
        None,
        "",
        [("cue_gen_exported_instance", value), ("cue_gen_exported_files", value)],
    )

    assert conf.gen_exported_instance is expected
    assert conf.gen_exported_files is expected


def test_unknown_directives_are_ignored() -> None:
    assert configure(None, "", [("go_naming_convention", "import")]) == DirectoryConfig()


def test_compute_import_path() -> None:
    conf = DirectoryConfig(prefix="example.com/x", prefix_rel="src")

    assert compute_import_path(conf, "src") == "example.com/x"
    assert compute_import_path(conf, "src/a/b") == "example.com/x/a/b"
    assert compute_import_path(conf, "other/a") == "other/a"
    assert compute_import_path(DirectoryConfig(), "a/b") == "a/b"
    assert compute_import_path(DirectoryConfig(prefix="example.com"), "a") == (
        "example.com/a"
    )
