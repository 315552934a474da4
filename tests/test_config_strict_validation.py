from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import ConfigError, load_config, resolve_output_dir


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / "cuebuild.toml").write_text(toml_content, encoding="utf-8")


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "exclude = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_unknown_directive_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[directives]
go_prefix = "example.com"
""".strip(),
    )

    with pytest.raises(ConfigError, match="Unknown directive"):
        load_config(tmp_path)


def test_unknown_conflict_policy_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, 'conflict_policy = "random"')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_resolve_jobs_must_be_positive(tmp_path: Path) -> None:
    _write_config(tmp_path, "resolve_jobs = 0")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
exclude = ["third_party/**"]
resolve_jobs = 4
conflict_policy = "first"

[directives]
prefix = "example.com/repo"
cue_gen_exported_instance = true

[[repositories]]
prefix = "example.com/shared"
name = "@shared"
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.exclude == ["third_party/**"]
    assert config.resolve_jobs == 4
    assert config.conflict_policy == "first"
    assert config.directives == {
        "prefix": "example.com/repo",
        "cue_gen_exported_instance": "true",
    }
    assert [(r.prefix, r.name) for r in config.repositories] == [
        ("example.com/shared", "@shared")
    ]


def test_unknown_repository_key_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[[repositories]]
prefix = "example.com/shared"
name = "@shared"
commit = "abc"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.output_dir == ".cuebuild"
    assert config.exclude == []
    assert config.build_file_names == ["BUILD.bazel", "BUILD"]
    assert config.conflict_policy == "last"
    assert config.domain_prefixes == ["k8s.io", "sigs.k8s.io", "github.com", "nvda.ai"]


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.resolve_jobs == 1
    assert config.directives == {}


@pytest.mark.parametrize("output_dir", ["", "~/out", "/abs/out", "../outside"])
def test_resolve_output_dir_rejects_unsafe_paths(tmp_path: Path, output_dir: str) -> None:
    with pytest.raises(ConfigError):
        resolve_output_dir(tmp_path, output_dir)


def test_resolve_output_dir_accepts_nested_path(tmp_path: Path) -> None:
    resolved = resolve_output_dir(tmp_path, "build/.cuebuild")

    assert resolved == (tmp_path / "build" / ".cuebuild").resolve()
