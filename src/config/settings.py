from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import ConfigError

CONFIG_FILENAME = "cuebuild.toml"

ConflictPolicy = Literal["last", "first"]

DEFAULT_DOMAIN_PREFIXES = ["k8s.io", "sigs.k8s.io", "github.com", "nvda.ai"]

KNOWN_DIRECTIVES = frozenset(
    {
        "prefix",
        "cue_test_golden_suffix",
        "cue_test_golden_filename",
        "cue_gen_exported_instance",
        "cue_gen_exported_files",
        "cue_output_format",
    }
)


class RepositoryDef(BaseModel):
    """Known repository root for import paths outside this repository."""

    model_config = ConfigDict(extra="forbid")

    prefix: str = Field(description="Import path prefix served by the repository")
    name: str = Field(description="Repository identifier used in targets")


class CueBuildConfig(BaseModel):
    """Configuration for cuebuild rule generation."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".cuebuild",
        description="Output directory for generated artifacts",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for directories to skip",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    build_file_names: list[str] = Field(
        default_factory=lambda: ["BUILD.bazel", "BUILD"],
        description="Build file names, first existing file wins",
    )
    resolve_jobs: int = Field(
        default=1,
        ge=1,
        description="Worker threads used to resolve dependencies",
    )
    conflict_policy: ConflictPolicy = Field(
        default="last",
        description="Which target wins when a module index key is inserted twice",
    )
    domain_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOMAIN_PREFIXES),
        description="Hosts that get a normalized domain-qualified index entry",
    )
    directives: dict[str, str] = Field(
        default_factory=dict,
        description="Directive defaults applied at the repository root",
    )
    repositories: list[RepositoryDef] = Field(
        default_factory=list,
        description="Import prefix to repository mapping for remote imports",
    )

    @field_validator("directives", mode="before")
    @classmethod
    def validate_directives(cls, v: Any) -> Any:
        """Reject directive keys that no configurer understands.

        Boolean values are accepted and turned into the directive spelling.
        """

        if v is None:
            return {}

        if not isinstance(v, dict):
            msg = "directives must be a mapping of directive -> value"
            raise TypeError(msg)

        normalized: dict[str, str] = {}
        for key, value in v.items():
            if key not in KNOWN_DIRECTIVES:
                msg = (
                    f"Unknown directive '{key}'. "
                    f"Valid directives: {', '.join(sorted(KNOWN_DIRECTIVES))}"
                )
                raise ValueError(msg)
            if isinstance(value, bool):
                value = "true" if value else "false"
            if not isinstance(value, str):
                msg = f"directive '{key}' must be a string or boolean"
                raise TypeError(msg)
            normalized[key] = value
        return normalized


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the repo root.

    The config output_dir must be a non-empty relative path that remains
    within the repository root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the repository root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> CueBuildConfig:
    """Load configuration from cuebuild.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return CueBuildConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return CueBuildConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_DOMAIN_PREFIXES",
    "KNOWN_DIRECTIVES",
    "ConflictPolicy",
    "CueBuildConfig",
    "RepositoryDef",
    "load_config",
    "resolve_output_dir",
]
