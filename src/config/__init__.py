"""Configuration for cuebuild."""

from config.directives import (
    DirectoryConfig,
    compute_import_path,
    configure,
)
from config.settings import (
    CueBuildConfig,
    RepositoryDef,
    load_config,
    resolve_output_dir,
)
from errors import ConfigError

__all__ = [
    "ConfigError",
    "CueBuildConfig",
    "DirectoryConfig",
    "RepositoryDef",
    "compute_import_path",
    "configure",
    "load_config",
    "resolve_output_dir",
]
