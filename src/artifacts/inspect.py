"""Human-readable report of the instances found in one directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from artifacts.generate import DirectoryConfigs, find_nearest_module, parse_sources
from config.directives import compute_import_path
from config.settings import load_config
from resolve.imports import instance_import_path

if TYPE_CHECKING:
    from pathlib import Path

    from config.settings import CueBuildConfig


class InstanceReport(BaseModel):
    """What a directory pass sees for one package (or one standalone file)."""

    package_name: str = ""
    import_path: str = ""
    module: str = ""
    directory: str
    srcs: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)


def inspect_instances(
    root: Path,
    rel: str = "",
    config: CueBuildConfig | None = None,
) -> list[InstanceReport]:
    """Group the CUE files of ``root/rel`` the way generation would.

    Package files are grouped per package name, in package order; each
    standalone file is reported on its own as an anonymous package.
    """
    if config is None:
        config = load_config(root)
    rel = rel.strip("/")
    directory = root / rel if rel else root
    dir_config = DirectoryConfigs(root, config).config(rel)
    module = find_nearest_module(directory, rel)

    packages: dict[str, InstanceReport] = {}
    standalone: list[InstanceReport] = []
    filenames = sorted(p.name for p in directory.iterdir() if p.is_file())
    for source in parse_sources(directory, rel, filenames):
        if source.is_standalone:
            standalone.append(
                InstanceReport(
                    import_path=compute_import_path(dir_config, rel),
                    module=module,
                    directory=rel,
                    srcs=[source.name],
                    imports=sorted(set(source.imports)),
                )
            )
            continue
        report = packages.get(source.package)
        if report is None:
            report = InstanceReport(
                package_name=source.package,
                import_path=instance_import_path(dir_config, rel, source.package),
                module=module,
                directory=rel,
            )
            packages[source.package] = report
        report.srcs.append(source.name)
        report.imports = sorted(set(report.imports).union(source.imports))

    return [packages[name] for name in sorted(packages)] + standalone


def _format_table(rows: list[tuple[str, str]], indent: str) -> list[str]:
    width = max((len(label) for label, _ in rows), default=0)
    return [f"{indent}{label + ':':<{width + 1}} {value}" for label, value in rows]


def format_instances(reports: list[InstanceReport]) -> str:
    """Render reports as an aligned plain-text listing."""
    lines: list[str] = []
    for report in reports:
        if report.package_name:
            lines.append(f'Instance for package "{report.package_name}":')
        else:
            lines.append("Instance for anonymous package:")

        rows: list[tuple[str, str]] = []
        if report.import_path:
            rows.append(("Import Path", report.import_path))
        if report.module:
            rows.append(("Module", report.module))
        rows.append(("Package Directory", report.directory or "."))
        lines.extend(_format_table(rows, "  "))

        if report.imports:
            lines.append("  Direct Imports:")
            lines.extend(f"    {imp}" for imp in report.imports)
        lines.append("  Build Files:")
        lines.extend(f"    {src}" for src in report.srcs)
    return "\n".join(lines) + ("\n" if lines else "")


__all__ = ["InstanceReport", "format_instances", "inspect_instances"]
