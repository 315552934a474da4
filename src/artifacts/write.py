from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from artifacts.generate import DirectoryConfigs, GenerateArgs, generate_directory
from artifacts.models.records import (
    ConflictRecord,
    DirectoryRecord,
    EmptyRecord,
    GenerationSummary,
    ModuleSummary,
    RuleRecord,
)
from artifacts.utils import _get_output_dir_name, _write_json, _write_jsonl
from config.settings import load_config, resolve_output_dir
from contract.artifacts import ARTIFACT_FILES, RULES_JSONL, SUMMARY_JSON
from contract.kinds import IMPORTS_KEY
from contract.labels import Label
from graph.remote import RemoteCache
from graph.rule_index import RuleIndex
from resolve.ancestor import resolve_ancestor
from resolve.imports import import_specs
from resolve.module_index import ModuleIndex
from resolve.resolver import ImportResolver
from scan.files import walk_directories

if TYPE_CHECKING:
    from pathlib import Path

    from config.directives import DirectoryConfig
    from config.settings import CueBuildConfig
    from graph.rule import Rule

logger = logging.getLogger(__name__)


@dataclass
class _PendingRule:
    config: DirectoryConfig
    rule: Rule
    label: Label


def _resolve_pending(
    pending: _PendingRule,
    resolver: ImportResolver,
    rule_index: RuleIndex,
) -> None:
    resolver.resolve_rule(pending.rule, pending.label)
    resolve_ancestor(pending.config, pending.rule, rule_index, pending.label)


def generate_all_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: CueBuildConfig | None = None,
) -> dict[str, object]:
    """Generate rules for every directory of a CUE repository.

    Args:
        root: Root directory of the repository to analyze
        out_dir: Optional output directory for generated artifacts
        config: Optional configuration; read from cuebuild.toml when omitted

    Returns:
        Dictionary with counts and list of generated artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    module_index = ModuleIndex(
        conflict_policy=config.conflict_policy,
        domain_prefixes=config.domain_prefixes,
    )
    rule_index = RuleIndex()
    remote_cache = RemoteCache(
        (repository.prefix, repository.name) for repository in config.repositories
    )
    configs = DirectoryConfigs(root, config)

    root_prefix = configs.config("").prefix
    if root_prefix:
        remote_cache.add(root_prefix, "")

    generated: list[tuple[str, list[Rule], list[Rule]]] = []
    pending: list[_PendingRule] = []
    directory_count = 0

    resolved_root = root.resolve()
    default_out_dir = resolve_output_dir(root, config.output_dir)
    skip_dir = _get_output_dir_name(
        out_dir.resolve(), resolved_root
    ) or _get_output_dir_name(default_out_dir, resolved_root)

    for listing in walk_directories(
        root,
        output_dir=skip_dir,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        directory_count += 1
        dir_config = configs.config(listing.rel)
        result = generate_directory(
            GenerateArgs(
                config=dir_config,
                directory=listing.path,
                rel=listing.rel,
                regular_files=listing.regular_files,
                build_file=configs.build_file(listing.rel),
                module_index=module_index,
            )
        )

        for rule in result.gen:
            label = Label(pkg=listing.rel, name=rule.name)
            specs = import_specs(
                dir_config,
                rule,
                listing.rel,
                repo_root=root,
                module_index=module_index,
            )
            if specs:
                rule_index.add(label, specs)
            if rule.private_attr(IMPORTS_KEY) is not None:
                pending.append(_PendingRule(config=dir_config, rule=rule, label=label))

        if result.gen or result.empty:
            generated.append((listing.rel, result.gen, result.empty))

    resolver = ImportResolver.default(module_index, rule_index, remote_cache)
    with ThreadPoolExecutor(max_workers=config.resolve_jobs) as executor:
        # list() re-raises the first worker exception.
        list(
            executor.map(
                lambda item: _resolve_pending(item, resolver, rule_index), pending
            )
        )

    records = [
        DirectoryRecord(
            rel=rel,
            gen=[RuleRecord(**rule.to_dict()) for rule in gen],
            empty=[EmptyRecord(kind=rule.kind, name=rule.name) for rule in empty],
        )
        for rel, gen, empty in sorted(generated, key=lambda item: item[0])
    ]

    rule_count = sum(len(record.gen) for record in records)
    empty_count = sum(len(record.empty) for record in records)
    dependency_count = sum(len(item.rule.attr("deps") or []) for item in pending)

    summary = GenerationSummary(
        directory_count=directory_count,
        rule_count=rule_count,
        empty_count=empty_count,
        dependency_count=dependency_count,
        modules=[
            ModuleSummary(
                label=module.label,
                entry_count=len(module_index.entries(module.label)),
            )
            for module in module_index.modules()
        ],
        conflicts=[
            ConflictRecord(
                module=conflict.module,
                key=conflict.key,
                kept=conflict.kept,
                discarded=conflict.discarded,
            )
            for conflict in module_index.conflicts
        ],
    )

    out_dir.mkdir(parents=True, exist_ok=True)
    _write_jsonl(out_dir / RULES_JSONL, records)
    _write_json(out_dir / SUMMARY_JSON, summary)

    artifacts_list = [artifact.filename for artifact in ARTIFACT_FILES.values()]

    return {
        "directory_count": directory_count,
        "rule_count": rule_count,
        "empty_count": empty_count,
        "dependency_count": dependency_count,
        "module_count": len(summary.modules),
        "conflict_count": len(summary.conflicts),
        "artifacts": [str(out_dir / name) for name in artifacts_list],
    }
