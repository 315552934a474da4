from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.records import EmptyRecord
from artifacts.utils import _load_jsonl, _write_jsonl

if TYPE_CHECKING:
    from pathlib import Path


def test_load_jsonl_reads_written_records(tmp_path: Path) -> None:
    path = tmp_path / "rules.jsonl"
    _write_jsonl(path, [EmptyRecord(kind="cue_instance", name="x_instance")])

    assert path.read_bytes() == b'{"kind":"cue_instance","name":"x_instance"}\n'
    assert _load_jsonl(path) == [{"kind": "cue_instance", "name": "x_instance"}]


def test_load_jsonl_skips_blank_lines_and_non_objects(tmp_path: Path) -> None:
    path = tmp_path / "rules.jsonl"
    path.write_bytes(b'{"rel": "a"}\n\n[1, 2]\n  {"rel": "b"}  \n')

    assert _load_jsonl(path) == [{"rel": "a"}, {"rel": "b"}]
