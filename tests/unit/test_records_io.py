"""Unit tests for JSON/TSV record writers."""

from __future__ import annotations

import json
from pathlib import Path

from vocab_pipeline.io.records_io import TSV_HEADER, write_records_json, write_records_tsv

RECORDS = [
    {
        "text": "run",
        "translation": "跑\t奔跑",
        "tags": ["cet4", "gre"],
        "importance": 3,
        "video": {"url": "https://v.example/run.mp4", "title": "Run", "cover": ""},
    },
    {"text": "run", "englishDefinition": "operate\nmanage"},
]


def test_write_records_json_keeps_unicode(tmp_path: Path) -> None:
    output = tmp_path / "records.json"

    write_records_json(RECORDS, output_path=output)

    text = output.read_text(encoding="utf-8")
    assert "跑" in text
    assert json.loads(text) == RECORDS


def test_write_records_tsv_flattens_values(tmp_path: Path) -> None:
    output = tmp_path / "records.tsv"

    write_records_tsv(RECORDS, output_path=output)
    lines = output.read_text(encoding="utf-8").splitlines()

    assert TSV_HEADER[0] == "text"
    assert TSV_HEADER[-1] == "video"
    assert "videoUrl" not in TSV_HEADER
    assert lines[0].split("\t") == TSV_HEADER
    assert len(lines) == 3

    first = dict(zip(TSV_HEADER, lines[1].split("\t")))
    assert first["translation"] == "跑 奔跑"
    assert first["tags"] == "cet4, gre"
    assert first["importance"] == "3"
    assert first["video"] == "https://v.example/run.mp4"
    assert first["phoneticUs"] == ""

    second = dict(zip(TSV_HEADER, lines[2].split("\t")))
    assert second["englishDefinition"] == "operate manage"


def test_write_records_tsv_without_header(tmp_path: Path) -> None:
    output = tmp_path / "records.tsv"

    write_records_tsv(RECORDS[:1], output_path=output, include_header=False)

    assert output.read_text(encoding="utf-8").splitlines()[0].startswith("run\t")
