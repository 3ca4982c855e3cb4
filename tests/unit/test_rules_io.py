"""Unit tests for rule blob serialization and the file-backed repository."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vocab_pipeline.io.rule_repository import RuleRepository
from vocab_pipeline.io.rules_io import (
    RuleImportError,
    read_rule_file,
    rule_set_from_blob,
    rule_set_to_blob,
    write_rule_file,
)
from vocab_pipeline.models import ListDeclaration, MappingRule, RuleSet


def _sample_rule_set(source_key: str = "https://dict.example/{word}") -> RuleSet:
    return RuleSet(
        source_key=source_key,
        mappings=(
            MappingRule("root.senses.pos", "partOfSpeech"),
            MappingRule("root.url", "sourceUrl", weight=2, is_base=True),
        ),
        lists=(ListDeclaration("root.senses"),),
    )


def test_rule_set_to_blob_uses_camel_case_keys() -> None:
    blob = rule_set_to_blob(_sample_rule_set())

    assert blob == {
        "sourceKey": "https://dict.example/{word}",
        "mappings": [
            {"path": "root.senses.pos", "field": "partOfSpeech", "weight": 1, "isBase": False},
            {"path": "root.url", "field": "sourceUrl", "weight": 2, "isBase": True},
        ],
        "lists": [{"path": "root.senses"}],
        "updatedAt": None,
    }


def test_rule_set_from_blob_normalizes_and_dedupes() -> None:
    rule_set = rule_set_from_blob(
        {
            "sourceKey": "k",
            "mappings": [
                {"path": "root.senses.0.pos", "field": "partOfSpeech"},
                {"path": "root.senses.4.pos", "field": "partOfSpeech", "weight": 5},
            ],
            "lists": [{"path": "root.senses.0"}, {"path": "root.senses"}],
            "updatedAt": 1700000000000,
        }
    )

    assert rule_set.mappings == (MappingRule("root.senses.pos", "partOfSpeech"),)
    assert rule_set.lists == (ListDeclaration("root.senses"),)
    assert rule_set.updated_at == 1700000000000


def test_rule_set_from_blob_reports_every_problem() -> None:
    blob = {
        "sourceKey": "k",
        "mappings": [
            {"path": "root.a", "field": "nope"},
            {"path": "", "field": "translation", "weight": 0},
        ],
        "lists": "x",
    }

    with pytest.raises(RuleImportError) as excinfo:
        rule_set_from_blob(blob)

    assert len(excinfo.value.problems) == 4
    assert "Rule import failed with 4 errors" in str(excinfo.value)


def test_rule_set_from_blob_requires_source_key_only_when_not_supplied() -> None:
    blob = {"mappings": [], "lists": []}

    with pytest.raises(RuleImportError, match="sourceKey"):
        rule_set_from_blob(blob)

    assert rule_set_from_blob(blob, source_key="given").source_key == "given"


def test_rule_set_from_blob_rejects_non_object() -> None:
    with pytest.raises(RuleImportError, match="JSON object"):
        rule_set_from_blob(["not", "a", "blob"])


def test_rule_file_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    write_rule_file(_sample_rule_set(), path)

    assert read_rule_file(path) == _sample_rule_set()


def test_read_rule_file_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_rule_file(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(RuleImportError, match="invalid JSON"):
        read_rule_file(broken)


def test_repository_missing_file_is_empty(tmp_path: Path) -> None:
    repo = RuleRepository(tmp_path / "nested" / "rules.json")

    assert repo.load_all() == {}
    assert repo.load("anything") is None


def test_repository_save_keeps_other_keys_and_stamps_time(tmp_path: Path) -> None:
    repo = RuleRepository(tmp_path / "nested" / "rules.json")
    repo.save(_sample_rule_set("a"), updated_at=10)
    saved = repo.save(_sample_rule_set("b"), updated_at=20)

    assert saved.updated_at == 20
    assert repo.source_keys() == ["a", "b"]
    assert repo.load("a") == RuleSet(
        source_key="a",
        mappings=_sample_rule_set().mappings,
        lists=_sample_rule_set().lists,
        updated_at=10,
    )

    payload = json.loads(repo.path.read_text(encoding="utf-8"))
    assert "sourceKey" not in payload["a"]


def test_repository_default_timestamp_is_epoch_millis(tmp_path: Path) -> None:
    repo = RuleRepository(tmp_path / "rules.json")
    saved = repo.save(_sample_rule_set("a"))

    assert saved.updated_at is not None
    assert saved.updated_at > 1_600_000_000_000


def test_repository_skips_malformed_entries(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            {
                "good": {"mappings": [], "lists": []},
                "bad": {"mappings": [{"path": "root.a", "field": "nope"}], "lists": []},
            }
        ),
        encoding="utf-8",
    )

    assert list(RuleRepository(path).load_all()) == ["good"]


def test_repository_rejects_non_object_file(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="must hold a JSON object"):
        RuleRepository(path).load_all()


def test_repository_reports_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("{broken", encoding="utf-8")
    repo = RuleRepository(path)

    with pytest.raises(ValueError, match="is not valid JSON"):
        repo.load_all()
    with pytest.raises(ValueError, match="is not valid JSON"):
        repo.save(_sample_rule_set("a"))
    assert path.read_text(encoding="utf-8") == "{broken"
