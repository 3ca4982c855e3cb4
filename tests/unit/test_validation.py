"""Unit tests for rule blob and record validation helpers."""

from __future__ import annotations

import pytest

from vocab_pipeline.validation import (
    collect_field_counts,
    collect_part_of_speech_counts,
    format_problems,
    validate_records,
    validate_rule_blob,
)


def test_validate_rule_blob_accepts_minimal_blob() -> None:
    assert validate_rule_blob({"sourceKey": "k", "mappings": [], "lists": []}) == []


def test_validate_rule_blob_collects_all_problems() -> None:
    blob = {
        "sourceKey": 3,
        "updatedAt": "yesterday",
        "mappings": [
            "not-an-object",
            {"path": "root.a", "field": "translation", "isBase": "yes"},
        ],
        "lists": [{"path": ""}, 5],
    }

    problems = validate_rule_blob(blob)

    assert problems == [
        "missing or non-string 'sourceKey'",
        "'updatedAt' must be an integer timestamp, got 'yesterday'",
        "Mapping 1: must be an object",
        "Mapping 2: isBase must be a boolean",
        "List 1: missing path",
        "List 2: missing path",
    ]


def test_validate_rule_blob_rejects_boolean_weight() -> None:
    blob = {"mappings": [{"path": "root.a", "field": "translation", "weight": True}], "lists": []}

    assert validate_rule_blob(blob, require_source_key=False) == [
        "Mapping 1: weight must be an integer >= 1, got True"
    ]


def test_format_problems_truncates_preview() -> None:
    message = format_problems("Rule import failed", [f"problem {idx}" for idx in range(30)])

    assert message.startswith("Rule import failed with 30 errors:")
    assert "- problem 24" in message
    assert "- problem 25" not in message
    assert message.endswith("- ... and 5 more")


def test_validate_records_accepts_valid_records() -> None:
    validate_records(
        [
            {
                "text": "run",
                "translation": "跑",
                "tags": ["cet4"],
                "importance": 3,
                "video": {"url": "https://v.example/run.mp4", "title": "", "cover": ""},
            }
        ]
    )


def test_validate_records_reports_contract_violations() -> None:
    records = [
        {"text": "", "translation": "跑"},
        {"text": "run"},
        {"text": "run", "tags": "cet4", "importance": "3", "bogus": 1},
        {"text": "run", "video": {"title": "no url"}},
    ]

    with pytest.raises(ValueError) as excinfo:
        validate_records(records)

    message = str(excinfo.value)
    assert "Record validation failed with 6 errors" in message
    assert "Record 1: empty text" in message
    assert "Record 2: no field besides text" in message
    assert "Record 3: field 'tags' must be a list" in message
    assert "Record 3: field 'importance' must be numeric" in message
    assert "Record 3: unexpected field 'bogus'" in message
    assert "Record 4: video must carry a url" in message


def test_collect_counts() -> None:
    records = [
        {"text": "run", "partOfSpeech": "v.", "translation": "跑"},
        {"text": "run", "partOfSpeech": "n."},
        {"text": "walk", "partOfSpeech": "v."},
    ]

    assert collect_field_counts(records) == {"partOfSpeech": 3, "translation": 1}
    assert collect_part_of_speech_counts(records) == {"v.": 2, "n.": 1}
