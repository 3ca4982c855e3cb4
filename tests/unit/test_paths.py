"""Unit tests for concrete/normalized path helpers."""

from __future__ import annotations

import pytest

from vocab_pipeline.mapping.paths import (
    is_strict_descendant,
    join_path,
    normalize_path,
    split_path,
)


@pytest.mark.parametrize(
    ("concrete", "expected"),
    [
        ("root", "root"),
        ("root.senses.0.pos", "root.senses.pos"),
        ("root.ec.word.0.trs.12.tr.0.l.i.3", "root.ec.word.trs.tr.l.i"),
        ("root.x1.2b", "root.x1.2b"),
        ("", ""),
    ],
)
def test_normalize_path_strips_numeric_segments(concrete: str, expected: str) -> None:
    assert normalize_path(concrete) == expected


def test_normalize_path_is_idempotent() -> None:
    for path in ["root.a.0.b.1", "root.gpt-3\\.5.0.text", "root.0.0", "root.items"]:
        once = normalize_path(path)
        assert normalize_path(once) == once


def test_join_path_escapes_dotted_keys_so_they_survive_normalization() -> None:
    path = join_path(join_path("root", "gpt-3.5"), 0)

    assert path == "root.gpt-3\\.5.0"
    assert split_path(path) == ["root", "gpt-3.5", "0"]
    assert normalize_path(path) == "root.gpt-3\\.5"


def test_is_strict_descendant_compares_whole_segments() -> None:
    assert is_strict_descendant("root.a.b", "root.a")
    assert not is_strict_descendant("root.a", "root.a")
    assert not is_strict_descendant("root.ab", "root.a")
    assert not is_strict_descendant("root", "root.a")


def test_split_path_unescapes_backslashes_and_drops_empty_segments() -> None:
    assert split_path(join_path("root", "a\\b")) == ["root", "a\\b"]
    assert split_path("root..a.") == ["root", "a"]
    assert split_path(None) == []
