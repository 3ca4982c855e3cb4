"""Unit tests for JSON value sanitization."""

from __future__ import annotations

from vocab_pipeline.mapping.sanitize import is_empty_value, sanitize_value


def test_scalars_pass_through() -> None:
    assert sanitize_value(None) == ""
    assert sanitize_value("book") == "book"
    assert sanitize_value(3) == 3
    assert sanitize_value(2.5) == 2.5
    assert sanitize_value(True) == "true"


def test_lists_collapse_to_first_element() -> None:
    assert sanitize_value([]) == ""
    assert sanitize_value(["a", "b"]) == "a"
    assert sanitize_value([[{"text": "nested"}]]) == "nested"


def test_objects_use_first_present_text_key() -> None:
    assert sanitize_value({"value": 1, "text": "w"}) == "w"
    assert sanitize_value({"tran": "书", "pos": "n."}) == "书"
    assert sanitize_value({"l": {"i": ["x", "y"]}}) == '{"l": {"i": ["x", "y"]}}'
    assert sanitize_value({"i": ["x", "y"]}) == "x"
    assert sanitize_value({"text": None, "value": "ignored"}) == ""


def test_objects_without_text_keys_serialize_canonically() -> None:
    assert sanitize_value({"b": 1, "a": "é"}) == '{"a": "é", "b": 1}'


def test_deeply_nested_lists_still_return_a_string() -> None:
    value: object = "leaf"
    for _ in range(200):
        value = [value]

    assert isinstance(sanitize_value(value), str)


def test_object_nested_past_the_recursion_limit_still_returns_a_string() -> None:
    value: object = {"leaf": 1}
    for _ in range(100_000):
        value = {"n": value}

    assert sanitize_value(value) == "<dict nested too deeply>"


def test_is_empty_value() -> None:
    assert is_empty_value("")
    assert is_empty_value("   ")
    assert is_empty_value(None)
    assert not is_empty_value(0)
    assert not is_empty_value("x")
