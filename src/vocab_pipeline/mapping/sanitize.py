"""Reduce arbitrary JSON values to displayable scalars."""

from __future__ import annotations

import json
from typing import Any

# Keys that usually hold the human-readable part of a dictionary-API object,
# tried in this order. ``tran`` is the translation key and ``i`` the
# single-letter text key used by Youdao-style payloads.
TEXT_KEYS: tuple[str, ...] = ("text", "value", "word", "name", "label", "tran", "definition", "i")

# Upper bound on list/object unwrapping steps for one value.
MAX_UNWRAP_STEPS = 64


def sanitize_value(value: Any) -> str | int | float:
    """Return a display-safe scalar for ``value``.

    Strings and numbers pass through unchanged. Lists collapse to their first
    element, objects to their first likely-text key, or failing that to a
    canonical JSON string. The function never raises.

    Args:
        value: Any JSON-typed value.

    Returns:
        A string or number; ``""`` for missing values and empty lists.
    """

    current = value
    for _ in range(MAX_UNWRAP_STEPS):
        if current is None:
            return ""
        if isinstance(current, bool):
            return "true" if current else "false"
        if isinstance(current, (str, int, float)):
            return current
        if isinstance(current, (list, tuple)):
            if not current:
                return ""
            current = current[0]
            continue
        if isinstance(current, dict):
            key = next((k for k in TEXT_KEYS if k in current), None)
            if key is None:
                return _serialize(current)
            current = current[key]
            continue
        return str(current)
    return _serialize(current)


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
    except RecursionError:
        return f"<{type(value).__name__} nested too deeply>"


def is_empty_value(value: Any) -> bool:
    """Return whether a sanitized value carries nothing worth keeping."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
