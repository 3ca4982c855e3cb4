"""JSON serialization of rule sets for import, export, and persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from vocab_pipeline.mapping.paths import normalize_path
from vocab_pipeline.models import ListDeclaration, MappingRule, RuleSet
from vocab_pipeline.validation import format_problems, validate_rule_blob


class RuleImportError(ValueError):
    """Raised when a rule blob does not have the expected shape.

    Attributes:
        problems: Every problem found, in discovery order.
    """

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems = tuple(problems)
        super().__init__(format_problems("Rule import failed", self.problems))


def rule_to_blob(rule: MappingRule) -> dict[str, Any]:
    return {"path": rule.path, "field": rule.field, "weight": rule.weight, "isBase": rule.is_base}


def rule_set_to_blob(rule_set: RuleSet) -> dict[str, Any]:
    """Serialize a rule set into its standalone JSON shape.

    Args:
        rule_set: Rules to export.

    Returns:
        Dictionary with ``sourceKey``, ``mappings``, ``lists`` and ``updatedAt``.
    """

    return {
        "sourceKey": rule_set.source_key,
        "mappings": [rule_to_blob(rule) for rule in rule_set.mappings],
        "lists": [{"path": item.path} for item in rule_set.lists],
        "updatedAt": rule_set.updated_at,
    }


def rule_set_from_blob(blob: Any, *, source_key: str | None = None) -> RuleSet:
    """Build a ``RuleSet`` from an imported JSON blob.

    Paths are normalized on the way in so numeric segments never reach the
    rule store. Duplicate rules and list declarations keep their first
    occurrence.

    Args:
        blob: Decoded JSON value.
        source_key: Source key to use instead of the blob's ``sourceKey``.
            When given, the blob may omit ``sourceKey``.

    Returns:
        The decoded rule set.

    Raises:
        RuleImportError: If the blob is missing required keys or holds
            malformed rules.
    """

    problems = validate_rule_blob(blob, require_source_key=source_key is None)
    if problems:
        raise RuleImportError(problems)

    mappings: list[MappingRule] = []
    seen_rules: set[tuple[str, str, bool]] = set()
    for item in blob["mappings"]:
        rule = MappingRule(
            path=normalize_path(item["path"]),
            field=item["field"],
            weight=int(item.get("weight", 1)),
            is_base=bool(item.get("isBase", False)),
        )
        key = (rule.path, rule.field, rule.is_base)
        if key in seen_rules:
            continue
        seen_rules.add(key)
        mappings.append(rule)

    lists: list[ListDeclaration] = []
    seen_lists: set[str] = set()
    for item in blob["lists"]:
        path = normalize_path(item["path"])
        if path in seen_lists:
            continue
        seen_lists.add(path)
        lists.append(ListDeclaration(path))

    return RuleSet(
        source_key=source_key if source_key is not None else blob["sourceKey"],
        mappings=tuple(mappings),
        lists=tuple(lists),
        updated_at=blob.get("updatedAt"),
    )


def read_rule_file(path: Path) -> RuleSet:
    """Load a rule set exported by :func:`write_rule_file`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        RuleImportError: If the file is not valid JSON or not a rule blob.
    """

    if not path.exists():
        raise FileNotFoundError(f"Rule file not found: {path}")
    try:
        blob = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuleImportError([f"invalid JSON in {path}: {exc}"]) from exc
    return rule_set_from_blob(blob)


def write_rule_file(rule_set: RuleSet, path: Path) -> None:
    path.write_text(
        json.dumps(rule_set_to_blob(rule_set), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
