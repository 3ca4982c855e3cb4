"""Validation helpers for imported rule blobs and extracted records."""

from __future__ import annotations

from collections import Counter
from typing import Any, Sequence

from vocab_pipeline.fields import LIST_FIELDS, NUMBER_FIELDS, RECORD_KEYS, is_known_field
from vocab_pipeline.models import OutputRecord

PROBLEM_PREVIEW_LIMIT = 25


def format_problems(title: str, problems: Sequence[str]) -> str:
    """Render a bounded bullet preview of ``problems`` under ``title``."""

    preview = "\n".join(f"- {item}" for item in problems[:PROBLEM_PREVIEW_LIMIT])
    rest = len(problems) - min(PROBLEM_PREVIEW_LIMIT, len(problems))
    more = f"\n- ... and {rest} more" if rest > 0 else ""
    return f"{title} with {len(problems)} errors:\n{preview}{more}"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rule_blob(blob: Any, require_source_key: bool = True) -> list[str]:
    """Check the shape of an imported rule blob.

    Args:
        blob: Decoded JSON value.
        require_source_key: Whether ``sourceKey`` must be present.

    Returns:
        Problems found, empty when the blob is usable.
    """

    if not isinstance(blob, dict):
        return ["rule blob must be a JSON object"]

    errors: list[str] = []
    if require_source_key and not isinstance(blob.get("sourceKey"), str):
        errors.append("missing or non-string 'sourceKey'")

    updated_at = blob.get("updatedAt")
    if updated_at is not None and not _is_int(updated_at):
        errors.append(f"'updatedAt' must be an integer timestamp, got {updated_at!r}")

    mappings = blob.get("mappings")
    if not isinstance(mappings, list):
        errors.append("missing or non-list 'mappings'")
    else:
        for idx, item in enumerate(mappings, start=1):
            if not isinstance(item, dict):
                errors.append(f"Mapping {idx}: must be an object")
                continue
            path = item.get("path")
            if not isinstance(path, str) or not path.strip():
                errors.append(f"Mapping {idx}: missing path")
            field_id = item.get("field")
            if not isinstance(field_id, str) or not is_known_field(field_id):
                errors.append(f"Mapping {idx}: unknown field {field_id!r}")
            weight = item.get("weight", 1)
            if not _is_int(weight) or weight < 1:
                errors.append(f"Mapping {idx}: weight must be an integer >= 1, got {weight!r}")
            if not isinstance(item.get("isBase", False), bool):
                errors.append(f"Mapping {idx}: isBase must be a boolean")

    lists = blob.get("lists")
    if not isinstance(lists, list):
        errors.append("missing or non-list 'lists'")
    else:
        for idx, item in enumerate(lists, start=1):
            path = item.get("path") if isinstance(item, dict) else None
            if not isinstance(path, str) or not path.strip():
                errors.append(f"List {idx}: missing path")

    return errors


def validate_records(records: Sequence[OutputRecord]) -> None:
    """Validate finalized records against the field catalog.

    Args:
        records: Records produced by the resolver.

    Raises:
        ValueError: If any record violates the output contract.
    """

    errors: list[str] = []
    for idx, record in enumerate(records, start=1):
        text = record.get("text")
        if not isinstance(text, str) or not text.strip():
            errors.append(f"Record {idx}: empty text")
        if len(record) < 2:
            errors.append(f"Record {idx}: no field besides text")
        for key, value in record.items():
            if key not in RECORD_KEYS:
                errors.append(f"Record {idx}: unexpected field '{key}'")
            elif key in LIST_FIELDS and not isinstance(value, list):
                errors.append(f"Record {idx}: field '{key}' must be a list")
            elif key in NUMBER_FIELDS and (
                isinstance(value, bool) or not isinstance(value, (int, float))
            ):
                errors.append(f"Record {idx}: field '{key}' must be numeric, got {value!r}")
            elif key == "video" and not (isinstance(value, dict) and value.get("url")):
                errors.append(f"Record {idx}: video must carry a url")

    if errors:
        raise ValueError(format_problems("Record validation failed", errors))


def collect_field_counts(records: Sequence[OutputRecord]) -> dict[str, int]:
    """Count how many records carry each field (``text`` excluded)."""

    counter: Counter[str] = Counter()
    for record in records:
        for key in record:
            if key != "text":
                counter[key] += 1
    return dict(counter)


def collect_part_of_speech_counts(records: Sequence[OutputRecord]) -> dict[str, int]:
    counter: Counter[str] = Counter()
    for record in records:
        value = record.get("partOfSpeech")
        if isinstance(value, str) and value.strip():
            counter[value.strip()] += 1
    return dict(counter)
