"""Stage 3: Resolve branch candidates into finalized vocabulary records."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Sequence

from vocab_pipeline.fields import FIELD_IDS, LIST_FIELDS, NUMBER_FIELDS
from vocab_pipeline.mapping.sanitize import is_empty_value, sanitize_value
from vocab_pipeline.models import Candidate, ExtractionContext, OutputRecord
from vocab_pipeline.stages.stage2_traverse import TraversalResult

logger = logging.getLogger(__name__)

LIST_DELIMITER_RE = re.compile(r"[,，;；]")


def merge_candidates(
    branch: Sequence[Candidate], base: Sequence[Candidate]
) -> list[Candidate]:
    """Order candidates for one field by ascending weight.

    The sort is stable and branch candidates come first, so on equal weights a
    branch value beats a base value and earlier document positions beat later
    ones.
    """

    return sorted([*branch, *base], key=lambda candidate: candidate.weight)


def split_list_text(text: str) -> list[str]:
    """Split ``"a, b；c"`` style text into trimmed, non-empty items."""

    return [part.strip() for part in LIST_DELIMITER_RE.split(text) if part.strip()]


def _sanitize_items(values: Sequence[Any]) -> list[Any]:
    items: list[Any] = []
    for value in values:
        sanitized = sanitize_value(value)
        if not is_empty_value(sanitized):
            items.append(sanitized)
    return items


def _pick_value(field_id: str, candidates: Sequence[Candidate]) -> Any | None:
    """Return the first usable value among priority-ordered candidates.

    List fields keep array candidates element-wise; every other candidate is
    reduced by the sanitizer.
    """

    for candidate in candidates:
        if field_id in LIST_FIELDS and isinstance(candidate.value, list):
            items = _sanitize_items(candidate.value)
            if items:
                return items
            continue
        value = sanitize_value(candidate.value)
        if not is_empty_value(value):
            return value
    return None


def coerce_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return split_list_text(value)
    return [value]


def coerce_number(value: Any) -> int | float | None:
    """Return ``value`` as a finite number, or ``None`` when it is not numeric."""

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _finalize_video(record: OutputRecord) -> None:
    url = record.pop("videoUrl", None)
    title = record.pop("videoTitle", "")
    cover = record.pop("videoCover", "")
    if url is None:
        return
    record["video"] = {"url": str(url), "title": str(title), "cover": str(cover)}


def resolve_record(
    branch: ExtractionContext, base: ExtractionContext, word: str
) -> OutputRecord | None:
    """Merge one terminal branch with the base table into a record.

    Args:
        branch: Candidates collected along the branch.
        base: Document-wide base candidates.
        word: Processed word; always becomes the record's ``text``.

    Returns:
        Record keyed by field id in catalog order, or ``None`` when no field
        besides ``text`` resolved to a value.
    """

    record: OutputRecord = {"text": word}
    for field_id in FIELD_IDS:
        if field_id == "text":
            continue
        candidates = merge_candidates(branch.get(field_id, ()), base.get(field_id, ()))
        if not candidates:
            continue
        value = _pick_value(field_id, candidates)
        if value is None:
            continue

        if field_id in LIST_FIELDS:
            value = coerce_list(value)
            if not value:
                continue
        elif field_id in NUMBER_FIELDS:
            number = coerce_number(value)
            if number is None:
                logger.debug("Dropping non-numeric %s value %r for %s", field_id, value, word)
                continue
            value = number

        record[field_id] = value

    _finalize_video(record)
    if len(record) == 1:
        return None
    return record


def resolve_records(traversal: TraversalResult, word: str) -> list[OutputRecord]:
    """Resolve every branch of a traversal, dropping branches with no fields.

    Args:
        traversal: Output of :func:`collect_branches`.
        word: Processed word.

    Returns:
        Records in branch (document) order.
    """

    records: list[OutputRecord] = []
    for branch in traversal.branches:
        record = resolve_record(branch, traversal.base, word)
        if record is not None:
            records.append(record)
    return records
