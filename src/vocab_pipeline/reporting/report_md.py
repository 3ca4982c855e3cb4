"""Markdown report generation for batch extraction runs."""

from __future__ import annotations

from typing import Iterable, Sequence

from vocab_pipeline.fields import RECORD_KEYS, get_field
from vocab_pipeline.pipeline import BatchResult
from vocab_pipeline.validation import collect_field_counts, collect_part_of_speech_counts


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _field_label(key: str) -> str:
    return "Video" if key == "video" else get_field(key).label


def _markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a deterministic GitHub-flavored markdown table.

    Args:
        headers: Table header labels.
        rows: Table body rows as string sequences.

    Returns:
        Markdown table text.
    """

    line_header = "| " + " | ".join(headers) + " |"
    line_sep = "| " + " | ".join("---" for _ in headers) + " |"
    body = ["| " + " | ".join(_escape_cell(cell) for cell in row) + " |" for row in rows]
    return "\n".join([line_header, line_sep, *body])


def build_report_md(result: BatchResult) -> str:
    """Build the markdown report for one batch run.

    Args:
        result: Records and per-word outcomes of the run.

    Returns:
        Full markdown content with summary tables.
    """

    records = list(result.records)
    outcome_rows = [
        (
            outcome.word,
            "ok" if outcome.ok else "failed",
            str(outcome.record_count),
            "yes" if outcome.fallback_used else "no",
        )
        for outcome in result.outcomes
    ]

    field_counts = collect_field_counts(records)
    field_rows = [
        (key, _field_label(key), str(field_counts[key]))
        for key in RECORD_KEYS
        if key in field_counts
    ]

    pos_counts = collect_part_of_speech_counts(records)
    pos_rows = [
        (token, str(pos_counts[token]))
        for token in sorted(pos_counts, key=lambda item: (-pos_counts[item], item))
    ]

    failure_rows = [(outcome.word, outcome.error or "") for outcome in result.failures]

    sections = [
        "# Extraction Report",
        "",
        f"Words: {len(result.outcomes)} | Records: {len(records)} | "
        f"Failures: {len(result.failures)}",
        "",
        "## Records per word",
        _markdown_table(["word", "status", "record_count", "fallback"], outcome_rows),
        "",
        "## Field coverage",
        _markdown_table(["field", "label", "record_count"], field_rows),
        "",
        "## Part-of-Speech values",
        _markdown_table(["part_of_speech", "count"], pos_rows),
        "",
        "## Retrieval failures",
        _markdown_table(["word", "error"], failure_rows),
    ]

    return "\n".join(sections) + "\n"
