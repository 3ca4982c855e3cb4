"""JSON/TSV writers for extracted vocabulary records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from vocab_pipeline.fields import RECORD_KEYS
from vocab_pipeline.models import OutputRecord

TSV_HEADER = list(RECORD_KEYS)


def write_records_json(records: Sequence[OutputRecord], output_path: Path) -> None:
    output_path.write_text(
        json.dumps(list(records), indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )


def _tsv_cell(value: Any) -> str:
    """Flatten one record value into a tab-free TSV cell."""

    if value is None:
        return ""
    if isinstance(value, list):
        text = ", ".join(str(item) for item in value)
    elif isinstance(value, dict):
        text = str(value.get("url", ""))
    else:
        text = str(value)
    return text.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def write_records_tsv(
    records: Sequence[OutputRecord], output_path: Path, include_header: bool = True
) -> None:
    """Write records to a TSV file using the catalog column order.

    List values are joined with ``, `` and the video column holds the video
    URL. Missing fields become empty cells.

    Args:
        records: Finalized records.
        output_path: Destination TSV file path.
        include_header: Whether to include a header row.
    """

    with output_path.open("w", encoding="utf-8") as handle:
        if include_header:
            handle.write("\t".join(TSV_HEADER))
            handle.write("\n")
        for record in records:
            handle.write("\t".join(_tsv_cell(record.get(key)) for key in TSV_HEADER))
            handle.write("\n")
