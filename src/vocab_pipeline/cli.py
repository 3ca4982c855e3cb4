"""CLI entrypoint for rule-driven vocabulary extraction."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from vocab_pipeline.io.records_io import write_records_json, write_records_tsv
from vocab_pipeline.io.rule_repository import RuleRepository
from vocab_pipeline.io.rules_io import RuleImportError, read_rule_file
from vocab_pipeline.models import RuleSet
from vocab_pipeline.pipeline import BatchResult, run_batch
from vocab_pipeline.reporting.report_md import build_report_md
from vocab_pipeline.settings import ExtractionSettings
from vocab_pipeline.stages.stage1_fetch import DocumentFetcher, load_document
from vocab_pipeline.validation import collect_field_counts

logger = logging.getLogger(__name__)


def _format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Format rows as an ASCII table for terminal output.

    Args:
        headers: Table headers.
        data_rows: Row values.

    Returns:
        Monospace table string.
    """

    widths = [len(header) for header in headers]
    for row in data_rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))

    header_line = " | ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers))
    separator_line = "-+-".join("-" * width for width in widths)
    body_lines = [
        " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(row)) for row in data_rows
    ]
    return "\n".join([header_line, separator_line, *body_lines])


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser for the extraction command.
    """

    parser = argparse.ArgumentParser(
        description="Extract vocabulary records from dictionary-API JSON using mapping rules."
    )
    rules = parser.add_mutually_exclusive_group(required=True)
    rules.add_argument("--rules", type=Path, help="Exported rule file (JSON).")
    rules.add_argument(
        "--rule-store",
        type=Path,
        help="Rule repository file; rules are looked up by --source-key or --url-template.",
    )
    parser.add_argument(
        "--source-key",
        default=None,
        help="Key of the stored rule set to use with --rule-store (default: --url-template).",
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url-template", help="API URL containing a {word} placeholder.")
    source.add_argument(
        "--document-dir",
        type=Path,
        help="Directory holding one <word>.json document per word.",
    )

    parser.add_argument("--word", action="append", default=[], help="Word to process (repeatable).")
    parser.add_argument("--words-file", type=Path, help="Text file with one word per line.")
    parser.add_argument("--output", required=True, type=Path, help="Destination records file.")
    parser.add_argument(
        "--format",
        choices=("json", "tsv"),
        default="json",
        help="Output format (default: json).",
    )
    parser.add_argument("--report", type=Path, default=None, help="Markdown report output path.")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Traversal depth bound (default: VOCAB_PIPELINE_MAX_DEPTH or 40).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _read_words(args: argparse.Namespace) -> list[str]:
    words = list(args.word)
    if args.words_file is not None:
        if not args.words_file.exists():
            raise SystemExit(f"Words file not found: {args.words_file}")
        words.extend(args.words_file.read_text(encoding="utf-8").splitlines())
    words = [word.strip() for word in words if word.strip()]
    if not words:
        raise SystemExit("No words given; use --word or --words-file.")
    return words


def _load_rules(args: argparse.Namespace) -> RuleSet:
    if args.rules is not None:
        try:
            return read_rule_file(args.rules)
        except (FileNotFoundError, RuleImportError) as exc:
            raise SystemExit(str(exc)) from exc

    source_key = args.source_key or args.url_template
    if source_key is None:
        raise SystemExit("--rule-store requires --source-key or --url-template.")
    try:
        rule_set = RuleRepository(args.rule_store).load(source_key)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    if rule_set is None:
        raise SystemExit(f"No rules stored for {source_key} in {args.rule_store}")
    return rule_set


def _print_summary(result: BatchResult) -> None:
    """Print per-word outcomes and field coverage tables."""

    outcome_rows = [
        [outcome.word, "ok" if outcome.ok else "failed", str(outcome.record_count)]
        for outcome in result.outcomes
    ]
    print("\nRecords per word:")
    print(_format_table(["word", "status", "records"], outcome_rows))

    field_counts = collect_field_counts(list(result.records))
    if field_counts:
        field_rows = [
            [key, str(count)]
            for key, count in sorted(field_counts.items(), key=lambda item: (-item[1], item[0]))
        ]
        print("\nField coverage:")
        print(_format_table(["field", "records"], field_rows))

    for outcome in result.failures:
        print(f"WARNING: {outcome.word}: {outcome.error}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI workflow from arguments through artifact generation.

    Returns:
        Zero when at least one word was retrieved, one when every word failed.
    """

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = ExtractionSettings.from_env()
        if args.max_depth is not None:
            settings = ExtractionSettings(
                max_depth=args.max_depth,
                http_timeout=settings.http_timeout,
                user_agent=settings.user_agent,
            )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    words = _read_words(args)
    rule_set = _load_rules(args)
    logger.info(
        "Loaded %d mappings and %d list declarations", len(rule_set.mappings), len(rule_set.lists)
    )

    if args.url_template is not None:
        try:
            fetcher = DocumentFetcher(args.url_template, settings)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        with fetcher:
            result = run_batch(words, rule_set, fetcher.fetch, settings)
    else:
        document_dir: Path = args.document_dir
        if not document_dir.is_dir():
            raise SystemExit(f"Document directory not found: {document_dir}")

        def fetch(word: str) -> object:
            return load_document(document_dir / f"{word}.json", word)

        result = run_batch(words, rule_set, fetch, settings)

    if args.format == "tsv":
        write_records_tsv(result.records, output_path=args.output)
    else:
        write_records_json(result.records, output_path=args.output)
    print(f"Wrote {len(result.records)} records to {args.output}")

    if args.report is not None:
        args.report.write_text(build_report_md(result), encoding="utf-8")
        print(f"Wrote report to {args.report}")

    _print_summary(result)
    if result.outcomes and len(result.failures) == len(result.outcomes):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
