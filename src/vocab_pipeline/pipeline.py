"""Top-level orchestration from words to vocabulary records."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Iterable

from vocab_pipeline.models import OutputRecord, RuleSet
from vocab_pipeline.settings import DEFAULT_MAX_DEPTH, ExtractionSettings
from vocab_pipeline.stages.stage1_fetch import RetrievalError
from vocab_pipeline.stages.stage2_traverse import collect_branches
from vocab_pipeline.stages.stage3_resolve import resolve_records
from vocab_pipeline.validation import validate_records

logger = logging.getLogger(__name__)

DocumentSource = Callable[[str], Any]


@dataclass(frozen=True)
class WordOutcome:
    """Per-word result of a batch run.

    Attributes:
        word: Processed word.
        record_count: Records produced for the word.
        error: Retrieval error message, or ``None`` on success.
        fallback_used: Whether the single-branch fallback produced the records.
    """

    word: str
    record_count: int = 0
    error: str | None = None
    fallback_used: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchResult:
    """Result bundle returned by :func:`run_batch`."""

    records: tuple[OutputRecord, ...]
    outcomes: tuple[WordOutcome, ...]

    @property
    def failures(self) -> tuple[WordOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)


def extract_records(
    document: Any,
    word: str,
    rule_set: RuleSet,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[OutputRecord]:
    """Turn one parsed document into vocabulary records.

    The call is pure computation over the in-memory tree and never raises
    for any document shape.

    Args:
        document: Parsed JSON document.
        word: Word the document was retrieved for.
        rule_set: Mappings and list declarations to apply.
        max_depth: Descent bound.

    Returns:
        Records in document traversal order.
    """

    traversal = collect_branches(document, rule_set, max_depth)
    return resolve_records(traversal, word)


def _unique_words(words: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for word in words:
        word = word.strip()
        if not word or word in seen:
            continue
        seen.add(word)
        ordered.append(word)
    return ordered


def run_batch(
    words: Iterable[str],
    rule_set: RuleSet,
    fetch: DocumentSource,
    settings: ExtractionSettings | None = None,
) -> BatchResult:
    """Retrieve and extract each word in turn.

    Words are processed sequentially. A ``RetrievalError`` for one word is
    logged and recorded in its outcome; the remaining words still run.

    Args:
        words: Words to process; blanks and repeats are skipped.
        rule_set: Mappings and list declarations to apply.
        fetch: Returns the parsed document for a word.
        settings: Extraction settings (depth bound).

    Returns:
        ``BatchResult`` with all records and one outcome per word.

    Raises:
        ValueError: If a produced record violates the output contract.
    """

    settings = settings or ExtractionSettings()
    records: list[OutputRecord] = []
    outcomes: list[WordOutcome] = []

    for word in _unique_words(words):
        try:
            document = fetch(word)
        except RetrievalError as exc:
            logger.warning("Skipping %s: %s", word, exc)
            outcomes.append(WordOutcome(word=word, error=str(exc)))
            continue

        traversal = collect_branches(document, rule_set, settings.max_depth)
        word_records = resolve_records(traversal, word)
        logger.info("Extracted %d records for %s", len(word_records), word)
        records.extend(word_records)
        outcomes.append(
            WordOutcome(
                word=word,
                record_count=len(word_records),
                fallback_used=traversal.fallback_used,
            )
        )

    validate_records(records)
    return BatchResult(records=tuple(records), outcomes=tuple(outcomes))
