"""Rule-driven vocabulary extraction pipeline package."""

from .models import Candidate, HistoryStep, ListDeclaration, MappingRule, RuleSet
from .pipeline import BatchResult, WordOutcome, extract_records, run_batch

__all__ = [
    "MappingRule",
    "ListDeclaration",
    "Candidate",
    "HistoryStep",
    "RuleSet",
    "BatchResult",
    "WordOutcome",
    "extract_records",
    "run_batch",
]
