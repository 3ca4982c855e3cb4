"""Data models shared by the rule store, traversal engine, and resolver.

Rules and history snapshots are immutable so a snapshot taken by the rule
store can never be changed by a later edit, and the traversal engine can treat
the rule set as read-only for the length of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

OutputRecord = dict[str, Any]


@dataclass(frozen=True)
class MappingRule:
    """Route the node found at ``path`` to output field ``field``.

    ``weight`` orders competing candidates (lower wins). Base rules are
    collected once over the whole document and copied into every record.
    """

    path: str
    field: str
    weight: int = 1
    is_base: bool = False


@dataclass(frozen=True)
class ListDeclaration:
    """Normalized path whose node is iterated as a fan-out dimension."""

    path: str


@dataclass(frozen=True)
class Candidate:
    """Unsanitized contender value for one output field."""

    value: Any
    weight: int


ExtractionContext = Mapping[str, tuple[Candidate, ...]]


@dataclass(frozen=True)
class HistoryStep:
    """Snapshot of the rule store contents for undo/redo."""

    mappings: tuple[MappingRule, ...] = ()
    lists: tuple[ListDeclaration, ...] = ()


@dataclass(frozen=True)
class RuleSet:
    """Mappings and list declarations scoped to one source key.

    The source key is usually the URL template the rules were written
    against. ``updated_at`` is epoch milliseconds of the last save, or
    ``None`` for rule sets that were never persisted.
    """

    source_key: str
    mappings: tuple[MappingRule, ...] = field(default_factory=tuple)
    lists: tuple[ListDeclaration, ...] = field(default_factory=tuple)
    updated_at: int | None = None

    @property
    def list_paths(self) -> tuple[str, ...]:
        return tuple(item.path for item in self.lists)
