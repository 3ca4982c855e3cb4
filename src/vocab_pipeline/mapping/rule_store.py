"""In-memory rule editing with bounded linear undo/redo.

The store holds the mappings and list declarations for the active source key.
Each edit replaces the rule tuples wholesale and appends an immutable
``HistoryStep``; undo and redo only move a cursor over those snapshots.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any

from vocab_pipeline.fields import is_known_field
from vocab_pipeline.io.rule_repository import RuleRepository
from vocab_pipeline.io.rules_io import rule_set_from_blob, rule_set_to_blob
from vocab_pipeline.mapping.paths import normalize_path
from vocab_pipeline.models import HistoryStep, ListDeclaration, MappingRule, RuleSet

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class RuleStore:
    """Editable rule set for one source key.

    Args:
        source_key: Key the current rules belong to, usually a URL template.
        repository: Optional persistence collaborator. When set, every change
            is written back and :meth:`switch_source` loads from it.
        history_limit: Maximum number of retained snapshots.
    """

    def __init__(
        self,
        source_key: str = "",
        *,
        repository: RuleRepository | None = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")

        self._source_key = source_key
        self._repository = repository
        self._history_limit = history_limit
        self._mappings: tuple[MappingRule, ...] = ()
        self._lists: tuple[ListDeclaration, ...] = ()
        self._history: list[HistoryStep] = [HistoryStep()]
        self._cursor = 0

        if repository is not None and source_key:
            self.switch_source(source_key)

    @property
    def source_key(self) -> str:
        return self._source_key

    @property
    def mappings(self) -> tuple[MappingRule, ...]:
        return self._mappings

    @property
    def lists(self) -> tuple[ListDeclaration, ...]:
        return self._lists

    @property
    def history(self) -> tuple[HistoryStep, ...]:
        return tuple(self._history)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._history) - 1

    @property
    def rule_set(self) -> RuleSet:
        return RuleSet(source_key=self._source_key, mappings=self._mappings, lists=self._lists)

    def rules_at(self, path: str) -> tuple[MappingRule, ...]:
        path = normalize_path(path)
        return tuple(rule for rule in self._mappings if rule.path == path)

    def is_list_path(self, path: str) -> bool:
        path = normalize_path(path)
        return any(item.path == path for item in self._lists)

    def set_mapping(self, path: str, field: str | None, *, record: bool = True) -> None:
        """Map ``path`` to ``field``, or clear its non-base rules.

        A path may carry rules for several fields at once; mapping a field
        that is already mapped at ``path`` leaves the store untouched.

        Args:
            path: Concrete or normalized path.
            field: Target field id, or ``None``/``""`` to clear every non-base
                rule at ``path``.
            record: Whether the edit is pushed onto the history.

        Raises:
            ValueError: If ``field`` is not in the field catalog.
        """

        path = normalize_path(path)
        if not field:
            mappings = tuple(r for r in self._mappings if not (r.path == path and not r.is_base))
        else:
            if not is_known_field(field):
                raise ValueError(f"Unknown field: {field}")
            if any(r.path == path and r.field == field and not r.is_base for r in self._mappings):
                return
            mappings = self._mappings + (MappingRule(path=path, field=field),)
        self._apply(mappings, self._lists, record)

    def remove_mapping(self, path: str, field: str, *, record: bool = True) -> None:
        """Drop every rule (base or not) mapping ``path`` to ``field``."""

        path = normalize_path(path)
        mappings = tuple(r for r in self._mappings if not (r.path == path and r.field == field))
        self._apply(mappings, self._lists, record)

    def set_weight(
        self, path: str, weight: int, field: str | None = None, *, record: bool = True
    ) -> None:
        """Set the priority of the rules at ``path`` (all of them unless ``field``).

        Weights below 1 are clamped to 1.
        """

        path = normalize_path(path)
        weight = max(1, int(weight))
        mappings = tuple(
            replace(r, weight=weight) if self._targets(r, path, field) else r
            for r in self._mappings
        )
        self._apply(mappings, self._lists, record)

    def toggle_base(self, path: str, field: str | None = None, *, record: bool = True) -> None:
        """Flip the base flag of the rules at ``path`` (all of them unless ``field``)."""

        path = normalize_path(path)
        mappings = tuple(
            replace(r, is_base=not r.is_base) if self._targets(r, path, field) else r
            for r in self._mappings
        )
        self._apply(mappings, self._lists, record)

    def toggle_list(self, path: str, *, record: bool = True) -> None:
        path = normalize_path(path)
        if self.is_list_path(path):
            lists = tuple(item for item in self._lists if item.path != path)
        else:
            lists = self._lists + (ListDeclaration(path),)
        self._apply(self._mappings, lists, record)

    def clear(self, *, record: bool = True) -> None:
        self._apply((), (), record)

    def undo(self) -> bool:
        """Step back one snapshot. Returns ``False`` at the oldest snapshot."""

        if not self.can_undo:
            return False
        self._cursor -= 1
        self._restore(self._history[self._cursor])
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns ``False`` at the newest snapshot."""

        if not self.can_redo:
            return False
        self._cursor += 1
        self._restore(self._history[self._cursor])
        return True

    def switch_source(self, source_key: str) -> RuleSet:
        """Make ``source_key`` active and load its rules.

        History is reset to a single snapshot of the loaded rules; rule sets
        stored for other keys are left untouched.

        Returns:
            The loaded rule set (empty when the key has no stored rules).

        Raises:
            ValueError: If the repository file is corrupt. The store is unchanged.
        """

        loaded = self._repository.load(source_key) if self._repository is not None else None
        if loaded is None:
            loaded = RuleSet(source_key=source_key)

        self._source_key = source_key
        self._mappings = loaded.mappings
        self._lists = loaded.lists
        self._history = [self._snapshot()]
        self._cursor = 0
        logger.debug(
            "Loaded %d rules and %d lists for %s",
            len(self._mappings),
            len(self._lists),
            source_key,
        )
        return loaded

    def import_rules(self, blob: Any, *, record: bool = True) -> RuleSet:
        """Replace the current rules with an imported blob.

        The blob's ``sourceKey`` is informational; rules are applied to the
        active source key.

        Raises:
            RuleImportError: If the blob is malformed. The store is unchanged.
        """

        imported = rule_set_from_blob(blob, source_key=self._source_key)
        self._apply(imported.mappings, imported.lists, record)
        return self.rule_set

    def export_rules(self) -> dict[str, Any]:
        return rule_set_to_blob(self.rule_set)

    @staticmethod
    def _targets(rule: MappingRule, path: str, field: str | None) -> bool:
        return rule.path == path and (field is None or rule.field == field)

    def _snapshot(self) -> HistoryStep:
        return HistoryStep(mappings=self._mappings, lists=self._lists)

    def _apply(
        self,
        mappings: tuple[MappingRule, ...],
        lists: tuple[ListDeclaration, ...],
        record: bool,
    ) -> None:
        if mappings == self._mappings and lists == self._lists:
            return
        self._mappings = mappings
        self._lists = lists
        if record:
            self._push(self._snapshot())
        self._persist()

    def _push(self, step: HistoryStep) -> None:
        del self._history[self._cursor + 1 :]
        self._history.append(step)
        overflow = len(self._history) - self._history_limit
        if overflow > 0:
            del self._history[:overflow]
        self._cursor = len(self._history) - 1

    def _restore(self, step: HistoryStep) -> None:
        self._mappings = step.mappings
        self._lists = step.lists
        self._persist()

    def _persist(self) -> None:
        if self._repository is not None and self._source_key:
            self._repository.save(self.rule_set)
