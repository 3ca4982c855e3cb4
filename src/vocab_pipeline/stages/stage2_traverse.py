"""Stage 2: Walk a document and split it into terminal branches.

The walk is depth-first over the document tree. Every node is addressed by a
concrete path (``root.senses.0.pos``) and matched against rules by its
normalized path (``root.senses.pos``). Candidates gathered on the way down are
carried in an ``ExtractionContext`` that is copied at each step, so sibling
subtrees never see each other's values. Only base rules reach across
branches, through the separate base pass.

Nodes at a declared list path fan out: each item becomes its own branch. When
no declared list lies further below an item, the item is a terminal branch and
its whole subtree is harvested into the branch context handed to the resolver.

Depth bounds above ``MAX_DEPTH_CEILING`` are clamped so the recursive walk
stays well inside the interpreter recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Iterable, Sequence

from vocab_pipeline.mapping.paths import (
    ROOT_PATH,
    is_strict_descendant,
    join_path,
    normalize_path,
)
from vocab_pipeline.models import Candidate, ExtractionContext, MappingRule, RuleSet
from vocab_pipeline.settings import DEFAULT_MAX_DEPTH, bounded_max_depth

logger = logging.getLogger(__name__)

TerminalHandler = Callable[[ExtractionContext], None]
RulesByPath = dict[str, tuple[MappingRule, ...]]


@dataclass(frozen=True)
class TraversalResult:
    """Branches produced from one document.

    Attributes:
        base: Document-wide base candidates, shared by every branch.
        branches: One context per terminal branch, in document order.
        fallback_used: Whether no declared list matched and the whole
            document was treated as one branch.
    """

    base: ExtractionContext
    branches: tuple[ExtractionContext, ...]
    fallback_used: bool = False


def index_rules(rules: Iterable[MappingRule]) -> RulesByPath:
    """Group rules by normalized path, keeping rule order within a path."""

    grouped: dict[str, list[MappingRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.path, []).append(rule)
    return {path: tuple(items) for path, items in grouped.items()}


def _with_candidates(
    context: ExtractionContext, rules: Sequence[MappingRule], value: Any
) -> ExtractionContext:
    """Return a copy of ``context`` with one candidate per rule appended."""

    updated = dict(context)
    for rule in rules:
        updated[rule.field] = updated.get(rule.field, ()) + (Candidate(value, rule.weight),)
    return updated


def _children(node: Any, path: str) -> list[tuple[str, Any]]:
    if isinstance(node, dict):
        return [(join_path(path, key), value) for key, value in node.items()]
    if isinstance(node, list):
        return [(join_path(path, index), value) for index, value in enumerate(node)]
    return []


def _collect(
    node: Any,
    path: str,
    depth: int,
    rules_by_path: RulesByPath,
    max_depth: int,
    sink: dict[str, tuple[Candidate, ...]],
) -> None:
    """Record every rule match in the subtree at ``node`` into ``sink`` (pre-order)."""

    if depth > max_depth:
        logger.debug("Depth limit %d reached at %s", max_depth, path)
        return
    for rule in rules_by_path.get(normalize_path(path), ()):
        sink[rule.field] = sink.get(rule.field, ()) + (Candidate(node, rule.weight),)
    for child_path, child in _children(node, path):
        _collect(child, child_path, depth + 1, rules_by_path, max_depth, sink)


def collect_base_candidates(
    document: Any, rules: Iterable[MappingRule], max_depth: int = DEFAULT_MAX_DEPTH
) -> ExtractionContext:
    """Collect candidates for base rules over the whole document.

    The pass ignores list declarations entirely, so every record produced
    from ``document`` shares the same base table.

    Args:
        document: Parsed JSON document.
        rules: Mapping rules; only those flagged ``is_base`` are used.
        max_depth: Descent bound.

    Returns:
        Field id to candidates in document pre-order.
    """

    base_rules = index_rules(rule for rule in rules if rule.is_base)
    sink: dict[str, tuple[Candidate, ...]] = {}
    if base_rules:
        _collect(document, ROOT_PATH, 0, base_rules, bounded_max_depth(max_depth), sink)
    return sink


def harvest_document(
    document: Any, rules: Iterable[MappingRule], max_depth: int = DEFAULT_MAX_DEPTH
) -> ExtractionContext:
    """Treat the whole document as one branch and gather its non-base candidates."""

    branch_rules = index_rules(rule for rule in rules if not rule.is_base)
    sink: dict[str, tuple[Candidate, ...]] = {}
    _collect(document, ROOT_PATH, 0, branch_rules, bounded_max_depth(max_depth), sink)
    return sink


class _FanOutWalker:
    """Single-use walker holding the rule indexes for one traversal."""

    def __init__(
        self,
        rules: Iterable[MappingRule],
        list_paths: Iterable[str],
        on_terminal: TerminalHandler,
        max_depth: int,
    ) -> None:
        self._rules = index_rules(rule for rule in rules if not rule.is_base)
        self._list_paths = frozenset(list_paths)
        self._on_terminal = on_terminal
        self._max_depth = max_depth
        self.terminal_count = 0

    def _has_deeper_list(self, normalized: str) -> bool:
        return any(is_strict_descendant(lp, normalized) for lp in self._list_paths)

    def _bind(self, context: ExtractionContext, normalized: str, value: Any) -> ExtractionContext:
        rules = self._rules.get(normalized)
        return _with_candidates(context, rules, value) if rules else dict(context)

    def walk(self, node: Any, path: str, context: ExtractionContext, depth: int) -> None:
        if depth > self._max_depth:
            logger.debug("Depth limit %d reached at %s", self._max_depth, path)
            return

        normalized = normalize_path(path)
        context = self._bind(context, normalized, node)
        if normalized in self._list_paths and node is not None:
            self._fan_out(node, path, normalized, context, depth)
        elif isinstance(node, (dict, list)):
            self._descend(node, path, context, depth + 1)

    def _fan_out(
        self, node: Any, path: str, normalized: str, context: ExtractionContext, depth: int
    ) -> None:
        is_array = isinstance(node, list)
        items = node if is_array else [node]
        item_depth = depth + 1 if is_array else depth
        if item_depth > self._max_depth:
            logger.debug("Depth limit %d reached at %s", self._max_depth, path)
            return

        deeper = self._has_deeper_list(normalized)
        for index, item in enumerate(items):
            item_path = join_path(path, index) if is_array else path
            if deeper:
                self._descend(item, item_path, context, item_depth + 1)
                continue

            leaf = dict(context)
            for child_path, child in _children(item, item_path):
                _collect(child, child_path, item_depth + 1, self._rules, self._max_depth, leaf)
            self.terminal_count += 1
            self._on_terminal(leaf)

    def _descend(self, node: Any, path: str, context: ExtractionContext, depth: int) -> None:
        """Walk each child of ``node`` in order; ``depth`` is the children's depth."""

        for child_path, child in _children(node, path):
            self.walk(child, child_path, context, depth)


def traverse(
    document: Any,
    rule_set: RuleSet,
    on_terminal: TerminalHandler,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> int:
    """Walk ``document`` and call ``on_terminal`` once per terminal branch.

    Args:
        document: Parsed JSON document.
        rule_set: Mappings and list declarations to apply.
        on_terminal: Receives the branch context of each terminal branch, in
            document order.
        max_depth: Descent bound, clamped to ``MAX_DEPTH_CEILING``; deeper nodes
            are silently ignored.

    Returns:
        Number of terminal branches produced.
    """

    walker = _FanOutWalker(
        rule_set.mappings, rule_set.list_paths, on_terminal, bounded_max_depth(max_depth)
    )
    walker.walk(document, ROOT_PATH, {}, 0)
    return walker.terminal_count


def collect_branches(
    document: Any, rule_set: RuleSet, max_depth: int = DEFAULT_MAX_DEPTH
) -> TraversalResult:
    """Run the base pass and the fan-out walk for one document.

    When the walk yields no terminal branch but the rule set has mappings,
    the document is harvested once as a single branch. The base table from
    the first pass is reused for that fallback branch.

    Args:
        document: Parsed JSON document.
        rule_set: Mappings and list declarations to apply.
        max_depth: Descent bound.

    Returns:
        Base candidates and branch contexts ready for resolution.
    """

    base = collect_base_candidates(document, rule_set.mappings, max_depth)
    branches: list[ExtractionContext] = []
    count = traverse(document, rule_set, branches.append, max_depth)

    if count == 0 and rule_set.mappings:
        logger.debug("No declared list matched; treating the document as one branch")
        branches.append(harvest_document(document, rule_set.mappings, max_depth))
        return TraversalResult(base=base, branches=tuple(branches), fallback_used=True)

    return TraversalResult(base=base, branches=tuple(branches))
