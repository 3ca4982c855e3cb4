"""File-backed store of rule sets keyed by source key."""

from __future__ import annotations

from dataclasses import dataclass, replace
import json
import logging
from pathlib import Path
import time

from vocab_pipeline.io.rules_io import RuleImportError, rule_set_from_blob, rule_set_to_blob
from vocab_pipeline.models import RuleSet

logger = logging.getLogger(__name__)


def current_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class RuleRepository:
    """JSON document mapping each source key to ``{mappings, lists, updatedAt}``.

    The repository is path-scoped and reads the file on every call, so two
    stores pointed at the same file always see each other's saves. A missing
    file behaves as an empty repository.
    """

    path: Path

    def load_all(self) -> dict[str, RuleSet]:
        """Load every stored rule set.

        Entries that fail validation are skipped with a warning rather than
        hiding the rest of the file.

        Returns:
            Mapping of source key to rule set, in file order.

        Raises:
            ValueError: If the file is not a JSON object.
        """

        if not self.path.exists():
            return {}

        payload = self._read_payload()
        if not isinstance(payload, dict):
            raise ValueError(f"Rule repository {self.path} must hold a JSON object")

        rule_sets: dict[str, RuleSet] = {}
        for source_key, blob in payload.items():
            try:
                rule_sets[source_key] = rule_set_from_blob(blob, source_key=source_key)
            except RuleImportError as exc:
                logger.warning("Skipping stored rules for %s: %s", source_key, exc)
        return rule_sets

    def _read_payload(self) -> object:
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Rule repository {self.path} is not valid JSON: {exc}") from exc

    def load(self, source_key: str) -> RuleSet | None:
        return self.load_all().get(source_key)

    def source_keys(self) -> list[str]:
        return list(self.load_all())

    def save(self, rule_set: RuleSet, updated_at: int | None = None) -> RuleSet:
        """Write ``rule_set`` under its source key, keeping all other keys.

        Args:
            rule_set: Rules to persist.
            updated_at: Timestamp to record; defaults to the current time in
                epoch milliseconds.

        Returns:
            The saved rule set carrying its new ``updated_at``.
        """

        stamped = replace(
            rule_set, updated_at=current_millis() if updated_at is None else updated_at
        )

        payload: dict[str, dict] = {}
        if self.path.exists():
            existing = self._read_payload()
            if isinstance(existing, dict):
                payload = existing

        blob = rule_set_to_blob(stamped)
        del blob["sourceKey"]
        payload[stamped.source_key] = blob

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        logger.debug("Saved %d rules for %s", len(stamped.mappings), stamped.source_key)
        return stamped
