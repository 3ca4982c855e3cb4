"""Runtime configuration for extraction and document retrieval."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

DEFAULT_MAX_DEPTH = 40
MAX_DEPTH_CEILING = 200
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "vocab-pipeline/0.1"


@dataclass(frozen=True)
class ExtractionSettings:
    """Validated settings shared by the CLI, fetcher, and traversal engine.

    ``max_depth`` bounds recursive descent; it is capped well below the
    interpreter recursion limit.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not 1 <= self.max_depth <= MAX_DEPTH_CEILING:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_CEILING}")
        if self.http_timeout <= 0:
            raise ValueError("http_timeout must be positive")
        if not self.user_agent.strip():
            raise ValueError("user_agent cannot be empty")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        raw_depth = source.get("VOCAB_PIPELINE_MAX_DEPTH", "").strip()
        raw_timeout = source.get("VOCAB_PIPELINE_HTTP_TIMEOUT", "").strip()
        user_agent = source.get("VOCAB_PIPELINE_USER_AGENT", DEFAULT_USER_AGENT).strip()

        try:
            max_depth = int(raw_depth) if raw_depth else DEFAULT_MAX_DEPTH
        except ValueError as exc:
            raise ValueError(f"VOCAB_PIPELINE_MAX_DEPTH must be an integer, got {raw_depth!r}") from exc

        try:
            http_timeout = float(raw_timeout) if raw_timeout else DEFAULT_HTTP_TIMEOUT
        except ValueError as exc:
            raise ValueError(
                f"VOCAB_PIPELINE_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from exc

        return cls(max_depth=max_depth, http_timeout=http_timeout, user_agent=user_agent)


def bounded_max_depth(max_depth: int) -> int:
    """Clamp a traversal depth bound into ``[0, MAX_DEPTH_CEILING]``."""

    return max(0, min(int(max_depth), MAX_DEPTH_CEILING))
