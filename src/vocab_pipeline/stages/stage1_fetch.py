"""Stage 1: Retrieve the JSON document for a word.

Documents come either from an HTTP API addressed by a URL template with a
``{word}`` placeholder, or from a local JSON file. Every failure is reported
as ``RetrievalError`` so the batch loop can skip the word and move on.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from vocab_pipeline.settings import ExtractionSettings

logger = logging.getLogger(__name__)

WORD_PLACEHOLDER = "{word}"


@dataclass
class RetrievalError(RuntimeError):
    """Raised when a word's document cannot be fetched or parsed."""

    word: str
    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (word={self.word}, source={self.source})"


def build_request_url(template: str, word: str) -> str:
    """Substitute the URL-quoted word into ``template``.

    Raises:
        ValueError: If the template lacks the ``{word}`` placeholder.
    """

    if WORD_PLACEHOLDER not in template:
        raise ValueError(f"URL template must contain {WORD_PLACEHOLDER}: {template}")
    return template.replace(WORD_PLACEHOLDER, quote(word, safe=""))


class DocumentFetcher:
    """Fetch and decode dictionary-API documents over HTTP.

    Args:
        url_template: Template with a ``{word}`` placeholder.
        settings: Timeout and user agent.
        client: Pre-built client, mainly for tests; when omitted the fetcher
            owns a client and closes it in :meth:`close`.
    """

    def __init__(
        self,
        url_template: str,
        settings: ExtractionSettings | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        if WORD_PLACEHOLDER not in url_template:
            raise ValueError(f"URL template must contain {WORD_PLACEHOLDER}: {url_template}")
        settings = settings or ExtractionSettings()
        self._url_template = url_template
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.user_agent},
            follow_redirects=True,
        )

    def fetch(self, word: str) -> Any:
        url = build_request_url(self._url_template, word)
        logger.debug("Fetching %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RetrievalError(
                word=word, source=url, message=f"HTTP error {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RetrievalError(word=word, source=url, message=f"Request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise RetrievalError(word=word, source=url, message="Response is not valid JSON") from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DocumentFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def load_document(path: Path, word: str = "") -> Any:
    """Read a local JSON document, reporting problems as ``RetrievalError``."""

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RetrievalError(word=word, source=str(path), message=f"Cannot read file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RetrievalError(word=word, source=str(path), message=f"Invalid JSON: {exc}") from exc
