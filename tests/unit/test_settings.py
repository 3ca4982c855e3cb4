"""Unit tests for environment-driven extraction settings."""

from __future__ import annotations

import pytest

from vocab_pipeline.settings import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_USER_AGENT,
    MAX_DEPTH_CEILING,
    ExtractionSettings,
)


def test_from_env_defaults() -> None:
    settings = ExtractionSettings.from_env({})

    assert settings == ExtractionSettings(
        max_depth=DEFAULT_MAX_DEPTH,
        http_timeout=DEFAULT_HTTP_TIMEOUT,
        user_agent=DEFAULT_USER_AGENT,
    )


def test_from_env_reads_overrides() -> None:
    settings = ExtractionSettings.from_env(
        {
            "VOCAB_PIPELINE_MAX_DEPTH": "12",
            "VOCAB_PIPELINE_HTTP_TIMEOUT": "2.5",
            "VOCAB_PIPELINE_USER_AGENT": "tester/1.0",
        }
    )

    assert settings.max_depth == 12
    assert settings.http_timeout == 2.5
    assert settings.user_agent == "tester/1.0"


@pytest.mark.parametrize(
    ("environ", "message"),
    [
        ({"VOCAB_PIPELINE_MAX_DEPTH": "deep"}, "VOCAB_PIPELINE_MAX_DEPTH"),
        ({"VOCAB_PIPELINE_HTTP_TIMEOUT": "soon"}, "VOCAB_PIPELINE_HTTP_TIMEOUT"),
        ({"VOCAB_PIPELINE_MAX_DEPTH": str(MAX_DEPTH_CEILING + 1)}, "max_depth"),
        ({"VOCAB_PIPELINE_HTTP_TIMEOUT": "0"}, "http_timeout"),
        ({"VOCAB_PIPELINE_USER_AGENT": "  "}, "user_agent"),
    ],
)
def test_from_env_rejects_bad_values(environ: dict[str, str], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        ExtractionSettings.from_env(environ)
