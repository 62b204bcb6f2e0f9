"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

_CONFIG_ENV_VARS = (
    "OPENAI_API_KEY",
    "TRIPLEPARSER_API_URL",
    "TRIPLEPARSER_MODEL",
    "TRIPLEPARSER_LANGUAGE",
    "TRIPLEPARSER_MAX_WORKERS",
    "TRIPLEPARSER_TIMEOUT",
)


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell config out of every test."""
    for var in _CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def product_html() -> str:
    return _read_fixture("product.html")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def scripts_only_html() -> str:
    return _read_fixture("scripts_only.html")


def chat_response(content: str) -> dict[str, Any]:
    """A minimal chat-completions body whose first choice says *content*."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def mock_http_response(body: bytes, headers: Any = None) -> MagicMock:
    """Stand-in for the context manager returned by ``urllib.request.urlopen``."""
    resp = MagicMock()
    resp.read.return_value = body
    resp.headers = headers
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


def json_http_response(data: Any) -> MagicMock:
    return mock_http_response(json.dumps(data).encode("utf-8"))
