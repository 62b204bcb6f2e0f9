"""Pipeline configuration: defaults → YAML file → environment → overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

from tripleparser import settings

# Environment variable → config field
_ENV_VARS: dict[str, str] = {
    "OPENAI_API_KEY": "api_key",
    "TRIPLEPARSER_API_URL": "api_url",
    "TRIPLEPARSER_MODEL": "model",
    "TRIPLEPARSER_LANGUAGE": "language",
    "TRIPLEPARSER_MAX_WORKERS": "max_workers",
    "TRIPLEPARSER_TIMEOUT": "timeout",
}


class PipelineConfig(BaseModel):
    """Resolved settings for one extraction run."""

    model_config = {"frozen": True, "extra": "ignore"}

    api_key: SecretStr | None = None
    api_url: str = settings.API_URL
    model: str = settings.MODEL
    temperature: float = Field(settings.TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(settings.MAX_TOKENS, gt=0)
    timeout: float = Field(settings.REQUEST_TIMEOUT, gt=0)
    language: str = settings.DEFAULT_LANGUAGE
    content_char_limit: int = Field(settings.CONTENT_CHAR_LIMIT, gt=0)
    max_workers: int = Field(settings.MAX_WORKERS, ge=1)
    fetch_timeout: float = Field(settings.FETCH_TIMEOUT, gt=0)
    user_agent: str = settings.USER_AGENT

    def api_key_value(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""


def _read_yaml(path: str | Path) -> dict[str, Any]:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    section = data.get("tripleparser", data)
    return dict(section) if isinstance(section, dict) else {}


def _read_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for var, key in _ENV_VARS.items():
        raw = env.get(var, "").strip()
        if raw:
            values[key] = raw
    return values


def load_config(
    path: str | Path | None = None,
    *,
    environ: dict[str, str] | None = None,
    **overrides: Any,
) -> PipelineConfig:
    """Build a :class:`PipelineConfig`.

    Args:
        path:      Optional YAML file; keys may sit at the top level or under
                   a ``tripleparser:`` section.
        environ:   Environment mapping (defaults to ``os.environ``).
        overrides: Explicit values; ``None`` entries are ignored.

    Raises:
        pydantic.ValidationError: When a resolved value is invalid.
    """
    merged: dict[str, Any] = {}
    if path:
        merged.update(_read_yaml(path))
    merged.update(_read_env(environ))
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineConfig.model_validate(merged)
