"""Model-backed triple extraction.

Builds one chat-completions request per page, sends it over HTTPS with the
stdlib ``urllib`` client and turns the free-text reply into validated
:class:`~tripleparser.items.EAVTriple` / :class:`~tripleparser.items.SPOTriple`
objects.  Nothing here retries: a failed call surfaces as
:class:`~tripleparser.errors.ExternalServiceError` and the caller decides.

Usage::

    from tripleparser.extractors.content import extract_content
    from tripleparser.llm import extract_triples

    content = extract_content(html)
    triples = extract_triples(content, api_key="sk-...", language="de")
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from tripleparser.config import PipelineConfig
from tripleparser.errors import ExternalServiceError, ResponseFormatError
from tripleparser.items import ExtractedContent, Triple
from tripleparser.triples import parse_triples

logger = logging.getLogger(__name__)

# Per-language instruction placed at the top of the user prompt
INSTRUCTIONS: dict[str, str] = {
    "en": "Extract meaningful triples in English.",
    "de": "Extrahiere bedeutungsvolle Tripel auf Deutsch.",
    "fr": "Extrayez des triplets significatifs en français.",
    "es": "Extrae triples significativos en español.",
    "nl": "Extraheer betekenisvolle triples in het Nederlands.",
    "it": "Estrai triple significative in italiano.",
}

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "nl": "Dutch",
    "it": "Italian",
}

_EXAMPLE_TRIPLES: list[dict[str, str]] = [
    {"type": "spo_triple", "subject": "Website", "predicate": "has section", "object": "About Us"},
    {"type": "eav_triple", "entity": "Company", "attribute": "offers", "value": "Services"},
]

_JSON_DECODER = json.JSONDecoder()


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

def build_prompt(content: ExtractedContent, language: str, char_limit: int = 1500) -> str:
    """Return the user prompt for *content*; main text is cut to *char_limit*."""
    instruction = INSTRUCTIONS.get(language, INSTRUCTIONS["en"])
    heading_lines = "\n".join(f"H{h.level}: {h.text}" for h in content.headings) or "(none)"
    body = content.main_content[:char_limit] or "(none)"
    example = json.dumps(_EXAMPLE_TRIPLES, indent=2, ensure_ascii=False)

    return f"""{instruction}

Extract factual information triples from the web page below.

Headings:
{heading_lines}

Content:
{body}

Return ONLY a valid JSON array. Every element must be one of:
- {{"type": "eav_triple", "entity": ..., "attribute": ..., "value": ...}}
- {{"type": "spo_triple", "subject": ..., "predicate": ..., "object": ...}}

Example format:
{example}"""


def build_messages(
    content: ExtractedContent,
    language: str,
    char_limit: int = 1500,
) -> list[dict[str, str]]:
    name = LANGUAGE_NAMES.get(language, language)
    return [
        {
            "role": "system",
            "content": (
                f"You are an expert in extracting information in {name}. "
                f"Format all responses in {name}."
            ),
        },
        {"role": "user", "content": build_prompt(content, language, char_limit)},
    ]


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

def _error_message(body: str) -> str:
    """Pull ``error.message`` out of a provider error body, if there is one."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, ValueError):
        return body.strip()[:300] or "Unknown error"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return "Unknown error"


def post_chat_completion(
    payload: dict[str, Any],
    api_key: str,
    *,
    api_url: str,
    timeout: float,
) -> dict[str, Any]:
    """POST *payload* to *api_url* and return the decoded JSON body.

    Raises:
        ExternalServiceError: On network failure or a non-2xx status.
        ResponseFormatError:  When a 2xx body is not a JSON object.
    """
    req = urllib.request.Request(
        api_url,
        data=json.dumps(payload).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
        method="POST",
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw: bytes = resp.read()
    except urllib.error.HTTPError as exc:
        body = ""
        try:
            body = exc.read().decode("utf-8", errors="replace")
        except OSError:
            body = ""
        message = _error_message(body) if body else str(exc.reason or "Unknown error")
        raise ExternalServiceError(
            f"Model API error (HTTP {exc.code}): {message}",
            status=exc.code,
            body=body,
        ) from exc
    except urllib.error.URLError as exc:
        raise ExternalServiceError(f"Model API request failed: {exc.reason}") from exc
    except OSError as exc:
        raise ExternalServiceError(f"Model API request failed: {exc}") from exc
    except (http.client.HTTPException, ValueError) as exc:
        raise ExternalServiceError(f"Model API request failed: {exc}") from exc

    try:
        data = json.loads(raw.decode("utf-8", errors="replace"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ResponseFormatError("Model API returned a body that is not JSON") from exc
    if not isinstance(data, dict):
        raise ResponseFormatError("Invalid API response structure")
    return data


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def message_content(data: dict[str, Any]) -> str:
    """Return ``choices[0].message.content`` or raise ResponseFormatError."""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ResponseFormatError("Invalid API response structure")
    message = choices[0].get("message")
    if not isinstance(message, dict) or not isinstance(message.get("content"), str):
        raise ResponseFormatError("Invalid API response structure")
    return message["content"]


def extract_json_array(text: str) -> list[Any]:
    """Return the first JSON array embedded in *text*.

    Leading and trailing prose (or Markdown fences) around the array is
    ignored.
    """
    start = text.find("[")
    while start != -1:
        try:
            value, _end = _JSON_DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, list):
                return value
        start = text.find("[", start + 1)
    raise ResponseFormatError("Failed to parse model response content as a JSON array")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_triples(
    content: ExtractedContent,
    api_key: str,
    language: str = "en",
    *,
    config: PipelineConfig | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[Triple]:
    """Ask the model for triples describing *content*.

    Args:
        content:  Parser output for one page.
        api_key:  Bearer credential for the model provider.
        language: Two-letter code; unknown codes get the English instruction.
        config:   Model endpoint/parameters; defaults from
                  :mod:`tripleparser.settings`.
        log:      Logger to report through (module logger by default).

    Returns:
        Valid triples in reply order; invalid elements are dropped.

    Raises:
        ExternalServiceError: Transport failure or non-2xx status.
        ResponseFormatError:  Reply without a parseable JSON array.
    """
    log = log or logger
    config = config or PipelineConfig()
    payload = {
        "model": config.model,
        "messages": build_messages(content, language, config.content_char_limit),
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }

    log.debug("Requesting triples from %s (model=%s, language=%s)",
              config.api_url, config.model, language)
    data = post_chat_completion(
        payload, api_key, api_url=config.api_url, timeout=config.timeout,
    )
    reply = message_content(data)
    raw_items = extract_json_array(reply)
    triples = parse_triples(raw_items)
    log.debug("Model returned %d item(s), %d valid triple(s)", len(raw_items), len(triples))
    return triples
