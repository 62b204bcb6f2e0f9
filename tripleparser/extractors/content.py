"""HTML structural parser: visible text, headings and JSON-LD blocks.

Usage::

    from tripleparser.extractors.content import extract_content

    content = extract_content(html)
    print(content.main_content)
    for heading in content.headings:
        print(heading.level, heading.text, heading.section_context, heading.importance)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from tripleparser.errors import ParseError
from tripleparser.extractors.dom import (
    Element,
    build_tree,
    parse_html,
    visible_text,
    walk_with_ancestors,
)
from tripleparser.extractors.structured_data import normalize_structured_data
from tripleparser.items import ExtractedContent, Heading

logger = logging.getLogger(__name__)

# Heading tags → level number
_HEADING_LEVELS: dict[str, int] = {f"h{i}": i for i in range(1, 7)}

_SECTION_TAGS: frozenset[str] = frozenset({"article", "section", "main"})

MAIN_CONTEXT = "main"

# Importance scoring
_SIBLING_SAMPLE_SIZE = 3
_LONG_CONTEXT_CHARS = 100
_MIN_IMPORTANCE = 1
_MAX_IMPORTANCE = 10

_JSONLD_TYPE_RE = re.compile(r"^\s*application/ld\+json\s*$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

def _is_section(el: Element) -> bool:
    return el.tag in _SECTION_TAGS or el.get("role").strip().lower() == "main"


def heading_context(ancestors: tuple[Element, ...]) -> str:
    """Name the nearest enclosing article/section/main container.

    The container's ``id`` wins when present; otherwise ``<main>`` and
    ``[role=main]`` map to ``"main"``, and an article or section is named by
    its first class token, falling back to its tag name.
    Headings outside any container get ``"main"``.
    """
    for ancestor in reversed(ancestors):
        if not _is_section(ancestor):
            continue
        anchor = ancestor.get("id").strip()
        if anchor:
            return anchor
        if ancestor.tag == "main" or ancestor.get("role").strip().lower() == "main":
            return MAIN_CONTEXT
        classes = ancestor.get("class").split()
        if classes:
            return classes[0]
        return ancestor.tag
    return MAIN_CONTEXT


def score_importance(level: int, context: str, sibling_text: str) -> int:
    score = 7 - level
    if context == MAIN_CONTEXT:
        score += 2
    if len(sibling_text) > _LONG_CONTEXT_CHARS:
        score += 1
    return max(_MIN_IMPORTANCE, min(_MAX_IMPORTANCE, score))


def extract_headings(root: Element) -> list[Heading]:
    """Return every non-empty ``<h1>``-``<h6>`` under *root* in document order."""
    headings: list[Heading] = []
    for el, ancestors in walk_with_ancestors(root):
        level = _HEADING_LEVELS.get(el.tag)
        if level is None:
            continue
        text = el.text()
        if not text:
            continue
        context = heading_context(ancestors)
        siblings = (
            ancestors[-1].following_siblings(el, _SIBLING_SAMPLE_SIZE) if ancestors else []
        )
        sibling_text = " ".join(t for t in (s.text() for s in siblings) if t)
        headings.append(
            Heading(
                level=level,
                text=text,
                section_context=context,
                importance=score_importance(level, context, sibling_text),
            ),
        )
    return headings


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------

def _decode_jsonld(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ParseError(f"Invalid JSON-LD block: {exc}", snippet=raw[:80]) from exc


def _flatten_jsonld(raw: Any) -> list[dict[str, Any]]:
    nodes: list[dict[str, Any]] = []
    for node in raw if isinstance(raw, list) else [raw]:
        if not isinstance(node, dict):
            continue
        graph = node.get("@graph")
        if isinstance(graph, list):
            nodes.extend(n for n in graph if isinstance(n, dict))
        else:
            nodes.append(node)
    return nodes


def collect_jsonld(
    soup: BeautifulSoup,
    *,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[dict[str, Any]]:
    """Decode every JSON-LD script in *soup*, flattening ``@graph`` wrappers.

    A block that fails to decode is logged and skipped.
    """
    log = log or logger
    objects: list[dict[str, Any]] = []
    for script in soup.find_all("script", attrs={"type": _JSONLD_TYPE_RE}):
        if not isinstance(script, Tag):
            continue
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            log.debug("Skipping empty JSON-LD block")
            continue
        try:
            decoded = _decode_jsonld(raw)
        except ParseError as exc:
            log.warning("%s (starts with %r)", exc, exc.snippet)
            continue
        objects.extend(_flatten_jsonld(decoded))
    return objects


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------

def declared_language(soup: BeautifulSoup) -> str | None:
    """Return the language the page declares about itself, if any."""
    html_tag = soup.find("html")
    if isinstance(html_tag, Tag):
        lang = str(html_tag.get("lang") or "").strip()
        if lang:
            return lang.replace("_", "-").split("-")[0].lower()[:5]

    og_locale = soup.find("meta", property="og:locale")
    if isinstance(og_locale, Tag):
        locale = str(og_locale.get("content") or "").strip()
        if locale:
            return locale.replace("_", "-").split("-")[0].lower()[:5]

    meta_lang = soup.find("meta", attrs={"http-equiv": re.compile("^content-language$", re.I)})
    if isinstance(meta_lang, Tag):
        content = str(meta_lang.get("content") or "").strip()
        if content:
            return content.split(",")[0].split("-")[0].strip().lower()[:5]
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(
    html: str,
    *,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> ExtractedContent:
    """Parse *html* into visible text, headings and normalized structured data.

    Returns an empty :class:`~tripleparser.items.ExtractedContent` when the
    document has no ``<body>``.  Never raises for malformed JSON-LD.
    """
    log = log or logger
    soup = parse_html(html)
    body = build_tree(soup)
    if body is None:
        log.debug("No content root found; returning empty extraction")
        return ExtractedContent()

    main_content = visible_text(body)
    headings = extract_headings(body)
    raw_objects = collect_jsonld(soup, log=log)
    structured = normalize_structured_data(raw_objects)

    log.debug(
        "Extracted %d chars of text, %d headings, %d structured items (%d raw)",
        len(main_content), len(headings), len(structured), len(raw_objects),
    )
    return ExtractedContent(
        main_content=main_content,
        headings=headings,
        structured_data=structured,
        language=declared_language(soup),
    )
