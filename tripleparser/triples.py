"""Triple validation, identity keys and order-preserving deduplication."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from tripleparser.items import EAVTriple, SPOTriple, Triple

logger = logging.getLogger(__name__)

_EAV_FIELDS = ("entity", "attribute", "value")
_SPO_FIELDS = ("subject", "predicate", "object")

# Accepted spellings of the variant tag → canonical model
_TAGS: dict[str, type[EAVTriple] | type[SPOTriple]] = {
    "eav_triple": EAVTriple,
    "eav": EAVTriple,
    "spo_triple": SPOTriple,
    "spo": SPOTriple,
}


def _model_for(raw: dict[str, Any]) -> type[EAVTriple] | type[SPOTriple] | None:
    tag = raw.get("type")
    if isinstance(tag, str) and tag.strip():
        return _TAGS.get(tag.strip().lower())
    # Untagged: classify by shape
    if all(f in raw for f in _SPO_FIELDS):
        return SPOTriple
    if all(f in raw for f in _EAV_FIELDS):
        return EAVTriple
    return None


def parse_triple(raw: Any) -> Triple | None:
    """Validate one raw triple; return None when it breaks the triple invariants.

    Accepts a tagged object (``eav_triple``/``spo_triple``, or the short
    ``eav``/``spo`` spellings), an untagged object with a complete field set,
    or a bare ``[subject, predicate, object]`` array.
    """
    if isinstance(raw, list):
        if len(raw) != 3:
            return None
        raw = dict(zip(_SPO_FIELDS, raw, strict=True))
        model: type[EAVTriple] | type[SPOTriple] | None = SPOTriple
    elif isinstance(raw, dict):
        model = _model_for(raw)
    else:
        return None
    if model is None:
        return None

    fields = _EAV_FIELDS if model is EAVTriple else _SPO_FIELDS
    try:
        return model(**{f: raw.get(f) for f in fields})
    except ValidationError:
        return None


def is_valid(raw: Any) -> bool:
    return parse_triple(raw) is not None


def parse_triples(raws: Iterable[Any]) -> list[Triple]:
    """Validate every element of *raws*, silently dropping invalid ones."""
    triples: list[Triple] = []
    dropped = 0
    for raw in raws:
        triple = parse_triple(raw)
        if triple is None:
            dropped += 1
            continue
        triples.append(triple)
    if dropped:
        logger.debug("Dropped %d invalid triple(s)", dropped)
    return triples


def triple_key(triple: Triple) -> str:
    """Case-insensitive identity key, e.g. ``spo:website:has section:about us``."""
    return triple.identity_key


def dedupe_triples(triples: Iterable[Triple]) -> list[Triple]:
    """Drop repeated facts, keeping the first occurrence of each key."""
    seen: set[str] = set()
    unique: list[Triple] = []
    for triple in triples:
        key = triple_key(triple)
        if key in seen:
            continue
        seen.add(key)
        unique.append(triple)
    return unique


def merge_triples(
    structured: Iterable[Triple],
    model: Iterable[Triple],
) -> list[Triple]:
    """Structured-data triples first, then model triples, deduplicated."""
    return dedupe_triples([*structured, *model])
