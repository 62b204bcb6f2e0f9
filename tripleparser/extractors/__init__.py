"""Extraction sub-package: HTML structure, visible text and schema.org data."""

from .content import collect_jsonld, extract_content, extract_headings
from .dom import Element, Text, build_tree, visible_text
from .structured_data import normalize_structured_data, structured_to_triples

__all__ = [
    "Element",
    "Text",
    "build_tree",
    "collect_jsonld",
    "extract_content",
    "extract_headings",
    "normalize_structured_data",
    "structured_to_triples",
    "visible_text",
]
