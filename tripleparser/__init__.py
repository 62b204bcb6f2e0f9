"""tripleparser - turn fetched web pages into deduplicated knowledge triples.

Quick single-page usage::

    from tripleparser import TripleParser

    parser = TripleParser(api_key="sk-...", language="en")
    record = parser.parse(html, url="https://example.com/about")
    for triple in record.triples:
        print(triple.model_dump())

Batch usage::

    from tripleparser import process_batch, to_json

    batch = process_batch({"https://a.example": html_a}, api_key="sk-...")
    to_json(batch, "out/extracted-data.json")

Outline of a page's headings::

    from tripleparser import build_hierarchy, extract_content

    outline = build_hierarchy(extract_content(html).headings)
"""

from tripleparser.errors import (
    EmptyContentError,
    ExternalServiceError,
    FetchError,
    ParseError,
    ResponseFormatError,
    TripleParserError,
)
from tripleparser.export import outline_to_markdown, to_json, to_jsonl
from tripleparser.extractors.content import extract_content
from tripleparser.extractors.structured_data import normalize_structured_data
from tripleparser.hierarchy import build_hierarchy, flatten_hierarchy
from tripleparser.items import (
    BatchResult,
    EAVTriple,
    ExtractedContent,
    ExtractionRecord,
    Heading,
    HierarchyNode,
    SPOTriple,
)
from tripleparser.parser import TripleParser
from tripleparser.pipeline import extract_urls, process_batch, process_page
from tripleparser.triples import dedupe_triples, merge_triples

__version__ = "0.1.0"
__all__ = [
    "BatchResult",
    "EAVTriple",
    "EmptyContentError",
    "ExternalServiceError",
    "ExtractedContent",
    "ExtractionRecord",
    "FetchError",
    "Heading",
    "HierarchyNode",
    "ParseError",
    "ResponseFormatError",
    "SPOTriple",
    "TripleParser",
    "TripleParserError",
    "build_hierarchy",
    "dedupe_triples",
    "extract_content",
    "extract_urls",
    "flatten_hierarchy",
    "merge_triples",
    "normalize_structured_data",
    "outline_to_markdown",
    "process_batch",
    "process_page",
    "to_json",
    "to_jsonl",
]
