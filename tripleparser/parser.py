"""tripleparser.parser: High-level TripleParser class.

Bundles the model credential, language and worker settings into one reusable
object.

Usage::

    from tripleparser import TripleParser

    parser = TripleParser(api_key="sk-...", language="de", max_workers=4)

    # Pre-fetched HTML (one model call)
    record = parser.parse("<html><body><h1>Hello</h1></body></html>",
                          url="https://example.com")

    # Many pages at once
    batch = parser.parse_batch({"https://a.example": html_a,
                                "https://b.example": html_b})

    # Fetch + extract
    batch = parser.fetch(["https://example.com/about"])

    # Outline for presentation
    outline = parser.outline(record)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from tripleparser.config import PipelineConfig, load_config
from tripleparser.extractors.content import extract_content
from tripleparser.hierarchy import build_hierarchy
from tripleparser.items import (
    BatchResult,
    ExtractedContent,
    ExtractionRecord,
    HierarchyNode,
)
from tripleparser.pipeline import extract_urls, process_batch, process_page, require_api_key


class TripleParser:
    """Stateful entry point for the extraction pipeline.

    All parameters are optional; anything left out is taken from the YAML
    file at *config_path* (if given), then the environment, then
    :mod:`tripleparser.settings`.

    Args:
        api_key:     Model provider credential (``OPENAI_API_KEY``).
        language:    Target language code, or ``"auto"`` to follow the page.
        model:       Chat model name.
        max_workers: Concurrent pages in batch calls.
        config_path: Optional YAML config file.
        **options:   Any other :class:`~tripleparser.config.PipelineConfig`
                     field (``api_url``, ``timeout``, ``temperature`` ...).
    """

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        model: str | None = None,
        max_workers: int | None = None,
        config_path: str | Path | None = None,
        **options: Any,
    ) -> None:
        self._config: PipelineConfig = load_config(
            config_path,
            api_key=api_key,
            language=language,
            model=model,
            max_workers=max_workers,
            **options,
        )
        self._cancel = threading.Event()

    @property
    def config(self) -> PipelineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    def extract_content(self, html: str) -> ExtractedContent:
        """Structural parse only; no model call."""
        return extract_content(html)

    def parse(self, html: str, url: str = "") -> ExtractionRecord:
        """Run the full pipeline over pre-fetched *html*.

        Raises:
            ValueError: When no API key is configured.
        """
        return process_page(
            url,
            html,
            api_key=require_api_key(None, self._config),
            config=self._config,
        )

    def parse_batch(
        self,
        pages: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> BatchResult:
        """Run the pipeline over many pre-fetched pages concurrently."""
        self._cancel.clear()
        return process_batch(pages, config=self._config, cancel=self._cancel)

    def fetch(self, urls: Iterable[str]) -> BatchResult:
        """Fetch each URL once and run the pipeline over it."""
        self._cancel.clear()
        return extract_urls(urls, config=self._config, cancel=self._cancel)

    def cancel(self) -> None:
        """Stop a running batch: pages not yet started are skipped."""
        self._cancel.set()

    @staticmethod
    def outline(record: ExtractionRecord | ExtractedContent) -> list[HierarchyNode]:
        """Return the heading outline of a record or parsed page."""
        return build_hierarchy(record.headings)
