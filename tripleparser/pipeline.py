"""Per-page orchestration and bounded-concurrency batch processing.

Each URL is an independent unit of work: parse → normalize → model call →
merge.  A failing unit yields a ``success=False`` record and never affects
its siblings.

Usage::

    from tripleparser.pipeline import process_batch

    result = process_batch(
        {"https://example.com/": html},
        api_key="sk-...",
        language="en",
    )
    for record in result.results:
        print(record.url, record.success, len(record.triples))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from tripleparser.config import PipelineConfig
from tripleparser.errors import EmptyContentError, FetchError, TripleParserError
from tripleparser.extractors.content import extract_content
from tripleparser.extractors.structured_data import structured_to_triples
from tripleparser.fetcher import fetch_html, is_valid_url
from tripleparser.items import BatchResult, ExtractionRecord
from tripleparser.language import resolve_language
from tripleparser.llm import extract_triples
from tripleparser.triples import merge_triples

logger = logging.getLogger(__name__)

CANCELLED = "Extraction cancelled"

Fetcher = Callable[..., str]


class PageLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the URL of the page being processed."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"[{self.extra['url']}] {msg}", kwargs


def _page_log(
    url: str,
    log: logging.Logger | logging.LoggerAdapter | None,
) -> logging.LoggerAdapter:
    base = log.logger if isinstance(log, logging.LoggerAdapter) else (log or logger)
    return PageLogAdapter(base, {"url": url})


def require_api_key(api_key: str | None, config: PipelineConfig) -> str:
    """Return the explicit key, else the configured one; raise ValueError if neither."""
    key = api_key or config.api_key_value()
    if not key:
        raise ValueError("A model API key is required (pass api_key or set OPENAI_API_KEY)")
    return key


# ---------------------------------------------------------------------------
# Single page
# ---------------------------------------------------------------------------

def process_page(
    url: str,
    html: str,
    *,
    api_key: str,
    language: str | None = None,
    config: PipelineConfig | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> ExtractionRecord:
    """Run the full pipeline over one already-fetched page.

    Never raises: every failure is returned as a ``success=False`` record
    whose ``error`` is the first human-readable cause.
    """
    config = config or PipelineConfig()
    page_log = _page_log(url, log)

    try:
        content = extract_content(html, log=page_log)
        if content.is_empty:
            raise EmptyContentError()
        lang = resolve_language(language or config.language, content.language, content.main_content)
        model_triples = extract_triples(
            content, api_key, lang, config=config, log=page_log,
        )
    except TripleParserError as exc:
        page_log.warning("Extraction failed: %s", exc)
        return ExtractionRecord.failure(url, str(exc))
    except Exception as exc:
        page_log.exception("Unexpected error during extraction")
        return ExtractionRecord.failure(url, str(exc) or type(exc).__name__)

    triples = merge_triples(structured_to_triples(content.structured_data), model_triples)
    page_log.info(
        "%d headings, %d structured items, %d triples",
        len(content.headings), len(content.structured_data), len(triples),
    )
    return ExtractionRecord(
        url=url,
        main_content=content.main_content,
        headings=content.headings,
        triples=triples,
        structured_data=content.structured_data,
        success=True,
    )


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

def _run_units(
    units: list[tuple[str, Callable[[], ExtractionRecord]]],
    *,
    max_workers: int,
    cancel: threading.Event | None,
) -> list[ExtractionRecord]:
    """Run *units* on a bounded thread pool; results come back in input order."""
    results: list[ExtractionRecord | None] = [None] * len(units)
    if not units:
        return []

    def _run_one(idx: int, url: str, job: Callable[[], ExtractionRecord]) -> tuple[int, ExtractionRecord]:
        if cancel is not None and cancel.is_set():
            return idx, ExtractionRecord.failure(url, CANCELLED)
        return idx, job()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(units)))) as executor:
        futures = {
            executor.submit(_run_one, i, url, job): i
            for i, (url, job) in enumerate(units)
        }
        for future in as_completed(futures):
            idx, record = future.result()
            results[idx] = record

    return [r for r in results if r is not None]


def process_batch(
    pages: Mapping[str, str] | Iterable[tuple[str, str]],
    *,
    api_key: str | None = None,
    language: str | None = None,
    config: PipelineConfig | None = None,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> BatchResult:
    """Process already-fetched pages concurrently.

    Args:
        pages:       ``{url: html}`` mapping or ``(url, html)`` pairs.
        api_key:     Model credential; falls back to ``config.api_key``.
        language:    Target language code or ``"auto"``; falls back to
                     ``config.language``.
        config:      Resolved :class:`~tripleparser.config.PipelineConfig`.
        max_workers: Worker pool size; falls back to ``config.max_workers``.
        cancel:      When set, units that have not started yet are skipped
                     and recorded as cancelled.  Running units finish.
        log:         Logger to report through.

    Returns:
        :class:`~tripleparser.items.BatchResult` with one record per page, in
        input order.

    Raises:
        ValueError: When no API key is available.
    """
    config = config or PipelineConfig()
    key = require_api_key(api_key, config)
    items = list(pages.items()) if isinstance(pages, Mapping) else list(pages)
    (log or logger).info("Processing %d page(s)", len(items))

    units = [
        (url, lambda url=url, html=html: process_page(
            url, html, api_key=key, language=language, config=config, log=log,
        ))
        for url, html in items
    ]
    records = _run_units(
        units, max_workers=max_workers or config.max_workers, cancel=cancel,
    )
    return BatchResult.from_records(records)


def extract_urls(
    urls: Iterable[str],
    *,
    api_key: str | None = None,
    language: str | None = None,
    config: PipelineConfig | None = None,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
    fetcher: Fetcher | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> BatchResult:
    """Fetch each URL once with *fetcher*, then process it like :func:`process_batch`.

    Invalid URLs and fetch failures become ``success=False`` records.
    """
    config = config or PipelineConfig()
    fetcher = fetcher or fetch_html
    key = require_api_key(api_key, config)
    url_list = list(urls)
    (log or logger).info("Fetching and processing %d URL(s)", len(url_list))

    def _job(url: str) -> ExtractionRecord:
        if not is_valid_url(url):
            return ExtractionRecord.failure(url, "Invalid URL")
        try:
            html = fetcher(url, timeout=config.fetch_timeout, user_agent=config.user_agent)
        except FetchError as exc:
            _page_log(url, log).warning("%s", exc)
            return ExtractionRecord.failure(url, str(exc))
        except Exception as exc:
            _page_log(url, log).exception("Unexpected error while fetching")
            return ExtractionRecord.failure(url, str(exc) or type(exc).__name__)
        return process_page(
            url, html, api_key=key, language=language, config=config, log=log,
        )

    units = [(url, lambda url=url: _job(url)) for url in url_list]
    records = _run_units(
        units, max_workers=max_workers or config.max_workers, cancel=cancel,
    )
    return BatchResult.from_records(records)
