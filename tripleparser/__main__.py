"""CLI entry point: python -m tripleparser URL_OR_FILE... [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.table import Table

from tripleparser import settings
from tripleparser.config import PipelineConfig, load_config
from tripleparser.export import records_to_markdown, to_json
from tripleparser.items import BatchResult, ExtractionRecord
from tripleparser.pipeline import extract_urls, process_batch

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_ALL_FAILED = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tripleparser",
        description=(
            "Extract headings, schema.org data and knowledge triples from web pages.\n"
            "Arguments may be http(s) URLs or paths to local HTML files."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("inputs", nargs="+", metavar="URL_OR_FILE",
                        help="Page URL or local HTML file")
    parser.add_argument("--api-key", default=None, metavar="KEY",
                        help="Model API key (default: $OPENAI_API_KEY)")
    parser.add_argument("--language", default=None, metavar="CODE",
                        help="Output language code, or 'auto' to follow each page (default: en)")
    parser.add_argument("--model", default=None, metavar="NAME",
                        help=f"Chat model name (default: {settings.MODEL})")
    parser.add_argument("--workers", type=int, default=None, metavar="N",
                        help=f"Pages processed concurrently (default: {settings.MAX_WORKERS})")
    parser.add_argument("--timeout", type=float, default=None, metavar="SECONDS",
                        help=f"Model request timeout (default: {settings.REQUEST_TIMEOUT})")
    parser.add_argument("--config", default=None, metavar="FILE",
                        help="YAML config file")
    parser.add_argument("--out", default=settings.OUTPUT_DIR, metavar="DIR",
                        help=f"Output directory (default: {settings.OUTPUT_DIR})")
    parser.add_argument("--outline", action="store_true", default=False,
                        help=f"Also write a heading outline to {settings.OUTLINE_FILENAME}")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format=settings.LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _split_inputs(inputs: list[str]) -> tuple[list[tuple[str, str]], list[str], list[bool]]:
    """Read local files; return ``(pages, urls, is_local)``.

    Local files are recorded under their ``file://`` URI.  *is_local* flags
    each input, in argument order.
    """
    pages: list[tuple[str, str]] = []
    urls: list[str] = []
    is_local: list[bool] = []
    for item in inputs:
        path = Path(item)
        if path.is_file():
            html = path.read_text(encoding="utf-8", errors="replace")
            pages.append((path.resolve().as_uri(), html))
            is_local.append(True)
        else:
            urls.append(item)
            is_local.append(False)
    return pages, urls, is_local


def _run(
    inputs: list[str],
    config: PipelineConfig,
) -> BatchResult:
    pages, urls, is_local = _split_inputs(inputs)
    local = process_batch(pages, config=config).results if pages else []
    remote = extract_urls(urls, config=config).results if urls else []

    # Both calls keep input order; interleave them back into argument order.
    local_iter = iter(local)
    remote_iter = iter(remote)
    records: list[ExtractionRecord] = [
        next(local_iter) if from_file else next(remote_iter)
        for from_file in is_local
    ]
    return BatchResult.from_records(records)


def _print_summary(console: Console, batch: BatchResult, out_dir: Path) -> None:
    stats = batch.stats
    console.print()
    console.print(Rule("[bold cyan]Extraction Summary[/bold cyan]"))
    console.print(f"  [bold]Pages              :[/bold] {stats.total_urls}")
    console.print(f"  [bold]Succeeded          :[/bold] [green]{stats.successful_extractions}[/green]")
    console.print(f"  [bold]Failed             :[/bold] [yellow]{stats.failed_extractions}[/yellow]")
    console.print(f"  [bold]Output directory   :[/bold] [green]{out_dir}[/green]")
    console.print()

    tbl = Table(box=box.SIMPLE_HEAVY, show_lines=False)
    tbl.add_column("#",          style="dim",   justify="right", width=4, no_wrap=True)
    tbl.add_column("URL",        style="blue",  max_width=55,             no_wrap=True)
    tbl.add_column("Headings",   justify="right", width=8,                no_wrap=True)
    tbl.add_column("Structured", justify="right", width=10,               no_wrap=True)
    tbl.add_column("Triples",    justify="right", width=7,                no_wrap=True)
    tbl.add_column("Error",      style="red",   max_width=40,             no_wrap=True)

    for i, record in enumerate(batch.results, 1):
        if record.success:
            tbl.add_row(
                str(i), record.url,
                str(len(record.headings)),
                str(len(record.structured_data)),
                str(len(record.triples)),
                "",
            )
        else:
            tbl.add_row(str(i), record.url, "-", "-", "-", record.error or "-")
    console.print(tbl)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits 2 on bad usage; report it as a usage error
        return EXIT_USAGE if exc.code else EXIT_OK
    _configure_logging(args.log_level)

    if args.workers is not None and args.workers < 1:
        print("ERROR: --workers must be at least 1", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = load_config(
            args.config,
            api_key=args.api_key,
            language=args.language,
            model=args.model,
            max_workers=args.workers,
            timeout=args.timeout,
        )
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as exc:
        print(f"ERROR: Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not config.api_key_value():
        print(
            "ERROR: No model API key. Pass --api-key or set OPENAI_API_KEY.",
            file=sys.stderr,
        )
        return EXIT_USAGE

    batch = _run(args.inputs, config)

    out_dir = Path(args.out).resolve()
    results_path = to_json(batch, out_dir / settings.RESULTS_FILENAME)
    logger.info("Wrote %s", results_path)
    if args.outline:
        outline_path = out_dir / settings.OUTLINE_FILENAME
        outline_path.write_text(records_to_markdown(batch.results), encoding="utf-8")
        logger.info("Wrote %s", outline_path)

    _print_summary(Console(), batch, out_dir)

    if batch.stats.total_urls and not batch.stats.successful_extractions:
        return EXIT_ALL_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
