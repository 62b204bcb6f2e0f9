"""Writers for extraction results: JSON, JSONL and Markdown outlines.

Usage::

    from tripleparser.export import to_json, to_jsonl, outline_to_markdown

    to_json(batch, "out/extracted-data.json")
    to_jsonl(batch.results, "out/records.jsonl")
    print(outline_to_markdown(build_hierarchy(record.headings)))
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from tripleparser.hierarchy import build_hierarchy
from tripleparser.items import BatchResult, ExtractionRecord, HierarchyNode


def to_json(batch: BatchResult, path: str | Path) -> Path:
    """Write *batch* as pretty-printed JSON and return the path."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps(batch.to_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return out


def to_jsonl(records: Iterable[ExtractionRecord], path: str | Path) -> int:
    """Write one record per line.  Returns the number of lines written."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with out.open("w", encoding="utf-8") as fh:
        for record in records:
            fh.write(json.dumps(record.to_dict(), ensure_ascii=False))
            fh.write("\n")
            count += 1
    return count


def outline_to_markdown(forest: Iterable[HierarchyNode]) -> str:
    """Render an outline as a nested Markdown bullet list."""
    lines: list[str] = []
    stack: list[tuple[HierarchyNode, int]] = [(n, 0) for n in reversed(list(forest))]
    while stack:
        node, depth = stack.pop()
        lines.append(f"{'  ' * depth}- {node.text} (h{node.level}, importance {node.importance})")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


def records_to_markdown(records: Iterable[ExtractionRecord]) -> str:
    """One ``## url`` section per successful record with its outline."""
    sections: list[str] = []
    for record in records:
        if not record.success:
            continue
        outline = outline_to_markdown(build_hierarchy(record.headings)) or "_(no headings)_"
        sections.append(f"## {record.url}\n\n{outline}\n")
    return "\n".join(sections)
