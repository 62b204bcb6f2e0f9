"""Rebuild a nested outline from a flat, document-ordered heading list.

The outline is level-based only: it ignores how the headings were nested in
the source DOM.  An ``h3`` directly after an ``h1`` nests under the ``h1``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from tripleparser.items import Heading, HierarchyNode


def build_hierarchy(headings: Iterable[Heading]) -> list[HierarchyNode]:
    """Return the outline forest for *headings* (children of a level-0 root)."""
    root = HierarchyNode(text="", level=0)
    stack: list[HierarchyNode] = [root]

    for heading in headings:
        while stack[-1].level >= heading.level:
            stack.pop()
        node = HierarchyNode(
            text=heading.text,
            level=heading.level,
            importance=heading.importance,
            section_context=heading.section_context,
        )
        stack[-1].children.append(node)
        stack.append(node)

    return root.children


def flatten_hierarchy(forest: Iterable[HierarchyNode]) -> Iterator[HierarchyNode]:
    """Yield every node of *forest* depth-first, parents before children."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
