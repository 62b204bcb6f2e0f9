"""Typed document tree built from lxml-parsed HTML.

BeautifulSoup's node objects are converted once into two plain variants,
:class:`Element` and :class:`Text`.  Each element owns its children list, so
the result is always a tree: no parent pointers, no shared nodes.

Usage::

    from tripleparser.extractors.dom import build_tree, visible_text

    body = build_tree("<html><body><p>Hello</p></body></html>")
    print(visible_text(body))
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString

# Elements whose content never renders as page text
_NON_RENDERED_TAGS: frozenset[str] = frozenset({"script", "style", "noscript", "template"})

_HIDDEN_STYLE_RE = re.compile(
    r"(?:^|;)\s*(?:display\s*:\s*none|visibility\s*:\s*hidden)\b",
    re.IGNORECASE,
)

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Text:
    """A run of character data."""

    value: str


@dataclass
class Element:
    """An HTML element and the nodes it owns."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Element | Text] = field(default_factory=list)

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name, default)

    @property
    def element_children(self) -> list[Element]:
        return [c for c in self.children if isinstance(c, Element)]

    def iter_elements(self) -> Iterator[Element]:
        """Yield this element and every descendant element in document order."""
        stack: list[Element] = [self]
        while stack:
            el = stack.pop()
            yield el
            stack.extend(reversed(el.element_children))

    def text(self) -> str:
        """Return all descendant text with whitespace collapsed (like ``textContent``)."""
        parts: list[str] = []
        stack: list[Element | Text] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Text):
                parts.append(node.value)
            else:
                stack.extend(reversed(node.children))
        return _WS_RE.sub(" ", "".join(parts)).strip()

    def following_siblings(self, child: Element, limit: int) -> list[Element]:
        """Return up to *limit* element siblings that come after *child*."""
        siblings = self.element_children
        for idx, sibling in enumerate(siblings):
            if sibling is child:
                return siblings[idx + 1: idx + 1 + limit]
        return []


Node = Element | Text


def _attrs(tag: Tag) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for key, val in tag.attrs.items():
        if isinstance(val, list):
            attrs[key.lower()] = " ".join(str(v) for v in val)
        else:
            attrs[key.lower()] = "" if val is None else str(val)
    return attrs


def from_soup(root: Tag) -> Element:
    """Convert a BeautifulSoup tag and its subtree into an :class:`Element`.

    Comments, doctypes, CDATA sections and processing instructions are
    dropped; everything else that is character data becomes :class:`Text`.
    """
    top = Element(tag=(root.name or "").lower(), attrs=_attrs(root))
    stack: list[tuple[Tag, Element]] = [(root, top)]
    while stack:
        src, dst = stack.pop()
        for child in src.children:
            if isinstance(child, Tag):
                el = Element(tag=(child.name or "").lower(), attrs=_attrs(child))
                dst.children.append(el)
                stack.append((child, el))
            elif isinstance(child, NavigableString) and not isinstance(
                child, PreformattedString,
            ):
                dst.children.append(Text(str(child)))
    return top


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def build_tree(html: str | BeautifulSoup) -> Element | None:
    """Return the ``<body>`` of *html* as an :class:`Element`, or None if absent."""
    soup = html if isinstance(html, BeautifulSoup) else parse_html(html)
    body = soup.body
    if body is None:
        return None
    return from_soup(body)


def is_hidden(el: Element) -> bool:
    """True when *el* is never rendered or its inline style hides it."""
    if el.tag in _NON_RENDERED_TAGS:
        return True
    if "hidden" in el.attrs:
        return True
    style = el.get("style")
    return bool(style and _HIDDEN_STYLE_RE.search(style))


def visible_text(node: Node) -> str:
    """Depth-first visible text of *node*, one contribution per line.

    Hidden elements and elements without visible descendants contribute an
    empty string, which is left out of the join.
    """
    parts: list[str] = []
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Text):
            value = current.value.strip()
            if value:
                parts.append(value)
        elif not is_hidden(current):
            stack.extend(reversed(current.children))
    return "\n".join(parts)


def walk_with_ancestors(root: Element) -> Iterator[tuple[Element, tuple[Element, ...]]]:
    """Yield ``(element, ancestors)`` pairs in document order.

    *ancestors* runs from *root* down to the element's parent.
    """
    stack: list[tuple[Element, tuple[Element, ...]]] = [(root, ())]
    while stack:
        el, ancestors = stack.pop()
        yield el, ancestors
        inner = (*ancestors, el)
        stack.extend((child, inner) for child in reversed(el.element_children))
