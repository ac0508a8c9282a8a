"""
HTML content trees.

Item content carries HTML inside CDATA sections. This module turns such a
fragment into a small node tree and offers the two traversals the
validators need: a subtree walk and a walk over everything that follows
a node in document order.
"""

from __future__ import annotations
from html.parser import HTMLParser
from typing import Dict, Iterator, List, Optional

from content_auditor.exceptions import ParseError

# Elements that never have content or an end tag
VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

DOCUMENT = "#document"


class HtmlNode:
    """An element or text node. Text nodes have ``tag`` of ``None``."""

    __slots__ = ("tag", "attrs", "text", "children", "parent")

    def __init__(
        self,
        tag: Optional[str],
        attrs: Optional[Dict[str, str]] = None,
        text: str = "",
        parent: Optional["HtmlNode"] = None,
    ):
        self.tag = tag
        self.attrs = attrs or {}
        self.text = text
        self.children: List[HtmlNode] = []
        self.parent = parent

    @property
    def is_text(self) -> bool:
        return self.tag is None

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name, default)

    def append(self, child: "HtmlNode") -> "HtmlNode":
        child.parent = self
        self.children.append(child)
        return child

    def __repr__(self) -> str:
        if self.is_text:
            return f"HtmlNode(text={self.text!r})"
        return f"HtmlNode({self.tag!r}, {self.attrs!r})"


class _TreeBuilder(HTMLParser):
    """HTMLParser subclass that assembles an :class:`HtmlNode` tree."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = HtmlNode(DOCUMENT)
        self._open: List[HtmlNode] = [self.root]

    def handle_starttag(self, tag, attrs):
        node = self._open[-1].append(HtmlNode(tag, {k: v or "" for k, v in attrs}))
        if tag not in VOID_ELEMENTS:
            self._open.append(node)

    def handle_startendtag(self, tag, attrs):
        self._open[-1].append(HtmlNode(tag, {k: v or "" for k, v in attrs}))

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        for pos in range(len(self._open) - 1, 0, -1):
            if self._open[pos].tag == tag:
                # Implicitly close anything opened inside it
                del self._open[pos:]
                return
        raise ParseError("Unexpected end tag", {"tag": tag, "line": self.getpos()[0]})

    def handle_data(self, data):
        self._open[-1].append(HtmlNode(None, text=data))


def parse_html(fragment: str) -> HtmlNode:
    """
    Parse an HTML fragment into a node tree.

    Args:
        fragment: HTML text (the body of a CDATA section)

    Returns:
        Document node whose children are the fragment's top-level nodes

    Raises:
        ParseError: On an end tag that closes no open element
    """
    builder = _TreeBuilder()
    builder.feed(fragment)
    builder.close()
    return builder.root


def iter_subtree(node: HtmlNode) -> Iterator[HtmlNode]:
    """
    Pre-order, depth-first nodes of ``node``'s subtree, starting with ``node``.

    The sequence is finite and bounded to the subtree. A generator cannot
    be restarted; call again to traverse again.
    """
    yield node
    for child in node.children:
        yield from iter_subtree(child)


def iter_following(node: HtmlNode) -> Iterator[HtmlNode]:
    """Every node after ``node`` in document order, its descendants first."""
    for child in node.children:
        yield from iter_subtree(child)
    current = node
    while current.parent is not None:
        siblings = current.parent.children
        for sibling in siblings[siblings.index(current) + 1:]:
            yield from iter_subtree(sibling)
        current = current.parent


def select(root: HtmlNode, tag: str, **attrs: str) -> List[HtmlNode]:
    """Elements under ``root`` with ``tag`` whose attributes equal ``attrs``.

    Keyword names use underscores for dashes (``data_tag="word"``).
    """
    wanted = {k.replace("_", "-"): v for k, v in attrs.items()}
    return [
        n for n in iter_subtree(root)
        if n.tag == tag and all(n.attrs.get(k) == v for k, v in wanted.items())
    ]
