"""
Glossary term references in item content.

Item HTML marks a glossary term with a pair of spans::

    <span id="item_998_TAG_2" data-tag="word" data-tag-boundary="start"
          data-word-index="1"></span>What<span data-tag-ref="item_998_TAG_2"
          data-tag-boundary="end"></span>

The text between the two spans is the term; ``data-word-index`` is the
keyword index in the item's wordlist.
"""

from __future__ import annotations

import string
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Tuple

from content_auditor.core.constants import Category, Severity
from content_auditor.exceptions import ParseError
from content_auditor.reporting.models import Identity
from content_auditor.reporting.sink import ReportSink
from content_auditor.xml.html import HtmlNode, iter_following, parse_html, select
from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils

TRIM_CHARS = string.whitespace + string.punctuation


@dataclass(frozen=True)
class TermReference:
    """A term marked in one item's content."""

    item_id: str
    index: int
    text: str


def _term_text(start: HtmlNode, ref_id: str) -> Tuple[str, bool]:
    """Text after ``start`` up to its end span, and whether that end span was found."""
    parts: List[str] = []
    for node in iter_following(start):
        if (
            node.get(Sch.TERM_ATTR_BOUNDARY) == "end"
            and node.get(Sch.TERM_ATTR_REF) == ref_id
        ):
            return "".join(parts), True
        if node.is_text:
            parts.append(node.text)
    return "".join(parts), False


def references_in_html(sink: ReportSink, it: Identity, doc: HtmlNode) -> List[TermReference]:
    """Collect term references from one parsed HTML fragment."""
    refs: List[TermReference] = []
    starts = select(doc, Sch.TERM_TAG, data_tag="word", data_tag_boundary="start")
    for node in starts:
        ref_id = node.get("id")
        if not ref_id:
            sink.record(Category.ITEM, Severity.SEVERE, it, "WordList reference lacks an ID")
            continue
        raw_index = node.get(Sch.TERM_ATTR_INDEX)
        try:
            index = int(raw_index.strip())
        except ValueError:
            sink.record(Category.ITEM, Severity.SEVERE, it,
                        "WordList reference term index is not integer",
                        f"id='{ref_id}' index='{raw_index}'")
            continue
        text, closed = _term_text(node, ref_id)
        text = text.strip(TRIM_CHARS)
        if not closed:
            sink.record(Category.ITEM, Severity.TOLERABLE, it,
                        "WordList reference missing end tag.",
                        f"id='{ref_id}' index='{index}' term='{text}'")
        refs.append(TermReference(it.item_id, index, text))
    return refs


def extract_term_references(sink: ReportSink, it: Identity, content: ET.Element) -> List[TermReference]:
    """
    Collect every term reference in an item's ``content`` element.

    Each non-blank text node of the content subtree is parsed as an HTML
    fragment. A fragment that fails to parse is reported Severe and
    skipped.

    Args:
        sink: Destination for markup findings
        it: Item being validated
        content: The item's ``content`` element

    Returns:
        References in document order
    """
    refs: List[TermReference] = []
    for elem in XmlUtils.iter_subtree(content):
        text = elem.text
        if not text or not text.strip():
            continue
        try:
            doc = parse_html(text)
        except ParseError as exc:
            sink.record(Category.ITEM, Severity.SEVERE, it, "Invalid html content.",
                        f"element='{XmlUtils.local_name(elem.tag)}' detail='{exc}'")
            continue
        refs.extend(references_in_html(sink, it, doc))
    return refs
