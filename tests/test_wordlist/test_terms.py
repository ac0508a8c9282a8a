"""Tests for term reference extraction."""

import xml.etree.ElementTree as ET

from content_auditor.core.constants import Severity
from content_auditor.reporting.models import Identity
from content_auditor.wordlist.terms import TermReference, extract_term_references, references_in_html
from content_auditor.xml.html import parse_html

from tests.conftest import term_html

IT = Identity("1", "mc", "100", False, None)


def content(*fragments):
    stems = "".join(f"<stem><![CDATA[{f}]]></stem>" for f in fragments)
    return ET.fromstring(f'<content language="ENU">{stems}</content>')


def test_single_reference(sink):
    refs = references_in_html(sink, IT, parse_html(f"<p>The {term_html(2, 'whale')} swims</p>"))
    assert refs == [TermReference("1", 2, "whale")]
    assert sink.error_count == 0


def test_text_is_trimmed_and_spans_markup(sink):
    html = f"<p>{term_html(1, ' <b>ice</b> cream, ')}</p>"
    refs = references_in_html(sink, IT, parse_html(html))
    assert refs[0].text == "ice cream"


def test_multiple_fragments_in_order(sink):
    refs = extract_term_references(sink, IT, content(
        f"<p>{term_html(1, 'cat', 't1')}</p>",
        f"<p>{term_html(3, 'dog', 't2')} and {term_html(1, 'cats', 't3')}</p>",
    ))
    assert [(r.index, r.text) for r in refs] == [(1, "cat"), (3, "dog"), (1, "cats")]


def test_missing_end_tag_still_yields_reference(sink, channel):
    refs = references_in_html(sink, IT, parse_html(f"<p>{term_html(4, 'word', closed=False)}</p>"))
    assert [r.index for r in refs] == [4]
    rec = channel.find("WordList reference missing end tag.")[0]
    assert rec.severity == Severity.TOLERABLE


def test_missing_id(sink, channel):
    html = '<span data-tag="word" data-tag-boundary="start" data-word-index="1"></span>x'
    assert references_in_html(sink, IT, parse_html(html)) == []
    assert channel.messages() == ["WordList reference lacks an ID"]


def test_non_integer_index(sink, channel):
    assert references_in_html(sink, IT, parse_html(term_html("one", "cat"))) == []
    rec = channel.records[0]
    assert rec.message == "WordList reference term index is not integer"
    assert rec.severity == Severity.SEVERE


def test_invalid_html_fragment_is_skipped(sink, channel):
    refs = extract_term_references(sink, IT, content("<p>bad</i></p>", f"<p>{term_html(1, 'ok')}</p>"))
    assert [r.text for r in refs] == ["ok"]
    assert channel.messages() == ["Invalid html content."]


def test_blank_content(sink):
    assert extract_term_references(sink, IT, content("   ")) == []
