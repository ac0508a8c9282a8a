"""Tests for the HTML content tree."""

import pytest

from content_auditor.exceptions import ParseError
from content_auditor.xml.html import iter_following, iter_subtree, parse_html, select


class TestParseHtml:
    def test_builds_tree(self):
        doc = parse_html("<p>Hello <b>world</b></p>")
        p = doc.children[0]
        assert p.tag == "p"
        assert p.children[0].text == "Hello "
        assert p.children[1].tag == "b"
        assert p.children[1].children[0].text == "world"

    def test_void_elements_take_no_children(self):
        doc = parse_html('<p>a<br>b<img src="x.png">c</p>')
        p = doc.children[0]
        assert [n.tag for n in p.children] == [None, "br", None, "img", None]

    def test_unclosed_elements_are_closed_implicitly(self):
        doc = parse_html("<div><p>one<p>two</div>after")
        assert doc.children[-1].text == "after"

    def test_stray_end_tag_raises(self):
        with pytest.raises(ParseError):
            parse_html("<p>text</span></p>")

    def test_entities_decoded(self):
        doc = parse_html("<p>a &amp; b</p>")
        assert doc.children[0].children[0].text == "a & b"

    def test_plain_text_fragment(self):
        doc = parse_html("just text")
        assert doc.children[0].is_text


class TestTraversal:
    def test_subtree_is_preorder_and_bounded(self):
        doc = parse_html("<div><p>a</p><p>b</p></div><span>c</span>")
        div = doc.children[0]
        tags = [n.tag or n.text for n in iter_subtree(div)]
        assert tags == ["div", "p", "a", "p", "b"]

    def test_subtree_not_restartable(self):
        doc = parse_html("<p>a</p>")
        walk = iter_subtree(doc)
        assert len(list(walk)) == 3
        assert list(walk) == []
        assert len(list(iter_subtree(doc))) == 3

    def test_following_crosses_parents(self):
        doc = parse_html("<p><span id='s'></span>x</p><p>y<i>z</i></p>")
        start = select(doc, "span", id="s")[0]
        texts = [n.text for n in iter_following(start) if n.is_text]
        assert texts == ["x", "y", "z"]

    def test_select_matches_dashed_attributes(self):
        doc = parse_html('<span data-tag="word" data-tag-boundary="start"></span><span data-tag="word"></span>')
        assert len(select(doc, "span", data_tag="word")) == 2
        assert len(select(doc, "span", data_tag="word", data_tag_boundary="start")) == 1
