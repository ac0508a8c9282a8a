"""Tests for the wordlist consistency checker."""

import pytest

from content_auditor.core.constants import EXPECTED_TRANSLATIONS, Severity
from content_auditor.core.options import ValidationOptions
from content_auditor.io.file_tree import FsFolder
from content_auditor.reporting.channels import MemoryChannel
from content_auditor.reporting.models import Identity
from content_auditor.reporting.reports import GLOSSARY, ReportSet
from content_auditor.reporting.sink import ReportSink
from content_auditor.wordlist.checker import Keyword, WordlistChecker, read_keywords, unreferenced_terms
from content_auditor.wordlist.terms import TermReference
from content_auditor.xml.utils import XmlUtils

ITEM = Identity("1", "mc", "100", False, None)
ALL_LANGUAGES = [(lt, "<p>x</p>") for lt in EXPECTED_TRANSLATIONS]


@pytest.fixture
def full_sink():
    return ReportSink(MemoryChannel(), dedupe=False)


def run_check(builder, sink, keywords, refs=(), attachments=None, flags=(), reports=None):
    builder.wordlist(wl_id="9", keywords=keywords, attachments=attachments)
    folder = FsFolder(builder.root).get_folder("Items/item-100-9")
    wordlist = Identity("9", "wordList", "100", False, folder)
    options = ValidationOptions().apply(flags)
    refs = [TermReference("1", index, text) for index, text in refs]
    WordlistChecker(sink, options, reports).check(ITEM, wordlist, refs)
    return sink.channel


def audio(name):
    return f'<p>x <a href="{name}">play</a></p>'


class TestTermReferences:
    def test_matching_terms_are_clean(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "Whale", []), (2, "cat", [])], [(1, "whales"), (2, "Cats")])
        assert chan.records == []

    def test_text_mismatch(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "Whale", [])], [(1, "shark")])
        rec = chan.records[0]
        assert rec.message == "Item text does not match wordlist term."
        assert rec.severity == Severity.DEGRADED
        assert rec.detail == "wordlistId='9' text='shark' term='Whale' termIndex='1'"

    @pytest.mark.parametrize("index", [0, 3, 10 ** 6, -1])
    def test_non_existent_term(self, builder, full_sink, index):
        chan = run_check(builder, full_sink, [(1, "Whale", []), (2, "cat", [])], [(index, "whale")])
        assert chan.messages() == ["Item references non-existent wordlist term."]
        assert chan.records[0].severity == Severity.TOLERABLE

    @pytest.mark.parametrize("raw", ["one", "-2", ""])
    def test_invalid_keyword_index(self, builder, full_sink, raw):
        chan = run_check(builder, full_sink, [(raw, "cat", []), (1, "dog", [])], [(1, "dog")])
        assert chan.messages() == ["Wordlist term index is not a valid integer."]
        assert chan.records[0].severity == Severity.SEVERE

    def test_huge_keyword_index_does_not_stop_the_check(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(10 ** 10, "cat", []), (0, "Whale", [])], [(0, "shark")])
        assert chan.messages() == ["Item text does not match wordlist term."]

    def test_duplicate_keyword_index_first_wins(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", []), (1, "dog", [])], [(1, "cat")])
        assert chan.messages() == ["Wordlist has multiple terms with the same index."]


class TestTranslations:
    def test_partial_translations_reported_for_referenced_term(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", [("esnGlossary", "<p>gato</p>")])], [(1, "cat")])
        rec = chan.find("Wordlist does not include all expected translations.")[0]
        assert rec.severity == Severity.TOLERABLE
        assert "esnGlossary" not in rec.detail
        assert "arabicGlossary" in rec.detail

    def test_complete_translations(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", ALL_LANGUAGES)], [(1, "cat")])
        assert chan.records == []

    def test_unreferenced_or_untranslated_terms_skip(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("esnGlossary", "g")]), (2, "dog", [("glossary", "<p>a dog</p>")])],
            [(2, "dog")],
        )
        assert chan.records == []


class TestAttachments:
    def test_missing_attachment_for_referenced_term(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", [("glossary", audio("a.ogg"))])], [(1, "cat")])
        rec = chan.records[0]
        assert rec.message == "Wordlist attachment not found."
        assert rec.severity == Severity.SEVERE

    def test_missing_attachment_for_unreferenced_term(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", [("glossary", audio("a.ogg"))])])
        assert chan.records == []

    def test_missing_attachment_for_unreferenced_term_with_mwa(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", [("glossary", audio("a.ogg"))])], flags=["+mwa"])
        assert chan.records[0].severity == Severity.BENIGN
        assert chan.records[0].message.startswith("Wordlist attachment not found. Benign")

    @pytest.mark.parametrize("refs", [[(1, "cat")], []])
    def test_case_mismatch_is_severe(self, builder, full_sink, refs):
        chan = run_check(
            builder, full_sink, [(1, "cat", [("glossary", audio("Cat.ogg"))])], refs,
            attachments={"cat.ogg": b"1234"},
        )
        rec = chan.find("differs in capitalization")[0]
        assert rec.severity == Severity.SEVERE
        assert "actualFilename='cat.ogg'" in rec.detail

    def test_shared_attachment_reported_once(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("glossary", audio("a.ogg"))]), (2, "dog", [("glossary", audio("a.ogg"))])],
            [(1, "cat"), (2, "dog")],
            attachments={"a.ogg": b"12"},
        )
        recs = chan.find("Two different wordlist terms reference the same attachment.")
        assert len(recs) == 1
        assert "term1='cat' term2='dog'" in recs[0].detail
        assert len(chan.records) == 1

    def test_shared_missing_attachment_still_reported_as_reuse(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("glossary", audio("a.ogg"))]), (2, "dog", [("glossary", audio("a.ogg"))])],
            [(1, "cat"), (2, "dog")],
        )
        recs = chan.find("Two different wordlist terms reference the same attachment.")
        assert len(recs) == 1
        assert recs[0].severity == Severity.SEVERE
        assert len(chan.find("Wordlist attachment not found.")) == 2

    def test_shared_case_mismatched_attachment_still_reported_as_reuse(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("glossary", audio("A.ogg"))]), (2, "dog", [("glossary", audio("A.ogg"))])],
            [(1, "cat"), (2, "dog")],
            attachments={"a.ogg": b"12"},
        )
        assert len(chan.find("Two different wordlist terms reference the same attachment.")) == 1
        assert len(chan.find("differs in capitalization")) == 2

    def test_same_term_and_language_twice_is_clean(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("glossary", audio("a.ogg"))]), (2, "Cat", [("glossary", audio("a.ogg"))])],
            attachments={"a.ogg": b"12"},
        )
        assert chan.records == []

    def test_same_term_different_languages(self, builder, full_sink):
        chan = run_check(
            builder, full_sink,
            [(1, "cat", [("glossary", audio("a.ogg")), ("esnGlossary", audio("a.ogg"))])],
            attachments={"a.ogg": b"12"},
        )
        assert chan.messages() == ["Same wordlist attachment used for different languages or types."]

    def test_unreferenced_files_with_umf(self, builder, full_sink):
        attachments = {"a.ogg": b"1", "a.m4a": b"22", "b.png": b"333", "stray.ogg": b"4"}
        kws = [(1, "cat", [("glossary", audio("a.ogg") + '<img src="b.png"/>')])]
        chan = run_check(builder, full_sink, kws, attachments=attachments, flags=["+umf"])
        assert [r.detail for r in chan.records] == ["wordlistId='9' filename='stray.ogg'"]

    def test_unreferenced_files_off_by_default(self, builder, full_sink):
        chan = run_check(builder, full_sink, [(1, "cat", [])], attachments={"stray.ogg": b"4"})
        assert chan.records == []


class TestAttachmentNames:
    def test_conventional_name_is_clean(self, builder, full_sink):
        name = "item_9_v1_9_01spanish_glossary_ogg_m4a.ogg"
        chan = run_check(builder, full_sink, [(1, "cat", [("esnGlossary", audio(name))])], attachments={name: b"1"})
        assert chan.records == []

    def test_wordlist_id_mismatch(self, builder, full_sink):
        name = "item_8_v1_8_01spanish_glossary.ogg"
        chan = run_check(builder, full_sink, [(1, "cat", [("esnGlossary", audio(name))])], attachments={name: b"1"})
        assert chan.messages() == ["Wordlist attachment filename indicates wordlist ID mismatch."]

    def test_name_convention_is_case_insensitive(self, builder, full_sink):
        name = "Item_8_V1_8_01Spanish_Glossary.OGG"
        chan = run_check(builder, full_sink, [(1, "cat", [("esnGlossary", audio(name))])], attachments={name: b"1"})
        assert chan.messages() == ["Wordlist attachment filename indicates wordlist ID mismatch."]

    def test_type_mismatch(self, builder, full_sink):
        name = "item_9_v1_9_01korean_glossary.m4a"
        chan = run_check(builder, full_sink, [(1, "cat", [("esnGlossary", audio(name))])], attachments={name: b"1"})
        rec = chan.records[0]
        assert rec.message == "Wordlist attachment filename indicates attachment type mismatch."
        assert "filenameListType='koreanGlossary'" in rec.detail

    def test_unexpected_audio_format(self, builder, full_sink):
        name = "item_9_v1_9_01tagalog_glossary.mp3"
        chan = run_check(builder, full_sink, [(1, "cat", [("tagalGlossary", audio(name))])], attachments={name: b"1"})
        assert chan.messages() == ["Wordlist attachment filename indicates unexpected audio format."]


class TestGlossaryRows:
    def test_row_with_dual_audio_and_image(self, builder, full_sink):
        attachments = {"a.ogg": b"1234", "a.m4a": b"12345678", "p.png": b"12"}
        html = audio("a.ogg") + '<img src="p.png">'
        with ReportSet(None, "pkg", gloss_text=True) as reports:
            run_check(builder, full_sink, [(1, "cat", [("glossary", html)])], [(1, "cat")],
                      attachments=attachments, flags=["+gtr"], reports=reports)
            rows = reports.rows(GLOSSARY)
        assert rows == [[
            "Items/item-100-9", "9", "1", "1", "cat", "glossary", str(len(html)),
            "ogg;m4a", "4", "png", "2", html,
        ]]

    def test_invalid_wordlist_document(self, builder, full_sink):
        folder = builder.root / "Items" / "item-100-9"
        folder.mkdir(parents=True)
        (folder / "item-100-9.xml").write_text("<itemrelease>", encoding="utf-8")
        wordlist = Identity("9", "wordList", "100", False, FsFolder(builder.root).get_folder("Items/item-100-9"))
        WordlistChecker(full_sink, ValidationOptions()).check(ITEM, wordlist, [])
        assert full_sink.channel.messages() == ["Invalid wordlist file."]


def test_unreferenced_terms_first_declaration_wins():
    keywords = [Keyword("2", 2, "dog"), Keyword("1", 1, "cat"), Keyword("1", 1, "kitten"), Keyword("x", None, "?")]
    assert unreferenced_terms(keywords, {2}) == [(1, "cat")]
    assert unreferenced_terms(keywords, set()) == [(1, "cat"), (2, "dog")]


def test_read_keywords(builder):
    builder.wordlist(keywords=[(3, "cat", [("glossary", "<p>a cat</p>")]), ("z", "dog", [])])
    xml, _ = XmlUtils.load(FsFolder(builder.root).get_folder("Items/item-100-9"), "item-100-9.xml")
    kws = read_keywords(xml)
    assert [(k.index, k.text) for k in kws] == [(3, "cat"), (None, "dog")]
    assert kws[0].glosses[0].list_type == "glossary"
    assert kws[0].glosses[0].html == "<p>a cat</p>"
