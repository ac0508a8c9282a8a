"""
Wordlist consistency checker.

Reconciles the glossary terms an item marks in its content against the
wordlist the item references: keyword slots, stemmed text equality,
expected translations, and the audio/image attachments each gloss
embeds.
"""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from content_auditor.core.constants import (
    AUDIO_EXTENSIONS,
    EXPECTED_TRANSLATIONS,
    EXPECTED_TRANSLATIONS_MASK,
    Category,
    Severity,
    list_type_for_alias,
)
from content_auditor.core.options import OptionPredicate
from content_auditor.reporting import reports as tables
from content_auditor.reporting.models import Identity
from content_auditor.reporting.reports import ReportSet
from content_auditor.reporting.sink import ReportSink
from content_auditor.wordlist.stemmer import terms_match
from content_auditor.wordlist.terms import TermReference
from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils

_TRANSLATION_BIT = {name: 1 << i for i, name in enumerate(EXPECTED_TRANSLATIONS)}
_DUAL_AUDIO = {"ogg": "m4a", "m4a": "ogg"}


# ──────────────────────────────────────────────────────────────────────────────
# WORDLIST DOCUMENT MODEL
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Gloss:
    list_type: str
    html: str


@dataclass
class Keyword:
    """One ``keyword`` entry. ``index`` is None when the declared index is not an integer."""

    raw_index: str
    index: Optional[int]
    text: str
    glosses: List[Gloss] = field(default_factory=list)


def read_keywords(xml: ET.Element) -> List[Keyword]:
    """Keyword entries of a wordlist document, in document order."""
    keywords: List[Keyword] = []
    item = XmlUtils.find(xml, Sch.ITEM)
    if item is None:
        return keywords
    for kw in item.findall(Sch.KEYWORDS):
        raw = kw.get("index", "")
        try:
            index: Optional[int] = int(raw.strip())
        except ValueError:
            index = None
        glosses = [Gloss(h.get("listType", ""), h.text or "") for h in kw.findall("html")]
        keywords.append(Keyword(raw, index, kw.get("text", ""), glosses))
    return keywords


def attachment_files(folder) -> Dict[str, int]:
    """Non-XML files of a wordlist folder: name -> size."""
    return {ff.name: ff.length for ff in folder.files if ff.extension != "xml"}


@dataclass(frozen=True)
class _AttachmentUse:
    term: str
    list_type: str
    index: int


class _GlossMedia:
    """Accumulates the attachment types and sizes of one gloss."""

    def __init__(self) -> None:
        self.types: List[str] = []
        self.size = 0

    def add(self, filename: str, size: Optional[int]) -> None:
        ext = os.path.splitext(filename)[1][1:].lower()
        if ext and ext not in self.types:
            self.types.append(ext)
        if size is not None:
            self.size += size

    @property
    def label(self) -> str:
        return ";".join(self.types)


# ──────────────────────────────────────────────────────────────────────────────
# CHECKER
# ──────────────────────────────────────────────────────────────────────────────


class WordlistChecker:
    """
    Checks one item's term references against one wordlist.

    Findings are reported against the referencing item with category
    Wordlist. Iteration is by keyword index, then gloss order, then file
    name, so repeated runs produce identical output.

    Args:
        sink: Destination for findings
        options: Validation option predicate (``umf``, ``mwa``, ``gtr``)
        reports: Tabular reports; glossary rows are written when given
    """

    def __init__(self, sink: ReportSink, options: OptionPredicate, reports: Optional[ReportSet] = None):
        self.sink = sink
        self.options = options
        self.reports = reports

    def _wit(self, item: Identity, wordlist: Identity, severity: Severity, message: str, detail: str = "") -> None:
        self.sink.record_wordlist(item, wordlist, severity, message, detail)

    def check(self, item: Identity, wordlist: Identity, refs: Sequence[TermReference]) -> None:
        """
        Validate ``refs`` from ``item`` against ``wordlist``.

        Args:
            item: Referencing item
            wordlist: Resolved wordlist identity
            refs: Term references collected from the item's content
        """
        xml, detail = XmlUtils.load(wordlist.folder, f"{wordlist.folder.name}.xml")
        if xml is None:
            self.sink.record(Category.ITEM, Severity.SEVERE, wordlist, "Invalid wordlist file.", detail)
            return

        keywords = read_keywords(xml)
        slots = self._slots(item, wordlist, keywords)
        requested: Set[int] = {ref.index for ref in refs}
        files = attachment_files(wordlist.folder)
        uses: Dict[str, _AttachmentUse] = {}

        ordered = sorted((kw for kw in keywords if kw.index is not None), key=lambda kw: kw.index)
        for kw in ordered:
            self._check_keyword(item, wordlist, kw, kw.index in requested, files, uses)

        for ref in refs:
            if not slots.get(ref.index):
                self._wit(item, wordlist, Severity.TOLERABLE, "Item references non-existent wordlist term.",
                          f"text='{ref.text}' termIndex='{ref.index}'")
            elif not terms_match(ref.text, slots[ref.index]):
                self._wit(item, wordlist, Severity.DEGRADED, "Item text does not match wordlist term.",
                          f"text='{ref.text}' term='{slots[ref.index]}' termIndex='{ref.index}'")

        if self.options("umf"):
            for name in sorted(files):
                if name not in uses:
                    self._wit(item, wordlist, Severity.BENIGN, "Unreferenced wordlist attachment file.",
                              f"filename='{name}'")

    def _slots(self, item: Identity, wordlist: Identity, keywords: List[Keyword]) -> Dict[int, str]:
        """Keyword texts by declared index; an absent index is an empty slot."""
        slots: Dict[int, str] = {}
        for kw in keywords:
            if kw.index is None or kw.index < 0:
                self._wit(item, wordlist, Severity.SEVERE, "Wordlist term index is not a valid integer.",
                          f"term='{kw.text}' index='{kw.raw_index}'")
                continue
            if slots.get(kw.index):
                self._wit(item, wordlist, Severity.SEVERE, "Wordlist has multiple terms with the same index.",
                          f"index='{kw.index}'")
                continue
            slots[kw.index] = kw.text
        return slots

    def _check_keyword(
        self,
        item: Identity,
        wordlist: Identity,
        kw: Keyword,
        referenced: bool,
        files: Dict[str, int],
        uses: Dict[str, _AttachmentUse],
    ) -> None:
        mask = 0
        for gloss in kw.glosses:
            mask |= _TRANSLATION_BIT.get(gloss.list_type, 0)

            audio = _GlossMedia()
            for filename in Sch.RX_AUDIO.findall(gloss.html):
                audio.add(filename, self._attachment(item, wordlist, kw, gloss.list_type, referenced, filename, files, uses))
                self._probe_dual_audio(filename, files, uses, kw, gloss.list_type, audio)
                self._check_attachment_name(item, wordlist, gloss.list_type, filename)

            image = _GlossMedia()
            for filename in Sch.RX_IMAGE.findall(gloss.html):
                image.add(filename, self._attachment(item, wordlist, kw, gloss.list_type, referenced, filename, files, uses))

            if self.reports is not None:
                row = [
                    wordlist.folder_name, wordlist.item_id, item.item_id, kw.index, kw.text,
                    gloss.list_type, len(gloss.html), audio.label, audio.size, image.label, image.size,
                ]
                if self.options("gtr"):
                    row.append(gloss.html)
                self.reports.row(tables.GLOSSARY, row)

        if referenced and mask and mask != EXPECTED_TRANSLATIONS_MASK:
            missing = [name for name in EXPECTED_TRANSLATIONS if not mask & _TRANSLATION_BIT[name]]
            self._wit(item, wordlist, Severity.TOLERABLE, "Wordlist does not include all expected translations.",
                      f"term='{kw.text}' missing='{', '.join(missing)}'")

    def _attachment(
        self,
        item: Identity,
        wordlist: Identity,
        kw: Keyword,
        list_type: str,
        referenced: bool,
        filename: str,
        files: Dict[str, int],
        uses: Dict[str, _AttachmentUse],
    ) -> Optional[int]:
        """Resolve one embedded attachment; returns its size, or None when missing."""
        prev = uses.get(filename)
        if prev is None:
            uses[filename] = _AttachmentUse(kw.text, list_type, kw.index)
        elif prev.term.lower() != kw.text.lower():
            self._wit(item, wordlist, Severity.SEVERE, "Two different wordlist terms reference the same attachment.",
                      f"filename='{filename}' term1='{prev.term}' term2='{kw.text}' termIndex1='{prev.index}' termIndex2='{kw.index}'")
        elif prev.list_type != list_type:
            self._wit(item, wordlist, Severity.SEVERE, "Same wordlist attachment used for different languages or types.",
                      f"filename='{filename}' term='{kw.text}' language1='{prev.list_type}' language2='{list_type}'")

        if filename not in files:
            lowered = filename.lower()
            actual = next((name for name in sorted(files) if name.lower() == lowered), None)
            if actual is not None:
                self._wit(item, wordlist, Severity.SEVERE,
                          "Wordlist attachment filename differs in capitalization (will fail on certain platforms).",
                          f"term='{kw.text}' termReferenced='{referenced}' filename='{filename}' actualFilename='{actual}'")
                uses.setdefault(actual, _AttachmentUse(kw.text, list_type, kw.index))
            elif referenced:
                self._wit(item, wordlist, Severity.SEVERE, "Wordlist attachment not found.",
                          f"term='{kw.text}' filename='{filename}'")
            elif self.options("mwa"):
                self._wit(item, wordlist, Severity.BENIGN,
                          "Wordlist attachment not found. Benign because corresponding term is not referenced.",
                          f"term='{kw.text}' filename='{filename}'")
            return None
        return files[filename]

    @staticmethod
    def _probe_dual_audio(
        filename: str,
        files: Dict[str, int],
        uses: Dict[str, _AttachmentUse],
        kw: Keyword,
        list_type: str,
        audio: _GlossMedia,
    ) -> None:
        """Account for the other-format twin of an audio file.

        Audio ships as ogg and m4a pairs but a gloss links only one. A twin
        that exists is marked as used and its format listed; its size is not
        added and a missing twin is not a finding.
        """
        stem, ext = os.path.splitext(filename)
        other = _DUAL_AUDIO.get(ext[1:].lower())
        if other is None:
            return
        twin = f"{stem}.{other}"
        if twin in files:
            uses.setdefault(twin, _AttachmentUse(kw.text, list_type, kw.index))
            audio.add(twin, None)

    def _check_attachment_name(self, item: Identity, wordlist: Identity, list_type: str, filename: str) -> None:
        """Cross-check the fields encoded in a conventionally named audio file."""
        match = Sch.RX_ATTACHMENT_NAME.match(filename)
        if not match:
            return
        first_id, second_id, _, alias, suffix = match.groups()
        if wordlist.item_id not in (first_id, second_id):
            self._wit(item, wordlist, Severity.DEGRADED, "Wordlist attachment filename indicates wordlist ID mismatch.",
                      f"filename='{filename}' filenameItemId='{first_id}' expectedItemId='{wordlist.item_id}'")
        expected_type = list_type_for_alias(alias)
        if expected_type != list_type:
            self._wit(item, wordlist, Severity.DEGRADED,
                      "Wordlist attachment filename indicates attachment type mismatch.",
                      f"filename='{filename}' filenameListType='{expected_type}' expectedListType='{list_type}'")
        if suffix.lower() not in AUDIO_EXTENSIONS:
            self._wit(item, wordlist, Severity.DEGRADED,
                      "Wordlist attachment filename indicates unexpected audio format.",
                      f"filename='{filename}' suffix='{suffix}'")


def unreferenced_terms(keywords: List[Keyword], requested: Set[int]) -> List[Tuple[int, str]]:
    """(index, text) of keywords whose index no item requested, in index order."""
    found = {kw.index: kw.text for kw in reversed(keywords) if kw.index is not None}
    return [(i, found[i]) for i in sorted(found) if i not in requested]
