"""
Per-type validators for pass 2.

Business rules that belong to individual item types (metadata field
comparisons, scoring, accessibility attachments) live outside this
module; what is here are the structural checks every type shares.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from content_auditor.core.constants import AUDIO_EXTENSIONS, METADATA_FILENAME, WORDLIST_TYPE, Category, Severity
from content_auditor.core.logging import LOG
from content_auditor.processor.context import PackageRun
from content_auditor.reporting import reports as tables
from content_auditor.reporting.models import Identity
from content_auditor.wordlist.checker import WordlistChecker, attachment_files, read_keywords
from content_auditor.wordlist.terms import extract_term_references
from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils


def wordlist_reference(xml: Optional[ET.Element]) -> str:
    """First non-blank wordlist id in a document's resource list."""
    for path in Sch.RESOURCE_LISTS:
        rl = XmlUtils.find(xml, path)
        if rl is None:
            continue
        for res in rl.findall(Sch.WORDLIST_RESOURCE):
            if res.get("id", "").strip():
                return res.get("id").strip()
    return ""


def folder_size(it: Identity) -> int:
    return sum(ff.length for ff in it.folder.files)


class ItemValidator:
    """
    Structural validation of one identity.

    Args:
        run: Context of the package being tabulated
    """

    def __init__(self, run: PackageRun):
        self.run = run
        self.sink = run.sink
        self.checker = WordlistChecker(run.sink, run.options, run.reports)

    def _row(self, table: str, values) -> None:
        if self.run.reports is not None:
            self.run.reports.row(table, values)

    def _load_primary(self, it: Identity) -> Optional[ET.Element]:
        xml, detail = XmlUtils.load(it.folder, f"{it.folder.name}.xml")
        if xml is None:
            self.sink.record(Category.ITEM, Severity.SEVERE, it, "Invalid item file.", detail)
        return xml

    def _load_metadata(self, it: Identity) -> Optional[ET.Element]:
        meta, detail = XmlUtils.load(it.folder, METADATA_FILENAME)
        if meta is None:
            self.sink.record(Category.ITEM, Severity.SEVERE, it, "Invalid metadata.xml.", detail)
        return meta

    @staticmethod
    def _subject(xml: ET.Element, meta: Optional[ET.Element]) -> str:
        return XmlUtils.value(xml, Sch.ITEM_SUBJECT) or XmlUtils.value(meta, Sch.META_SUBJECT)

    # ──────────────────────────────────────────────────────────────────────
    # TYPE VALIDATORS
    # ──────────────────────────────────────────────────────────────────────

    def interaction(self, it: Identity) -> None:
        """Interaction items: content, wordlist, stimulus and tutorial references."""
        xml = self._load_primary(it)
        if xml is None:
            return
        meta = self._load_metadata(it)
        wordlist_id = self.content_and_wordlist(it, xml)

        stim_id = XmlUtils.value(xml, Sch.ITEM_STIMULUS)
        if stim_id:
            path = Sch.document_path(Sch.STIM_PREFIX, it.bank_key, stim_id)
            if not self.run.root.file_exists(path):
                self.sink.record(Category.ITEM, Severity.SEVERE, it, "Item stimulus not found.",
                                 f"StimulusFilename='{path}'")
            else:
                self.check_dependency(it, path, "Stimulus")

        tutorial = XmlUtils.find(xml, Sch.TUTORIAL)
        if tutorial is not None:
            tut_id = tutorial.get("id", "").strip()
            if not tut_id:
                self.sink.record(Category.ITEM, Severity.DEGRADED, it, "Tutorial id missing from item.")
            else:
                bank_key = tutorial.get("bankkey", "").strip() or it.bank_key
                path = Sch.document_path(Sch.ITEM_PREFIX, bank_key, tut_id)
                if not self.run.root.file_exists(path):
                    if self.run.options("trd"):
                        self.sink.record(Category.ITEM, Severity.SEVERE, it, "Tutorial not found.",
                                         f"TutorialFilename='{path}'")
                else:
                    self.check_dependency(it, path, "Tutorial")

        self._row(tables.ITEM, [
            it.folder_name, it.bank_key, it.item_id, it.item_type,
            XmlUtils.value(xml, Sch.ITEM_VERSION), self._subject(xml, meta), wordlist_id, folder_size(it),
        ])

    def passage(self, it: Identity) -> None:
        xml = self._load_primary(it)
        if xml is None:
            return
        meta = self._load_metadata(it)
        wordlist_id = self.content_and_wordlist(it, xml)
        self._row(tables.STIMULUS, [
            it.folder_name, it.bank_key, it.item_id,
            XmlUtils.value(xml, Sch.PASSAGE_VERSION), XmlUtils.value(meta, Sch.META_SUBJECT),
            wordlist_id, folder_size(it),
        ])

    def tutorial(self, it: Identity) -> None:
        xml = self._load_primary(it)
        if xml is None:
            return
        meta = self._load_metadata(it)
        wordlist_id = self.content_and_wordlist(it, xml)
        self._row(tables.ITEM, [
            it.folder_name, it.bank_key, it.item_id, it.item_type,
            XmlUtils.value(xml, Sch.ITEM_VERSION), self._subject(xml, meta), wordlist_id, folder_size(it),
        ])

    def wordlist(self, it: Identity) -> None:
        """The wordlist's own checks: references, term and gloss counts."""
        xml, detail = XmlUtils.load(it.folder, f"{it.folder.name}.xml")
        if xml is None:
            self.sink.record(Category.ITEM, Severity.SEVERE, it, "Invalid wordlist file.", detail)
            return
        tally = self.run.tally
        tally.bump("wordlists")

        ref_count = self.run.wordlist_refs[it.item_id]
        if ref_count == 0:
            self.sink.record(Category.WORDLIST, Severity.BENIGN, it, "Wordlist is not referenced by any item.")

        keywords = read_keywords(xml)
        gloss_counts = [len(kw.glosses) for kw in keywords]
        for kw in keywords:
            tally.increment("term", kw.text)
            for gloss in kw.glosses:
                tally.increment("translation", gloss.list_type)
        tally.bump("glossary_terms", len(keywords))
        for name in attachment_files(it.folder):
            ext = name.rsplit(".", 1)[-1].lower()
            if ext in AUDIO_EXTENSIONS:
                tally.bump(f"audio_{ext}")

        if gloss_counts:
            stats = (max(gloss_counts), min(gloss_counts), f"{sum(gloss_counts) / len(gloss_counts):.2f}")
        else:
            stats = (0, 0, "0.00")
        self._row(tables.WORDLIST, [it.folder_name, it.item_id, ref_count, len(keywords), *stats])

    # ──────────────────────────────────────────────────────────────────────
    # SHARED CHECKS
    # ──────────────────────────────────────────────────────────────────────

    def content_and_wordlist(self, it: Identity, xml: ET.Element) -> str:
        """
        Check content markup and reconcile glossary terms with the wordlist.

        Args:
            it: Item, stimulus or tutorial being validated
            xml: Its primary document

        Returns:
            The referenced wordlist id ("" when none)
        """
        wordlist_id = wordlist_reference(xml)
        content = XmlUtils.first(xml, *Sch.CONTENTS)
        if content is None:
            self.sink.record(Category.ITEM, Severity.SEVERE, it, "Item has no content element.")
            return wordlist_id

        refs = extract_term_references(self.sink, it, content)
        if not wordlist_id:
            if refs:
                self.sink.record(Category.WORDLIST, Severity.BENIGN, it,
                                 "Item has terms marked for glossary but does not reference a wordlist.")
            return wordlist_id

        wordlist = self.run.lookup(wordlist_id)
        if wordlist is None or wordlist.item_type != WORDLIST_TYPE:
            self.sink.record(Category.WORDLIST, Severity.DEGRADED, it,
                             "Item references non-existent wordlist (WIT)",
                             f"wordlistId='{wordlist_id}' bankKey='{it.bank_key}'")
            return wordlist_id

        self.check_dependency(it, f"{wordlist.folder.rooted_name}/{wordlist.folder.name}.xml", "Wordlist")
        self.run.requested_terms.setdefault(wordlist_id, set()).update(ref.index for ref in refs)
        LOG.d(f"{it.item_id}: {len(refs)} glossary references into wordlist {wordlist_id}")
        self.checker.check(it, wordlist, refs)
        return wordlist_id

    def check_dependency(self, it: Identity, dep_path: str, kind: str) -> None:
        """
        Confirm the manifest records ``it`` depending on the file at ``dep_path``.

        Suppressed when the package manifest is empty or missing.
        """
        manifest = self.run.manifest
        if manifest.is_empty:
            return
        item_path = f"{it.folder.rooted_name}/{it.folder.name}.xml"
        item_res = manifest.resource_id_for(item_path)
        if item_res is None:
            self.sink.record(Category.MANIFEST, Severity.BENIGN, it, "Item not found in manifest.",
                             f"ItemFilename='{item_path.lstrip('/')}'")
            return
        dep_res = manifest.resource_id_for(dep_path)
        if dep_res is None:
            self.sink.record(Category.MANIFEST, Severity.BENIGN, it, f"{kind} not found in manifest.",
                             f"DependencyFilename='{dep_path.lstrip('/')}'")
            return
        if not manifest.has_dependency(item_res, dep_res) and self.run.options("pmd"):
            self.sink.record(Category.MANIFEST, Severity.BENIGN, it,
                             f"Manifest does not record dependency between item and {kind.lower()}.",
                             f"ItemResourceId='{item_res}' DependsOnId='{dep_res}'")
