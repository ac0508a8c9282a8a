"""
Content Auditor XML Schema Definitions.

Element paths, attribute names, folder naming conventions and the
regular expressions used to read item, stimulus, wordlist and manifest
documents.
"""

from __future__ import annotations
import re
from typing import Pattern


class Sch:
    """
    XML schema definitions for content package documents.

    Paths are written from the document root (``itemrelease/...``) and
    resolved with :meth:`content_auditor.xml.utils.XmlUtils.find`.
    Manifest paths use ``{*}`` so any IMS content-packaging namespace
    version matches.

    Thread-safe: Yes (immutable class constants)
    """

    # Item / stimulus primary document
    ITEM = "itemrelease/item"
    PASSAGE = "itemrelease/passage"
    ITEM_FORMAT = "itemrelease/item/@format"
    ITEM_TYPE = "itemrelease/item/@type"
    ITEM_ID = "itemrelease/item/@id"
    ITEM_BANKKEY = "itemrelease/item/@bankkey"
    ITEM_VERSION = "itemrelease/item/@version"
    PASSAGE_VERSION = "itemrelease/passage/@version"
    ITEM_SUBJECT = "itemrelease/item/attriblist/attrib[@attid='itm_item_subject']/val"
    ITEM_STIMULUS = "itemrelease/item/attriblist/attrib[@attid='stm_pass_id']/val"
    TUTORIAL = "itemrelease/item/tutorial"
    RESOURCE_LISTS = ("itemrelease/item/resourceslist", "itemrelease/passage/resourceslist")
    CONTENTS = ("itemrelease/item/content", "itemrelease/passage/content")
    WORDLIST_RESOURCE = "resource[@type='wordList']"

    # Wordlist document
    KEYWORDS = "keywordList/keyword"  # relative to the item element

    # Metadata document
    META_SUBJECT = "metadata/{*}smarterAppMetadata/{*}Subject"

    # Manifest
    MANIFEST_RESOURCES = "{*}resources/{*}resource"
    MANIFEST_FILE = "{*}file"
    MANIFEST_DEPENDENCY = "{*}dependency"

    # HTML term markers inside content
    TERM_TAG = "span"
    TERM_ATTR_BOUNDARY = "data-tag-boundary"
    TERM_ATTR_INDEX = "data-word-index"
    TERM_ATTR_REF = "data-tag-ref"

    # Folder naming conventions
    ITEM_PREFIX = "item"
    STIM_PREFIX = "stim"

    # Gloss embedded references
    RX_AUDIO: Pattern[str] = re.compile(r'<a[^>]*href="([^"]*)"[^>]*>', re.IGNORECASE)
    RX_IMAGE: Pattern[str] = re.compile(r'<img[^>]*src="([^"]*)"[^>]*>', re.IGNORECASE)

    # item_116605_v1_116605_01btagalog_glossary_ogg_m4a.m4a
    # groups: wordlist id, wordlist id, term index, language alias, suffix
    RX_ATTACHMENT_NAME: Pattern[str] = re.compile(
        r"^item_(\d+)_v\d+_(\d+)_(\d+)([a-zA-Z]+)_glossary(?:_ogg)?(?:_m4a)?(?:_ogg)?\.([a-zA-Z0-9]+)$",
        re.IGNORECASE,
    )

    @staticmethod
    def folder_name(prefix: str, bank_key: str, item_id: str) -> str:
        """Conventional folder name, e.g. ``item-200-1234``."""
        return f"{prefix}-{bank_key}-{item_id}"

    @staticmethod
    def document_path(prefix: str, bank_key: str, item_id: str) -> str:
        """Path of a primary document relative to the package root."""
        parent = "Items" if prefix == Sch.ITEM_PREFIX else "Stimuli"
        name = Sch.folder_name(prefix, bank_key, item_id)
        return f"{parent}/{name}/{name}.xml"
