"""Content Auditor constants module.

This module defines application constants, enumerations, and the fixed tables
that drive package validation (item types, expected translations, filename
language aliases).
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Tuple


# ──────────────────────────────────────────────────────────────────────────────
# VERSION INFORMATION
# ──────────────────────────────────────────────────────────────────────────────

VERSION = "1.4.0"
BUILD_DATE = "2026-10-19"
APP_NAME = "Content Package Auditor"


# ──────────────────────────────────────────────────────────────────────────────
# RUNTIME REQUIREMENTS
# ──────────────────────────────────────────────────────────────────────────────

MIN_PYTHON_VERSION = (3, 9)


# ──────────────────────────────────────────────────────────────────────────────
# FILE OPERATION CONSTANTS
# ──────────────────────────────────────────────────────────────────────────────

MAX_RETRIES = 3  # Number of retry attempts for I/O operations
RETRY_DELAY = 0.5  # Seconds between retries
MAX_XML_SIZE = 200 * 1024 * 1024  # 200MB - maximum primary document size

MANIFEST_FILENAME = "imsmanifest.xml"
METADATA_FILENAME = "metadata.xml"
ITEMS_FOLDER = "Items"
STIMULI_FOLDER = "Stimuli"
AGGREGATE_PREFIX = "Aggregate"


# ──────────────────────────────────────────────────────────────────────────────
# ERROR TAXONOMY
# ──────────────────────────────────────────────────────────────────────────────


class Severity(str, Enum):
    """Error record severity, ascending impact after MESSAGE."""

    MESSAGE = "Message"
    BENIGN = "Benign"
    TOLERABLE = "Tolerable"
    DEGRADED = "Degraded"
    SEVERE = "Severe"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if value is a valid severity."""
        return value in cls.all_values()

    @classmethod
    def all_values(cls) -> FrozenSet[str]:
        """Get all valid severity values."""
        return frozenset(s.value for s in cls)


class Category(str, Enum):
    """Error record category."""

    SYSTEM = "System"
    EXCEPTION = "Exception"
    UNSUPPORTED = "Unsupported"
    ITEM = "Item"
    MANIFEST = "Manifest"
    WORDLIST = "Wordlist"

    @classmethod
    def all_values(cls) -> FrozenSet[str]:
        """Get all valid category values."""
        return frozenset(c.value for c in cls)


# ──────────────────────────────────────────────────────────────────────────────
# ITEM TYPES
# ──────────────────────────────────────────────────────────────────────────────

INTERACTION_TYPES: FrozenSet[str] = frozenset(
    {"EBSR", "eq", "er", "gi", "htq", "mc", "mi", "ms", "sa", "ti", "wer"}
)
UNSUPPORTED_TYPES: FrozenSet[str] = frozenset({"nl", "SIM"})
WORDLIST_TYPE = "wordList"
PASSAGE_TYPE = "pass"
TUTORIAL_TYPE = "tut"


# ──────────────────────────────────────────────────────────────────────────────
# GLOSSARY TABLES
# ──────────────────────────────────────────────────────────────────────────────

# Bit i of a translation mask corresponds to EXPECTED_TRANSLATIONS[i]
EXPECTED_TRANSLATIONS: Tuple[str, ...] = (
    "arabicGlossary",
    "cantoneseGlossary",
    "esnGlossary",
    "koreanGlossary",
    "mandarinGlossary",
    "punjabiGlossary",
    "russianGlossary",
    "tagalGlossary",
    "ukrainianGlossary",
    "vietnameseGlossary",
)
EXPECTED_TRANSLATIONS_MASK = (1 << len(EXPECTED_TRANSLATIONS)) - 1

# Attachment filename language spellings that do not follow "{alias}Glossary"
LANGUAGE_ALIASES: Dict[str, str] = {
    "spanish": "esnGlossary",
    "tagalog": "tagalGlossary",
    "atagalog": "tagalGlossary",
    "btagalog": "tagalGlossary",
    "ilocano": "tagalGlossary",
    "atagal": "tagalGlossary",
    "apunjabi": "punjabiGlossary",
    "bpunjabi": "punjabiGlossary",
    "punjabiwest": "punjabiGlossary",
    "punjabieast": "punjabiGlossary",
}

AUDIO_EXTENSIONS: FrozenSet[str] = frozenset({"ogg", "m4a"})


def list_type_for_alias(alias: str) -> str:
    """Map a filename language alias to its glossary list type.

    Args:
        alias: Language token captured from an attachment filename

    Returns:
        Glossary listType value (e.g. ``esnGlossary``)
    """
    key = alias.lower()
    return LANGUAGE_ALIASES.get(key, f"{key}Glossary")
