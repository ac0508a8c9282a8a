"""Glossary wordlists: term extraction, stemmed matching and consistency checks."""

from __future__ import annotations

from content_auditor.wordlist.stemmer import stem, terms_match
from content_auditor.wordlist.terms import TermReference, extract_term_references
from content_auditor.wordlist.checker import (
    Gloss,
    Keyword,
    WordlistChecker,
    attachment_files,
    read_keywords,
    unreferenced_terms,
)

__all__ = [
    "stem",
    "terms_match",
    "TermReference",
    "extract_term_references",
    "Gloss",
    "Keyword",
    "WordlistChecker",
    "attachment_files",
    "read_keywords",
    "unreferenced_terms",
]
