"""Content Auditor - structural audit of educational test-content packages.

Checks a content package (zip archive or directory of items, stimuli,
wordlists and an IMS manifest) for structural integrity and
cross-reference consistency, and writes an error/audit trail for
content publishers.

Package Structure:
    core/           - Constants, configuration, logging, option registry
    io/             - Virtual file tree over zip or directory, atomic writes
    xml/            - Document loading, schema paths, HTML content trees
    manifest/       - Manifest dependency graph
    reporting/      - Error sink, output channels, summary tally, reports
    wordlist/       - Stemmed term matching and wordlist consistency checks
    processor/      - Two-pass scheduler and per-type validators
    ui/             - Command-line interface
"""

from __future__ import annotations

from content_auditor.core.constants import VERSION, BUILD_DATE, APP_NAME
from content_auditor.exceptions import (
    AuditError,
    PackageError,
    ParseError,
    ReportError,
    OptionError,
)

__version__ = VERSION
__build_date__ = BUILD_DATE
__app_name__ = APP_NAME

__all__ = [
    "VERSION",
    "BUILD_DATE",
    "APP_NAME",
    "AuditError",
    "PackageError",
    "ParseError",
    "ReportError",
    "OptionError",
]
