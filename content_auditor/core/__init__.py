"""Core infrastructure modules.

Provides foundational components including constants, configuration,
logging and the validation option registry.
"""

from __future__ import annotations

from content_auditor.core.constants import (
    VERSION,
    BUILD_DATE,
    APP_NAME,
    Severity,
    Category,
    EXPECTED_TRANSLATIONS,
    LANGUAGE_ALIASES,
    list_type_for_alias,
)
from content_auditor.core.config import Cfg
from content_auditor.core.logging import Log, LOG
from content_auditor.core.options import ValidationOptions, OptionPredicate, KNOWN_OPTIONS

__all__ = [
    "VERSION",
    "BUILD_DATE",
    "APP_NAME",
    "Severity",
    "Category",
    "EXPECTED_TRANSLATIONS",
    "LANGUAGE_ALIASES",
    "list_type_for_alias",
    "Cfg",
    "Log",
    "LOG",
    "ValidationOptions",
    "OptionPredicate",
    "KNOWN_OPTIONS",
]
