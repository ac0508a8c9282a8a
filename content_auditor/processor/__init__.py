"""
Package processing: the run context, per-type validators and the
two-pass tabulator.
"""

from __future__ import annotations

from content_auditor.processor.context import IdentityState, PackageRun
from content_auditor.processor.validators import ItemValidator
from content_auditor.processor.tabulator import Tabulator, is_package, package_name

__all__ = [
    "IdentityState",
    "PackageRun",
    "ItemValidator",
    "Tabulator",
    "is_package",
    "package_name",
]
