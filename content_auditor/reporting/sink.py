"""
Reporting sink.

Every finding of every validator passes through :class:`ReportSink`,
which stamps it into an :class:`ErrorRecord`, optionally suppresses
repeats, counts it, and hands it to the output channel.
"""

from __future__ import annotations

import traceback
from typing import Optional, Set

from content_auditor.core.constants import Category, Severity
from content_auditor.core.logging import LOG
from content_auditor.reporting.channels import ErrorChannel
from content_auditor.reporting.models import ErrorRecord, Identity


class ReportSink:
    """
    Deduplicating, counting error sink.

    Deduplication hashes (item type, bank key, item id, message). The hash
    set lives as long as the scope: call :meth:`reset_scope` between
    packages for per-package scope, or never during an aggregate run so a
    defect shared by many packages is reported once.

    Recording never raises for a validation finding. A failing output
    channel raises :class:`~content_auditor.exceptions.ReportError`, which
    is meant to end the run.

    Attributes:
        error_count: Records written since construction
        package_name: Prefix applied to every folder ("" for none)
    """

    def __init__(self, channel: ErrorChannel, dedupe: bool = True):
        self.channel = channel
        self.dedupe = dedupe
        self.error_count = 0
        self.package_name = ""
        self._seen: Set[str] = set()

    def record(
        self,
        category: Category,
        severity: Severity,
        identity: Optional[Identity],
        message: str,
        detail: str = "",
        key: str = "",
    ) -> bool:
        """
        Record one finding.

        Args:
            category: Error category
            severity: Error severity
            identity: Item the finding is about (``None`` for package level)
            message: Fixed message text; part of the deduplication key
            detail: Free-form detail
            key: Extra deduplication key for findings that repeat a message
                on one item (e.g. one per wordlist term)

        Returns:
            True if written, False if suppressed as a duplicate
        """
        identity = identity or Identity.for_folder(None)
        folder = identity.folder_name
        if self.package_name:
            folder = f"{self.package_name}/{folder}"
        rec = ErrorRecord(
            folder=folder,
            bank_key=identity.bank_key,
            item_id=identity.item_id,
            item_type=identity.item_type,
            category=category,
            severity=severity,
            message=message,
            detail=detail or "",
        )
        if self.dedupe:
            digest = rec.dedup_key(key)
            if digest in self._seen:
                return False
            self._seen.add(digest)
        self.channel.write(rec)
        self.error_count += 1
        return True

    def record_wordlist(
        self,
        identity: Identity,
        wordlist: Identity,
        severity: Severity,
        message: str,
        detail: str = "",
    ) -> bool:
        """Record a wordlist finding against the referencing item."""
        prefix = f"wordlistId='{wordlist.item_id}'"
        return self.record(
            Category.WORDLIST, severity, identity, message, f"{prefix} {detail}" if detail else prefix
        )

    def record_exception(self, identity: Optional[Identity], exc: BaseException) -> bool:
        """Record an internal fault as Severe, keeping the fault text in the detail."""
        LOG.e(f"Fault while processing {identity}: {exc}", exc=True)
        detail = "".join(traceback.format_exception_only(type(exc), exc)).strip()
        return self.record(Category.EXCEPTION, Severity.SEVERE, identity, "Exception", detail)

    def reset_scope(self) -> None:
        """Forget which findings were seen (start of a new dedup scope)."""
        self._seen.clear()

    def close(self) -> None:
        self.channel.close()
