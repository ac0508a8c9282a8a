"""
Error record output channels.

The sink writes every record it keeps to exactly one channel. The CSV
channel streams to disk as records arrive so that findings recorded
before a fatal fault are preserved; the memory channel keeps records in
a list for programmatic use and tests.
"""

from __future__ import annotations

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, List, Optional, Union

from content_auditor.core.constants import Category, Severity
from content_auditor.exceptions import ReportError
from content_auditor.reporting.models import ErrorRecord

ERROR_HEADER = ("Folder", "BankKey", "ItemId", "ItemType", "Category", "Severity", "ErrorMessage", "Detail")
START_MESSAGE = "Audit started"


class ErrorChannel(ABC):
    """Destination for error records."""

    @abstractmethod
    def write(self, record: ErrorRecord) -> None:
        """Write one record. Raises ReportError when the channel fails."""

    def close(self) -> None:
        """Flush and release the channel."""

    def __enter__(self) -> "ErrorChannel":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class MemoryChannel(ErrorChannel):
    """Keeps records in order in :attr:`records`."""

    def __init__(self) -> None:
        self.records: List[ErrorRecord] = []

    def write(self, record: ErrorRecord) -> None:
        self.records.append(record)

    def messages(self) -> List[str]:
        return [r.message for r in self.records]

    def find(self, message: str) -> List[ErrorRecord]:
        """Records whose message contains ``message``."""
        return [r for r in self.records if message in r.message]


class CsvErrorChannel(ErrorChannel):
    """
    Streams records to ``ErrorReport.csv``.

    The file starts with the header and a System/Message row carrying
    ``start_detail`` (version and options); that row is not a finding.

    Raises:
        ReportError: If the file cannot be opened or written
    """

    def __init__(self, path: Union[str, Path], start_detail: str = ""):
        self.path = Path(path)
        self._fh: Optional[IO[str]] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", encoding="utf-8", newline="")
            self._writer = csv.writer(self._fh)
            self._writer.writerow(ERROR_HEADER)
            self._writer.writerow(
                ("", "", "", "", Category.SYSTEM.value, Severity.MESSAGE.value, START_MESSAGE, start_detail)
            )
        except OSError as exc:
            self.close()
            raise ReportError(f"Cannot open error report: {exc}", {"path": str(self.path)}) from exc

    def write(self, record: ErrorRecord) -> None:
        if self._fh is None:
            raise ReportError("Error report is closed", {"path": str(self.path)})
        try:
            self._writer.writerow(record.as_row())
        except OSError as exc:
            raise ReportError(f"Cannot write error report: {exc}", {"path": str(self.path)}) from exc

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError as exc:
                raise ReportError(f"Cannot close error report: {exc}", {"path": str(self.path)}) from exc
            finally:
                self._fh = None
