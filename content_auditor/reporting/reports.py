"""
Tabular reports.

Item, stimulus, wordlist and glossary rows are written with ``csv.writer``
through :meth:`FO.atomic`, so each file appears only once its run scope
has completed. An in-memory variant keeps the CSV text for inspection.
"""

from __future__ import annotations

import csv
import io
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from content_auditor.exceptions import ReportError
from content_auditor.io.file_ops import FO

ITEM = "item"
STIMULUS = "stimulus"
WORDLIST = "wordlist"
GLOSSARY = "glossary"

TABLES: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    ITEM: ("ItemReport.csv", ("Folder", "BankKey", "ItemId", "ItemType", "Version", "Subject", "WordlistId", "Size")),
    STIMULUS: ("StimulusReport.csv", ("Folder", "BankKey", "StimulusId", "Version", "Subject", "WordlistId", "Size")),
    WORDLIST: ("WordlistReport.csv", ("Folder", "WIT_ID", "RefCount", "TermCount", "MaxGloss", "MinGloss", "AvgGloss")),
    GLOSSARY: (
        "GlossaryReport.csv",
        ("Folder", "WIT_ID", "ItemId", "Index", "Term", "Language", "Length", "Audio", "AudioSize", "Image", "ImageSize"),
    ),
}

SUMMARY_FILENAME = "SummaryReport.txt"
ERROR_FILENAME = "ErrorReport.csv"


def report_path(directory: Path, prefix: str, filename: str) -> Path:
    return Path(directory) / f"{prefix}_{filename}"


class ReportSet:
    """
    The tabular reports of one run scope.

    Use as a context manager. With a ``directory`` the tables go to
    ``{directory}/{prefix}_{file}``; without one they stay in memory and
    :meth:`text` returns their contents.

    Args:
        directory: Output directory, or None for in-memory tables
        prefix: Report filename prefix (package name or ``Aggregate``)
        gloss_text: Append the gloss HTML as a ``Text`` column in the
            glossary report
    """

    def __init__(self, directory: Optional[Path], prefix: str = "", gloss_text: bool = False):
        self.directory = Path(directory) if directory is not None else None
        self.prefix = prefix
        self.gloss_text = gloss_text
        self._stack: Optional[ExitStack] = None
        self._writers: Dict[str, Any] = {}
        self._buffers: Dict[str, io.StringIO] = {}

    def header(self, table: str) -> Tuple[str, ...]:
        cols = TABLES[table][1]
        return cols + ("Text",) if table == GLOSSARY and self.gloss_text else cols

    def __enter__(self) -> "ReportSet":
        self._stack = ExitStack()
        try:
            for table, (filename, _) in TABLES.items():
                if self.directory is None:
                    fh = self._buffers.setdefault(table, io.StringIO())
                else:
                    fh = self._stack.enter_context(
                        FO.atomic(report_path(self.directory, self.prefix, filename))
                    )
                self._writers[table] = csv.writer(fh)
                self._writers[table].writerow(self.header(table))
        except BaseException:
            self._stack.close()
            raise
        return self

    def __exit__(self, *exc) -> None:
        stack, self._stack = self._stack, None
        self._writers.clear()
        if stack is not None:
            stack.__exit__(*exc)

    def row(self, table: str, values: Sequence[Any]) -> None:
        """Append a row; values are converted with ``str``."""
        writer = self._writers.get(table)
        if writer is None:
            raise ReportError("Report is not open", {"table": table})
        try:
            writer.writerow(["" if v is None else str(v) for v in values])
        except OSError as exc:
            raise ReportError(f"Cannot write report: {exc}", {"table": table}) from exc

    def text(self, table: str) -> str:
        """CSV text of an in-memory table."""
        return self._buffers[table].getvalue()

    def rows(self, table: str) -> list:
        """Parsed rows of an in-memory table, header excluded."""
        return list(csv.reader(io.StringIO(self.text(table))))[1:]
