"""
Reporting: error records, the deduplicating sink, output channels,
the summary tally and the tabular reports.
"""

from __future__ import annotations

from content_auditor.reporting.models import Identity, ErrorRecord
from content_auditor.reporting.channels import ErrorChannel, MemoryChannel, CsvErrorChannel
from content_auditor.reporting.sink import ReportSink
from content_auditor.reporting.tally import Tally
from content_auditor.reporting.reports import ReportSet

__all__ = [
    "Identity",
    "ErrorRecord",
    "ErrorChannel",
    "MemoryChannel",
    "CsvErrorChannel",
    "ReportSink",
    "Tally",
    "ReportSet",
]
