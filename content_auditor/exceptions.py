"""Custom exception classes for Content Auditor.

All exceptions in the application inherit from the AuditError base class
to provide consistent error handling and context propagation.

Validation findings are never raised; they are recorded through the
reporting sink. Exceptions are reserved for conditions that abort the
current identity, the current package, or the whole run.
"""

from __future__ import annotations
from typing import Optional, Dict, Any


class AuditError(Exception):
    """Base exception with context.

    Attributes:
        msg: The error message
        ctx: Optional dictionary of contextual information (e.g., paths, item ids)
    """

    def __init__(self, msg: str, ctx: Optional[Dict[str, Any]] = None):
        super().__init__(msg)
        self.msg = msg
        self.ctx = ctx or {}

    def __str__(self) -> str:
        if self.ctx:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{self.msg} [{ctx_str}]"
        return self.msg


class PackageError(AuditError):
    """Raised when a content package cannot be opened or recognized."""


class ParseError(AuditError):
    """Raised when a primary document is structurally unusable."""


class ReportError(AuditError):
    """Raised when a report output channel cannot be opened or written."""


class OptionError(AuditError):
    """Raised for unknown or malformed validation options."""
