"""Logging with contextual metadata."""

from __future__ import annotations
from typing import Any, Dict
from contextlib import suppress
import threading
import logging
import logging.handlers
import sys


class Log:
    """
    Logger with contextual metadata.

    One instance per name. Contextual key-value pairs set through
    :meth:`ctx` prefix every message until :meth:`clear` is called, which
    lets the tabulator tag log lines with the package and pass in progress.

    Thread-safe: Yes
    """

    _instances: Dict[str, "Log"] = {}
    _lock = threading.RLock()

    def __new__(cls, name: str) -> "Log":
        with cls._lock:
            if name not in cls._instances:
                inst = super().__new__(cls)
                inst._initialised = False
                cls._instances[name] = inst
            return cls._instances[name]

    def __init__(self, name: str):
        if getattr(self, "_initialised", False):
            return

        with self._lock:
            if getattr(self, "_initialised", False):
                return
            self._initialised = True
            self.name = name
            self.log = logging.getLogger(name)
            self.log.setLevel(logging.DEBUG)
            self.log.handlers.clear()
            self.log.propagate = False
            self._ctx = threading.local()
            self._console: logging.Handler = logging.NullHandler()
            self._setup()

    def _setup(self) -> None:
        """Set up console and file handlers."""
        # Import here to avoid circular dependency
        from content_auditor.core.config import Cfg

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.WARNING)
        console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        self.log.addHandler(console)
        self._console = console

        # No file log when no writable home exists
        with suppress(OSError, RuntimeError):
            Cfg.init()
            file_handler = logging.handlers.RotatingFileHandler(
                str(Cfg.LOG_DIR / f"{self.name}.log"),
                maxBytes=10 * 1024 * 1024,
                backupCount=Cfg.KEEP_LOGS,
                encoding="utf-8",
                delay=True,
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)-8s] %(message)s",
                    "%Y-%m-%d %H:%M:%S",
                )
            )
            self.log.addHandler(file_handler)

    def set_verbose(self, verbose: bool) -> None:
        """Lower the console threshold to DEBUG (or restore WARNING)."""
        self._console.setLevel(logging.DEBUG if verbose else logging.WARNING)

    def ctx(self, **kw: Any) -> None:
        """Add contextual metadata to log messages."""
        if not hasattr(self._ctx, "data"):
            self._ctx.data = {}
        self._ctx.data.update(kw)

    def clear(self) -> None:
        """Clear contextual metadata."""
        if hasattr(self._ctx, "data"):
            self._ctx.data.clear()

    def _context_str(self) -> str:
        data = getattr(self._ctx, "data", {})
        if data:
            return "[" + ", ".join(f"{k}={v}" for k, v in data.items()) + "] "
        return ""

    def _log(self, level: str, message: str, exc: bool = False) -> None:
        getattr(self.log, level)(self._context_str() + str(message), exc_info=exc)

    def d(self, msg: str) -> None:
        """Log debug message."""
        self._log("debug", msg)

    def i(self, msg: str) -> None:
        """Log info message."""
        self._log("info", msg)

    def w(self, msg: str) -> None:
        """Log warning message."""
        self._log("warning", msg)

    def e(self, msg: str, exc: bool = False) -> None:
        """Log error message."""
        self._log("error", msg, exc)

    def c(self, msg: str, exc: bool = False) -> None:
        """Log critical message."""
        self._log("critical", msg, exc)

    # Full method names for compatibility
    def debug(self, msg: str) -> None:
        self.d(msg)

    def info(self, msg: str) -> None:
        self.i(msg)

    def warning(self, msg: str) -> None:
        self.w(msg)

    def error(self, msg: str, exc_info: bool = False) -> None:
        self.e(msg, exc_info)


# Module-level logger instance
LOG = Log("content_auditor")
