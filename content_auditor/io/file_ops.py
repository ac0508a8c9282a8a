"""
File operations module.

Atomic report writes and a retry decorator for transient I/O faults.
"""

from __future__ import annotations
import functools
import os
import tempfile
import time
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Generator, IO, Optional, Tuple, Union

from content_auditor.core.config import Cfg
from content_auditor.core.constants import MAX_RETRIES, RETRY_DELAY
from content_auditor.core.logging import LOG
from content_auditor.exceptions import ReportError


# ──────────────────────────────────────────────────────────────────────────────
# RETRY DECORATOR
# ──────────────────────────────────────────────────────────────────────────────

def retry(
    attempts: int = MAX_RETRIES,
    delay: float = RETRY_DELAY,
    exceptions: Tuple[type, ...] = (IOError, OSError),
):
    """Retry decorator with exponential backoff."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            wait = delay
            last_err: Optional[BaseException] = None
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as err:
                    last_err = err
                    if attempt < attempts:
                        LOG.d(f"{func.__name__} failed (attempt {attempt}/{attempts}): {err}")
                        time.sleep(wait)
                        wait *= 2
                    continue
            if last_err:
                raise last_err
            raise RuntimeError("Retry failed without captured exception")

        return wrapper

    return decorator


# ──────────────────────────────────────────────────────────────────────────────
# FILE OPERATIONS CLASS
# ──────────────────────────────────────────────────────────────────────────────

class FO:
    """Report file operations.

    Reports are written to a temp file beside the target and moved into
    place only when the writer finishes, so an aborted run never leaves a
    half-written report behind.
    """

    @staticmethod
    @retry()
    def _replace(tmp_path: Path, target: Path) -> None:
        tmp_path.replace(target)

    @staticmethod
    @contextmanager
    def atomic(target: Union[str, Path], mode: str = "w", enc: str = "utf-8") -> Generator[IO, None, None]:
        """Atomic file write with automatic cleanup on failure.

        Args:
            target: Target file path
            mode: File mode (w, wb)
            enc: Encoding for text mode

        Yields:
            File handle for writing

        Raises:
            ReportError: If the temp file cannot be created or moved into place
        """
        target = Path(target)
        tmp_path: Optional[Path] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(target.parent),
                prefix=f".audit_tmp_{os.getpid()}_",
                suffix=".tmp",
                text="b" not in mode,
            )
        except OSError as exc:
            raise ReportError(f"Cannot create report file: {exc}", {"path": str(target)}) from exc
        tmp_path = Path(tmp_name)

        try:
            if "b" in mode:
                fh = os.fdopen(fd, mode)
            else:
                # csv.writer supplies its own line endings
                fh = os.fdopen(fd, mode, encoding=enc, newline="")
            try:
                yield fh
                fh.flush()
                if not Cfg.IS_WIN:
                    os.fsync(fh.fileno())
            finally:
                fh.close()

            try:
                FO._replace(tmp_path, target)
            except OSError as exc:
                raise ReportError(f"Cannot write report file: {exc}", {"path": str(target)}) from exc
            tmp_path = None
        finally:
            if tmp_path is not None and tmp_path.exists():
                with suppress(OSError):
                    tmp_path.unlink()
