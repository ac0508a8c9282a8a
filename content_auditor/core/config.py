"""
Content Auditor Configuration.

Application directories and runtime settings.
"""

from __future__ import annotations

import os
import platform
import sys
import tempfile
import threading
from contextlib import suppress
from pathlib import Path
from typing import List, Optional, Tuple

from content_auditor.core.constants import MAX_XML_SIZE, MIN_PYTHON_VERSION


class Cfg:
    """
    Application configuration and directory management.

    Provides:
    - Platform detection
    - Directory management for logs
    - Document size limits

    Thread-safe: Yes (uses RLock for initialization)
    """

    IS_WIN = platform.system() == "Windows"
    PY_VER = sys.version_info
    MIN_PY = MIN_PYTHON_VERSION

    # Directory paths (initialized on first use)
    HOME: Optional[Path] = None
    APP_DIR: Optional[Path] = None
    LOG_DIR: Optional[Path] = None

    MAX_XML = MAX_XML_SIZE
    KEEP_LOGS = 5

    _lock = threading.RLock()
    _done = False

    @classmethod
    def init(cls) -> None:
        """Locate a writable home and create the log directory.

        Safe to call repeatedly; only the first call does any work.

        Raises:
            RuntimeError: If no candidate home directory is writable
        """
        with cls._lock:
            if cls._done:
                return

            candidates: List[Path] = []

            with suppress(RuntimeError, KeyError):
                candidates.append(Path.home())

            for env_var in ("USERPROFILE", "HOME"):
                val = os.environ.get(env_var)
                if val and os.path.exists(val):
                    candidates.append(Path(val))

            candidates.append(Path(tempfile.gettempdir()) / "content_auditor_user")
            with suppress(OSError):
                candidates.append(Path.cwd() / ".content_auditor_home")

            attempted: List[str] = []
            for candidate in candidates:
                attempted.append(str(candidate))
                try:
                    app_dir = candidate / ".content_auditor"
                    log_dir = app_dir / "logs"
                    log_dir.mkdir(parents=True, exist_ok=True)
                    probe = log_dir / f".write_test_{os.getpid()}"
                    probe.write_text("ok", encoding="utf-8")
                    probe.unlink()
                except OSError:
                    continue
                cls.HOME = candidate
                cls.APP_DIR = app_dir
                cls.LOG_DIR = log_dir
                break

            if not cls.HOME:
                raise RuntimeError(
                    f"Cannot find writable home directory. Tried: {', '.join(attempted[:5])}"
                )
            cls._done = True

    @classmethod
    def check(cls) -> Tuple[bool, List[str]]:
        """Verify the runtime environment.

        Returns:
            Tuple of (ok, list of error strings)
        """
        errors: List[str] = []
        if cls.PY_VER < cls.MIN_PY:
            errors.append(
                f"Python {cls.MIN_PY[0]}.{cls.MIN_PY[1]}+ required, "
                f"found {cls.PY_VER.major}.{cls.PY_VER.minor}"
            )
        if not cls._done:
            try:
                cls.init()
            except RuntimeError as exc:
                errors.append(str(exc))
        return not errors, errors
