"""File access: the virtual package tree and report file operations."""

from __future__ import annotations

from content_auditor.io.file_tree import (
    FileFile,
    FileFolder,
    FsFolder,
    ZipFileTree,
    open_tree,
    split_path,
)
from content_auditor.io.file_ops import FO, retry

__all__ = [
    "FileFile",
    "FileFolder",
    "FsFolder",
    "ZipFileTree",
    "open_tree",
    "split_path",
    "FO",
    "retry",
]
