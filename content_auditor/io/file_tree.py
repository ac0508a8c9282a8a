"""
Virtual file tree.

Read-only, uniform access to a content package whether it is delivered
as a zip archive or as a directory. Both backings present the same
semantics:

- names are compared case-insensitively
- a missing path is a negative result (``None`` / ``False``), never an error
- listings are stable and ordered by name
- only true I/O faults (corrupt archive, permission denial) raise
  :class:`~content_auditor.exceptions.PackageError`
"""

from __future__ import annotations

import os
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from content_auditor.exceptions import PackageError


def split_path(path: str) -> List[str]:
    """Split a package-relative path on either separator, dropping empties."""
    return [seg for seg in path.replace("\\", "/").split("/") if seg and seg != "."]


def _name_key(name: str):
    return (name.lower(), name)


# ──────────────────────────────────────────────────────────────────────────────
# ABSTRACT NODES
# ──────────────────────────────────────────────────────────────────────────────


class FileFile(ABC):
    """A file within a package tree."""

    def __init__(self, name: str, rooted_name: str, length: int):
        self.name = name
        self.rooted_name = rooted_name
        self.length = length

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot ("" when there is none)."""
        return os.path.splitext(self.name)[1][1:].lower()

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open the file for binary reading. Caller closes the stream."""

    def read_bytes(self) -> bytes:
        with self.open() as fh:
            return fh.read()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rooted_name!r})"


class FileFolder(ABC):
    """A folder within a package tree; the root folder is the tree itself.

    A root folder is a context manager. Leaving the context releases any
    handle held by the backing store.
    """

    def __init__(self, name: str, rooted_name: str):
        self.name = name
        self.rooted_name = rooted_name

    @property
    def display_name(self) -> str:
        """Rooted name without the leading separator, as used in reports."""
        return self.rooted_name.lstrip("/")

    @property
    @abstractmethod
    def files(self) -> List[FileFile]:
        """Files directly in this folder, in name order."""

    @property
    @abstractmethod
    def folders(self) -> List["FileFolder"]:
        """Sub-folders directly in this folder, in name order."""

    @abstractmethod
    def get_file(self, path: str) -> Optional[FileFile]:
        """Look up a file by relative path; ``None`` when absent."""

    @abstractmethod
    def get_folder(self, path: str) -> Optional["FileFolder"]:
        """Look up a folder by relative path; ``None`` when absent."""

    def file_exists(self, path: str) -> bool:
        return self.get_file(path) is not None

    def folder_exists(self, path: str) -> bool:
        return self.get_folder(path) is not None

    def close(self) -> None:
        """Release backing resources. Safe to call more than once."""

    def __enter__(self) -> "FileFolder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rooted_name or '/'!r})"


# ──────────────────────────────────────────────────────────────────────────────
# ZIP ARCHIVE BACKING
# ──────────────────────────────────────────────────────────────────────────────


class _ZipFile(FileFile):
    def __init__(self, archive: "ZipFileTree", info: zipfile.ZipInfo, name: str, rooted_name: str):
        super().__init__(name, rooted_name, info.file_size)
        self._archive = archive
        self._info = info

    def open(self) -> BinaryIO:
        return self._archive.open_member(self._info)


class _ZipFolder(FileFolder):
    def __init__(self, archive: "ZipFileTree", name: str, rooted_name: str):
        super().__init__(name, rooted_name)
        self._archive = archive
        self._files: Dict[str, _ZipFile] = {}
        self._folders: Dict[str, "_ZipFolder"] = {}

    @property
    def files(self) -> List[FileFile]:
        return [self._files[k] for k in sorted(self._files, key=lambda k: _name_key(self._files[k].name))]

    @property
    def folders(self) -> List[FileFolder]:
        return [self._folders[k] for k in sorted(self._folders, key=lambda k: _name_key(self._folders[k].name))]

    def _key(self, path: str) -> str:
        segs = split_path(path)
        if not segs:
            return self.rooted_name.lower()
        return (self.rooted_name + "/" + "/".join(segs)).lower()

    def get_file(self, path: str) -> Optional[FileFile]:
        node = self._archive._index.get(self._key(path))
        return node if isinstance(node, _ZipFile) else None

    def get_folder(self, path: str) -> Optional[FileFolder]:
        node = self._archive._index.get(self._key(path))
        return node if isinstance(node, _ZipFolder) else None


class ZipFileTree(_ZipFolder):
    """Package tree backed by a zip archive.

    The complete path index is built once when the archive is opened, so
    every later lookup is a single dictionary access.

    Raises:
        PackageError: If the archive is missing, unreadable or corrupt
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(str(self.path), "r")
        except (zipfile.BadZipFile, OSError) as exc:
            raise PackageError(f"Cannot open package archive: {exc}", {"path": str(self.path)}) from exc
        super().__init__(self, self.path.stem, "")
        # lower-cased rooted path -> node
        self._index: Dict[str, Union[_ZipFile, _ZipFolder]] = {"": self}
        for info in self._zip.infolist():
            segs = split_path(info.filename)
            if not segs:
                continue
            parent = self._ensure_folder(segs[:-1])
            if info.is_dir():
                self._ensure_folder(segs)
                continue
            rooted = parent.rooted_name + "/" + segs[-1]
            node = _ZipFile(self, info, segs[-1], rooted)
            parent._files[segs[-1].lower()] = node
            self._index[rooted.lower()] = node

    def _ensure_folder(self, segs: List[str]) -> _ZipFolder:
        folder: _ZipFolder = self
        for seg in segs:
            key = seg.lower()
            child = folder._folders.get(key)
            if child is None:
                child = _ZipFolder(self, seg, folder.rooted_name + "/" + seg)
                folder._folders[key] = child
                self._index[child.rooted_name.lower()] = child
            folder = child
        return folder

    def open_member(self, info: zipfile.ZipInfo) -> BinaryIO:
        if self._zip is None:
            raise PackageError("Package archive is closed", {"path": str(self.path)})
        try:
            return self._zip.open(info, "r")
        except (zipfile.BadZipFile, OSError) as exc:
            raise PackageError(f"Cannot read archive member: {exc}", {"member": info.filename}) from exc

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None


# ──────────────────────────────────────────────────────────────────────────────
# DIRECTORY BACKING
# ──────────────────────────────────────────────────────────────────────────────


class _FsFile(FileFile):
    def __init__(self, path: Path, rooted_name: str, length: int):
        super().__init__(path.name, rooted_name, length)
        self.path = path

    def open(self) -> BinaryIO:
        try:
            return open(self.path, "rb")
        except OSError as exc:
            raise PackageError(f"Cannot read package file: {exc}", {"path": str(self.path)}) from exc


class FsFolder(FileFolder):
    """Package tree backed by a host directory.

    Every call goes to the file system. Lookups try the exact path first
    and fall back to a case-insensitive match of each path segment.

    Raises:
        PackageError: If the directory does not exist
    """

    def __init__(self, path: Union[str, Path], rooted_name: str = ""):
        self.path = Path(path)
        if not self.path.is_dir():
            raise PackageError("Package directory not found", {"path": str(self.path)})
        super().__init__(self.path.name, rooted_name)

    def _scan(self, directory: Path) -> List[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: _name_key(e.name))
        except OSError as exc:
            raise PackageError(f"Cannot list package folder: {exc}", {"path": str(directory)}) from exc

    @property
    def files(self) -> List[FileFile]:
        return [
            _FsFile(Path(e.path), f"{self.rooted_name}/{e.name}", e.stat().st_size)
            for e in self._scan(self.path)
            if e.is_file()
        ]

    @property
    def folders(self) -> List[FileFolder]:
        return [
            FsFolder(e.path, f"{self.rooted_name}/{e.name}")
            for e in self._scan(self.path)
            if e.is_dir()
        ]

    def _resolve(self, path: str) -> Optional[Path]:
        segs = split_path(path)
        exact = self.path.joinpath(*segs) if segs else self.path
        if exact.exists():
            return exact
        current = self.path
        for seg in segs:
            if not current.is_dir():
                return None
            lowered = seg.lower()
            match = next((e for e in self._scan(current) if e.name.lower() == lowered), None)
            if match is None:
                return None
            current = Path(match.path)
        return current

    def _rooted(self, resolved: Path) -> str:
        rel = resolved.relative_to(self.path).as_posix()
        return self.rooted_name if rel == "." else f"{self.rooted_name}/{rel}"

    def get_file(self, path: str) -> Optional[FileFile]:
        resolved = self._resolve(path)
        if resolved is None or not resolved.is_file():
            return None
        try:
            size = resolved.stat().st_size
        except OSError as exc:
            raise PackageError(f"Cannot stat package file: {exc}", {"path": str(resolved)}) from exc
        return _FsFile(resolved, self._rooted(resolved), size)

    def get_folder(self, path: str) -> Optional[FileFolder]:
        resolved = self._resolve(path)
        if resolved is None or not resolved.is_dir():
            return None
        return FsFolder(resolved, self._rooted(resolved))


def open_tree(path: Union[str, Path]) -> FileFolder:
    """Open a package as a zip archive or directory tree.

    Args:
        path: ``.zip`` file or directory

    Returns:
        Root folder; use it as a context manager to release the archive

    Raises:
        PackageError: If the path is neither an archive nor a directory
    """
    path = Path(path)
    if path.is_file():
        return ZipFileTree(path)
    if path.is_dir():
        return FsFolder(path)
    raise PackageError("Package path not found", {"path": str(path)})
