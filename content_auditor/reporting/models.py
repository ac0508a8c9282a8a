"""Data models shared by the reporting sink and the validators."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Optional, Tuple

from content_auditor.core.constants import Category, Severity
from content_auditor.io.file_tree import FileFolder


@dataclass(frozen=True)
class Identity:
    """
    Who an error record is about.

    Items, stimuli and wordlists get a full identity during indexing.
    Package-level findings (manifest, folders that could not be read) use
    a folder-only identity from :meth:`for_folder`.

    Attributes:
        item_id: Item, stimulus or wordlist id ("" when unknown)
        item_type: Type code (``mc``, ``pass``, ``wordList``...)
        bank_key: Bank key ("" when unknown)
        is_passage: True for stimuli
        folder: Owning folder in the package tree
    """

    item_id: str
    item_type: str
    bank_key: str
    is_passage: bool
    folder: Optional[FileFolder]

    @classmethod
    def for_folder(cls, folder: Optional[FileFolder]) -> "Identity":
        return cls("", "", "", False, folder)

    @property
    def folder_name(self) -> str:
        return self.folder.display_name if self.folder is not None else ""

    @property
    def full_id(self) -> str:
        return f"{self.bank_key}-{self.item_id}"

    def __str__(self) -> str:
        return f"{self.item_type or '?'} {self.full_id} ({self.folder_name})"


@dataclass(frozen=True)
class ErrorRecord:
    """One finding. Never mutated after creation."""

    folder: str
    bank_key: str
    item_id: str
    item_type: str
    category: Category
    severity: Severity
    message: str
    detail: str = ""

    def dedup_key(self, extra: str = "") -> str:
        """Content hash over (item type, bank key, item id, message).

        ``extra`` is folded in when given, separating findings that share a
        message but concern different parts of one item.
        """
        parts = (self.item_type, self.bank_key, self.item_id, self.message)
        raw = "\x1f".join(parts + (extra,) if extra else parts)
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()

    def as_row(self) -> Tuple[str, ...]:
        return (
            self.folder,
            self.bank_key,
            self.item_id,
            self.item_type,
            self.category.value,
            self.severity.value,
            self.message,
            self.detail,
        )
