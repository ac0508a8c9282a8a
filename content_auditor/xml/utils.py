"""
Content Auditor XML Utility Functions.

Loading package documents through defusedxml and reading values with
root-anchored paths.
"""

from __future__ import annotations
from typing import Iterator, Optional, Tuple
import xml.etree.ElementTree as ET

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DET

from content_auditor.core.config import Cfg
from content_auditor.io.file_tree import FileFolder


class XmlUtils:
    """
    Shared XML processing utilities.

    Provides:
    - Loading a document from a package folder (never raises on bad XML)
    - Root-anchored element lookup and value extraction
    - Pre-order subtree iteration

    Thread-safe: Yes (stateless utility class)
    """

    @staticmethod
    def load(folder: FileFolder, filename: str) -> Tuple[Optional[ET.Element], str]:
        """
        Load an XML document from a package folder.

        Args:
            folder: Folder holding the document
            filename: Name relative to ``folder``

        Returns:
            Tuple of (root element or None, error detail). The detail is
            empty on success and reads ``filename='..' detail='..'``
            otherwise.

        Raises:
            PackageError: On an I/O fault reading the backing store
        """
        ff = folder.get_file(filename)
        if ff is None:
            return None, f"filename='{filename}' detail='File not found'"
        if ff.length > Cfg.MAX_XML:
            return None, f"filename='{filename}' detail='File exceeds {Cfg.MAX_XML} bytes'"
        with ff.open() as fh:
            try:
                return DET.parse(fh).getroot(), ""
            except (DET.ParseError, DefusedXmlException) as exc:
                return None, f"filename='{filename}' detail='{exc}'"

    @staticmethod
    def local_name(tag: str) -> str:
        """Strip a ``{namespace}`` prefix from a tag."""
        return tag.rsplit("}", 1)[-1]

    @staticmethod
    def find(root: Optional[ET.Element], path: str) -> Optional[ET.Element]:
        """
        Find an element by a path that starts with the root element's name.

        ``find(root, "itemrelease/item")`` returns the ``item`` child of an
        ``itemrelease`` document and ``None`` for any other root.
        """
        if root is None:
            return None
        head, _, rest = path.partition("/")
        if XmlUtils.local_name(root.tag) != XmlUtils.local_name(head):
            return None
        if not rest:
            return root
        return root.find(rest)

    @staticmethod
    def value(root: Optional[ET.Element], path: str) -> str:
        """
        Evaluate a root-anchored path to a string.

        A trailing ``/@name`` selects an attribute; otherwise the element
        text is returned. Missing nodes evaluate to ``""``.
        """
        attr = None
        if "/@" in path:
            path, attr = path.rsplit("/@", 1)
        elem = XmlUtils.find(root, path)
        if elem is None:
            return ""
        if attr is not None:
            return elem.get(attr, "")
        return (elem.text or "").strip()

    @staticmethod
    def first(root: Optional[ET.Element], *paths: str) -> Optional[ET.Element]:
        """Return the first of several paths that resolves."""
        for path in paths:
            elem = XmlUtils.find(root, path)
            if elem is not None:
                return elem
        return None

    @staticmethod
    def iter_subtree(elem: ET.Element) -> Iterator[ET.Element]:
        """Pre-order, depth-first elements of ``elem``'s subtree, ``elem`` first."""
        yield elem
        for child in elem:
            yield from XmlUtils.iter_subtree(child)
