"""
Manifest dependency graph.

Reads ``imsmanifest.xml`` into a normalized filename -> resource id map
and a set of (from id, to id) dependency edges, reporting manifest
defects as Benign findings. A manifest without any usable resource is
treated as no manifest at all: every presence and dependency query is
suppressed for that package.
"""

from __future__ import annotations

from typing import Dict, Optional, Set, Tuple

from content_auditor.core.constants import MANIFEST_FILENAME, Category, Severity
from content_auditor.core.logging import LOG
from content_auditor.io.file_tree import FileFolder
from content_auditor.reporting.models import Identity
from content_auditor.reporting.sink import ReportSink
from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils


def normalize_filename(filename: str) -> str:
    """Case-fold, use ``/`` separators and drop a leading separator."""
    filename = filename.lower().replace("\\", "/")
    return filename[1:] if filename.startswith("/") else filename


class ManifestGraph:
    """
    Resources and dependencies declared by a package manifest.

    Build with :meth:`load`; an unloaded or empty graph answers every
    query as "suppressed" through :attr:`is_empty`.
    """

    def __init__(self) -> None:
        self._file_to_id: Dict[str, str] = {}
        self._ids: Set[str] = set()
        self._edges: Set[Tuple[str, str]] = set()

    @property
    def is_empty(self) -> bool:
        return not self._file_to_id

    def __len__(self) -> int:
        return len(self._file_to_id)

    def resource_id_for(self, filename: str) -> Optional[str]:
        """Resource id declared for a package-relative filename."""
        return self._file_to_id.get(normalize_filename(filename))

    def has_dependency(self, from_id: str, to_id: str) -> bool:
        return (from_id, to_id) in self._edges

    # ──────────────────────────────────────────────────────────────────────
    # BUILD
    # ──────────────────────────────────────────────────────────────────────

    @classmethod
    def load(cls, root: FileFolder, sink: ReportSink) -> "ManifestGraph":
        """
        Parse the package manifest and walk the package for presence.

        Args:
            root: Package root folder
            sink: Destination for manifest findings

        Returns:
            The graph; empty when the manifest is absent, invalid or
            declares no resources
        """
        graph = cls()
        it = Identity.for_folder(root)
        xml, detail = XmlUtils.load(root, MANIFEST_FILENAME)
        if xml is None or XmlUtils.local_name(xml.tag) != "manifest":
            sink.record(Category.MANIFEST, Severity.BENIGN, it, "Invalid manifest.", detail)
            return graph

        for res in xml.findall(Sch.MANIFEST_RESOURCES):
            graph._add_resource_element(res, root, sink, it)

        if graph.is_empty:
            sink.record(Category.MANIFEST, Severity.BENIGN, it, "Manifest is empty.")
            return graph

        LOG.d(f"Manifest lists {len(graph)} files and {len(graph._edges)} dependencies")
        for folder in root.folders:
            graph._check_folder(folder, sink, it)
        return graph

    def _add_resource_element(self, res, root: FileFolder, sink: ReportSink, it: Identity) -> None:
        res_id = res.get("identifier", "")
        file_elem = res.find(Sch.MANIFEST_FILE)
        filename = file_elem.get("href", "") if file_elem is not None else ""

        if not res_id:
            sink.record(Category.MANIFEST, Severity.BENIGN, it,
                        "Resource in manifest is missing id.", f"Filename='{filename}'")
        if not filename:
            sink.record(Category.MANIFEST, Severity.BENIGN, it,
                        "Resource specified in manifest has no filename.", f"ResourceId='{res_id}'")
        elif not root.file_exists(filename):
            sink.record(Category.MANIFEST, Severity.BENIGN, it,
                        "Resource specified in manifest does not exist.",
                        f"ResourceId='{res_id}' Filename='{filename}'")

        if res_id in self._ids:
            sink.record(Category.MANIFEST, Severity.BENIGN, it,
                        "Resource listed multiple times in manifest.", f"ResourceId='{res_id}'")
        else:
            self._ids.add(res_id)

        if filename:
            norm = normalize_filename(filename)
            if norm in self._file_to_id:
                sink.record(Category.MANIFEST, Severity.BENIGN, it,
                            "File listed multiple times in manifest.",
                            f"ResourceId='{res_id}' Filename='{norm}'")
            else:
                self._file_to_id[norm] = res_id

        for dep in res.findall(Sch.MANIFEST_DEPENDENCY):
            to_id = dep.get("identifierref", "")
            if not to_id:
                sink.record(Category.MANIFEST, Severity.BENIGN, it,
                            "Dependency in manifest is missing identifierref attribute.",
                            f"ResourceId='{res_id}'")
            elif (res_id, to_id) in self._edges:
                sink.record(Category.MANIFEST, Severity.BENIGN, it,
                            "Dependency in manifest repeated multiple times.",
                            f"ResourceId='{res_id}' DependsOnId='{to_id}'")
            else:
                self._edges.add((res_id, to_id))

    # ──────────────────────────────────────────────────────────────────────
    # PRESENCE WALK
    # ──────────────────────────────────────────────────────────────────────

    def _check_folder(self, folder: FileFolder, sink: ReportSink, it: Identity) -> None:
        """Every file below ``folder`` must be listed, and depended on by its item."""
        item_res_id: Optional[str] = None
        name = folder.name.lower()
        if name.startswith(f"{Sch.ITEM_PREFIX}-") or name.startswith(f"{Sch.STIM_PREFIX}-"):
            primary = folder.get_file(f"{folder.name}.xml")
            if primary is not None:
                primary_name = normalize_filename(primary.rooted_name)
                item_res_id = self._file_to_id.get(primary_name)
                if item_res_id is None:
                    sink.record(Category.MANIFEST, Severity.BENIGN, it,
                                "Item does not appear in the manifest.", f"ItemFilename='{primary_name}'")

        for ff in folder.files:
            filename = normalize_filename(ff.rooted_name)
            res_id = self._file_to_id.get(filename)
            if res_id is None:
                sink.record(Category.MANIFEST, Severity.BENIGN, it,
                            "Resource does not appear in the manifest.", f"Filename='{filename}'")
            elif item_res_id is not None and res_id != item_res_id and not self.has_dependency(item_res_id, res_id):
                sink.record(Category.MANIFEST, Severity.BENIGN, it,
                            "Manifest does not express resource dependency.",
                            f"ResourceId='{item_res_id}' DependsOnId='{res_id}'")

        for sub in folder.folders:
            self._check_folder(sub, sink, it)
