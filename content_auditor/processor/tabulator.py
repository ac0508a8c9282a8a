"""
Two-pass package tabulation.

Pass 1 indexes every item and stimulus folder by identity; pass 2
validates each indexed identity with the validator for its type. A
fault in one folder or identity is recorded and the run moves on; only
a package that cannot be opened, or a report that cannot be written,
stops work.
"""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from content_auditor.core.constants import (
    AGGREGATE_PREFIX,
    INTERACTION_TYPES,
    ITEMS_FOLDER,
    MANIFEST_FILENAME,
    PASSAGE_TYPE,
    STIMULI_FOLDER,
    TUTORIAL_TYPE,
    UNSUPPORTED_TYPES,
    VERSION,
    WORDLIST_TYPE,
    Category,
    Severity,
)
from content_auditor.core.logging import LOG
from content_auditor.core.options import OptionPredicate, ValidationOptions
from content_auditor.exceptions import PackageError, ParseError, ReportError
from content_auditor.io.file_ops import FO
from content_auditor.io.file_tree import FileFolder, open_tree
from content_auditor.manifest.graph import ManifestGraph
from content_auditor.processor.context import IdentityState, PackageRun
from content_auditor.processor.validators import ItemValidator
from content_auditor.reporting.channels import CsvErrorChannel
from content_auditor.reporting.models import Identity
from content_auditor.reporting.reports import ERROR_FILENAME, SUMMARY_FILENAME, ReportSet, report_path
from content_auditor.reporting.sink import ReportSink
from content_auditor.reporting.tally import Tally
from content_auditor.wordlist.checker import read_keywords, unreferenced_terms
from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils

# Faults that end more than the current identity
_FATAL = (PackageError, ReportError)


def is_package(root: FileFolder) -> bool:
    """A package has a manifest at its root, or both Items and Stimuli folders."""
    if root.file_exists(MANIFEST_FILENAME):
        return True
    return root.folder_exists(ITEMS_FOLDER) and root.folder_exists(STIMULI_FOLDER)


def package_name(path: Path) -> str:
    """Report prefix for a package path: archive stem or directory name."""
    return path.stem if path.suffix.lower() == ".zip" else path.name


class Tabulator:
    """
    Package tabulation engine.

    Args:
        options: Validation option predicate (default: registry defaults)
        dedupe: Suppress repeated findings for the same item and message

    Example:
        >>> tab = Tabulator(ValidationOptions().apply(["+uwt"]))
        >>> errors = tab.tabulate_one("packages/Math-G3.zip")
    """

    def __init__(self, options: Optional[OptionPredicate] = None, dedupe: bool = True):
        self.options: OptionPredicate = options or ValidationOptions()
        self.dedupe = dedupe

    # ──────────────────────────────────────────────────────────────────────
    # RUN MODES
    # ──────────────────────────────────────────────────────────────────────

    def tabulate_one(self, path: Union[str, Path]) -> int:
        """
        Tabulate one package, writing reports beside it.

        Args:
            path: Package ``.zip`` or directory

        Returns:
            Number of findings recorded

        Raises:
            PackageError: If the package cannot be opened or is not a package
            ReportError: If a report cannot be written
        """
        return self._tabulate_single(Path(path), stamp_folders=False)

    def tabulate_each(self, root_dir: Union[str, Path]) -> int:
        """
        Tabulate every package under ``root_dir`` into its own reports.

        Each package has its own deduplication scope. A package that fails
        to open is logged and skipped.

        Returns:
            Total findings across all packages
        """
        total = 0
        for path in self._candidates(Path(root_dir)):
            try:
                total += self._tabulate_single(path, stamp_folders=True)
            except PackageError as exc:
                LOG.e(f"Skipping {path.name}: {exc}")
        return total

    def _tabulate_single(self, path: Path, stamp_folders: bool) -> int:
        name = package_name(path)
        with ExitStack() as stack:
            root = stack.enter_context(self._open_package(path))
            sink, reports = self._open_reports(stack, path.parent, name)
            if stamp_folders:
                sink.package_name = name
            tally = self.run_package(root, name, sink, reports)
            self._write_summary(path.parent, name, tally, sink.error_count)
            return sink.error_count

    def tabulate_aggregate(self, root_dir: Union[str, Path]) -> int:
        """
        Tabulate every package under ``root_dir`` into one ``Aggregate`` report set.

        Deduplication spans the whole run, and the summary is the merge of
        every package's tally.

        Returns:
            Total findings
        """
        root_dir = Path(root_dir)
        total = Tally()
        with ExitStack() as stack:
            sink, reports = self._open_reports(stack, root_dir, AGGREGATE_PREFIX)
            for path in self._candidates(root_dir):
                name = package_name(path)
                sink.package_name = name
                try:
                    with self._open_package(path) as pkg:
                        total.merge(self.run_package(pkg, name, sink, reports))
                except PackageError as exc:
                    LOG.e(f"Skipping {name}: {exc}")
            self._write_summary(root_dir, AGGREGATE_PREFIX, total, sink.error_count)
            return sink.error_count

    # ──────────────────────────────────────────────────────────────────────
    # PACKAGE RUN
    # ──────────────────────────────────────────────────────────────────────

    def run_package(
        self,
        root: FileFolder,
        name: str,
        sink: ReportSink,
        reports: Optional[ReportSet] = None,
    ) -> Tally:
        """
        Run both passes over one open package.

        Args:
            root: Package root folder
            name: Package name; stamped on findings when the sink has a prefix
            sink: Error sink
            reports: Tabular reports (optional)

        Returns:
            The package's tally
        """
        run = PackageRun(root=root, name=name, sink=sink, options=self.options, reports=reports)
        LOG.ctx(package=name)
        try:
            LOG.i("Validating manifest")
            try:
                run.manifest = ManifestGraph.load(root, sink)
            except _FATAL:
                raise
            except Exception as exc:
                sink.record_exception(Identity.for_folder(root), exc)

            LOG.ctx(package=name, phase=1)
            self.pass_one(run)
            LOG.i(f"Indexed {len(run.identities)} items and stimuli")

            LOG.ctx(package=name, phase=2)
            self.pass_two(run)
            if self.options("uwt"):
                self.report_unreferenced_terms(run)
            LOG.i(f"Finished package, {sink.error_count} findings so far")
        finally:
            LOG.clear()
        return run.tally

    def pass_one(self, run: PackageRun) -> None:
        """Index every item folder, then every stimulus folder, in name order."""
        for parent, is_passage in ((ITEMS_FOLDER, False), (STIMULI_FOLDER, True)):
            container = run.root.get_folder(parent)
            if container is None:
                continue
            for folder in container.folders:
                try:
                    self.index_folder(run, folder, is_passage)
                except _FATAL:
                    raise
                except Exception as exc:
                    run.sink.record_exception(Identity.for_folder(folder), exc)

    def index_folder(self, run: PackageRun, folder: FileFolder, is_passage: bool) -> Optional[Identity]:
        """
        Read one folder's identity and register it.

        Returns:
            The identity, or None when the folder has no usable id or type

        Raises:
            ParseError: If a stimulus document has no passage element or id
        """
        xml, detail = XmlUtils.load(folder, f"{folder.name}.xml")
        if xml is None:
            run.sink.record(Category.ITEM, Severity.SEVERE, Identity.for_folder(folder), "Invalid item file.", detail)
            return None

        if is_passage:
            passage = XmlUtils.find(xml, Sch.PASSAGE)
            if passage is None:
                raise ParseError("Stimulus document has no passage element", {"folder": folder.display_name})
            item_id = passage.get("id", "").strip()
            if not item_id:
                raise ParseError("Stimulus document has no id", {"folder": folder.display_name})
            bank_key = passage.get("bankkey", "").strip()
            item_type = PASSAGE_TYPE
            prefix, label = Sch.STIM_PREFIX, "Stimulus"
        else:
            item_type = XmlUtils.value(xml, Sch.ITEM_FORMAT) or XmlUtils.value(xml, Sch.ITEM_TYPE)
            if not item_type:
                run.sink.record(Category.ITEM, Severity.SEVERE, Identity.for_folder(folder), "Item type not specified.")
                return None
            item_id = XmlUtils.value(xml, Sch.ITEM_ID)
            if not item_id:
                run.sink.record(Category.ITEM, Severity.SEVERE, Identity.for_folder(folder), "Item ID not specified.")
                return None
            bank_key = XmlUtils.value(xml, Sch.ITEM_BANKKEY)
            prefix, label = Sch.ITEM_PREFIX, "Item"

        identity = Identity(item_id, item_type, bank_key, is_passage, folder)
        run.tally.bump("stimuli" if is_passage else "items")
        run.tally.increment("item_type", item_type)

        if not run.register(identity):
            run.sink.record(Category.ITEM, Severity.SEVERE, identity, "Multiple items with the same ID.",
                            f"bankKey='{bank_key}' itemId='{item_id}' foldername='{folder.name}'")

        expected = Sch.folder_name(prefix, bank_key, item_id)
        if folder.name.lower() != expected.lower():
            run.sink.record(Category.ITEM, Severity.SEVERE, identity, f"{label} ID doesn't match file/folder name",
                            f"bankKey='{bank_key}' itemId='{item_id}' foldername='{folder.name}'")

        self._count_wordlist_references(run, identity, xml)
        return identity

    @staticmethod
    def _count_wordlist_references(run: PackageRun, it: Identity, xml) -> None:
        seen: List[str] = []
        for path in Sch.RESOURCE_LISTS:
            rl = XmlUtils.find(xml, path)
            if rl is None:
                continue
            for res in rl.findall(Sch.WORDLIST_RESOURCE):
                wl_id = res.get("id", "").strip()
                if not wl_id:
                    run.sink.record(Category.WORDLIST, Severity.DEGRADED, it, "Item references blank wordList id.")
                    continue
                if wl_id in seen:
                    continue
                if seen:
                    run.sink.record(Category.WORDLIST, Severity.DEGRADED, it, "Item references multiple wordlists.",
                                    f"wordlistId1='{seen[0]}' wordlistId2='{wl_id}'")
                seen.append(wl_id)
                run.wordlist_refs[wl_id] += 1

    def pass_two(self, run: PackageRun) -> None:
        """Validate every indexed identity in index order."""
        validator = ItemValidator(run)
        dispatch: Dict[str, Callable[[Identity], None]] = {
            WORDLIST_TYPE: validator.wordlist,
            PASSAGE_TYPE: validator.passage,
            TUTORIAL_TYPE: validator.tutorial,
        }
        for it in run.identities:
            if run.state(it).is_terminal:
                continue
            try:
                self.validate(run, validator, dispatch, it)
            except _FATAL:
                raise
            except Exception as exc:
                run.sink.record_exception(it, exc)
                run.set_state(it, IdentityState.FAULTED)
            else:
                run.set_state(it, IdentityState.VALIDATED)

    @staticmethod
    def validate(
        run: PackageRun,
        validator: ItemValidator,
        dispatch: Dict[str, Callable[[Identity], None]],
        it: Identity,
    ) -> None:
        if it.item_type in INTERACTION_TYPES:
            validator.interaction(it)
        elif it.item_type in UNSUPPORTED_TYPES:
            run.sink.record(Category.UNSUPPORTED, Severity.SEVERE, it,
                            "Item type is not fully supported by the open source TDS.",
                            f"itemType='{it.item_type}'")
            validator.interaction(it)
        elif it.item_type in dispatch:
            dispatch[it.item_type](it)
        else:
            run.sink.record(Category.UNSUPPORTED, Severity.SEVERE, it, "Unexpected item type.",
                            f"itemType='{it.item_type}'")

    def report_unreferenced_terms(self, run: PackageRun) -> None:
        """Report keywords that no item in the package asked for."""
        for it in run.identities:
            if it.item_type != WORDLIST_TYPE or run.state(it) is not IdentityState.VALIDATED:
                continue
            if run.lookup(it.item_id) is not it:
                continue
            xml, _ = XmlUtils.load(it.folder, f"{it.folder.name}.xml")
            if xml is None:
                continue
            requested = run.requested_terms.get(it.item_id, set())
            for index, text in unreferenced_terms(read_keywords(xml), requested):
                run.sink.record(Category.WORDLIST, Severity.BENIGN, it, "Wordlist term is not referenced by item.",
                                f"index='{index}' term='{text}'", key=str(index))

    # ──────────────────────────────────────────────────────────────────────
    # HELPERS
    # ──────────────────────────────────────────────────────────────────────

    @staticmethod
    def _open_package(path: Path) -> FileFolder:
        root = open_tree(path)
        if not is_package(root):
            root.close()
            raise PackageError("Not a valid content package path", {"path": str(path)})
        LOG.i(f"Opened package {path}")
        return root

    def _open_reports(self, stack: ExitStack, directory: Path, prefix: str) -> Tuple[ReportSink, ReportSet]:
        enabled = " ".join(getattr(self.options, "enabled_keys", list)())
        channel = stack.enter_context(
            CsvErrorChannel(report_path(directory, prefix, ERROR_FILENAME), f"version='{VERSION}' options='{enabled}'")
        )
        sink = ReportSink(channel, dedupe=self.dedupe)
        reports = stack.enter_context(ReportSet(directory, prefix, gloss_text=self.options("gtr")))
        LOG.i(f"Writing reports to {directory} with prefix {prefix}_")
        return sink, reports

    @staticmethod
    def _write_summary(directory: Path, prefix: str, tally: Tally, error_count: int) -> None:
        with FO.atomic(report_path(directory, prefix, SUMMARY_FILENAME)) as fh:
            fh.write(tally.render(error_count))
        LOG.i(f"{prefix}: {error_count} errors")

    @staticmethod
    def _candidates(root_dir: Path) -> Iterator[Path]:
        """Sub-directories and zip archives of ``root_dir`` that are packages, in name order."""
        if not root_dir.is_dir():
            raise PackageError("Package root directory not found", {"path": str(root_dir)})
        for path in sorted(root_dir.iterdir(), key=lambda p: (p.name.lower(), p.name)):
            if path.is_dir() or (path.is_file() and path.suffix.lower() == ".zip"):
                yield path
