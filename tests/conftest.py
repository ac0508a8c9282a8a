"""
Pytest configuration and shared fixtures for Content Auditor tests.

This module provides:
- Temporary directory management
- A package builder that writes items, stimuli, wordlists and a manifest
- In-memory sink fixtures
"""

import pytest
import tempfile
import shutil
import zipfile
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional, Sequence, Tuple

from content_auditor.core.options import ValidationOptions
from content_auditor.io.file_tree import FsFolder
from content_auditor.processor.context import PackageRun
from content_auditor.reporting.channels import MemoryChannel
from content_auditor.reporting.reports import ReportSet
from content_auditor.reporting.sink import ReportSink


# ============================================================================
# Content helpers
# ============================================================================

def term_html(index, text: str, tag_id: Optional[str] = None, closed: bool = True) -> str:
    """HTML marking ``text`` as glossary term ``index``."""
    tag_id = tag_id or f"item_TAG_{index}"
    start = (
        f'<span id="{tag_id}" class="its-tag" data-tag="word" '
        f'data-tag-boundary="start" data-word-index="{index}"></span>'
    )
    end = f'<span class="its-tag" data-tag-ref="{tag_id}" data-tag-boundary="end"></span>' if closed else ""
    return f"{start}{text}{end}"


METADATA = """<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <smarterAppMetadata xmlns="http://www.smarterapp.org/ns/1/assessment_item_metadata">
    <Subject>{subject}</Subject>
  </smarterAppMetadata>
</metadata>
"""


class PackageBuilder:
    """Writes a content package to a directory.

    Every item, stimulus and wordlist gets a folder following the naming
    convention unless ``folder`` overrides it. :meth:`write_manifest` lists
    every file currently on disk and records each folder's dependencies.
    """

    def __init__(self, root: Path):
        self.root = root
        (root / "Items").mkdir(parents=True, exist_ok=True)
        (root / "Stimuli").mkdir(parents=True, exist_ok=True)
        # folder -> list of referenced primary document paths
        self._refs: Dict[str, List[str]] = {}

    def _write(self, rel: str, text: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def item(
        self,
        bank: str = "100",
        item_id: str = "1",
        fmt: str = "mc",
        html: str = "<p>Question</p>",
        wordlist: Optional[str] = None,
        stimulus: Optional[str] = None,
        tutorial: Optional[str] = None,
        folder: Optional[str] = None,
        metadata: bool = True,
        content: bool = True,
        raw: Optional[str] = None,
    ) -> str:
        """Write an item; returns its folder name."""
        folder = folder or f"item-{bank}-{item_id}"
        attribs = '<attrib attid="itm_item_subject"><val>MATH</val></attrib>'
        refs: List[str] = []
        if stimulus:
            attribs += f'<attrib attid="stm_pass_id"><val>{stimulus}</val></attrib>'
            refs.append(f"Stimuli/stim-{bank}-{stimulus}/stim-{bank}-{stimulus}.xml")
        tut = ""
        if tutorial is not None:
            tut = f'<tutorial id="{tutorial}" bankkey="{bank}"/>'
            if tutorial:
                refs.append(f"Items/item-{bank}-{tutorial}/item-{bank}-{tutorial}.xml")
        res = ""
        if wordlist is not None:
            res = f'<resourceslist><resource type="wordList" id="{wordlist}" index="1" bankkey="{bank}"/></resourceslist>'
            if wordlist:
                refs.append(f"Items/item-{bank}-{wordlist}/item-{bank}-{wordlist}.xml")
        body = f'<content language="ENU"><stem><![CDATA[{html}]]></stem></content>' if content else ""
        text = raw if raw is not None else (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<itemrelease version="2.0"><item format="{fmt}" id="{item_id}" version="3" bankkey="{bank}">'
            f"<attriblist>{attribs}</attriblist>{tut}{res}{body}</item></itemrelease>"
        )
        self._write(f"Items/{folder}/{folder}.xml", text)
        if metadata:
            self._write(f"Items/{folder}/metadata.xml", METADATA.format(subject="MATH"))
        self._refs[f"Items/{folder}"] = refs
        return folder

    def stimulus(
        self,
        bank: str = "100",
        stim_id: str = "50",
        html: str = "<p>Once upon a time</p>",
        wordlist: Optional[str] = None,
        folder: Optional[str] = None,
        raw: Optional[str] = None,
    ) -> str:
        folder = folder or f"stim-{bank}-{stim_id}"
        res = ""
        refs: List[str] = []
        if wordlist:
            res = f'<resourceslist><resource type="wordList" id="{wordlist}" bankkey="{bank}"/></resourceslist>'
            refs.append(f"Items/item-{bank}-{wordlist}/item-{bank}-{wordlist}.xml")
        text = raw if raw is not None else (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<itemrelease version="2.0"><passage id="{stim_id}" version="2" bankkey="{bank}">'
            f'{res}<content language="ENU"><stem><![CDATA[{html}]]></stem></content></passage></itemrelease>'
        )
        self._write(f"Stimuli/{folder}/{folder}.xml", text)
        self._write(f"Stimuli/{folder}/metadata.xml", METADATA.format(subject="ELA"))
        self._refs[f"Stimuli/{folder}"] = refs
        return folder

    def wordlist(
        self,
        bank: str = "100",
        wl_id: str = "9",
        keywords: Sequence[Tuple] = (),
        attachments: Optional[Dict[str, bytes]] = None,
    ) -> str:
        """Write a wordlist.

        Args:
            keywords: (index, text, [(listType, html), ...]) tuples
            attachments: filename -> bytes written beside the document
        """
        folder = f"item-{bank}-{wl_id}"
        parts = []
        for index, text, glosses in keywords:
            htmls = "".join(f'<html listType="{lt}"><![CDATA[{h}]]></html>' for lt, h in glosses)
            parts.append(f'<keyword text="{text}" index="{index}">{htmls}</keyword>')
        self._write(
            f"Items/{folder}/{folder}.xml",
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<itemrelease version="2.0"><item format="wordList" id="{wl_id}" version="1" bankkey="{bank}">'
            f'<keywordList>{"".join(parts)}</keywordList></item></itemrelease>',
        )
        for name, data in (attachments or {}).items():
            (self.root / "Items" / folder / name).write_bytes(data)
        self._refs[f"Items/{folder}"] = []
        return folder

    def write_manifest(
        self,
        omit_files: Iterable[str] = (),
        omit_deps: Iterable[Tuple[str, str]] = (),
        raw: Optional[str] = None,
    ) -> None:
        """List every file on disk as a resource with folder-level dependencies."""
        if raw is not None:
            self._write("imsmanifest.xml", raw)
            return
        omit_files = {f.lower() for f in omit_files}
        omit_deps = set(omit_deps)
        ids: Dict[str, str] = {}
        files = sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file() and p.name != "imsmanifest.xml"
        )
        for rel in files:
            ids[rel] = rel.replace("/", "-").replace(".", "-")
        resources = []
        for rel in files:
            if rel.lower() in omit_files:
                continue
            folder, name = rel.rsplit("/", 1)
            deps = []
            if name == folder.rsplit("/", 1)[-1] + ".xml":
                targets = [f for f in files if f.startswith(folder + "/") and f != rel]
                targets += self._refs.get(folder, [])
                deps = [ids[t] for t in targets if t in ids and (ids[rel], ids[t]) not in omit_deps]
            dep_xml = "".join(f'<dependency identifierref="{d}"/>' for d in deps)
            resources.append(
                f'<resource identifier="{ids[rel]}" type="associatedcontent"><file href="{rel}"/>{dep_xml}</resource>'
            )
        self._write(
            "imsmanifest.xml",
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<manifest xmlns="http://www.imsglobal.org/xsd/apip/apipv1p0/imscp_v1p1" identifier="MAN">'
            f'<resources>{"".join(resources)}</resources></manifest>',
        )

    def resource_id(self, rel: str) -> str:
        return rel.replace("/", "-").replace(".", "-")

    def to_zip(self, path: Path) -> Path:
        with zipfile.ZipFile(path, "w") as zf:
            for p in sorted(self.root.rglob("*")):
                if p.is_file():
                    zf.write(p, p.relative_to(self.root).as_posix())
        return path


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp(prefix="audit_test_"))
    try:
        yield tmp
    finally:
        if tmp.exists():
            shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def builder(temp_dir: Path) -> PackageBuilder:
    """Empty package in ``temp_dir/pkg``."""
    return PackageBuilder(temp_dir / "pkg")


@pytest.fixture
def channel() -> MemoryChannel:
    return MemoryChannel()


@pytest.fixture
def sink(channel: MemoryChannel) -> ReportSink:
    """Deduplicating sink writing to the ``channel`` fixture."""
    return ReportSink(channel, dedupe=True)


@pytest.fixture
def options() -> ValidationOptions:
    return ValidationOptions()


@pytest.fixture
def make_run(builder: PackageBuilder, sink: ReportSink, options: ValidationOptions):
    """Factory for a PackageRun over the builder's directory with in-memory reports."""
    reports_stack = []

    def factory(opts=None) -> PackageRun:
        reports = ReportSet(None, "pkg", gloss_text=False)
        reports.__enter__()
        reports_stack.append(reports)
        return PackageRun(
            root=FsFolder(builder.root),
            name="pkg",
            sink=sink,
            options=opts or options,
            reports=reports,
        )

    yield factory
    for reports in reports_stack:
        reports.__exit__(None, None, None)
