"""Per-package run context."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from content_auditor.core.options import OptionPredicate
from content_auditor.io.file_tree import FileFolder
from content_auditor.manifest.graph import ManifestGraph
from content_auditor.reporting.models import Identity
from content_auditor.reporting.reports import ReportSet
from content_auditor.reporting.sink import ReportSink
from content_auditor.reporting.tally import Tally


class IdentityState(str, Enum):
    """Lifecycle of one identity within a run."""

    UNINDEXED = "Unindexed"
    INDEXED = "Indexed"
    VALIDATED = "Validated"
    FAULTED = "FaultedDuringValidation"

    @property
    def is_terminal(self) -> bool:
        return self in (IdentityState.VALIDATED, IdentityState.FAULTED)


@dataclass
class PackageRun:
    """
    Everything one package's tabulation reads and writes.

    Created fresh when a package is opened and dropped when it closes. The
    sink and reports may outlive it (aggregate runs share them); the
    identity index, reference counts and tally never do.

    Attributes:
        root: Package root folder
        name: Package name (report prefix in each/aggregate modes)
        sink: Error sink
        options: Validation option predicate
        reports: Tabular reports, or None to skip them
        manifest: Manifest graph (empty until built)
        identities: Every indexed identity in folder-scan order, duplicates included
        wordlist_refs: Number of items referencing each wordlist id
        requested_terms: Keyword indices requested per wordlist id
        tally: Summary counters for this package
    """

    root: FileFolder
    name: str
    sink: ReportSink
    options: OptionPredicate
    reports: Optional[ReportSet] = None
    manifest: ManifestGraph = field(default_factory=ManifestGraph)
    identities: List[Identity] = field(default_factory=list)
    wordlist_refs: Counter = field(default_factory=Counter)
    requested_terms: Dict[str, Set[int]] = field(default_factory=dict)
    tally: Tally = field(default_factory=Tally)
    _by_id: Dict[str, Identity] = field(default_factory=dict, repr=False)
    _states: Dict[Identity, IdentityState] = field(default_factory=dict, repr=False)

    def register(self, identity: Identity) -> bool:
        """
        Add an identity to the index.

        Returns:
            False when the id was already indexed. The identity is kept
            either way; lookups by id keep returning the first one.
        """
        self.identities.append(identity)
        self._states[identity] = IdentityState.INDEXED
        if identity.item_id in self._by_id:
            return False
        self._by_id[identity.item_id] = identity
        return True

    def lookup(self, item_id: str) -> Optional[Identity]:
        return self._by_id.get(item_id)

    def state(self, identity: Identity) -> IdentityState:
        return self._states.get(identity, IdentityState.UNINDEXED)

    def set_state(self, identity: Identity, state: IdentityState) -> None:
        """Move an identity forward. Terminal states are final."""
        current = self.state(identity)
        if current.is_terminal:
            raise ValueError(f"{identity} already {current.value}")
        self._states[identity] = state
