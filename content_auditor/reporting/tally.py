"""Summary counters for one package or a whole run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List


# Count categories dumped in the summary report, in order, with titles
SECTIONS = (
    ("item_type", "Item Type Counts"),
    ("translation", "Glossary Translation Counts"),
    ("term", "Glossary Term Counts"),
)


@dataclass
class Tally:
    """
    Summary aggregator.

    Scalar totals live in :attr:`totals`, keyed counts in :attr:`counts`
    (one Counter per category such as ``item_type`` or ``term``). Each
    package gets its own Tally; :meth:`merge` folds partials into a run
    total.
    """

    totals: Counter = field(default_factory=Counter)
    counts: Dict[str, Counter] = field(default_factory=dict)

    def bump(self, name: str, n: int = 1) -> None:
        """Add ``n`` to a scalar total (``items``, ``wordlists``...)."""
        self.totals[name] += n

    def increment(self, category: str, key: str, n: int = 1) -> None:
        """Add ``n`` to ``key`` within ``category``."""
        self.counts.setdefault(category, Counter())[key] += n

    def count(self, category: str, key: str) -> int:
        return self.counts.get(category, Counter())[key]

    def merge(self, other: "Tally") -> "Tally":
        """Fold ``other`` into this tally and return self."""
        self.totals.update(other.totals)
        for category, counter in other.counts.items():
            self.counts.setdefault(category, Counter()).update(counter)
        return self

    @staticmethod
    def _ordered(counter: Counter) -> List[tuple]:
        return sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))

    def render(self, error_count: int) -> str:
        """
        Summary report text.

        Args:
            error_count: Findings written by the sink for the same scope

        Returns:
            Report text with totals then count dumps, most frequent first
        """
        lines = [
            f"Errors: {error_count}",
            f"Items: {self.totals['items']}",
            f"Stimuli: {self.totals['stimuli']}",
            f"Word Lists: {self.totals['wordlists']}",
            f"Glossary Terms: {self.totals['glossary_terms']}",
            f"Unique Glossary Terms: {len(self.counts.get('term', {}))}",
            f"Glossary m4a Audio: {self.totals['audio_m4a']}",
            f"Glossary ogg Audio: {self.totals['audio_ogg']}",
        ]
        for category, title in SECTIONS:
            counter = self.counts.get(category)
            if not counter:
                continue
            lines.append("")
            lines.append(f"{title}:")
            lines.extend(f"{count:>6}: {key}" for key, count in self._ordered(counter))
        return "\n".join(lines) + "\n"
