"""Package manifest parsing and dependency graph."""

from __future__ import annotations

from content_auditor.manifest.graph import ManifestGraph, normalize_filename

__all__ = ["ManifestGraph", "normalize_filename"]
