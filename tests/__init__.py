"""Content Auditor test suite."""
