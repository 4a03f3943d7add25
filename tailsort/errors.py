from __future__ import annotations


class UnparseableSource(ValueError):
    """The syntax tree is missing or the parser reported errors; the document is left as is."""


class InvalidConfiguration(ValueError):
    """Raised while resolving settings, before any document is processed."""


class SpanConsistencyViolation(RuntimeError):
    """Edits overlap, run out of order or fall outside the document."""
