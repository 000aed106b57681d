"""
errors.py — Exception and warning types raised by the pipeline.

  RetrievalError            — a source could not be fetched or parsed (fatal)
  SchemaMismatchError       — a required column is missing after normalization (fatal)
  JoinKeyUnresolvedWarning  — a row's join key did not resolve (non-fatal)
"""

from __future__ import annotations


class PitCountError(Exception):
    """Base class for fatal pipeline errors."""


class RetrievalError(PitCountError):
    """A source resource is unreachable or malformed."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Could not retrieve {location}: {reason}")


class SchemaMismatchError(PitCountError):
    """A required column is absent after column normalization."""

    def __init__(self, missing: list[str], context: str = "") -> None:
        self.missing = missing
        self.context = context
        where = f" in {context}" if context else ""
        super().__init__(f"Missing required column(s){where}: {', '.join(missing)}")


class JoinKeyUnresolvedWarning(UserWarning):
    """Rows whose geographic or provider key failed to resolve in a join."""
