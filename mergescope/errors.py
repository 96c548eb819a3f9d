"""Exception hierarchy for mergescope."""

from typing import Dict, Optional


class MergeScopeError(Exception):
    """Base exception for all mergescope errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidInput(MergeScopeError):
    """Missing or malformed request parameters. Raised before any git query."""


class RepositoryError(MergeScopeError):
    """A git query failed: unknown branch, bad ref, missing repo or timeout."""


class ComputationError(MergeScopeError):
    """An internal invariant was violated while analyzing fetched data."""


class AnalysisCancelled(MergeScopeError):
    """The caller cancelled the analysis while queries were still pending."""
