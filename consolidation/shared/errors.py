"""
consolidation/shared/errors.py
───────────────────────────────
Exception family for overload detection.

Two kinds of failure
─────────────────────
  Data-quality failures (recoverable):
    InsufficientHistoryError  → fewer samples than the regression window.
    DegenerateFitError        → the weighted fit has no unique solution.
    Both are caught inside the local-regression policy and turned into a
    fallback delegation. The consolidation controller never sees them.

  Configuration failures (fatal):
    MissingFallbackError      → a decision was requested with no fallback set.
    InvalidConfigurationError → non-positive bandwidth, scheduling interval,
                                safety parameter or threshold.
    These propagate to the caller and are never retried.
"""

from __future__ import annotations


class OverloadDetectionError(Exception):
    """
    Base class for every error raised by the overload detection core.

    Attributes:
        reason: Human-readable explanation of the failure.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class InsufficientHistoryError(OverloadDetectionError):
    """Raised when a host has fewer utilisation samples than the window needs."""

    def __init__(self, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Utilisation history has {available} samples; "
            f"{required} are required for a local regression fit."
        )


class DegenerateFitError(OverloadDetectionError):
    """Raised when the weighted least-squares system cannot be solved."""
    pass


class MissingFallbackError(OverloadDetectionError):
    """
    Raised when an overload decision is requested but no fallback is configured.

    This is a setup defect, not a runtime condition. Do NOT swallow it.
    """
    pass


class InvalidConfigurationError(OverloadDetectionError, ValueError):
    """Raised for non-positive bandwidth, interval, safety parameter or threshold."""
    pass
