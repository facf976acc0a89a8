"""
Exceptions and warnings for the cleaning pipeline.

Errors (subclasses of ``OccurrenceCleanerError``) abort a run. Warnings
(subclasses of ``UserWarning``) describe conditions the pipeline tolerates:
they are logged, issued through :mod:`warnings`, and returned to the caller.
"""

from __future__ import annotations


class OccurrenceCleanerError(Exception):
    """Base exception for all pipeline errors."""


# =============================================================================
# Fetcher
# =============================================================================


class SourceUnavailable(OccurrenceCleanerError):
    """
    Raised when the occurrence source cannot be reached or answers with an error.

    Covers connection failures, timeouts and server errors that persist after
    the HTTP client's retries.
    """


class QuotaExceeded(OccurrenceCleanerError):
    """
    Raised when the source refuses the request volume.

    Either the source keeps rate limiting (HTTP 429) after retries, or the
    requested record count is beyond what the search API can page through.
    """


class FetchCancelled(OccurrenceCleanerError):
    """Raised when a caller cancels a fetch between pages."""


# =============================================================================
# Projector
# =============================================================================


class SchemaMismatch(OccurrenceCleanerError):
    """Raised when the source schema no longer matches what the pipeline expects."""


class MissingColumn(SchemaMismatch):
    """Raised when expected fields are absent from the source records."""

    def __init__(self, columns: list[str]) -> None:
        self.columns = columns
        super().__init__(f"Source records are missing expected field(s): {', '.join(columns)}")


# =============================================================================
# Non-fatal
# =============================================================================


class NormalizationMiss(UserWarning):
    """Country codes that could not be mapped to ISO 3166 alpha-3."""

    def __init__(self, codes: list[str], records: int) -> None:
        self.codes = codes
        self.records = records
        super().__init__(
            f"{records} record(s) with unmapped country code(s) {codes}; "
            "country-specific flag tests will pass them"
        )


class EmptyResultSet(UserWarning):
    """A stage removed every remaining record."""

    def __init__(self, stage: str, before: int, remaining: int = 0) -> None:
        self.stage = stage
        self.before = before
        self.remaining = remaining
        super().__init__(
            f"Stage '{stage}' left {remaining} of {before} record(s)"
        )
