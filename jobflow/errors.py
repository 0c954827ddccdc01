"""
JobFlow error taxonomy.

    JobFlowError
    ├── FetchFailure      - upstream request failed (non-2xx, transport, bad JSON)
    └── MalformedPayload  - a job field could not be decoded

FetchFailure is surfaced to the user as a retryable error state.
MalformedPayload is always recovered where the field is consumed and
never escapes the query engine.
"""

from typing import Optional


class JobFlowError(Exception):
    """Base class for all JobFlow errors."""


class FetchFailure(JobFlowError):
    """
    Raised when a gateway operation cannot produce a payload.

    Attributes:
        operation: Logical gateway operation that failed (e.g. "all_jobs")
        status_code: Upstream HTTP status, None for transport/decode errors
    """

    def __init__(self, operation: str, status_code: Optional[int] = None, reason: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        message = f"Failed to fetch {operation}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedPayload(JobFlowError):
    """Raised when a job field holds data that cannot be decoded."""

    def __init__(self, field: str, raw: str):
        self.field = field
        self.raw = raw
        super().__init__(f"Malformed {field}: {raw[:50]!r}")
