"""
Exception hierarchy for the payment lifecycle.

Only ``ResourceNotVisibleError`` is recovered locally (the polling driver
retries it); everything else reaches the caller unchanged. A flow step that
the backend rejects is *not* an exception: it decodes to a ``Failed`` status
the caller has to branch on.
"""

from typing import Any, Optional

RETRIABLE_STATUS_CODES = {429, 502, 503, 504}


class PayflowError(Exception):
    """Base exception for the payflow package."""


class TransportError(PayflowError):
    """Failure reported by the transport (network, auth, HTTP error status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, retriable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retriable = retriable


class DecodingError(PayflowError):
    """Payload does not match any known shape. Never retried."""


class ResourceNotVisibleError(PayflowError):
    """
    Fetch returned 404 for a resource that should exist.

    Right after creation the backend may not have made a payment visible
    yet, so this is retriable while polling.
    """

    def __init__(self, resource_id: str):
        super().__init__(f"Resource not visible yet: {resource_id}")
        self.resource_id = resource_id


class ResourceNotFoundError(PayflowError):
    """A resource stayed invisible for the whole polling budget."""

    def __init__(self, resource_id: str, attempts: int):
        super().__init__(f"Resource not found after {attempts} attempts: {resource_id}")
        self.resource_id = resource_id
        self.attempts = attempts


class PollingTimeoutError(PayflowError):
    """The polling budget elapsed before a terminal snapshot was observed."""

    def __init__(self, last_snapshot: Any, attempts: int, elapsed: float):
        super().__init__(f"No terminal state after {attempts} attempts in {elapsed:.1f}s")
        self.last_snapshot = last_snapshot
        self.attempts = attempts
        self.elapsed = elapsed


class PollingSessionError(PayflowError):
    """A polling session was driven more than once."""


class FormValidationError(PayflowError):
    """Form answers failed client-side validation."""

    def __init__(self, problems: list):
        details = ", ".join(f"{p.input_id}={p.reason.value}" for p in problems)
        super().__init__(f"Invalid form answers: {details}")
        self.problems = problems
