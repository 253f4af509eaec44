"""Completion error hierarchy.

Each error carries a ``kind`` so the orchestrator can log and record failures
without inspecting exception types.
"""

from __future__ import annotations

from notesmith.models.refine import FailureKind


class CompletionError(Exception):
    """Base for all completion exchange failures."""

    kind: FailureKind = FailureKind.UNEXPECTED


class TransportFailure(CompletionError):
    """The endpoint could not be reached (DNS, connection, TLS, bad URL)."""

    kind = FailureKind.TRANSPORT


class ApiStatusFailure(CompletionError):
    """The endpoint answered with a non-2xx status.

    Attributes:
        status: HTTP status code.
        status_text: Reason phrase sent with the status.
        body: Response body, verbatim.
    """

    kind = FailureKind.API_STATUS

    def __init__(self, status: int, status_text: str = "", body: str = "") -> None:
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(f"API Error: {status} {status_text} - {body}")


class EmptyResponseFailure(CompletionError):
    """The endpoint answered 2xx but without the expected text field."""

    kind = FailureKind.EMPTY_RESPONSE
