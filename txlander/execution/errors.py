"""
Submission Errors
=================
Exception taxonomy for the submission pipeline.

- NetworkUnavailable: one RPC exchange failed. Absorbed by the broadcast and
  status loops; never surfaced by a submission on its own.
- SubmissionError and subclasses: terminal failures handed back to callers.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from txlander.execution.diagnoser import Diagnosis


GENERIC_FAILURE = "Transaction failed"
TIMEOUT_MESSAGE = "Timed out awaiting confirmation on transaction"


class ErrorCode(Enum):
    """Standardized error codes for surfaced submission failures."""

    TIMEOUT = "TIMEOUT"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"


def serialize_error(error: Any) -> str:
    """Render an opaque ledger error value as a stable string."""
    if error is None:
        return ""
    try:
        return json.dumps(error, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(error)


class NetworkUnavailable(Exception):
    """A single RPC exchange could not be completed (transport, 5xx, RPC error)."""

    def __init__(self, method: str, reason: Any = None):
        self.method = method
        self.reason = reason
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"{method} unavailable{detail}")


class SubmissionError(Exception):
    """Base class for failures surfaced by the coordinator."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        diagnosis: Optional["Diagnosis"] = None,
    ):
        super().__init__(message)
        self.message = message
        self.signature = signature
        self.diagnosis = diagnosis


class ConfirmationTimeout(SubmissionError):
    """Deadline elapsed with no qualifying status."""

    code = ErrorCode.TIMEOUT


class TransactionRejected(SubmissionError):
    """The network reported an error status for the signature."""

    code = ErrorCode.REJECTED

    def __init__(
        self,
        status_error: Any,
        signature: Optional[str] = None,
        diagnosis: Optional["Diagnosis"] = None,
    ):
        self.status_error = status_error
        super().__init__(serialize_error(status_error) or GENERIC_FAILURE, signature, diagnosis)


class TransactionFailed(SubmissionError):
    """A rejection after diagnosis; message is the most specific available."""

    code = ErrorCode.REJECTED

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        diagnosis: Optional["Diagnosis"] = None,
        status_error: Any = None,
    ):
        super().__init__(message, signature, diagnosis)
        self.status_error = status_error
