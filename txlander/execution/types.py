"""
Submission Types
================
Data model shared by the submission pipeline.

Every piece here is plain data: the Broadcaster, Watcher, Diagnoser and
Coordinator exchange these records and never each other's internals.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIRMATION LEVELS
# ═══════════════════════════════════════════════════════════════════════════════

class ConfirmationLevel(Enum):
    """Network consensus depth, ordered processed < confirmed < finalized."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"

    @property
    def depth(self) -> int:
        return _DEPTHS[self]

    def __lt__(self, other: "ConfirmationLevel") -> bool:
        if not isinstance(other, ConfirmationLevel):
            return NotImplemented
        return self.depth < other.depth

    def __le__(self, other: "ConfirmationLevel") -> bool:
        if not isinstance(other, ConfirmationLevel):
            return NotImplemented
        return self.depth <= other.depth

    def __gt__(self, other: "ConfirmationLevel") -> bool:
        if not isinstance(other, ConfirmationLevel):
            return NotImplemented
        return self.depth > other.depth

    def __ge__(self, other: "ConfirmationLevel") -> bool:
        if not isinstance(other, ConfirmationLevel):
            return NotImplemented
        return self.depth >= other.depth

    @classmethod
    def parse(cls, value: Union[str, "ConfirmationLevel"]) -> "ConfirmationLevel":
        """Accept an enum member or its wire name ("confirmed", "Finalized", ...)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown confirmation level {value!r} "
                f"(expected one of {[lvl.value for lvl in cls]})"
            ) from None


_DEPTHS = {
    ConfirmationLevel.PROCESSED: 0,
    ConfirmationLevel.CONFIRMED: 1,
    ConfirmationLevel.FINALIZED: 2,
}


class SubmissionOutcome(Enum):
    """Lifecycle state of a single submission."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    TIMED_OUT = "TIMED_OUT"


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSACTIONS & HANDLES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SignedTransaction:
    """Immutable signed wire bytes plus the signature that identifies them."""

    raw: bytes
    signature: str

    def __post_init__(self):
        if not self.raw:
            raise ValueError("SignedTransaction requires non-empty raw bytes")
        if not self.signature:
            raise ValueError("SignedTransaction requires a signature")

    @classmethod
    def from_versioned(cls, tx: Any) -> "SignedTransaction":
        """Wrap a signed solders VersionedTransaction/Transaction."""
        return cls(raw=bytes(tx), signature=str(tx.signatures[0]))


@dataclass
class SubmissionHandle:
    """
    Per-submission record owned by one coordinator call.

    At most one terminal outcome is ever recorded; `finish()` refuses a second.
    """

    signature: str
    start_time: float = field(default_factory=time.monotonic)
    done: bool = False
    outcome: SubmissionOutcome = SubmissionOutcome.PENDING

    def finish(self, outcome: SubmissionOutcome) -> None:
        if outcome is SubmissionOutcome.PENDING:
            raise ValueError("PENDING is not a terminal outcome")
        if self.done:
            raise RuntimeError(
                f"Submission {self.signature[:16]} already finished as {self.outcome.value}"
            )
        self.outcome = outcome
        self.done = True

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time


# ═══════════════════════════════════════════════════════════════════════════════
# NETWORK OBSERVATIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StatusSnapshot:
    """One signature status observation (getSignatureStatuses)."""

    level: Optional[ConfirmationLevel] = None
    error: Any = None
    slot: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a dry-run (simulateTransaction)."""

    error: Any = None
    logs: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None
