"""
Failure Diagnoser
=================
Recovers a readable failure reason for a transaction that timed out or was
rejected, by dry-running the exact same signed bytes.

Programs log through `msg!`, which the runtime prefixes with
"Program log: ". The innermost (most specific) message is emitted last, so
logs are scanned from the end.

Known limitation: the dry-run runs against current state, which may have
moved on since the real execution. A passing simulation for a transaction
that really failed is reported as SIMULATION_PASSED with the generic
message; it is not treated as success.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from config.settings import Settings
from txlander.execution.errors import GENERIC_FAILURE, serialize_error
from txlander.execution.types import ConfirmationLevel, SignedTransaction
from txlander.shared.system.logging import Logger

if TYPE_CHECKING:
    from txlander.shared.infrastructure.rpc_gateway import LedgerRpc


PROGRAM_LOG_PREFIX = "Program log: "


class DiagnosisKind(Enum):
    """How a diagnosis was obtained, most specific first."""

    PROGRAM_LOG = "PROGRAM_LOG"
    RAW_ERROR = "RAW_ERROR"
    SIMULATION_PASSED = "SIMULATION_PASSED"
    DIAGNOSIS_UNAVAILABLE = "DIAGNOSIS_UNAVAILABLE"


@dataclass(frozen=True)
class Diagnosis:
    """Structured result of a dry-run diagnosis."""

    kind: DiagnosisKind
    detail: Optional[str] = None
    raw_error: Any = None

    @property
    def is_specific(self) -> bool:
        """True when the dry-run told us more than the generic message."""
        return self.kind in (DiagnosisKind.PROGRAM_LOG, DiagnosisKind.RAW_ERROR)

    @property
    def message(self) -> str:
        if self.kind is DiagnosisKind.PROGRAM_LOG:
            return f"{GENERIC_FAILURE}: {self.detail}"
        if self.kind is DiagnosisKind.RAW_ERROR:
            return self.detail or GENERIC_FAILURE
        return GENERIC_FAILURE


def last_program_log(logs: Optional[Iterable[str]]) -> Optional[str]:
    """Content of the last "Program log: " line, prefix stripped."""
    if not logs:
        return None
    for line in reversed(list(logs)):
        if line.startswith(PROGRAM_LOG_PREFIX):
            return line[len(PROGRAM_LOG_PREFIX):]
    return None


class FailureDiagnoser:
    """
    Dry-runs failed submissions to extract the most specific error.

    The dry-run is bounded by its own timeout; a dry-run that cannot be
    performed yields DIAGNOSIS_UNAVAILABLE instead of an exception so the
    caller's Timeout/Rejected classification survives.
    """

    def __init__(
        self,
        rpc: "LedgerRpc",
        timeout: Optional[float] = None,
        level: Union[str, ConfirmationLevel, None] = None,
    ):
        self.rpc = rpc
        self.timeout = timeout if timeout is not None else Settings.DIAGNOSIS_TIMEOUT_S
        self.level = ConfirmationLevel.parse(level or Settings.SIMULATION_LEVEL)

    async def diagnose(self, tx: SignedTransaction) -> Diagnosis:
        try:
            result = await asyncio.wait_for(
                self.rpc.simulate(tx.raw, self.level), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            Logger.warning(
                f"[DIAGNOSE] Simulation timed out after {self.timeout}s for {tx.signature[:16]}..."
            )
            return Diagnosis(DiagnosisKind.DIAGNOSIS_UNAVAILABLE, detail="simulation timed out")
        except Exception as e:
            Logger.warning(f"[DIAGNOSE] Simulation unavailable for {tx.signature[:16]}...: {e}")
            return Diagnosis(DiagnosisKind.DIAGNOSIS_UNAVAILABLE, detail=str(e))

        if result.succeeded:
            Logger.warning(
                f"[DIAGNOSE] Simulation passed for failed tx {tx.signature[:16]}... "
                "(state may have changed)"
            )
            return Diagnosis(DiagnosisKind.SIMULATION_PASSED)

        program_log = last_program_log(result.logs)
        if program_log is not None:
            Logger.debug(f"[DIAGNOSE] {tx.signature[:16]}... program log: {program_log}")
            return Diagnosis(DiagnosisKind.PROGRAM_LOG, detail=program_log, raw_error=result.error)

        return Diagnosis(
            DiagnosisKind.RAW_ERROR,
            detail=serialize_error(result.error),
            raw_error=result.error,
        )
