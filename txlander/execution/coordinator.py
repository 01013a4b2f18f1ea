"""
Submission Coordinator
======================
The "Pilot" of the submission pipeline.

For one transaction:
    blockhash -> assemble/sign -> {Broadcaster loop || Watcher poll}
    -> confirmed: return signature
    -> timed out / rejected: stop broadcasting, dry-run, raise

For a batch, every entry runs the same protocol independently and
concurrently; one entry failing never cancels or affects the others.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, List, Optional, Sequence, Union

from config.settings import Settings
from txlander.execution.assembler import SoldersAssembler, TransactionAssembler
from txlander.execution.broadcaster import Broadcaster
from txlander.execution.diagnoser import Diagnosis, DiagnosisKind, FailureDiagnoser
from txlander.execution.errors import (
    GENERIC_FAILURE,
    TIMEOUT_MESSAGE,
    ConfirmationTimeout,
    NetworkUnavailable,
    SubmissionError,
    TransactionFailed,
    TransactionRejected,
    serialize_error,
)
from txlander.execution.types import (
    ConfirmationLevel,
    SignedTransaction,
    SubmissionHandle,
    SubmissionOutcome,
)
from txlander.execution.watcher import ConfirmationWatcher
from txlander.shared.system.logging import Logger

if TYPE_CHECKING:
    from txlander.shared.infrastructure.rpc_gateway import LedgerRpc


BatchResult = Union[str, Exception]


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SubmitterConfig:
    """Timing configuration for one coordinator."""

    # Confirmation
    confirmation_timeout_ms: int = 30000
    confirm_level: str = "confirmed"
    poll_interval_sec: float = 0.4

    # Rebroadcast
    rebroadcast_interval_sec: float = 0.3

    # Diagnosis
    diagnosis_timeout_sec: float = 10.0
    simulation_level: str = "processed"

    @classmethod
    def from_settings(cls) -> "SubmitterConfig":
        return cls(
            confirmation_timeout_ms=Settings.CONFIRM_TIMEOUT_MS,
            confirm_level=Settings.CONFIRM_LEVEL,
            poll_interval_sec=Settings.STATUS_POLL_INTERVAL_MS / 1000,
            rebroadcast_interval_sec=Settings.REBROADCAST_INTERVAL_MS / 1000,
            diagnosis_timeout_sec=Settings.DIAGNOSIS_TIMEOUT_S,
            simulation_level=Settings.SIMULATION_LEVEL,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# COORDINATOR
# ═══════════════════════════════════════════════════════════════════════════════

class SubmissionCoordinator:
    """
    Reliable submission against a lossy network.

    Usage:
        async with SolanaRpcGateway(url) as rpc:
            coordinator = SubmissionCoordinator(rpc)
            sig = await coordinator.submit(instructions, payer, [extra_signer])
    """

    def __init__(
        self,
        rpc: "LedgerRpc",
        assembler: Optional[TransactionAssembler] = None,
        config: Optional[SubmitterConfig] = None,
    ):
        self.rpc = rpc
        self.assembler = assembler or SoldersAssembler()
        self.config = config or SubmitterConfig.from_settings()

        self.broadcaster = Broadcaster(rpc, interval=self.config.rebroadcast_interval_sec)
        self.watcher = ConfirmationWatcher(rpc, poll_interval=self.config.poll_interval_sec)
        self.diagnoser = FailureDiagnoser(
            rpc,
            timeout=self.config.diagnosis_timeout_sec,
            level=self.config.simulation_level,
        )

        # Statistics
        self._submissions = 0
        self._confirmations = 0
        self._rejections = 0
        self._timeouts = 0
        self._rebroadcasts = 0

    # ─── Single ─────────────────────────────────────────────────────────────

    async def submit(
        self,
        instructions: Sequence[Any],
        payer: Any,
        signers: Sequence[Any] = (),
        timeout_ms: Optional[int] = None,
        confirm_level: Union[str, ConfirmationLevel, None] = None,
    ) -> str:
        """
        Sign `instructions` with a fresh blockhash and land them.

        Returns the transaction signature. Raises ConfirmationTimeout or
        TransactionFailed (both SubmissionError).
        """
        try:
            blockhash = await self.rpc.get_latest_blockhash()
        except NetworkUnavailable as e:
            raise SubmissionError(f"{GENERIC_FAILURE}: no recent blockhash ({e})") from e

        tx = self.assembler.assemble(instructions, payer, list(signers), blockhash)
        return await self.submit_signed(tx, timeout_ms=timeout_ms, confirm_level=confirm_level)

    async def submit_signed(
        self,
        tx: SignedTransaction,
        timeout_ms: Optional[int] = None,
        confirm_level: Union[str, ConfirmationLevel, None] = None,
    ) -> str:
        """Run the broadcast/confirm/diagnose protocol for already-signed bytes."""
        timeout_ms = self.config.confirmation_timeout_ms if timeout_ms is None else timeout_ms
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        level = ConfirmationLevel.parse(confirm_level or self.config.confirm_level)

        loop = asyncio.get_running_loop()
        handle = SubmissionHandle(tx.signature)
        deadline = loop.time() + timeout_ms / 1000
        self._submissions += 1

        Logger.info(f"[SUBMIT] Started awaiting confirmation for {tx.signature}")
        broadcast = self.broadcaster.start(tx, deadline)

        failure: Optional[SubmissionError] = None
        try:
            await self.watcher.await_confirmation(tx.signature, deadline, level)
        except ConfirmationTimeout as e:
            failure = e
            handle.finish(SubmissionOutcome.TIMED_OUT)
        except TransactionRejected as e:
            failure = e
            handle.finish(SubmissionOutcome.REJECTED)
        else:
            handle.finish(SubmissionOutcome.CONFIRMED)
        finally:
            broadcast.cancel()
            await broadcast.join()
            self._rebroadcasts += max(broadcast.sends - 1, 0)

        if failure is None:
            self._confirmations += 1
            Logger.success(
                f"[SUBMIT] Latency {tx.signature[:16]}... {handle.elapsed:.3f}s "
                f"({broadcast.sends} sends)"
            )
            return tx.signature

        diagnosis = await self.diagnoser.diagnose(tx)
        if handle.outcome is SubmissionOutcome.TIMED_OUT:
            self._timeouts += 1
            raise self._timeout_error(tx, diagnosis) from failure

        self._rejections += 1
        raise self._rejection_error(tx, failure, diagnosis) from failure

    # ─── Batch ──────────────────────────────────────────────────────────────

    async def submit_batch(
        self,
        batch: Sequence[Sequence[Any]],
        payer: Any,
        signers: Sequence[Any] = (),
        timeout_ms: Optional[int] = None,
        confirm_level: Union[str, ConfirmationLevel, None] = None,
    ) -> List[BatchResult]:
        """
        Submit independent instruction sets concurrently.

        Returns one entry per input, in input order: the signature, or the
        exception that entry failed with.
        """
        Logger.info(f"[BATCH] Submitting {len(batch)} transactions")
        return await self._gather(
            self.submit(ixs, payer, signers, timeout_ms, confirm_level) for ixs in batch
        )

    async def submit_signed_batch(
        self,
        txs: Sequence[SignedTransaction],
        timeout_ms: Optional[int] = None,
        confirm_level: Union[str, ConfirmationLevel, None] = None,
    ) -> List[BatchResult]:
        Logger.info(f"[BATCH] Submitting {len(txs)} signed transactions")
        return await self._gather(
            self.submit_signed(tx, timeout_ms, confirm_level) for tx in txs
        )

    async def _gather(self, submissions) -> List[BatchResult]:
        results = await asyncio.gather(*(self._settle(s) for s in submissions))
        failed = sum(1 for r in results if isinstance(r, Exception))
        Logger.info(f"[BATCH] Done: {len(results) - failed} landed, {failed} failed")
        return list(results)

    @staticmethod
    async def _settle(submission: Awaitable[str]) -> BatchResult:
        try:
            return await submission
        except Exception as e:
            return e

    # ─── Error shaping ──────────────────────────────────────────────────────

    @staticmethod
    def _timeout_error(tx: SignedTransaction, diagnosis: Diagnosis) -> ConfirmationTimeout:
        message = f"{TIMEOUT_MESSAGE} {tx.signature}"
        if diagnosis.is_specific:
            message = f"{message}: {diagnosis.message}"
        return ConfirmationTimeout(message, signature=tx.signature, diagnosis=diagnosis)

    @staticmethod
    def _rejection_error(
        tx: SignedTransaction,
        rejection: TransactionRejected,
        diagnosis: Diagnosis,
    ) -> TransactionFailed:
        if diagnosis.kind is DiagnosisKind.PROGRAM_LOG:
            message = diagnosis.message
        elif diagnosis.kind is DiagnosisKind.RAW_ERROR and diagnosis.detail:
            message = diagnosis.detail
        else:
            message = serialize_error(rejection.status_error) or GENERIC_FAILURE

        Logger.error(f"[SUBMIT] {tx.signature[:16]}... failed: {message}")
        return TransactionFailed(
            message,
            signature=tx.signature,
            diagnosis=diagnosis,
            status_error=rejection.status_error,
        )

    # ─── Stats ──────────────────────────────────────────────────────────────

    def get_stats(self) -> dict:
        """Get submission statistics."""
        success_rate = (
            self._confirmations / self._submissions * 100
            if self._submissions > 0
            else 0
        )

        return {
            "submissions": self._submissions,
            "confirmations": self._confirmations,
            "rejections": self._rejections,
            "timeouts": self._timeouts,
            "rebroadcasts": self._rebroadcasts,
            "success_rate_pct": round(success_rate, 2),
        }
