"""
Submission Pipeline
===================
Reliable transaction landing against a lossy network.

Components:
- Broadcaster: rebroadcast loop (The Megaphone)
- ConfirmationWatcher: status polling (The Lookout)
- FailureDiagnoser: dry-run error recovery (The Medic)
- SubmissionCoordinator: orchestration, single and batch (The Pilot)
"""

from txlander.execution.types import (
    ConfirmationLevel,
    SignedTransaction,
    SimulationResult,
    StatusSnapshot,
    SubmissionHandle,
    SubmissionOutcome,
)

from txlander.execution.errors import (
    ConfirmationTimeout,
    ErrorCode,
    NetworkUnavailable,
    SubmissionError,
    TransactionFailed,
    TransactionRejected,
)

from txlander.execution.broadcaster import Broadcaster, BroadcastTask
from txlander.execution.watcher import ConfirmationWatcher, ConfirmationWatermark
from txlander.execution.diagnoser import Diagnosis, DiagnosisKind, FailureDiagnoser
from txlander.execution.assembler import SoldersAssembler, TransactionAssembler
from txlander.execution.coordinator import SubmissionCoordinator, SubmitterConfig


__all__ = [
    # Types
    "ConfirmationLevel",
    "SignedTransaction",
    "SimulationResult",
    "StatusSnapshot",
    "SubmissionHandle",
    "SubmissionOutcome",
    # Errors
    "ConfirmationTimeout",
    "ErrorCode",
    "NetworkUnavailable",
    "SubmissionError",
    "TransactionFailed",
    "TransactionRejected",
    # Components
    "Broadcaster",
    "BroadcastTask",
    "ConfirmationWatcher",
    "ConfirmationWatermark",
    "Diagnosis",
    "DiagnosisKind",
    "FailureDiagnoser",
    "SoldersAssembler",
    "TransactionAssembler",
    # Coordinator
    "SubmissionCoordinator",
    "SubmitterConfig",
]
