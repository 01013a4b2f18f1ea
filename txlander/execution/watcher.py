"""
Confirmation Watcher
====================
Polls signature status until a transaction reaches the requested
confirmation level, is reported failed, or the deadline passes.

Status updates can arrive out of order across RPC nodes (a lagging node may
report `processed` after another reported `confirmed`). The watcher keeps a
high-water mark and never regresses to a shallower level.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional, Union

from config.settings import Settings
from txlander.execution.errors import (
    TIMEOUT_MESSAGE,
    ConfirmationTimeout,
    NetworkUnavailable,
    TransactionRejected,
)
from txlander.execution.types import ConfirmationLevel, StatusSnapshot
from txlander.shared.system.logging import Logger

if TYPE_CHECKING:
    from txlander.shared.infrastructure.rpc_gateway import LedgerRpc


class ConfirmationWatermark:
    """Highest confirmation level observed for one signature."""

    def __init__(self, target: ConfirmationLevel):
        self.target = target
        self.level: Optional[ConfirmationLevel] = None
        self.slot: Optional[int] = None
        self.observations = 0

    def observe(self, snapshot: Optional[StatusSnapshot]) -> bool:
        """
        Fold one snapshot into the watermark.

        Returns True once the target level is reached. Raises
        TransactionRejected when the snapshot carries an error.
        """
        if snapshot is None:
            return self.reached
        self.observations += 1
        if snapshot.failed:
            raise TransactionRejected(snapshot.error)
        if snapshot.level is not None and (self.level is None or snapshot.level > self.level):
            self.level = snapshot.level
            self.slot = snapshot.slot
        return self.reached

    @property
    def reached(self) -> bool:
        return self.level is not None and self.level >= self.target


class ConfirmationWatcher:
    """
    Awaits confirmation of a signature against a LedgerRpc.

    Usage:
        watcher = ConfirmationWatcher(rpc)
        await watcher.await_confirmation(sig, deadline, ConfirmationLevel.CONFIRMED)
    """

    def __init__(self, rpc: "LedgerRpc", poll_interval: Optional[float] = None):
        self.rpc = rpc
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else Settings.STATUS_POLL_INTERVAL_MS / 1000
        )
        if self.poll_interval <= 0:
            raise ValueError("Status poll interval must be positive")

    async def await_confirmation(
        self,
        signature: str,
        deadline: float,
        min_level: Union[str, ConfirmationLevel] = ConfirmationLevel.CONFIRMED,
    ) -> str:
        """
        Return `signature` once its status reaches `min_level` with no error.

        `deadline` is absolute on the running loop's clock. Raises
        TransactionRejected on an error status, ConfirmationTimeout when the
        deadline passes first.
        """
        loop = asyncio.get_running_loop()
        watermark = ConfirmationWatermark(ConfirmationLevel.parse(min_level))

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break

            snapshot = await self._poll(signature, remaining)
            try:
                if watermark.observe(snapshot):
                    Logger.debug(
                        f"[WATCHER] {signature[:16]}... reached {watermark.level.value} "
                        f"(slot {watermark.slot})"
                    )
                    return signature
            except TransactionRejected as e:
                e.signature = signature
                Logger.warning(f"[WATCHER] {signature[:16]}... rejected: {e.message}")
                raise

            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(self.poll_interval, remaining))

        level = watermark.level.value if watermark.level else "unseen"
        Logger.warning(f"[WATCHER] {signature[:16]}... timed out (last level: {level})")
        raise ConfirmationTimeout(f"{TIMEOUT_MESSAGE} {signature}", signature=signature)

    async def _poll(self, signature: str, remaining: float) -> Optional[StatusSnapshot]:
        """One status request, never allowed to outlive the deadline."""
        try:
            return await asyncio.wait_for(self.rpc.get_status(signature), timeout=remaining)
        except asyncio.TimeoutError:
            return None
        except NetworkUnavailable as e:
            Logger.debug(f"[WATCHER] Status check error: {e}")
            return None
