"""
Broadcaster
===========
Rebroadcast loop for a signed transaction.

Leaders drop single-shot submissions at the gossip layer. The signed bytes
are resend-safe (the blockhash is bound at sign time), so the loop simply
sends the same payload every `interval` seconds until it is stopped or the
submission deadline passes.

The loop is an owned asyncio.Task: whoever starts it must `cancel()` and
`join()` it. A failed send is logged and the loop carries on; only the
confirmation watcher decides whether a submission succeeded.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

from config.settings import Settings
from txlander.execution.types import SignedTransaction
from txlander.shared.system.logging import Logger

if TYPE_CHECKING:
    from txlander.shared.infrastructure.rpc_gateway import LedgerRpc


class BroadcastTask:
    """Handle on one running rebroadcast loop."""

    def __init__(self, tx: SignedTransaction, deadline: float):
        self.tx = tx
        self.deadline = deadline
        self.sends = 0
        self.failed_sends = 0
        self.last_error: Optional[BaseException] = None
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def finished(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        """Stop resending. Safe to call more than once."""
        self._stop.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def join(self) -> None:
        """Wait for the loop to exit (after cancel or deadline)."""
        if self._task is not None:
            await asyncio.wait({self._task})


class Broadcaster:
    """
    Starts rebroadcast loops against a LedgerRpc.

    Usage:
        broadcaster = Broadcaster(rpc)
        task = broadcaster.start(tx, deadline)
        ...
        task.cancel()
        await task.join()
    """

    def __init__(self, rpc: "LedgerRpc", interval: Optional[float] = None):
        self.rpc = rpc
        self.interval = (
            interval if interval is not None else Settings.REBROADCAST_INTERVAL_MS / 1000
        )
        if self.interval <= 0:
            raise ValueError("Rebroadcast interval must be positive")

    def start(self, tx: SignedTransaction, deadline: float) -> BroadcastTask:
        """
        Send `tx` now and every interval until cancelled or `deadline`.

        `deadline` is an absolute time on the running loop's clock.
        """
        handle = BroadcastTask(tx, deadline)
        handle._task = asyncio.get_running_loop().create_task(
            self._run(handle), name=f"broadcast-{tx.signature[:8]}"
        )
        return handle

    async def _run(self, handle: BroadcastTask) -> None:
        loop = asyncio.get_running_loop()

        while not handle.stopped and loop.time() < handle.deadline:
            await self._send_once(handle)

            remaining = handle.deadline - loop.time()
            if handle.stopped or remaining <= 0:
                break
            try:
                await asyncio.wait_for(
                    handle._stop.wait(), timeout=min(self.interval, remaining)
                )
            except asyncio.TimeoutError:
                continue

        Logger.debug(
            f"[BROADCAST] Loop exit {handle.tx.signature[:16]}... "
            f"sends={handle.sends} failed={handle.failed_sends}"
        )

    async def _send_once(self, handle: BroadcastTask) -> None:
        handle.sends += 1
        try:
            await self.rpc.send_raw(handle.tx.raw, skip_preflight=True)
        except Exception as e:
            handle.failed_sends += 1
            handle.last_error = e
            Logger.debug(
                f"[BROADCAST] Send #{handle.sends} failed for "
                f"{handle.tx.signature[:16]}...: {e}"
            )
