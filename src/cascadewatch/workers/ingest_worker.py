"""Pending transaction ingest worker.

Drives the pending-transaction subscription for the lifetime of the
process:

Workflow:
    Node announces a pending tx hash
    → worker spawns an independent unit of work (never waits for it)
    → unit resolves the hash to the full transaction (miss = skip)
    → unit runs the Dispatcher (filter, signal, dedup, royalty, contract calls)

The worker:
- Never lets one transaction's failure reach the loop or other units
- Bounds concurrent units through BoundedTaskLauncher
- Stops when the subscription ends or stop() is called

Example:
    worker = PendingTxIngestWorker(subscription, rpc_client, dispatcher)
    task = asyncio.create_task(worker.run())
    ...
    await worker.stop()
"""

import asyncio
from datetime import UTC, datetime

import structlog

from cascadewatch.core.exceptions import SubscriptionClosedError
from cascadewatch.models.signal import DispatchResult, DispatchStatus
from cascadewatch.services.chain.interfaces import PendingTransactionSource, TransactionLookup
from cascadewatch.services.signal.dispatcher import Dispatcher
from cascadewatch.workers.task_launcher import BoundedTaskLauncher

log = structlog.get_logger(__name__)


class PendingTxIngestWorker:
    """Long-lived worker fanning pending transactions out to the dispatcher.

    Attributes:
        running: Worker running state (True = active).
        subscription: Stream of pending transaction hashes.
        lookup: Resolves hashes to transactions.
        dispatcher: Per-transaction pipeline.
        launcher: Schedules per-transaction units.
    """

    def __init__(
        self,
        subscription: PendingTransactionSource,
        lookup: TransactionLookup,
        dispatcher: Dispatcher,
        launcher: BoundedTaskLauncher | None = None,
    ) -> None:
        self.running = False
        self.subscription = subscription
        self.lookup = lookup
        self.dispatcher = dispatcher
        self.launcher = launcher or BoundedTaskLauncher()

        # Status tracking
        self._started_at: datetime | None = None
        self._received = 0
        self._lookup_misses = 0
        self._lookup_errors = 0
        self._dispatched = 0
        self._completed = 0
        self._current_state: str = "idle"  # idle | streaming | stopped | error
        self._loop_task: asyncio.Task | None = None
        self._stop_requested = False

        log.info(
            "ingest_worker_initialized",
            max_in_flight=self.launcher.max_in_flight,
        )

    def get_status(self) -> dict:
        """Get worker status for monitoring.

        Returns:
            Status dict with:
                - running: Worker running state
                - started_at: When the stream was opened (or None)
                - received_count: Hashes received from the stream
                - lookup_miss_count: Hashes the node no longer knew
                - lookup_error_count: Lookups that failed
                - dispatched_count: Novel signals sent to the contract
                - completed_count: Signals with both calls confirmed
                - in_flight: Units currently running
                - current_state: 'idle' | 'streaming' | 'stopped' | 'error'
        """
        return {
            "running": self.running,
            "started_at": self._started_at,
            "received_count": self._received,
            "lookup_miss_count": self._lookup_misses,
            "lookup_error_count": self._lookup_errors,
            "dispatched_count": self._dispatched,
            "completed_count": self._completed,
            "in_flight": self.launcher.in_flight,
            "current_state": self._current_state,
        }

    async def run(self) -> None:
        """Main worker loop - runs until the stream ends or stop() is called.

        This method should be started as a background task or awaited by
        the process entry point:
            asyncio.create_task(worker.run())
        """
        log.info("ingest_worker_starting")
        self._loop_task = asyncio.current_task()
        self._stop_requested = False
        self.running = True
        self._started_at = datetime.now(UTC)
        self._current_state = "streaming"

        try:
            async for tx_hash in self.subscription:
                if not self.running:
                    break
                self._received += 1
                await self.launcher.spawn(self.process_hash(tx_hash), name=f"tx-{tx_hash[:10]}")
        except asyncio.CancelledError:
            if not self._stop_requested:
                raise
            # Cancelled by stop() while waiting on the stream
            self._loop_task.uncancel()
        except SubscriptionClosedError as e:
            self._current_state = "error"
            log.error("ingest_subscription_closed", error=str(e))
            raise
        finally:
            self.running = False
            self._loop_task = None
            if self._current_state != "error":
                self._current_state = "stopped"
            log.info("ingest_worker_stopped", **self._counters())

    async def process_hash(self, tx_hash: str) -> DispatchResult | None:
        """Resolve one hash and dispatch it. Never raises.

        Args:
            tx_hash: Pending transaction hash from the stream

        Returns:
            DispatchResult, or None if the lookup missed or failed
        """
        try:
            tx = await self.lookup.get_transaction(tx_hash)
        except Exception as e:
            self._lookup_errors += 1
            log.warning("tx_lookup_failed", tx=tx_hash[:10] + "...", error=str(e))
            return None

        if tx is None:
            self._lookup_misses += 1
            log.debug("tx_lookup_miss", tx=tx_hash[:10] + "...")
            return None

        try:
            result = await self.dispatcher.dispatch(tx)
        except Exception as e:
            log.error("dispatch_unexpected_error", tx=tx_hash[:10] + "...", error=str(e))
            return None

        if result.dispatched:
            self._dispatched += 1
        if result.status == DispatchStatus.COMPLETED:
            self._completed += 1
        return result

    async def stop(self, drain: bool = True) -> None:
        """Stop consuming the stream.

        An idle run() blocked on the stream is cancelled and returns
        normally; in-flight units are then drained or cancelled.

        Args:
            drain: Wait for in-flight units to finish (otherwise cancel them)
        """
        log.info("ingest_worker_stopping", in_flight=self.launcher.in_flight)
        self.running = False
        self._stop_requested = True
        loop_task = self._loop_task
        if loop_task is not None and loop_task is not asyncio.current_task() and not loop_task.done():
            loop_task.cancel()
            await asyncio.wait([loop_task])
        if drain:
            await self.launcher.drain()
        else:
            await self.launcher.cancel_all()

    async def drain(self) -> None:
        """Wait for in-flight units to finish."""
        await self.launcher.drain()

    def _counters(self) -> dict[str, int]:
        return {
            "received": self._received,
            "lookup_misses": self._lookup_misses,
            "dispatched": self._dispatched,
            "completed": self._completed,
        }
