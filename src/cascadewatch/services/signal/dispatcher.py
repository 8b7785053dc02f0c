"""Signal dispatcher.

Runs one pending transaction through the pipeline:

    Received -> Filtered -> SignalBuilt -> DedupChecked -> RoyaltyAssigned
             -> Dispatching -> Cascaded -> YieldClaimed

Filter rejections and duplicates stop without side effects. A novel signal
is marked seen before any contract call and stays marked even if the calls
fail; failures are logged and returned, never raised or retried.
"""

import time

import structlog

from cascadewatch.constants.signal import CLAIM_YIELD_METHOD, EMIT_CASCADE_METHOD
from cascadewatch.models.signal import DispatchResult, DispatchStatus
from cascadewatch.models.transaction import PendingTransaction
from cascadewatch.models.watcher_config import WatcherConfig
from cascadewatch.services.chain.interfaces import ContractInvoker
from cascadewatch.services.signal.codec import SignalCodec
from cascadewatch.services.signal.dedup_cache import DedupCache
from cascadewatch.services.signal.royalty import RoyaltyPolicy
from cascadewatch.services.signal.selector_filter import SelectorFilter

logger = structlog.get_logger(__name__)


class Dispatcher:
    """Filters, deduplicates and dispatches pending transactions.

    Full flow: Filter -> Signal -> Dedup -> Royalty -> emitCascade -> claimYield
    """

    def __init__(
        self,
        config: WatcherConfig,
        dedup_cache: DedupCache,
        invoker: ContractInvoker,
        selector_filter: SelectorFilter | None = None,
        codec: SignalCodec | None = None,
        royalty_policy: RoyaltyPolicy | None = None,
    ) -> None:
        """Initialize dispatcher with all components.

        Args:
            config: Pipeline configuration
            dedup_cache: Shared seen-signal cache
            invoker: Contract invocation collaborator
            selector_filter: Filter (built from config if omitted)
            codec: Signal codec (built from config if omitted)
            royalty_policy: Royalty policy (built from config if omitted)
        """
        self.config = config
        self.dedup_cache = dedup_cache
        self.invoker = invoker
        self.selector_filter = selector_filter or SelectorFilter(config)
        self.codec = codec or SignalCodec(config)
        self.royalty_policy = royalty_policy or RoyaltyPolicy.from_config(config)

    async def dispatch(self, tx: PendingTransaction) -> DispatchResult:
        """Process one transaction through the pipeline.

        Args:
            tx: Pending transaction resolved from the stream

        Returns:
            DispatchResult with the terminal status
        """
        start_time = time.perf_counter()
        log = logger.bind(tx=tx.hash[:10] + "...")

        # Step 1: Filter
        decision = self.selector_filter.check(tx)
        if not decision.accepted:
            assert decision.status is not None
            log.debug("signal_skipped", reason=decision.status.value)
            return self._result(start_time, tx, decision.status)

        # Step 2: Build signal
        signal = self.codec.build(tx, decision.destination, decision.calldata_hex)

        # Step 3: Dedup gate (sole consistency point)
        if not await self.dedup_cache.insert_if_absent(signal.hash):
            log.debug("signal_duplicate", signal_hash=signal.hash[:10] + "...")
            return self._result(
                start_time,
                tx,
                DispatchStatus.DUPLICATE,
                signal=signal.text,
                signal_hash=signal.hash,
            )

        # Step 4: Royalty tier
        royalty = self.royalty_policy.decide(tx.value)
        log = log.bind(signal_hash=signal.hash[:10] + "...", royalty_bps=royalty.bps)
        log.info(
            "signal_emitted",
            signal=signal.text,
            pool=decision.destination,
            selector=decision.selector,
            royalty_tier=royalty.tier.value,
        )

        result = self._result(
            start_time,
            tx,
            DispatchStatus.CASCADE_FAILED,
            signal=signal.text,
            signal_hash=signal.hash,
        )
        result.royalty_tier = royalty.tier
        result.royalty_bps = royalty.bps

        # Step 5: emitCascade
        try:
            cascade = await self.invoker.submit(
                EMIT_CASCADE_METHOD,
                (signal.text, royalty.bps),
                self.config.gas_price_wei,
            )
            result.cascade_tx_hash = cascade.tx_hash
            await cascade.wait()
        except Exception as e:
            log.error("cascade_failed", error=str(e))
            result.error = str(e)
            result.processing_time_ms = _elapsed_ms(start_time)
            return result

        log.info("cascade_submitted", cascade_tx=result.cascade_tx_hash)

        # Step 6: claimYield, only after a successful cascade
        try:
            claim = await self.invoker.submit(
                CLAIM_YIELD_METHOD,
                (signal.text,),
                self.config.gas_price_wei,
            )
            result.claim_tx_hash = claim.tx_hash
            await claim.wait()
        except Exception as e:
            log.error("claim_failed", error=str(e))
            result.status = DispatchStatus.CLAIM_FAILED
            result.error = str(e)
            result.processing_time_ms = _elapsed_ms(start_time)
            return result

        log.info("yield_claimed", signal=signal.text, claim_tx=result.claim_tx_hash)
        result.status = DispatchStatus.COMPLETED
        result.processing_time_ms = _elapsed_ms(start_time)
        return result

    @staticmethod
    def _result(
        start_time: float,
        tx: PendingTransaction,
        status: DispatchStatus,
        signal: str | None = None,
        signal_hash: str | None = None,
    ) -> DispatchResult:
        return DispatchResult(
            status=status,
            tx_hash=tx.hash,
            signal=signal,
            signal_hash=signal_hash,
            processing_time_ms=_elapsed_ms(start_time),
        )


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
