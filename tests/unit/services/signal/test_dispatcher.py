"""Unit tests for the signal dispatcher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from cascadewatch.core.exceptions import ContractCallError
from cascadewatch.models.signal import DispatchStatus, RoyaltyTier
from cascadewatch.services.signal.codec import SignalCodec
from cascadewatch.services.signal.dispatcher import Dispatcher
from tests.factories.transaction import random_address

ETHER = 10**18


@pytest.mark.unit
class TestDispatcherHappyPath:
    @pytest.mark.asyncio
    async def test_novel_signal_emits_then_claims(self, dispatcher, invoker, tx_factory, watcher_config):
        tx = tx_factory(value=10 * ETHER)
        expected = SignalCodec(watcher_config).build(tx)

        result = await dispatcher.dispatch(tx)

        assert result.status == DispatchStatus.COMPLETED
        assert result.signal == expected.text
        assert result.signal_hash == expected.hash
        assert invoker.calls == [
            ("emitCascade", (expected.text, 10), watcher_config.gas_price_wei),
            ("claimYield", (expected.text,), watcher_config.gas_price_wei),
        ]
        assert result.cascade_tx_hash is not None
        assert result.claim_tx_hash is not None
        assert result.error is None

    @pytest.mark.asyncio
    async def test_cascade_confirmed_before_claim_submitted(self, dispatcher, invoker, tx_factory):
        await dispatcher.dispatch(tx_factory())

        assert invoker.events == [
            ("submit", "emitCascade"),
            ("wait", "emitCascade"),
            ("submit", "claimYield"),
            ("wait", "claimYield"),
        ]

    @pytest.mark.asyncio
    async def test_large_value_uses_large_tier(self, dispatcher, invoker, tx_factory):
        result = await dispatcher.dispatch(tx_factory(value=1_000 * ETHER))

        assert result.royalty_tier == RoyaltyTier.LARGE
        assert result.royalty_bps == 7
        assert invoker.calls[0][1][1] == 7

    @pytest.mark.asyncio
    async def test_default_tier_at_threshold(self, dispatcher, invoker, tx_factory, watcher_config):
        result = await dispatcher.dispatch(tx_factory(value=watcher_config.royalty_threshold_wei))

        assert result.royalty_tier == RoyaltyTier.DEFAULT
        assert invoker.calls[0][1][1] == 10


@pytest.mark.unit
class TestDispatcherStops:
    @pytest.mark.asyncio
    async def test_filtered_transaction_has_no_side_effects(
        self, dispatcher, invoker, dedup_cache, tx_factory
    ):
        result = await dispatcher.dispatch(tx_factory(to=random_address()))

        assert result.status == DispatchStatus.FILTERED_UNKNOWN_POOL
        assert result.status.is_filtered
        assert result.signal is None
        assert invoker.calls == []
        assert len(dedup_cache) == 0

    @pytest.mark.asyncio
    async def test_duplicate_stops_before_contract(self, dispatcher, invoker, tx_factory):
        tx = tx_factory()

        first = await dispatcher.dispatch(tx)
        second = await dispatcher.dispatch(tx)

        assert first.status == DispatchStatus.COMPLETED
        assert second.status == DispatchStatus.DUPLICATE
        assert second.signal_hash == first.signal_hash
        assert second.royalty_bps is None
        assert invoker.methods() == ["emitCascade", "claimYield"]

    @pytest.mark.asyncio
    async def test_royalty_not_computed_for_duplicates(self, watcher_config, dedup_cache, invoker, tx_factory):
        royalty_policy = MagicMock()
        royalty_policy.decide = MagicMock(side_effect=AssertionError("royalty must not run"))
        dispatcher = Dispatcher(
            config=watcher_config,
            dedup_cache=dedup_cache,
            invoker=invoker,
            royalty_policy=royalty_policy,
        )
        tx = tx_factory()
        await dedup_cache.insert_if_absent(SignalCodec(watcher_config).build(tx).hash)

        result = await dispatcher.dispatch(tx)

        assert result.status == DispatchStatus.DUPLICATE
        royalty_policy.decide.assert_not_called()


@pytest.mark.unit
class TestDispatcherFailures:
    @pytest.mark.asyncio
    async def test_cascade_submit_failure_skips_claim(self, dispatcher, invoker, dedup_cache, tx_factory):
        invoker.fail_on_submit["emitCascade"] = ContractCallError("emitCascade", "insufficient funds")

        result = await dispatcher.dispatch(tx_factory())

        assert result.status == DispatchStatus.CASCADE_FAILED
        assert "insufficient funds" in result.error
        assert result.cascade_tx_hash is None
        assert invoker.methods() == []
        assert ("submit", "claimYield") not in invoker.events
        assert result.signal_hash in dedup_cache

    @pytest.mark.asyncio
    async def test_cascade_revert_skips_claim(self, dispatcher, invoker, tx_factory):
        invoker.fail_on_wait.add("emitCascade")

        result = await dispatcher.dispatch(tx_factory())

        assert result.status == DispatchStatus.CASCADE_FAILED
        assert result.cascade_tx_hash is not None
        assert invoker.methods() == ["emitCascade"]

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_swallowed(self, dispatcher, invoker, tx_factory):
        invoker.fail_on_submit["emitCascade"] = ConnectionResetError("socket closed")

        result = await dispatcher.dispatch(tx_factory())

        assert result.status == DispatchStatus.CASCADE_FAILED
        assert result.error == "socket closed"

    @pytest.mark.asyncio
    async def test_claim_failure_reported(self, dispatcher, invoker, tx_factory):
        invoker.fail_on_wait.add("claimYield")

        result = await dispatcher.dispatch(tx_factory())

        assert result.status == DispatchStatus.CLAIM_FAILED
        assert result.dispatched is True
        assert invoker.methods() == ["emitCascade", "claimYield"]

    @pytest.mark.asyncio
    async def test_failed_signal_is_not_retried(self, dispatcher, invoker, tx_factory):
        invoker.fail_on_submit["emitCascade"] = ContractCallError("emitCascade", "nonce too low")
        tx = tx_factory()

        first = await dispatcher.dispatch(tx)
        invoker.fail_on_submit.clear()
        second = await dispatcher.dispatch(tx)

        assert first.status == DispatchStatus.CASCADE_FAILED
        assert second.status == DispatchStatus.DUPLICATE
        assert invoker.calls == []


@pytest.mark.unit
class TestDispatcherConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_duplicates_dispatch_once(self, watcher_config, dedup_cache, tx_factory):
        invoker = MagicMock()
        submission = MagicMock(tx_hash="0x" + "00" * 32)

        async def slow_wait() -> None:
            await asyncio.sleep(0.01)

        submission.wait = AsyncMock(side_effect=slow_wait)
        invoker.submit = AsyncMock(return_value=submission)
        dispatcher = Dispatcher(config=watcher_config, dedup_cache=dedup_cache, invoker=invoker)
        tx = tx_factory()

        results = await asyncio.gather(*(dispatcher.dispatch(tx) for _ in range(20)))

        statuses = [r.status for r in results]
        assert statuses.count(DispatchStatus.COMPLETED) == 1
        assert statuses.count(DispatchStatus.DUPLICATE) == 19
        assert invoker.submit.await_count == 2
