"""Shared pytest fixtures for CascadeWatch tests.

This module provides fixtures for:
- Environment variables required by Settings
- A ready-made WatcherConfig with the two test pools
- A recording fake of the contract invocation collaborator
- Test data factories

Usage:
    @pytest.mark.unit
    def test_something(tx_factory):
        tx = tx_factory(value=0)
        assert tx.value == 0
"""

import os
from collections.abc import Generator
from typing import Any

import pytest

from cascadewatch.config.settings import get_settings
from cascadewatch.core.exceptions import ContractCallError
from cascadewatch.models.signal import SignalFieldSet
from cascadewatch.models.watcher_config import WatcherConfig
from cascadewatch.services.signal.dedup_cache import DedupCache
from cascadewatch.services.signal.dispatcher import Dispatcher
from tests.factories.transaction import POOL1, POOL2, PendingTransactionFactory

ETHER = 10**18

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables (only if not already set)."""
    original_env = os.environ.copy()

    os.environ.setdefault("TARGET_POOL1", POOL1)
    os.environ.setdefault("TARGET_POOL2", POOL2)
    os.environ.setdefault("RPC_URL", "ws://localhost:8546")
    os.environ.setdefault("PRIVATE_KEY", "0x" + "11" * 32)
    os.environ.setdefault("TOMB_CONTRACT", "0x3333333333333333333333333333333333333333")

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read a fresh Settings instance."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Pipeline Fixtures
# =============================================================================


@pytest.fixture
def watcher_config() -> WatcherConfig:
    """Configuration used across pipeline tests.

    Minimum value 5 ETH, royalty threshold 100 ETH, tiers 10/7 bps.
    """
    return WatcherConfig(
        pool1=POOL1,
        pool2=POOL2,
        min_value_wei=5 * ETHER,
        royalty_threshold_wei=100 * ETHER,
        default_bps=10,
        large_tx_bps=7,
        gas_price_wei=100_000_000,
        signal_field_set=SignalFieldSet.STANDARD,
    )


@pytest.fixture
def tx_factory() -> type[PendingTransactionFactory]:
    """Provide pending transaction factory."""
    return PendingTransactionFactory


class FakeSubmission:
    """Submission handle that succeeds or raises on wait()."""

    def __init__(self, invoker: "RecordingInvoker", method: str, tx_hash: str) -> None:
        self._invoker = invoker
        self.method = method
        self.tx_hash = tx_hash

    async def wait(self) -> None:
        self._invoker.events.append(("wait", self.method))
        if self.method in self._invoker.fail_on_wait:
            raise ContractCallError(self.method, "transaction reverted", self.tx_hash)


class RecordingInvoker:
    """Fake ContractInvoker that records every submission in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], int]] = []
        self.events: list[tuple[str, str]] = []
        self.fail_on_submit: dict[str, Exception] = {}
        self.fail_on_wait: set[str] = set()

    async def submit(self, method: str, args: tuple[Any, ...], gas_price_wei: int) -> FakeSubmission:
        self.events.append(("submit", method))
        if method in self.fail_on_submit:
            raise self.fail_on_submit[method]
        self.calls.append((method, args, gas_price_wei))
        return FakeSubmission(self, method, "0x" + f"{len(self.calls):064x}")

    def methods(self) -> list[str]:
        return [method for method, _, _ in self.calls]


@pytest.fixture
def invoker() -> RecordingInvoker:
    """Recording contract invoker."""
    return RecordingInvoker()


@pytest.fixture
def dedup_cache() -> DedupCache:
    return DedupCache()


@pytest.fixture
def dispatcher(
    watcher_config: WatcherConfig,
    dedup_cache: DedupCache,
    invoker: RecordingInvoker,
) -> Dispatcher:
    """Dispatcher wired to the recording invoker."""
    return Dispatcher(config=watcher_config, dedup_cache=dedup_cache, invoker=invoker)
