"""Selector filter: decides whether a pending transaction targets a watched pool."""

from cascadewatch.constants.signal import SELECTOR_HEX_LENGTH
from cascadewatch.models.signal import DispatchStatus, FilterDecision
from cascadewatch.models.transaction import PendingTransaction
from cascadewatch.models.watcher_config import WatcherConfig


class SelectorFilter:
    """
    Accepts transactions sent to one of the two pools with a known selector.

    Rules run in order and stop at the first failure:
    destination present, payload non-empty, value at or above the minimum,
    destination is a watched pool, payload starts with a known selector.
    """

    def __init__(self, config: WatcherConfig) -> None:
        """Initialize selector filter.

        Args:
            config: Pipeline configuration (pools, minimum value, selectors)
        """
        self.pools = config.pools
        self.min_value_wei = config.min_value_wei
        self.selectors = frozenset(config.selectors)

    def check(self, tx: PendingTransaction) -> FilterDecision:
        """
        Evaluate the filter rules against a transaction.

        Args:
            tx: Pending transaction to check

        Returns:
            FilterDecision; rejected decisions carry the failing rule as status
        """
        if tx.to is None:
            return _reject(DispatchStatus.FILTERED_NO_DESTINATION)

        if not tx.input:
            return _reject(DispatchStatus.FILTERED_EMPTY_PAYLOAD)

        if tx.value < self.min_value_wei:
            return _reject(DispatchStatus.FILTERED_BELOW_MIN_VALUE)

        destination = tx.to.lower()
        if destination not in self.pools:
            return _reject(DispatchStatus.FILTERED_UNKNOWN_POOL)

        calldata_hex = tx.calldata_hex
        # Payloads under 4 bytes yield a short prefix that matches no selector
        selector = calldata_hex[:SELECTOR_HEX_LENGTH]
        if selector not in self.selectors:
            return _reject(DispatchStatus.FILTERED_UNKNOWN_SELECTOR)

        return FilterDecision(
            accepted=True,
            destination=destination,
            calldata_hex=calldata_hex,
            selector=selector,
        )

    def accepts(self, tx: PendingTransaction) -> bool:
        """Shorthand for ``check(tx).accepted``."""
        return self.check(tx).accepted


def _reject(status: DispatchStatus) -> FilterDecision:
    return FilterDecision(accepted=False, status=status)
