"""Collaborator interfaces consumed by the signal pipeline.

The pipeline only talks to the chain through these protocols; the
implementations in this package (JSON-RPC lookup, websocket subscription,
web3 contract invoker) can be swapped for fakes in tests.
"""

from collections.abc import AsyncIterator
from typing import Any, Protocol

from cascadewatch.models.transaction import PendingTransaction


class PendingTransactionSource(Protocol):
    """Lazy, unbounded, non-restartable stream of pending transaction hashes."""

    def __aiter__(self) -> AsyncIterator[str]:
        """Iterate transaction hashes as they are announced."""
        ...


class TransactionLookup(Protocol):
    """Resolves a transaction hash to its full content."""

    async def get_transaction(self, tx_hash: str) -> PendingTransaction | None:
        """Return the transaction, or None if it is no longer known."""
        ...


class ContractSubmission(Protocol):
    """Handle for a submitted contract call."""

    tx_hash: str

    async def wait(self) -> None:
        """Wait for the submission to be accepted.

        Raises:
            ContractCallError: If the call failed or was reverted.
        """
        ...


class ContractInvoker(Protocol):
    """Submits calls to the notification contract."""

    async def submit(
        self,
        method: str,
        args: tuple[Any, ...],
        gas_price_wei: int,
    ) -> ContractSubmission:
        """Submit a contract call with a fixed gas price.

        Raises:
            ContractCallError: If the call could not be submitted.
        """
        ...
