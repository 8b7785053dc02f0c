"""Ethereum JSON-RPC client for pending transaction lookups.

The client extends BaseRPCClient to inherit:
- Automatic retry with exponential backoff
- Circuit breaker pattern for failure protection
- Proper resource cleanup
"""

import structlog

from cascadewatch.config.settings import get_settings
from cascadewatch.constants.chain import RPC_MAX_RETRIES, RPC_TIMEOUT_SECONDS
from cascadewatch.core.exceptions import ChainConnectionError, ValidationError
from cascadewatch.models.transaction import PendingTransaction
from cascadewatch.services.base import BaseRPCClient

log = structlog.get_logger(__name__)


class EthereumRPCClient(BaseRPCClient):
    """Client for the transaction lookup and chain id JSON-RPC calls.

    Example:
        client = EthereumRPCClient()
        tx = await client.get_transaction("0xabc...")
        await client.close()
    """

    def __init__(self, base_url: str | None = None) -> None:
        """Initialize the client.

        Args:
            base_url: HTTP RPC endpoint; defaults to the configured lookup URL.
        """
        url = base_url or get_settings().lookup_rpc_url
        super().__init__(
            base_url=url,
            timeout=RPC_TIMEOUT_SECONDS,
            max_retries=RPC_MAX_RETRIES,
            circuit_breaker_threshold=5,
            circuit_breaker_cooldown=30,
        )
        log.debug("ethereum_rpc_client_initialized", base_url=url)

    async def get_transaction(self, tx_hash: str) -> PendingTransaction | None:
        """Resolve a transaction hash via ``eth_getTransactionByHash``.

        Args:
            tx_hash: 0x-prefixed transaction hash.

        Returns:
            PendingTransaction, or None if the node no longer knows the hash
            (dropped or replaced) or returned an unparseable object.

        Raises:
            ChainConnectionError: If the RPC call fails after retries.
        """
        result = await self.call("eth_getTransactionByHash", [tx_hash])
        if result is None:
            log.debug("rpc_transaction_not_found", tx=tx_hash[:10] + "...")
            return None

        try:
            return PendingTransaction.from_rpc(result)
        except ValidationError as e:
            log.warning("rpc_transaction_malformed", tx=tx_hash[:10] + "...", error=str(e))
            return None

    async def get_chain_id(self) -> int:
        """Return the chain id via ``eth_chainId``."""
        result = await self.call("eth_chainId", [])
        if not isinstance(result, str):
            raise ChainConnectionError("eth_chainId returned no result", method="eth_chainId")
        return int(result, 16)
