"""Chain-level constants."""

from typing import Final

WEI_PER_ETHER: Final[int] = 10**18
ETHER_DECIMALS: Final[int] = 18
UINT256_MAX: Final[int] = 2**256 - 1

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

# Address / hash widths in hex characters (without 0x prefix)
ADDRESS_HEX_LENGTH: Final[int] = 40
HASH_HEX_LENGTH: Final[int] = 64

# JSON-RPC
RPC_TIMEOUT_SECONDS: Final[float] = 10.0
RPC_MAX_RETRIES: Final[int] = 3
PENDING_TX_SUBSCRIPTION: Final[str] = "newPendingTransactions"
