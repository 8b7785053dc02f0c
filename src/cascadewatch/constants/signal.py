"""Signal filtering, construction and dispatch constants."""

from typing import Final

# Known function selectors (hex, no 0x prefix)
DEFAULT_SELECTORS: Final[tuple[str, ...]] = (
    "38ed1739",  # swapExactTokensForTokens
    "7ff36ab5",  # swapExactETHForTokens
    "8803dbee",  # swapTokensForExactTokens
    "fb0fc03b",  # fulfillBasicOrder_efficient_6GL6yc (Seaport)
    "a9059cbb",  # ERC20 transfer
    "23b872dd",  # ERC20 transferFrom
)
SELECTOR_HEX_LENGTH: Final[int] = 8

# Signal string layout
SIGNAL_SEPARATOR: Final[str] = "|"
PAYLOAD_PREFIX_HEX_LENGTH: Final[int] = 20
PAYLOAD_PREFIX_PAD_CHAR: Final[str] = "0"

# Royalty tiers (basis points)
DEFAULT_ROYALTY_BPS: Final[int] = 10
LARGE_TX_ROYALTY_BPS: Final[int] = 7
DEFAULT_ROYALTY_THRESHOLD_WEI: Final[int] = 10**18  # 1 ETH
MAX_BPS: Final[int] = 10_000

# Filter
DEFAULT_MIN_ETH_VALUE: Final[str] = "5"

# Dispatch
DEFAULT_GAS_PRICE_GWEI: Final[str] = "0.1"
EMIT_CASCADE_METHOD: Final[str] = "emitCascade"
CLAIM_YIELD_METHOD: Final[str] = "claimYield"
DEFAULT_RECEIPT_TIMEOUT_SECONDS: Final[int] = 120

# Concurrency
DEFAULT_MAX_IN_FLIGHT: Final[int] = 256
