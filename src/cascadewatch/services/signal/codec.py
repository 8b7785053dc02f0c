"""Signal codec: canonical signal string and keccak-256 signal hash.

Field order is fixed and every value has one canonical rendering, so two
processes given the same transaction produce byte-identical signals:

    pool2 | to | value_ether | payload_prefix | tx_hash | sender
    [| gas | gas_price | max_fee_per_gas | max_priority_fee_per_gas]

The bracketed fields are only present for the extended field set.
"""

from eth_utils import keccak

from cascadewatch.constants.chain import ETHER_DECIMALS, WEI_PER_ETHER, ZERO_ADDRESS
from cascadewatch.constants.signal import (
    PAYLOAD_PREFIX_HEX_LENGTH,
    PAYLOAD_PREFIX_PAD_CHAR,
    SIGNAL_SEPARATOR,
)
from cascadewatch.models.signal import Signal, SignalFieldSet
from cascadewatch.models.transaction import PendingTransaction
from cascadewatch.models.watcher_config import WatcherConfig


def format_ether(value_wei: int) -> str:
    """Render wei as an ether decimal with all 18 fractional digits.

    >>> format_ether(10**17)
    '0.100000000000000000'
    """
    whole, fraction = divmod(value_wei, WEI_PER_ETHER)
    return f"{whole}.{fraction:0{ETHER_DECIMALS}d}"


def payload_prefix(calldata_hex: str) -> str:
    """First 20 hex chars of the payload, right-padded with ``0`` when shorter."""
    return calldata_hex[:PAYLOAD_PREFIX_HEX_LENGTH].ljust(
        PAYLOAD_PREFIX_HEX_LENGTH, PAYLOAD_PREFIX_PAD_CHAR
    )


def signal_hash(text: str) -> str:
    """keccak-256 of the UTF-8 signal bytes as 0x-prefixed hex."""
    return "0x" + keccak(text.encode("utf-8")).hex()


class SignalCodec:
    """Builds Signal values from accepted transactions."""

    def __init__(self, config: WatcherConfig) -> None:
        self.pool2 = config.pool2
        self.field_set = config.signal_field_set

    def build_text(self, tx: PendingTransaction, destination: str, calldata_hex: str) -> str:
        """Assemble the canonical signal string.

        Args:
            tx: Accepted pending transaction
            destination: Normalized (lowercase) pool address the tx targets
            calldata_hex: Payload hex without 0x

        Returns:
            Signal string
        """
        fields = [
            self.pool2,
            destination.lower(),
            format_ether(tx.value),
            payload_prefix(calldata_hex.lower()),
            tx.hash,
            tx.sender or ZERO_ADDRESS,
        ]
        if self.field_set == SignalFieldSet.EXTENDED:
            fields.extend(
                str(v or 0)
                for v in (
                    tx.gas,
                    tx.gas_price,
                    tx.max_fee_per_gas,
                    tx.max_priority_fee_per_gas,
                )
            )
        return SIGNAL_SEPARATOR.join(fields)

    def build(
        self,
        tx: PendingTransaction,
        destination: str | None = None,
        calldata_hex: str | None = None,
    ) -> Signal:
        """Build the signal and its hash.

        ``destination`` and ``calldata_hex`` default to the transaction's own
        fields; the dispatcher passes the values the filter already normalized.
        """
        if destination is None:
            if tx.to is None:
                raise ValueError("Cannot build a signal for a transaction without destination")
            destination = tx.to
        if calldata_hex is None:
            calldata_hex = tx.calldata_hex

        text = self.build_text(tx, destination, calldata_hex)
        return Signal(text=text, hash=signal_hash(text))
