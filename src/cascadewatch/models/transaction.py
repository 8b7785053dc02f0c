"""Pending transaction domain model.

PendingTransaction is an immutable snapshot of a transaction proposed to
the network, as returned by ``eth_getTransactionByHash`` while it is still
in the pending pool. It is read-only inside the pipeline and discarded
after processing.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from cascadewatch.constants.chain import ADDRESS_HEX_LENGTH, HASH_HEX_LENGTH, UINT256_MAX
from cascadewatch.core import exceptions


def _parse_quantity(value: Any) -> int | None:
    """Parse a JSON-RPC hex quantity (``"0x1a"``) into an int."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16) if len(value) > 2 else 0
    raise ValueError(f"Not a hex quantity: {value!r}")


def _parse_data(value: Any) -> bytes:
    """Parse JSON-RPC hex data (``"0xa9059cbb..."``) into bytes."""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    raise ValueError(f"Not hex data: {value!r}")


class PendingTransaction(BaseModel):
    """Immutable snapshot of a pending transaction."""

    model_config = {"frozen": True}

    hash: str = Field(..., description="Transaction hash (0x, 32 bytes)")
    to: str | None = Field(default=None, description="Destination address")
    sender: str | None = Field(default=None, description="Sender address")
    input: bytes = Field(default=b"", description="Call payload")
    value: int = Field(default=0, ge=0, le=UINT256_MAX, description="Value in wei")

    gas: int | None = Field(default=None, ge=0)
    gas_price: int | None = Field(default=None, ge=0)
    max_fee_per_gas: int | None = Field(default=None, ge=0)
    max_priority_fee_per_gas: int | None = Field(default=None, ge=0)

    @field_validator("hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        """Lowercase and check the 32-byte hash."""
        v = v.lower()
        body = v.removeprefix("0x")
        if len(body) != HASH_HEX_LENGTH or any(c not in "0123456789abcdef" for c in body):
            raise ValueError(f"Invalid transaction hash: {v!r}")
        return "0x" + body

    @field_validator("to", "sender")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        """Lowercase and check 20-byte addresses."""
        if v is None:
            return None
        v = v.lower()
        body = v.removeprefix("0x")
        if len(body) != ADDRESS_HEX_LENGTH or any(c not in "0123456789abcdef" for c in body):
            raise ValueError(f"Invalid address: {v!r}")
        return "0x" + body

    @property
    def calldata_hex(self) -> str:
        """Payload hex-encoded, lowercase, without 0x."""
        return self.input.hex()

    @classmethod
    def from_rpc(cls, data: dict[str, Any]) -> "PendingTransaction":
        """Build from an ``eth_getTransactionByHash`` result object.

        Args:
            data: JSON-RPC transaction object (hex-encoded quantities and data).

        Returns:
            Parsed PendingTransaction.

        Raises:
            ValidationError: If a field is missing or malformed.
        """
        try:
            return cls(
                hash=data["hash"],
                to=data.get("to"),
                sender=data.get("from"),
                input=_parse_data(data.get("input", data.get("data"))),
                value=_parse_quantity(data.get("value")) or 0,
                gas=_parse_quantity(data.get("gas")),
                gas_price=_parse_quantity(data.get("gasPrice")),
                max_fee_per_gas=_parse_quantity(data.get("maxFeePerGas")),
                max_priority_fee_per_gas=_parse_quantity(data.get("maxPriorityFeePerGas")),
            )
        except (KeyError, ValueError, ValidationError) as e:
            raise exceptions.ValidationError(f"Malformed transaction object: {e}") from e
