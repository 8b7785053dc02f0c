"""Signal pipeline domain models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SignalFieldSet(str, Enum):
    """Transaction fields included in the signal identity."""

    STANDARD = "standard"  # pool2, to, value, payload prefix, hash, sender
    EXTENDED = "extended"  # standard + gas, gas price, fee-market fields


class DispatchStatus(str, Enum):
    """Terminal outcome of processing one transaction."""

    FILTERED_NO_DESTINATION = "filtered_no_destination"
    FILTERED_EMPTY_PAYLOAD = "filtered_empty_payload"
    FILTERED_BELOW_MIN_VALUE = "filtered_below_min_value"
    FILTERED_UNKNOWN_POOL = "filtered_unknown_pool"
    FILTERED_UNKNOWN_SELECTOR = "filtered_unknown_selector"
    DUPLICATE = "duplicate"
    CASCADE_FAILED = "cascade_failed"
    CLAIM_FAILED = "claim_failed"
    COMPLETED = "completed"

    @property
    def is_filtered(self) -> bool:
        """True for rejections at the filter stage."""
        return self.value.startswith("filtered_")


class FilterDecision(BaseModel):
    """Result of the selector filter."""

    model_config = {"frozen": True}

    accepted: bool
    status: DispatchStatus | None = None  # rejection reason, None if accepted
    destination: str | None = None  # lowercase pool address when accepted
    calldata_hex: str | None = None  # payload hex when accepted
    selector: str | None = None


class Signal(BaseModel):
    """Canonical signal string and its keccak-256 digest."""

    model_config = {"frozen": True}

    text: str
    hash: str  # 0x-prefixed lowercase hex


class RoyaltyTier(str, Enum):
    """Royalty tier selected from the transaction value."""

    DEFAULT = "default"
    LARGE = "large"


class RoyaltyDecision(BaseModel):
    """Royalty tier with its basis-points value."""

    model_config = {"frozen": True}

    tier: RoyaltyTier
    bps: int = Field(..., ge=0)


class DispatchResult(BaseModel):
    """Result of dispatching one transaction."""

    status: DispatchStatus
    tx_hash: str

    # Signal (None if filtered)
    signal: str | None = None
    signal_hash: str | None = None

    # Royalty (None if not reached)
    royalty_tier: RoyaltyTier | None = None
    royalty_bps: int | None = None

    # On-chain submissions
    cascade_tx_hash: str | None = None
    claim_tx_hash: str | None = None
    error: str | None = None

    # Timing
    processing_time_ms: float = 0.0
    processed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def dispatched(self) -> bool:
        """True once the novel signal reached the contract-call stage."""
        return self.status in (
            DispatchStatus.CASCADE_FAILED,
            DispatchStatus.CLAIM_FAILED,
            DispatchStatus.COMPLETED,
        )
