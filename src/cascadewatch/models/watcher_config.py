"""Immutable pipeline configuration.

Built once at startup from Settings and handed to every pipeline component.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from cascadewatch.config.settings import Settings
from cascadewatch.constants.signal import (
    DEFAULT_ROYALTY_BPS,
    DEFAULT_SELECTORS,
    LARGE_TX_ROYALTY_BPS,
    MAX_BPS,
    SELECTOR_HEX_LENGTH,
)
from cascadewatch.models.signal import SignalFieldSet


class WatcherConfig(BaseModel):
    """Frozen configuration shared by the filter, codec, royalty policy and dispatcher."""

    model_config = {"frozen": True}

    pool1: str
    pool2: str
    min_value_wei: int = Field(..., ge=0)
    royalty_threshold_wei: int = Field(..., ge=0)
    default_bps: int = Field(default=DEFAULT_ROYALTY_BPS, ge=0, le=MAX_BPS)
    large_tx_bps: int = Field(default=LARGE_TX_ROYALTY_BPS, ge=0, le=MAX_BPS)
    gas_price_wei: int = Field(..., gt=0)
    selectors: tuple[str, ...] = DEFAULT_SELECTORS
    signal_field_set: SignalFieldSet = SignalFieldSet.STANDARD

    @field_validator("pool1", "pool2")
    @classmethod
    def lowercase_address(cls, v: str) -> str:
        return v.lower()

    @field_validator("selectors")
    @classmethod
    def normalize_selectors(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        selectors = tuple(s.lower().removeprefix("0x") for s in v)
        for selector in selectors:
            if len(selector) != SELECTOR_HEX_LENGTH or any(
                c not in "0123456789abcdef" for c in selector
            ):
                raise ValueError(f"Selector must be {SELECTOR_HEX_LENGTH} hex chars: {selector!r}")
        return selectors

    @model_validator(mode="after")
    def check_selectors_present(self) -> "WatcherConfig":
        if not self.selectors:
            raise ValueError("At least one selector is required")
        return self

    @property
    def pools(self) -> frozenset[str]:
        """Both watched pool addresses."""
        return frozenset((self.pool1, self.pool2))

    @classmethod
    def from_settings(cls, settings: Settings) -> "WatcherConfig":
        """Build the pipeline configuration from application settings."""
        return cls(
            pool1=settings.target_pool1,
            pool2=settings.target_pool2,
            min_value_wei=settings.min_value_wei,
            royalty_threshold_wei=settings.tx_threshold,
            default_bps=settings.default_bps,
            large_tx_bps=settings.large_tx_bps,
            gas_price_wei=settings.gas_price_wei,
            selectors=settings.selector_list,
            signal_field_set=SignalFieldSet(settings.signal_field_set),
        )
