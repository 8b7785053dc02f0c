"""Application settings using pydantic-settings."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from eth_utils import is_hex_address, to_wei
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cascadewatch.constants.signal import (
    DEFAULT_GAS_PRICE_GWEI,
    DEFAULT_MAX_IN_FLIGHT,
    DEFAULT_MIN_ETH_VALUE,
    DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    DEFAULT_ROYALTY_BPS,
    DEFAULT_ROYALTY_THRESHOLD_WEI,
    DEFAULT_SELECTORS,
    LARGE_TX_ROYALTY_BPS,
    MAX_BPS,
    SELECTOR_HEX_LENGTH,
)


class Settings(BaseSettings):
    """CascadeWatch configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
        env_parse_none_str="none",  # MAX_IN_FLIGHT=none disables the bound
    )

    # Application
    app_name: str = Field(default="CascadeWatch", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )

    # Watched pools
    target_pool1: str = Field(description="First watched pool address")
    target_pool2: str = Field(description="Second watched pool address")

    # Chain connectivity
    rpc_url: str = Field(description="Websocket RPC endpoint for the pending-tx stream")
    http_rpc_url: str | None = Field(
        default=None,
        description="HTTP RPC endpoint for lookups (derived from rpc_url if unset)",
    )
    private_key: SecretStr = Field(description="Signing key for contract calls")

    # Notification contract
    tomb_contract: str = Field(description="Address of the emitCascade/claimYield contract")
    tomb_abi_path: Path | None = Field(
        default=None, description="Optional ABI JSON overriding the built-in ABI"
    )

    # Royalty tiers
    default_bps: int = Field(
        default=DEFAULT_ROYALTY_BPS, ge=0, le=MAX_BPS, description="Default royalty (bps)"
    )
    large_tx_bps: int = Field(
        default=LARGE_TX_ROYALTY_BPS, ge=0, le=MAX_BPS, description="Large-tx royalty (bps)"
    )
    tx_threshold: int = Field(
        default=DEFAULT_ROYALTY_THRESHOLD_WEI,
        ge=0,
        description="Value (wei) above which the large royalty tier applies",
    )

    # Filter
    min_eth_value: Decimal = Field(
        default=Decimal(DEFAULT_MIN_ETH_VALUE),
        ge=0,
        description="Minimum transaction value (ether)",
    )
    selectors: str = Field(
        default=",".join(DEFAULT_SELECTORS),
        description="Comma-separated 4-byte function selectors (hex)",
    )
    signal_field_set: Literal["standard", "extended"] = Field(
        default="standard",
        description="Transaction fields included in the signal identity",
    )

    # Dispatch
    gas_price_gwei: Decimal = Field(
        default=Decimal(DEFAULT_GAS_PRICE_GWEI),
        gt=0,
        description="Fixed gas price (gwei) for contract calls",
    )
    receipt_timeout_seconds: int = Field(
        default=DEFAULT_RECEIPT_TIMEOUT_SECONDS,
        ge=1,
        description="Seconds to wait for a contract call receipt",
    )
    max_in_flight: int | None = Field(
        default=DEFAULT_MAX_IN_FLIGHT,
        ge=1,
        description="Maximum concurrent transaction units (None = unbounded)",
    )

    @field_validator("target_pool1", "target_pool2", "tomb_contract")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate 0x-prefixed 20-byte hex address and lowercase it."""
        v = v.strip()
        if not v.startswith("0x") or not is_hex_address(v):
            raise ValueError(f"Invalid address: {v!r}")
        return v.lower()

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate websocket RPC URL format."""
        if not v.startswith(("ws://", "wss://")):
            raise ValueError("RPC URL must start with ws:// or wss://")
        return v

    @field_validator("http_rpc_url")
    @classmethod
    def validate_http_rpc_url(cls, v: str | None) -> str | None:
        """Validate HTTP RPC URL format."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("HTTP RPC URL must start with http:// or https://")
        return v

    @field_validator("selectors")
    @classmethod
    def validate_selectors(cls, v: str) -> str:
        """Normalize selectors to lowercase 8-char hex without 0x."""
        normalized = []
        for raw in v.split(","):
            selector = raw.strip().lower().removeprefix("0x")
            if not selector:
                continue
            if len(selector) != SELECTOR_HEX_LENGTH or any(
                c not in "0123456789abcdef" for c in selector
            ):
                raise ValueError(f"Invalid function selector: {raw.strip()!r}")
            normalized.append(selector)
        if not normalized:
            raise ValueError("At least one function selector is required")
        return ",".join(normalized)

    @property
    def selector_list(self) -> tuple[str, ...]:
        """Configured selectors as a tuple."""
        return tuple(self.selectors.split(","))

    @property
    def min_value_wei(self) -> int:
        """Minimum transaction value in wei."""
        return int(to_wei(self.min_eth_value, "ether"))

    @property
    def gas_price_wei(self) -> int:
        """Fixed gas price in wei."""
        return int(to_wei(self.gas_price_gwei, "gwei"))

    @property
    def lookup_rpc_url(self) -> str:
        """HTTP endpoint used for transaction lookups."""
        if self.http_rpc_url:
            return self.http_rpc_url
        if self.rpc_url.startswith("wss://"):
            return "https://" + self.rpc_url.removeprefix("wss://")
        return "http://" + self.rpc_url.removeprefix("ws://")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Values from env
