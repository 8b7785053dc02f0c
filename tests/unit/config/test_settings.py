"""Unit tests for application settings."""

from decimal import Decimal

import pytest
from pydantic import SecretStr, ValidationError

from cascadewatch.config.settings import Settings, get_settings
from cascadewatch.constants.signal import DEFAULT_SELECTORS
from tests.factories.transaction import POOL1, POOL2

REQUIRED = {
    "target_pool1": POOL1,
    "target_pool2": POOL2,
    "rpc_url": "wss://node.example/ws",
    "private_key": "0x" + "11" * 32,
    "tomb_contract": "0x3333333333333333333333333333333333333333",
}


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **{**REQUIRED, **overrides})  # type: ignore[call-arg]


class TestSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch) -> None:
        """Defaults match the documented configuration table."""
        for name in ("DEBUG", "LOG_LEVEL", "MIN_ETH_VALUE", "GAS_PRICE_GWEI", "MAX_IN_FLIGHT"):
            monkeypatch.delenv(name, raising=False)

        settings = make_settings()

        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.default_bps == 10
        assert settings.large_tx_bps == 7
        assert settings.tx_threshold == 10**18
        assert settings.min_eth_value == Decimal("5")
        assert settings.gas_price_gwei == Decimal("0.1")
        assert settings.signal_field_set == "standard"
        assert settings.selector_list == DEFAULT_SELECTORS
        assert settings.max_in_flight == 256
        assert settings.receipt_timeout_seconds == 120
        assert isinstance(settings.private_key, SecretStr)

    def test_private_key_not_in_repr(self) -> None:
        settings = make_settings()
        assert "11" * 32 not in repr(settings)


class TestDerivedValues:
    """Tests for derived properties."""

    def test_min_value_wei(self) -> None:
        assert make_settings(min_eth_value="5").min_value_wei == 5 * 10**18
        assert make_settings(min_eth_value="0.5").min_value_wei == 5 * 10**17

    def test_gas_price_wei(self) -> None:
        assert make_settings(gas_price_gwei="0.1").gas_price_wei == 100_000_000
        assert make_settings(gas_price_gwei="3").gas_price_wei == 3 * 10**9

    @pytest.mark.parametrize(
        ("rpc_url", "expected"),
        [
            ("wss://node.example/ws", "https://node.example/ws"),
            ("ws://localhost:8546", "http://localhost:8546"),
        ],
    )
    def test_lookup_url_derived_from_websocket(self, monkeypatch, rpc_url, expected) -> None:
        monkeypatch.delenv("HTTP_RPC_URL", raising=False)
        assert make_settings(rpc_url=rpc_url).lookup_rpc_url == expected

    def test_explicit_http_url_wins(self) -> None:
        settings = make_settings(http_rpc_url="https://archive.example")
        assert settings.lookup_rpc_url == "https://archive.example"


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_addresses_lowercased(self) -> None:
        settings = make_settings(target_pool1="0xABCDEF0123456789ABCDEF0123456789ABCDEF01")
        assert settings.target_pool1 == "0xabcdef0123456789abcdef0123456789abcdef01"

    @pytest.mark.parametrize(
        "address",
        ["1111111111111111111111111111111111111111", "0x1234", "0x" + "zz" * 20],
    )
    def test_invalid_address_rejected(self, address) -> None:
        with pytest.raises(ValidationError):
            make_settings(target_pool2=address)

    def test_rpc_url_must_be_websocket(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            make_settings(rpc_url="https://node.example")
        assert "ws://" in str(exc_info.value)

    def test_http_rpc_url_must_be_http(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(http_rpc_url="wss://node.example")

    def test_selectors_normalized(self) -> None:
        settings = make_settings(selectors=" 0xA9059CBB, 23b872dd ,")
        assert settings.selector_list == ("a9059cbb", "23b872dd")

    @pytest.mark.parametrize("selectors", ["", "a9059c", "a9059cbbxx", "zzzzzzzz"])
    def test_invalid_selectors_rejected(self, selectors) -> None:
        with pytest.raises(ValidationError):
            make_settings(selectors=selectors)

    def test_bps_bounded(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(default_bps=10_001)
        with pytest.raises(ValidationError):
            make_settings(large_tx_bps=-1)

    def test_gas_price_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(gas_price_gwei="0")

    def test_log_level_must_be_valid(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(log_level="TRACE")

    def test_signal_field_set_must_be_known(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(signal_field_set="everything")


class TestEnvironment:
    """Tests for reading the process environment."""

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DEFAULT_BPS", "25")
        monkeypatch.setenv("SIGNAL_FIELD_SET", "extended")

        settings = get_settings()

        assert settings.default_bps == 25
        assert settings.signal_field_set == "extended"

    def test_max_in_flight_none_disables_bound(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_IN_FLIGHT", "none")
        assert get_settings().max_in_flight is None

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
