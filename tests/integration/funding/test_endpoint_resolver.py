"""Tests for RPC endpoint resolution."""

import pytest

from avi_faucet.core.exceptions.base import ConfigurationError, InvalidRequestError
from avi_faucet.core.service.funding.endpoints import (
    default_relay_token,
    redact_url,
    relay_token_config,
    resolve_helius_key,
    resolve_rpc_url,
)


class TestResolveRpcUrl:

    def test_network_table(self, settings):
        assert resolve_rpc_url("devnet", settings=settings) == "https://api.devnet.solana.com"
        assert resolve_rpc_url("testnet", settings=settings) == "https://api.testnet.solana.com"

    def test_override_takes_precedence_over_table(self, settings):
        url = resolve_rpc_url("testnet", rpc_override="http://localhost:8899", settings=settings)
        assert url == "http://localhost:8899"

    def test_helius_key_wins(self, settings):
        url = resolve_rpc_url("devnet", rpc_override="http://localhost:8899", helius_key="abc123", settings=settings)
        assert url == "https://devnet.helius-rpc.com/?api-key=abc123"

    def test_unknown_network_is_rejected(self, settings):
        with pytest.raises(InvalidRequestError, match="Unsupported network: mainnet"):
            resolve_rpc_url("mainnet", settings=settings)


class TestHeliusKey:

    def test_literal_key_is_returned(self, settings):
        assert resolve_helius_key("literal-key", settings) == "literal-key"

    def test_sentinel_reads_settings(self, settings):
        settings.HELIUS_API_KEY = "from-settings"
        assert resolve_helius_key("env", settings) == "from-settings"

    def test_sentinel_reads_environment(self, settings, monkeypatch):
        monkeypatch.setenv("HELIUS_API_KEY", "from-env")
        assert resolve_helius_key("env", settings) == "from-env"

    def test_sentinel_without_key_is_configuration_error(self, settings, monkeypatch):
        monkeypatch.delenv("HELIUS_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="HELIUS_API_KEY is not set"):
            resolve_helius_key("env", settings)


def test_redact_url_hides_api_key():
    assert redact_url("https://devnet.helius-rpc.com/?api-key=secret") == "https://devnet.helius-rpc.com/?api-key=***"
    assert redact_url("https://api.devnet.solana.com") == "https://api.devnet.solana.com"


def test_relay_tables():
    assert relay_token_config("base-sepolia", "usdc") == {"amount": "1", "daily_limit": "10"}
    assert relay_token_config("base-sepolia", "doge") is None
    assert relay_token_config("unknown", "eth") is None
    assert default_relay_token("solana-devnet") == "sol"
    assert default_relay_token("ethereum-sepolia") == "eth"
