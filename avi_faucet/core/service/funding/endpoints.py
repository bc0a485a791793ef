"""
Endpoint resolution for funding strategies.

Solana RPC endpoints are picked from a fixed table, an explicit override, or
the Helius RPC provider when a credential is supplied. The relay tables list
the networks and tokens the multi-chain relay accepts.
"""

import os
from typing import Dict, Optional

from avi_faucet.core.exceptions.base import ConfigurationError, InvalidRequestError
from avi_faucet.infra.config.settings import Settings, get_settings

SOLANA_NETWORKS: Dict[str, str] = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}

DEFAULT_NETWORK = "devnet"

# Passing this instead of a key reads HELIUS_API_KEY from the environment
HELIUS_ENV_SENTINEL = "env"

SOLANA_FAMILY = "solana"
EVM_FAMILY = "evm"

# network -> {family, tokens: {token: {amount, daily_limit}}}
RELAY_NETWORKS: Dict[str, Dict] = {
    "base-sepolia": {
        "family": EVM_FAMILY,
        "tokens": {
            "eth": {"amount": "0.0001", "daily_limit": "0.1"},
            "usdc": {"amount": "1", "daily_limit": "10"},
            "eurc": {"amount": "1", "daily_limit": "10"},
            "cbbtc": {"amount": "0.0001", "daily_limit": "0.001"},
        },
    },
    "ethereum-sepolia": {
        "family": EVM_FAMILY,
        "tokens": {
            "eth": {"amount": "0.0001", "daily_limit": "0.1"},
            "usdc": {"amount": "1", "daily_limit": "10"},
            "eurc": {"amount": "1", "daily_limit": "10"},
            "cbbtc": {"amount": "0.0001", "daily_limit": "0.001"},
        },
    },
    "ethereum-hoodi": {
        "family": EVM_FAMILY,
        "tokens": {
            "eth": {"amount": "0.0001", "daily_limit": "0.1"},
        },
    },
    "solana-devnet": {
        "family": SOLANA_FAMILY,
        "tokens": {
            "sol": {"amount": "0.00125", "daily_limit": "0.125"},
            "usdc": {"amount": "1", "daily_limit": "10"},
        },
    },
}

DEFAULT_RELAY_NETWORK = "base-sepolia"


def resolve_helius_key(value: str, settings: Optional[Settings] = None) -> str:
    """Return the Helius key, reading it from the environment for the sentinel."""
    if value != HELIUS_ENV_SENTINEL:
        return value

    settings = settings or get_settings()
    key = settings.HELIUS_API_KEY or os.getenv("HELIUS_API_KEY")
    if not key:
        raise ConfigurationError("HELIUS_API_KEY is not set")
    return key


def helius_rpc_url(api_key: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return f"{settings.HELIUS_RPC_URL}/?api-key={api_key}"


def resolve_rpc_url(
    network: str = DEFAULT_NETWORK,
    rpc_override: Optional[str] = None,
    helius_key: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Pick the JSON-RPC endpoint for a Solana network.

    Precedence: Helius credential, then explicit override, then the table.

    Raises:
        ConfigurationError: Helius sentinel given but no key configured
        InvalidRequestError: Unknown network and no override
    """
    if helius_key:
        return helius_rpc_url(resolve_helius_key(helius_key, settings), settings)

    if rpc_override:
        return rpc_override

    url = SOLANA_NETWORKS.get(network)
    if not url:
        raise InvalidRequestError(f"Unsupported network: {network}")
    return url


def redact_url(url: str) -> str:
    """Hide API keys carried in query strings before logging or printing."""
    if "api-key=" not in url:
        return url
    head, _, _ = url.partition("api-key=")
    return f"{head}api-key=***"


def relay_network_family(network: str) -> Optional[str]:
    config = RELAY_NETWORKS.get(network)
    return config["family"] if config else None


def relay_token_config(network: str, token: str) -> Optional[Dict[str, str]]:
    config = RELAY_NETWORKS.get(network)
    if not config:
        return None
    return config["tokens"].get(token)


def default_relay_token(network: str) -> str:
    return "sol" if relay_network_family(network) == SOLANA_FAMILY else "eth"
