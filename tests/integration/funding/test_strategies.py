"""
Tests for the HTTP-backed funding strategies: direct RPC, faucet APIs and the relay.
Every upstream is an httpx.MockTransport, no network access.
"""

import httpx
import pytest

from conftest import VALID_EVM_ADDRESS, VALID_SOLANA_ADDRESS, FakeUpstream, rpc_handler
from avi_faucet.core.http_client import (
    FAUCET_API_SERVICE,
    RELAY_SERVICE,
    RPC_SERVICE,
    HTTPClientConfig,
)
from avi_faucet.core.service.funding.funding_service import FundingService
from avi_faucet.core.service.funding.models import FundingMethod, FundingRequest
from avi_faucet.core.service.funding.strategies.faucet_api import (
    DevnetFaucetStrategy,
    FaucetApiStrategy,
    extract_message,
    extract_signature,
)
from avi_faucet.core.service.funding.strategies.relay import RelayStrategy
from avi_faucet.core.service.funding.strategies.rpc import RpcStrategy

RPC_URL = "https://rpc.test/solana"
FAUCET_URL = "https://faucet.test/api/request"
RELAY_URL = "https://relay.test/platform/v2"


def make_request(**overrides) -> FundingRequest:
    fields = {
        "address": VALID_SOLANA_ADDRESS,
        "network": "devnet",
        "amount": 1_000_000_000,
        "rpc_url": RPC_URL,
    }
    fields.update(overrides)
    return FundingRequest(**fields)


def split_handler(faucet_response, rpc_results):
    """Faucet URL answers with faucet_response; everything else is JSON-RPC."""
    rpc = rpc_handler(rpc_results)

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == FAUCET_URL:
            if isinstance(faucet_response, Exception):
                raise faucet_response
            return faucet_response
        return rpc(request)

    return handler


@pytest.mark.asyncio
class TestRpcStrategy:

    async def test_successful_airdrop_returns_signature(self):
        upstream = FakeUpstream(rpc_handler({"requestAirdrop": "5sigXYZ"}))
        strategy = RpcStrategy(upstream.factory)

        result = await strategy.fund(make_request())

        assert result.success is True
        assert result.signature == "5sigXYZ"
        assert result.source == FundingMethod.RPC

        body = upstream.json_bodies()[0]
        assert body["jsonrpc"] == "2.0"
        assert body["method"] == "requestAirdrop"
        assert body["params"] == [VALID_SOLANA_ADDRESS, 1_000_000_000]
        assert str(upstream.requests[0].url) == RPC_URL

    async def test_rpc_error_message_is_surfaced(self):
        def handler(request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": 1,
                "error": {"code": 429, "message": "airdrop request limit reached"},
            })

        strategy = RpcStrategy(FakeUpstream(handler).factory)
        result = await strategy.fund(make_request())

        assert result.success is False
        assert result.error == "RPC Error: airdrop request limit reached"
        assert result.signature is None

    async def test_missing_result_is_failure(self):
        strategy = RpcStrategy(FakeUpstream(rpc_handler({"requestAirdrop": None})).factory)
        result = await strategy.fund(make_request())
        assert result.success is False
        assert result.error == "No result from RPC"

    async def test_transport_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        result = await RpcStrategy(FakeUpstream(handler).factory).fund(make_request())
        assert result.success is False
        assert result.error == "Request failed: connection refused"

    async def test_non_json_body_is_parse_error(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, text="<html>maintenance</html>"))
        result = await RpcStrategy(upstream.factory).fund(make_request())

        assert result.success is False
        assert result.error.startswith("Parse error: ")

    async def test_missing_endpoint_is_failure(self):
        upstream = FakeUpstream(rpc_handler({}))
        result = await RpcStrategy(upstream.factory).fund(make_request(rpc_url=None))
        assert result.success is False
        assert upstream.requests == []


@pytest.mark.asyncio
class TestFaucetApiStrategy:

    async def test_success_extracts_signature(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={"signature": "faucetSig"}))
        strategy = FaucetApiStrategy(FAUCET_URL, upstream.factory)

        result = await strategy.fund(make_request(amount=500_000_000))

        assert result.success is True
        assert result.signature == "faucetSig"
        assert result.source == FundingMethod.FAUCET
        assert upstream.json_bodies()[0] == {
            "address": VALID_SOLANA_ADDRESS,
            "amount": "0.5",
            "network": "devnet",
        }

    async def test_error_status_surfaces_body_message(self):
        upstream = FakeUpstream(lambda r: httpx.Response(429, json={"error": "Too many requests"}))
        result = await FaucetApiStrategy(FAUCET_URL, upstream.factory).fund(make_request())
        assert result.success is False
        assert result.error == "Too many requests"

    async def test_error_status_without_json_body(self):
        upstream = FakeUpstream(lambda r: httpx.Response(502, text="bad gateway"))
        result = await FaucetApiStrategy(FAUCET_URL, upstream.factory).fund(make_request())
        assert result.success is False
        assert result.error == "Faucet API returned HTTP 502"

    async def test_timeout_is_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out")

        result = await FaucetApiStrategy(FAUCET_URL, FakeUpstream(handler).factory).fund(make_request())
        assert result.success is False
        assert result.source == FundingMethod.FAUCET


@pytest.mark.asyncio
class TestDevnetFaucetStrategy:

    async def test_faucet_success_does_not_touch_rpc(self):
        upstream = FakeUpstream(split_handler(httpx.Response(200, json={"txSignature": "devSig"}), {}))
        strategy = DevnetFaucetStrategy(FAUCET_URL, RpcStrategy(upstream.factory), upstream.factory)

        result = await strategy.fund(make_request())

        assert result.success is True
        assert result.signature == "devSig"
        assert result.source == FundingMethod.DEVNET
        assert len(upstream.requests) == 1

    @pytest.mark.parametrize("faucet_response", [
        httpx.Response(500, json={"error": "internal"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.ConnectError("unreachable"),
        httpx.ReadTimeout("timed out"),
    ])
    async def test_any_faucet_failure_falls_back_to_rpc(self, faucet_response):
        upstream = FakeUpstream(split_handler(faucet_response, {"requestAirdrop": "rpcSig"}))
        strategy = DevnetFaucetStrategy(FAUCET_URL, RpcStrategy(upstream.factory), upstream.factory)

        result = await strategy.fund(make_request())

        assert result.success is True
        assert result.signature == "rpcSig"
        assert result.source == FundingMethod.RPC
        assert [str(r.url) for r in upstream.requests] == [FAUCET_URL, RPC_URL]

    async def test_fallback_failure_is_reported(self):
        upstream = FakeUpstream(split_handler(httpx.Response(503), {}))
        strategy = DevnetFaucetStrategy(FAUCET_URL, RpcStrategy(upstream.factory), upstream.factory)

        result = await strategy.fund(make_request())

        assert result.success is False
        assert result.error == "RPC Error: Method not found"
        assert result.source == FundingMethod.RPC


@pytest.mark.asyncio
class TestRelayStrategy:

    def relay_request(self, **overrides) -> FundingRequest:
        fields = {
            "address": VALID_EVM_ADDRESS,
            "network": "base-sepolia",
            "token": "eth",
            "method": FundingMethod.RELAY,
        }
        fields.update(overrides)
        return FundingRequest(**fields)

    async def test_evm_request_shape(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={"transactionHash": "0xhash"}))
        strategy = RelayStrategy(RELAY_URL, "secret-key", upstream.factory)

        result = await strategy.fund(self.relay_request())

        assert result.success is True
        assert result.signature == "0xhash"
        request = upstream.requests[0]
        assert str(request.url) == f"{RELAY_URL}/evm/faucet"
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert upstream.json_bodies()[0] == {
            "address": VALID_EVM_ADDRESS,
            "token": "eth",
            "network": "base-sepolia",
        }

    async def test_solana_request_shape(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={"transactionSignature": "solSig"}))
        strategy = RelayStrategy(RELAY_URL, "secret-key", upstream.factory)

        result = await strategy.fund(
            self.relay_request(address=VALID_SOLANA_ADDRESS, network="solana-devnet", token="sol")
        )

        assert result.success is True
        assert result.signature == "solSig"
        assert str(upstream.requests[0].url) == f"{RELAY_URL}/solana/faucet"
        assert upstream.json_bodies()[0] == {"address": VALID_SOLANA_ADDRESS, "token": "sol"}

    async def test_missing_api_key_fails_without_call(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={}))
        result = await RelayStrategy(RELAY_URL, None, upstream.factory).fund(self.relay_request())

        assert result.success is False
        assert "CDP_API_KEY" in result.error
        assert upstream.requests == []

    async def test_unknown_token_fails_without_call(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={}))
        result = await RelayStrategy(RELAY_URL, "k", upstream.factory).fund(self.relay_request(token="doge"))

        assert result.success is False
        assert result.error == "Unsupported token 'doge' on base-sepolia"
        assert upstream.requests == []

    async def test_unknown_network_fails_without_call(self):
        upstream = FakeUpstream(lambda r: httpx.Response(200, json={}))
        result = await RelayStrategy(RELAY_URL, "k", upstream.factory).fund(self.relay_request(network="goerli"))

        assert result.success is False
        assert result.error == "Unsupported network: goerli"
        assert upstream.requests == []

    async def test_upstream_rejection(self):
        upstream = FakeUpstream(lambda r: httpx.Response(429, json={"errorMessage": "faucet limit exceeded"}))
        result = await RelayStrategy(RELAY_URL, "k", upstream.factory).fund(self.relay_request())

        assert result.success is False
        assert result.error == "faucet limit exceeded"


def test_extract_helpers():
    assert extract_message({"error": {"message": "nested"}}, "fallback") == "nested"
    assert extract_message("not a dict", "fallback") == "fallback"
    assert extract_signature({"tx_signature": "abc"}) == "abc"
    assert extract_signature({}) is None


def test_only_faucet_apis_have_a_timeout(settings):
    config = HTTPClientConfig(settings)

    assert config.get_timeout(FAUCET_API_SERVICE) == settings.FAUCET_API_TIMEOUT_SECONDS
    assert config.get_timeout(RPC_SERVICE) is None
    assert config.get_timeout(RELAY_SERVICE) is None


@pytest.mark.asyncio
async def test_service_clients_use_injected_settings(settings, executor):
    settings.FAUCET_API_TIMEOUT_SECONDS = 7.5
    settings.APP_VERSION = "9.9.9"
    service = FundingService(settings, executor)

    async with service.client_factory(FAUCET_API_SERVICE) as client:
        assert client.timeout.read == 7.5
        assert client.headers["User-Agent"] == "AviFaucet/9.9.9"

    async with service.client_factory(RPC_SERVICE) as client:
        assert client.timeout.read is None
