"""
Shared fixtures: settings, fake upstreams and a fake process executor.
"""

import functools
import json
from typing import Callable, Dict, List, Optional, Sequence

import httpx
import pytest

from avi_faucet.core.http_client import create_temp_client
from avi_faucet.core.service.funding.executor import ExecutionResult, ExternalExecutor
from avi_faucet.infra.config.settings import Settings

VALID_SOLANA_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
VALID_EVM_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class FakeClock:
    """Manually advanced clock for rate-limit tests"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeUpstream:
    """
    Records every outbound HTTP request and answers with the handler.
    ``factory`` plugs into strategies in place of create_temp_client.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []
        self.factory = functools.partial(create_temp_client, transport=httpx.MockTransport(self._handle))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def json_bodies(self) -> List[Dict]:
        return [json.loads(r.content) for r in self.requests]


def rpc_handler(results: Dict[str, object]) -> Callable[[httpx.Request], httpx.Response]:
    """JSON-RPC responder keyed by method; unknown methods get a -32601 error."""

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        if method not in results:
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": payload["id"],
                "error": {"code": -32601, "message": "Method not found"},
            })
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": results[method]})

    return handler


class FakeExecutor(ExternalExecutor):
    """Executor double; never spawns a process"""

    def __init__(
        self,
        returncode: int = 0,
        executables: Sequence[str] = (),
        on_path: Optional[Dict[str, str]] = None,
        stderr: str = "",
    ):
        self.returncode = returncode
        self.executables = set(executables)
        self.on_path = on_path or {}
        self.stderr = stderr
        self.calls: List[Dict] = []

    def which(self, name: str) -> Optional[str]:
        return self.on_path.get(name)

    def is_executable(self, path: str) -> bool:
        return path in self.executables

    async def run(self, argv: Sequence[str], inherit_io: bool = False) -> ExecutionResult:
        self.calls.append({"argv": list(argv), "inherit_io": inherit_io})
        return ExecutionResult(returncode=self.returncode, stderr=self.stderr)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        RATE_LIMIT_SECS=60,
        AIRDROP_LAMPORTS=1_000_000_000,
        SOLANA_RPC_URL=None,
        HELIUS_API_KEY=None,
        CDP_API_KEY="cdp-test-key",
        FAUCET_MODE="solana",
        RATE_LIMIT_BACKEND="memory",
        POW_BINARY_PATHS=["./devnet-pow", "~/.cargo/bin/devnet-pow"],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()
