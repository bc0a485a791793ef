"""
HTTP clients for outbound faucet calls.

Each upstream kind ("rpc", "faucet_api", "relay") gets its own settings. A
strategy opens a client per call and closes it again; nothing is pooled
across requests and nothing is retried.
"""

import httpx
from typing import Any, Dict, Optional

from avi_faucet.infra.config.settings import Settings, get_settings

RPC_SERVICE = "rpc"
FAUCET_API_SERVICE = "faucet_api"
RELAY_SERVICE = "relay"


class HTTPClientConfig:
    """Client settings per upstream kind"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def get_timeout(self, service: str) -> Optional[float]:
        """
        Wall-clock timeout in seconds, or None to wait indefinitely.

        Only third-party faucet APIs are bounded. JSON-RPC nodes and the relay
        answer when they answer.
        """
        if service == FAUCET_API_SERVICE:
            return self.settings.FAUCET_API_TIMEOUT_SECONDS
        return None

    def get_headers(self, service: str) -> Dict[str, str]:
        headers = {
            "User-Agent": f"AviFaucet/{self.settings.APP_VERSION}",
            "Accept": "application/json",
        }
        if service == RPC_SERVICE:
            headers["Content-Type"] = "application/json"
        return headers

    def for_service(self, service: str) -> Dict[str, Any]:
        """Keyword arguments for httpx.AsyncClient (not the client itself)."""
        return {
            "timeout": self.get_timeout(service),
            "limits": httpx.Limits(
                max_connections=self.settings.HTTP_MAX_CONNECTIONS,
                max_keepalive_connections=self.settings.HTTP_MAX_KEEPALIVE_CONNECTIONS,
            ),
            "headers": self.get_headers(service),
            "follow_redirects": False,
        }


def create_temp_client(
    service: str = RPC_SERVICE,
    settings: Optional[Settings] = None,
    **kwargs
) -> httpx.AsyncClient:
    """
    Create a one-off client for an upstream kind.
    Use it as an async context manager so it is always closed.

    Tests pass ``transport=httpx.MockTransport(...)`` through ``kwargs``.
    """
    config = HTTPClientConfig(settings).for_service(service)
    config.update(kwargs)
    return httpx.AsyncClient(**config)
